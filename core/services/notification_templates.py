"""
Push notification copy.

Each category has a fixed set of title/body variants; one is picked at
random per send so repeated notifications do not read the same.
"""

import random
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from core.models import NotificationCategory

PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")

# (title, body) pairs per category
NOTIFICATION_VARIANTS: Dict[str, List[Tuple[str, str]]] = {
    NotificationCategory.POST_REMINDER: [
        ("You haven't dropped today", "Post your fit to see everyone else's."),
        ("Your crew's waiting", "Drop a fit to unlock today's leaderboard."),
        ("Don't get benched today", "One fit. One rating war. You in?"),
    ],
    NotificationCategory.FRIENDS_POSTED: [
        ("{{count}} friends just posted fits", "Rate them before the board locks."),
        ("New heat in {{groupName}}", "{{topUser}} and {{countMinus1}} others just dropped."),
        ("Your group is active rn", "Hop in, rate them, take the crown."),
    ],
    NotificationCategory.RATINGS_BUNDLED: [
        ("{{count}} new ratings on your fit", "Where do you sit on the board now?"),
        ("Your score just moved", "Tap to see who bumped (or tanked) you."),
        ("You're getting judged \U0001F440", "{{count}} friends rated your fit."),
    ],
    NotificationCategory.COMMENT: [
        ("New comment on your fit", '"{{snippet}}"'),
        ("{{username}} sounded off on your fit", '"{{snippet}}"'),
        ("Someone had thoughts…", "Tap to read the damage."),
    ],
    NotificationCategory.LEADERBOARD_WINNER: [
        ("You won {{groupName}} \U0001F451", "Defend it tomorrow. Reset just hit."),
        ("Top fit of the day = you", "Crowned in {{groupName}}. Leaderboard resets now."),
        ("You finished #1", "Hall of Flame updated. New day, new smoke."),
    ],
    NotificationCategory.LEADERBOARD_RECAP: [
        ("{{winnerName}} took the crown", "New day, fresh board. Post early."),
        ("Leaderboard reset", "Yesterday's winner: {{winnerName}}. You up next?"),
        ("New day, clean slate", "Yesterday's top: {{winnerName}}. Drop heat today."),
    ],
    NotificationCategory.NEW_MEMBER: [
        ("{{username}} joined {{groupName}}", "More eyes on your fits."),
        ("New member alert", "{{username}} just joined {{groupName}}."),
        ("Squad's growing", "{{username}} pulled up. Post something good."),
    ],
}


@dataclass(frozen=True)
class RenderedNotification:
    title: str
    body: str


def fill_placeholders(template: str, context: Mapping[str, Any]) -> str:
    """Replace ``{{key}}`` with ``context[key]``; unknown keys stay as written."""

    def substitute(match: "re.Match[str]") -> str:
        key = match.group(1)
        if key in context and context[key] is not None:
            return str(context[key])
        return match.group(0)

    return PLACEHOLDER.sub(substitute, template)


def truncate(text: str, max_length: int = 40) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


class NotificationTemplates:
    """
    Variant picker and renderer.

    Pass a seeded ``random.Random`` (or anything with ``choice``) to make the
    variant choice reproducible.
    """

    def __init__(
        self,
        variants: Optional[Dict[str, List[Tuple[str, str]]]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.variants = variants or NOTIFICATION_VARIANTS
        self.rng = rng or random.Random()

    def variants_for(self, category: str) -> List[Tuple[str, str]]:
        try:
            return self.variants[category]
        except KeyError:
            raise ValueError(f"Unknown notification category: {category}")

    def render(
        self, category: str, context: Optional[Mapping[str, Any]] = None
    ) -> RenderedNotification:
        title, body = self.rng.choice(self.variants_for(category))
        context = context or {}
        return RenderedNotification(
            title=fill_placeholders(title, context),
            body=fill_placeholders(body, context),
        )
