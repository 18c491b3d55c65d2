"""
Notification throttling.

Decides whether a user may receive a push of a given category right now,
based on their delivery target, preferences, the daily cap and the
cooldown, and records sends against those limits.
"""

import logging
from datetime import datetime
from typing import Optional, Union

from django.db.models import F
from django.utils import timezone

from core.config import EngineConfig
from core.models import (
    PREFERENCE_KEYS,
    NotificationCooldown,
    NotificationCounter,
    NotificationPreference,
    User,
)

logger = logging.getLogger(__name__)


class GateState:
    """Derived per-user, per-category state for the current day."""

    ELIGIBLE = "eligible"
    COOLING_DOWN = "cooling_down"
    CAPPED = "capped"
    DISABLED = "disabled"
    UNREACHABLE = "unreachable"


class NotificationGate:
    """
    Cap, cooldown and preference checks for push notifications.

    Callers check with ``may_notify``, deliver, and only then call
    ``record_sent``. The two calls are not atomic together: two events for the
    same user and category arriving at once can both pass the check, which
    lets the cap be exceeded by a small margin. The counter itself is only
    ever changed with a single atomic increment.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig.from_settings()

    @staticmethod
    def _user_id(user: Union[User, int]) -> int:
        return user.pk if isinstance(user, User) else user

    def state(
        self, user: Union[User, int], category: str, now: Optional[datetime] = None
    ) -> str:
        """
        Work out where the user stands for this category.

        Checks run in order and stop at the first failure: delivery target,
        preference toggle, daily cap, cooldown.
        """
        now = now or timezone.now()
        user_id = self._user_id(user)

        push_token = (
            User.objects.filter(pk=user_id).values_list("push_token", flat=True).first()
        )
        if not push_token:
            return GateState.UNREACHABLE

        preference_key = PREFERENCE_KEYS.get(category)
        if preference_key and NotificationPreference.objects.filter(
            user_id=user_id, preference_key=preference_key, enabled=False
        ).exists():
            return GateState.DISABLED

        sent_today = (
            NotificationCounter.objects.filter(
                user_id=user_id, date_key=self.config.date_key(now), category=category
            )
            .values_list("count", flat=True)
            .first()
            or 0
        )
        if sent_today >= self.config.daily_cap(category):
            return GateState.CAPPED

        last_sent_at = (
            NotificationCooldown.objects.filter(user_id=user_id, category=category)
            .values_list("last_sent_at", flat=True)
            .first()
        )
        if last_sent_at and now - last_sent_at < self.config.cooldown:
            return GateState.COOLING_DOWN

        return GateState.ELIGIBLE

    def may_notify(
        self, user: Union[User, int], category: str, now: Optional[datetime] = None
    ) -> bool:
        """
        Whether a push of ``category`` may go to ``user`` at ``now``.

        A missing user or delivery target is a silent no, not an error.
        """
        state = self.state(user, category, now)
        if state != GateState.ELIGIBLE:
            logger.debug(f"Notification {category} for user {self._user_id(user)} blocked: {state}")
            return False
        return True

    def record_sent(
        self, user: Union[User, int], category: str, now: Optional[datetime] = None
    ) -> None:
        """
        Charge one send against today's cap and restart the cooldown.
        """
        now = now or timezone.now()
        user_id = self._user_id(user)

        counter, _ = NotificationCounter.objects.get_or_create(
            user_id=user_id,
            date_key=self.config.date_key(now),
            category=category,
            defaults={"count": 0},
        )
        NotificationCounter.objects.filter(pk=counter.pk).update(count=F("count") + 1)

        NotificationCooldown.objects.update_or_create(
            user_id=user_id, category=category, defaults={"last_sent_at": now}
        )
