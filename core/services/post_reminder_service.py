"""
Afternoon post reminder.

Nudges every user who has not posted a fit today.
"""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional

from django.utils import timezone

from core.config import EngineConfig
from core.models import Fit, NotificationCategory, User
from core.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


@dataclass
class PostReminderSummary:
    date_key: str
    users_checked: int = 0
    already_posted: int = 0
    reminders_sent: int = 0
    failed: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


class PostReminderService:
    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        notifier: Optional[NotificationService] = None,
    ):
        self.config = config or EngineConfig.from_settings()
        self.notifier = notifier or NotificationService(self.config)

    def run(self, now: Optional[datetime] = None) -> PostReminderSummary:
        now = now or timezone.now()
        today = self.config.date_key(now)
        summary = PostReminderSummary(date_key=today)

        posted = set(
            Fit.objects.filter(date_key=today).values_list("owner_id", flat=True).distinct()
        )

        for user_id in User.objects.filter(is_active=True).order_by("id").values_list(
            "id", flat=True
        ):
            summary.users_checked += 1
            if user_id in posted:
                summary.already_posted += 1
                continue

            try:
                if self.notifier.dispatch(
                    user_id,
                    NotificationCategory.POST_REMINDER,
                    data={"date": today},
                    now=now,
                ):
                    summary.reminders_sent += 1
            except Exception as e:
                summary.failed += 1
                logger.exception(f"Error sending post reminder to user {user_id}: {e}")

        logger.info(
            f"Post reminders for {today}: {summary.reminders_sent} sent, "
            f"{summary.already_posted} already posted, {summary.failed} failed"
        )
        return summary
