"""
Engine configuration for the daily competition and notification throttling.

Caps, cooldown and the reference time zone are carried in an immutable
EngineConfig that is passed to the services that need it, so tests can
inject alternate values.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from django.conf import settings
from django.utils import timezone


@dataclass(frozen=True)
class EngineConfig:
    """Immutable engine settings."""

    default_daily_cap: int = 3
    comment_daily_cap: int = 5
    cooldown: timedelta = timedelta(minutes=90)
    rating_bundle_threshold: int = 3
    reference_timezone: str = "America/Vancouver"
    snippet_max_length: int = 40
    # Recompute endpoint credential, kept out of repr
    recompute_token: str = field(default="", repr=False)

    @classmethod
    def from_settings(cls) -> "EngineConfig":
        """
        Build config from the optional FITCHECK_ENGINE settings dict.

        Keys match the field names; ``cooldown_minutes`` is accepted in place
        of a timedelta.
        """
        overrides = dict(getattr(settings, "FITCHECK_ENGINE", {}) or {})

        cooldown_minutes = overrides.pop("cooldown_minutes", None)
        if cooldown_minutes is not None:
            overrides["cooldown"] = timedelta(minutes=cooldown_minutes)

        overrides.setdefault(
            "recompute_token", getattr(settings, "WINNER_RECOMPUTE_TOKEN", "")
        )
        overrides.setdefault(
            "reference_timezone", getattr(settings, "TIME_ZONE", cls.reference_timezone)
        )

        return cls(**overrides)

    def with_overrides(self, **changes) -> "EngineConfig":
        return replace(self, **changes)

    def daily_cap(self, category: str) -> int:
        """Comments have their own cap; every other category shares the default."""
        from core.models import NotificationCategory

        if category == NotificationCategory.COMMENT:
            return self.comment_daily_cap
        return self.default_daily_cap

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.reference_timezone)

    def local_date(self, when: Optional[datetime] = None) -> date:
        when = when or timezone.now()
        if timezone.is_naive(when):
            when = timezone.make_aware(when, self.tzinfo)
        return when.astimezone(self.tzinfo).date()

    def date_key(self, when: Optional[datetime] = None) -> str:
        """Calendar date of ``when`` in the reference zone, as YYYY-MM-DD."""
        return self.local_date(when).isoformat()

    def yesterday_key(self, now: Optional[datetime] = None) -> str:
        return (self.local_date(now) - timedelta(days=1)).isoformat()
