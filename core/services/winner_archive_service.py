"""
Daily winner archive.

Persists one winner snapshot per group per day and answers the history
queries behind the Hall of Flame screens.
"""

import logging
from collections import Counter
from datetime import datetime
from typing import Iterable, List, Optional

from django.utils import timezone

from core.config import EngineConfig
from core.models import DailyWinner, Fit, Group, User

logger = logging.getLogger(__name__)


class WinnerArchiveService:
    """Write and read archived daily winners."""

    @staticmethod
    def archive(
        group: Group,
        date_key: str,
        winner: Optional[Fit],
        now: Optional[datetime] = None,
    ) -> Optional[DailyWinner]:
        """
        Upsert the winner record for a group and day.

        No record is written when there is no winner; an absent record means
        the day had no winner. Re-running with the same fit leaves a single
        row with the same business fields, only ``computed_at`` moves.

        Args:
            group: Group the competition ran in
            date_key: Day being archived (YYYY-MM-DD, reference zone)
            winner: Winning fit, or None
            now: Computation time, defaults to the current time

        Returns:
            The stored DailyWinner, or None when nothing was written
        """
        if winner is None:
            logger.info(f"No winner for group {group.id} on {date_key}, nothing archived")
            return None

        owner = winner.owner
        record, created = DailyWinner.objects.update_or_create(
            group=group,
            date_key=date_key,
            defaults={
                "group_name": group.name,
                "winner_fit": winner,
                "winner_user": owner,
                "winner_display_name": owner.get_display_name(),
                "winner_average_rating": winner.fair_rating or 0.0,
                "winner_rating_count": winner.rating_count or 0,
                "winner_created_at": winner.created_at,
                "caption": winner.caption,
                "tag": winner.tag,
                "computed_at": now or timezone.now(),
            },
        )

        logger.info(
            f"{'Archived' if created else 'Re-archived'} winner for group {group.id} "
            f"on {date_key}: {record.winner_display_name} ({record.winner_average_rating})"
        )
        return record

    @staticmethod
    def get_winner(group: Group, date_key: str) -> Optional[DailyWinner]:
        return DailyWinner.objects.filter(group=group, date_key=date_key).first()

    @staticmethod
    def history(
        group: Group,
        limit: int = 50,
        offset: int = 0,
        before: Optional[str] = None,
        config: Optional[EngineConfig] = None,
    ) -> List[DailyWinner]:
        """
        Archived winners before ``before`` (default: today), newest first.
        """
        config = config or EngineConfig.from_settings()
        before = before or config.date_key()

        queryset = DailyWinner.objects.filter(group=group, date_key__lt=before).order_by(
            "-date_key"
        )
        offset = max(offset, 0)
        if limit < 1:
            return []
        return list(queryset[offset : offset + limit])

    @staticmethod
    def stats(
        group: Group, user: Optional[User] = None, config: Optional[EngineConfig] = None
    ) -> dict:
        """
        Summary of a group's past winners.

        Returns:
            Dict with total_days, unique_winners, average_rating (one decimal)
            and the given user's win count
        """
        config = config or EngineConfig.from_settings()
        winners = list(
            DailyWinner.objects.filter(group=group, date_key__lt=config.date_key())
        )

        total = len(winners)
        average = (
            sum(w.winner_average_rating or 0 for w in winners) / total if total else 0
        )

        return {
            "total_days": total,
            "unique_winners": len({w.winner_user_id for w in winners}),
            "average_rating": round(average, 1),
            "user_wins": (
                sum(1 for w in winners if user and w.winner_user_id == user.id)
            ),
        }

    @staticmethod
    def top_performers(
        group: Group, limit: int = 5, config: Optional[EngineConfig] = None
    ) -> List[dict]:
        """Members with the most past wins in a group, most wins first."""
        config = config or EngineConfig.from_settings()
        winners = DailyWinner.objects.filter(
            group=group, date_key__lt=config.date_key(), winner_user__isnull=False
        ).order_by("-date_key")

        wins = Counter()
        names = {}
        for record in winners:
            wins[record.winner_user_id] += 1
            names.setdefault(record.winner_user_id, record.winner_display_name)

        return [
            {"user_id": user_id, "display_name": names[user_id], "wins": count}
            for user_id, count in sorted(wins.items(), key=lambda item: (-item[1], item[0]))[
                :limit
            ]
        ]

    @staticmethod
    def all_groups_winner(groups: Iterable[Group], date_key: str) -> Optional[DailyWinner]:
        """
        Best of several groups' winners for one day.

        A read-side fold over the archived records, ranked by the same rules
        as a single group's competition.
        """
        records = DailyWinner.objects.filter(group__in=list(groups), date_key=date_key)

        def ranking(record: DailyWinner):
            created_at = record.winner_created_at
            return (
                -(record.winner_average_rating or 0.0),
                -(record.winner_rating_count or 0),
                created_at is None,
                created_at.timestamp() if created_at else 0.0,
                record.group_id,
            )

        ranked = sorted(records, key=ranking)
        return ranked[0] if ranked else None
