"""
Daily leaderboard reset.

At local midnight the previous day's competition is settled for every
group: the winner is computed and archived, then each member hears either
that they won or who did. One group or member failing never stops the pass.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import List, Optional

from django.utils import timezone

from core.config import EngineConfig
from core.models import DailyWinner, Fit, Group, NotificationCategory
from core.services.competition_service import CompetitionService
from core.services.notification_service import NotificationService
from core.services.winner_archive_service import WinnerArchiveService

logger = logging.getLogger(__name__)


@dataclass
class GroupResult:
    group_id: int
    group_name: str
    success: bool
    winner: Optional[str] = None
    winner_fit_id: Optional[int] = None
    rating: Optional[float] = None
    fits_considered: int = 0
    threshold: Optional[int] = None
    error: Optional[str] = None


@dataclass
class DailyResetSummary:
    date_key: str
    groups_processed: int = 0
    winners_calculated: int = 0
    groups_failed: int = 0
    notifications_sent: int = 0
    notifications_failed: int = 0
    results: List[GroupResult] = field(default_factory=list)

    def as_dict(self) -> dict:
        return asdict(self)


class DailyResetService:
    """Settle a day's competition for all groups and announce the results."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        notifier: Optional[NotificationService] = None,
    ):
        self.config = config or EngineConfig.from_settings()
        self.notifier = notifier or NotificationService(self.config)

    def compute_group_winner(
        self, group: Group, date_key: str, now: Optional[datetime] = None
    ) -> GroupResult:
        """
        Threshold, rank and archive one group's fits for one day.

        Exceptions propagate; ``compute_winners`` isolates them per group.
        """
        fits = list(
            Fit.objects.filter(groups=group, date_key=date_key).select_related("owner")
        )
        threshold = CompetitionService.rating_threshold(group.member_count)
        winner = CompetitionService.select_winner(fits, threshold)

        logger.info(
            f"Group {group.name} ({group.id}) on {date_key}: {len(fits)} fits, "
            f"threshold {threshold}, winner {winner.id if winner else None}"
        )

        WinnerArchiveService.archive(group, date_key, winner, now=now)

        return GroupResult(
            group_id=group.id,
            group_name=group.name,
            success=True,
            winner=winner.owner.get_display_name() if winner else None,
            winner_fit_id=winner.id if winner else None,
            rating=winner.fair_rating if winner else None,
            fits_considered=len(fits),
            threshold=threshold,
        )

    def compute_winners(
        self, date_key: Optional[str] = None, now: Optional[datetime] = None
    ) -> DailyResetSummary:
        """
        Compute and archive winners for every group, without notifying.

        Args:
            date_key: Day to settle, defaults to yesterday in the reference zone
            now: Computation time

        Returns:
            Summary with one result per group
        """
        now = now or timezone.now()
        date_key = date_key or self.config.yesterday_key(now)
        summary = DailyResetSummary(date_key=date_key)

        logger.info(f"Calculating daily winners for {date_key}")

        for group in Group.objects.order_by("id").iterator():
            summary.groups_processed += 1
            try:
                result = self.compute_group_winner(group, date_key, now=now)
            except Exception as e:
                logger.exception(f"Error processing group {group.name} ({group.id}): {e}")
                summary.groups_failed += 1
                summary.results.append(
                    GroupResult(
                        group_id=group.id,
                        group_name=group.name,
                        success=False,
                        error=str(e),
                    )
                )
                continue

            if result.winner_fit_id is not None:
                summary.winners_calculated += 1
            summary.results.append(result)

        logger.info(
            f"Daily winners for {date_key}: {summary.winners_calculated} winners, "
            f"{summary.groups_failed} failed of {summary.groups_processed} groups"
        )
        return summary

    def announce_group_winner(
        self, record: DailyWinner, now: Optional[datetime] = None
    ) -> tuple:
        """
        Notify every member of the record's group.

        Returns:
            (sent, failed) counts
        """
        group = record.group
        sent = failed = 0

        for member_id in group.memberships.values_list("user_id", flat=True):
            is_winner = member_id == record.winner_user_id
            if is_winner:
                category = NotificationCategory.LEADERBOARD_WINNER
                context = {"groupName": group.name}
            else:
                category = NotificationCategory.LEADERBOARD_RECAP
                context = {"winnerName": record.winner_display_name}

            try:
                if self.notifier.dispatch(
                    member_id,
                    category,
                    context,
                    data={"groupId": group.id, "date": record.date_key},
                    now=now,
                ):
                    sent += 1
            except Exception as e:
                failed += 1
                logger.exception(
                    f"Error sending {category} to user {member_id} for group {group.id}: {e}"
                )

        return sent, failed

    def run(self, now: Optional[datetime] = None) -> DailyResetSummary:
        """
        Full midnight pass: settle yesterday, then notify members.

        A group's winner is archived before any of its members is notified.
        """
        now = now or timezone.now()
        summary = self.compute_winners(now=now)

        for result in summary.results:
            if not result.success or result.winner_fit_id is None:
                continue

            record = (
                DailyWinner.objects.filter(group_id=result.group_id, date_key=summary.date_key)
                .select_related("group")
                .first()
            )
            if record is None:
                logger.warning(
                    f"Winner record for group {result.group_id} on {summary.date_key} missing"
                )
                continue

            try:
                sent, failed = self.announce_group_winner(record, now=now)
            except Exception as e:
                logger.exception(f"Error announcing winner for group {result.group_id}: {e}")
                continue

            summary.notifications_sent += sent
            summary.notifications_failed += failed

        logger.info(
            f"Daily reset for {summary.date_key} complete: "
            f"{summary.notifications_sent} notifications sent"
        )
        return summary
