"""
Daily competition rules.

Works out how many ratings a fit needs to be considered for the day's crown
and ranks the eligible fits to pick the winner.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from core.models import Fit


class CompetitionService:
    """Eligibility threshold and winner selection for one group and day."""

    # (max group size, ratings required); larger groups need 4
    THRESHOLD_STEPS = ((3, 1), (6, 2), (10, 3))
    LARGE_GROUP_THRESHOLD = 4

    @staticmethod
    def rating_threshold(member_count: int) -> int:
        """
        Minimum rating count a fit needs to be eligible.

        Args:
            member_count: Number of members in the group. Values below 1 are
                treated as 1.

        Returns:
            1 for up to 3 members, 2 up to 6, 3 up to 10, otherwise 4.
        """
        size = max(member_count or 0, 1)
        for max_size, required in CompetitionService.THRESHOLD_STEPS:
            if size <= max_size:
                return required
        return CompetitionService.LARGE_GROUP_THRESHOLD

    @staticmethod
    def ranking_key(fit: Fit) -> Tuple:
        """
        Sort key putting the strongest fit first.

        Higher fair rating wins; ties go to more ratings, then to the earlier
        post. Fits without a creation time sort after those with one, and the
        primary key settles anything left so the order is total.
        """
        created_at: Optional[datetime] = getattr(fit, "created_at", None)
        return (
            -(fit.fair_rating or 0.0),
            -(fit.rating_count or 0),
            created_at is None,
            created_at.timestamp() if created_at is not None else 0.0,
            fit.pk if fit.pk is not None else 0,
        )

    @staticmethod
    def eligible_fits(fits: Iterable[Fit], threshold: int) -> List[Fit]:
        return [fit for fit in fits if (fit.rating_count or 0) >= threshold]

    @staticmethod
    def rank(fits: Iterable[Fit]) -> List[Fit]:
        return sorted(fits, key=CompetitionService.ranking_key)

    @staticmethod
    def select_winner(fits: Iterable[Fit], threshold: int) -> Optional[Fit]:
        """
        Pick the day's winner.

        Args:
            fits: Candidate fits for one group and day, in any order
            threshold: Minimum rating count for eligibility

        Returns:
            The top-ranked eligible fit, or None when nothing qualifies
        """
        eligible = CompetitionService.eligible_fits(fits, threshold)
        if not eligible:
            return None
        return CompetitionService.rank(eligible)[0]
