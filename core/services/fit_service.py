"""
Fit write operations.

Creating fits, rating, commenting and joining groups go through here so
the denormalised aggregates stay consistent. The notification side effects
hang off the model signals in ``core.signals``.
"""

from datetime import datetime
from typing import Iterable, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from core.models import Comment, Fit, Group, GroupMembership, Rating, User


class FitService:
    """Fit, rating, comment and membership writes."""

    @staticmethod
    def create_fit(
        owner: User,
        groups: Iterable[Group],
        caption: str = "",
        tag: str = "",
        created_at: Optional[datetime] = None,
    ) -> Fit:
        """
        Post a fit to one or more groups.

        Adding the groups fires the friends-posted fan-out.
        """
        fit = Fit.objects.create(
            owner=owner,
            caption=caption,
            tag=tag,
            created_at=created_at or timezone.now(),
        )
        fit.groups.add(*groups)
        return fit

    @staticmethod
    @transaction.atomic
    def refresh_rating_aggregates(fit_id: int) -> Fit:
        """
        Recompute a fit's rating count, total and fair rating.

        Reads the ratings table under a row lock on the fit, so concurrent
        ratings cannot leave the aggregates behind.
        """
        fit = Fit.objects.select_for_update().get(pk=fit_id)
        aggregates = Rating.objects.filter(fit_id=fit_id).aggregate(
            count=Count("id"), total=Sum("value")
        )

        count = aggregates["count"] or 0
        total = aggregates["total"] or 0

        fit.rating_count = count
        fit.total_rating = total
        fit.fair_rating = round(total / count, 1) if count else 0.0
        fit.save(update_fields=["rating_count", "total_rating", "fair_rating"])
        return fit

    @staticmethod
    def rate(fit: Fit, rater: User, value: int) -> Rating:
        """
        Add or change a rater's score for a fit.

        Raises:
            ValidationError: If the value is outside 1-5
        """
        if not isinstance(value, int) or not 1 <= value <= 5:
            raise ValidationError("Rating must be a whole number from 1 to 5")

        rating, _ = Rating.objects.update_or_create(
            fit=fit, rater=rater, defaults={"value": value}
        )
        return rating

    @staticmethod
    def comment(fit: Fit, author: User, text: str) -> Comment:
        text = (text or "").strip()
        if not text:
            raise ValidationError("Comment cannot be empty")
        return Comment.objects.create(fit=fit, author=author, text=text)

    @staticmethod
    def join_group(group: Group, user: User) -> GroupMembership:
        membership, _ = GroupMembership.objects.get_or_create(group=group, user=user)
        return membership

    @staticmethod
    def leave_group(group: Group, user: User) -> bool:
        deleted = 0
        for membership in GroupMembership.objects.filter(group=group, user=user):
            membership.delete()
            deleted += 1
        return deleted > 0
