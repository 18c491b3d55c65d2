"""
Push notification dispatch.

Runs every notification through the same sequence: gate check, copy
render, gateway delivery, and, only once the gateway has accepted the
message, the cap/cooldown bookkeeping and the in-app log entry.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Union

from django.utils import timezone

from core.config import EngineConfig
from core.models import (
    Comment,
    Fit,
    Group,
    GroupMembership,
    NotificationCategory,
    NotificationLog,
    User,
)
from core.services.fcm_service import FCMService
from core.services.notification_gate import NotificationGate
from core.services.notification_templates import NotificationTemplates, truncate

logger = logging.getLogger(__name__)


class NotificationService:
    """Gate, render, deliver and record push notifications."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        gate: Optional[NotificationGate] = None,
        templates: Optional[NotificationTemplates] = None,
        delivery=None,
    ):
        self.config = config or EngineConfig.from_settings()
        self.gate = gate or NotificationGate(self.config)
        self.templates = templates or NotificationTemplates()
        self.delivery = delivery or FCMService

    def dispatch(
        self,
        user: Union[User, int],
        category: str,
        context: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Send one notification if the gate allows it.

        Args:
            user: Recipient (instance or id)
            category: NotificationCategory value
            context: Placeholder values for the copy
            data: Extra data payload for the app
            now: Decision time, defaults to the current time

        Returns:
            True if the gateway accepted the push
        """
        now = now or timezone.now()
        user_id = user.pk if isinstance(user, User) else user

        if not self.gate.may_notify(user_id, category, now):
            return False

        rendered = self.templates.render(category, context)
        push_token = (
            User.objects.filter(pk=user_id).values_list("push_token", flat=True).first()
        )
        if not push_token:
            return False

        payload = {"type": category, **(data or {}), **(context or {})}
        accepted = self.delivery.send_to_token(
            push_token, rendered.title, rendered.body, payload
        )
        if not accepted:
            # Not charged against the cap; no retry within this pass
            logger.warning(f"Push {category} to user {user_id} was not accepted")
            return False

        self.gate.record_sent(user_id, category, now)
        NotificationLog.objects.create(
            user_id=user_id,
            category=category,
            title=rendered.title,
            body=rendered.body,
            data=payload,
        )

        logger.info(f"Notification sent to user {user_id}: {category}")
        return True

    def notify_comment(self, comment: Comment, now: Optional[datetime] = None) -> bool:
        """Tell a fit's owner about a new comment, unless they wrote it."""
        fit = comment.fit
        if comment.author_id == fit.owner_id:
            return False

        context = {
            "snippet": truncate(comment.text, self.config.snippet_max_length),
            "username": comment.author.get_display_name(),
        }
        return self.dispatch(
            fit.owner_id,
            NotificationCategory.COMMENT,
            context,
            data={"fitId": fit.id, "commentId": comment.id},
            now=now,
        )

    def notify_friends_posted(
        self, fit: Fit, group: Group, now: Optional[datetime] = None
    ) -> int:
        """
        Fan a new fit out to the other members of a group.

        Returns:
            Number of members the push was delivered to
        """
        posted_today = Fit.objects.filter(groups=group, date_key=fit.date_key).count()
        context = {
            "groupName": group.name,
            "topUser": fit.owner.get_display_name(),
            "count": posted_today,
            "countMinus1": max(posted_today - 1, 0),
        }

        sent = 0
        for member_id in group.memberships.exclude(user_id=fit.owner_id).values_list(
            "user_id", flat=True
        ):
            try:
                if self.dispatch(
                    member_id,
                    NotificationCategory.FRIENDS_POSTED,
                    context,
                    data={"fitId": fit.id, "groupId": group.id},
                    now=now,
                ):
                    sent += 1
            except Exception as e:
                logger.exception(f"Error notifying user {member_id} about fit {fit.id}: {e}")

        return sent

    def notify_ratings_bundled(self, fit: Fit, now: Optional[datetime] = None) -> bool:
        """
        Tell the owner about new ratings once enough have piled up.

        The watermark moves forward after every attempt, so a blocked or
        failed push does not fire again on the very next rating.
        """
        new_ratings = fit.rating_count - fit.last_notified_rating_count
        if new_ratings < self.config.rating_bundle_threshold:
            return False

        sent = self.dispatch(
            fit.owner_id,
            NotificationCategory.RATINGS_BUNDLED,
            {"count": new_ratings},
            data={"fitId": fit.id},
            now=now,
        )

        Fit.objects.filter(pk=fit.pk).update(last_notified_rating_count=fit.rating_count)
        fit.last_notified_rating_count = fit.rating_count
        return sent

    def notify_new_member(
        self, membership: GroupMembership, now: Optional[datetime] = None
    ) -> int:
        """Tell existing members someone joined. Returns deliveries."""
        group = membership.group
        context = {
            "username": membership.user.get_display_name(),
            "groupName": group.name,
        }

        sent = 0
        for member_id in group.memberships.exclude(user_id=membership.user_id).values_list(
            "user_id", flat=True
        ):
            try:
                if self.dispatch(
                    member_id,
                    NotificationCategory.NEW_MEMBER,
                    context,
                    data={"groupId": group.id, "newMemberId": membership.user_id},
                    now=now,
                ):
                    sent += 1
            except Exception as e:
                logger.exception(
                    f"Error notifying user {member_id} about new member in group {group.id}: {e}"
                )

        return sent
