"""
Django signals for write-triggered notifications.

New comments, ratings, fits shared to groups and new group members each
fire their notification synchronously. Errors are logged and never break
the write that triggered them.
"""

import logging
from django.db.models.signals import m2m_changed, post_delete, post_save
from django.dispatch import receiver

from core.models import Comment, Fit, Group, GroupMembership, Rating
from core.services.fit_service import FitService
from core.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Rating)
def on_rating_saved(sender, instance, created, **kwargs):
    """
    Keep the fit's aggregates current and bundle rating notifications.

    Triggers:
    - When a rating is created or changed
    - Notifies the owner once enough new ratings have built up
    """
    try:
        fit = FitService.refresh_rating_aggregates(instance.fit_id)
        if created:
            NotificationService().notify_ratings_bundled(fit)
    except Exception as e:
        logger.exception(f"Error processing rating {instance.id} on fit {instance.fit_id}: {e}")


@receiver(post_delete, sender=Rating)
def on_rating_deleted(sender, instance, **kwargs):
    try:
        FitService.refresh_rating_aggregates(instance.fit_id)
    except Fit.DoesNotExist:
        pass  # fit deleted along with its ratings
    except Exception as e:
        logger.exception(f"Error refreshing aggregates for fit {instance.fit_id}: {e}")


@receiver(post_save, sender=Comment)
def on_comment_created(sender, instance, created, **kwargs):
    """Immediate push to the fit owner."""
    if not created:
        return  # edits don't notify

    try:
        NotificationService().notify_comment(instance)
    except Exception as e:
        logger.exception(f"Error sending comment notification for comment {instance.id}: {e}")


@receiver(m2m_changed, sender=Fit.groups.through)
def on_fit_shared(sender, instance, action, reverse, pk_set, **kwargs):
    """
    Fan a fit out to the members of each group it was just added to.

    Handles both ``fit.groups.add(group)`` and ``group.fits.add(fit)``.
    """
    if action != "post_add" or not pk_set:
        return

    if reverse:
        pairs = [(fit, instance) for fit in Fit.objects.filter(pk__in=pk_set)]
    else:
        pairs = [(instance, group) for group in Group.objects.filter(pk__in=pk_set)]

    service = NotificationService()
    for fit, group in pairs:
        try:
            sent = service.notify_friends_posted(fit, group)
            logger.info(f"Fit {fit.id} shared to group {group.id}, {sent} members notified")
        except Exception as e:
            logger.exception(f"Error fanning out fit {fit.id} to group {group.id}: {e}")


@receiver(post_save, sender=GroupMembership)
def on_member_joined(sender, instance, created, **kwargs):
    if not created:
        return

    try:
        instance.group.refresh_member_count()
        NotificationService().notify_new_member(instance)
    except Exception as e:
        logger.exception(
            f"Error handling new member {instance.user_id} in group {instance.group_id}: {e}"
        )


@receiver(post_delete, sender=GroupMembership)
def on_member_left(sender, instance, **kwargs):
    try:
        instance.group.refresh_member_count()
    except Group.DoesNotExist:
        pass
    except Exception as e:
        logger.exception(f"Error refreshing member count for group {instance.group_id}: {e}")


@receiver(m2m_changed, sender=Group.members.through)
def on_members_changed(sender, instance, action, reverse, pk_set, **kwargs):
    """
    Keep member_count and the new-member fan-out in step with M2M writes.

    ``group.members.add(user)`` and ``user.fit_groups.add(group)`` bulk-create
    memberships without ``post_save``, so both directions are handled here.
    """
    if action == "pre_clear" and reverse:
        # Groups are gone from the relation by post_clear
        instance._cleared_group_ids = list(instance.fit_groups.values_list("id", flat=True))
        return

    if action not in ("post_add", "post_remove", "post_clear"):
        return

    if reverse:
        if action == "post_clear":
            group_ids = getattr(instance, "_cleared_group_ids", [])
        else:
            group_ids = pk_set or []
        groups = list(Group.objects.filter(pk__in=group_ids))
    else:
        groups = [instance]

    for group in groups:
        try:
            group.refresh_member_count()
        except Exception as e:
            logger.exception(f"Error refreshing member count for group {group.id}: {e}")

    if action != "post_add" or not pk_set:
        return

    if reverse:
        memberships = GroupMembership.objects.filter(user=instance, group_id__in=pk_set)
    else:
        memberships = GroupMembership.objects.filter(group=instance, user_id__in=pk_set)

    service = NotificationService()
    for membership in memberships.select_related("group", "user"):
        try:
            service.notify_new_member(membership)
        except Exception as e:
            logger.exception(
                f"Error handling new member {membership.user_id} in group {membership.group_id}: {e}"
            )
