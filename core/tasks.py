"""
Celery tasks for scheduled jobs.

The daily reset and the afternoon post reminder run from Celery Beat (see
CELERY_BEAT_SCHEDULE); the winner recompute task is the on-demand variant
used for recovery after a missed schedule.
"""

import logging
from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def run_daily_reset():
    """
    Settle yesterday's competition and announce winners.

    Runs daily at 00:00 in the reference time zone.
    """
    from core.services.daily_reset_service import DailyResetService

    summary = DailyResetService().run()
    return summary.as_dict()


@shared_task
def send_post_reminders():
    """
    Remind users who haven't posted today.

    Runs daily at 14:00 in the reference time zone.
    """
    from core.services.post_reminder_service import PostReminderService

    summary = PostReminderService().run()
    return summary.as_dict()


@shared_task
def recompute_daily_winners(date_key: str = None):
    """
    Recompute and archive winners without notifying anyone.

    Args:
        date_key: Day to settle (YYYY-MM-DD); defaults to yesterday
    """
    from core.services.daily_reset_service import DailyResetService

    summary = DailyResetService().compute_winners(date_key=date_key)
    logger.info(
        f"Recomputed winners for {summary.date_key}: "
        f"{summary.winners_calculated}/{summary.groups_processed}"
    )
    return summary.as_dict()
