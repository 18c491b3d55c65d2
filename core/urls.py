"""
URL configuration for core app API endpoints.

Maps URLs to view functions for winners, notifications and health.
"""

from django.urls import path

from core.api import health, notifications, winners

app_name = 'core'

urlpatterns = [
    path('health/', health.health_check, name='health'),

    # Winner endpoints
    path('winners/recompute/', winners.recompute_winners, name='recompute-winners'),
    path('winners/all/', winners.all_groups_winner, name='all-groups-winner'),
    path('groups/<int:group_id>/winners/', winners.group_winner_history, name='group-winner-history'),
    path('groups/<int:group_id>/winners/stats/', winners.group_winner_stats, name='group-winner-stats'),
    path('groups/<int:group_id>/winners/top/', winners.group_top_performers, name='group-top-performers'),

    # Notification endpoints
    path('notifications/', notifications.list_notifications, name='list-notifications'),
    path('notifications/preferences/', notifications.notification_preferences, name='notification-preferences'),
    path('notifications/push-token/', notifications.register_push_token, name='register-push-token'),
    path('notifications/<int:notification_id>/mark-read/', notifications.mark_notification_read, name='mark-notification-read'),
]
