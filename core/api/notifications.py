"""
Notification API endpoints.

Handles the in-app notification inbox, preference toggles and the push
token the app registers for delivery.
"""

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from django.utils import timezone
from django.shortcuts import get_object_or_404
import logging

from core.models import PREFERENCE_TOGGLES, NotificationLog, NotificationPreference

logger = logging.getLogger(__name__)


class NotificationPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def list_notifications(request):
    """
    Get user's notifications.

    GET /api/notifications/?page=1&page_size=20&unread_only=false

    Response:
        {
            "count": 50,
            "next": "...",
            "previous": "...",
            "unread_count": 5,
            "notifications": [
                {
                    "id": 12,
                    "type": "comment",
                    "title": "New comment on your fit",
                    "body": "\"clean fit\"",
                    "data": {...},
                    "created_at": "2026-10-18T14:45:00Z",
                    "read": false
                }
            ]
        }
    """
    unread_only = request.query_params.get("unread_only", "false").lower() == "true"

    notifications = NotificationLog.objects.filter(user=request.user)
    if unread_only:
        notifications = notifications.filter(read=False)

    unread_count = NotificationLog.objects.filter(user=request.user, read=False).count()

    paginator = NotificationPagination()
    page = paginator.paginate_queryset(notifications, request)

    notifications_data = [
        {
            "id": notif.id,
            "type": notif.category,
            "title": notif.title,
            "body": notif.body,
            "data": notif.data,
            "created_at": notif.created_at.isoformat(),
            "read": notif.read,
        }
        for notif in page
    ]

    return paginator.get_paginated_response(
        {"unread_count": unread_count, "notifications": notifications_data}
    )


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def mark_notification_read(request, notification_id):
    """
    Mark a notification as read.

    POST /api/notifications/{notification_id}/mark-read/
    """
    notification = get_object_or_404(
        NotificationLog, id=notification_id, user=request.user
    )

    if not notification.read:
        notification.read = True
        notification.read_at = timezone.now()
        notification.save(update_fields=["read", "read_at"])

    return Response({"success": True}, status=status.HTTP_200_OK)


@api_view(["GET", "PATCH"])
@permission_classes([IsAuthenticated])
def notification_preferences(request):
    """
    Read or update notification toggles.

    GET /api/notifications/preferences/

    Response:
        {"preferences": {"commentNotifications": true, ...}}

    PATCH /api/notifications/preferences/

    Request:
        {"preferences": {"commentNotifications": false}}

    Response:
        {"success": true, "updated_count": 1, "preferences": {...}}
    """
    if request.method == "PATCH":
        updates = request.data.get("preferences", {})
        if not isinstance(updates, dict):
            return Response(
                {"error": "preferences must be an object"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        updated_count = 0
        for key, enabled in updates.items():
            if key not in PREFERENCE_TOGGLES or not isinstance(enabled, bool):
                continue
            NotificationPreference.objects.update_or_create(
                user=request.user, preference_key=key, defaults={"enabled": enabled}
            )
            updated_count += 1

        logger.info(f"User {request.user.id} updated {updated_count} notification toggles")

    stored = dict(
        NotificationPreference.objects.filter(user=request.user).values_list(
            "preference_key", "enabled"
        )
    )
    # Toggles without a row are on
    preferences = {key: stored.get(key, True) for key in PREFERENCE_TOGGLES}

    if request.method == "PATCH":
        return Response(
            {"success": True, "updated_count": updated_count, "preferences": preferences},
            status=status.HTTP_200_OK,
        )
    return Response({"preferences": preferences}, status=status.HTTP_200_OK)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def register_push_token(request):
    """
    Register or clear the device push token.

    POST /api/notifications/push-token/
    {
        "push_token": "token_from_the_app"   // null to stop pushes
    }
    """
    if "push_token" not in request.data:
        return Response(
            {"error": "push_token is required"}, status=status.HTTP_400_BAD_REQUEST
        )

    push_token = request.data.get("push_token") or None
    if push_token is not None and (not isinstance(push_token, str) or len(push_token) > 255):
        return Response(
            {"error": "push_token must be a string of at most 255 characters"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    request.user.push_token = push_token
    request.user.save(update_fields=["push_token"])

    return Response(
        {"success": True, "registered": push_token is not None},
        status=status.HTTP_200_OK,
    )
