"""
Daily winner API endpoints.

Winner history for group members, and the token-protected manual
recompute used when the midnight job was missed.
"""

import logging
import secrets
from datetime import date

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from core.config import EngineConfig
from core.models import DailyWinner, Group
from core.services.daily_reset_service import DailyResetService
from core.services.winner_archive_service import WinnerArchiveService

logger = logging.getLogger(__name__)


def serialize_winner(record: DailyWinner) -> dict:
    return {
        "group_id": record.group_id,
        "group_name": record.group_name,
        "date": record.date_key,
        "winner": {
            "fit_id": record.winner_fit_id,
            "user_id": record.winner_user_id,
            "display_name": record.winner_display_name,
            "average_rating": record.winner_average_rating,
            "rating_count": record.winner_rating_count,
            "caption": record.caption,
            "tag": record.tag,
            "created_at": (
                record.winner_created_at.isoformat() if record.winner_created_at else None
            ),
        },
        "computed_at": record.computed_at.isoformat(),
    }


def _bearer_token(request) -> str:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return ""
    return header[len("Bearer ") :].strip()


def _member_group_or_403(request, group_id):
    group = get_object_or_404(Group, id=group_id)
    if not group.memberships.filter(user=request.user).exists():
        return group, Response(
            {"error": "You are not a member of this group"},
            status=status.HTTP_403_FORBIDDEN,
        )
    return group, None


@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
def recompute_winners(request):
    """
    Re-run the daily winner computation on demand.

    POST /api/winners/recompute/
    Authorization: Bearer <WINNER_RECOMPUTE_TOKEN>

    Request (optional):
        {"date_key": "2026-10-18"}

    Response:
        {
            "success": true,
            "result": {
                "date_key": "2026-10-18",
                "groups_processed": 12,
                "winners_calculated": 9,
                "groups_failed": 0,
                "results": [...]
            }
        }
    """
    config = EngineConfig.from_settings()
    provided = _bearer_token(request)

    if not config.recompute_token:
        logger.warning("Winner recompute requested but WINNER_RECOMPUTE_TOKEN is not set")
        return Response("Unauthorized", status=status.HTTP_401_UNAUTHORIZED)

    if not provided or not secrets.compare_digest(provided, config.recompute_token):
        return Response("Unauthorized", status=status.HTTP_401_UNAUTHORIZED)

    date_key = request.data.get("date_key") if hasattr(request.data, "get") else None
    if date_key:
        try:
            date.fromisoformat(date_key)
        except (TypeError, ValueError):
            return Response(
                {"success": False, "error": "date_key must be YYYY-MM-DD"},
                status=status.HTTP_400_BAD_REQUEST,
            )

    try:
        summary = DailyResetService(config).compute_winners(date_key=date_key)
    except Exception as e:
        logger.exception(f"Error in manual winner recompute: {e}")
        return Response(
            {"success": False, "error": str(e)},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return Response({"success": True, "result": summary.as_dict()}, status=status.HTTP_200_OK)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def group_winner_history(request, group_id):
    """
    Archived winners of a group before today, newest first.

    GET /api/groups/{group_id}/winners/?limit=50&offset=0
    """
    group, denied = _member_group_or_403(request, group_id)
    if denied:
        return denied

    try:
        limit = min(int(request.query_params.get("limit", 50)), 100)
        offset = max(int(request.query_params.get("offset", 0)), 0)
    except ValueError:
        return Response(
            {"error": "limit and offset must be integers"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    if limit < 1:
        return Response(
            {"error": "limit must be at least 1"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    winners = WinnerArchiveService.history(group, limit=limit, offset=offset)
    return Response(
        {"winners": [serialize_winner(record) for record in winners]},
        status=status.HTTP_200_OK,
    )


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def group_winner_stats(request, group_id):
    """GET /api/groups/{group_id}/winners/stats/"""
    group, denied = _member_group_or_403(request, group_id)
    if denied:
        return denied

    return Response(WinnerArchiveService.stats(group, request.user), status=status.HTTP_200_OK)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def group_top_performers(request, group_id):
    """GET /api/groups/{group_id}/winners/top/"""
    group, denied = _member_group_or_403(request, group_id)
    if denied:
        return denied

    return Response(
        {"performers": WinnerArchiveService.top_performers(group)},
        status=status.HTTP_200_OK,
    )


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def all_groups_winner(request):
    """
    Best winner across all of the caller's groups for one day.

    GET /api/winners/all/?date=2026-10-18 (defaults to yesterday)
    """
    config = EngineConfig.from_settings()
    date_key = request.query_params.get("date") or config.yesterday_key()

    record = WinnerArchiveService.all_groups_winner(
        Group.objects.filter(memberships__user=request.user), date_key
    )
    return Response(
        {"date": date_key, "winner": serialize_winner(record) if record else None},
        status=status.HTTP_200_OK,
    )
