"""
Integration tests for the winner endpoints.

Covers:
- Manual recompute (method, bearer credential, date validation)
- Group winner history, stats and top performers
- Cross-group winner for a day
"""

import pytest
from unittest.mock import patch

from core.models import DailyWinner, GroupMembership
from tests.factories import DailyWinnerFactory, FitFactory, GroupFactory, UserFactory, local_time

RECOMPUTE_URL = "/api/winners/recompute/"


@pytest.mark.django_db
class TestRecomputeWinners:
    """Test the token-protected recompute endpoint."""

    def auth(self, token="test-recompute-token"):
        return {"HTTP_AUTHORIZATION": f"Bearer {token}"}

    def test_get_not_allowed(self, api_client):
        response = api_client.get(RECOMPUTE_URL, **self.auth())
        assert response.status_code == 405

    def test_missing_token_rejected(self, api_client):
        response = api_client.post(RECOMPUTE_URL, {}, format="json")
        assert response.status_code == 401

    def test_wrong_token_rejected(self, api_client):
        response = api_client.post(RECOMPUTE_URL, {}, format="json", **self.auth("nope"))
        assert response.status_code == 401

    def test_unconfigured_token_rejects_everything(self, api_client, settings):
        settings.WINNER_RECOMPUTE_TOKEN = ""
        response = api_client.post(RECOMPUTE_URL, {}, format="json", **self.auth(""))
        assert response.status_code == 401

    def test_recompute_for_date(self, api_client):
        owner = UserFactory()
        group = GroupFactory()
        GroupMembership.objects.create(group=group, user=owner)
        FitFactory(owner=owner, fair_rating=4.4, rating_count=2,
                   created_at=local_time(2026, 10, 12, 9), groups=[group])

        response = api_client.post(
            RECOMPUTE_URL, {"date_key": "2026-10-12"}, format="json", **self.auth()
        )

        assert response.status_code == 200
        assert response.data["success"] is True
        assert response.data["result"]["date_key"] == "2026-10-12"
        assert response.data["result"]["winners_calculated"] == 1
        assert DailyWinner.objects.filter(group=group, date_key="2026-10-12").exists()

    def test_defaults_to_yesterday(self, api_client):
        response = api_client.post(RECOMPUTE_URL, {}, format="json", **self.auth())

        assert response.status_code == 200
        assert response.data["result"]["groups_processed"] == 0

    def test_bad_date_key(self, api_client):
        response = api_client.post(
            RECOMPUTE_URL, {"date_key": "18/10/2026"}, format="json", **self.auth()
        )
        assert response.status_code == 400

    def test_unexpected_error_is_500(self, api_client):
        with patch(
            "core.api.winners.DailyResetService.compute_winners",
            side_effect=RuntimeError("store offline"),
        ):
            response = api_client.post(RECOMPUTE_URL, {}, format="json", **self.auth())

        assert response.status_code == 500
        assert response.data["success"] is False


@pytest.mark.django_db
class TestGroupWinnerEndpoints:
    """Test the member-only history endpoints."""

    @pytest.fixture
    def group(self, authenticated_client):
        group = GroupFactory(name="Crew")
        GroupMembership.objects.create(group=group, user=authenticated_client.user)
        return group

    def test_history(self, authenticated_client, group):
        DailyWinnerFactory(group=group, date_key="2026-01-01")
        DailyWinnerFactory(group=group, date_key="2026-01-02", winner_display_name="Zed")

        response = authenticated_client.get(f"/api/groups/{group.id}/winners/")

        assert response.status_code == 200
        winners = response.data["winners"]
        assert [w["date"] for w in winners] == ["2026-01-02", "2026-01-01"]
        assert winners[0]["winner"]["display_name"] == "Zed"
        assert winners[0]["group_name"] == "Crew"

    def test_history_bad_limit(self, authenticated_client, group):
        response = authenticated_client.get(f"/api/groups/{group.id}/winners/?limit=lots")
        assert response.status_code == 400

    @pytest.mark.parametrize("limit", ["-1", "0"])
    def test_history_limit_below_one(self, authenticated_client, group, limit):
        DailyWinnerFactory(group=group, date_key="2026-01-01")

        response = authenticated_client.get(f"/api/groups/{group.id}/winners/?limit={limit}")

        assert response.status_code == 400

    def test_history_negative_offset_starts_at_zero(self, authenticated_client, group):
        DailyWinnerFactory(group=group, date_key="2026-01-01")

        response = authenticated_client.get(f"/api/groups/{group.id}/winners/?offset=-5")

        assert response.status_code == 200
        assert len(response.data["winners"]) == 1

    def test_non_member_forbidden(self, authenticated_client):
        other = GroupFactory()
        response = authenticated_client.get(f"/api/groups/{other.id}/winners/")
        assert response.status_code == 403

    def test_unknown_group(self, authenticated_client):
        response = authenticated_client.get("/api/groups/999999/winners/")
        assert response.status_code == 404

    def test_requires_auth(self, api_client, group):
        response = api_client.get(f"/api/groups/{group.id}/winners/")
        assert response.status_code == 401

    def test_stats(self, authenticated_client, group):
        DailyWinnerFactory(group=group, date_key="2026-01-01",
                           winner_user=authenticated_client.user, winner_average_rating=4.5)

        response = authenticated_client.get(f"/api/groups/{group.id}/winners/stats/")

        assert response.status_code == 200
        assert response.data["total_days"] == 1
        assert response.data["user_wins"] == 1
        assert response.data["average_rating"] == 4.5

    def test_top_performers(self, authenticated_client, group):
        DailyWinnerFactory(group=group, date_key="2026-01-01", winner_user=authenticated_client.user)

        response = authenticated_client.get(f"/api/groups/{group.id}/winners/top/")

        assert response.status_code == 200
        assert response.data["performers"][0]["user_id"] == authenticated_client.user.id
        assert response.data["performers"][0]["wins"] == 1

    def test_all_groups_winner(self, authenticated_client, group):
        other = GroupFactory()
        GroupMembership.objects.create(group=other, user=authenticated_client.user)
        DailyWinnerFactory(group=group, date_key="2026-10-17", winner_average_rating=3.9)
        DailyWinnerFactory(group=other, date_key="2026-10-17", winner_average_rating=4.6)
        # Not a member, ignored
        DailyWinnerFactory(date_key="2026-10-17", winner_average_rating=5.0)

        response = authenticated_client.get("/api/winners/all/?date=2026-10-17")

        assert response.status_code == 200
        assert response.data["winner"]["group_id"] == other.id

    def test_all_groups_winner_empty(self, authenticated_client):
        response = authenticated_client.get("/api/winners/all/?date=2026-10-17")

        assert response.status_code == 200
        assert response.data["winner"] is None
