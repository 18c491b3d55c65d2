"""Tests for the daily winner archive."""

import pytest

from core.config import EngineConfig
from core.models import DailyWinner
from core.services.winner_archive_service import WinnerArchiveService
from tests.factories import (
    DailyWinnerFactory,
    FitFactory,
    GroupFactory,
    UserFactory,
    local_time,
)


@pytest.mark.django_db
class TestArchive:
    """Test writing winner records."""

    def test_no_winner_writes_nothing(self):
        group = GroupFactory()

        assert WinnerArchiveService.archive(group, "2026-10-17", None) is None
        assert not DailyWinner.objects.filter(group=group).exists()

    def test_archive_snapshots_winner(self):
        group = GroupFactory(name="Drip Council")
        owner = UserFactory(display_name="Maya")
        fit = FitFactory(
            owner=owner,
            fair_rating=4.3,
            rating_count=6,
            caption="monochrome",
            tag="minimal",
            created_at=local_time(2026, 10, 17, 8),
        )

        record = WinnerArchiveService.archive(
            group, "2026-10-17", fit, now=local_time(2026, 10, 18, 0, 1)
        )

        assert record.group_name == "Drip Council"
        assert record.winner_fit == fit
        assert record.winner_user == owner
        assert record.winner_display_name == "Maya"
        assert record.winner_average_rating == 4.3
        assert record.winner_rating_count == 6
        assert record.caption == "monochrome"
        assert record.tag == "minimal"

    def test_archive_twice_is_idempotent(self):
        group = GroupFactory()
        fit = FitFactory(fair_rating=4.0, rating_count=3)

        first = WinnerArchiveService.archive(
            group, "2026-10-17", fit, now=local_time(2026, 10, 18, 0, 1)
        )
        second = WinnerArchiveService.archive(
            group, "2026-10-17", fit, now=local_time(2026, 10, 18, 3, 0)
        )

        assert DailyWinner.objects.filter(group=group, date_key="2026-10-17").count() == 1
        assert first.pk == second.pk
        business_fields = [
            "group_name",
            "winner_fit_id",
            "winner_user_id",
            "winner_display_name",
            "winner_average_rating",
            "winner_rating_count",
            "winner_created_at",
            "caption",
            "tag",
        ]
        for name in business_fields:
            assert getattr(first, name) == getattr(second, name)
        assert second.computed_at > first.computed_at

    def test_recompute_replaces_winner(self):
        group = GroupFactory()
        old = FitFactory(fair_rating=3.0, rating_count=2)
        new = FitFactory(fair_rating=4.8, rating_count=4)

        WinnerArchiveService.archive(group, "2026-10-17", old)
        WinnerArchiveService.archive(group, "2026-10-17", new)

        record = WinnerArchiveService.get_winner(group, "2026-10-17")
        assert record.winner_fit == new
        assert DailyWinner.objects.filter(group=group).count() == 1

    def test_snapshot_survives_fit_edit(self):
        group = GroupFactory()
        fit = FitFactory(fair_rating=4.0, rating_count=3, caption="before")
        WinnerArchiveService.archive(group, "2026-10-17", fit)

        fit.caption = "after"
        fit.save()

        assert WinnerArchiveService.get_winner(group, "2026-10-17").caption == "before"


@pytest.mark.django_db
class TestHistoryQueries:
    """Test history, stats and top performers."""

    @pytest.fixture
    def config(self):
        return EngineConfig()

    def test_history_newest_first_and_excludes_today(self, config):
        group = GroupFactory()
        today = config.date_key()
        for date_key in ["2026-01-01", "2026-01-03", "2026-01-02", today]:
            DailyWinnerFactory(group=group, date_key=date_key)

        history = WinnerArchiveService.history(group, config=config)

        assert [r.date_key for r in history] == ["2026-01-03", "2026-01-02", "2026-01-01"]

    def test_history_pagination(self, config):
        group = GroupFactory()
        for day in range(1, 6):
            DailyWinnerFactory(group=group, date_key=f"2026-01-0{day}")

        page = WinnerArchiveService.history(group, limit=2, offset=1, config=config)

        assert [r.date_key for r in page] == ["2026-01-04", "2026-01-03"]

    def test_history_non_positive_limit_is_empty(self, config):
        group = GroupFactory()
        DailyWinnerFactory(group=group, date_key="2026-01-01")

        assert WinnerArchiveService.history(group, limit=-1, config=config) == []
        assert WinnerArchiveService.history(group, limit=0, config=config) == []

    def test_stats(self, config):
        group = GroupFactory()
        alice = UserFactory()
        bob = UserFactory()
        DailyWinnerFactory(group=group, date_key="2026-01-01", winner_user=alice, winner_average_rating=4.0)
        DailyWinnerFactory(group=group, date_key="2026-01-02", winner_user=alice, winner_average_rating=5.0)
        DailyWinnerFactory(group=group, date_key="2026-01-03", winner_user=bob, winner_average_rating=3.0)

        stats = WinnerArchiveService.stats(group, alice, config=config)

        assert stats == {
            "total_days": 3,
            "unique_winners": 2,
            "average_rating": 4.0,
            "user_wins": 2,
        }

    def test_stats_empty_group(self, config):
        stats = WinnerArchiveService.stats(GroupFactory(), config=config)
        assert stats["total_days"] == 0
        assert stats["average_rating"] == 0
        assert stats["user_wins"] == 0

    def test_top_performers(self, config):
        group = GroupFactory()
        alice = UserFactory(display_name="Alice")
        bob = UserFactory(display_name="Bob")
        for day in range(1, 4):
            DailyWinnerFactory(group=group, date_key=f"2026-02-0{day}", winner_user=alice)
        DailyWinnerFactory(group=group, date_key="2026-02-04", winner_user=bob)

        top = WinnerArchiveService.top_performers(group, config=config)

        assert top == [
            {"user_id": alice.id, "display_name": "Alice", "wins": 3},
            {"user_id": bob.id, "display_name": "Bob", "wins": 1},
        ]

    def test_all_groups_winner_picks_best(self):
        first = GroupFactory()
        second = GroupFactory()
        DailyWinnerFactory(group=first, date_key="2026-10-17", winner_average_rating=4.2, winner_rating_count=3)
        best = DailyWinnerFactory(group=second, date_key="2026-10-17", winner_average_rating=4.2, winner_rating_count=5)

        assert WinnerArchiveService.all_groups_winner([first, second], "2026-10-17") == best

    def test_all_groups_winner_none(self):
        assert WinnerArchiveService.all_groups_winner([GroupFactory()], "2026-10-17") is None
