"""Tests for the midnight reset and the afternoon post reminder."""

import pytest

from core.models import DailyWinner, NotificationCategory, NotificationLog
from core.services.daily_reset_service import DailyResetService
from core.services.post_reminder_service import PostReminderService
from tests.factories import FitFactory, UserFactory, local_time, make_group

MIDNIGHT = local_time(2026, 10, 19, 0, 0)
YESTERDAY = "2026-10-18"


@pytest.fixture
def reset_service(engine_config, notifier):
    return DailyResetService(engine_config, notifier=notifier)


@pytest.mark.django_db
class TestDailyReset:
    """Test the full settle-and-announce pass."""

    def test_tie_goes_to_earlier_post_and_members_hear_about_it(self, reset_service, delivery):
        members = [UserFactory(display_name=f"Member{i}") for i in range(5)]
        group = make_group(members, name="Five")
        assert group.member_count == 5

        s1 = FitFactory(
            owner=members[0],
            fair_rating=4.2,
            rating_count=3,
            created_at=local_time(2026, 10, 18, 9),
            groups=[group],
        )
        s2 = FitFactory(
            owner=members[1],
            fair_rating=4.2,
            rating_count=3,
            created_at=local_time(2026, 10, 18, 8),
            groups=[group],
        )

        summary = reset_service.run(now=MIDNIGHT)

        assert summary.date_key == YESTERDAY
        assert summary.winners_calculated == 1
        record = DailyWinner.objects.get(group=group, date_key=YESTERDAY)
        assert record.winner_fit_id == s2.id
        assert record.winner_fit_id != s1.id
        assert summary.results[0].threshold == 2

        winner_messages = delivery.sent_to(members[1].push_token)
        assert [m["data"]["type"] for m in winner_messages] == ["leaderboard_winner"]
        assert winner_messages[0]["data"]["groupName"] == "Five"

        for member in members[:1] + members[2:]:
            messages = delivery.sent_to(member.push_token)
            assert len(messages) == 1
            assert messages[0]["data"]["type"] == "leaderboard_recap"
            assert messages[0]["data"]["winnerName"] == "Member1"
            assert messages[0]["data"]["date"] == YESTERDAY

        assert summary.notifications_sent == 5

    def test_group_without_eligible_fits_has_no_record(self, reset_service, delivery):
        members = [UserFactory() for _ in range(5)]
        group = make_group(members)
        FitFactory(owner=members[0], fair_rating=5.0, rating_count=1,
                   created_at=local_time(2026, 10, 18, 9), groups=[group])

        summary = reset_service.run(now=MIDNIGHT)

        assert summary.winners_calculated == 0
        assert not DailyWinner.objects.filter(group=group).exists()
        assert delivery.sent == []

    def test_todays_fits_are_ignored(self, reset_service):
        member = UserFactory()
        group = make_group([member])
        FitFactory(owner=member, fair_rating=5.0, rating_count=2,
                   created_at=local_time(2026, 10, 19, 0, 0), groups=[group])

        reset_service.compute_winners(now=MIDNIGHT)

        assert not DailyWinner.objects.filter(group=group).exists()

    def test_failing_group_does_not_stop_others(self, engine_config, notifier):
        member = UserFactory()
        broken = make_group([member], name="Broken")
        healthy = make_group([member], name="Healthy")
        FitFactory(owner=member, fair_rating=4.0, rating_count=1,
                   created_at=local_time(2026, 10, 18, 9), groups=[broken, healthy])

        class PartlyBroken(DailyResetService):
            def compute_group_winner(self, group, date_key, now=None):
                if group.id == broken.id:
                    raise RuntimeError("bad data")
                return super().compute_group_winner(group, date_key, now)

        summary = PartlyBroken(engine_config, notifier=notifier).run(now=MIDNIGHT)

        assert summary.groups_processed == 2
        assert summary.groups_failed == 1
        assert summary.winners_calculated == 1
        failed = [r for r in summary.results if not r.success]
        assert failed[0].group_name == "Broken"
        assert failed[0].error == "bad data"
        assert DailyWinner.objects.filter(group=healthy, date_key=YESTERDAY).exists()

    def test_rerun_keeps_single_record(self, reset_service):
        member = UserFactory()
        group = make_group([member])
        FitFactory(owner=member, fair_rating=3.0, rating_count=1,
                   created_at=local_time(2026, 10, 18, 9), groups=[group])

        reset_service.run(now=MIDNIGHT)
        reset_service.run(now=MIDNIGHT)

        assert DailyWinner.objects.filter(group=group, date_key=YESTERDAY).count() == 1

    def test_explicit_date_key(self, reset_service):
        member = UserFactory()
        group = make_group([member])
        FitFactory(owner=member, fair_rating=3.0, rating_count=1,
                   created_at=local_time(2026, 10, 10, 9), groups=[group])

        summary = reset_service.compute_winners(date_key="2026-10-10", now=MIDNIGHT)

        assert summary.winners_calculated == 1
        assert NotificationLog.objects.count() == 0

    def test_summary_as_dict(self, reset_service):
        summary = reset_service.compute_winners(now=MIDNIGHT).as_dict()
        assert summary["date_key"] == YESTERDAY
        assert summary["results"] == []


@pytest.mark.django_db
class TestPostReminder:
    """Test the afternoon nudge."""

    def test_reminds_only_users_without_a_fit_today(self, engine_config, notifier, delivery):
        posted = UserFactory()
        idle = UserFactory()
        unreachable = UserFactory(push_token=None)
        FitFactory(owner=posted, created_at=local_time(2026, 10, 18, 8))

        summary = PostReminderService(engine_config, notifier=notifier).run(
            now=local_time(2026, 10, 18, 14)
        )

        assert summary.users_checked == 3
        assert summary.already_posted == 1
        assert summary.reminders_sent == 1
        assert summary.failed == 0
        assert delivery.sent_to(idle.push_token)[0]["data"] == {
            "type": NotificationCategory.POST_REMINDER,
            "date": "2026-10-18",
        }
        assert delivery.sent_to(posted.push_token) == []
        assert unreachable.push_token is None

    def test_yesterdays_fit_does_not_count(self, engine_config, notifier, delivery):
        user = UserFactory()
        FitFactory(owner=user, created_at=local_time(2026, 10, 17, 20))

        summary = PostReminderService(engine_config, notifier=notifier).run(
            now=local_time(2026, 10, 18, 14)
        )

        assert summary.reminders_sent == 1

    def test_inactive_users_skipped(self, engine_config, notifier):
        UserFactory(is_active=False)

        summary = PostReminderService(engine_config, notifier=notifier).run(
            now=local_time(2026, 10, 18, 14)
        )

        assert summary.users_checked == 0
