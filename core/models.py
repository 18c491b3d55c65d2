"""
Core models for the FitCheck platform.

This module contains the database models for groups, daily fits and their
ratings and comments, the archived daily winners, and the per-user state
used to throttle push notifications.
"""

from django.db import models
from django.contrib.auth.models import AbstractUser
from django.core.validators import MaxValueValidator, MinValueValidator
from django.utils import timezone

from core.config import EngineConfig


class NotificationCategory(models.TextChoices):
    POST_REMINDER = "post_reminder", "Post Reminder"
    FRIENDS_POSTED = "friends_posted", "Friends Posted"
    RATINGS_BUNDLED = "ratings_bundled", "Ratings Bundled"
    COMMENT = "comment", "Comment"
    LEADERBOARD_WINNER = "leaderboard_winner", "Leaderboard Winner"
    LEADERBOARD_RECAP = "leaderboard_recap", "Leaderboard Recap"
    NEW_MEMBER = "new_member", "New Member"


# Category -> preference toggle. Both leaderboard categories share a toggle.
PREFERENCE_KEYS = {
    NotificationCategory.COMMENT: "commentNotifications",
    NotificationCategory.FRIENDS_POSTED: "newFitNotifications",
    NotificationCategory.RATINGS_BUNDLED: "ratingNotifications",
    NotificationCategory.POST_REMINDER: "postReminderNotifications",
    NotificationCategory.LEADERBOARD_WINNER: "leaderboardNotifications",
    NotificationCategory.LEADERBOARD_RECAP: "leaderboardNotifications",
    NotificationCategory.NEW_MEMBER: "newMemberNotifications",
}

PREFERENCE_TOGGLES = sorted(set(PREFERENCE_KEYS.values()))


class User(AbstractUser):
    """
    Platform user.

    ``push_token`` is the opaque delivery target handed to the push gateway;
    a user without one can never be notified.
    """

    display_name = models.CharField(max_length=50, blank=True)
    push_token = models.CharField(max_length=255, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "users"

    def get_display_name(self) -> str:
        return self.display_name or self.username

    def __str__(self):
        return self.get_display_name()


class Group(models.Model):
    """
    A set of users competing against each other's fits each day.

    ``member_count`` is denormalised from the membership table and drives the
    rating-count threshold for the daily competition.
    """

    name = models.CharField(max_length=100)
    members = models.ManyToManyField(
        User, through="GroupMembership", related_name="fit_groups"
    )
    member_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "groups"

    def refresh_member_count(self) -> int:
        """Recount memberships and persist the denormalised count."""
        count = self.memberships.count()
        Group.objects.filter(pk=self.pk).update(member_count=count)
        self.member_count = count
        return count

    def __str__(self):
        return self.name


class GroupMembership(models.Model):
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name="memberships")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="memberships")
    joined_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "group_memberships"
        unique_together = [["group", "user"]]
        indexes = [
            models.Index(fields=["user"], name="idx_membership_user"),
        ]

    def __str__(self):
        return f"{self.user} in {self.group}"


class Fit(models.Model):
    """
    A user's daily outfit post, shared to one or more groups.

    ``rating_count``, ``total_rating`` and ``fair_rating`` are aggregates of
    the ratings table, kept current by FitService. ``fair_rating`` is stored
    rounded to one decimal place and is the value both displayed and used to
    rank winners.
    """

    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name="fits")
    groups = models.ManyToManyField(Group, related_name="fits", blank=True)

    created_at = models.DateTimeField(default=timezone.now, null=True, blank=True)
    date_key = models.CharField(max_length=10, blank=True, db_index=True)

    caption = models.CharField(max_length=280, blank=True)
    tag = models.CharField(max_length=50, blank=True)

    rating_count = models.PositiveIntegerField(default=0)
    total_rating = models.PositiveIntegerField(default=0)
    fair_rating = models.FloatField(default=0.0)
    last_notified_rating_count = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "fits"
        indexes = [
            models.Index(fields=["owner", "date_key"], name="idx_fit_owner_date"),
            models.Index(fields=["date_key", "rating_count"], name="idx_fit_date_rating_count"),
        ]

    def save(self, *args, **kwargs):
        # date_key always follows created_at; it is only free-standing when there is no timestamp
        if self.created_at:
            self.date_key = EngineConfig.from_settings().date_key(self.created_at)
            update_fields = kwargs.get("update_fields")
            if update_fields is not None and "created_at" in update_fields:
                kwargs["update_fields"] = {*update_fields, "date_key"}
        super().save(*args, **kwargs)

    def __str__(self):
        return f"Fit {self.pk} by {self.owner} ({self.date_key})"


class Rating(models.Model):
    """One rater's 1-5 score for a fit; a rater can rate a fit once."""

    fit = models.ForeignKey(Fit, on_delete=models.CASCADE, related_name="ratings")
    rater = models.ForeignKey(User, on_delete=models.CASCADE, related_name="ratings_given")
    value = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "ratings"
        unique_together = [["fit", "rater"]]

    def __str__(self):
        return f"{self.rater} rated fit {self.fit_id}: {self.value}"


class Comment(models.Model):
    fit = models.ForeignKey(Fit, on_delete=models.CASCADE, related_name="comments")
    author = models.ForeignKey(User, on_delete=models.CASCADE, related_name="comments")
    text = models.TextField(max_length=500)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "comments"
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"Comment by {self.author} on fit {self.fit_id}"


class DailyWinner(models.Model):
    """
    Archived winner of one group for one calendar day.

    Holds a snapshot of the winning fit taken at computation time, so later
    edits to the fit do not change history. At most one row exists per
    (group, date_key); recomputation replaces it.
    """

    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name="daily_winners")
    date_key = models.CharField(max_length=10)
    group_name = models.CharField(max_length=100, blank=True)

    winner_fit = models.ForeignKey(
        Fit, on_delete=models.SET_NULL, null=True, related_name="wins"
    )
    winner_user = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, related_name="daily_wins"
    )
    winner_display_name = models.CharField(max_length=150)
    winner_average_rating = models.FloatField()
    winner_rating_count = models.PositiveIntegerField()
    winner_created_at = models.DateTimeField(null=True, blank=True)
    caption = models.CharField(max_length=280, blank=True)
    tag = models.CharField(max_length=50, blank=True)

    computed_at = models.DateTimeField()

    class Meta:
        db_table = "daily_winners"
        constraints = [
            models.UniqueConstraint(
                fields=["group", "date_key"], name="unique_daily_winner_per_group"
            ),
        ]
        indexes = [
            models.Index(fields=["group", "-date_key"], name="idx_winner_group_date"),
        ]

    def __str__(self):
        return f"{self.group_name or self.group_id} {self.date_key}: {self.winner_display_name}"


class NotificationCounter(models.Model):
    """Sends of one category to one user on one day; only ever incremented."""

    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="notification_counters"
    )
    date_key = models.CharField(max_length=10)
    category = models.CharField(max_length=30, choices=NotificationCategory.choices)
    count = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "notification_counters"
        unique_together = [["user", "date_key", "category"]]

    def __str__(self):
        return f"{self.user_id} {self.date_key} {self.category}: {self.count}"


class NotificationCooldown(models.Model):
    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="notification_cooldowns"
    )
    category = models.CharField(max_length=30, choices=NotificationCategory.choices)
    last_sent_at = models.DateTimeField()

    class Meta:
        db_table = "notification_cooldowns"
        unique_together = [["user", "category"]]

    def __str__(self):
        return f"{self.user_id} {self.category} last sent {self.last_sent_at}"


class NotificationPreference(models.Model):
    """
    User opt-out for a notification toggle.

    A missing row means the toggle is on; only an explicit ``enabled=False``
    blocks the categories mapped to it.
    """

    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="notification_preferences"
    )
    preference_key = models.CharField(
        max_length=50, choices=[(key, key) for key in PREFERENCE_TOGGLES]
    )
    enabled = models.BooleanField(default=True)

    class Meta:
        db_table = "notification_preferences"
        unique_together = [["user", "preference_key"]]
        indexes = [
            models.Index(fields=["user", "enabled"], name="idx_pref_user_enabled"),
        ]

    def __str__(self):
        return f"{self.user} - {self.preference_key} ({'enabled' if self.enabled else 'disabled'})"


class NotificationLog(models.Model):
    """In-app copy of every push the gateway accepted."""

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="notifications")
    category = models.CharField(max_length=30, choices=NotificationCategory.choices)
    title = models.CharField(max_length=200)
    body = models.TextField()
    data = models.JSONField(default=dict, blank=True)

    read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "notification_logs"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "read"], name="idx_notif_user_read"),
        ]

    def __str__(self):
        return f"{self.user} - {self.category}: {self.title}"
