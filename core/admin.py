"""
Django admin configuration for FitCheck models.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import (
    User,
    Group,
    GroupMembership,
    Fit,
    Rating,
    Comment,
    DailyWinner,
    NotificationCounter,
    NotificationCooldown,
    NotificationPreference,
    NotificationLog,
)


class GroupMembershipInline(admin.TabularInline):
    model = GroupMembership
    extra = 0
    readonly_fields = ["joined_at"]


class RatingInline(admin.TabularInline):
    model = Rating
    extra = 0
    readonly_fields = ["created_at"]


class CommentInline(admin.TabularInline):
    model = Comment
    extra = 0
    readonly_fields = ["created_at"]


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    fieldsets = BaseUserAdmin.fieldsets + (
        ("FitCheck", {"fields": ("display_name", "push_token")}),
    )
    list_display = ["username", "display_name", "email", "has_push_token", "created_at"]
    search_fields = ["username", "display_name", "email"]

    @admin.display(boolean=True, description="Push")
    def has_push_token(self, obj):
        return bool(obj.push_token)


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    list_display = ["name", "member_count", "created_at"]
    search_fields = ["name"]
    readonly_fields = ["member_count", "created_at"]
    inlines = [GroupMembershipInline]


@admin.register(Fit)
class FitAdmin(admin.ModelAdmin):
    list_display = ["id", "owner", "date_key", "fair_rating", "rating_count", "created_at"]
    list_filter = ["date_key"]
    search_fields = ["owner__username", "caption", "tag"]
    readonly_fields = ["rating_count", "total_rating", "fair_rating", "last_notified_rating_count"]
    inlines = [RatingInline, CommentInline]


@admin.register(DailyWinner)
class DailyWinnerAdmin(admin.ModelAdmin):
    list_display = [
        "date_key",
        "group_name",
        "winner_display_name",
        "winner_average_rating",
        "winner_rating_count",
        "computed_at",
    ]
    list_filter = ["date_key"]
    search_fields = ["group_name", "winner_display_name"]
    # Snapshots are written by the daily job only
    readonly_fields = [field.name for field in DailyWinner._meta.fields]


@admin.register(NotificationLog)
class NotificationLogAdmin(admin.ModelAdmin):
    list_display = ["user", "category", "title", "read", "created_at"]
    list_filter = ["category", "read"]
    search_fields = ["user__username", "title"]


@admin.register(NotificationCounter)
class NotificationCounterAdmin(admin.ModelAdmin):
    list_display = ["user", "date_key", "category", "count"]
    list_filter = ["category", "date_key"]


admin.site.register(NotificationCooldown)
admin.site.register(NotificationPreference)
