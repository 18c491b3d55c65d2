import django.contrib.auth.models
import django.contrib.auth.validators
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(
                    default=False,
                    help_text='Designates that this user has all permissions without explicitly assigning them.',
                    verbose_name='superuser status',
                )),
                ('username', models.CharField(
                    error_messages={'unique': 'A user with that username already exists.'},
                    help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.',
                    max_length=150,
                    unique=True,
                    validators=[django.contrib.auth.validators.UnicodeUsernameValidator()],
                    verbose_name='username',
                )),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='email address')),
                ('is_staff', models.BooleanField(
                    default=False,
                    help_text='Designates whether the user can log into this admin site.',
                    verbose_name='staff status',
                )),
                ('is_active', models.BooleanField(
                    default=True,
                    help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.',
                    verbose_name='active',
                )),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('display_name', models.CharField(blank=True, max_length=50)),
                ('push_token', models.CharField(blank=True, max_length=255, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('groups', models.ManyToManyField(
                    blank=True,
                    help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.',
                    related_name='user_set',
                    related_query_name='user',
                    to='auth.group',
                    verbose_name='groups',
                )),
                ('user_permissions', models.ManyToManyField(
                    blank=True,
                    help_text='Specific permissions for this user.',
                    related_name='user_set',
                    related_query_name='user',
                    to='auth.permission',
                    verbose_name='user permissions',
                )),
            ],
            options={
                'db_table': 'users',
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='Group',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('member_count', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'groups',
            },
        ),
        migrations.CreateModel(
            name='GroupMembership',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('joined_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('group', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='memberships',
                    to='core.group',
                )),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='memberships',
                    to='core.user',
                )),
            ],
            options={
                'db_table': 'group_memberships',
                'unique_together': {('group', 'user')},
            },
        ),
        migrations.AddField(
            model_name='group',
            name='members',
            field=models.ManyToManyField(
                related_name='fit_groups',
                through='core.GroupMembership',
                to='core.user',
            ),
        ),
        migrations.AddIndex(
            model_name='groupmembership',
            index=models.Index(fields=['user'], name='idx_membership_user'),
        ),
        migrations.CreateModel(
            name='Fit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(blank=True, default=django.utils.timezone.now, null=True)),
                ('date_key', models.CharField(blank=True, db_index=True, max_length=10)),
                ('caption', models.CharField(blank=True, max_length=280)),
                ('tag', models.CharField(blank=True, max_length=50)),
                ('rating_count', models.PositiveIntegerField(default=0)),
                ('total_rating', models.PositiveIntegerField(default=0)),
                ('fair_rating', models.FloatField(default=0.0)),
                ('last_notified_rating_count', models.PositiveIntegerField(default=0)),
                ('owner', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='fits',
                    to='core.user',
                )),
                ('groups', models.ManyToManyField(blank=True, related_name='fits', to='core.group')),
            ],
            options={
                'db_table': 'fits',
                'indexes': [
                    models.Index(fields=['owner', 'date_key'], name='idx_fit_owner_date'),
                    models.Index(fields=['date_key', 'rating_count'], name='idx_fit_date_rating_count'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Rating',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('value', models.PositiveSmallIntegerField(validators=[
                    django.core.validators.MinValueValidator(1),
                    django.core.validators.MaxValueValidator(5),
                ])),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('fit', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='ratings',
                    to='core.fit',
                )),
                ('rater', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='ratings_given',
                    to='core.user',
                )),
            ],
            options={
                'db_table': 'ratings',
                'unique_together': {('fit', 'rater')},
            },
        ),
        migrations.CreateModel(
            name='Comment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('text', models.TextField(max_length=500)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('author', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='comments',
                    to='core.user',
                )),
                ('fit', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='comments',
                    to='core.fit',
                )),
            ],
            options={
                'db_table': 'comments',
                'ordering': ['created_at', 'id'],
            },
        ),
        migrations.CreateModel(
            name='DailyWinner',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date_key', models.CharField(max_length=10)),
                ('group_name', models.CharField(blank=True, max_length=100)),
                ('winner_display_name', models.CharField(max_length=150)),
                ('winner_average_rating', models.FloatField()),
                ('winner_rating_count', models.PositiveIntegerField()),
                ('winner_created_at', models.DateTimeField(blank=True, null=True)),
                ('caption', models.CharField(blank=True, max_length=280)),
                ('tag', models.CharField(blank=True, max_length=50)),
                ('computed_at', models.DateTimeField()),
                ('group', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='daily_winners',
                    to='core.group',
                )),
                ('winner_fit', models.ForeignKey(
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='wins',
                    to='core.fit',
                )),
                ('winner_user', models.ForeignKey(
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='daily_wins',
                    to='core.user',
                )),
            ],
            options={
                'db_table': 'daily_winners',
            },
        ),
        migrations.AddConstraint(
            model_name='dailywinner',
            constraint=models.UniqueConstraint(
                fields=['group', 'date_key'],
                name='unique_daily_winner_per_group',
            ),
        ),
        migrations.AddIndex(
            model_name='dailywinner',
            index=models.Index(fields=['group', '-date_key'], name='idx_winner_group_date'),
        ),
        migrations.CreateModel(
            name='NotificationCounter',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date_key', models.CharField(max_length=10)),
                ('category', models.CharField(choices=[
                    ('post_reminder', 'Post Reminder'),
                    ('friends_posted', 'Friends Posted'),
                    ('ratings_bundled', 'Ratings Bundled'),
                    ('comment', 'Comment'),
                    ('leaderboard_winner', 'Leaderboard Winner'),
                    ('leaderboard_recap', 'Leaderboard Recap'),
                    ('new_member', 'New Member'),
                ], max_length=30)),
                ('count', models.PositiveIntegerField(default=0)),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='notification_counters',
                    to='core.user',
                )),
            ],
            options={
                'db_table': 'notification_counters',
                'unique_together': {('user', 'date_key', 'category')},
            },
        ),
        migrations.CreateModel(
            name='NotificationCooldown',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('category', models.CharField(choices=[
                    ('post_reminder', 'Post Reminder'),
                    ('friends_posted', 'Friends Posted'),
                    ('ratings_bundled', 'Ratings Bundled'),
                    ('comment', 'Comment'),
                    ('leaderboard_winner', 'Leaderboard Winner'),
                    ('leaderboard_recap', 'Leaderboard Recap'),
                    ('new_member', 'New Member'),
                ], max_length=30)),
                ('last_sent_at', models.DateTimeField()),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='notification_cooldowns',
                    to='core.user',
                )),
            ],
            options={
                'db_table': 'notification_cooldowns',
                'unique_together': {('user', 'category')},
            },
        ),
        migrations.CreateModel(
            name='NotificationPreference',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('preference_key', models.CharField(choices=[
                    ('commentNotifications', 'commentNotifications'),
                    ('leaderboardNotifications', 'leaderboardNotifications'),
                    ('newFitNotifications', 'newFitNotifications'),
                    ('newMemberNotifications', 'newMemberNotifications'),
                    ('postReminderNotifications', 'postReminderNotifications'),
                    ('ratingNotifications', 'ratingNotifications'),
                ], max_length=50)),
                ('enabled', models.BooleanField(default=True)),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='notification_preferences',
                    to='core.user',
                )),
            ],
            options={
                'db_table': 'notification_preferences',
                'unique_together': {('user', 'preference_key')},
            },
        ),
        migrations.AddIndex(
            model_name='notificationpreference',
            index=models.Index(fields=['user', 'enabled'], name='idx_pref_user_enabled'),
        ),
        migrations.CreateModel(
            name='NotificationLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('category', models.CharField(choices=[
                    ('post_reminder', 'Post Reminder'),
                    ('friends_posted', 'Friends Posted'),
                    ('ratings_bundled', 'Ratings Bundled'),
                    ('comment', 'Comment'),
                    ('leaderboard_winner', 'Leaderboard Winner'),
                    ('leaderboard_recap', 'Leaderboard Recap'),
                    ('new_member', 'New Member'),
                ], max_length=30)),
                ('title', models.CharField(max_length=200)),
                ('body', models.TextField()),
                ('data', models.JSONField(blank=True, default=dict)),
                ('read', models.BooleanField(default=False)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='notifications',
                    to='core.user',
                )),
            ],
            options={
                'db_table': 'notification_logs',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.AddIndex(
            model_name='notificationlog',
            index=models.Index(fields=['user', 'read'], name='idx_notif_user_read'),
        ),
    ]
