import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


STATUS_CHOICES = [("active", "Active"), ("completed", "Completed"), ("failed", "Failed")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("core", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="UserProgress",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("total_points", models.PositiveIntegerField(default=0)),
                ("total_co2_saved_kg", models.FloatField(default=0)),
                ("current_streak", models.PositiveIntegerField(default=0)),
                ("longest_streak", models.PositiveIntegerField(default=0)),
                ("last_active_date_key", models.CharField(blank=True, max_length=10, null=True)),
                ("missions_count", models.PositiveIntegerField(default=0)),
                ("compliance_on_time_count", models.PositiveIntegerField(default=0)),
                ("pollution_report_count", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="progress", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name_plural": "User progress",
                "indexes": [models.Index(fields=["-total_points"], name="progress_points_idx")],
            },
        ),
        migrations.CreateModel(
            name="UserBadge",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("badge_id", models.CharField(max_length=64)),
                ("earned_at", models.DateTimeField()),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="badges", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["earned_at"],
                "constraints": [models.UniqueConstraint(fields=("user", "badge_id"), name="unique_user_badge")],
            },
        ),
        migrations.CreateModel(
            name="PointsLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.IntegerField()),
                ("reason", models.CharField(choices=[("mission", "Mission"), ("compliance", "Compliance"), ("pollution_report", "Pollution report"), ("daily_tier_bonus", "Daily tier bonus"), ("streak_bonus", "Streak bonus"), ("milestone_reward", "Milestone reward")], max_length=32)),
                ("award_key", models.CharField(blank=True, max_length=128, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="points_logs", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["user", "-created_at"], name="points_log_user_idx")],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("award_key__isnull", False)), fields=("user", "reason", "award_key"), name="unique_points_award"),
                ],
            },
        ),
        migrations.CreateModel(
            name="RecurringMilestone",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=[("weekly_co2", "Weekly CO2"), ("monthly_co2", "Monthly CO2"), ("weekly_missions", "Weekly missions"), ("monthly_missions", "Monthly missions"), ("monthly_streak", "Monthly streak")], max_length=32)),
                ("period", models.CharField(choices=[("weekly", "Weekly"), ("monthly", "Monthly")], max_length=16)),
                ("period_key", models.CharField(max_length=16)),
                ("target_value", models.FloatField()),
                ("unit", models.CharField(max_length=16)),
                ("label", models.CharField(max_length=255)),
                ("current_value", models.FloatField(default=0)),
                ("percent_complete", models.PositiveSmallIntegerField(default=0)),
                ("bonus_points", models.PositiveIntegerField(default=0)),
                ("badge_id", models.CharField(blank=True, default="", max_length=64)),
                ("difficulty", models.CharField(choices=[("easy", "Easy"), ("medium", "Medium"), ("hard", "Hard")], default="easy", max_length=8)),
                ("status", models.CharField(choices=STATUS_CHOICES, default="active", max_length=16)),
                ("period_start", models.DateTimeField()),
                ("period_end", models.DateTimeField()),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="milestones", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["period_end", "type"],
                "indexes": [
                    models.Index(fields=["user", "status"], name="milestone_user_status_idx"),
                    models.Index(fields=["status", "period_end"], name="milestone_expiry_idx"),
                ],
                "constraints": [models.UniqueConstraint(fields=("user", "type", "period_key"), name="unique_milestone_period")],
            },
        ),
        migrations.CreateModel(
            name="CommunityChallenge",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("goal_co2_kg", models.FloatField()),
                ("current_co2_kg", models.FloatField(default=0)),
                ("participant_count", models.PositiveIntegerField(default=0)),
                ("status", models.CharField(choices=STATUS_CHOICES, default="active", max_length=16)),
                ("start_at", models.DateTimeField()),
                ("end_at", models.DateTimeField()),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("community", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="challenges", to="core.community")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="challenges_created", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-start_at"],
                "indexes": [models.Index(fields=["status", "end_at"], name="challenge_expiry_idx")],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("status", "active")), fields=("community",), name="one_active_challenge_per_community"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ChallengeParticipant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("co2_contributed_kg", models.FloatField(default=0)),
                ("joined_at", models.DateTimeField(auto_now_add=True)),
                ("challenge", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="participants", to="gamification.communitychallenge")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="challenge_participations", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("challenge", "user"), name="unique_challenge_participant")],
            },
        ),
    ]
