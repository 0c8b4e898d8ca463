import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


CATEGORY_CHOICES = [
    ("transport", "Transport"),
    ("food", "Food"),
    ("energy", "Energy"),
    ("shopping", "Shopping"),
    ("water", "Water"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Mission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("category", models.CharField(choices=CATEGORY_CHOICES, max_length=16)),
                ("difficulty", models.CharField(choices=[("easy", "Easy"), ("medium", "Medium"), ("hard", "Hard")], max_length=8)),
                ("co2_saved_kg", models.FloatField()),
                ("base_points", models.PositiveIntegerField()),
                ("icon", models.CharField(default="leaf", max_length=64)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["id"],
                "indexes": [models.Index(fields=["category", "is_active"], name="mission_category_idx")],
            },
        ),
        migrations.CreateModel(
            name="MissionCompletion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("points_awarded", models.PositiveIntegerField(default=0)),
                ("co2_saved_awarded", models.FloatField(default=0)),
                ("date_key", models.CharField(db_index=True, max_length=10)),
                ("completed_at", models.DateTimeField()),
                ("mission", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="completions", to="missions.mission")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="mission_completions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-completed_at"],
                "indexes": [models.Index(fields=["user", "-completed_at"], name="completion_user_recent_idx")],
                "constraints": [models.UniqueConstraint(fields=("user", "mission"), name="unique_mission_completion")],
            },
        ),
        migrations.CreateModel(
            name="DailyMissionPool",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date_key", models.CharField(max_length=10)),
                ("preferred_category", models.CharField(choices=CATEGORY_CHOICES, max_length=16)),
                ("mission_ids", models.JSONField(default=list)),
                ("generated_at", models.DateTimeField()),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="daily_pools", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("user", "date_key"), name="unique_daily_pool")],
            },
        ),
        migrations.CreateModel(
            name="DailySignal",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date_key", models.CharField(max_length=10)),
                ("car_km", models.FloatField(default=0)),
                ("food_type", models.CharField(blank=True, choices=[("veg", "Vegetarian"), ("non_veg", "Non-vegetarian")], default="", max_length=8)),
                ("ac_hours", models.FloatField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="daily_signals", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("user", "date_key"), name="unique_daily_signal")],
            },
        ),
        migrations.CreateModel(
            name="FootprintLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("total_co2_kg", models.FloatField(default=0)),
                ("breakdown", models.JSONField(default=dict)),
                ("logged_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="footprint_logs", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-logged_at"],
                "get_latest_by": "logged_at",
            },
        ),
    ]
