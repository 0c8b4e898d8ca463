import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Community",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, unique=True)),
                ("slug", models.SlugField(max_length=255, unique=True)),
                ("description", models.TextField(blank=True)),
                ("type", models.CharField(choices=[("college", "College"), ("company", "Company"), ("city", "City")], default="city", max_length=16)),
                ("total_co2_saved_kg", models.FloatField(default=0)),
                ("total_points", models.IntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="communities_created", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name_plural": "Communities",
                "ordering": ["name"],
                "indexes": [models.Index(fields=["slug"], name="community_slug_idx")],
            },
        ),
        migrations.CreateModel(
            name="CommunityActivity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("verb", models.CharField(db_index=True, max_length=64)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("timestamp", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("actor", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="community_activities", to=settings.AUTH_USER_MODEL)),
                ("community", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="activities", to="core.community")),
            ],
            options={
                "verbose_name_plural": "Community Activities",
                "ordering": ["-timestamp"],
                "indexes": [models.Index(fields=["community", "-timestamp"], name="community_activity_feed_idx")],
            },
        ),
        migrations.CreateModel(
            name="CommunityMembership",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=[("owner", "Owner"), ("admin", "Admin"), ("member", "Member")], default="member", max_length=32)),
                ("is_active", models.BooleanField(default=True)),
                ("is_default", models.BooleanField(default=False, help_text="If True, this is the user's active/default community.")),
                ("joined_at", models.DateTimeField(auto_now_add=True)),
                ("community", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="memberships", to="core.community")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="community_memberships", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "unique_together": {("community", "user")},
            },
        ),
    ]
