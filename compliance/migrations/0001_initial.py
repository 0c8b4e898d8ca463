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
            name="Vehicle",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("nickname", models.CharField(max_length=100)),
                ("vehicle_number", models.CharField(db_index=True, max_length=20)),
                ("vehicle_type", models.CharField(choices=[("two_wheeler", "Two wheeler"), ("three_wheeler", "Three wheeler"), ("four_wheeler", "Four wheeler"), ("commercial", "Commercial")], max_length=16)),
                ("fuel_type", models.CharField(choices=[("petrol", "Petrol"), ("diesel", "Diesel"), ("cng", "CNG"), ("electric", "Electric")], max_length=16)),
                ("brand", models.CharField(blank=True, default="", max_length=100)),
                ("model_name", models.CharField(blank=True, default="", max_length=100)),
                ("year_of_manufacture", models.PositiveIntegerField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="vehicles", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["user", "is_active"], name="vehicle_user_active_idx")],
            },
        ),
        migrations.CreateModel(
            name="ComplianceRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("test_date", models.DateField()),
                ("expiry_date", models.DateField()),
                ("center_name", models.CharField(blank=True, default="", max_length=255)),
                ("center_city", models.CharField(blank=True, default="", max_length=100)),
                ("certificate_number", models.CharField(blank=True, default="", max_length=64)),
                ("result", models.CharField(choices=[("pass", "Pass"), ("fail", "Fail")], default="pass", max_length=8)),
                ("points_awarded", models.PositiveIntegerField(default=0)),
                ("co2_impact_kg", models.FloatField(default=0)),
                ("is_on_time", models.BooleanField(default=True)),
                ("reminder_sent_days", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="compliance_records", to=settings.AUTH_USER_MODEL)),
                ("vehicle", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="compliance_records", to="compliance.vehicle")),
            ],
            options={
                "ordering": ["-test_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["vehicle", "-test_date"], name="compliance_vehicle_idx"),
                    models.Index(fields=["expiry_date"], name="compliance_expiry_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PollutionReport",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("vehicle_number", models.CharField(blank=True, default="", max_length=20)),
                ("vehicle_type", models.CharField(choices=[("two_wheeler", "Two wheeler"), ("three_wheeler", "Three wheeler"), ("four_wheeler", "Four wheeler"), ("commercial_truck", "Commercial truck"), ("bus", "Bus"), ("unknown", "Unknown")], default="unknown", max_length=20)),
                ("vehicle_color", models.CharField(blank=True, default="", max_length=32)),
                ("pollution_level", models.CharField(choices=[("mild", "Mild"), ("heavy", "Heavy"), ("severe", "Severe")], max_length=8)),
                ("pollution_type", models.CharField(choices=[("black_smoke", "Black smoke"), ("white_smoke", "White smoke"), ("strong_odor", "Strong odor"), ("visible_exhaust", "Visible exhaust"), ("multiple", "Multiple")], max_length=20)),
                ("description", models.TextField(blank=True, default="")),
                ("latitude", models.FloatField()),
                ("longitude", models.FloatField()),
                ("location_name", models.CharField(blank=True, default="", max_length=255)),
                ("city", models.CharField(max_length=100)),
                ("state", models.CharField(max_length=100)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("verified", "Verified"), ("dismissed", "Dismissed")], default="pending", max_length=16)),
                ("points_awarded", models.PositiveIntegerField(default=0)),
                ("estimated_impact_kg", models.FloatField(default=0)),
                ("date_key", models.CharField(max_length=10)),
                ("reported_at", models.DateTimeField()),
                ("reporter", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="pollution_reports", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-reported_at"],
                "indexes": [
                    models.Index(fields=["reporter", "date_key"], name="report_daily_limit_idx"),
                    models.Index(fields=["city", "-reported_at"], name="report_city_idx"),
                ],
            },
        ),
    ]
