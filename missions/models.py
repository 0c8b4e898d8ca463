# missions/models.py
from django.conf import settings
from django.db import models


class Mission(models.Model):
    """
    Admin-curated catalog item. Read-only from the rewards engine's side.
    """
    CATEGORY_TRANSPORT = "transport"
    CATEGORY_FOOD = "food"
    CATEGORY_ENERGY = "energy"
    CATEGORY_SHOPPING = "shopping"
    CATEGORY_WATER = "water"

    CATEGORY_CHOICES = [
        (CATEGORY_TRANSPORT, "Transport"),
        (CATEGORY_FOOD, "Food"),
        (CATEGORY_ENERGY, "Energy"),
        (CATEGORY_SHOPPING, "Shopping"),
        (CATEGORY_WATER, "Water"),
    ]

    DIFFICULTY_EASY = "easy"
    DIFFICULTY_MEDIUM = "medium"
    DIFFICULTY_HARD = "hard"

    DIFFICULTY_CHOICES = [
        (DIFFICULTY_EASY, "Easy"),
        (DIFFICULTY_MEDIUM, "Medium"),
        (DIFFICULTY_HARD, "Hard"),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=16, choices=CATEGORY_CHOICES)
    difficulty = models.CharField(max_length=8, choices=DIFFICULTY_CHOICES)
    co2_saved_kg = models.FloatField()
    base_points = models.PositiveIntegerField()
    icon = models.CharField(max_length=64, default="leaf")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["category", "is_active"], name="mission_category_idx"),
        ]

    def __str__(self):
        return f"{self.title} ({self.difficulty})"


class MissionCompletion(models.Model):
    """
    One-time-ever completion of a catalog mission.
    The unique constraint is what makes duplicate requests award once.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="mission_completions",
    )
    mission = models.ForeignKey(
        Mission,
        on_delete=models.CASCADE,
        related_name="completions",
    )
    points_awarded = models.PositiveIntegerField(default=0)
    co2_saved_awarded = models.FloatField(default=0)
    # UTC calendar day of completion
    date_key = models.CharField(max_length=10, db_index=True)
    completed_at = models.DateTimeField()

    class Meta:
        ordering = ["-completed_at"]
        constraints = [
            models.UniqueConstraint(fields=["user", "mission"], name="unique_mission_completion"),
        ]
        indexes = [
            models.Index(fields=["user", "-completed_at"], name="completion_user_recent_idx"),
        ]

    def __str__(self):
        return f"{self.user} completed {self.mission_id} on {self.date_key}"


class DailyMissionPool(models.Model):
    """
    Cached suggestions for one user and one UTC day. Generated once; same-day
    reads return the stored list.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="daily_pools",
    )
    date_key = models.CharField(max_length=10)
    preferred_category = models.CharField(max_length=16, choices=Mission.CATEGORY_CHOICES)
    # Ordered [easy, medium, hard] mission ids
    mission_ids = models.JSONField(default=list)
    generated_at = models.DateTimeField()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "date_key"], name="unique_daily_pool"),
        ]

    def __str__(self):
        return f"{self.user} pool {self.date_key}: {self.mission_ids}"


class DailySignal(models.Model):
    """Same-day behaviour quick log used to bias the daily pool."""
    FOOD_VEG = "veg"
    FOOD_NON_VEG = "non_veg"

    FOOD_CHOICES = [
        (FOOD_VEG, "Vegetarian"),
        (FOOD_NON_VEG, "Non-vegetarian"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="daily_signals",
    )
    date_key = models.CharField(max_length=10)
    car_km = models.FloatField(default=0)
    food_type = models.CharField(max_length=8, choices=FOOD_CHOICES, blank=True, default="")
    ac_hours = models.FloatField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "date_key"], name="unique_daily_signal"),
        ]

    def __str__(self):
        return f"{self.user} signal {self.date_key}"


class FootprintLog(models.Model):
    """
    Output of the footprint calculator: total and per-category kg CO2.
    Only read here, to find the user's dominant emission category.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="footprint_logs",
    )
    total_co2_kg = models.FloatField(default=0)
    # {"transport": 1.2, "food": 0.8, "energy": 2.0, "shopping": 0.1}
    breakdown = models.JSONField(default=dict)
    logged_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-logged_at"]
        get_latest_by = "logged_at"

    def __str__(self):
        return f"{self.user} footprint {self.total_co2_kg:.1f} kg"
