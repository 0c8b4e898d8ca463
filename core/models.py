#  core/models.py
from django.db import models
from django.conf import settings


class Community(models.Model):
    """
    A college, company or city community inside EcoAct.
    Members pool their CO2 savings into shared challenges.
    """
    TYPE_COLLEGE = "college"
    TYPE_COMPANY = "company"
    TYPE_CITY = "city"

    TYPE_CHOICES = [
        (TYPE_COLLEGE, "College"),
        (TYPE_COMPANY, "Company"),
        (TYPE_CITY, "City"),
    ]

    name = models.CharField(max_length=255, unique=True)
    slug = models.SlugField(max_length=255, unique=True)
    description = models.TextField(blank=True)
    type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_CITY)

    # Denormalized totals, only ever incremented with F()
    total_co2_saved_kg = models.FloatField(default=0)
    total_points = models.IntegerField(default=0)

    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="communities_created",
        null=True,
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "Communities"
        indexes = [
            models.Index(fields=["slug"], name="community_slug_idx"),
        ]

    def __str__(self):
        return self.name


class CommunityMembership(models.Model):
    """
    Per-community role for a user.
    The default membership is the community a user's actions count towards.
    """
    ROLE_OWNER = "owner"
    ROLE_ADMIN = "admin"
    ROLE_MEMBER = "member"

    ROLE_CHOICES = [
        (ROLE_OWNER, "Owner"),
        (ROLE_ADMIN, "Admin"),
        (ROLE_MEMBER, "Member"),
    ]

    community = models.ForeignKey(
        Community,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="community_memberships",
    )
    role = models.CharField(max_length=32, choices=ROLE_CHOICES, default=ROLE_MEMBER)
    is_active = models.BooleanField(default=True)

    is_default = models.BooleanField(
        default=False,
        help_text="If True, this is the user's active/default community.",
    )

    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("community", "user")

    def __str__(self):
        return f"{self.user} in {self.community} ({self.role})"


class CommunityActivity(models.Model):
    """
    Append-only community feed.
    Written through core.services.ActivityFeed, never from request handlers.
    """
    community = models.ForeignKey(
        Community,
        on_delete=models.CASCADE,
        related_name="activities",
    )
    # Null for community-wide events (e.g. challenge completed)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="community_activities",
    )

    # What happened? (e.g., 'mission.completed')
    verb = models.CharField(max_length=64, db_index=True)

    # Snapshot data at time of logging (mission title, badge name ...)
    metadata = models.JSONField(default=dict, blank=True)

    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name_plural = "Community Activities"
        ordering = ["-timestamp"]
        indexes = [
            models.Index(fields=["community", "-timestamp"], name="community_activity_feed_idx"),
        ]

    def __str__(self):
        return f"{self.community} - {self.verb} - {self.timestamp}"
