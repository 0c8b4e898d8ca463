# notifications/models.py
from django.db import models
from django.conf import settings


class Notification(models.Model):
    TYPE_BADGE_EARNED = "badge_earned"
    TYPE_MILESTONE_COMPLETED = "milestone_completed"
    TYPE_CHALLENGE_COMPLETED = "challenge_completed"
    TYPE_COMPLIANCE_REMINDER = "compliance_reminder"
    TYPE_SYSTEM = "system"

    TYPE_CHOICES = [
        (TYPE_BADGE_EARNED, "Badge Earned"),
        (TYPE_MILESTONE_COMPLETED, "Milestone Completed"),
        (TYPE_CHALLENGE_COMPLETED, "Challenge Completed"),
        (TYPE_COMPLIANCE_REMINDER, "Compliance Reminder"),
        (TYPE_SYSTEM, "System"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    type = models.CharField(max_length=64, choices=TYPE_CHOICES, default=TYPE_SYSTEM)
    title = models.CharField(max_length=255)
    body = models.TextField(blank=True)
    # Deep-link payload handed to the mobile app
    data = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    pushed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "is_read"], name="notif_user_read_idx"),
            models.Index(fields=["type"], name="notif_type_idx"),
        ]

    def __str__(self):
        return f"{self.user} - {self.type} - {self.title}"
