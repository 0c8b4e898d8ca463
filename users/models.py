# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    display_name = models.CharField(max_length=150, blank=True)
    profile_picture = models.CharField(max_length=1024, blank=True, null=True)

    # Expo push token registered by the mobile app
    push_token = models.CharField(max_length=255, blank=True, default="")

    is_onboarded = models.BooleanField(default=False, help_text="Has the user completed the baseline questionnaire?")

    def __str__(self):
        return self.username

    @property
    def public_name(self):
        return self.display_name or self.username
