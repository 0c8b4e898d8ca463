from django.db.models.signals import post_save
from django.dispatch import receiver

from core.constants import ACTIVITY_MEMBER_JOINED
from core.models import CommunityMembership
from core.services import ActivityFeed


@receiver(post_save, sender=CommunityMembership)
def log_member_joined(sender, instance, created, **kwargs):
    if created and instance.is_active:
        ActivityFeed.append(
            instance.community_id,
            ACTIVITY_MEMBER_JOINED,
            actor=instance.user_id,
        )
