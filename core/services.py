# core/services.py
import logging

from django.db import transaction

from .constants import is_valid_verb
from .models import CommunityActivity, CommunityMembership

logger = logging.getLogger("ecoact.core")


class ActivityFeed:
    """
    Community activity sink.

    Appends are fire-and-forget: they run after the surrounding transaction
    commits and a failing write is logged, never raised to the caller.
    """

    @staticmethod
    def append(community_id, verb, actor=None, metadata=None):
        if community_id is None:
            return
        if not is_valid_verb(verb):
            logger.warning(f"Refusing unknown activity verb '{verb}' for community {community_id}")
            return

        payload = dict(metadata or {})
        actor_id = getattr(actor, "pk", actor)

        def _write():
            try:
                CommunityActivity.objects.create(
                    community_id=community_id,
                    actor_id=actor_id,
                    verb=verb,
                    metadata=payload,
                )
            except Exception as e:
                logger.warning(f"Failed to append {verb} to community {community_id} feed: {e}")

        transaction.on_commit(_write)


def get_active_community_id_for_user(user):
    """
    Returns the ID of the user's active/default community, or None if not set.
    """
    membership = (
        CommunityMembership.objects
        .filter(user=user, is_active=True, is_default=True, community__is_active=True)
        .only("community_id")
        .first()
    )
    return membership.community_id if membership else None


def user_can_manage_community(user, community_id) -> bool:
    """
    True if the user is an owner/admin of the given community.
    """
    if not user or not user.is_authenticated:
        return False
    if user.is_staff:
        return True
    return CommunityMembership.objects.filter(
        community_id=community_id,
        user=user,
        is_active=True,
        role__in=[CommunityMembership.ROLE_OWNER, CommunityMembership.ROLE_ADMIN],
    ).exists()
