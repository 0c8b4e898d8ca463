# gamification/challenges.py
import logging
from datetime import timedelta

from django.db import IntegrityError, transaction
from django.db.models import F, Q

from core.constants import ACTIVITY_CHALLENGE_COMPLETED, ACTIVITY_CHALLENGE_STARTED
from core.services import ActivityFeed

from .conf import get_setting
from .datetime_utils import now
from .models import ChallengeParticipant, CommunityChallenge
from .points import round_half_up
from .state_machine import transition

logger = logging.getLogger("ecoact.gamification")

HISTORY_LIMIT = 20


def progress_percent(current_co2_kg: float, goal_co2_kg: float) -> int:
    """Display value only; current_co2_kg itself may exceed the goal."""
    if goal_co2_kg <= 0:
        return 0
    return min(100, round_half_up(current_co2_kg / goal_co2_kg * 100))


def time_remaining(end_at, current):
    """(whole days, leftover hours) until end_at, floored and never negative."""
    seconds = max(0, int((end_at - current).total_seconds()))
    return seconds // 86400, (seconds % 86400) // 3600


class ChallengeContributionAggregator:
    def __init__(self, clock=now):
        self.clock = clock

    def pick_template(self, community):
        templates = get_setting("CHALLENGE_TEMPLATES")
        index = CommunityChallenge.objects.filter(community=community).count() % len(templates)
        return templates[index]

    def _expire_stale(self, community, current):
        stale = CommunityChallenge.objects.expired(current).filter(community=community)
        count = stale.update(status=CommunityChallenge.STATUS_FAILED)
        if count:
            logger.info(f"Expired {count} challenges for community {community.pk}")
        return count

    def ensure_active(self, community):
        """
        Return the community's running challenge, creating one from the
        template rotation when none is active. Returns (challenge, created).
        """
        current = self.clock()
        self._expire_stale(community, current)

        existing = CommunityChallenge.objects.find_active(community).first()
        if existing:
            return existing, False

        title, description, goal, duration_days = self.pick_template(community)
        try:
            with transaction.atomic():
                challenge = CommunityChallenge.objects.create(
                    community=community,
                    title=title,
                    description=description,
                    goal_co2_kg=goal,
                    start_at=current,
                    end_at=current + timedelta(days=duration_days),
                )
        except IntegrityError:
            # Another request created it first
            return CommunityChallenge.objects.find_active(community).get(), False

        logger.info(f"Challenge started: community={community.pk}, challenge={challenge.pk}, goal={goal}")
        ActivityFeed.append(
            community.pk,
            ACTIVITY_CHALLENGE_STARTED,
            metadata={"challenge_id": challenge.pk, "title": challenge.title, "goal_co2_kg": goal},
        )
        return challenge, True

    def create_challenge(self, community, title, goal_co2_kg, duration_days, description="", created_by=None):
        """
        Custom challenge set up by a community manager. Returns None when a
        challenge is already running.
        """
        current = self.clock()
        self._expire_stale(community, current)
        try:
            with transaction.atomic():
                challenge = CommunityChallenge.objects.create(
                    community=community,
                    title=title,
                    description=description,
                    goal_co2_kg=goal_co2_kg,
                    start_at=current,
                    end_at=current + timedelta(days=duration_days),
                    created_by=created_by,
                )
        except IntegrityError:
            return None

        logger.info(f"Custom challenge created: community={community.pk}, challenge={challenge.pk}")
        ActivityFeed.append(
            community.pk,
            ACTIVITY_CHALLENGE_STARTED,
            actor=created_by,
            metadata={"challenge_id": challenge.pk, "title": challenge.title, "goal_co2_kg": goal_co2_kg},
        )
        return challenge

    def apply_contribution(self, community, co2_kg, user=None):
        """
        Add co2_kg to the active in-window challenge.
        Returns (challenge, just_completed); challenge is None when nothing is running.
        """
        current = self.clock()
        challenge = CommunityChallenge.objects.find_active(community, current).first()
        if challenge is None or co2_kg <= 0:
            return challenge, False

        updates = {"current_co2_kg": F("current_co2_kg") + co2_kg}

        if user is not None:
            participant, joined = ChallengeParticipant.objects.get_or_create(challenge=challenge, user=user)
            ChallengeParticipant.objects.filter(pk=participant.pk).update(
                co2_contributed_kg=F("co2_contributed_kg") + co2_kg
            )
            if joined:
                updates["participant_count"] = F("participant_count") + 1

        CommunityChallenge.objects.filter(pk=challenge.pk).update(**updates)
        challenge.refresh_from_db(fields=["current_co2_kg", "participant_count", "status"])

        just_completed = False
        if challenge.status == CommunityChallenge.STATUS_ACTIVE and challenge.current_co2_kg >= challenge.goal_co2_kg:
            just_completed = transition(
                CommunityChallenge.objects,
                challenge,
                CommunityChallenge.STATUS_COMPLETED,
                guard=Q(current_co2_kg__gte=F("goal_co2_kg")),
                completed_at=current,
            )
            if just_completed:
                logger.info(f"Challenge completed: community={community.pk}, challenge={challenge.pk}")
                ActivityFeed.append(
                    community.pk,
                    ACTIVITY_CHALLENGE_COMPLETED,
                    metadata={
                        "challenge_id": challenge.pk,
                        "title": challenge.title,
                        "current_co2_kg": challenge.current_co2_kg,
                        "participant_count": challenge.participant_count,
                    },
                )

        return challenge, just_completed

    def sweep_expired(self) -> int:
        count = CommunityChallenge.objects.expired(self.clock()).update(
            status=CommunityChallenge.STATUS_FAILED
        )
        if count:
            logger.info(f"Expired {count} challenges")
        return count

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def challenge_view(self, challenge, current=None):
        current = current or self.clock()
        days, hours = time_remaining(challenge.end_at, current)
        return {
            "id": challenge.id,
            "community": challenge.community_id,
            "title": challenge.title,
            "description": challenge.description,
            "goal_co2_kg": challenge.goal_co2_kg,
            "current_co2_kg": challenge.current_co2_kg,
            "progress_percent": progress_percent(challenge.current_co2_kg, challenge.goal_co2_kg),
            "participant_count": challenge.participant_count,
            "status": challenge.status,
            "start_at": challenge.start_at,
            "end_at": challenge.end_at,
            "completed_at": challenge.completed_at,
            "days_remaining": days,
            "hours_remaining": hours,
        }

    def get_current_challenge(self, community):
        self.ensure_active(community)
        current = self.clock()
        challenge = CommunityChallenge.objects.find_active(community, current).first()
        if challenge is None:
            challenge = (
                CommunityChallenge.objects
                .filter(community=community, status=CommunityChallenge.STATUS_COMPLETED)
                .order_by("-completed_at")
                .first()
            )
        if challenge is None:
            return None
        return self.challenge_view(challenge, current)

    def get_history(self, community):
        qs = CommunityChallenge.objects.filter(community=community).order_by("-start_at")[:HISTORY_LIMIT]
        current = self.clock()
        return [self.challenge_view(c, current) for c in qs]
