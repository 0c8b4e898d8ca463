# core/constants.py

# --- Community Activity Verbs (Standard Registry) ---

# Rewarded actions
ACTIVITY_MISSION_COMPLETED = "mission.completed"
ACTIVITY_COMPLIANCE_LOGGED = "compliance.logged"
ACTIVITY_POLLUTION_REPORTED = "pollution.reported"

# Rewards
ACTIVITY_BADGE_EARNED = "badge.earned"
ACTIVITY_MILESTONE_COMPLETED = "milestone.completed"

# Community
ACTIVITY_MEMBER_JOINED = "community.joined"
ACTIVITY_CHALLENGE_STARTED = "challenge.started"
ACTIVITY_CHALLENGE_COMPLETED = "challenge.completed"

ACTIVITY_VERBS = [
    ACTIVITY_MISSION_COMPLETED,
    ACTIVITY_COMPLIANCE_LOGGED,
    ACTIVITY_POLLUTION_REPORTED,
    ACTIVITY_BADGE_EARNED,
    ACTIVITY_MILESTONE_COMPLETED,
    ACTIVITY_MEMBER_JOINED,
    ACTIVITY_CHALLENGE_STARTED,
    ACTIVITY_CHALLENGE_COMPLETED,
]


def is_valid_verb(verb: str) -> bool:
    """Check if a verb is a registered community activity verb."""
    return verb in ACTIVITY_VERBS
