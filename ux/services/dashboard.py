# ux/services/dashboard.py

from core.models import Community
from core.services import get_active_community_id_for_user
from gamification.challenges import ChallengeContributionAggregator
from gamification.datetime_utils import now, date_key
from gamification.milestones import MilestoneLifecycleManager
from gamification.points import streak_multiplier
from gamification.progress import ProgressStore
from missions.models import MissionCompletion
from notifications.models import Notification


def get_dashboard_summary(user, clock=now):
    today = date_key(clock())

    # 1️⃣ Progress (lapsed streaks are zeroed on read)
    progress = ProgressStore.refresh_streak(user, clock=clock)

    # 2️⃣ Today
    missions_today = MissionCompletion.objects.filter(user=user, date_key=today).count()

    # 3️⃣ Milestones
    milestones = MilestoneLifecycleManager(clock=clock).get_active_milestones(user)
    closest = max(milestones, key=lambda m: m["progress"]["percent_complete"], default=None)

    # 4️⃣ Community challenge
    community_id = get_active_community_id_for_user(user)
    community = None
    if community_id is not None:
        c = Community.objects.get(pk=community_id)
        community = {
            "id": c.id,
            "name": c.name,
            "total_co2_saved_kg": c.total_co2_saved_kg,
            "challenge": ChallengeContributionAggregator(clock=clock).get_current_challenge(c),
        }

    # 5️⃣ Notifications
    unread_notifications = Notification.objects.filter(
        user=user,
        is_read=False,
    ).count()

    return {
        "total_points": progress.total_points,
        "total_co2_saved_kg": round(progress.total_co2_saved_kg, 2),
        "current_streak": progress.current_streak,
        "longest_streak": progress.longest_streak,
        "streak_multiplier": streak_multiplier(progress.current_streak),
        "badges_earned": user.badges.count(),
        "missions_completed": progress.missions_count,
        "missions_today": missions_today,
        "active_milestones": len(milestones),
        "closest_milestone": closest,
        "community": community,
        "unread_notifications": unread_notifications,
    }
