# gamification/badges.py
"""
Badge catalog and evaluator.

Badges are data: each entry pairs an id with a predicate over a
StatSnapshot. Adding a badge means appending to BADGE_CATALOG.
"""
from collections import namedtuple
from typing import Callable, Iterable, Optional, Set


StatSnapshot = namedtuple(
    "StatSnapshot",
    [
        "total_co2_saved_kg",
        "missions_count",
        "current_streak",
        "has_community",
        "compliance_on_time_count",
        "pollution_report_count",
    ],
)


class BadgeDefinition:
    def __init__(self, id: str, label: str, description: str, icon: str = "",
                 predicate: Optional[Callable[[StatSnapshot], bool]] = None):
        self.id = id
        self.label = label
        self.description = description
        self.icon = icon
        # None means the badge is only granted as a milestone reward
        self.predicate = predicate

    def is_earned(self, snapshot: StatSnapshot) -> bool:
        return self.predicate is not None and bool(self.predicate(snapshot))

    def __repr__(self):
        return f"<BadgeDefinition {self.id}>"


BADGE_CATALOG = (
    # Missions
    BadgeDefinition("first-step", "First Step", "Complete your first mission", "🌱",
                    lambda s: s.missions_count >= 1),

    # CO2 saved
    BadgeDefinition("bronze-10kg", "Bronze Saver", "Save 10 kg of CO2", "🥉",
                    lambda s: s.total_co2_saved_kg >= 10),
    BadgeDefinition("silver-50kg", "Silver Saver", "Save 50 kg of CO2", "🥈",
                    lambda s: s.total_co2_saved_kg >= 50),
    BadgeDefinition("gold-100kg", "Gold Saver", "Save 100 kg of CO2", "🥇",
                    lambda s: s.total_co2_saved_kg >= 100),
    BadgeDefinition("climate-warrior-500kg", "Climate Warrior", "Save 500 kg of CO2", "🌍",
                    lambda s: s.total_co2_saved_kg >= 500),

    # Streaks
    BadgeDefinition("streak-7", "Week Warrior", "Keep a 7 day streak", "🔥",
                    lambda s: s.current_streak >= 7),
    BadgeDefinition("streak-30", "Habit Hero", "Keep a 30 day streak", "⚡",
                    lambda s: s.current_streak >= 30),

    # Community
    BadgeDefinition("community-builder", "Community Builder", "Join a community", "🤝",
                    lambda s: s.has_community),

    # Vehicle compliance (on-time certificates)
    BadgeDefinition("puc-first", "Clean Rider", "Log your first on-time emission certificate", "🚗",
                    lambda s: s.compliance_on_time_count >= 1),
    BadgeDefinition("puc-5", "Compliance Champ", "Log 5 on-time emission certificates", "✅",
                    lambda s: s.compliance_on_time_count >= 5),
    BadgeDefinition("puc-10", "Emission Guardian", "Log 10 on-time emission certificates", "🛡️",
                    lambda s: s.compliance_on_time_count >= 10),

    # Pollution reports
    BadgeDefinition("reporter-first", "Watchful Eye", "Submit your first pollution report", "👀",
                    lambda s: s.pollution_report_count >= 1),
    BadgeDefinition("reporter-10", "Air Watcher", "Submit 10 pollution reports", "📣",
                    lambda s: s.pollution_report_count >= 10),
    BadgeDefinition("reporter-50", "Clean Air Advocate", "Submit 50 pollution reports", "🏅",
                    lambda s: s.pollution_report_count >= 50),
    BadgeDefinition("reporter-100", "Air Quality Hero", "Submit 100 pollution reports", "🏆",
                    lambda s: s.pollution_report_count >= 100),

    # Milestone rewards
    BadgeDefinition("weekly-co2-champion", "Weekly CO2 Champion", "Hit a weekly CO2 milestone", "📅"),
    BadgeDefinition("monthly-co2-champion", "Monthly CO2 Champion", "Hit a monthly CO2 milestone", "🗓️"),
    BadgeDefinition("mission-marathoner", "Mission Marathoner", "Hit a missions milestone", "🏃"),
    BadgeDefinition("streak-keeper", "Streak Keeper", "Stay active through a monthly streak milestone", "🔁"),
)

BADGES_BY_ID = {badge.id: badge for badge in BADGE_CATALOG}


def newly_earned(snapshot: StatSnapshot, already_owned: Iterable[str]) -> Set[str]:
    """
    Ids of every badge whose predicate holds for the snapshot, minus the
    ones the user already owns.
    """
    owned = set(already_owned)
    return {badge.id for badge in BADGE_CATALOG if badge.is_earned(snapshot)} - owned


def badge_label(badge_id: str) -> str:
    badge = BADGES_BY_ID.get(badge_id)
    return badge.label if badge else badge_id
