# gamification/conf.py
"""
Engine tunables.

Every value can be overridden from the ``ECOACT`` dict in Django settings:

    ECOACT = {"DAILY_REPORT_LIMIT": 5}
"""
from django.conf import settings

DEFAULTS = {
    # Pollution reports accepted per user per UTC day
    "DAILY_REPORT_LIMIT": 10,
    # How many recent completions the daily pool avoids repeating
    "RECENT_MISSION_WINDOW": 10,
    # Flat bonuses, never multiplied
    "DAILY_TIER_BONUS": 25,
    "STREAK_7_BONUS": 50,
    # Community challenge rotation: (title, description, goal_co2_kg, duration_days)
    "CHALLENGE_TEMPLATES": [
        ("Save 500 kg CO2 This Week", "Every mission counts. Bike, eat green, unplug. Together we hit 500 kg.", 500, 7),
        ("Hit 1,000 kg This Month", "Our biggest challenge yet. 30 days, 1,000 kg, one community.", 1000, 30),
        ("100 kg Weekend Sprint", "Just 48 hours. Make every action count this weekend.", 100, 2),
        ("Green Week: 250 kg Challenge", "Can we save 250 kg together in 7 days? Start with one mission today.", 250, 7),
    ],
    # Push delivery
    "EXPO_PUSH_URL": "https://exp.host/--/api/v2/push/send",
    "EXPO_PUSH_ACCESS_TOKEN": "",
    "PUSH_TIMEOUT_SECONDS": 5,
}


def get_setting(name):
    overrides = getattr(settings, "ECOACT", None) or {}
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
