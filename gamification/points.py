# gamification/points.py
from decimal import Decimal, ROUND_HALF_UP

from .conf import get_setting

DIFFICULTY_EASY = "easy"
DIFFICULTY_MEDIUM = "medium"
DIFFICULTY_HARD = "hard"

DIFFICULTY_MULTIPLIERS = {
    DIFFICULTY_EASY: 1.0,
    DIFFICULTY_MEDIUM: 1.5,
    DIFFICULTY_HARD: 2.0,
}

# (minimum streak, multiplier), highest threshold first. Capped at 2x.
STREAK_MULTIPLIERS = [
    (30, 2.0),
    (14, 1.5),
    (7, 1.25),
]

STREAK_BONUS_THRESHOLD = 7

# Compliance certificates
COMPLIANCE_ON_TIME_POINTS = 150
COMPLIANCE_LATE_POINTS = 50
COMPLIANCE_CONSISTENCY_BONUS = 50

# Pollution reports by severity
REPORT_POINTS = {
    "mild": 20,
    "heavy": 35,
    "severe": 50,
}


def round_half_up(value) -> int:
    """round() in Python is banker's rounding; points always round .5 up."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def difficulty_multiplier(difficulty: str) -> float:
    return DIFFICULTY_MULTIPLIERS.get(difficulty, 1.0)


def streak_multiplier(streak: int) -> float:
    for threshold, multiplier in STREAK_MULTIPLIERS:
        if streak >= threshold:
            return multiplier
    return 1.0


def points(base_points: int, co2_saved_kg: float, difficulty: str, streak: int = 0) -> int:
    """
    Mission reward.

    The streak multiplier scales the base reward, the difficulty multiplier
    scales the CO2 bonus term.
    """
    base = round_half_up(base_points * streak_multiplier(streak))
    co2_bonus = round_half_up(co2_saved_kg * difficulty_multiplier(difficulty))
    return base + co2_bonus


def crossed_streak_bonus(previous_streak: int, new_streak: int) -> bool:
    return previous_streak < STREAK_BONUS_THRESHOLD <= new_streak


def streak_bonus_points() -> int:
    return get_setting("STREAK_7_BONUS")


def daily_tier_bonus_points() -> int:
    return get_setting("DAILY_TIER_BONUS")


def compliance_points(is_on_time: bool, previous_on_time_streak: int = 0) -> int:
    """
    previous_on_time_streak: how many of the vehicle's immediately preceding
    records were on time (only the last two matter).
    """
    if not is_on_time:
        return COMPLIANCE_LATE_POINTS
    total = COMPLIANCE_ON_TIME_POINTS
    if previous_on_time_streak >= 2:
        total += COMPLIANCE_CONSISTENCY_BONUS
    return total


def report_points(severity: str) -> int:
    return REPORT_POINTS.get(severity, REPORT_POINTS["mild"])
