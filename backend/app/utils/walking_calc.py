import math
from typing import Optional

DEFAULT_BODY_WEIGHT_KG = 70.0
WALKING_SPEED_KMH = 4.0

# Base walk length (minutes) per intake answer for "how long do you walk daily"
DAILY_WALKING_TIME_MINUTES = {
    'less_than_20_mins': 15,
    '20_60_mins': 30,
    '1_2_hours': 45,
    'more_than_2_hours': 45,
}
DEFAULT_BASE_DURATION = 25

# Minimum daily step target per fitness level
LEVEL_STEP_MINIMUMS = {
    'beginner': 5000,
    'intermediate': 7500,
    'advanced': 10000,
}
WEEKLY_STEP_INCREMENT_RATE = 0.05


def get_base_duration(daily_walking_time: Optional[str]) -> int:
    """Base walk duration in minutes derived from the intake walking-time bucket."""
    return DAILY_WALKING_TIME_MINUTES.get(daily_walking_time, DEFAULT_BASE_DURATION)


def calculate_calories(duration_min: float, weight_kg: Optional[float] = None) -> int:
    """
    Rough walking burn: 0.05 kcal per minute per kg of body weight.
    Falls back to a 70 kg walker when the weight is unknown.
    """
    weight = weight_kg or DEFAULT_BODY_WEIGHT_KG
    return round(duration_min * weight * 0.05)


def estimate_target_distance(duration_min: float) -> float:
    """Distance in km covered at a 4 km/h walking pace."""
    return duration_min * WALKING_SPEED_KMH / 60.0


def calculate_step_progression(step_goal: Optional[int], fitness_level: str) -> tuple:
    """
    Returns (starting_steps, weekly_increment) for a plan.

    The starting target never drops below the level minimum; the weekly
    increment is 5% of the starting target, rounded down.
    """
    minimum = LEVEL_STEP_MINIMUMS.get(fitness_level, LEVEL_STEP_MINIMUMS['beginner'])
    starting_steps = max(step_goal or minimum, minimum)
    weekly_increment = math.floor(starting_steps * WEEKLY_STEP_INCREMENT_RATE)
    return starting_steps, weekly_increment


def calculate_pace_seconds_per_km(duration_sec: float, distance_m: float) -> Optional[float]:
    """Pace in seconds per km; None without a positive distance and duration."""
    if not distance_m or not duration_sec:
        return None
    return duration_sec / (distance_m / 1000.0)


def format_pace(duration_min: float, distance_km: float) -> Optional[str]:
    """Human pace string such as "5:30/km"."""
    if not distance_km or not duration_min:
        return None
    pace_min = duration_min / distance_km
    minutes = int(pace_min)
    seconds = int(round((pace_min - minutes) * 60))
    if seconds == 60:
        minutes, seconds = minutes + 1, 0
    return f"{minutes}:{seconds:02d}/km"


def calculate_bmi(weight_kg: float, height_cm: float) -> float:
    height_m = height_cm / 100.0
    return round(weight_kg / (height_m * height_m), 1)


def classify_bmi(bmi: float) -> str:
    if bmi < 18.5:
        return 'underweight'
    if bmi < 25:
        return 'normal'
    if bmi < 30:
        return 'overweight'
    return 'obese'
