"""
Workout Mapping
---------------
Single place where profile vocabulary (fitness levels, goal strings,
upstream exercise difficulties) is translated into catalog vocabulary
(intensity and category). Every function here is total: unknown input
falls through to an explicit default.
"""
from typing import Iterable, List, Optional

from app.models.workout import WORKOUT_CATEGORIES

FITNESS_LEVELS = ('beginner', 'intermediate', 'advanced')
DEFAULT_FITNESS_LEVEL = 'beginner'
DEFAULT_CATEGORY = 'weight_loss'

LEVEL_INTENSITY = {
    'beginner': 'light',
    'intermediate': 'moderate',
    'advanced': 'intense',
}

# Upstream exercise difficulty -> catalog intensity
DIFFICULTY_INTENSITY = {
    'beginner': 'light',
    'intermediate': 'moderate',
    'advanced': 'intense',
    'expert': 'intense',
}

# Profile goal -> catalog category. Goals not listed have no category of their own.
GOAL_CATEGORY = {
    'lose_weight': 'weight_loss',
    'weight_loss': 'weight_loss',
}


def normalize_fitness_level(fitness_level: Optional[str]) -> str:
    level = (fitness_level or '').lower().strip()
    return level if level in FITNESS_LEVELS else DEFAULT_FITNESS_LEVEL


def fitness_level_to_intensity(fitness_level: Optional[str]) -> str:
    return LEVEL_INTENSITY[normalize_fitness_level(fitness_level)]


def difficulty_to_intensity(difficulty: Optional[str]) -> str:
    return DIFFICULTY_INTENSITY.get((difficulty or '').lower(), 'moderate')


def fitness_level_to_api_difficulty(fitness_level: Optional[str]) -> str:
    """The exercise provider calls its top tier "expert"."""
    level = normalize_fitness_level(fitness_level)
    return 'expert' if level == 'advanced' else level


def goal_to_category(goal: Optional[str]) -> Optional[str]:
    return GOAL_CATEGORY.get((goal or '').lower())


def resolve_workout_category(requested: Optional[str], difficulty: Optional[str] = None) -> str:
    """
    Maps a requested category, a goal string or nothing at all onto a valid
    catalog category.

    Order: a valid category as-is, then a known goal, then the difficulty
    when it names a fitness level, then the default category.
    """
    if requested in WORKOUT_CATEGORIES:
        return requested

    from_goal = goal_to_category(requested)
    if from_goal:
        return from_goal

    if difficulty in FITNESS_LEVELS:
        return difficulty

    return DEFAULT_CATEGORY


def candidate_categories(fitness_goals: Optional[Iterable[str]], fitness_level: Optional[str]) -> List[str]:
    """
    Categories a profile's candidate pool is drawn from: the goal category
    (if any goal maps to one), the fitness level, and always "free".
    """
    categories = []
    for goal in fitness_goals or []:
        category = goal_to_category(goal)
        if category and category not in categories:
            categories.append(category)

    categories.append(normalize_fitness_level(fitness_level))
    categories.append('free')
    return categories


def plan_category_for_profile(fitness_goals: Optional[Iterable[str]], fitness_level: Optional[str]) -> str:
    """Category stamped on workouts synthesized for a profile."""
    goals = list(fitness_goals or [])
    if any(goal_to_category(goal) == 'weight_loss' for goal in goals):
        return 'weight_loss'
    if goals:
        return normalize_fitness_level(fitness_level)
    return DEFAULT_CATEGORY
