import logging
from typing import List, Dict, Any, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.user_profile import UserProfile
from app.models.workout import Workout
from app.services.errors import UpstreamUnavailableError
from app.services.exercise_api_service import ExerciseAPIService, exercise_api_service, is_walking_related
from app.utils.walking_calc import (
    calculate_calories, estimate_target_distance, get_base_duration,
)
from app.utils.workout_mapping import (
    candidate_categories, difficulty_to_intensity, fitness_level_to_api_difficulty,
    fitness_level_to_intensity, normalize_fitness_level, plan_category_for_profile,
    resolve_workout_category, FITNESS_LEVELS,
)

logger = logging.getLogger(__name__)

"""
Workout Catalog Service
-----------------------
Keeps the catalog of walking workouts stocked for plan generation.
1. Selects the candidate pool that fits a profile.
2. Tops the catalog up from the exercise provider, or from built-in
   templates when the provider is down.
3. Adds walks tailored to the profile (morning / lunch / evening / weekend).
"""

CANDIDATE_POOL_LIMIT = 15
MIN_CANDIDATES = 5
MAX_CREATED_WORKOUTS = 8

BUILTIN_WALKING_WORKOUTS = [
    {
        "name": "Morning Energy Walk",
        "instructions": "Start your day with a brisk 20-30 minute walk. Focus on maintaining steady pace and deep breathing.",
        "difficulty": "beginner",
        "duration": 25,
        "calories": 150,
    },
    {
        "name": "Post-Lunch Digestive Walk",
        "instructions": "Take a gentle 15-20 minute walk after lunch to aid digestion and boost afternoon energy.",
        "difficulty": "beginner",
        "duration": 15,
        "calories": 100,
    },
    {
        "name": "Evening Stress Relief Walk",
        "instructions": "Wind down with a peaceful 30-40 minute walk. Focus on relaxation and mindfulness.",
        "difficulty": "beginner",
        "duration": 35,
        "calories": 200,
    },
    {
        "name": "Interval Power Walk",
        "instructions": "Alternate between 2 minutes fast walking and 1 minute normal pace for 30 minutes.",
        "difficulty": "intermediate",
        "duration": 30,
        "calories": 250,
    },
    {
        "name": "Hill Walking Challenge",
        "instructions": "Find inclined paths or use treadmill incline. Walk uphill for cardio boost and leg strengthening.",
        "difficulty": "intermediate",
        "duration": 40,
        "calories": 300,
    },
    {
        "name": "Long Distance Walk",
        "instructions": "Extended 45-60 minute walk at comfortable pace. Great for endurance building.",
        "difficulty": "advanced",
        "duration": 60,
        "calories": 400,
    },
]

# name, description, duration offset from the base duration (minutes), floor, time of day
CUSTOM_WALK_VARIANTS = [
    ("Morning Energizer Walk", "Start your day with energy-boosting walk", 0, None, "morning"),
    ("Lunch Break Walk", "Quick refreshing walk during lunch break", -10, 15, "afternoon"),
    ("Evening Wind-Down Walk", "Relaxing walk to end your day peacefully", 5, None, "evening"),
    ("Weekend Adventure Walk", "Longer exploratory walk for weekends", 15, None, "any"),
]

VALID_RECOMMENDATIONS = ('weight_loss', 'beginners', 'intermediate', 'advanced', 'heart_health', 'stress_relief')


def get_recommendations(exercise: Dict[str, Any]) -> List[str]:
    """Audience tags for a workout, restricted to the known vocabulary."""
    recommendations = []
    difficulty = exercise.get("difficulty") or 'beginner'
    if difficulty in FITNESS_LEVELS:
        recommendations.append('beginners' if difficulty == 'beginner' else difficulty)

    goals = exercise.get("goals") or []
    if 'lose_weight' in goals or 'weight_loss' in goals:
        recommendations.append('weight_loss')
    if 'improve_heart_health' in goals:
        recommendations.append('heart_health')
    if 'relieve_stress' in goals:
        recommendations.append('stress_relief')

    return [r for r in recommendations if r in VALID_RECOMMENDATIONS]


def generate_walking_instructions(description: str, duration: int, profile: UserProfile) -> str:
    instructions = f"{description}. "

    if duration <= 20:
        instructions += "Keep a steady, comfortable pace throughout. "
    elif duration <= 40:
        instructions += "Start with 5 minutes warm-up, maintain brisk pace in middle, cool down in last 5 minutes. "
    else:
        instructions += ("Begin with 5-minute warm-up, maintain moderate pace for majority, "
                         "include 2-3 brief fast intervals, end with 5-minute cool-down. ")

    goals = profile.fitness_goals or []
    if 'lose_weight' in goals:
        instructions += "Focus on maintaining consistent pace to maximize calorie burn. "
    if 'improve_heart_health' in goals:
        instructions += "Monitor your heart rate and aim for moderate intensity. "
    if 'stress_reduction' in (profile.focus_areas or []):
        instructions += "Practice deep breathing and mindfulness while walking. "

    level = normalize_fitness_level(profile.fitness_level)
    if level == 'beginner':
        instructions += "Listen to your body and take breaks if needed. Gradually increase pace as you get comfortable."
    elif level == 'intermediate':
        instructions += "Challenge yourself with slight inclines or speed intervals."
    else:
        instructions += "Incorporate hills, stairs, or interval training for maximum benefit."

    return instructions


def get_builtin_walking_workouts(difficulty: Optional[str] = None) -> List[Dict[str, Any]]:
    if not difficulty:
        return list(BUILTIN_WALKING_WORKOUTS)
    return [w for w in BUILTIN_WALKING_WORKOUTS if w["difficulty"] == difficulty]


def create_custom_walking_workouts(profile: UserProfile) -> List[Dict[str, Any]]:
    """Four walks sized from the profile's daily walking time and body weight."""
    base_duration = get_base_duration(profile.daily_walking_time)
    level = normalize_fitness_level(profile.fitness_level)

    workouts = []
    for name, description, offset, floor, time_of_day in CUSTOM_WALK_VARIANTS:
        duration = base_duration + offset
        if floor is not None:
            duration = max(floor, duration)
        workouts.append({
            "name": name,
            "instructions": generate_walking_instructions(description, duration, profile),
            "difficulty": level,
            "duration": duration,
            "calories": calculate_calories(duration, profile.current_weight),
            "goals": profile.fitness_goals or ['general_fitness'],
            "time_of_day": time_of_day,
        })
    return workouts


def find_workout_by_name(db: Session, name: str) -> Optional[Workout]:
    return db.query(Workout).filter(func.lower(Workout.name) == name.lower()).first()


def create_workout_from_exercise(db: Session, exercise: Dict[str, Any], category: Optional[str] = None) -> Workout:
    """
    Returns the catalog workout for an exercise, creating it on first sight.
    Names are unique case-insensitively. Raises ValueError for an exercise
    that is not walking-related.
    """
    existing = find_workout_by_name(db, exercise["name"])
    if existing:
        return existing

    if not is_walking_related(exercise):
        raise ValueError(f"Exercise is not walking-related: {exercise.get('name')}")

    duration = exercise.get("duration") or 30
    workout = Workout(
        name=exercise["name"],
        description=exercise.get("instructions") or f"{exercise['name']} workout",
        type="walk",
        category=resolve_workout_category(category, exercise.get("difficulty")),
        intensity=difficulty_to_intensity(exercise.get("difficulty")),
        duration=duration,
        estimated_calories=exercise.get("calories") or calculate_calories(duration),
        target_distance=estimate_target_distance(duration),
        includes_warmup=True,
        includes_cooldown=True,
        image=exercise.get("image") or "default-walking.jpg",
        recommended_for=get_recommendations(exercise),
    )
    db.add(workout)
    db.flush()
    logger.info(f"[CATALOG] Created workout '{workout.name}' ({workout.category}/{workout.intensity})")
    return workout


def fetch_and_create_walking_workouts(
    db: Session,
    profile: UserProfile,
    exercise_client: ExerciseAPIService = exercise_api_service,
) -> List[Workout]:
    """
    Tops the catalog up with up to 8 walking workouts for a profile:
    provider exercises (or built-in templates when the provider fails or
    has nothing) followed by the profile's custom walks.
    """
    level = normalize_fitness_level(profile.fitness_level)
    try:
        exercises = exercise_client.fetch_walking_exercises(fitness_level_to_api_difficulty(level))
    except UpstreamUnavailableError as e:
        logger.warning(f"[CATALOG] Exercise provider unavailable, using built-in walks: {e.message}")
        exercises = []

    if not exercises:
        exercises = get_builtin_walking_workouts(level)

    category = plan_category_for_profile(profile.fitness_goals, profile.fitness_level)
    candidates = exercises + create_custom_walking_workouts(profile)

    workouts = []
    for exercise in candidates[:MAX_CREATED_WORKOUTS]:
        try:
            workout = create_workout_from_exercise(db, exercise, category)
        except ValueError as e:
            logger.info(f"[CATALOG] Skipping exercise: {e}")
            continue
        if workout not in workouts:
            workouts.append(workout)

    db.commit()
    logger.info(f"[CATALOG] {len(workouts)} walking workouts available after top-up for user {profile.user_id}")
    return workouts


def get_walking_workouts_for_profile(db: Session, profile: UserProfile) -> List[Workout]:
    """
    Candidate pool for a profile: walks matching its intensity and
    categories, falling back to any walk when fewer than 5 match.
    """
    query = db.query(Workout).filter(
        Workout.type == "walk",
        Workout.intensity == fitness_level_to_intensity(profile.fitness_level),
        Workout.category.in_(candidate_categories(profile.fitness_goals, profile.fitness_level)),
    )
    workouts = query.order_by(Workout.id).limit(CANDIDATE_POOL_LIMIT).all()

    if len(workouts) < MIN_CANDIDATES:
        workouts = db.query(Workout).filter(Workout.type == "walk").order_by(Workout.id).limit(CANDIDATE_POOL_LIMIT).all()

    return workouts
