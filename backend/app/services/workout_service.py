import logging
from typing import List, Dict, Any, Optional, Tuple
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from datetime import date, datetime, timedelta

from app.crud.daily_workout import upsert_daily_workout, delete_daily_workouts_from
from app.crud.workout_plan import get_active_plan
from app.models.daily_workout import DailyWorkout
from app.models.user_profile import UserProfile
from app.models.workout import Workout
from app.models.workout_plan import PersonalizedWorkoutPlan, PlanWorkoutAssignment
from app.models.workout_plan_history import WorkoutPlanHistory
from app.models.workout_schedule import WorkoutSchedule
from app.services.errors import ConflictError, NotFoundError
from app.services.exercise_api_service import ExerciseAPIService, exercise_api_service
from app.services.workout_catalog_service import (
    fetch_and_create_walking_workouts, get_walking_workouts_for_profile, MIN_CANDIDATES,
)
from app.utils.walking_calc import calculate_step_progression
from app.utils.workout_mapping import normalize_fitness_level
from config import DEFAULT_PLAN_WEEKS, MAX_PLAN_WEEKS

logger = logging.getLogger(__name__)

"""
Workout Service
---------------
Orchestrates the generation of Personalized Walking Plans.
1. Loads the user profile.
2. Assembles the candidate pool from the catalog (topping it up if thin).
3. Distributes workouts over 5 weekdays per week, round-robin.
4. Derives the weekly step-target progression.
5. Saves the plan and materializes it onto the calendar.
"""

DAYS_PER_WEEK = 5
NEW_PLAN_REASON = "New plan requested by user"
PROFILE_UPDATE_REASON = "Profile updated, new plan generated"
PROFILE_DELETED_REASON = "Profile deleted"


def distribute_workouts(pool: List[Workout], weeks: int) -> List[PlanWorkoutAssignment]:
    """
    One assignment per (week, weekday) for `weeks` weeks. Slot i, counted
    week-major from 0, gets pool[i % len(pool)].
    """
    if not pool:
        raise ValueError("Cannot distribute an empty workout pool")

    assignments = []
    for week in range(1, weeks + 1):
        for day in range(1, DAYS_PER_WEEK + 1):
            position = (week - 1) * DAYS_PER_WEEK + (day - 1)
            workout = pool[position % len(pool)]
            assignments.append(PlanWorkoutAssignment(
                workout=workout,
                week_number=week,
                scheduled_day=day,
                position=position,
            ))
    return assignments


def get_monday_anchor(day: date) -> date:
    """Monday on or before `day`."""
    return day - timedelta(days=day.weekday())


def _validate_weeks(weeks: int):
    if weeks < 1 or weeks > MAX_PLAN_WEEKS:
        raise ValueError(f"weeks must be between 1 and {MAX_PLAN_WEEKS}")


def _build_plan_name(weeks: int, goals: List[str]) -> str:
    focus = goals[0].replace('_', ' ') if goals else 'Fitness'
    return f"{weeks}-Week Walking Plan for {focus}"


def _get_profile(db: Session, user_id: int) -> UserProfile:
    profile = db.query(UserProfile).filter(UserProfile.user_id == user_id).first()
    if not profile:
        raise NotFoundError("User profile not found")
    return profile


def generate_personalized_plan(
    db: Session,
    user_id: int,
    weeks: int,
    now: datetime,
    exercise_client: ExerciseAPIService = exercise_api_service,
) -> PersonalizedWorkoutPlan:
    """
    Main orchestrator for walking plan generation.

    Raises NotFoundError without a profile and ConflictError while another
    plan is still active. The plan and its calendar are committed together.
    """
    _validate_weeks(weeks)
    logger.info(f"Generating {weeks}-week walking plan for user {user_id}")

    # 1. Profile
    profile = _get_profile(db, user_id)
    if get_active_plan(db, user_id, now):
        raise ConflictError("User already has an active workout plan")

    level = normalize_fitness_level(profile.fitness_level)
    goals = list(profile.fitness_goals or [])

    # 2. Candidate pool
    pool = get_walking_workouts_for_profile(db, profile)
    if len(pool) < MIN_CANDIDATES:
        logger.info(f"Only {len(pool)} candidate walks for user {user_id}, topping up the catalog")
        extra = fetch_and_create_walking_workouts(db, profile, exercise_client=exercise_client)
        pool.extend(w for w in extra if w not in pool)

    if not pool:
        raise NotFoundError("No walking workouts available for this profile")

    # 3-4. Cadence and step progression
    starting_steps, weekly_increment = calculate_step_progression(profile.step_goal, level)

    plan = PersonalizedWorkoutPlan(
        user_id=user_id,
        plan_name=_build_plan_name(weeks, goals),
        description=f"Custom walking workout plan based on your {profile.fitness_level or 'current'} fitness level",
        duration_weeks=weeks,
        start_date=now,
        end_date=now + timedelta(days=weeks * 7),
        fitness_goals_focused=goals or ['general_fitness'],
        progressive_overload=True,
        starting_steps=starting_steps,
        weekly_increment=weekly_increment,
        workouts=distribute_workouts(pool, weeks),
    )

    # 5. Save and materialize
    try:
        db.add(plan)
        db.flush()
        schedule_workouts(db, plan, now)
        db.commit()
    except IntegrityError as e:
        # A concurrent generation claimed the same calendar days first
        db.rollback()
        logger.warning(f"Plan generation for user {user_id} lost a race: {e.orig}")
        raise ConflictError("User already has an active workout plan")
    except Exception:
        db.rollback()
        raise

    db.refresh(plan)
    logger.info(
        f"Plan {plan.id} created for user {user_id}: {len(plan.workouts)} workouts, "
        f"{starting_steps} steps +{weekly_increment}/week"
    )
    return plan


def schedule_workouts(db: Session, plan: PersonalizedWorkoutPlan, now: datetime) -> List[WorkoutSchedule]:
    """
    Materializes a plan onto the calendar, anchored on the Monday of its
    start week. Entries dated today or later also get their DailyWorkout.

    A date already holding a live entry for the user keeps it; the plan
    assignment for that date is skipped.
    """
    anchor = get_monday_anchor(plan.start_date.date())
    today = now.date()

    live_dates = {
        row.date for row in db.query(WorkoutSchedule.date).filter(
            WorkoutSchedule.user_id == plan.user_id,
            WorkoutSchedule.status != "cancelled",
            WorkoutSchedule.date >= anchor,
            WorkoutSchedule.date < anchor + timedelta(days=plan.duration_weeks * 7),
        )
    }

    schedules = []
    for assignment in plan.workouts:
        entry_date = anchor + timedelta(days=(assignment.week_number - 1) * 7 + (assignment.scheduled_day - 1))
        if entry_date in live_dates:
            logger.info(f"User {plan.user_id} already has a live workout on {entry_date}, keeping it")
            continue

        target_steps = plan.starting_steps + (assignment.week_number - 1) * plan.weekly_increment
        entry = WorkoutSchedule(
            user_id=plan.user_id,
            workout_id=assignment.workout_id,
            plan_id=plan.id,
            date=entry_date,
            status="scheduled",
            target_steps=target_steps,
            notes=f"Week {assignment.week_number} walking workout",
        )
        db.add(entry)
        db.flush()
        schedules.append(entry)

        if entry_date >= today:
            upsert_daily_workout(db, plan.user_id, entry_date, assignment.workout_id, entry.id, target_steps)

    logger.info(f"Scheduled {len(schedules)} workouts for plan {plan.id} from {anchor}")
    return schedules


def snapshot_plan(plan: PersonalizedWorkoutPlan) -> Dict[str, Any]:
    return {
        "id": plan.id,
        "plan_name": plan.plan_name,
        "description": plan.description,
        "duration_weeks": plan.duration_weeks,
        "start_date": plan.start_date.isoformat(),
        "end_date": plan.end_date.isoformat(),
        "fitness_goals_focused": plan.fitness_goals_focused,
        "progressive_overload": plan.progressive_overload,
        "starting_steps": plan.starting_steps,
        "weekly_increment": plan.weekly_increment,
        "workouts": [
            {
                "workout_id": a.workout_id,
                "week_number": a.week_number,
                "scheduled_day": a.scheduled_day,
                "position": a.position,
            }
            for a in plan.workouts
        ],
    }


def supersede_active_plan(db: Session, user_id: int, now: datetime, reason: str) -> Optional[int]:
    """
    Retires the user's active plan ahead of a new one. Returns the retired
    plan id, or None when there was nothing to retire. Does not commit.

    Only `scheduled` entries from today on are cancelled; past, in-progress
    and completed entries stay as history.
    """
    plan = get_active_plan(db, user_id, now)
    if not plan:
        return None

    today = now.date()
    cancelled = (
        db.query(WorkoutSchedule)
        .filter(
            WorkoutSchedule.user_id == user_id,
            WorkoutSchedule.status == "scheduled",
            WorkoutSchedule.date >= today,
        )
        .update({"status": "cancelled", "cancellation_reason": reason}, synchronize_session="fetch")
    )
    removed = delete_daily_workouts_from(db, user_id, today)

    try:
        with db.begin_nested():
            db.add(WorkoutPlanHistory(
                user_id=user_id,
                plan_id=plan.id,
                plan_snapshot=snapshot_plan(plan),
                change_reason=reason,
            ))
    except SQLAlchemyError as e:
        logger.error(f"Failed to save workout plan history: {e}")

    plan_id = plan.id
    db.query(WorkoutSchedule).filter(WorkoutSchedule.plan_id == plan_id).update(
        {"plan_id": None}, synchronize_session="fetch"
    )
    db.delete(plan)
    db.flush()

    logger.info(
        f"Superseded plan {plan_id} for user {user_id} ({reason}): "
        f"{cancelled} entries cancelled, {removed} daily workouts removed"
    )
    return plan_id


def request_personalized_plan(
    db: Session,
    user_id: int,
    weeks: int,
    now: datetime,
    force_regenerate: bool = False,
    exercise_client: ExerciseAPIService = exercise_api_service,
) -> Tuple[PersonalizedWorkoutPlan, bool]:
    """
    Returns (plan, created). An existing active plan is returned unchanged
    unless `force_regenerate` is set.
    """
    _validate_weeks(weeks)
    existing = get_active_plan(db, user_id, now)
    if existing and not force_regenerate:
        logger.info(f"User {user_id} already has active plan {existing.id}")
        return existing, False

    if existing:
        try:
            supersede_active_plan(db, user_id, now, NEW_PLAN_REASON)
        except Exception:
            db.rollback()
            raise

    plan = generate_personalized_plan(db, user_id, weeks, now, exercise_client=exercise_client)
    return plan, True


def regenerate_plan_after_profile_update(
    db: Session,
    user_id: int,
    now: datetime,
    exercise_client: ExerciseAPIService = exercise_api_service,
) -> PersonalizedWorkoutPlan:
    logger.info(f"Regenerating workout plan for user {user_id} after profile update")
    try:
        supersede_active_plan(db, user_id, now, PROFILE_UPDATE_REASON)
    except Exception:
        db.rollback()
        raise
    return generate_personalized_plan(db, user_id, DEFAULT_PLAN_WEEKS, now, exercise_client=exercise_client)


# --- Read models ---

def get_current_plan(db: Session, user_id: int, now: datetime) -> PersonalizedWorkoutPlan:
    plan = get_active_plan(db, user_id, now)
    if not plan:
        raise NotFoundError("No active workout plan found")
    return plan


def get_available_workouts(db: Session, user_id: int, now: datetime) -> List[Workout]:
    """Distinct catalog workouts of the user's current plan."""
    plan = get_active_plan(db, user_id, now)
    if not plan:
        raise NotFoundError("No active workout plan found. Please generate a personalized plan first.")

    workout_ids = {a.workout_id for a in plan.workouts}
    return db.query(Workout).filter(Workout.id.in_(workout_ids)).order_by(Workout.id).all()


def get_workout(db: Session, workout_id: int) -> Workout:
    workout = db.query(Workout).filter(Workout.id == workout_id).first()
    if not workout:
        raise NotFoundError("Workout not found")
    return workout


def get_workout_schedule(
    db: Session,
    user_id: int,
    now: datetime,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: Optional[str] = None,
) -> List[WorkoutSchedule]:
    """Schedule entries in [start_date, end_date]; defaults to the next 7 days."""
    query = db.query(WorkoutSchedule).filter(WorkoutSchedule.user_id == user_id)
    if status:
        query = query.filter(WorkoutSchedule.status == status)

    if start_date or end_date:
        if start_date:
            query = query.filter(WorkoutSchedule.date >= start_date)
        if end_date:
            query = query.filter(WorkoutSchedule.date <= end_date)
    else:
        today = now.date()
        query = query.filter(WorkoutSchedule.date >= today, WorkoutSchedule.date < today + timedelta(days=7))

    return query.order_by(WorkoutSchedule.date, WorkoutSchedule.id).all()


def get_daily_workouts(
    db: Session,
    user_id: int,
    now: datetime,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[DailyWorkout]:
    """Daily workouts in [start_date, end_date]; defaults to the current Sunday-to-Saturday week."""
    query = db.query(DailyWorkout).filter(DailyWorkout.user_id == user_id)

    if start_date or end_date:
        if start_date:
            query = query.filter(DailyWorkout.date >= start_date)
        if end_date:
            query = query.filter(DailyWorkout.date <= end_date)
    else:
        today = now.date()
        week_start = today - timedelta(days=(today.weekday() + 1) % 7)
        query = query.filter(DailyWorkout.date >= week_start, DailyWorkout.date < week_start + timedelta(days=7))

    return query.order_by(DailyWorkout.date).all()
