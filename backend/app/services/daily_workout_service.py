import logging
from datetime import date, datetime
from typing import Optional
from sqlalchemy.orm import Session

from app.crud.daily_workout import get_daily_workout, insert_daily_workout_if_absent
from app.models.daily_workout import DailyWorkout
from app.models.workout import Workout
from app.models.workout_schedule import WorkoutSchedule
from app.models.workout_session import WorkoutSession
from app.services.errors import NotFoundError

logger = logging.getLogger(__name__)

"""
Daily Workout Service
---------------------
Resolves "what do I walk today". The first read of a day lazily creates the
DailyWorkout from that day's schedule entry; later reads return it. A row
whose workout reference no longer resolves is repaired from the schedule
before it is returned.
"""

NOTHING_SCHEDULED = "No workout scheduled for today"


def get_live_schedule_entry(db: Session, user_id: int, day: date) -> Optional[WorkoutSchedule]:
    return (
        db.query(WorkoutSchedule)
        .filter(
            WorkoutSchedule.user_id == user_id,
            WorkoutSchedule.date == day,
            WorkoutSchedule.status != "cancelled",
        )
        .first()
    )


def needs_reconciliation(db: Session, daily: DailyWorkout) -> bool:
    """True when the row's workout reference is missing or points nowhere."""
    if daily.workout_id is None:
        return True
    return db.query(Workout.id).filter(Workout.id == daily.workout_id).first() is None


def reconcile_daily_workout(db: Session, daily: DailyWorkout) -> DailyWorkout:
    """
    Repoints a dangling DailyWorkout at the day's live schedule entry.
    Raises NotFoundError when the schedule cannot repair it.
    """
    entry = get_live_schedule_entry(db, daily.user_id, daily.date)
    if entry is None or entry.workout_id is None or entry.workout is None:
        logger.warning(f"Daily workout {daily.id} for user {daily.user_id} on {daily.date} cannot be repaired")
        raise NotFoundError(NOTHING_SCHEDULED)

    daily.workout_id = entry.workout_id
    daily.schedule_id = entry.id
    daily.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(daily)
    logger.info(f"Repaired daily workout {daily.id} from schedule entry {entry.id}")
    return daily


def resolve_daily_workout(db: Session, user_id: int, day: date) -> DailyWorkout:
    """
    The user's DailyWorkout for `day`, created from the schedule on first
    read. Raises NotFoundError when nothing is scheduled.
    """
    daily = get_daily_workout(db, user_id, day)
    if daily is not None:
        if needs_reconciliation(db, daily):
            return reconcile_daily_workout(db, daily)
        return daily

    entry = get_live_schedule_entry(db, user_id, day)
    if entry is None or entry.workout_id is None:
        raise NotFoundError(NOTHING_SCHEDULED)

    active_session_id = None
    if entry.status == "in_progress":
        active = (
            db.query(WorkoutSession)
            .filter(
                WorkoutSession.user_id == user_id,
                WorkoutSession.workout_id == entry.workout_id,
                WorkoutSession.status == "in_progress",
            )
            .order_by(WorkoutSession.start_time.desc())
            .first()
        )
        active_session_id = active.id if active else None

    daily = insert_daily_workout_if_absent(
        db, user_id, day,
        workout_id=entry.workout_id,
        schedule_id=entry.id,
        target_steps=entry.target_steps,
        completed=entry.status == "completed",
        completed_session_id=entry.completed_session_id,
        active_session_id=active_session_id,
    )
    db.commit()
    logger.info(f"Resolved daily workout for user {user_id} on {day} from schedule entry {entry.id}")
    return get_daily_workout(db, user_id, day)


def get_todays_workout(db: Session, user_id: int, now: datetime) -> DailyWorkout:
    return resolve_daily_workout(db, user_id, now.date())


def update_daily_workout_session_status(
    db: Session, user_id: int, session_id: int, status: str, day: date
) -> Optional[DailyWorkout]:
    """
    Mirrors a session transition onto the day's row. Returns None (and
    changes nothing) when the day has no row. Does not commit.
    """
    daily = get_daily_workout(db, user_id, day)
    if daily is None:
        return None

    if status == "in_progress":
        daily.active_session_id = session_id
    elif status == "completed":
        daily.active_session_id = None
        daily.completed_session_id = session_id
        daily.completed = True

    daily.updated_at = datetime.utcnow()
    db.flush()
    return daily
