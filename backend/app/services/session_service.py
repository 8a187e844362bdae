import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.orm import Session

from app.models.workout import Workout
from app.models.workout_schedule import WorkoutSchedule
from app.models.workout_session import WorkoutSession
from app.services.daily_workout_service import update_daily_workout_session_status
from app.services.errors import InvalidStateError, NotFoundError
from app.utils.walking_calc import calculate_pace_seconds_per_km

logger = logging.getLogger(__name__)

"""
Session Service
---------------
Starts and completes workout sessions. The session row is committed first
and is the record of the user's effort; mirroring it onto the day's
schedule entry and DailyWorkout ("write-back") runs afterwards in its own
transaction, and a failure there is logged and reported, never raised.
"""

METRIC_FIELDS = ("total_steps", "total_distance", "calories_burned", "route", "heart_rate_data", "notes")
UPDATABLE_FIELDS = METRIC_FIELDS + ("duration",)


@dataclass
class WriteBackOutcome:
    attempted: bool = False
    succeeded: bool = False
    error: Optional[str] = None


@dataclass
class SessionOperationResult:
    session: WorkoutSession
    write_back: WriteBackOutcome = field(default_factory=WriteBackOutcome)


def _find_schedule_entry(db: Session, user_id: int, workout_id: Optional[int], day: date) -> Optional[WorkoutSchedule]:
    if workout_id is None:
        return None
    return (
        db.query(WorkoutSchedule)
        .filter(
            WorkoutSchedule.user_id == user_id,
            WorkoutSchedule.workout_id == workout_id,
            WorkoutSchedule.date == day,
            WorkoutSchedule.status != "cancelled",
        )
        .first()
    )


def _propagate_start(db: Session, user_id: int, session: WorkoutSession):
    day = session.start_time.date()
    entry = _find_schedule_entry(db, user_id, session.workout_id, day)
    if entry is None:
        return
    entry.status = "in_progress"
    update_daily_workout_session_status(db, user_id, session.id, "in_progress", day)


def _propagate_completion(db: Session, user_id: int, session: WorkoutSession):
    # Matched on the day the session started, even if it ended after midnight
    day = session.start_time.date()
    entry = _find_schedule_entry(db, user_id, session.workout_id, day)
    if entry is None:
        return
    entry.status = "completed"
    entry.completed_session_id = session.id
    entry.actual_steps = session.total_steps or 0
    update_daily_workout_session_status(db, user_id, session.id, "completed", day)


def _run_write_back(db: Session, propagate, user_id: int, session: WorkoutSession) -> WriteBackOutcome:
    session_id = session.id
    try:
        propagate(db, user_id, session)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.exception(f"Write-back for workout session {session_id} failed")
        return WriteBackOutcome(attempted=True, succeeded=False, error=str(e))
    return WriteBackOutcome(attempted=True, succeeded=True)


def _get_owned_session(db: Session, user_id: int, session_id: int) -> WorkoutSession:
    session = db.query(WorkoutSession).filter(WorkoutSession.id == session_id).first()
    if not session:
        raise NotFoundError("Workout session not found")
    if session.user_id != user_id:
        raise InvalidStateError("Workout session does not belong to this user")
    return session


def start_workout_session(db: Session, user_id: int, workout_id: int, now: datetime) -> SessionOperationResult:
    workout = db.query(Workout).filter(Workout.id == workout_id).first()
    if not workout:
        raise NotFoundError("Workout not found")

    session = WorkoutSession(
        user_id=user_id,
        workout_id=workout.id,
        workout_name=workout.name,
        start_time=now,
        status="in_progress",
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    logger.info(f"User {user_id} started session {session.id} for workout {workout.id}")

    outcome = _run_write_back(db, _propagate_start, user_id, session)
    return SessionOperationResult(session=session, write_back=outcome)


def complete_workout_session(
    db: Session, user_id: int, session_id: int, metrics: Optional[Dict[str, Any]], now: datetime
) -> SessionOperationResult:
    """
    Closes an in-progress session.

    end_time defaults to `now` and duration (seconds) to the whole seconds
    between start and end. Average pace is seconds per km, derived from the
    final duration and distance (meters).
    """
    metrics = metrics or {}
    session = _get_owned_session(db, user_id, session_id)
    if session.status == "completed":
        raise InvalidStateError("Workout session is already completed")

    session.end_time = metrics.get("end_time") or now
    if metrics.get("duration") is not None:
        session.duration = metrics["duration"]
    else:
        elapsed = (session.end_time - session.start_time).total_seconds()
        session.duration = max(0, math.floor(elapsed))

    for name in METRIC_FIELDS:
        if metrics.get(name) is not None:
            setattr(session, name, metrics[name])

    pace = calculate_pace_seconds_per_km(session.duration, session.total_distance)
    if pace is not None:
        session.average_pace = pace

    session.status = "completed"
    db.commit()
    db.refresh(session)
    logger.info(f"User {user_id} completed session {session.id}: {session.duration}s, {session.total_steps} steps")

    outcome = _run_write_back(db, _propagate_completion, user_id, session)
    return SessionOperationResult(session=session, write_back=outcome)


def update_workout_session(
    db: Session, user_id: int, session_id: int, updates: Dict[str, Any], now: datetime
) -> SessionOperationResult:
    """
    Patches live metrics of an in-progress session. A patch that sets the
    status to "completed" is handled as a completion.
    """
    updates = dict(updates)
    if updates.pop("status", None) == "completed":
        return complete_workout_session(db, user_id, session_id, updates, now)

    session = _get_owned_session(db, user_id, session_id)
    if session.status != "in_progress":
        raise InvalidStateError("Only in-progress sessions can be updated")

    for name in UPDATABLE_FIELDS:
        if updates.get(name) is not None:
            setattr(session, name, updates[name])

    db.commit()
    db.refresh(session)
    return SessionOperationResult(session=session)


def list_workout_sessions(
    db: Session,
    user_id: int,
    status: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[WorkoutSession], int]:
    """Returns (page of sessions newest first, total matching)."""
    query = db.query(WorkoutSession).filter(WorkoutSession.user_id == user_id)
    if status:
        query = query.filter(WorkoutSession.status == status)
    if start_date:
        query = query.filter(WorkoutSession.start_time >= start_date)
    if end_date:
        query = query.filter(WorkoutSession.start_time <= end_date)

    total = query.count()
    sessions = (
        query.order_by(WorkoutSession.start_time.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return sessions, total
