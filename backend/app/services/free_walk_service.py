import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.orm import Session

from app.models.free_walk_session import FreeWalkSession
from app.models.user_profile import UserProfile
from app.services.errors import ConflictError, InvalidStateError, NotFoundError
from app.utils.walking_calc import calculate_calories, format_pace

logger = logging.getLogger(__name__)

OPEN_STATUSES = ("active", "paused")
LIVE_METRIC_FIELDS = ("actual_steps", "actual_distance", "calories_burned")
FINAL_FIELDS = ("actual_steps", "actual_distance", "calories_burned", "difficulty", "user_rating", "notes", "weather")
STEP_MILESTONES = (1000, 2500, 5000, 7500, 10000)


def _get_session(db: Session, user_id: int, session_id: str) -> FreeWalkSession:
    walk = (
        db.query(FreeWalkSession)
        .filter(FreeWalkSession.session_id == session_id, FreeWalkSession.user_id == user_id)
        .first()
    )
    if not walk:
        raise NotFoundError("Free walk session not found")
    return walk


def _get_open_session(db: Session, user_id: int, session_id: str) -> FreeWalkSession:
    walk = _get_session(db, user_id, session_id)
    if walk.status not in OPEN_STATUSES:
        raise InvalidStateError(f"Free walk session is already {walk.status}")
    return walk


def get_open_free_walk(db: Session, user_id: int) -> Optional[FreeWalkSession]:
    return (
        db.query(FreeWalkSession)
        .filter(FreeWalkSession.user_id == user_id, FreeWalkSession.status.in_(OPEN_STATUSES))
        .first()
    )


def start_free_walk(
    db: Session,
    user_id: int,
    now: datetime,
    target_steps: Optional[int] = None,
    target_distance: Optional[float] = None,
    start_location: Optional[Dict[str, Any]] = None,
) -> FreeWalkSession:
    """Opens a free walk. A user can have only one open (active or paused) walk."""
    open_walk = get_open_free_walk(db, user_id)
    if open_walk:
        raise ConflictError(f"Free walk {open_walk.session_id} is still open")

    walk = FreeWalkSession(
        user_id=user_id,
        session_id=uuid.uuid4().hex,
        start_time=now,
        status="active",
        target_steps=target_steps or 4000,
        target_distance=target_distance or 0.0,
        location_tracking={"enabled": start_location is not None, "start_location": start_location},
        route=[],
        real_time_data=[],
        milestones_reached=[],
    )
    db.add(walk)
    db.commit()
    db.refresh(walk)
    logger.info(f"User {user_id} started free walk {walk.session_id}")
    return walk


def _moving_seconds(walk: FreeWalkSession, now: datetime) -> float:
    """Time on the move: wall-clock time since start minus every pause."""
    paused = walk.paused_seconds or 0
    if walk.paused_at is not None:
        paused += (now - walk.paused_at).total_seconds()
    return max(0.0, (now - walk.start_time).total_seconds() - paused)


def _close_pause(walk: FreeWalkSession, now: datetime):
    if walk.paused_at is not None:
        walk.paused_seconds = (walk.paused_seconds or 0) + int((now - walk.paused_at).total_seconds())
        walk.paused_at = None


def _reached_milestones(walk: FreeWalkSession, now: datetime) -> List[Dict[str, Any]]:
    reached = list(walk.milestones_reached or [])
    seen = {m.get("value") for m in reached}
    for value in STEP_MILESTONES:
        if (walk.actual_steps or 0) >= value and value not in seen:
            reached.append({"type": "steps", "value": value, "achieved_at": now.isoformat()})
    return reached


def update_free_walk(db: Session, user_id: int, session_id: str, updates: Dict[str, Any], now: datetime) -> FreeWalkSession:
    """
    Live update: metrics, route points and pause / resume.
    Every update is also appended to the walk's real-time log.
    """
    walk = _get_open_session(db, user_id, session_id)

    for name in LIVE_METRIC_FIELDS:
        if updates.get(name) is not None:
            setattr(walk, name, updates[name])

    if updates.get("route_points"):
        # JSON columns only notice reassignment
        walk.route = list(walk.route or []) + list(updates["route_points"])

    status = updates.get("status")
    if status in OPEN_STATUSES and status != walk.status:
        if status == "paused":
            walk.paused_at = now
        else:
            _close_pause(walk, now)
        logger.info(f"Free walk {session_id} {'paused' if status == 'paused' else 'resumed'}")
        walk.status = status

    elapsed_min = _moving_seconds(walk, now) / 60.0
    walk.real_time_data = list(walk.real_time_data or []) + [{
        "timestamp": now.isoformat(),
        "steps": walk.actual_steps,
        "distance": walk.actual_distance,
        "pace": format_pace(elapsed_min, walk.actual_distance),
        "heart_rate": updates.get("heart_rate"),
        "calories": walk.calories_burned,
    }]
    walk.milestones_reached = _reached_milestones(walk, now)

    db.commit()
    db.refresh(walk)
    return walk


def complete_free_walk(
    db: Session, user_id: int, session_id: str, metrics: Optional[Dict[str, Any]], now: datetime
) -> FreeWalkSession:
    """
    Closes a free walk. Duration is whole minutes on the move (a walk
    completed while paused ends at the pause); pace is "m:ss/km";
    calories are estimated from the profile's weight unless supplied.
    """
    metrics = metrics or {}
    walk = _get_open_session(db, user_id, session_id)

    for name in FINAL_FIELDS:
        if metrics.get(name) is not None:
            setattr(walk, name, metrics[name])

    walk.end_time = now
    walk.duration = round(_moving_seconds(walk, now) / 60.0)
    _close_pause(walk, now)
    walk.average_pace = format_pace(walk.duration, walk.actual_distance)

    if metrics.get("calories_burned") is None:
        profile = db.query(UserProfile).filter(UserProfile.user_id == user_id).first()
        weight = profile.current_weight if profile else None
        walk.calories_burned = calculate_calories(walk.duration, weight)

    if metrics.get("end_location") is not None:
        tracking = dict(walk.location_tracking or {})
        tracking["end_location"] = metrics["end_location"]
        walk.location_tracking = tracking

    walk.milestones_reached = _reached_milestones(walk, now)
    walk.status = "completed"
    walk.completed_at = now

    db.commit()
    db.refresh(walk)
    logger.info(f"User {user_id} completed free walk {session_id}: {walk.duration} min, {walk.actual_distance} km")
    return walk


def cancel_free_walk(db: Session, user_id: int, session_id: str, now: datetime) -> FreeWalkSession:
    walk = _get_open_session(db, user_id, session_id)
    _close_pause(walk, now)
    walk.status = "cancelled"
    walk.end_time = now
    db.commit()
    db.refresh(walk)
    logger.info(f"User {user_id} cancelled free walk {session_id}")
    return walk


def get_free_walk(db: Session, user_id: int, session_id: str) -> FreeWalkSession:
    return _get_session(db, user_id, session_id)


def list_free_walks(
    db: Session, user_id: int, status: Optional[str] = None, page: int = 1, limit: int = 10
) -> Tuple[List[FreeWalkSession], int]:
    query = db.query(FreeWalkSession).filter(FreeWalkSession.user_id == user_id)
    if status:
        query = query.filter(FreeWalkSession.status == status)
    total = query.count()
    walks = query.order_by(FreeWalkSession.start_time.desc()).offset((page - 1) * limit).limit(limit).all()
    return walks, total
