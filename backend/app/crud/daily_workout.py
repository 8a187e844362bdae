import logging
from datetime import date, datetime
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.models.daily_workout import DailyWorkout

logger = logging.getLogger(__name__)

"""
Daily Workout CRUD
------------------
Per-(user, date) writes for DailyWorkout. Both helpers are atomic with
respect to the (user_id, date) unique key, so concurrent callers converge
on a single row.
"""

UPSERT_FIELDS = ("workout_id", "schedule_id", "target_steps")


def _dialect_insert(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
        return insert
    if dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
        return insert
    return None


def get_daily_workout(db: Session, user_id: int, day: date) -> Optional[DailyWorkout]:
    return (
        db.query(DailyWorkout)
        .filter(DailyWorkout.user_id == user_id, DailyWorkout.date == day)
        .populate_existing()
        .first()
    )


def upsert_daily_workout(db: Session, user_id: int, day: date, workout_id: Optional[int],
                         schedule_id: Optional[int], target_steps: int) -> DailyWorkout:
    """
    Creates the day's row or overwrites its workout, schedule and target.
    Session and completion fields of an existing row are left alone.
    """
    now = datetime.utcnow()
    values = {
        "user_id": user_id,
        "date": day,
        "workout_id": workout_id,
        "schedule_id": schedule_id,
        "target_steps": target_steps,
        "completed": False,
        "created_at": now,
        "updated_at": now,
    }

    insert = _dialect_insert(db)
    if insert is not None:
        stmt = insert(DailyWorkout).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "date"],
            set_={field: stmt.excluded[field] for field in UPSERT_FIELDS + ("updated_at",)},
        )
        db.execute(stmt)
        db.flush()
    else:
        existing = get_daily_workout(db, user_id, day)
        if existing is None:
            try:
                with db.begin_nested():
                    db.add(DailyWorkout(**values))
            except IntegrityError:
                logger.info(f"Daily workout for user {user_id} on {day} created concurrently, updating instead")
                existing = get_daily_workout(db, user_id, day)
        if existing is not None:
            for field in UPSERT_FIELDS:
                setattr(existing, field, values[field])
            existing.updated_at = now
            db.flush()

    return get_daily_workout(db, user_id, day)


def insert_daily_workout_if_absent(db: Session, user_id: int, day: date, **fields) -> DailyWorkout:
    """
    Inserts the day's row unless one exists, then returns whichever row won.
    """
    now = datetime.utcnow()
    values = {"user_id": user_id, "date": day, "created_at": now, "updated_at": now}
    values.update(fields)

    insert = _dialect_insert(db)
    if insert is not None:
        stmt = insert(DailyWorkout).values(**values).on_conflict_do_nothing(
            index_elements=["user_id", "date"],
        )
        db.execute(stmt)
        db.flush()
    elif get_daily_workout(db, user_id, day) is None:
        try:
            with db.begin_nested():
                db.add(DailyWorkout(**values))
        except IntegrityError:
            logger.info(f"Daily workout for user {user_id} on {day} created concurrently")

    return get_daily_workout(db, user_id, day)


def delete_daily_workouts_from(db: Session, user_id: int, day: date) -> int:
    """Deletes the user's rows dated on or after `day`."""
    return (
        db.query(DailyWorkout)
        .filter(DailyWorkout.user_id == user_id, DailyWorkout.date >= day)
        .delete(synchronize_session="fetch")
    )
