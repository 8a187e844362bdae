import logging
from typing import Optional
from sqlalchemy.orm import Session

from app.models.challenge import ChallengeDayProgress, UserChallengeEnrollment
from app.models.daily_workout import DailyWorkout
from app.models.free_walk_session import FreeWalkSession
from app.models.user import User
from app.models.user_profile import UserProfile
from app.models.workout_plan import PersonalizedWorkoutPlan, PlanWorkoutAssignment
from app.models.workout_plan_history import WorkoutPlanHistory
from app.models.workout_schedule import WorkoutSchedule
from app.models.workout_session import WorkoutSession
from app.schemas.user import UserCreate, UserUpdate
from app.services.errors import ConflictError, InvalidStateError
from app.utils.utils import hash_password, verify_password

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.lower()).first()


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    user = get_user_by_email(db, email)
    if user and verify_password(password, user.password):
        return user
    return None


def create_user(db: Session, user: UserCreate) -> User:
    """Raises ConflictError when the email is already registered."""
    if get_user_by_email(db, user.email):
        raise ConflictError("Email already registered")

    db_user = User(
        name=user.name,
        email=user.email.lower(),
        password=hash_password(user.password),
        phone_number=user.phone_number,
        dob=user.dob,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info(f"Registered walker {db_user.id}")
    return db_user


def update_user(db: Session, db_user: User, user_update: UserUpdate) -> User:
    changes = user_update.model_dump(exclude_unset=True)
    if changes.get("email"):
        changes["email"] = changes["email"].lower()
        if changes["email"] != db_user.email and get_user_by_email(db, changes["email"]):
            raise ConflictError("Email already registered")

    for field, value in changes.items():
        if value is not None:
            setattr(db_user, field, value)

    db.commit()
    db.refresh(db_user)
    return db_user


def change_password(db: Session, db_user: User, old_password: str, new_password: str) -> User:
    if not verify_password(old_password, db_user.password):
        raise InvalidStateError("Incorrect old password")
    db_user.password = hash_password(new_password)
    db.commit()
    return db_user


def delete_user(db: Session, db_user: User):
    """
    Removes the account with all of its walking data: calendar, daily
    workouts, sessions, free walks, challenge enrollments, plans and profile.
    Shared catalog workouts and challenge definitions stay.
    """
    user_id = db_user.id
    enrollment_ids = db.query(UserChallengeEnrollment.id).filter(UserChallengeEnrollment.user_id == user_id)
    plan_ids = db.query(PersonalizedWorkoutPlan.id).filter(PersonalizedWorkoutPlan.user_id == user_id)

    # Children before parents so it also holds without FK cascades (SQLite)
    db.query(DailyWorkout).filter(DailyWorkout.user_id == user_id).delete(synchronize_session=False)
    db.query(WorkoutSchedule).filter(WorkoutSchedule.user_id == user_id).delete(synchronize_session=False)
    db.query(WorkoutSession).filter(WorkoutSession.user_id == user_id).delete(synchronize_session=False)
    db.query(FreeWalkSession).filter(FreeWalkSession.user_id == user_id).delete(synchronize_session=False)
    db.query(ChallengeDayProgress).filter(
        ChallengeDayProgress.enrollment_id.in_(enrollment_ids.scalar_subquery())
    ).delete(synchronize_session=False)
    db.query(UserChallengeEnrollment).filter(UserChallengeEnrollment.user_id == user_id).delete(synchronize_session=False)
    db.query(PlanWorkoutAssignment).filter(
        PlanWorkoutAssignment.plan_id.in_(plan_ids.scalar_subquery())
    ).delete(synchronize_session=False)
    db.query(PersonalizedWorkoutPlan).filter(PersonalizedWorkoutPlan.user_id == user_id).delete(synchronize_session=False)
    db.query(WorkoutPlanHistory).filter(WorkoutPlanHistory.user_id == user_id).delete(synchronize_session=False)
    db.query(UserProfile).filter(UserProfile.user_id == user_id).delete(synchronize_session=False)
    db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
    db.commit()
    db.expunge_all()
    logger.info(f"Deleted walker {user_id} and their walking data")
