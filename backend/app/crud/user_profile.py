import logging
from typing import Optional
from sqlalchemy.orm import Session
from app.models.user_profile import UserProfile
from app.schemas.user_profile import UserProfileCreate, UserProfileUpdate

logger = logging.getLogger(__name__)

# Answers the walking plan is built from
PLAN_INPUT_FIELDS = ("fitness_goals", "fitness_level", "daily_walking_time", "step_goal", "current_weight", "focus_areas")


def _clean(data: dict) -> dict:
    if data.get("fitness_level"):
        data["fitness_level"] = data["fitness_level"].lower()
    for field in ("fitness_goals", "focus_areas", "body_parts_to_tone_up"):
        if field in data and data[field] is not None:
            # JSON columns only notice reassignment
            data[field] = list(dict.fromkeys(data[field]))
    return data


def get_user_profile_by_user_id(db: Session, user_id: int) -> Optional[UserProfile]:
    return db.query(UserProfile).filter(UserProfile.user_id == user_id).first()


def create_user_profile(db: Session, user_profile: UserProfileCreate, user_id: int) -> UserProfile:
    """
    Stores the intake answers. BMI and its category are filled in by the
    model listeners. Raises ValueError when the user already has a profile.
    """
    if get_user_profile_by_user_id(db, user_id):
        raise ValueError(f"User {user_id} already has a profile. Use update instead.")

    db_profile = UserProfile(user_id=user_id, **_clean(user_profile.model_dump()))
    db.add(db_profile)
    db.commit()
    db.refresh(db_profile)
    logger.info(f"Created walking profile for user {user_id} ({db_profile.fitness_level or 'no level'})")
    return db_profile


def update_user_profile(db: Session, db_profile: UserProfile, update: UserProfileUpdate) -> UserProfile:
    """Applies the fields present in `update`; explicit nulls are ignored."""
    changes = {k: v for k, v in _clean(update.model_dump(exclude_unset=True)).items() if v is not None}
    for field, value in changes.items():
        setattr(db_profile, field, value)

    db.commit()
    db.refresh(db_profile)

    plan_inputs = sorted(set(changes) & set(PLAN_INPUT_FIELDS))
    if plan_inputs:
        logger.info(f"Plan inputs changed for user {db_profile.user_id}: {', '.join(plan_inputs)}")
    return db_profile


def update_user_profile_by_user_id(db: Session, user_id: int, user_profile_update: UserProfileUpdate) -> Optional[UserProfile]:
    db_profile = get_user_profile_by_user_id(db, user_id)
    if not db_profile:
        return None
    return update_user_profile(db, db_profile, user_profile_update)


def update_timezone(db: Session, user_id: int, timezone: str) -> Optional[UserProfile]:
    """The timezone decides which calendar day "today" is for the user."""
    db_profile = get_user_profile_by_user_id(db, user_id)
    if not db_profile:
        return None
    db_profile.timezone = timezone
    db.commit()
    db.refresh(db_profile)
    return db_profile


def delete_user_profile(db: Session, db_profile: UserProfile):
    user_id = db_profile.user_id
    db.delete(db_profile)
    db.commit()
    logger.info(f"Deleted walking profile for user {user_id}")
