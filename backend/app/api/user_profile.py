# app/api/user_profile.py
import logging
import pytz
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.user_profile import (
    UserProfileCreate, UserProfileResponse, UserProfileUpdate, UserProfileUpdateResponse, TimezoneUpdate,
)
from app.crud import user_profile as crud_user_profile
from app.crud.workout_plan import get_active_plan
from app.models.user import User
from app.api.auth import get_current_user
from app.api.deps import get_user_local_time
from app.services.workout_service import (
    PROFILE_DELETED_REASON, regenerate_plan_after_profile_update, supersede_active_plan,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user-profiles", tags=["user-profiles"])

# POST - Create new user profile for current user
@router.post("/", response_model=UserProfileResponse, status_code=status.HTTP_201_CREATED)
def create_user_profile(
    profile: UserProfileCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Create the walking profile (intake answers and body measurements) for the authenticated user.
    """
    try:
        return crud_user_profile.create_user_profile(db, profile, current_user.id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

# GET - Get profile for current user
@router.get("/me", response_model=UserProfileResponse)
def read_my_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    db_profile = crud_user_profile.get_user_profile_by_user_id(db, user_id=current_user.id)
    if db_profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return db_profile

# PUT - Update profile for current user
@router.put("/me", response_model=UserProfileUpdateResponse)
def update_my_profile(
    profile_update: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Updates the profile. An active walking plan is replaced by one built
    from the new answers; a failure there does not fail the update.
    """
    db_profile = crud_user_profile.update_user_profile_by_user_id(db, user_id=current_user.id, user_profile_update=profile_update)
    if db_profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")

    plan_regenerated = False
    now = get_user_local_time(current_user)
    if get_active_plan(db, current_user.id, now):
        try:
            regenerate_plan_after_profile_update(db, current_user.id, now)
            plan_regenerated = True
        except Exception as e:
            logger.error(f"Failed to regenerate walking plan for user {current_user.id}: {e}")
        db.refresh(db_profile)

    return {"profile": db_profile, "plan_regenerated": plan_regenerated}

# DELETE - Remove profile for current user
@router.delete("/me")
def delete_my_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Deletes the profile. The active walking plan goes with it: upcoming
    scheduled walks are cancelled and the plan is kept only as history.
    Completed walks, sessions and challenges stay.
    """
    db_profile = crud_user_profile.get_user_profile_by_user_id(db, user_id=current_user.id)
    if db_profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")

    retired_plan_id = supersede_active_plan(db, current_user.id, get_user_local_time(current_user), PROFILE_DELETED_REASON)
    crud_user_profile.delete_user_profile(db, db_profile)
    return {"message": "Profile deleted", "retired_plan_id": retired_plan_id}

# PATCH - Update Timezone
@router.patch("/timezone", status_code=status.HTTP_200_OK)
def update_profile_timezone(
    tz_data: TimezoneUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Update the user's timezone.
    """
    if tz_data.timezone not in pytz.all_timezones_set:
        raise HTTPException(status_code=400, detail=f"Unknown timezone: {tz_data.timezone}")

    profile = crud_user_profile.update_timezone(db, current_user.id, tz_data.timezone)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return {"message": "Timezone updated", "timezone": profile.timezone}
