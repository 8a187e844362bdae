from datetime import datetime
from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.auth import get_current_user
from app.api.deps import get_now, to_http_exception
from app.database import get_db
from app.models.user import User
from app.schemas.challenge import (
    ChallengeEnrollRequest, ChallengeProgressUpdate, ChallengeResponse, ChallengeStatusUpdate, EnrollmentResponse,
)
from app.services import challenge_service
from app.services.errors import ServiceError

router = APIRouter(prefix="/challenges", tags=["challenges"])


# GET - All available challenges
@router.get("/", response_model=List[ChallengeResponse])
def get_all_challenges(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return challenge_service.get_all_challenges(db)


# GET - User's challenges (active / completed / failed / abandoned)
@router.get("/user", response_model=List[EnrollmentResponse])
def get_user_challenges(
    status_filter: str = Query("active", alias="status", pattern="^(active|completed|failed|abandoned)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return challenge_service.get_user_challenges(db, current_user.id, status_filter)


# POST - Enroll in a challenge
@router.post("/enroll", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
def enroll_in_challenge(
    payload: ChallengeEnrollRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        return challenge_service.enroll_user_in_challenge(db, current_user.id, payload.challenge_id, now)
    except ServiceError as e:
        raise to_http_exception(e)


# PUT - Record progress for one challenge day
@router.put("/progress", response_model=EnrollmentResponse)
def update_daily_progress(
    payload: ChallengeProgressUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        return challenge_service.update_daily_progress(
            db, current_user.id, payload.challenge_id, payload.day, payload.achieved_value, now
        )
    except ServiceError as e:
        raise to_http_exception(e)


# PUT - Mark challenge as completed / failed / abandoned
@router.put("/status", response_model=EnrollmentResponse)
def mark_challenge_status(
    payload: ChallengeStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        return challenge_service.mark_challenge_status(db, current_user.id, payload.challenge_id, payload.status, now)
    except (ServiceError, ValueError) as e:
        raise to_http_exception(e)


# POST - Enroll into every 3 / 7 / 28 day challenge
@router.post("/auto-assign", response_model=List[EnrollmentResponse], status_code=status.HTTP_201_CREATED)
def auto_assign_challenges(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        return challenge_service.auto_assign_challenges_for_user(db, current_user.id, now)
    except ServiceError as e:
        raise to_http_exception(e)


# POST - Create the built-in walking challenges and enroll the user
@router.post("/generate-auto-walking-challenges", response_model=List[EnrollmentResponse], status_code=status.HTTP_201_CREATED)
def generate_walking_challenges(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    return challenge_service.generate_and_assign_walking_challenges(db, current_user.id, now)
