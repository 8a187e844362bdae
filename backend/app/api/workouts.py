from datetime import date, datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.api.auth import get_current_user
from app.api.deps import get_now, to_http_exception, to_user_local
from app.crud.workout_plan import get_plan_history
from app.database import get_db
from app.models.user import User
from app.schemas.workout import (
    DailyWorkoutResponse, SessionOperationResponse, TodaysWorkoutResponse, WorkoutResponse,
    WorkoutScheduleResponse, WorkoutSessionMetrics, WorkoutSessionPage, WorkoutSessionStart,
    WorkoutSessionUpdate,
)
from app.schemas.workout_plan import WorkoutPlanGenerateResponse, WorkoutPlanRequest, WorkoutPlanResponse
from app.services import daily_workout_service, session_service, workout_service
from app.services.errors import ServiceError

router = APIRouter(prefix="/workouts", tags=["workouts"])


def _session_payload(payload: WorkoutSessionMetrics, user: User) -> dict:
    data = payload.model_dump(exclude_unset=True)
    # JSON columns need plain values
    json_data = payload.model_dump(mode="json", exclude_unset=True, include={"route", "heart_rate_data"})
    data.update(json_data)
    if data.get("end_time"):
        data["end_time"] = to_user_local(data["end_time"], user)
    return data


def _operation_response(result: session_service.SessionOperationResult) -> dict:
    return {"session": result.session, "write_back": result.write_back}


# GET - Workouts of the current plan
@router.get("/available", response_model=List[WorkoutResponse])
def get_available_workouts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        return workout_service.get_available_workouts(db, current_user.id, now)
    except ServiceError as e:
        raise to_http_exception(e)


# GET - Today's workout (created from the schedule on first read)
@router.get("/today", response_model=TodaysWorkoutResponse)
def get_todays_workout(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        daily = daily_workout_service.get_todays_workout(db, current_user.id, now)
    except ServiceError as e:
        raise to_http_exception(e)

    return {
        "daily_workout": daily,
        "workout": daily.workout,
        "schedule": daily.schedule,
        "active_session": daily.active_session,
        "completed_session": daily.completed_session,
        "target_steps": daily.target_steps,
        "completed": daily.completed,
    }


# GET - Daily workouts for a date range (default: current week)
@router.get("/daily", response_model=List[DailyWorkoutResponse])
def get_daily_workouts(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    return workout_service.get_daily_workouts(db, current_user.id, now, start_date, end_date)


# GET - Schedule (default: next 7 days)
@router.get("/schedule", response_model=List[WorkoutScheduleResponse])
def get_workout_schedule(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    return workout_service.get_workout_schedule(db, current_user.id, now, start_date, end_date, status_filter)


# GET - Sessions with filters and pagination
@router.get("/sessions", response_model=WorkoutSessionPage)
def get_workout_sessions(
    status_filter: Optional[str] = Query(None, alias="status"),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    limit: int = Query(10, ge=1, le=100),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sessions, total = session_service.list_workout_sessions(
        db, current_user.id,
        status=status_filter,
        start_date=to_user_local(start_date, current_user),
        end_date=to_user_local(end_date, current_user),
        page=page,
        limit=limit,
    )
    return {
        "count": len(sessions),
        "total": total,
        "pages": -(-total // limit),
        "page": page,
        "data": sessions,
    }


# POST - Start a workout session
@router.post("/sessions/start", response_model=SessionOperationResponse, status_code=status.HTTP_201_CREATED)
def start_workout_session(
    payload: WorkoutSessionStart,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        result = session_service.start_workout_session(db, current_user.id, payload.workout_id, now)
    except ServiceError as e:
        raise to_http_exception(e)
    return _operation_response(result)


# PUT - Update a workout session
@router.put("/sessions/{session_id}", response_model=SessionOperationResponse)
def update_workout_session(
    session_id: int,
    payload: WorkoutSessionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        result = session_service.update_workout_session(
            db, current_user.id, session_id, _session_payload(payload, current_user), now
        )
    except ServiceError as e:
        raise to_http_exception(e)
    return _operation_response(result)


# PUT - Complete a workout session
@router.put("/sessions/{session_id}/complete", response_model=SessionOperationResponse)
def complete_workout_session(
    session_id: int,
    payload: WorkoutSessionMetrics,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        result = session_service.complete_workout_session(
            db, current_user.id, session_id, _session_payload(payload, current_user), now
        )
    except ServiceError as e:
        raise to_http_exception(e)
    return _operation_response(result)


# POST - Generate a personalized plan
@router.post("/plan/generate", response_model=WorkoutPlanGenerateResponse, status_code=status.HTTP_201_CREATED)
def generate_personalized_plan(
    response: Response,
    request: WorkoutPlanRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        plan, created = workout_service.request_personalized_plan(
            db, current_user.id, request.weeks, now, force_regenerate=request.force_regenerate
        )
    except (ServiceError, ValueError) as e:
        raise to_http_exception(e)

    if not created:
        response.status_code = status.HTTP_200_OK
        return {"message": "User already has an active workout plan", "created": False, "data": plan}
    return {"message": "Personalized workout plan generated successfully", "created": True, "data": plan}


# GET - Current plan
@router.get("/plan/current", response_model=WorkoutPlanResponse)
def get_current_plan(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        return workout_service.get_current_plan(db, current_user.id, now)
    except ServiceError as e:
        raise to_http_exception(e)


# GET - Superseded plans
@router.get("/plan/history")
def get_workout_plan_history(
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    history = get_plan_history(db, current_user.id, limit=limit)
    return [
        {
            "plan_id": h.plan_id,
            "change_reason": h.change_reason,
            "created_at": h.created_at,
            "plan": h.plan_snapshot,
        }
        for h in history
    ]


# GET - A specific workout
@router.get("/{workout_id}", response_model=WorkoutResponse)
def get_workout_by_id(
    workout_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return workout_service.get_workout(db, workout_id)
    except ServiceError as e:
        raise to_http_exception(e)
