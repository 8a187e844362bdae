from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.auth import get_current_user
from app.api.deps import get_now, to_http_exception
from app.database import get_db
from app.models.user import User
from app.schemas.free_walk import FreeWalkComplete, FreeWalkPage, FreeWalkResponse, FreeWalkStart, FreeWalkUpdate
from app.services import free_walk_service
from app.services.errors import ServiceError

router = APIRouter(prefix="/free-walks", tags=["free-walks"])


# POST - Start a free walk
@router.post("/start", response_model=FreeWalkResponse, status_code=status.HTTP_201_CREATED)
def start_free_walk(
    payload: FreeWalkStart,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    data = payload.model_dump(mode="json")
    try:
        return free_walk_service.start_free_walk(
            db, current_user.id, now,
            target_steps=data["target_steps"],
            target_distance=data["target_distance"],
            start_location=data["start_location"],
        )
    except ServiceError as e:
        raise to_http_exception(e)


# GET - Free walk history
@router.get("/", response_model=FreeWalkPage)
def list_free_walks(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(10, ge=1, le=100),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    walks, total = free_walk_service.list_free_walks(db, current_user.id, status_filter, page, limit)
    return {"count": len(walks), "total": total, "page": page, "data": walks}


# GET - One free walk
@router.get("/{session_id}", response_model=FreeWalkResponse)
def get_free_walk(
    session_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return free_walk_service.get_free_walk(db, current_user.id, session_id)
    except ServiceError as e:
        raise to_http_exception(e)


# PUT - Live update (metrics, route points, pause / resume)
@router.put("/{session_id}", response_model=FreeWalkResponse)
def update_free_walk(
    session_id: str,
    payload: FreeWalkUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        return free_walk_service.update_free_walk(
            db, current_user.id, session_id, payload.model_dump(mode="json", exclude_unset=True), now
        )
    except ServiceError as e:
        raise to_http_exception(e)


# PUT - Complete a free walk
@router.put("/{session_id}/complete", response_model=FreeWalkResponse)
def complete_free_walk(
    session_id: str,
    payload: FreeWalkComplete,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        return free_walk_service.complete_free_walk(
            db, current_user.id, session_id, payload.model_dump(mode="json", exclude_unset=True), now
        )
    except ServiceError as e:
        raise to_http_exception(e)


# PUT - Cancel a free walk
@router.put("/{session_id}/cancel", response_model=FreeWalkResponse)
def cancel_free_walk(
    session_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        return free_walk_service.cancel_free_walk(db, current_user.id, session_id, now)
    except ServiceError as e:
        raise to_http_exception(e)
