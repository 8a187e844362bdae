from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import date, datetime

class WorkoutResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    type: str
    category: str
    intensity: str
    duration: int
    estimated_calories: int
    target_distance: Optional[float] = None
    includes_warmup: bool = True
    includes_cooldown: bool = True
    image: Optional[str] = None
    recommended_for: List[str] = []

    class Config:
        from_attributes = True

class WorkoutSummary(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    duration: int
    type: str
    intensity: str
    image: Optional[str] = None

    class Config:
        from_attributes = True

class WorkoutScheduleResponse(BaseModel):
    id: int
    workout_id: Optional[int] = None
    plan_id: Optional[int] = None
    date: date
    status: str
    target_steps: int
    actual_steps: Optional[int] = None
    completed_session_id: Optional[int] = None
    cancellation_reason: Optional[str] = None
    notes: Optional[str] = None
    workout: Optional[WorkoutSummary] = None

    class Config:
        from_attributes = True

# --- Sessions ---

class RoutePoint(BaseModel):
    latitude: float
    longitude: float
    timestamp: Optional[datetime] = None
    altitude: Optional[float] = None
    accuracy: Optional[float] = None

class HeartRateSample(BaseModel):
    timestamp: datetime
    bpm: int = Field(..., gt=0)

class WorkoutSessionStart(BaseModel):
    workout_id: int

class WorkoutSessionMetrics(BaseModel):
    """Final metrics sent when a session is completed. Distance is in meters."""
    end_time: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=0, description="Seconds")
    total_steps: Optional[int] = Field(None, ge=0)
    total_distance: Optional[float] = Field(None, ge=0, description="Meters")
    calories_burned: Optional[float] = Field(None, ge=0)
    route: Optional[List[RoutePoint]] = None
    heart_rate_data: Optional[List[HeartRateSample]] = None
    notes: Optional[str] = None

class WorkoutSessionUpdate(WorkoutSessionMetrics):
    status: Optional[str] = Field(None, pattern="^(in_progress|completed)$")

class WorkoutSessionResponse(BaseModel):
    id: int
    user_id: int
    workout_id: Optional[int] = None
    workout_name: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    status: str
    duration: Optional[int] = None
    total_steps: Optional[int] = None
    total_distance: Optional[float] = None
    calories_burned: Optional[float] = None
    average_pace: Optional[float] = None
    route: Optional[List[Dict[str, Any]]] = None
    heart_rate_data: Optional[List[Dict[str, Any]]] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True

class WriteBackResponse(BaseModel):
    attempted: bool
    succeeded: bool
    error: Optional[str] = None

    class Config:
        from_attributes = True

class SessionOperationResponse(BaseModel):
    session: WorkoutSessionResponse
    write_back: WriteBackResponse

    class Config:
        from_attributes = True

class WorkoutSessionPage(BaseModel):
    count: int
    total: int
    pages: int
    page: int
    data: List[WorkoutSessionResponse]

# --- Daily workout ---

class DailyWorkoutResponse(BaseModel):
    id: int
    date: date
    workout_id: Optional[int] = None
    schedule_id: Optional[int] = None
    target_steps: int
    active_session_id: Optional[int] = None
    completed_session_id: Optional[int] = None
    completed: bool
    workout: Optional[WorkoutResponse] = None
    completed_session: Optional[WorkoutSessionResponse] = None

    class Config:
        from_attributes = True

class TodaysWorkoutResponse(BaseModel):
    daily_workout: DailyWorkoutResponse
    workout: Optional[WorkoutResponse] = None
    schedule: Optional[WorkoutScheduleResponse] = None
    active_session: Optional[WorkoutSessionResponse] = None
    completed_session: Optional[WorkoutSessionResponse] = None
    target_steps: int
    completed: bool
