from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from config import DEFAULT_PLAN_WEEKS, MAX_PLAN_WEEKS

class PlanWorkoutAssignmentResponse(BaseModel):
    workout_id: int
    week_number: int
    scheduled_day: int
    position: int

    class Config:
        from_attributes = True

class WorkoutPlanResponse(BaseModel):
    id: int
    user_id: int
    plan_name: Optional[str] = None
    description: Optional[str] = None
    duration_weeks: int
    start_date: datetime
    end_date: datetime
    fitness_goals_focused: List[str] = []
    progressive_overload: bool = True
    starting_steps: int
    weekly_increment: int
    workouts: List[PlanWorkoutAssignmentResponse] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class WorkoutPlanRequest(BaseModel):
    weeks: int = Field(DEFAULT_PLAN_WEEKS, ge=1, le=MAX_PLAN_WEEKS)
    force_regenerate: bool = False

class WorkoutPlanGenerateResponse(BaseModel):
    message: str
    created: bool
    data: WorkoutPlanResponse
