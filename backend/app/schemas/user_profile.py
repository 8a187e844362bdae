# app/schemas/user_profile.py
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

FITNESS_LEVEL_PATTERN = "^(beginner|intermediate|advanced)$"
WALKING_TIME_PATTERN = "^(less_than_20_mins|20_60_mins|1_2_hours|more_than_2_hours)$"
ACTIVITY_LEVEL_PATTERN = "^(inactive|somewhat_active|active|very_active)$"

class UserProfileBase(BaseModel):
    display_name: Optional[str] = None
    gender: Optional[str] = None
    fitness_goals: List[str] = Field(default_factory=list, description="e.g. lose_weight, improve_heart_health")
    focus_areas: List[str] = Field(default_factory=list, description="e.g. stress_reduction, endurance")
    body_parts_to_tone_up: List[str] = Field(default_factory=list)

    fitness_level: Optional[str] = Field(
        None,
        pattern=FITNESS_LEVEL_PATTERN,
        description="beginner, intermediate, or advanced"
    )
    daily_walking_time: Optional[str] = Field(
        None,
        pattern=WALKING_TIME_PATTERN,
        description="less_than_20_mins, 20_60_mins, 1_2_hours, or more_than_2_hours"
    )
    activity_level: Optional[str] = Field(
        None,
        pattern=ACTIVITY_LEVEL_PATTERN,
        description="inactive, somewhat_active, active, or very_active"
    )
    step_goal: int = Field(10000, gt=0, description="Daily step goal")

    age: Optional[int] = Field(None, gt=0)
    current_weight: Optional[float] = Field(None, gt=0, description="Current weight in kg")
    target_weight: Optional[float] = Field(None, gt=0, description="Target weight in kg")
    height: Optional[float] = Field(None, gt=0, description="Height in cm")
    timezone: str = "UTC"

class UserProfileCreate(UserProfileBase):
    pass

class UserProfileUpdate(BaseModel):
    display_name: Optional[str] = None
    gender: Optional[str] = None
    fitness_goals: Optional[List[str]] = None
    focus_areas: Optional[List[str]] = None
    body_parts_to_tone_up: Optional[List[str]] = None
    fitness_level: Optional[str] = Field(None, pattern=FITNESS_LEVEL_PATTERN)
    daily_walking_time: Optional[str] = Field(None, pattern=WALKING_TIME_PATTERN)
    activity_level: Optional[str] = Field(None, pattern=ACTIVITY_LEVEL_PATTERN)
    step_goal: Optional[int] = Field(None, gt=0)
    age: Optional[int] = Field(None, gt=0)
    current_weight: Optional[float] = Field(None, gt=0, description="Current weight in kg")
    target_weight: Optional[float] = Field(None, gt=0, description="Target weight in kg")
    height: Optional[float] = Field(None, gt=0, description="Height in cm")

    class Config:
        json_schema_extra = {
            "example": {
                "fitness_goals": ["lose_weight"],
                "fitness_level": "intermediate",
                "daily_walking_time": "20_60_mins",
                "step_goal": 8000,
                "current_weight": 82.5,
                "height": 175.0
            }
        }

class TimezoneUpdate(BaseModel):
    timezone: str = Field(..., description="IANA name, e.g. Asia/Kolkata")

class UserProfileResponse(BaseModel):
    id: int
    user_id: int

    display_name: Optional[str] = None
    gender: Optional[str] = None
    fitness_goals: List[str] = []
    focus_areas: List[str] = []
    body_parts_to_tone_up: List[str] = []
    fitness_level: Optional[str] = None
    daily_walking_time: Optional[str] = None
    activity_level: Optional[str] = None
    step_goal: Optional[int] = None

    age: Optional[int] = None
    current_weight: Optional[float] = None
    target_weight: Optional[float] = None
    height: Optional[float] = None

    # Automated Calculations (From SQLAlchemy events)
    bmi: Optional[float] = None
    bmi_category: Optional[str] = None

    # Meta
    timezone: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    last_physical_update: Optional[datetime]

    class Config:
        from_attributes = True

class UserProfileUpdateResponse(BaseModel):
    profile: UserProfileResponse
    plan_regenerated: bool
