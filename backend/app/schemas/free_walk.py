from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime

from app.schemas.workout import RoutePoint

class Location(BaseModel):
    latitude: float
    longitude: float
    address: Optional[str] = None

class Weather(BaseModel):
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    condition: Optional[str] = None  # sunny, cloudy, rainy, ...

class FreeWalkStart(BaseModel):
    target_steps: Optional[int] = Field(None, gt=0)
    target_distance: Optional[float] = Field(None, ge=0, description="km")
    start_location: Optional[Location] = None

class FreeWalkUpdate(BaseModel):
    actual_steps: Optional[int] = Field(None, ge=0)
    actual_distance: Optional[float] = Field(None, ge=0, description="km")
    calories_burned: Optional[float] = Field(None, ge=0)
    heart_rate: Optional[int] = Field(None, gt=0)
    route_points: Optional[List[RoutePoint]] = None
    status: Optional[str] = Field(None, pattern="^(active|paused)$")

class FreeWalkComplete(BaseModel):
    actual_steps: Optional[int] = Field(None, ge=0)
    actual_distance: Optional[float] = Field(None, ge=0, description="km")
    calories_burned: Optional[float] = Field(None, ge=0)
    end_location: Optional[Location] = None
    weather: Optional[Weather] = None
    difficulty: Optional[str] = Field(None, pattern="^(easy|moderate|challenging)$")
    user_rating: Optional[int] = Field(None, ge=1, le=5)
    notes: Optional[str] = None

class FreeWalkResponse(BaseModel):
    session_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: int
    status: str
    paused_seconds: Optional[int] = 0
    target_steps: int
    actual_steps: int
    target_distance: float
    actual_distance: float
    calories_burned: float
    average_pace: Optional[str] = None
    location_tracking: Optional[Dict[str, Any]] = None
    route: List[Dict[str, Any]] = []
    real_time_data: List[Dict[str, Any]] = []
    weather: Optional[Dict[str, Any]] = None
    milestones_reached: List[Dict[str, Any]] = []
    difficulty: Optional[str] = None
    user_rating: Optional[int] = None
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class FreeWalkPage(BaseModel):
    count: int
    total: int
    page: int
    data: List[FreeWalkResponse]
