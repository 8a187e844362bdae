from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime

class ChallengeResponse(BaseModel):
    id: int
    challenge_id: str
    name: str
    description: Optional[str] = None
    type: str
    duration: int
    duration_label: Optional[str] = None
    difficulty: Optional[str] = None
    target_value: float
    target_label: Optional[str] = None
    reward: Optional[str] = None
    icon_type: Optional[str] = None
    background_color: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True

    class Config:
        from_attributes = True

class ChallengeDayProgressResponse(BaseModel):
    day: int
    date: date
    target_value: float
    achieved_value: float
    is_completed: bool
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class EnrollmentResponse(BaseModel):
    id: int
    user_id: int
    challenge: ChallengeResponse
    start_date: date
    end_date: date
    total_progress: float
    completion_percentage: int
    status: str
    completed_at: Optional[datetime] = None
    daily_progress: List[ChallengeDayProgressResponse] = []

    class Config:
        from_attributes = True

class ChallengeEnrollRequest(BaseModel):
    challenge_id: str

class ChallengeProgressUpdate(BaseModel):
    challenge_id: str
    day: int = Field(..., ge=1)
    achieved_value: float = Field(..., ge=0)

class ChallengeStatusUpdate(BaseModel):
    challenge_id: str
    status: str = Field(..., pattern="^(completed|failed|abandoned)$")
