from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional

EMAIL_REGX = r"^[^@]+@[^@]+\.[^@]+$"


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=EMAIL_REGX)
    password: str = Field(..., min_length=6)
    phone_number: Optional[str] = None
    dob: Optional[date] = None


class UserLogin(BaseModel):
    email: str = Field(..., pattern=EMAIL_REGX)
    password: str


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, pattern=EMAIL_REGX)
    phone_number: Optional[str] = None
    dob: Optional[date] = None


class PasswordChange(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=6)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone_number: Optional[str] = None
    dob: Optional[date] = None
    age: Optional[int] = None
    has_profile: bool = False
    created_at: Optional[datetime] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str
    user_id: int


class UserSignupResponse(TokenResponse):
    user: UserResponse
