from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from .auth import UserResponse
from .doctor import DoctorResponse


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(None, min_length=6, max_length=72)


class ProfileResponse(BaseModel):
    user: UserResponse
    doctor_profile: Optional[DoctorResponse] = None


class UserStats(BaseModel):
    total_appointments: int = 0
    upcoming_appointments: int = 0
    completed_appointments: int = 0
    cancelled_appointments: int = 0
