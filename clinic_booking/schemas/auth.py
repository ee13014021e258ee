from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Literal, Optional

from ..core.security import UserRole
from .doctor import DoctorResponse


class UserRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    # Admin accounts are provisioned out of band
    role: Literal["patient", "doctor"]

    # Doctor profile fields, ignored for patients
    specialization: Optional[str] = None
    license_number: Optional[str] = None
    experience_years: Optional[int] = Field(None, ge=0)
    education: Optional[str] = None
    phone: Optional[str] = None
    clinic_id: Optional[int] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str
    role: Optional[UserRole] = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: EmailStr
    role: UserRole


class RegisterResponse(BaseModel):
    message: str
    user: UserResponse


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
    doctor_profile: Optional[DoctorResponse] = None


class PasswordReset(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=1, max_length=6)
    new_password: str = Field(..., min_length=6, max_length=72)


class ChangePassword(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=72)
