from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from .clinic import ClinicResponse


class DoctorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    specialization: str = "General Physician"
    clinic_id: Optional[int] = None
    license_number: str = "Not provided"
    experience_years: int = Field(0, ge=0)
    education: str = "Not provided"
    phone: str = "Not provided"
    available_slots: List[str] = []


class DoctorUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    specialization: Optional[str] = None
    clinic_id: Optional[int] = None
    license_number: Optional[str] = None
    experience_years: Optional[int] = Field(None, ge=0)
    education: Optional[str] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None


class DoctorSlotsUpdate(BaseModel):
    available_slots: List[str]


class DoctorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    specialization: str
    clinic_id: Optional[int] = None
    clinic: Optional[ClinicResponse] = None
    user_id: Optional[int] = None
    license_number: str
    experience_years: int
    education: str
    phone: str
    available_slots: List[datetime] = []
    is_active: bool


class AvailableSlotsResponse(BaseModel):
    doctor_id: int
    date: str
    available_slots: List[str]
