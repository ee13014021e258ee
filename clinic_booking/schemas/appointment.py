from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import List, Optional

from ..models.appointment import AppointmentStatus


class AppointmentCreate(BaseModel):
    # Presence is checked by the scheduling service so every missing field
    # gets the same error
    doctor_id: Optional[int] = None
    clinic_id: Optional[int] = None
    slot: Optional[str] = None
    notes: Optional[str] = None


class AppointmentStatusUpdate(BaseModel):
    status: str


class DoctorSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    specialization: str


class ClinicSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    location: str


class PatientSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: Optional[int] = None
    doctor_id: Optional[int] = None
    clinic_id: Optional[int] = None
    slot: datetime
    notes: str
    status: AppointmentStatus
    appointment_type: str
    created_at: datetime
    updated_at: datetime

    patient: Optional[PatientSummary] = None
    doctor: Optional[DoctorSummary] = None
    clinic: Optional[ClinicSummary] = None


class AppointmentMessage(BaseModel):
    message: str
    appointment: AppointmentResponse


class BookedSlotsResponse(BaseModel):
    doctor_id: int
    date: str
    booked_slots: List[str]
