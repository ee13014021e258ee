from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.database import get_db
from ...api.deps import get_current_user
from ...services.scheduling_service import SchedulingService, DOCTOR_STATUSES, BASIC_STATUSES
from ...schemas.appointment import (
    AppointmentCreate, AppointmentStatusUpdate, AppointmentResponse,
    AppointmentMessage, BookedSlotsResponse
)
from ...models.user import User

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def _message(message: str, appointment) -> AppointmentMessage:
    return AppointmentMessage(message=message, appointment=AppointmentResponse.model_validate(appointment))


@router.post("", response_model=AppointmentMessage)
async def book_appointment(
    booking: AppointmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Book an appointment for the current user."""
    appointment = SchedulingService(db).book_appointment(
        patient_id=current_user.id,
        doctor_id=booking.doctor_id,
        clinic_id=booking.clinic_id,
        slot=booking.slot,
        notes=booking.notes,
    )
    return _message("Appointment booked successfully", appointment)


@router.get("/my", response_model=List[AppointmentResponse])
async def my_appointments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """The current user's appointments, earliest first."""
    return SchedulingService(db).list_patient_appointments(current_user.id)


@router.get("/doctor/{doctor_id}", response_model=List[AppointmentResponse])
async def doctor_appointments(
    doctor_id: int,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Appointments for a doctor; doctor_id may also be the doctor's user id."""
    return SchedulingService(db).list_doctor_appointments(doctor_id, status, viewer=current_user)


@router.get("/booked-slots/{doctor_id}/{date}", response_model=BookedSlotsResponse)
async def booked_slots(doctor_id: int, date: str, db: Session = Depends(get_db)):
    """Times already taken for a doctor on a day (HH:MM)."""
    slots = SchedulingService(db).get_booked_slots(doctor_id, date)
    return BookedSlotsResponse(doctor_id=doctor_id, date=date, booked_slots=slots)


@router.put("/{appointment_id}", response_model=AppointmentMessage)
async def update_appointment(
    appointment_id: int,
    update: AppointmentStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Set status to booked, completed or cancelled (appointment's doctor only)."""
    appointment = SchedulingService(db).update_status(
        appointment_id, update.status, current_user.id, allowed=BASIC_STATUSES
    )
    return _message("Appointment updated successfully", appointment)


@router.put("/{appointment_id}/status", response_model=AppointmentMessage)
async def update_appointment_status(
    appointment_id: int,
    update: AppointmentStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Set status to pending, confirmed, completed or cancelled (appointment's doctor only)."""
    appointment = SchedulingService(db).update_status(
        appointment_id, update.status, current_user.id, allowed=DOCTOR_STATUSES
    )
    return _message("Appointment status updated successfully", appointment)


@router.put("/{appointment_id}/cancel", response_model=AppointmentMessage)
async def cancel_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    appointment = SchedulingService(db).cancel_appointment(appointment_id, current_user.id)
    return _message("Appointment cancelled successfully", appointment)


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Cancel an appointment. The record is kept for history."""
    SchedulingService(db).cancel_appointment(appointment_id, current_user.id)
    return {"message": "Appointment cancelled successfully"}
