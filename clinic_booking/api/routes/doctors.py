from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.database import get_db
from ...api.deps import get_current_user, get_admin_user
from ...services.directory_service import DirectoryService
from ...services.scheduling_service import SchedulingService
from ...schemas.doctor import (
    DoctorCreate, DoctorUpdate, DoctorSlotsUpdate, DoctorResponse, AvailableSlotsResponse
)
from ...models.user import User

router = APIRouter(prefix="/doctors", tags=["Doctors"])


@router.get("", response_model=List[DoctorResponse])
async def list_doctors(
    clinic_id: Optional[int] = None,
    specialization: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """List active doctors, optionally filtered by clinic or specialization."""
    return DirectoryService(db).list_doctors(clinic_id=clinic_id, specialization=specialization)


@router.get("/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(doctor_id: int, db: Session = Depends(get_db)):
    return DirectoryService(db).get_doctor(doctor_id)


@router.get("/{doctor_id}/available-slots/{date}", response_model=AvailableSlotsResponse)
async def get_available_slots(doctor_id: int, date: str, db: Session = Depends(get_db)):
    """Open times for a doctor on a day, with booked times removed."""
    doctor = DirectoryService(db).get_doctor(doctor_id)
    slots = SchedulingService(db).get_available_slots(doctor, date)
    return AvailableSlotsResponse(doctor_id=doctor.id, date=date, available_slots=slots)


@router.post("", response_model=DoctorResponse, dependencies=[Depends(get_admin_user)])
async def create_doctor(doctor_data: DoctorCreate, db: Session = Depends(get_db)):
    """Add a doctor profile not linked to a user account (admin only)."""
    return DirectoryService(db).create_doctor(doctor_data)


@router.put("/{doctor_id}", response_model=DoctorResponse)
async def update_doctor(
    doctor_id: int,
    doctor_data: DoctorUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update a doctor profile (the doctor themself or an admin)."""
    return DirectoryService(db).update_doctor(doctor_id, doctor_data, current_user)


@router.put("/{doctor_id}/slots", response_model=DoctorResponse)
async def set_available_slots(
    doctor_id: int,
    slots_data: DoctorSlotsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Replace a doctor's available slots."""
    return DirectoryService(db).set_available_slots(doctor_id, slots_data.available_slots, current_user)
