"""Clinic and doctor directory"""

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..core.errors import Forbidden, InvalidInput, NotFound
from ..core.security import UserRole
from ..core.timeutils import parse_slot
from ..models.clinic import Clinic
from ..models.doctor import Doctor
from ..models.user import User
from ..schemas.clinic import ClinicCreate, ClinicUpdate
from ..schemas.doctor import DoctorCreate, DoctorUpdate

logger = logging.getLogger(__name__)


def normalize_slots(raw_slots: List[str]) -> List[str]:
    """Parse, deduplicate and sort slot timestamps, returning ISO strings."""
    parsed = set()
    for raw in raw_slots:
        slot = parse_slot(raw)
        if slot is None:
            raise InvalidInput(f"Invalid slot timestamp: {raw}")
        parsed.add(slot)
    return [slot.isoformat() for slot in sorted(parsed)]


class DirectoryService:
    def __init__(self, db: Session):
        self.db = db

    # Clinics

    def list_clinics(self) -> List[Clinic]:
        return self.db.query(Clinic).order_by(Clinic.name.asc()).all()

    def get_clinic(self, clinic_id: int) -> Clinic:
        clinic = self.db.get(Clinic, clinic_id)
        if not clinic:
            raise NotFound("Clinic not found")
        return clinic

    def _clinic_exists(self, name: str, location: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Clinic.id).filter(
            func.lower(Clinic.name) == name.strip().lower(),
            func.lower(Clinic.location) == location.strip().lower(),
        )
        if exclude_id is not None:
            query = query.filter(Clinic.id != exclude_id)
        return query.first() is not None

    def create_clinic(self, data: ClinicCreate) -> Clinic:
        if self._clinic_exists(data.name, data.location):
            raise InvalidInput("A clinic with this name and location already exists")

        clinic = Clinic(name=data.name.strip(), location=data.location.strip())
        self.db.add(clinic)
        self.db.commit()
        self.db.refresh(clinic)
        logger.info(f"Clinic {clinic.id} created")
        return clinic

    def update_clinic(self, clinic_id: int, data: ClinicUpdate) -> Clinic:
        clinic = self.get_clinic(clinic_id)
        if self._clinic_exists(data.name, data.location, exclude_id=clinic.id):
            raise InvalidInput("A clinic with this name and location already exists")

        clinic.name = data.name.strip()
        clinic.location = data.location.strip()
        self.db.commit()
        self.db.refresh(clinic)
        return clinic

    def delete_clinic(self, clinic_id: int) -> None:
        """Delete a clinic. Doctors are detached and appointments keep their history."""
        clinic = self.get_clinic(clinic_id)
        self.db.delete(clinic)
        self.db.commit()
        logger.info(f"Clinic {clinic_id} deleted")

    # Doctors

    def list_doctors(
        self,
        clinic_id: Optional[int] = None,
        specialization: Optional[str] = None,
        include_inactive: bool = False,
    ) -> List[Doctor]:
        query = self.db.query(Doctor).options(joinedload(Doctor.clinic))
        if not include_inactive:
            query = query.filter(Doctor.is_active.is_(True))
        if clinic_id is not None:
            query = query.filter(Doctor.clinic_id == clinic_id)
        if specialization:
            query = query.filter(func.lower(Doctor.specialization) == specialization.lower())
        return query.order_by(Doctor.name.asc()).all()

    def get_doctor(self, doctor_id: int) -> Doctor:
        doctor = self.db.get(Doctor, doctor_id)
        if not doctor:
            raise NotFound("Doctor not found")
        return doctor

    def find_doctor_for_user(self, user_id: int) -> Optional[Doctor]:
        return self.db.query(Doctor).filter(Doctor.user_id == user_id).first()

    def _check_clinic(self, clinic_id: Optional[int]) -> None:
        if clinic_id is not None:
            self.get_clinic(clinic_id)

    def _check_can_edit(self, doctor: Doctor, acting_user: User) -> None:
        if acting_user.role == UserRole.ADMIN:
            return
        if doctor.user_id is None or doctor.user_id != acting_user.id:
            raise Forbidden("Not authorized to modify this doctor profile")

    def create_doctor(self, data: DoctorCreate) -> Doctor:
        self._check_clinic(data.clinic_id)
        doctor = Doctor(
            name=data.name,
            specialization=data.specialization,
            clinic_id=data.clinic_id,
            license_number=data.license_number,
            experience_years=data.experience_years,
            education=data.education,
            phone=data.phone,
            available_slots=normalize_slots(data.available_slots),
        )
        self.db.add(doctor)
        self.db.commit()
        self.db.refresh(doctor)
        logger.info(f"Doctor {doctor.id} created")
        return doctor

    def update_doctor(self, doctor_id: int, data: DoctorUpdate, acting_user: User) -> Doctor:
        doctor = self.get_doctor(doctor_id)
        self._check_can_edit(doctor, acting_user)

        updates = data.model_dump(exclude_unset=True)
        if "clinic_id" in updates:
            self._check_clinic(updates["clinic_id"])

        for key, value in updates.items():
            if value is None and key != "clinic_id":
                continue
            setattr(doctor, key, value)

        self.db.commit()
        self.db.refresh(doctor)
        return doctor

    def set_available_slots(self, doctor_id: int, slots: List[str], acting_user: User) -> Doctor:
        doctor = self.get_doctor(doctor_id)
        self._check_can_edit(doctor, acting_user)

        doctor.available_slots = normalize_slots(slots)
        self.db.commit()
        self.db.refresh(doctor)
        logger.info(f"Doctor {doctor.id} now has {len(doctor.available_slots)} available slots")
        return doctor
