"""
Appointment scheduling.

The (doctor, slot) uniqueness of active appointments is enforced by the
partial unique index on the appointments table. Bookings and status changes
simply write and let the database reject a double booking, so concurrent
requests across any number of API processes cannot both succeed.
"""

from datetime import datetime, timedelta
import logging
from typing import FrozenSet, List, Optional, Tuple, Union

from sqlalchemy import String, cast
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ..core.errors import InvalidInput, NotFound, Forbidden, SlotConflict
from ..core.security import UserRole
from ..core.timeutils import (
    day_bounds, format_time_of_day, parse_date, parse_slot, start_of_today
)
from ..models.appointment import Appointment, AppointmentStatus
from ..models.clinic import Clinic
from ..models.doctor import Doctor
from ..models.user import User

logger = logging.getLogger(__name__)

# Statuses a doctor may set through the status endpoint
DOCTOR_STATUSES: FrozenSet[AppointmentStatus] = frozenset({
    AppointmentStatus.PENDING,
    AppointmentStatus.CONFIRMED,
    AppointmentStatus.COMPLETED,
    AppointmentStatus.CANCELLED,
})

# Statuses accepted by the plain update endpoint
BASIC_STATUSES: FrozenSet[AppointmentStatus] = frozenset({
    AppointmentStatus.BOOKED,
    AppointmentStatus.COMPLETED,
    AppointmentStatus.CANCELLED,
})

# Statuses that count as "upcoming" in dashboard statistics
UPCOMING_STATUSES: FrozenSet[AppointmentStatus] = frozenset({
    AppointmentStatus.PENDING,
    AppointmentStatus.CONFIRMED,
    AppointmentStatus.BOOKED,
})


class SchedulingService:
    def __init__(self, db: Session):
        self.db = db

    def _commit_or_conflict(self) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise SlotConflict("This time slot is already booked")

    def _get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.db.get(Appointment, appointment_id)
        if not appointment:
            raise NotFound("Appointment not found")
        return appointment

    def _doctor_user_id(self, appointment: Appointment) -> Optional[int]:
        return appointment.doctor.user_id if appointment.doctor else None

    def _readable_slots(self, *criteria) -> List[Tuple[int, AppointmentStatus, datetime]]:
        """
        Return (id, status, slot) for matching appointments.

        Slots are read as text and parsed here so a corrupt stored value is
        logged and skipped instead of failing the whole result set.
        """
        rows = (
            self.db.query(Appointment.id, Appointment.status, cast(Appointment.slot, String))
            .filter(*criteria)
            .all()
        )

        readable = []
        for appointment_id, status, raw_slot in rows:
            slot = parse_slot(raw_slot)
            if slot is None:
                logger.warning(f"Skipping appointment {appointment_id} with unreadable slot {raw_slot!r}")
                continue
            readable.append((appointment_id, status, slot))
        return readable

    def _load_appointments(self, criteria, *relations) -> List[Appointment]:
        ids = [appointment_id for appointment_id, _, _ in self._readable_slots(*criteria)]
        if not ids:
            return []
        return (
            self.db.query(Appointment)
            .options(*[joinedload(relation) for relation in relations])
            .filter(Appointment.id.in_(ids))
            .order_by(Appointment.slot.asc())
            .all()
        )

    def book_appointment(
        self,
        patient_id: int,
        doctor_id: Optional[int],
        clinic_id: Optional[int],
        slot: Union[str, datetime, None],
        notes: Optional[str] = None,
    ) -> Appointment:
        """Book a slot with a doctor for the given patient."""
        if not doctor_id or not clinic_id or not slot:
            raise InvalidInput("Doctor, clinic, and slot are required")

        slot_time = parse_slot(slot)
        if slot_time is None:
            raise InvalidInput("Slot must be a valid timestamp")

        # Only future days can be booked: today and earlier are rejected
        if slot_time < start_of_today() + timedelta(days=1):
            raise InvalidInput("Appointments must be booked for a future date")

        if not self.db.get(Doctor, doctor_id):
            raise NotFound("Doctor not found")
        if not self.db.get(Clinic, clinic_id):
            raise NotFound("Clinic not found")

        now = datetime.now()
        appointment = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            clinic_id=clinic_id,
            slot=slot_time,
            notes=notes or "",
            status=AppointmentStatus.BOOKED,
            created_at=now,
            updated_at=now,
        )
        self.db.add(appointment)
        self._commit_or_conflict()
        self.db.refresh(appointment)

        logger.info(
            f"Appointment {appointment.id} booked: patient={patient_id} "
            f"doctor={doctor_id} slot={slot_time.isoformat()}"
        )
        return appointment

    def list_patient_appointments(self, patient_id: int) -> List[Appointment]:
        return self._load_appointments(
            [Appointment.patient_id == patient_id], Appointment.doctor, Appointment.clinic
        )

    def resolve_doctor_id(self, doctor_or_user_id: int) -> int:
        """Accept either a doctor id or the id of the user linked to a doctor."""
        doctor = self.db.query(Doctor).filter(Doctor.user_id == doctor_or_user_id).first()
        if doctor:
            return doctor.id
        return doctor_or_user_id

    def list_doctor_appointments(
        self,
        doctor_or_user_id: int,
        status_filter: Optional[str] = None,
        viewer: Optional[User] = None,
    ) -> List[Appointment]:
        """
        List a doctor's appointments, earliest first.

        When a viewer is given, only an admin or the doctor's own user may
        see the list.
        """
        doctor_id = self.resolve_doctor_id(doctor_or_user_id)

        if viewer is not None and viewer.role != UserRole.ADMIN:
            doctor = self.db.get(Doctor, doctor_id)
            if not doctor or doctor.user_id != viewer.id:
                raise Forbidden("Not authorized to view these appointments")

        criteria = [Appointment.doctor_id == doctor_id]
        if status_filter and status_filter != "all":
            if status_filter == "active":
                criteria.append(Appointment.status != AppointmentStatus.CANCELLED)
            else:
                try:
                    wanted = AppointmentStatus(status_filter)
                except ValueError:
                    raise InvalidInput(f"Invalid status filter: {status_filter}")
                criteria.append(Appointment.status == wanted)

        return self._load_appointments(criteria, Appointment.patient, Appointment.clinic)

    def get_booked_slots(self, doctor_id: int, day) -> List[str]:
        """Return the sorted HH:MM times already taken on a calendar day."""
        parsed_day = parse_date(day)
        if parsed_day is None:
            raise InvalidInput("Invalid date")

        start, end = day_bounds(parsed_day)
        rows = self._readable_slots(
            Appointment.doctor_id == doctor_id,
            Appointment.status != AppointmentStatus.CANCELLED,
            Appointment.slot >= start,
            Appointment.slot <= end,
        )
        return sorted({format_time_of_day(slot) for _, _, slot in rows})

    def get_available_slots(self, doctor: Doctor, day) -> List[str]:
        """Return the doctor's open HH:MM times on a day, minus booked ones."""
        parsed_day = parse_date(day)
        if parsed_day is None:
            raise InvalidInput("Invalid date")

        booked = set(self.get_booked_slots(doctor.id, parsed_day))
        available = set()
        for raw in doctor.available_slots or []:
            slot = parse_slot(raw)
            if slot is None:
                logger.warning(f"Skipping unreadable slot {raw!r} on doctor {doctor.id}")
                continue
            if slot.date() == parsed_day:
                available.add(format_time_of_day(slot))
        return sorted(available - booked)

    def update_status(
        self,
        appointment_id: int,
        new_status: str,
        acting_user_id: int,
        allowed: FrozenSet[AppointmentStatus] = DOCTOR_STATUSES,
    ) -> Appointment:
        """Change an appointment's status. Only the appointment's doctor may do this."""
        appointment = self._get_appointment(appointment_id)

        try:
            status = AppointmentStatus(new_status)
        except ValueError:
            status = None
        if status not in allowed:
            valid = ", ".join(sorted(s.value for s in allowed))
            raise InvalidInput(f"Invalid status. Must be one of: {valid}")

        if self._doctor_user_id(appointment) != acting_user_id:
            raise Forbidden("Only the doctor on this appointment can change its status")

        previous = appointment.status
        appointment.status = status
        appointment.updated_at = datetime.now()
        # Reviving a cancelled appointment can collide with a newer booking
        self._commit_or_conflict()
        self.db.refresh(appointment)

        logger.info(f"Appointment {appointment.id} status {previous.value} -> {status.value}")
        return appointment

    def cancel_appointment(self, appointment_id: int, acting_user_id: int) -> Appointment:
        """Soft-cancel an appointment on behalf of its patient or doctor."""
        appointment = self._get_appointment(appointment_id)

        if acting_user_id not in (appointment.patient_id, self._doctor_user_id(appointment)):
            raise Forbidden("Not authorized to cancel this appointment")

        if appointment.status != AppointmentStatus.CANCELLED:
            appointment.status = AppointmentStatus.CANCELLED
            appointment.updated_at = datetime.now()
            self.db.commit()
            self.db.refresh(appointment)
            logger.info(f"Appointment {appointment.id} cancelled by user {acting_user_id}")

        return appointment

    def stats_for_user(self, user: User) -> dict:
        stats = {
            "total_appointments": 0,
            "upcoming_appointments": 0,
            "completed_appointments": 0,
            "cancelled_appointments": 0,
        }

        if user.role == UserRole.PATIENT:
            criterion = Appointment.patient_id == user.id
        elif user.role == UserRole.DOCTOR and user.doctor:
            criterion = Appointment.doctor_id == user.doctor.id
        else:
            return stats

        now = datetime.now()
        for _, status, slot in self._readable_slots(criterion):
            stats["total_appointments"] += 1
            if status in UPCOMING_STATUSES and slot > now:
                stats["upcoming_appointments"] += 1
            elif status == AppointmentStatus.COMPLETED:
                stats["completed_appointments"] += 1
            elif status == AppointmentStatus.CANCELLED:
                stats["cancelled_appointments"] += 1
        return stats
