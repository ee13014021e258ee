from datetime import datetime

from sqlalchemy import Column, Integer, ForeignKey, DateTime, Text, Index, Enum as SQLEnum, text
from sqlalchemy.orm import relationship
import enum

from ..core.database import Base


class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    BOOKED = "booked"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ACTIVE_SLOT_CLAUSE = text("status <> 'cancelled'")


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)

    # Non-owning references: appointments outlive the rows they point at
    patient_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id", ondelete="SET NULL"), nullable=True, index=True)
    clinic_id = Column(Integer, ForeignKey("clinics.id", ondelete="SET NULL"), nullable=True)

    # Appointment details
    slot = Column(DateTime, nullable=False, index=True)
    notes = Column(Text, nullable=False, default="")
    status = Column(
        SQLEnum(
            AppointmentStatus,
            name="appointment_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=AppointmentStatus.BOOKED,
    )

    # Tracking
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    # At most one non-cancelled appointment per doctor and slot
    __table_args__ = (
        Index(
            "uq_appointments_doctor_slot_active",
            "doctor_id",
            "slot",
            unique=True,
            postgresql_where=ACTIVE_SLOT_CLAUSE,
            sqlite_where=ACTIVE_SLOT_CLAUSE,
        ),
    )

    # Relationships
    patient = relationship("User", foreign_keys=[patient_id])
    doctor = relationship("Doctor", foreign_keys=[doctor_id])
    clinic = relationship("Clinic", foreign_keys=[clinic_id])

    @property
    def appointment_type(self) -> str:
        return "cancelled" if self.status == AppointmentStatus.CANCELLED else "active"

    def __repr__(self):
        return f"<Appointment(id={self.id}, doctor_id={self.doctor_id}, slot='{self.slot}', status='{self.status}')>"
