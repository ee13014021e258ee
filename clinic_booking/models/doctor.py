from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base


class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=True)
    clinic_id = Column(Integer, ForeignKey("clinics.id", ondelete="SET NULL"), nullable=True)

    # Professional information
    name = Column(String(255), nullable=False)
    specialization = Column(String(100), nullable=False, default="General Physician")
    license_number = Column(String(50), nullable=False, default="Not provided")
    experience_years = Column(Integer, nullable=False, default=0)
    education = Column(String(255), nullable=False, default="Not provided")
    phone = Column(String(20), nullable=False, default="Not provided")

    # Availability: ISO-8601 timestamps, kept sorted
    available_slots = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, default=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="doctor")
    clinic = relationship("Clinic", back_populates="doctors")

    def __repr__(self):
        return f"<Doctor(id={self.id}, name='{self.name}', specialization='{self.specialization}')>"
