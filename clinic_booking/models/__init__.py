from .user import User
from .clinic import Clinic
from .doctor import Doctor
from .appointment import Appointment, AppointmentStatus

__all__ = ["User", "Clinic", "Doctor", "Appointment", "AppointmentStatus"]
