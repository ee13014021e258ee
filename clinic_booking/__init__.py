"""
Clinic Booking API

A FastAPI backend for clinic appointment booking, with user accounts,
clinic and doctor directories, slot-conflict-checked scheduling and
one-time-code password reset.
"""

__version__ = "1.0.0"
