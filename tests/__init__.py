"""
Test suite for the Clinic Booking API.

Contains unit and integration tests for the application's functionality.
"""
