from sqlalchemy.orm import Session
import logging

from ..models.user import User
from ..models.doctor import Doctor
from ..models.clinic import Clinic
from ..core.config import Settings
from ..core.errors import InvalidInput, Unauthorized, NotFound
from ..core.security import (
    verify_password, get_password_hash, create_access_token, UserRole
)
from ..schemas.auth import UserLogin, UserRegister, TokenResponse, UserResponse
from ..schemas.doctor import DoctorResponse
from ..schemas.user import ProfileUpdate
from .user_repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.users = UserRepository(db)

    def register_user(self, user_data: UserRegister) -> User:
        """Register a new user, with a doctor profile for doctors."""
        new_user = User(
            name=user_data.name,
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            role=UserRole(user_data.role),
        )

        if new_user.role == UserRole.DOCTOR:
            if user_data.clinic_id is not None and not self.db.get(Clinic, user_data.clinic_id):
                raise NotFound("Clinic not found")

            # Created in the same transaction as the user
            self.users.create(new_user, commit=False)
            self.db.add(Doctor(
                name=user_data.name,
                specialization=user_data.specialization or "General Physician",
                license_number=user_data.license_number or "Not provided",
                experience_years=user_data.experience_years or 0,
                education=user_data.education or "Not provided",
                phone=user_data.phone or "Not provided",
                clinic_id=user_data.clinic_id,
                user_id=new_user.id,
                available_slots=[],
            ))
            self.db.commit()
            self.db.refresh(new_user)
        else:
            self.users.create(new_user)

        logger.info(f"Registered {new_user.role.value} user {new_user.id}")
        return new_user

    def authenticate_user(self, login_data: UserLogin) -> TokenResponse:
        """Authenticate user and return an access token."""
        user = self.users.find_by_email(login_data.email)

        if not user or not verify_password(login_data.password, user.password_hash):
            raise Unauthorized("Invalid credentials")

        if login_data.role and user.role != login_data.role:
            raise Unauthorized(
                f"Invalid role. Expected: {login_data.role.value}, Found: {user.role.value}"
            )

        token = create_access_token(user.id, user.role, self.settings)

        doctor_profile = None
        if user.role == UserRole.DOCTOR and user.doctor:
            doctor_profile = DoctorResponse.model_validate(user.doctor)

        logger.info(f"User {user.id} logged in")

        return TokenResponse(
            access_token=token,
            expires_in=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            user=UserResponse.model_validate(user),
            doctor_profile=doctor_profile,
        )

    def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.password_hash):
            raise InvalidInput("Current password is incorrect")

        user.password_hash = get_password_hash(new_password)
        self.users.save(user)
        logger.info(f"Password changed for user {user.id}")

    def update_profile(self, user: User, data: ProfileUpdate) -> User:
        if data.name:
            user.name = data.name
            if user.doctor:
                user.doctor.name = data.name

        if data.email and data.email.lower() != user.email:
            if self.users.email_taken(data.email, exclude_user_id=user.id):
                raise InvalidInput("Email is already taken")
            user.email = data.email.lower()

        if data.new_password:
            if not data.current_password:
                raise InvalidInput("Current password is required to change password")
            if not verify_password(data.current_password, user.password_hash):
                raise InvalidInput("Current password is incorrect")
            user.password_hash = get_password_hash(data.new_password)

        return self.users.save(user)

    def delete_account(self, user: User) -> None:
        self.users.delete(user)
