from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.config import Settings, get_settings
from ...core.database import get_db
from ...core.mailer import Mailer
from ...api.deps import get_current_user, get_mailer, rate_limit_check
from ...services.auth_service import AuthService
from ...services.recovery_service import RecoveryService
from ...schemas.auth import (
    UserLogin, UserRegister, TokenResponse, UserResponse, RegisterResponse,
    PasswordReset, PasswordResetConfirm, ChangePassword
)
from ...models.user import User

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=RegisterResponse)
async def register(
    user_data: UserRegister,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _: None = Depends(rate_limit_check)
):
    """Register a new patient or doctor."""
    auth_service = AuthService(db, settings)
    user = auth_service.register_user(user_data)

    return RegisterResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _: None = Depends(rate_limit_check)
):
    """Authenticate user and return an access token."""
    auth_service = AuthService(db, settings)
    return auth_service.authenticate_user(login_data)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user information."""
    return UserResponse.model_validate(current_user)


@router.post("/change-password")
async def change_password(
    password_data: ChangePassword,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Change user password."""
    auth_service = AuthService(db, settings)
    auth_service.change_password(
        current_user, password_data.current_password, password_data.new_password
    )

    return {"message": "Password changed successfully"}


@router.post("/forgot-password")
async def forgot_password(
    reset_data: PasswordReset,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer: Mailer = Depends(get_mailer),
    _: None = Depends(rate_limit_check)
):
    """Email a one-time password reset code."""
    recovery = RecoveryService(db, settings, mailer)
    recovery.request_reset(reset_data.email)

    return {"message": "A password reset code has been sent to your email"}


@router.post("/reset-password")
async def reset_password(
    reset_data: PasswordResetConfirm,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer: Mailer = Depends(get_mailer),
):
    """Set a new password using a reset code."""
    recovery = RecoveryService(db, settings, mailer)
    recovery.confirm_reset(reset_data.email, reset_data.code, reset_data.new_password)

    return {"message": "Password reset successfully"}
