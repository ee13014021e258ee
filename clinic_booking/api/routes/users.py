from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.config import Settings, get_settings
from ...core.database import get_db
from ...api.deps import get_current_user
from ...services.auth_service import AuthService
from ...services.scheduling_service import SchedulingService
from ...schemas.auth import UserResponse
from ...schemas.doctor import DoctorResponse
from ...schemas.user import ProfileUpdate, ProfileResponse, UserStats
from ...models.user import User

router = APIRouter(prefix="/users", tags=["Users"])


def _profile(user: User) -> ProfileResponse:
    return ProfileResponse(
        user=UserResponse.model_validate(user),
        doctor_profile=DoctorResponse.model_validate(user.doctor) if user.doctor else None,
    )


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    """Current user, with the doctor profile for doctors."""
    return _profile(current_user)


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = AuthService(db, settings).update_profile(current_user, profile_data)
    return _profile(user)


@router.delete("/profile")
async def delete_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Delete the account and its doctor profile. Appointments are kept."""
    AuthService(db, settings).delete_account(current_user)
    return {"message": "Account deleted successfully"}


@router.get("/stats", response_model=UserStats)
async def get_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Appointment counts for the dashboard."""
    return UserStats(**SchedulingService(db).stats_for_user(current_user))
