from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_admin_user
from ...services.directory_service import DirectoryService
from ...schemas.clinic import ClinicCreate, ClinicUpdate, ClinicResponse, ClinicMessage

router = APIRouter(prefix="/clinics", tags=["Clinics"])


@router.get("", response_model=List[ClinicResponse])
async def list_clinics(db: Session = Depends(get_db)):
    """List all clinics by name."""
    return DirectoryService(db).list_clinics()


@router.get("/{clinic_id}", response_model=ClinicResponse)
async def get_clinic(clinic_id: int, db: Session = Depends(get_db)):
    return DirectoryService(db).get_clinic(clinic_id)


@router.post("", response_model=ClinicMessage, dependencies=[Depends(get_admin_user)])
async def create_clinic(clinic_data: ClinicCreate, db: Session = Depends(get_db)):
    """Add a clinic (admin only)."""
    clinic = DirectoryService(db).create_clinic(clinic_data)
    return ClinicMessage(message="Clinic added successfully", clinic=ClinicResponse.model_validate(clinic))


@router.put("/{clinic_id}", response_model=ClinicMessage, dependencies=[Depends(get_admin_user)])
async def update_clinic(clinic_id: int, clinic_data: ClinicUpdate, db: Session = Depends(get_db)):
    """Update a clinic (admin only)."""
    clinic = DirectoryService(db).update_clinic(clinic_id, clinic_data)
    return ClinicMessage(message="Clinic updated successfully", clinic=ClinicResponse.model_validate(clinic))


@router.delete("/{clinic_id}", dependencies=[Depends(get_admin_user)])
async def delete_clinic(clinic_id: int, db: Session = Depends(get_db)):
    """Delete a clinic (admin only). Existing appointments are kept."""
    DirectoryService(db).delete_clinic(clinic_id)
    return {"message": "Clinic deleted successfully"}
