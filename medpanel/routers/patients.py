from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from medpanel.database.connection import mongo_db_dependency
from medpanel.repositories.doctor_repository import DoctorRepository
from medpanel.repositories.patient_repository import PatientRepository
from medpanel.repositories.user_repository import UserRepository
from medpanel.schemas.patient import PatientCreate, PatientSummary
from medpanel.services.patient_service import PatientService, PatientValidationError
from medpanel.utils.dependencies import get_current_doctor


router = APIRouter(prefix="/patients", tags=["patients"])


def get_patient_service(db = Depends(mongo_db_dependency)) -> PatientService:
    return PatientService(PatientRepository(db), DoctorRepository(db), UserRepository(db))


async def get_owned_patient(patient_id: str, doctor: dict = Depends(get_current_doctor), service: PatientService = Depends(get_patient_service)) -> PatientSummary:
    """The path's patient, provided it is on the current doctor's roster."""
    try:
        return await service.get_patient(doctor["_id"], patient_id)
    except (LookupError, PermissionError):
        # another doctor's patient is reported exactly like a missing one
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Patient not found")


@router.get("")
async def list_patients(search: Optional[str] = None, doctor: dict = Depends(get_current_doctor), service: PatientService = Depends(get_patient_service)):
    patients = await service.roster(doctor["_id"], search)
    return {"items": patients, "total": len(patients)}


@router.post("", response_model=PatientSummary, status_code=status.HTTP_201_CREATED)
async def add_patient(body: PatientCreate, doctor: dict = Depends(get_current_doctor), service: PatientService = Depends(get_patient_service)):
    try:
        return await service.add_patient(doctor["_id"], body)
    except PatientValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("/{patient_id}", response_model=PatientSummary)
async def get_patient(patient: PatientSummary = Depends(get_owned_patient)):
    return patient
