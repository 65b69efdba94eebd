from fastapi import APIRouter, Depends, HTTPException, status

from medpanel.schemas.doctor import DoctorProfile, DoctorProfileUpdate, Specialization
from medpanel.services.doctor_service import DoctorService
from medpanel.utils.dependencies import get_current_doctor_user, get_doctor_service


router = APIRouter(prefix="/doctors", tags=["doctor"])


@router.get("/me", response_model=DoctorProfile)
async def get_my_profile(current_user: dict = Depends(get_current_doctor_user), service: DoctorService = Depends(get_doctor_service)):
    try:
        return await service.get_profile(current_user["_id"])
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.patch("/me", response_model=DoctorProfile)
async def update_my_profile(body: DoctorProfileUpdate, current_user: dict = Depends(get_current_doctor_user), service: DoctorService = Depends(get_doctor_service)):
    try:
        return await service.update_profile(current_user["_id"], body)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("/specializations")
async def list_specializations(current_user: dict = Depends(get_current_doctor_user), service: DoctorService = Depends(get_doctor_service)):
    items = await service.list_specializations()
    return {"items": [Specialization.model_validate(s) for s in items]}
