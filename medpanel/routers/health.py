from fastapi import APIRouter, Depends, HTTPException, Query, status

from medpanel.database.connection import mongo_db_dependency
from medpanel.repositories.complaint_repository import ComplaintRepository
from medpanel.repositories.exercise_repository import ExerciseRepository
from medpanel.repositories.measurement_repository import MeasurementRepository
from medpanel.routers.patients import get_owned_patient
from medpanel.schemas.health import Complaint, Exercise, ExercisePlan, ExercisePlanCreate, Measurement
from medpanel.schemas.patient import PatientSummary
from medpanel.services.health_service import HealthService
from medpanel.utils.dependencies import get_current_doctor_user


router = APIRouter(tags=["health"])


def get_health_service(db = Depends(mongo_db_dependency)) -> HealthService:
    return HealthService(MeasurementRepository(db), ComplaintRepository(db), ExerciseRepository(db))


@router.get("/patients/{patient_id}/measurements")
async def list_measurements(limit: int = Query(20, ge=1, le=200), patient: PatientSummary = Depends(get_owned_patient), service: HealthService = Depends(get_health_service)):
    rows = await service.list_measurements(patient.id, limit=limit)
    return {"items": [Measurement.model_validate(r) for r in rows]}


@router.get("/patients/{patient_id}/complaints")
async def list_complaints(patient: PatientSummary = Depends(get_owned_patient), service: HealthService = Depends(get_health_service)):
    rows = await service.list_complaints(patient.id)
    return {"items": [Complaint.model_validate(r) for r in rows]}


@router.post("/patients/{patient_id}/complaints/{complaint_id}/resolve", response_model=Complaint)
async def resolve_complaint(complaint_id: str, patient: PatientSummary = Depends(get_owned_patient), service: HealthService = Depends(get_health_service)):
    try:
        return Complaint.model_validate(await service.resolve_complaint(patient.id, complaint_id))
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("/exercises")
async def list_exercises(current_user: dict = Depends(get_current_doctor_user), service: HealthService = Depends(get_health_service)):
    rows = await service.list_exercises()
    return {"items": [Exercise.model_validate(r) for r in rows]}


@router.get("/patients/{patient_id}/exercise-plans")
async def list_exercise_plans(patient: PatientSummary = Depends(get_owned_patient), service: HealthService = Depends(get_health_service)):
    rows = await service.list_exercise_plans(patient.id)
    return {"items": [ExercisePlan.model_validate(r) for r in rows]}


@router.post("/patients/{patient_id}/exercise-plans", response_model=ExercisePlan, status_code=status.HTTP_201_CREATED)
async def add_exercise_plan(body: ExercisePlanCreate, patient: PatientSummary = Depends(get_owned_patient), service: HealthService = Depends(get_health_service)):
    try:
        plan = await service.add_exercise_plan(patient.id, body)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return ExercisePlan.model_validate(plan)


@router.post("/patients/{patient_id}/exercise-plans/{plan_id}/complete")
async def complete_exercise_plan(plan_id: str, patient: PatientSummary = Depends(get_owned_patient), service: HealthService = Depends(get_health_service)):
    try:
        await service.complete_exercise_plan(patient.id, plan_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return {"ok": True}


@router.delete("/patients/{patient_id}/exercise-plans/{plan_id}")
async def remove_exercise_plan(plan_id: str, patient: PatientSummary = Depends(get_owned_patient), service: HealthService = Depends(get_health_service)):
    try:
        await service.remove_exercise_plan(patient.id, plan_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return {"ok": True}
