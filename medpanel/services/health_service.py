import logging
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional

from medpanel.repositories.complaint_repository import ComplaintRepository
from medpanel.repositories.exercise_repository import ExerciseRepository
from medpanel.repositories.measurement_repository import MeasurementRepository
from medpanel.schemas.health import ExercisePlanCreate


logger = logging.getLogger(__name__)


def start_of_day(day: Optional[date] = None) -> datetime:
    return datetime.combine(day or datetime.now(timezone.utc).date(), time.min, tzinfo=timezone.utc)


def format_duration(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} min"
    hours, rest = divmod(minutes, 60)
    return f"{hours}h {rest}min" if rest else f"{hours}h"


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def is_plan_active(plan: Dict[str, Any], now: Optional[datetime] = None) -> bool:
    now = now or datetime.now(timezone.utc)
    start = plan.get("start_date")
    if start is None or _aware(start) > now:
        return False
    end = plan.get("end_date")
    return end is None or _aware(end) >= now


class HealthService:

    def __init__(
        self,
        measurement_repo: MeasurementRepository,
        complaint_repo: ComplaintRepository,
        exercise_repo: ExerciseRepository,
    ) -> None:
        self._measurements = measurement_repo
        self._complaints = complaint_repo
        self._exercises = exercise_repo

    async def list_measurements(self, patient_id: str, limit: int = 20) -> List[Dict[str, Any]]:
        return await self._measurements.list_for_patient(patient_id, limit=limit)

    async def list_complaints(self, patient_id: str) -> List[Dict[str, Any]]:
        return await self._complaints.list_for_patient(patient_id)

    async def resolve_complaint(self, patient_id: str, complaint_id: str) -> Dict[str, Any]:
        complaint = await self._complaints.get(complaint_id)
        if not complaint or complaint.get("patient_id") != patient_id:
            raise LookupError("Complaint not found")
        if not complaint.get("is_active", True):
            return complaint
        await self._complaints.resolve(complaint_id, start_of_day())
        logger.info("Complaint %s resolved for patient %s", complaint_id, patient_id)
        return await self._complaints.get(complaint_id) or complaint

    async def list_exercises(self) -> List[Dict[str, Any]]:
        return await self._exercises.list_catalog()

    async def list_exercise_plans(self, patient_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        plans = await self._exercises.list_plans(patient_id, limit=limit)
        now = datetime.now(timezone.utc)
        for plan in plans:
            plan["active"] = is_plan_active(plan, now)
            plan["duration_label"] = format_duration(int(plan.get("duration_min") or 0))
        return plans

    async def add_exercise_plan(self, patient_id: str, data: ExercisePlanCreate) -> Dict[str, Any]:
        if not data.exercise_id or not data.frequency.strip():
            raise ValueError("Please fill in all fields")
        exercise = await self._exercises.get_exercise(data.exercise_id)
        if not exercise:
            raise LookupError("Exercise not found")
        plan = await self._exercises.create_plan(
            patient_id=patient_id,
            exercise_id=exercise["_id"],
            frequency=data.frequency.strip(),
            duration_min=data.duration_min,
            start_date=start_of_day(data.start_date),
        )
        plan["exercise"] = exercise
        plan["active"] = is_plan_active(plan)
        plan["duration_label"] = format_duration(plan["duration_min"])
        logger.info("Exercise plan %s added for patient %s", plan["_id"], patient_id)
        return plan

    async def _owned_plan(self, patient_id: str, plan_id: str) -> Dict[str, Any]:
        plan = await self._exercises.get_plan(plan_id)
        if not plan or plan.get("patient_id") != patient_id:
            raise LookupError("Exercise plan not found")
        return plan

    async def complete_exercise_plan(self, patient_id: str, plan_id: str) -> None:
        await self._owned_plan(patient_id, plan_id)
        await self._exercises.set_end_date(plan_id, start_of_day())
        logger.info("Exercise plan %s marked complete", plan_id)

    async def remove_exercise_plan(self, patient_id: str, plan_id: str) -> None:
        await self._owned_plan(patient_id, plan_id)
        await self._exercises.delete_plan(plan_id)
        logger.info("Exercise plan %s removed", plan_id)
