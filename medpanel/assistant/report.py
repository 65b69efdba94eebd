import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, List

from medpanel.repositories.message_repository import MessageRepository
from medpanel.schemas.patient import PatientSummary
from medpanel.services.health_service import HealthService


logger = logging.getLogger(__name__)

MEASUREMENT_LIMIT = 20
EXERCISE_PLAN_LIMIT = 5
MESSAGE_LIMIT = 10


@dataclass
class PatientReportData:
    patient: PatientSummary
    measurements: List[Dict[str, Any]] = field(default_factory=list)
    complaints: List[Dict[str, Any]] = field(default_factory=list)
    exercise_plans: List[Dict[str, Any]] = field(default_factory=list)
    recent_messages: List[Dict[str, Any]] = field(default_factory=list)


async def _recent_messages(message_repo: MessageRepository, patient: PatientSummary) -> List[Dict[str, Any]]:
    if not patient.user_id:
        return []
    return await message_repo.recent_involving(patient.user_id, limit=MESSAGE_LIMIT)


async def gather_patient_data(
    patient: PatientSummary,
    health_service: HealthService,
    message_repo: MessageRepository,
) -> PatientReportData:
    """Fetch every report section concurrently; a failing section is logged and left empty."""
    sections: Dict[str, Awaitable[List[Dict[str, Any]]]] = {
        "measurements": health_service.list_measurements(patient.id, limit=MEASUREMENT_LIMIT),
        "complaints": health_service.list_complaints(patient.id),
        "exercise_plans": health_service.list_exercise_plans(patient.id, limit=EXERCISE_PLAN_LIMIT),
        "recent_messages": _recent_messages(message_repo, patient),
    }
    results = await asyncio.gather(*sections.values(), return_exceptions=True)

    data = PatientReportData(patient=patient)
    for name, result in zip(sections, results):
        if isinstance(result, BaseException):
            if isinstance(result, asyncio.CancelledError):
                raise result
            logger.warning("Report section %s for patient %s failed: %s", name, patient.id, result)
            continue
        setattr(data, name, result)
    return data
