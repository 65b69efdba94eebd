from fastapi import APIRouter, Depends

from medpanel.assistant.session import SessionState
from medpanel.database.connection import mongo_db_dependency
from medpanel.repositories.message_repository import MessageRepository
from medpanel.routers.health import get_health_service
from medpanel.routers.patients import get_owned_patient
from medpanel.schemas.assistant import AssistantPrompt, AssistantState
from medpanel.schemas.patient import PatientSummary
from medpanel.services.health_service import HealthService
from medpanel.utils.dependencies import get_session_state


router = APIRouter(prefix="/assistant", tags=["assistant"])


def get_message_repository(db = Depends(mongo_db_dependency)) -> MessageRepository:
    return MessageRepository(db)


@router.get("/messages", response_model=AssistantState)
async def get_messages(state: SessionState = Depends(get_session_state)):
    return state.assistant.state()


@router.post("/messages", response_model=AssistantState)
async def send_message(body: AssistantPrompt, state: SessionState = Depends(get_session_state)):
    await state.assistant.send_message(body.content)
    return state.assistant.state()


@router.delete("/messages", response_model=AssistantState)
async def clear_messages(state: SessionState = Depends(get_session_state)):
    state.assistant.clear_messages()
    return state.assistant.state()


@router.post("/reports/{patient_id}", response_model=AssistantState)
async def generate_report(
    patient: PatientSummary = Depends(get_owned_patient),
    state: SessionState = Depends(get_session_state),
    health_service: HealthService = Depends(get_health_service),
    message_repo: MessageRepository = Depends(get_message_repository),
):
    await state.assistant.generate_patient_report(patient, health_service, message_repo)
    return state.assistant.state()
