from fastapi import APIRouter, Depends, Query

from medpanel.assistant.session import SessionState
from medpanel.database.connection import mongo_db_dependency
from medpanel.repositories.complaint_repository import ComplaintRepository
from medpanel.repositories.measurement_repository import MeasurementRepository
from medpanel.repositories.message_repository import MessageRepository
from medpanel.repositories.patient_repository import PatientRepository
from medpanel.schemas.dashboard import DashboardStats, PaneWidths
from medpanel.services.dashboard_service import DashboardService
from medpanel.utils.dependencies import get_current_doctor, get_session_state


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def get_dashboard_service(db = Depends(mongo_db_dependency)) -> DashboardService:
    return DashboardService(PatientRepository(db), MessageRepository(db), ComplaintRepository(db), MeasurementRepository(db))


@router.get("/stats", response_model=DashboardStats)
async def get_stats(doctor: dict = Depends(get_current_doctor), service: DashboardService = Depends(get_dashboard_service)):
    return await service.stats(doctor["_id"], doctor["user_id"])


@router.get("/unread")
async def get_unread_messages(limit: int = Query(5, ge=1, le=50), doctor: dict = Depends(get_current_doctor), service: DashboardService = Depends(get_dashboard_service)):
    return {"items": await service.unread_messages(doctor["_id"], doctor["user_id"], limit=limit)}


@router.get("/activities")
async def get_recent_activities(limit: int = Query(10, ge=1, le=50), doctor: dict = Depends(get_current_doctor), service: DashboardService = Depends(get_dashboard_service)):
    return {"items": await service.recent_activities(doctor["_id"], limit=limit)}


@router.get("/layout", response_model=PaneWidths)
async def get_layout(state: SessionState = Depends(get_session_state)):
    return PaneWidths(**state.layout.widths())


@router.put("/layout", response_model=PaneWidths)
async def update_layout(body: PaneWidths, state: SessionState = Depends(get_session_state)):
    return PaneWidths(**state.layout.restore(body.left, body.right))
