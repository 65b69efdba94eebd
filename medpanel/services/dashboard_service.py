import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from medpanel.repositories.complaint_repository import ComplaintRepository
from medpanel.repositories.measurement_repository import MeasurementRepository
from medpanel.repositories.message_repository import MessageRepository
from medpanel.repositories.patient_repository import PatientRepository
from medpanel.schemas.dashboard import DashboardStats, RecentActivity, UnreadMessage


logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def truncate(text: str, limit: int = 50) -> str:
    text = text or ""
    return text[:limit] + ("..." if len(text) > limit else "")


def _full_name(patient: Dict[str, Any] | None) -> str:
    if not patient:
        return ""
    return f"{patient.get('name') or ''} {patient.get('surname') or ''}".strip()


def _sort_key(activity: RecentActivity) -> datetime:
    ts = activity.timestamp
    if ts is None:
        return _EPOCH
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


class DashboardService:

    def __init__(
        self,
        patient_repo: PatientRepository,
        message_repo: MessageRepository,
        complaint_repo: ComplaintRepository,
        measurement_repo: MeasurementRepository,
    ) -> None:
        self._patients = patient_repo
        self._messages = message_repo
        self._complaints = complaint_repo
        self._measurements = measurement_repo

    async def _roster(self, doctor_id: str) -> List[Dict[str, Any]]:
        return await self._patients.list_for_doctor(doctor_id)

    async def stats(self, doctor_id: str, doctor_user_id: str) -> DashboardStats:
        patients = await self._roster(doctor_id)
        patient_ids = [p["_id"] for p in patients]
        patient_user_ids = [p["user_id"] for p in patients if p.get("user_id")]
        unread = await self._messages.count_unread(doctor_user_id, patient_user_ids)
        pending = await self._complaints.count_active(patient_ids)
        return DashboardStats(total_patients=len(patients), unread_messages=unread, pending_complaints=pending)

    async def unread_messages(self, doctor_id: str, doctor_user_id: str, limit: int = 5) -> List[UnreadMessage]:
        patients = await self._roster(doctor_id)
        by_user = {p["user_id"]: p for p in patients if p.get("user_id")}
        if not by_user:
            return []
        messages = await self._messages.get_unread(doctor_user_id, sender_ids=by_user.keys(), limit=limit)
        result = []
        for m in messages:
            sender = by_user.get(m.get("sender_id"), {})
            result.append(UnreadMessage(
                id=m["_id"],
                content=m.get("content") or "",
                sender_name=sender.get("name") or "",
                sender_surname=sender.get("surname") or "",
                created_at=m.get("created_at"),
            ))
        return result

    async def recent_activities(self, doctor_id: str, limit: int = 10) -> List[RecentActivity]:
        patients = await self._roster(doctor_id)
        by_id = {p["_id"]: p for p in patients}
        by_user = {p["user_id"]: p for p in patients if p.get("user_id")}
        activities: List[RecentActivity] = []

        for m in await self._messages.recent_from_senders(by_user.keys(), limit=5):
            activities.append(RecentActivity(
                id=m["_id"],
                type="message",
                patient_name=_full_name(by_user.get(m.get("sender_id"))),
                description=truncate(m.get("content") or ""),
                timestamp=m.get("created_at"),
                status="read" if m.get("is_read") else "unread",
            ))

        for c in await self._complaints.recent_for_patients(by_id.keys(), limit=5):
            activities.append(RecentActivity(
                id=c["_id"],
                type="complaint",
                patient_name=_full_name(by_id.get(c.get("patient_id"))),
                description=truncate(c.get("description") or ""),
                timestamp=c.get("created_at"),
                status="active" if c.get("is_active") else "resolved",
            ))

        for ms in await self._measurements.recent_for_patients(by_id.keys(), limit=5):
            mtype = ms.get("measurement_type") or {}
            activities.append(RecentActivity(
                id=ms["_id"],
                type="measurement",
                patient_name=_full_name(by_id.get(ms.get("patient_id"))),
                description=f"{mtype.get('name') or ''}: {ms.get('value')} {mtype.get('unit') or ''}".strip(),
                timestamp=ms.get("measured_at"),
                status="recorded",
            ))

        activities.sort(key=_sort_key, reverse=True)
        return activities[:limit]
