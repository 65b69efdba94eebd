from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from medpanel.models.health import ComplaintDocument
from medpanel.utils.object_ids import normalize_id, to_object_id


class ComplaintRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["complaints"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("patient_id", ASCENDING), ("created_at", DESCENDING)])

    async def list_for_patient(self, patient_id: str) -> List[ComplaintDocument]:
        cursor = self.collection.find({"patient_id": patient_id, "is_deleted": {"$ne": True}}).sort("created_at", DESCENDING)
        items = await cursor.to_list(length=None)
        for it in items:
            it["_id"] = str(it.get("_id"))
        return items

    async def get(self, complaint_id: str) -> Optional[ComplaintDocument]:
        oid = to_object_id(complaint_id)
        if oid is None:
            return None
        return normalize_id(await self.collection.find_one({"_id": oid, "is_deleted": {"$ne": True}}))

    async def resolve(self, complaint_id: str, end_date: datetime) -> bool:
        oid = to_object_id(complaint_id)
        if oid is None:
            return False
        result = await self.collection.update_one(
            {"_id": oid},
            {"$set": {"is_active": False, "end_date": end_date, "updated_at": datetime.now(timezone.utc)}},
        )
        return bool(result.matched_count)

    async def count_active(self, patient_ids: Iterable[str]) -> int:
        ids = list(patient_ids)
        if not ids:
            return 0
        return await self.collection.count_documents({"patient_id": {"$in": ids}, "is_active": True, "is_deleted": {"$ne": True}})

    async def recent_for_patients(self, patient_ids: Iterable[str], limit: int = 5) -> List[ComplaintDocument]:
        ids = list(patient_ids)
        if not ids:
            return []
        cursor = self.collection.find({"patient_id": {"$in": ids}, "is_deleted": {"$ne": True}}).sort("created_at", DESCENDING).limit(limit)
        items = await cursor.to_list(length=limit)
        for it in items:
            it["_id"] = str(it.get("_id"))
        return items
