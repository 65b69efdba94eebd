from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from medpanel.models.doctor import DoctorDocument, SpecializationDocument
from medpanel.utils.object_ids import normalize_id, to_object_id


class DoctorRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["doctors"]

    @property
    def specializations(self):
        return self._db["specializations"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("user_id", ASCENDING)], unique=True)

    async def get_by_user_id(self, user_id: str) -> Optional[DoctorDocument]:
        doc = await self.collection.find_one({"user_id": user_id, "is_deleted": {"$ne": True}})
        return normalize_id(doc)

    async def update_profile(self, doctor_id: str, updates: Dict[str, Any]) -> bool:
        oid = to_object_id(doctor_id)
        if oid is None:
            return False
        fields = dict(updates)
        fields["updated_at"] = datetime.now(timezone.utc)
        result = await self.collection.update_one({"_id": oid, "is_deleted": {"$ne": True}}, {"$set": fields})
        return bool(result.matched_count)

    async def increment_patient_count(self, doctor_id: str, by: int = 1) -> None:
        oid = to_object_id(doctor_id)
        if oid is None:
            return
        await self.collection.update_one({"_id": oid}, {"$inc": {"patient_count": by}})

    async def get_specialization(self, specialization_id: Optional[int]) -> Optional[SpecializationDocument]:
        if specialization_id is None:
            return None
        return await self.specializations.find_one({"_id": specialization_id})

    async def list_specializations(self) -> List[SpecializationDocument]:
        cursor = self.specializations.find({}).sort("name", ASCENDING)
        return await cursor.to_list(length=500)
