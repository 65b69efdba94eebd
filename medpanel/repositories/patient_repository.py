from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from medpanel.models.patient import Gender, PatientDocument
from medpanel.utils.object_ids import normalize_id, to_object_id, to_object_ids


class PatientRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["patients"]

    @property
    def links(self):
        return self._db["doctor_patients"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("user_id", ASCENDING)], unique=True)
        await self.links.create_index([("doctor_id", ASCENDING), ("patient_id", ASCENDING)], unique=True)

    async def create_patient(
        self,
        user_id: str,
        name: str,
        surname: str,
        birth_date: Optional[datetime],
        gender: Gender,
        patient_note: Optional[str] = None,
    ) -> PatientDocument:
        doc: Dict[str, Any] = {
            "user_id": user_id,
            "name": name,
            "surname": surname,
            "birth_date": birth_date,
            "gender": gender,
            "patient_note": patient_note,
            "is_deleted": False,
            "created_at": datetime.now(timezone.utc),
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = str(result.inserted_id)
        return doc

    async def link_to_doctor(self, doctor_id: str, patient_id: str) -> None:
        await self.links.insert_one({
            "doctor_id": doctor_id,
            "patient_id": patient_id,
            "is_deleted": False,
            "created_at": datetime.now(timezone.utc),
        })

    async def is_linked(self, doctor_id: str, patient_id: str) -> bool:
        link = await self.links.find_one({"doctor_id": doctor_id, "patient_id": patient_id, "is_deleted": {"$ne": True}})
        return link is not None

    async def get_patient(self, patient_id: str) -> Optional[PatientDocument]:
        oid = to_object_id(patient_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid, "is_deleted": {"$ne": True}})
        return normalize_id(doc)

    async def list_for_doctor(self, doctor_id: str) -> List[PatientDocument]:
        links = await self.links.find({"doctor_id": doctor_id, "is_deleted": {"$ne": True}}).to_list(length=None)
        oids = to_object_ids(link["patient_id"] for link in links)
        if not oids:
            return []
        cursor = self.collection.find({"_id": {"$in": oids}, "is_deleted": {"$ne": True}}).sort("created_at", ASCENDING)
        items = await cursor.to_list(length=None)
        for it in items:
            normalize_id(it)
        return items
