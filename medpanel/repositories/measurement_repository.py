from typing import Any, Dict, Iterable, List

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from medpanel.models.health import HealthMeasurementDocument


class MeasurementRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["health_measurements"]

    @property
    def types(self):
        return self._db["measurement_types"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("patient_id", ASCENDING), ("measured_at", DESCENDING)])

    async def _attach_types(self, items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        type_ids = {it.get("measurement_type_id") for it in items if it.get("measurement_type_id") is not None}
        types: Dict[Any, Dict[str, Any]] = {}
        if type_ids:
            async for doc in self.types.find({"_id": {"$in": list(type_ids)}}):
                types[doc["_id"]] = {"name": doc.get("name"), "unit": doc.get("unit")}
        for it in items:
            it["_id"] = str(it.get("_id"))
            it["measurement_type"] = types.get(it.get("measurement_type_id"))
        return items

    async def list_for_patient(self, patient_id: str, limit: int = 20) -> List[HealthMeasurementDocument]:
        cursor = (
            self.collection.find({"patient_id": patient_id, "is_deleted": {"$ne": True}})
            .sort("measured_at", DESCENDING)
            .limit(limit)
        )
        return await self._attach_types(await cursor.to_list(length=limit))

    async def recent_for_patients(self, patient_ids: Iterable[str], limit: int = 5) -> List[HealthMeasurementDocument]:
        ids = list(patient_ids)
        if not ids:
            return []
        cursor = (
            self.collection.find({"patient_id": {"$in": ids}, "is_deleted": {"$ne": True}})
            .sort("measured_at", DESCENDING)
            .limit(limit)
        )
        return await self._attach_types(await cursor.to_list(length=limit))
