from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from medpanel.models.exercise import ExerciseDocument, ExercisePlanDocument
from medpanel.utils.object_ids import normalize_id, to_object_id, to_object_ids


class ExerciseRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def exercises(self):
        return self._db["exercises"]

    @property
    def plans(self):
        return self._db["exercise_plans"]

    async def ensure_indexes(self) -> None:
        await self.plans.create_index([("patient_id", ASCENDING), ("start_date", DESCENDING)])

    async def list_catalog(self) -> List[ExerciseDocument]:
        items = await self.exercises.find({}).sort("name", ASCENDING).to_list(length=None)
        for it in items:
            it["_id"] = str(it.get("_id"))
        return items

    async def get_exercise(self, exercise_id: str) -> Optional[ExerciseDocument]:
        oid = to_object_id(exercise_id)
        if oid is None:
            return None
        return normalize_id(await self.exercises.find_one({"_id": oid}))

    async def list_plans(self, patient_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        cursor = self.plans.find({"patient_id": patient_id, "is_deleted": {"$ne": True}}).sort("start_date", DESCENDING)
        if limit:
            cursor = cursor.limit(limit)
        items = await cursor.to_list(length=limit)
        exercise_oids = to_object_ids({it.get("exercise_id") for it in items if it.get("exercise_id")})
        exercises: Dict[str, Dict[str, Any]] = {}
        if exercise_oids:
            async for doc in self.exercises.find({"_id": {"$in": exercise_oids}}):
                doc["_id"] = str(doc["_id"])
                exercises[doc["_id"]] = doc
        for it in items:
            it["_id"] = str(it.get("_id"))
            it["exercise"] = exercises.get(it.get("exercise_id"))
        return items

    async def get_plan(self, plan_id: str) -> Optional[ExercisePlanDocument]:
        oid = to_object_id(plan_id)
        if oid is None:
            return None
        return normalize_id(await self.plans.find_one({"_id": oid, "is_deleted": {"$ne": True}}))

    async def create_plan(
        self,
        patient_id: str,
        exercise_id: str,
        frequency: str,
        duration_min: int,
        start_date: datetime,
    ) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            "patient_id": patient_id,
            "exercise_id": exercise_id,
            "frequency": frequency,
            "duration_min": duration_min,
            "start_date": start_date,
            "end_date": None,
            "is_deleted": False,
            "created_at": datetime.now(timezone.utc),
        }
        result = await self.plans.insert_one(doc)
        doc["_id"] = str(result.inserted_id)
        return doc

    async def set_end_date(self, plan_id: str, end_date: datetime) -> bool:
        oid = to_object_id(plan_id)
        if oid is None:
            return False
        result = await self.plans.update_one({"_id": oid}, {"$set": {"end_date": end_date}})
        return bool(result.matched_count)

    async def delete_plan(self, plan_id: str) -> bool:
        oid = to_object_id(plan_id)
        if oid is None:
            return False
        result = await self.plans.delete_one({"_id": oid})
        return result.deleted_count > 0
