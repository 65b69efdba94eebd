from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from medpanel.models.user import UserDocument, UserRole
from medpanel.utils.object_ids import normalize_id, to_object_id, to_object_ids


class UserRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._collection = db.get_collection("users")

    async def ensure_indexes(self) -> None:
        await self._collection.create_index([("email", ASCENDING)], unique=True)

    async def create_user(self, email: str, hashed_password: str, role: UserRole) -> str:

        doc = {
            "email": email,
            "hashed_password": hashed_password,
            "role": role,
            "created_at": datetime.now(timezone.utc),
        }
        result = await self._collection.insert_one(doc)
        return str(result.inserted_id)

    async def get_user_by_email(self, email: str) -> Optional[UserDocument]:

        user = await self._collection.find_one({"email": email})
        return normalize_id(user)

    async def get_user_by_id(self, user_id: str) -> Optional[UserDocument]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        user = await self._collection.find_one({"_id": oid})
        return normalize_id(user)

    async def get_emails(self, user_ids: Iterable[str]) -> Dict[str, str]:
        oids = to_object_ids(user_ids)
        if not oids:
            return {}
        cursor = self._collection.find({"_id": {"$in": oids}}, {"email": 1})
        return {str(doc["_id"]): doc.get("email") async for doc in cursor}

    async def update_password(self, user_id: str, hashed_password: str) -> bool:
        oid = to_object_id(user_id)
        if oid is None:
            return False
        result = await self._collection.update_one({"_id": oid}, {"$set": {"hashed_password": hashed_password}})
        return bool(result.modified_count)
