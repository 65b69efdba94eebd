from datetime import datetime, timezone
from typing import Any, Dict, List

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from medpanel.models.device import DeviceDocument, PushPlatform


class DeviceRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["fcm_tokens"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("user_id", ASCENDING), ("token", ASCENDING)], unique=True)

    async def register(self, user_id: str, token: str, platform: PushPlatform = "fcm") -> DeviceDocument:
        await self.collection.update_one(
            {"user_id": user_id, "token": token},
            {"$set": {"platform": platform, "last_seen_at": datetime.now(timezone.utc)}},
            upsert=True,
        )
        return DeviceDocument(user_id=user_id, platform=platform, token=token)

    async def unregister(self, user_id: str, token: str) -> bool:
        result = await self.collection.delete_one({"user_id": user_id, "token": token})
        return result.deleted_count > 0

    async def get_tokens(self, user_id: str, platform: str | None = "fcm") -> List[str]:
        query: Dict[str, Any] = {"user_id": user_id}
        if platform:
            query["platform"] = platform
        docs = await self.collection.find(query, {"token": 1}).to_list(length=100)
        return [doc["token"] for doc in docs if doc.get("token")]
