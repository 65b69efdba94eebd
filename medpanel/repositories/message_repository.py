from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from medpanel.models.message import TEXT_MESSAGE, MessageDocument


def _pair_filter(user_a: str, user_b: str) -> Dict[str, Any]:
    return {
        "$or": [
            {"sender_id": user_a, "receiver_id": user_b},
            {"sender_id": user_b, "receiver_id": user_a},
        ],
        "is_deleted": {"$ne": True},
    }


class MessageRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["messages"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("sender_id", ASCENDING), ("receiver_id", ASCENDING), ("created_at", ASCENDING)])
        await self.collection.create_index([("receiver_id", ASCENDING), ("is_read", ASCENDING)])

    async def save_message(
        self,
        sender_id: str,
        receiver_id: str,
        content: str,
        message_type: int = TEXT_MESSAGE,
    ) -> MessageDocument:
        doc: Dict[str, Any] = {
            "content": content,
            "sender_id": sender_id,
            "receiver_id": receiver_id,
            "type": message_type,
            "is_read": False,
            "is_deleted": False,
            "created_at": datetime.now(timezone.utc),
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = str(result.inserted_id)
        return doc

    async def list_between(self, user_a: str, user_b: str, since: Optional[datetime] = None) -> List[MessageDocument]:
        query = _pair_filter(user_a, user_b)
        if since is not None:
            # strictly after the cursor; rows sharing its exact timestamp are not re-read
            query["created_at"] = {"$gt": since}
        cursor = self.collection.find(query).sort([("created_at", ASCENDING), ("_id", ASCENDING)])
        items = await cursor.to_list(length=None)
        for it in items:
            it["_id"] = str(it.get("_id"))
        return items

    async def get_unread(
        self,
        receiver_id: str,
        from_user_id: Optional[str] = None,
        sender_ids: Optional[Iterable[str]] = None,
        limit: int = 1000,
    ) -> List[MessageDocument]:
        query: Dict[str, Any] = {"receiver_id": receiver_id, "is_read": False, "is_deleted": {"$ne": True}}
        if from_user_id:
            query["sender_id"] = from_user_id
        elif sender_ids is not None:
            query["sender_id"] = {"$in": list(sender_ids)}
        cursor = self.collection.find(query).sort("created_at", DESCENDING).limit(limit)
        items = await cursor.to_list(length=limit)
        for it in items:
            it["_id"] = str(it.get("_id"))
        return items

    async def count_unread(self, receiver_id: str, sender_ids: Iterable[str]) -> int:
        ids = list(sender_ids)
        if not ids:
            return 0
        return await self.collection.count_documents({
            "receiver_id": receiver_id,
            "sender_id": {"$in": ids},
            "is_read": False,
            "is_deleted": {"$ne": True},
        })

    async def recent_from_senders(self, sender_ids: Iterable[str], limit: int = 5) -> List[MessageDocument]:
        ids = list(sender_ids)
        if not ids:
            return []
        cursor = self.collection.find({"sender_id": {"$in": ids}, "is_deleted": {"$ne": True}}).sort("created_at", DESCENDING).limit(limit)
        items = await cursor.to_list(length=limit)
        for it in items:
            it["_id"] = str(it.get("_id"))
        return items

    async def recent_involving(self, user_id: str, limit: int = 10) -> List[MessageDocument]:
        query = {"$or": [{"sender_id": user_id}, {"receiver_id": user_id}], "is_deleted": {"$ne": True}}
        cursor = self.collection.find(query).sort("created_at", DESCENDING).limit(limit)
        items = await cursor.to_list(length=limit)
        for it in items:
            it["_id"] = str(it.get("_id"))
        return items

    async def mark_read(self, receiver_id: str, from_user_id: Optional[str] = None) -> int:
        query: Dict[str, Any] = {"receiver_id": receiver_id, "is_read": False}
        if from_user_id:
            query["sender_id"] = from_user_id
        result = await self.collection.update_many(query, {"$set": {"is_read": True}})
        return result.modified_count or 0
