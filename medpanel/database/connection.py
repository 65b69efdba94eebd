import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from medpanel.config import get_settings


logger = logging.getLogger(__name__)

_client: Optional[AsyncIOMotorClient] = None


async def connect_to_mongo() -> None:
    global _client
    settings = get_settings()
    # tz_aware keeps created_at comparable with the cursors clients send back
    _client = AsyncIOMotorClient(settings.mongo_url, tz_aware=True)
    logger.info("Connected to MongoDB database %s", settings.mongo_db_name)


async def close_mongo_connection() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("MongoDB connection closed")


def get_database() -> AsyncIOMotorDatabase:
    if _client is None:
        raise RuntimeError("MongoDB client is not initialised; call connect_to_mongo() first")
    return _client[get_settings().mongo_db_name]


async def mongo_db_dependency() -> AsyncIOMotorDatabase:
    return get_database()
