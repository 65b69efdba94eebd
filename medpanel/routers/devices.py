from fastapi import APIRouter, Depends

from medpanel.database.connection import mongo_db_dependency
from medpanel.repositories.device_repository import DeviceRepository
from medpanel.schemas.message import DeviceRegistration
from medpanel.utils.dependencies import get_current_user


router = APIRouter(prefix="/devices", tags=["push"])


def get_device_repository(db = Depends(mongo_db_dependency)) -> DeviceRepository:
    return DeviceRepository(db)


@router.post("/register")
async def register_device(body: DeviceRegistration, current_user: dict = Depends(get_current_user), repo: DeviceRepository = Depends(get_device_repository)):
    doc = await repo.register(current_user["_id"], body.token, body.platform)
    return {"ok": True, "device": {"platform": doc["platform"], "token": doc["token"]}}


@router.post("/unregister")
async def unregister_device(body: DeviceRegistration, current_user: dict = Depends(get_current_user), repo: DeviceRepository = Depends(get_device_repository)):
    removed = await repo.unregister(current_user["_id"], body.token)
    return {"ok": removed}
