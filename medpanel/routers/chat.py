from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from medpanel.database.connection import mongo_db_dependency
from medpanel.repositories.device_repository import DeviceRepository
from medpanel.repositories.message_repository import MessageRepository
from medpanel.schemas.message import MessageCreate, MessageOut
from medpanel.services.chat_service import ChatService
from medpanel.utils.dependencies import get_current_user


router = APIRouter(prefix="/messages", tags=["chat"])


def get_chat_service(db = Depends(mongo_db_dependency)) -> ChatService:
    return ChatService(MessageRepository(db), DeviceRepository(db))


# declared before /{peer_id} so "unread" is not taken for a peer id
@router.get("/unread")
async def get_unread(from_user_id: Optional[str] = None, current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    messages = await service.get_unread(current_user["_id"], from_user_id)
    return {"items": [MessageOut.model_validate(m) for m in messages]}


@router.get("/{peer_id}")
async def get_conversation(peer_id: str, since: Optional[datetime] = None, current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    messages = await service.get_conversation(current_user["_id"], peer_id, since=since)
    return {"items": [MessageOut.model_validate(m) for m in messages]}


@router.post("/{peer_id}", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def send_message(peer_id: str, body: MessageCreate, current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    if peer_id == current_user["_id"]:
        raise HTTPException(status_code=400, detail="Cannot message yourself.")
    try:
        saved = await service.send_message(current_user["_id"], peer_id, body.content)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return MessageOut.model_validate(saved)


@router.post("/{peer_id}/read")
async def mark_read(peer_id: str, current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    count = await service.mark_read(current_user["_id"], peer_id)
    return {"updated": count}
