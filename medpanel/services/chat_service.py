import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from medpanel.models.message import TEXT_MESSAGE
from medpanel.repositories.device_repository import DeviceRepository
from medpanel.repositories.message_repository import MessageRepository
from medpanel.utils.notifications import get_push


logger = logging.getLogger(__name__)


class ChatService:

    def __init__(self, message_repo: MessageRepository, device_repo: Optional[DeviceRepository] = None) -> None:
        self._message_repo = message_repo
        self._device_repo = device_repo

    async def send_message(self, sender_id: str, receiver_id: str, content: str) -> Dict[str, Any]:
        if not content or not content.strip():
            raise ValueError("Message content cannot be empty")
        saved = await self._message_repo.save_message(
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content.strip(),
            message_type=TEXT_MESSAGE,
        )
        logger.debug("Message %s stored (%s -> %s)", saved["_id"], sender_id, receiver_id)
        await self.push_new_message(
            receiver_id=receiver_id,
            title="New message",
            body=saved["content"][:100],
            data={"message_id": saved["_id"], "from": sender_id},
        )
        return saved

    async def get_conversation(self, user_id: str, peer_id: str, since: Optional[datetime] = None) -> List[Dict[str, Any]]:
        return await self._message_repo.list_between(user_id, peer_id, since=since)

    async def get_unread(self, user_id: str, from_user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return await self._message_repo.get_unread(user_id, from_user_id)

    async def mark_read(self, receiver_id: str, from_user_id: Optional[str] = None) -> int:
        return await self._message_repo.mark_read(receiver_id, from_user_id)

    async def push_new_message(self, receiver_id: str, title: str, body: str, data: dict) -> None:
        if self._device_repo is None:
            return
        try:
            push = await get_push()
            if not push.enabled:
                return
            tokens = await self._device_repo.get_tokens(receiver_id, platform="fcm")
            await push.send_fcm(tokens, title, body, data)
        except Exception:
            # the message is already stored; a failed notification must not fail the send
            logger.warning("Push notification to %s failed", receiver_id, exc_info=True)
