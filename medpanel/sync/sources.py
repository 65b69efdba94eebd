from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from medpanel.services.chat_service import ChatService


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    # pydantic emits "Z" for UTC on some versions
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _from_api(item: Dict[str, Any]) -> Dict[str, Any]:
    message = dict(item)
    message["created_at"] = _parse_timestamp(message["created_at"])
    return message


def _from_document(doc: Dict[str, Any]) -> Dict[str, Any]:
    message = {k: v for k, v in doc.items() if k != "_id"}
    message["id"] = str(doc["_id"])
    return message


class ApiMessageSource:
    """Reads and writes messages through the /messages HTTP API as the token's user."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def connect(cls, base_url: str, access_token: str, timeout: float = 10.0) -> "ApiMessageSource":
        client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=timeout,
        )
        return cls(client)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch(self, peer_id: str, since: Optional[datetime] = None) -> List[Dict[str, Any]]:
        params = {"since": since.isoformat()} if since is not None else None
        resp = await self._client.get(f"/messages/{peer_id}", params=params)
        resp.raise_for_status()
        return [_from_api(item) for item in resp.json().get("items", [])]

    async def send(self, peer_id: str, content: str) -> Dict[str, Any]:
        resp = await self._client.post(f"/messages/{peer_id}", json={"content": content})
        resp.raise_for_status()
        return _from_api(resp.json())


class RepositoryMessageSource:
    """Talks to the message store directly, for code running next to the database."""

    def __init__(self, service: ChatService, user_id: str) -> None:
        self._service = service
        self._user_id = user_id

    async def fetch(self, peer_id: str, since: Optional[datetime] = None) -> List[Dict[str, Any]]:
        docs = await self._service.get_conversation(self._user_id, peer_id, since=since)
        return [_from_document(doc) for doc in docs]

    async def send(self, peer_id: str, content: str) -> Dict[str, Any]:
        return _from_document(await self._service.send_message(self._user_id, peer_id, content))
