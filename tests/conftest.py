import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest


T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def at(seconds: int) -> datetime:
    return T0 + timedelta(seconds=seconds)


def message(message_id: str, seconds: int, sender: str = "doc", receiver: str = "pat", content: str = "") -> Dict[str, Any]:
    return {
        "id": message_id,
        "content": content or f"message {message_id}",
        "sender_id": sender,
        "receiver_id": receiver,
        "created_at": at(seconds),
        "is_read": False,
    }


class FakeMessageSource:
    """In-memory MessageSource keyed by peer id."""

    def __init__(self, rows: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> None:
        self.rows: Dict[str, List[Dict[str, Any]]] = {k: list(v) for k, v in (rows or {}).items()}
        self.fetch_calls: List[tuple] = []
        self.sent: List[tuple] = []
        self.fail_fetch = False
        self.fail_send = False
        # when set, every fetch returns this batch whatever the cursor
        self.fixed_batch: Optional[List[Dict[str, Any]]] = None
        self._clock = 1000

    async def fetch(self, peer_id: str, since: Optional[datetime] = None) -> List[Dict[str, Any]]:
        self.fetch_calls.append((peer_id, since))
        await asyncio.sleep(0)
        if self.fail_fetch:
            raise ConnectionError("network down")
        if self.fixed_batch is not None:
            return [dict(m) for m in self.fixed_batch]
        rows = sorted(self.rows.get(peer_id, []), key=lambda m: m["created_at"])
        return [dict(m) for m in rows if since is None or m["created_at"] > since]

    async def send(self, peer_id: str, content: str) -> Dict[str, Any]:
        await asyncio.sleep(0)
        if self.fail_send:
            raise ConnectionError("insert rejected")
        self._clock += 1
        row = message(f"sent-{self._clock}", self._clock, content=content)
        self.rows.setdefault(peer_id, []).append(row)
        self.sent.append((peer_id, content))
        return dict(row)


@pytest.fixture
def source() -> FakeMessageSource:
    return FakeMessageSource({"pat": [message("m1", 1), message("m2", 2)]})
