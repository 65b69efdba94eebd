"""
Incremental chat sync over a pull-only message store.

A MessageSync keeps the displayed history of one two-party conversation up to
date by polling. The first load reads the whole conversation; every tick after
that asks only for rows strictly newer than the cursor (the ``created_at`` of
the newest message seen so far). Merging is keyed by message id, so
overlapping or repeated fetches never duplicate a row and the displayed list
only ever grows.

Lifecycle::

    async with MessageSync(source, peer_id) as sync:
        ...
        await sync.send("See you on Monday")
        ...
    # timer, in-flight polls and the post-send refresh are all cancelled here
"""
import asyncio
import bisect
import logging
from datetime import datetime
from typing import Any, Coroutine, Dict, List, Optional, Protocol, Set

from medpanel.config import get_settings


logger = logging.getLogger(__name__)

DEFAULT_REFRESH_DELAY = 0.5

Message = Dict[str, Any]


class MessageSource(Protocol):
    """Remote store access for the current user; ``peer_id`` selects the other party."""

    async def fetch(self, peer_id: str, since: Optional[datetime] = None) -> List[Message]:
        """Messages of the pair ordered by created_at ascending, strictly after ``since`` when given."""
        ...

    async def send(self, peer_id: str, content: str) -> Message:
        ...


class MessageSync:

    def __init__(
        self,
        source: MessageSource,
        peer_id: str,
        interval: Optional[float] = None,
        refresh_delay: float = DEFAULT_REFRESH_DELAY,
    ) -> None:
        if interval is None:
            interval = get_settings().poll_interval_seconds
        if interval <= 0:
            raise ValueError("Poll interval must be positive")
        self._source = source
        self.peer_id = peer_id
        self.interval = interval
        self.refresh_delay = refresh_delay

        self.messages: List[Message] = []
        self.cursor: Optional[datetime] = None
        self.draft = ""
        self.last_error: Optional[str] = None
        self.loading = False
        self.sending = False

        self._seen_ids: Set[str] = set()
        self._timer: Optional[asyncio.Task] = None
        self._pending: Set[asyncio.Task] = set()
        # bumped on every teardown so late results from an old target are dropped
        self._generation = 0
        self._closed = False

    async def __aenter__(self) -> "MessageSync":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    async def start(self) -> None:
        """Load the full conversation, then start the fixed-interval timer."""
        if self._closed:
            raise RuntimeError("MessageSync is closed")
        await self._cancel_tasks()
        await self.load()
        self._timer = asyncio.create_task(self._run_timer(self._generation))

    async def load(self) -> None:
        generation = self._generation
        self.loading = True
        try:
            batch = await self._source.fetch(self.peer_id)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Initial message load for %s failed", self.peer_id)
            return
        finally:
            self.loading = False
        if generation != self._generation:
            return
        self.merge(batch)

    def merge(self, batch: List[Message]) -> List[Message]:
        """
        Fold a fetched batch into the displayed list and return the rows that were new.

        Rows whose id is already displayed are skipped. New rows keep their
        arrival order; a row older than the current tail (possible when an
        older poll resolves after a newer one) is placed by created_at so the
        list stays ordered. The cursor only ever moves forward.
        """
        fresh: List[Message] = []
        for message in batch:
            message_id = message.get("id")
            if message_id is None or message_id in self._seen_ids:
                continue
            self._seen_ids.add(message_id)
            fresh.append(message)
        if not fresh:
            return fresh

        for message in fresh:
            if not self.messages or message["created_at"] >= self.messages[-1]["created_at"]:
                self.messages.append(message)
            else:
                bisect.insort_right(self.messages, message, key=lambda m: m["created_at"])

        newest = max(m["created_at"] for m in fresh)
        if self.cursor is None or newest > self.cursor:
            self.cursor = newest
        self._warn_on_shared_cursor()
        return fresh

    def _warn_on_shared_cursor(self) -> None:
        # rows inserted later with this exact timestamp fall outside "created_at > cursor"
        if len(self.messages) > 1 and self.messages[-2]["created_at"] == self.cursor:
            logger.debug("Cursor %s is shared by several messages in conversation with %s", self.cursor, self.peer_id)

    async def poll(self) -> List[Message]:
        """One incremental fetch. Failures are logged and swallowed; the next tick retries."""
        if self._closed:
            return []
        generation = self._generation
        peer_id = self.peer_id
        try:
            batch = await self._source.fetch(peer_id, since=self.cursor)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.warning("Polling messages for %s failed; retrying on next tick", peer_id, exc_info=True)
            return []
        if self._closed or generation != self._generation:
            return []
        return self.merge(batch)

    async def send(self, content: Optional[str] = None) -> bool:
        """
        Submit ``content`` (or the current draft).

        The draft is cleared before the insert is issued. After a successful
        insert one extra poll runs after ``refresh_delay`` so the new row shows
        up without waiting for the next tick. On failure ``last_error`` holds a
        user-facing message.
        """
        text = (self.draft if content is None else content).strip()
        if not text or self.sending or self._closed:
            return False
        self.draft = ""
        self.last_error = None
        self.sending = True
        generation = self._generation
        peer_id = self.peer_id
        try:
            await self._source.send(peer_id, text)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.error("Sending message to %s failed", peer_id, exc_info=True)
            self.last_error = "Message could not be sent. Please try again."
            return False
        finally:
            self.sending = False
        # closed or retargeted while the insert was in flight
        if not self._closed and generation == self._generation:
            self._spawn(self._refresh_after_send())
        return True

    async def retarget(self, peer_id: str) -> None:
        """Switch to another conversation: tear down, reset state, load and poll the new pair."""
        await self._cancel_tasks()
        self.peer_id = peer_id
        self.messages = []
        self._seen_ids = set()
        self.cursor = None
        self.draft = ""
        self.last_error = None
        await self.start()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._cancel_tasks()

    async def _run_timer(self, generation: int) -> None:
        while generation == self._generation:
            await asyncio.sleep(self.interval)
            # ticks do not wait for a previous poll; merge is idempotent by id
            self._spawn(self.poll())

    async def _refresh_after_send(self) -> None:
        await asyncio.sleep(self.refresh_delay)
        await self.poll()

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _cancel_tasks(self) -> None:
        self._generation += 1
        tasks = list(self._pending)
        if self._timer is not None:
            tasks.append(self._timer)
            self._timer = None
        self._pending.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
