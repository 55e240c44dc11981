"""
Chat Session Manager - orchestrates session and message operations.

Sits between the API layer and the document store and keeps the session
cache consistent with what it writes. Every operation takes the user id
explicitly and fails fast with ``Unauthenticated`` when it is missing.
Nothing is retried; partial failures are raised, not compensated.
"""

import asyncio
import logging
from datetime import timedelta
from typing import List

from ..core.errors import NotFound, PartialWriteError, RemoteStoreError, Unauthenticated
from ..core.logging_config import LoggerAdapter
from ..core.session_cache import SessionCache
from ..models.chat import ChatSession, Message, MessageCreate, utc_now
from ..storage.chat_store import ChatStore

logger = logging.getLogger(__name__)

# Smallest step that keeps message timestamps strictly increasing
_TICK = timedelta(microseconds=1)

# Fetches of the session list before giving up on caching the result
_REFRESH_ATTEMPTS = 3


def _require_user(user_id: str) -> str:
    if not user_id:
        raise Unauthenticated()
    return user_id


class ChatSessionManager:
    """
    Session/message operations for one process.

    Args:
        store: Document-store adapter
        cache: Session cache owned by this manager
    """

    def __init__(self, store: ChatStore, cache: SessionCache):
        self.store = store
        self.cache = cache

    def _log(self, user_id: str) -> LoggerAdapter:
        return LoggerAdapter(logger, {"user_id": user_id})

    async def create_session(self, user_id: str, title: str) -> str:
        """Create an empty session and return its id."""
        _require_user(user_id)
        session = await self.store.create_session(user_id, title)
        self.cache.upsert(user_id, session)
        self._log(user_id).info(f"Chat session created: {session.id}")
        return session.id

    async def append_message(self, user_id: str, session_id: str, message: MessageCreate) -> Message:
        """
        Store a message, then bump the session's last_message_at.

        The two writes are separate. If the second one fails the message stays
        stored and ``PartialWriteError`` is raised with it in ``completed``.

        Raises:
            NotFound: The session does not exist (nothing is written)
            RemoteStoreError: The message write failed
            PartialWriteError: The message was stored but the session was not updated
        """
        _require_user(user_id)
        session = await self.store.require_session(user_id, session_id)

        timestamp = max(utc_now(), session.last_message_at + _TICK)
        stored = await self.store.add_message(user_id, session_id, message, timestamp=timestamp)

        try:
            updated = await self.store.touch_session(user_id, session_id, stored.timestamp)
        except (RemoteStoreError, NotFound) as e:
            self._log(user_id).error(
                f"Message {stored.id} stored but session {session_id} not updated: {e}"
            )
            raise PartialWriteError(
                f"Message stored but session {session_id} ordering timestamp not updated",
                completed=stored,
            ) from e

        self.cache.upsert(user_id, updated)
        return stored

    async def list_sessions(self, user_id: str) -> List[ChatSession]:
        """Sessions ordered by last_message_at descending, served from cache while fresh."""
        _require_user(user_id)
        cached = self.cache.get(user_id)
        if cached is not None:
            return cached

        # A create or delete landing mid-fetch bumps the cache version; the
        # fetched list may predate it and must not overwrite the slot.
        for _ in range(_REFRESH_ATTEMPTS):
            version = self.cache.version
            sessions = await self.store.list_sessions(user_id)
            if self.cache.version == version:
                self._log(user_id).debug(f"Fetched {len(sessions)} chat sessions")
                return self.cache.put(user_id, sessions)
            self._log(user_id).debug("Sessions changed during fetch, fetching again")
        return sessions

    async def get_messages(self, user_id: str, session_id: str) -> List[Message]:
        """Messages ordered by timestamp ascending, always read from the store."""
        _require_user(user_id)
        await self.store.require_session(user_id, session_id)
        return await self.store.list_messages(user_id, session_id)

    async def delete_session(self, user_id: str, session_id: str) -> None:
        """
        Delete a session and all of its messages.

        Messages are deleted concurrently. Only when every one of them is gone
        is the session document deleted and dropped from the cache; otherwise
        the first failure is raised and the session document stays.
        """
        _require_user(user_id)
        await self.store.require_session(user_id, session_id)

        message_ids = await self.store.list_message_ids(user_id, session_id)
        results = await asyncio.gather(
            *(self.store.delete_message(user_id, session_id, mid) for mid in message_ids),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            self._log(user_id).error(
                f"Deleting session {session_id}: {len(failures)} of {len(message_ids)} "
                f"message deletions failed, session kept"
            )
            first = failures[0]
            if isinstance(first, RemoteStoreError):
                raise first
            raise RemoteStoreError(f"Failed to delete messages of session {session_id}: {first}") from first

        await self.store.delete_session(user_id, session_id)
        self.cache.invalidate_one(session_id)
        self._log(user_id).info(f"Chat session deleted: {session_id} ({len(message_ids)} messages)")

    def reset_cache(self) -> None:
        """Forget cached sessions, e.g. when the signed-in user changes."""
        self.cache.clear()
