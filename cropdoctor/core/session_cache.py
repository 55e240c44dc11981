"""
Session Cache - single-slot, time-expiring cache of a user's chat sessions.

Holds at most one user's session list. A hit requires the slot to belong to
the requesting user and to be younger than the TTL; anything else is a miss
and the caller re-fetches the whole list. Every mutation bumps ``version``
so a caller can tell that a fetch raced with a create or delete and must
not be stored.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..models.chat import ChatSession

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60


@dataclass
class CacheEntry:
    """The cached session list of one user."""
    owner: str
    sessions: List[ChatSession]  # last_message_at descending
    fetched_at: float


class SessionCache:
    """
    In-memory cache of session summaries for the signed-in user.

    Args:
        ttl_seconds: Maximum entry age before a ``get`` misses
        clock: Monotonic time source in seconds (overridable in tests)
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry: Optional[CacheEntry] = None
        self._version = 0

    @property
    def entry(self) -> Optional[CacheEntry]:
        return self._entry

    @property
    def version(self) -> int:
        """Incremented by every upsert, invalidate_one and clear, even on an empty slot."""
        return self._version

    def is_fresh(self, user_id: str) -> bool:
        entry = self._entry
        if entry is None or entry.owner != user_id:
            return False
        return self._clock() - entry.fetched_at < self.ttl_seconds

    def get(self, user_id: str) -> Optional[List[ChatSession]]:
        """Return the cached list for ``user_id``, or None on a miss."""
        if not self.is_fresh(user_id):
            logger.debug(f"Session cache miss for user {user_id}")
            return None
        return self._entry.sessions

    def put(self, user_id: str, sessions: List[ChatSession]) -> List[ChatSession]:
        """Replace the slot with a fresh entry for ``user_id`` and return the cached list."""
        if self._entry is not None and self._entry.owner != user_id:
            logger.info(f"Session cache switched owner {self._entry.owner} -> {user_id}")
        self._entry = CacheEntry(owner=user_id, sessions=list(sessions), fetched_at=self._clock())
        return self._entry.sessions

    def upsert(self, user_id: str, session: ChatSession) -> None:
        """
        Insert or replace one session in the cached list.

        Freshness is unchanged. The slot is left alone if it is empty or
        belongs to another user; a later miss will fetch the session anyway.
        """
        self._version += 1
        entry = self._entry
        if entry is None or entry.owner != user_id:
            return
        sessions = [s for s in entry.sessions if s.id != session.id]
        sessions.append(session)
        sessions.sort(key=lambda s: s.last_message_at, reverse=True)
        entry.sessions = sessions

    def invalidate_one(self, session_id: str) -> None:
        """Drop one session from the cached list, keeping the rest fresh."""
        self._version += 1
        entry = self._entry
        if entry is None:
            return
        entry.sessions = [s for s in entry.sessions if s.id != session_id]

    def clear(self) -> None:
        """Empty the slot (on sign-in and sign-out)."""
        self._version += 1
        self._entry = None
