"""
Chat Store - document-store adapter for chat sessions and their messages.

Layout under the storage root:

    users/{user_id}/chats/{session_id}.json                      session document
    users/{user_id}/chats/{session_id}/messages/{message_id}.json message documents

Session documents carry ``title``, ``createdAt`` and ``lastMessageAt``;
message documents carry ``text``, ``sender``, ``status`` and ``timestamp``.
Every storage or decoding failure surfaces as ``RemoteStoreError``.
"""

import json
import logging
import re
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..core.errors import NotFound, RemoteStoreError
from ..models.chat import ChatSession, Message, MessageCreate, utc_now
from .interface import StorageError, StorageInterface

logger = logging.getLogger(__name__)


_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


def _checked_id(kind: str, value: str) -> str:
    # Ids become path segments
    if not _ID_PATTERN.match(value or ""):
        raise NotFound(kind, value)
    return value


def _new_id() -> str:
    return uuid.uuid4().hex


def _doc_id(path: str) -> str:
    return path.rsplit("/", 1)[-1][:-len(".json")]


@asynccontextmanager
async def _store_call(operation: str, path: str):
    """Translate storage and decoding failures into RemoteStoreError."""
    try:
        yield
    except (StorageError, ValueError, KeyError, ValidationError) as e:
        logger.error(f"Chat store {operation} failed for {path}: {e}", exc_info=True)
        raise RemoteStoreError(f"{operation} failed for {path}: {e}") from e


class ChatStore:
    """
    Reads and writes chat documents for any user through a StorageInterface.
    Holds no state of its own; callers pass the user id on every call.
    """

    def __init__(self, storage: StorageInterface):
        self.storage = storage

    # Paths

    def _chats_dir(self, user_id: str) -> str:
        return f"users/{_checked_id('user', user_id)}/chats"

    def _session_path(self, user_id: str, session_id: str) -> str:
        return f"{self._chats_dir(user_id)}/{_checked_id('session', session_id)}.json"

    def _messages_dir(self, user_id: str, session_id: str) -> str:
        return f"{self._chats_dir(user_id)}/{_checked_id('session', session_id)}/messages"

    def _message_path(self, user_id: str, session_id: str, message_id: str) -> str:
        return f"{self._messages_dir(user_id, session_id)}/{_checked_id('message', message_id)}.json"

    # Document codec

    @staticmethod
    def _session_to_doc(session: ChatSession) -> Dict[str, Any]:
        return {
            "title": session.title,
            "createdAt": session.created_at.isoformat(),
            "lastMessageAt": session.last_message_at.isoformat(),
        }

    @staticmethod
    def _session_from_doc(session_id: str, doc: Dict[str, Any]) -> ChatSession:
        return ChatSession(
            id=session_id,
            title=doc["title"],
            created_at=datetime.fromisoformat(doc["createdAt"]),
            last_message_at=datetime.fromisoformat(doc["lastMessageAt"]),
        )

    @staticmethod
    def _message_to_doc(message: Message) -> Dict[str, Any]:
        return {
            "text": message.text,
            "sender": message.sender.value,
            "status": message.status.value,
            "timestamp": message.timestamp.isoformat(),
        }

    @staticmethod
    def _message_from_doc(message_id: str, doc: Dict[str, Any]) -> Message:
        return Message(
            id=message_id,
            text=doc["text"],
            sender=doc["sender"],
            status=doc["status"],
            timestamp=datetime.fromisoformat(doc["timestamp"]),
        )

    async def _read(self, path: str) -> Optional[Dict[str, Any]]:
        content = await self.storage.load(path)
        if content is None:
            return None
        return json.loads(content.decode("utf-8"))

    async def _write(self, path: str, doc: Dict[str, Any]) -> None:
        await self.storage.save(path, json.dumps(doc, indent=2, ensure_ascii=False))

    # Sessions

    async def create_session(self, user_id: str, title: str) -> ChatSession:
        """Write a new session document with createdAt == lastMessageAt == now."""
        now = utc_now()
        session = ChatSession(id=_new_id(), title=title, created_at=now, last_message_at=now)
        path = self._session_path(user_id, session.id)
        async with _store_call("create_session", path):
            await self._write(path, self._session_to_doc(session))
        return session

    async def get_session(self, user_id: str, session_id: str) -> Optional[ChatSession]:
        path = self._session_path(user_id, session_id)
        async with _store_call("get_session", path):
            doc = await self._read(path)
            if doc is None:
                return None
            return self._session_from_doc(session_id, doc)

    async def require_session(self, user_id: str, session_id: str) -> ChatSession:
        session = await self.get_session(user_id, session_id)
        if session is None:
            raise NotFound("session", session_id)
        return session

    async def list_sessions(self, user_id: str) -> List[ChatSession]:
        """All sessions of a user, ordered by lastMessageAt descending."""
        chats_dir = self._chats_dir(user_id)
        async with _store_call("list_sessions", chats_dir):
            sessions = []
            for path in await self.storage.list(chats_dir, pattern="*.json"):
                doc = await self._read(path)
                if doc is not None:
                    sessions.append(self._session_from_doc(_doc_id(path), doc))
        sessions.sort(key=lambda s: s.last_message_at, reverse=True)
        return sessions

    async def touch_session(self, user_id: str, session_id: str, at: datetime) -> ChatSession:
        """Set a session's lastMessageAt; NotFound if the document is gone."""
        session = await self.require_session(user_id, session_id)
        updated = session.model_copy(update={"last_message_at": max(at, session.created_at)})
        path = self._session_path(user_id, session_id)
        async with _store_call("touch_session", path):
            await self._write(path, self._session_to_doc(updated))
        return updated

    async def delete_session(self, user_id: str, session_id: str) -> bool:
        """Delete only the session document; messages must be removed first."""
        path = self._session_path(user_id, session_id)
        async with _store_call("delete_session", path):
            return await self.storage.delete(path)

    # Messages

    async def add_message(
        self,
        user_id: str,
        session_id: str,
        message: MessageCreate,
        timestamp: Optional[datetime] = None,
    ) -> Message:
        stored = Message(
            id=_new_id(),
            text=message.text,
            sender=message.sender,
            status=message.status,
            timestamp=timestamp or utc_now(),
        )
        path = self._message_path(user_id, session_id, stored.id)
        async with _store_call("add_message", path):
            await self._write(path, self._message_to_doc(stored))
        return stored

    async def list_message_ids(self, user_id: str, session_id: str) -> List[str]:
        messages_dir = self._messages_dir(user_id, session_id)
        async with _store_call("list_message_ids", messages_dir):
            return [_doc_id(p) for p in await self.storage.list(messages_dir, pattern="*.json")]

    async def list_messages(self, user_id: str, session_id: str) -> List[Message]:
        """All messages of a session, ordered by timestamp ascending."""
        messages_dir = self._messages_dir(user_id, session_id)
        async with _store_call("list_messages", messages_dir):
            messages = []
            for path in await self.storage.list(messages_dir, pattern="*.json"):
                doc = await self._read(path)
                if doc is not None:
                    messages.append(self._message_from_doc(_doc_id(path), doc))
        messages.sort(key=lambda m: (m.timestamp, m.id))
        return messages

    async def delete_message(self, user_id: str, session_id: str, message_id: str) -> bool:
        path = self._message_path(user_id, session_id, message_id)
        async with _store_call("delete_message", path):
            return await self.storage.delete(path)
