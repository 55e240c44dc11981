"""
Chat Models - sessions, messages and the payloads of the chat API.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field

MAX_MESSAGE_LENGTH = 8000
MAX_TITLE_LENGTH = 200


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Sender(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class MessageStatus(str, Enum):
    SENT = "sent"
    DELIVERED = "delivered"
    ERROR = "error"


class ChatSession(BaseModel):
    """Chat session summary. ``last_message_at`` never precedes ``created_at``."""
    id: str
    title: str
    created_at: datetime = Field(default_factory=utc_now)
    last_message_at: datetime = Field(default_factory=utc_now)


class MessageCreate(BaseModel):
    """A message about to be appended; id and timestamp are assigned on write."""
    text: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)
    sender: Sender = Sender.USER
    status: MessageStatus = MessageStatus.SENT


class Message(MessageCreate):
    """A stored message. Immutable once written."""
    id: str
    timestamp: datetime = Field(default_factory=utc_now)


class SessionCreate(BaseModel):
    """Request body for creating an empty session."""
    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)


class SessionCreated(BaseModel):
    session_id: str


class SendMessageRequest(BaseModel):
    """Request body of the send-message flow."""
    text: str = Field(..., min_length=1)
    session_id: Optional[str] = None


class ChatTurn(BaseModel):
    """Result of one user message and its assistant reply."""
    session_id: str
    title: Optional[str] = None  # set when the turn opened a new session
    user_message: Message
    reply: Message


class SessionList(BaseModel):
    sessions: List[ChatSession]


class MessageList(BaseModel):
    messages: List[Message]
