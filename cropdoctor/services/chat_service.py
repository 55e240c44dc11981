"""
Chat Service - one conversational turn: user message in, assistant reply out.
"""

import logging
from typing import Optional

from ..models.chat import MAX_MESSAGE_LENGTH, ChatTurn, MessageCreate, MessageStatus, Sender
from .chat_session_manager import ChatSessionManager
from .response_generator import ResponseGenerator

logger = logging.getLogger(__name__)


def make_title(text: str, length: int = 50) -> str:
    """Session title from the first message: its first ``length`` chars, '...' if cut."""
    return text[:length] + ("..." if len(text) > length else "")


class ChatService:
    """
    Runs the send-message flow on top of the session manager.

    Args:
        manager: Session manager used for all store access
        generator: Reply generator
        max_length: Maximum length of user input after trimming
        title_length: Number of characters of the first message used as title
    """

    def __init__(
        self,
        manager: ChatSessionManager,
        generator: ResponseGenerator,
        max_length: int = 500,
        title_length: int = 50,
    ):
        self.manager = manager
        self.generator = generator
        self.max_length = max_length
        self.title_length = title_length

    async def send_message(self, user_id: str, text: str, session_id: Optional[str] = None) -> ChatTurn:
        """
        Store the user's message, generate a reply and store it too.

        A new session, titled from the message, is created when ``session_id``
        is not given. Generation failures are replaced by the fallback reply;
        store failures propagate.

        Raises:
            ValueError: The trimmed text is empty or too long
        """
        trimmed = text.strip()
        if not trimmed:
            raise ValueError("Message text must not be empty")
        if len(trimmed) > self.max_length:
            raise ValueError(f"Message text exceeds {self.max_length} characters")

        title = None
        if not session_id:
            title = make_title(trimmed, self.title_length)
            session_id = await self.manager.create_session(user_id, title)
            logger.debug(f"Opened session {session_id} for first message")

        user_message = await self.manager.append_message(
            user_id, session_id,
            MessageCreate(text=trimmed, sender=Sender.USER, status=MessageStatus.SENT),
        )

        reply_text = await self.generator.generate_or_fallback(trimmed)
        reply = await self.manager.append_message(
            user_id, session_id,
            MessageCreate(text=reply_text[:MAX_MESSAGE_LENGTH], sender=Sender.ASSISTANT, status=MessageStatus.DELIVERED),
        )

        return ChatTurn(session_id=session_id, title=title, user_message=user_message, reply=reply)
