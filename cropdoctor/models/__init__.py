"""Models module."""

from .user import User, UserCreate, UserInDB, SessionMarker, Token, TokenData
from .chat import (
    Sender, MessageStatus, ChatSession, Message, MessageCreate, SessionCreate,
    SessionCreated, SendMessageRequest, ChatTurn, SessionList, MessageList,
)

__all__ = [
    'User', 'UserCreate', 'UserInDB', 'SessionMarker', 'Token', 'TokenData',
    'Sender', 'MessageStatus', 'ChatSession', 'Message', 'MessageCreate',
    'SessionCreate', 'SessionCreated', 'SendMessageRequest', 'ChatTurn',
    'SessionList', 'MessageList',
]
