"""API module."""

from .auth import router as auth_router
from .chat import router as chat_router
from .errors import register_exception_handlers

__all__ = ['auth_router', 'chat_router', 'register_exception_handlers']
