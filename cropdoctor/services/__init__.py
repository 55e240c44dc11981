"""Services module - chat orchestration, reply generation and auth."""

from .chat_session_manager import ChatSessionManager
from .response_generator import ResponseGenerator
from .chat_service import ChatService
from .auth_service import AuthService, EmailAlreadyRegistered
from .container import Services, build_services, init_services, get_services

__all__ = [
    'ChatSessionManager', 'ResponseGenerator', 'ChatService', 'AuthService',
    'EmailAlreadyRegistered', 'Services', 'build_services', 'init_services', 'get_services',
]
