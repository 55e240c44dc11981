"""
Service container - builds the process-wide service graph once at startup.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..core.session_cache import SessionCache
from ..llm.base import LLMProvider
from ..llm.factory import create_llm_provider
from ..storage.chat_store import ChatStore
from ..storage.interface import StorageInterface
from ..storage.local_storage import LocalStorage
from ..storage.user_storage import SessionMarkerStore, UserStorage
from .auth_service import AuthService
from .chat_service import ChatService
from .chat_session_manager import ChatSessionManager
from .response_generator import ResponseGenerator

logger = logging.getLogger(__name__)


@dataclass
class Services:
    cache: SessionCache
    manager: ChatSessionManager
    generator: ResponseGenerator
    chat: ChatService
    auth: AuthService


def build_llm_provider(config: Any) -> Optional[LLMProvider]:
    """Configured LLM provider, or None when no API key is set."""
    api_key = config.llm_api_key or (
        config.gemini_api_key if config.llm_provider == "gemini" else config.openai_api_key
    )
    return create_llm_provider(
        provider=config.llm_provider,
        api_key=api_key or "",
        model=config.llm_model,
        base_url=config.llm_base_url,
        timeout=config.llm_timeout,
    )


def build_services(
    config: Any,
    storage: Optional[StorageInterface] = None,
    provider: Optional[LLMProvider] = None,
) -> Services:
    """
    Wire storage, cache, manager, generator and auth together.

    Args:
        config: Settings object
        storage: Storage backend (defaults to LocalStorage at ``local_storage_path``)
        provider: LLM provider (defaults to the one described by ``config``)
    """
    if storage is None:
        storage = LocalStorage(config.local_storage_path)
    if provider is None:
        provider = build_llm_provider(config)
    if provider is None:
        logger.warning("No LLM API key configured; assistant replies will use the fallback text")

    cache = SessionCache(ttl_seconds=config.session_cache_ttl_seconds)
    manager = ChatSessionManager(ChatStore(storage), cache)
    generator = ResponseGenerator(provider, fallback_reply=config.fallback_reply)
    chat = ChatService(
        manager,
        generator,
        max_length=config.message_max_length,
        title_length=config.session_title_length,
    )
    auth = AuthService(
        UserStorage(storage),
        SessionMarkerStore(storage, config.session_marker_file),
        cache,
    )
    return Services(cache=cache, manager=manager, generator=generator, chat=chat, auth=auth)


# Global service container
_services: Optional[Services] = None


def init_services(config: Any, **kwargs) -> Services:
    """Build the global service container (see ``build_services``)."""
    global _services
    _services = build_services(config, **kwargs)
    return _services


def get_services() -> Services:
    """
    Get the global service container.

    Raises:
        RuntimeError: If services have not been initialized
    """
    if _services is None:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    return _services
