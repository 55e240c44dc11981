"""Storage module - provides interface and implementations for data persistence."""

from .interface import StorageInterface, StorageError
from .local_storage import LocalStorage
from .chat_store import ChatStore
from .user_storage import UserStorage, SessionMarkerStore

__all__ = [
    'StorageInterface', 'StorageError', 'LocalStorage', 'ChatStore',
    'UserStorage', 'SessionMarkerStore',
]
