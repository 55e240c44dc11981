"""Core module - error taxonomy, session cache and logging setup."""

from .errors import (
    CropDoctorError, Unauthenticated, NotFound, RemoteStoreError,
    PartialWriteError, GenerationError,
)
from .session_cache import SessionCache, CacheEntry

__all__ = [
    'CropDoctorError', 'Unauthenticated', 'NotFound', 'RemoteStoreError',
    'PartialWriteError', 'GenerationError', 'SessionCache', 'CacheEntry',
]
