"""
Error taxonomy for the chat core.

Adapters raise these; the session manager propagates them unchanged and the
API layer maps them to HTTP responses. Nothing here is retried.
"""

from typing import Optional


class CropDoctorError(Exception):
    """Base class for all application errors."""


class Unauthenticated(CropDoctorError):
    """No user identity was supplied."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class NotFound(CropDoctorError):
    """A session (or other document) no longer exists."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class RemoteStoreError(CropDoctorError):
    """A read or write against the document store failed."""


class PartialWriteError(RemoteStoreError):
    """
    A multi-step write stopped half way.

    The steps that completed are durable and are not rolled back;
    ``completed`` holds whatever the caller may need to reconcile (for a
    message append, the stored message).
    """

    def __init__(self, message: str, completed: Optional[object] = None):
        super().__init__(message)
        self.completed = completed


class GenerationError(CropDoctorError):
    """The text-generation endpoint failed or returned nothing usable."""
