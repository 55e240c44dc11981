"""
Exception handlers mapping core errors to HTTP responses.
"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..config import settings
from ..core.errors import NotFound, PartialWriteError, RemoteStoreError, Unauthenticated

logger = logging.getLogger(__name__)


async def _unauthenticated(request: Request, exc: Unauthenticated) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _not_found(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


async def _remote_store_error(request: Request, exc: RemoteStoreError) -> JSONResponse:
    logger.error(f"Store failure on {request.method} {request.url.path}: {exc}")
    content = {"detail": settings.error_reply, "status": "error", "error": str(exc)}
    if isinstance(exc, PartialWriteError):
        content["partial"] = True
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(Unauthenticated, _unauthenticated)
    app.add_exception_handler(NotFound, _not_found)
    app.add_exception_handler(RemoteStoreError, _remote_store_error)
