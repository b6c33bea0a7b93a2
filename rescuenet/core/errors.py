"""
Domain exceptions and their FastAPI handlers.

Services raise these instead of ``HTTPException`` so that the dispatch
engine stays usable outside a request. ``register_error_handlers`` maps
them onto the same ``{"detail": ...}`` body FastAPI uses, plus a stable
machine-readable ``code``.

Usage:
    from rescuenet.core.errors import NotFound

    raise NotFound("SOS alert", alert_id=42)
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class RescueNetError(Exception):
    """Base class for errors the API reports to callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidInput(RescueNetError):
    """Bad coordinates, role or response status. User-correctable."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "INVALID_INPUT"


class NotAuthenticated(RescueNetError):
    """Missing or invalid caller identity."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "NOT_AUTHENTICATED"


class NotAuthorized(RescueNetError):
    """Caller is known but may not act on this resource."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "NOT_AUTHORIZED"


class NotFound(RescueNetError):
    """Referenced resource does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, **identifiers: Any) -> None:
        super().__init__(f"{resource} not found", resource=resource, **identifiers)


class DependencyFailure(RescueNetError):
    """Database or other backing service failed. Not user-correctable."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "DEPENDENCY_FAILURE"


def register_error_handlers(app: FastAPI) -> None:
    """Register the domain exception handler on the app."""

    @app.exception_handler(RescueNetError)
    async def handle_rescuenet_error(request: Request, exc: RescueNetError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.error_code, exc.message)
        else:
            logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.error_code, exc.message)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, NotAuthenticated) else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "code": exc.error_code},
            headers=headers,
        )
