"""Error handling utilities and custom exceptions."""

from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger

NO_STORE_HEADERS = {"Cache-Control": "no-store"}


class RelayError(Exception):
    """Base class for failures reported to relay callers.

    Each subclass fixes the error ``kind`` and default HTTP status; the
    message is what the caller sees in the ``error`` field, so it must
    never contain key material.
    """

    kind = "relay_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidRequestError(RelayError):
    """The request body is not valid JSON or has a malformed field."""

    kind = "invalid_request"
    status_code = status.HTTP_400_BAD_REQUEST


class MissingFieldError(RelayError):
    """A required field (``provider`` or ``messages``) is absent."""

    kind = "missing_field"
    status_code = status.HTTP_400_BAD_REQUEST


class UnsupportedProviderError(RelayError):
    kind = "unsupported_provider"
    status_code = status.HTTP_400_BAD_REQUEST


class MissingCredentialError(RelayError):
    """Neither the caller nor the server environment supplied a key."""

    kind = "missing_credential"
    status_code = status.HTTP_401_UNAUTHORIZED


class UpstreamError(RelayError):
    """The provider answered with a failure, or could not be reached."""

    kind = "upstream_error"
    status_code = status.HTTP_502_BAD_GATEWAY


def error_response(message: str, status_code: int) -> JSONResponse:
    """Build the ``{"error": ...}`` body shared by every failure."""
    return JSONResponse(
        status_code=status_code,
        content={"error": message},
        headers=NO_STORE_HEADERS,
    )


async def relay_exception_handler(request: Request, exc: RelayError) -> JSONResponse:
    """Convert a RelayError into its JSON error response."""
    if exc.status_code >= 500:
        logger.error("{} on {} ({}): {}", exc.kind, request.url.path, exc.status_code, exc.message)
    else:
        logger.warning("{} on {} ({}): {}", exc.kind, request.url.path, exc.status_code, exc.message)
    return error_response(exc.message, exc.status_code)
