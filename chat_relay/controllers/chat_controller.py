"""API controller for the provider relay.

The chat route reads the raw body itself rather than declaring a
pydantic body parameter: validation order and the 400/401 error shapes
are owned by :class:`RelayService`, not by FastAPI's 422 handling.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from ..config.providers import ProviderTable, get_provider_table
from ..models.chat_response import ChatResponse, ErrorResponse, ProviderInfo
from ..services.relay_service import RelayService, get_relay_service
from ..utils.error_handler import NO_STORE_HEADERS, RelayError, error_response

router = APIRouter(prefix="/api", tags=["Chat"])


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request or unsupported provider"},
        401: {"model": ErrorResponse, "description": "No API key available"},
        502: {"model": ErrorResponse, "description": "Upstream failure"},
        504: {"model": ErrorResponse, "description": "Upstream timeout"},
    },
)
async def chat_endpoint(
    request: Request,
    service: RelayService = Depends(get_relay_service),
) -> JSONResponse:
    """Relay a chat request to the selected provider.

    Upstream error statuses are passed through unchanged with the
    provider's body text in ``error``.  Responses are never cacheable.
    """
    body = await request.body()
    try:
        result = await service.handle(body)
    except RelayError:
        raise
    except Exception:
        logger.exception("Unhandled exception during relay")
        return error_response("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(content=result.model_dump(), headers=NO_STORE_HEADERS)


@router.get("/providers", response_model=list[ProviderInfo])
async def list_providers_endpoint(
    providers: ProviderTable = Depends(get_provider_table),
) -> list[ProviderInfo]:
    """List supported providers and their default models."""
    return [
        ProviderInfo(id=provider.id, default_model=provider.default_model, shape=provider.shape)
        for provider in providers.values()
    ]
