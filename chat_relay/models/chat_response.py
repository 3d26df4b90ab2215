"""Response models for the relay API."""

from pydantic import BaseModel, Field

from ..config.providers import ProviderShape


class ChatResponse(BaseModel):
    """Successful relay result."""

    reply: str
    provider: str
    model: str = Field(..., description="Model actually used, after default substitution.")


class ErrorResponse(BaseModel):
    """Error body returned for every failed relay call."""

    error: str


class ProviderInfo(BaseModel):
    """Public view of a provider table entry."""

    id: str
    default_model: str
    shape: ProviderShape
