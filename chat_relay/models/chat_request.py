"""Request model for the relay API."""

from typing import Annotated

from pydantic import AllowInfNan, BaseModel, ConfigDict, Field, Strict

from .chat_message import ChatMessage


class ChatRequest(BaseModel):
    """Normalised chat request accepted by ``POST /api/chat``.

    ``apiKey`` and ``baseUrl`` keep their camelCase names on the wire;
    Python code uses ``api_key`` and ``base_url``.  Empty strings for the
    optional text fields behave as if the field were absent.  Unknown
    fields are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    provider: str = Field(..., min_length=1, description="Identifier of the upstream provider.")
    model: str | None = Field(
        default=None,
        description="Model identifier.  The provider default is used when omitted.",
    )
    messages: list[ChatMessage] = Field(..., min_length=1, description="Transcript to send upstream.")
    api_key: str | None = Field(
        default=None,
        alias="apiKey",
        repr=False,
        description="Caller-supplied provider key; takes priority over the server key.",
    )
    base_url: str | None = Field(
        default=None,
        alias="baseUrl",
        description="Override for the upstream host of OpenAI-compatible providers.",
    )
    temperature: Annotated[float, Strict(), AllowInfNan(False)] | None = Field(
        default=None,
        description="Sampling temperature.  Must be a finite JSON number.",
    )

    def to_wire(self) -> dict[str, object]:
        """Return the JSON body the relay client posts."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
