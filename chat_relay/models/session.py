"""Client-side session state persisted between runs."""

from pydantic import BaseModel, ConfigDict, Field

from ..config.relay_config import DEFAULT_SYSTEM_PROMPT
from .chat_message import ChatMessage


class SessionState(BaseModel):
    """Settings and transcript of the terminal chat session.

    The provider key is not a field: it is held in memory by
    the session for the lifetime of the process and never written out.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    provider: str = "openai"
    model: str = "gpt-4o-mini"
    system: str = DEFAULT_SYSTEM_PROMPT
    messages: list[ChatMessage] = Field(default_factory=list)
    temperature: float = 0.7
    use_client_key: bool = Field(False, alias="useClientKey")
