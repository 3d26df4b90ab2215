"""Model representing a single transcript entry."""

from pydantic import BaseModel, ConfigDict

from .enums import MessageRole


class ChatMessage(BaseModel):
    """One role-tagged message of a transcript.

    Roles are passed through to OpenAI-compatible providers unchanged,
    so the serialised form is exactly ``{"role": ..., "content": ...}``.
    """

    model_config = ConfigDict(use_enum_values=True, extra="ignore")

    role: MessageRole
    content: str

    def to_wire(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}
