"""Provider-specific request shaping and reply extraction.

Two envelopes are supported.  The OpenAI-compatible shape (``messages``
in, ``choices`` out) is shared by most providers; Gemini uses
``contents``/``candidates`` and authenticates with its own header.
Adapters are pure: they build the outbound request and read the reply,
the relay service performs the call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol
from urllib.parse import quote

from ..config.providers import ProviderConfig
from ..models.chat_message import ChatMessage
from ..models.enums import MessageRole
from ..utils.helpers import dig

NO_CONTENT = "(no content)"


@dataclass(frozen=True)
class UpstreamRequest:
    """Everything needed to issue the single upstream POST."""

    url: str
    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict, repr=False)


class UpstreamAdapter(Protocol):
    def build_request(
        self,
        provider: ProviderConfig,
        messages: list[ChatMessage],
        *,
        model: str,
        api_key: str,
        temperature: float,
        base_url: str | None = None,
    ) -> UpstreamRequest:
        ...

    def extract_reply(self, payload: Any) -> str:
        ...


def _text_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


class OpenAICompatAdapter:
    """Chat-completions envelope used by OpenAI, Together, Groq, etc."""

    def build_request(
        self,
        provider: ProviderConfig,
        messages: list[ChatMessage],
        *,
        model: str,
        api_key: str,
        temperature: float,
        base_url: str | None = None,
    ) -> UpstreamRequest:
        # Callers may move the host, never the path
        root = (base_url or provider.base_url).rstrip("/")
        return UpstreamRequest(
            url=f"{root}{provider.path}",
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            body={
                "model": model,
                "messages": [message.to_wire() for message in messages],
                "temperature": temperature,
            },
        )

    def extract_reply(self, payload: Any) -> str:
        for path in (("choices", 0, "message", "content"), ("choices", 0, "text")):
            text = _text_or_none(dig(payload, *path))
            if text is not None:
                return text
        return NO_CONTENT


class GeminiAdapter:
    """``generateContent`` envelope of the Generative Language API.

    Gemini has no ``system`` role.  By default system messages are sent
    as ``user`` turns; with ``system_instruction=True`` they are joined
    into the request's ``system_instruction`` field instead.
    """

    def __init__(self, system_instruction: bool = False) -> None:
        self.system_instruction = system_instruction

    def build_request(
        self,
        provider: ProviderConfig,
        messages: list[ChatMessage],
        *,
        model: str,
        api_key: str,
        temperature: float,
        base_url: str | None = None,
    ) -> UpstreamRequest:
        system_parts: list[str] = []
        contents: list[dict[str, Any]] = []
        for message in messages:
            if self.system_instruction and message.role == MessageRole.SYSTEM:
                system_parts.append(message.content)
                continue
            role = "model" if message.role == MessageRole.ASSISTANT else "user"
            contents.append({"role": role, "parts": [{"text": message.content}]})

        body: dict[str, Any] = {
            "contents": contents,
            "generationConfig": {"temperature": temperature},
        }
        if system_parts:
            body["system_instruction"] = {"parts": [{"text": "\n".join(system_parts)}]}

        return UpstreamRequest(
            url=f"{provider.base_url}/v1beta/models/{quote(model, safe='')}:generateContent",
            headers={
                "x-goog-api-key": api_key,
                "Content-Type": "application/json",
            },
            body=body,
        )

    def extract_reply(self, payload: Any) -> str:
        text = _text_or_none(dig(payload, "candidates", 0, "content", "parts", 0, "text"))
        return NO_CONTENT if text is None else text


def adapter_for(provider: ProviderConfig, gemini_system_instruction: bool = False) -> UpstreamAdapter:
    """Return the adapter matching the provider's envelope."""
    if provider.is_openai_compatible:
        return OpenAICompatAdapter()
    return GeminiAdapter(system_instruction=gemini_system_instruction)
