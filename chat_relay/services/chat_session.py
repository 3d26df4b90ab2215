"""Composer logic behind the terminal chat UI.

ChatSession owns the client-side state: settings, transcript and the
in-memory provider key.  Every change is written through the session
store except the key, which only lives as long as the process.
"""

from __future__ import annotations

from loguru import logger

from ..config.providers import ProviderTable, default_model_for, get_provider_table
from ..models.chat_message import ChatMessage
from ..models.chat_request import ChatRequest
from ..models.enums import MessageRole
from ..models.session import SessionState
from .relay_client import RelayClient
from .session_store import SessionStore

ERROR_PREFIX = "⚠️ Error: "


class ChatSession:
    """Stateful chat session with at most one request in flight."""

    def __init__(
        self,
        relay_client: RelayClient,
        store: SessionStore | None = None,
        state: SessionState | None = None,
        providers: ProviderTable | None = None,
    ) -> None:
        self.relay_client = relay_client
        self.store = store
        self.providers = providers if providers is not None else get_provider_table()
        self.state = state or (store.load() if store else SessionState())
        self.api_key = ""
        self.loading = False

        if self.state.provider not in self.providers:
            fallback = next(iter(self.providers))
            logger.warning("Unknown provider {!r} in session; using {}", self.state.provider, fallback)
            self.state.provider = fallback
            self.state.model = default_model_for(fallback, self.providers)

    # ------------------------------------------------------------------
    # Settings

    def _persist(self) -> None:
        if self.store is not None:
            self.store.save(self.state)

    def set_provider(self, provider_id: str) -> None:
        """Switch provider and reset the model to that provider's default."""
        if provider_id not in self.providers:
            raise ValueError(f"Unsupported provider: {provider_id}")
        self.state.provider = provider_id
        self.state.model = default_model_for(provider_id, self.providers)
        self._persist()

    def set_model(self, model: str) -> None:
        self.state.model = model.strip()
        self._persist()

    def set_system(self, system: str) -> None:
        self.state.system = system
        self._persist()

    def set_temperature(self, temperature: float) -> None:
        if not 0.0 <= temperature <= 2.0:
            raise ValueError("Temperature must be between 0.0 and 2.0")
        self.state.temperature = temperature
        self._persist()

    def set_use_client_key(self, enabled: bool) -> None:
        self.state.use_client_key = enabled
        self._persist()

    def set_api_key(self, api_key: str) -> None:
        # Held in memory only
        self.api_key = api_key.strip()

    def reset(self) -> None:
        self.state.messages = []
        self._persist()

    # ------------------------------------------------------------------
    # Sending

    def append(self, role: MessageRole, content: str) -> ChatMessage:
        message = ChatMessage(role=role, content=content)
        self.state.messages.append(message)
        self._persist()
        return message

    def build_request(self) -> ChatRequest:
        return ChatRequest(
            provider=self.state.provider,
            model=self.state.model or None,
            messages=list(self.state.messages),
            api_key=self.api_key if self.state.use_client_key and self.api_key else None,
            temperature=self.state.temperature,
        )

    def send(self, text: str) -> ChatMessage | None:
        """Send one user message and append the reply or error.

        Returns the appended assistant message, or ``None`` when the input
        is blank or another send is still outstanding.
        """
        text = text.strip()
        if not text or self.loading:
            return None

        if not self.state.messages and self.state.system.strip():
            self.state.messages.append(ChatMessage(role=MessageRole.SYSTEM, content=self.state.system))
        self.append(MessageRole.USER, text)

        self.loading = True
        try:
            result = self.relay_client.send(self.build_request())
        finally:
            self.loading = False

        if result.ok:
            return self.append(MessageRole.ASSISTANT, result.reply or "")
        return self.append(MessageRole.ASSISTANT, f"{ERROR_PREFIX}{result.error or 'Unknown error'}")
