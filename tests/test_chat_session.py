from __future__ import annotations

import pytest

from chat_relay.models.chat_request import ChatRequest
from chat_relay.models.session import SessionState
from chat_relay.services.chat_session import ERROR_PREFIX, ChatSession
from chat_relay.services.relay_client import RelayResult
from chat_relay.services.session_store import SessionStore


class FakeRelayClient:
    """Captures requests and returns queued results."""

    def __init__(self, *results: RelayResult) -> None:
        self.results = list(results) or [RelayResult(reply="pong")]
        self.requests: list[ChatRequest] = []
        self.session: ChatSession | None = None
        self.loading_seen: list[bool] = []

    def send(self, request: ChatRequest) -> RelayResult:
        self.requests.append(request)
        if self.session is not None:
            self.loading_seen.append(self.session.loading)
        return self.results.pop(0) if len(self.results) > 1 else self.results[0]


@pytest.fixture
def store(tmp_path) -> SessionStore:
    return SessionStore(tmp_path / "session.json")


def test_first_send_seeds_system_prompt_once(store) -> None:
    relay = FakeRelayClient()
    session = ChatSession(relay, store, state=SessionState(system="be brief"))

    session.send("hi")
    session.send("again")

    roles = [message.role for message in session.state.messages]
    assert roles == ["system", "user", "assistant", "user", "assistant"]
    assert relay.requests[0].messages[0].content == "be brief"
    assert len(relay.requests[1].messages) == 4


def test_blank_system_prompt_is_not_seeded(store) -> None:
    session = ChatSession(FakeRelayClient(), store, state=SessionState(system="   "))

    session.send("hi")

    assert [message.role for message in session.state.messages] == ["user", "assistant"]


def test_blank_input_sends_nothing(store) -> None:
    relay = FakeRelayClient()
    session = ChatSession(relay, store)

    assert session.send("   ") is None
    assert relay.requests == []
    assert session.state.messages == []


def test_failure_is_rendered_as_assistant_message(store) -> None:
    session = ChatSession(FakeRelayClient(RelayResult(error="Missing API key for openai")), store)

    message = session.send("hi")

    assert message.role == "assistant"
    assert message.content == f"{ERROR_PREFIX}Missing API key for openai"
    assert session.loading is False


def test_loading_flag_is_set_during_the_call_and_blocks_resend(store) -> None:
    relay = FakeRelayClient()
    session = ChatSession(relay, store)
    relay.session = session

    session.send("hi")
    assert relay.loading_seen == [True]

    session.loading = True
    assert session.send("again") is None
    assert len(relay.requests) == 1


def test_changing_provider_resets_model(store) -> None:
    session = ChatSession(FakeRelayClient(), store)
    session.set_model("gpt-4o")

    session.set_provider("mistral")

    assert session.state.model == "mistral-large-latest"
    assert store.load().provider == "mistral"


def test_unknown_provider_is_rejected(store) -> None:
    session = ChatSession(FakeRelayClient(), store)

    with pytest.raises(ValueError):
        session.set_provider("unknown-x")


def test_unknown_saved_provider_falls_back_to_first(store) -> None:
    session = ChatSession(FakeRelayClient(), store, state=SessionState(provider="retired", model="x"))

    assert session.state.provider == "openai"
    assert session.state.model == "gpt-4o-mini"


def test_key_is_attached_only_when_enabled(store) -> None:
    relay = FakeRelayClient()
    session = ChatSession(relay, store)
    session.set_api_key(" sk-user ")

    session.send("one")
    session.set_use_client_key(True)
    session.send("two")

    assert relay.requests[0].api_key is None
    assert relay.requests[1].api_key == "sk-user"
    assert "sk-user" not in store.path.read_text(encoding="utf-8")


def test_settings_and_transcript_survive_a_restart(store) -> None:
    first = ChatSession(FakeRelayClient(), store)
    first.set_provider("groq")
    first.set_temperature(0.3)
    first.send("hi")

    second = ChatSession(FakeRelayClient(), store)

    assert second.state.provider == "groq"
    assert second.state.temperature == 0.3
    assert [message.content for message in second.state.messages][-2:] == ["hi", "pong"]
    assert second.api_key == ""


def test_reset_clears_transcript_only(store) -> None:
    session = ChatSession(FakeRelayClient(), store)
    session.set_provider("gemini")
    session.send("hi")

    session.reset()

    assert store.load().messages == []
    assert store.load().provider == "gemini"


def test_temperature_out_of_range_is_rejected(store) -> None:
    session = ChatSession(FakeRelayClient(), store)

    with pytest.raises(ValueError):
        session.set_temperature(2.5)
