from __future__ import annotations

import json

from chat_relay.models.chat_message import ChatMessage
from chat_relay.models.session import SessionState
from chat_relay.services.session_store import STORAGE_KEY, SessionStore


def test_missing_file_gives_defaults(tmp_path) -> None:
    state = SessionStore(tmp_path / "absent.json").load()

    assert state == SessionState()
    assert state.provider == "openai"
    assert state.model == "gpt-4o-mini"
    assert state.temperature == 0.7
    assert state.use_client_key is False


def test_save_then_load_restores_settings_and_transcript(tmp_path) -> None:
    store = SessionStore(tmp_path / "nested" / "session.json")
    state = SessionState(
        provider="groq",
        model="llama3-70b-8192",
        system="terse",
        temperature=0.2,
        use_client_key=True,
        messages=[ChatMessage(role="user", content="hi"), ChatMessage(role="assistant", content="yo")],
    )

    store.save(state)

    assert store.load() == state
    raw = json.loads(store.path.read_text(encoding="utf-8"))[STORAGE_KEY]
    assert raw["useClientKey"] is True
    assert raw["messages"][1] == {"role": "assistant", "content": "yo"}


def test_key_is_never_written(tmp_path) -> None:
    store = SessionStore(tmp_path / "session.json")

    store.save(SessionState(use_client_key=True))

    text = store.path.read_text(encoding="utf-8")
    assert "apiKey" not in text
    assert "api_key" not in text


def test_corrupt_file_gives_defaults(tmp_path) -> None:
    path = tmp_path / "session.json"
    path.write_text("{ definitely not json", encoding="utf-8")

    assert SessionStore(path).load() == SessionState()


def test_invalid_fields_are_dropped_individually(tmp_path) -> None:
    path = tmp_path / "session.json"
    path.write_text(
        json.dumps({STORAGE_KEY: {"provider": "mistral", "temperature": "hot", "messages": "nope"}}),
        encoding="utf-8",
    )

    state = SessionStore(path).load()

    assert state.provider == "mistral"
    assert state.temperature == 0.7
    assert state.messages == []


def test_other_keys_in_the_file_survive_a_save(tmp_path) -> None:
    path = tmp_path / "session.json"
    path.write_text(json.dumps({"another.app": {"x": 1}}), encoding="utf-8")

    SessionStore(path).save(SessionState(provider="gemini"))

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["another.app"] == {"x": 1}
    assert data[STORAGE_KEY]["provider"] == "gemini"
