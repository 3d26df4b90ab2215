from __future__ import annotations

import pytest
from pydantic import ValidationError

from chat_relay.config.app_config import AppConfig
from chat_relay.config.providers import (
    ProviderShape,
    build_provider_table,
    default_model_for,
    get_provider_table,
)
from chat_relay.config.relay_config import ClientConfig, RelayConfig


def test_provider_table_matches_upstream_endpoints() -> None:
    table = get_provider_table()

    assert table["groq"].path == "/openai/v1/chat/completions"
    assert table["perplexity"].env_var == "PPLX_API_KEY"
    assert table["gemini"].shape is ProviderShape.GEMINI
    assert table["gemini"].path == ""
    assert all(table[pid].is_openai_compatible for pid in ("openai", "together", "perplexity", "groq", "mistral"))


def test_provider_table_is_read_only() -> None:
    table = get_provider_table()

    with pytest.raises(TypeError):
        table["openai"] = table["groq"]  # type: ignore[index]
    with pytest.raises(ValidationError):
        table["openai"].default_model = "gpt-4"  # type: ignore[misc]


def test_custom_table_strips_trailing_slash() -> None:
    table = build_provider_table(
        [{"id": "local", "base_url": "http://localhost:8080/", "path": "/v1/chat/completions",
          "env_var": "LOCAL_KEY", "default_model": "tiny"}]
    )

    assert list(table) == ["local"]
    assert table["local"].base_url == "http://localhost:8080"
    assert default_model_for("local", table) == "tiny"
    assert default_model_for("openai", table) == ""


def test_relay_config_rejects_non_positive_timeout() -> None:
    with pytest.raises(ValidationError):
        RelayConfig(upstream_timeout=0)


def test_relay_config_rejects_out_of_range_temperature() -> None:
    with pytest.raises(ValidationError):
        RelayConfig(default_temperature=3.5)


def test_relay_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("RELAY_UPSTREAM_TIMEOUT", "12.5")
    monkeypatch.setenv("RELAY_GEMINI_SYSTEM_INSTRUCTION", "true")

    config = RelayConfig()

    assert config.upstream_timeout == 12.5
    assert config.gemini_system_instruction is True


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("", ""), ("/webapp", "/webapp"), ("webapp/", "/webapp"), (" /a/b/ ", "/a/b")],
)
def test_api_prefix_is_normalised(raw, expected) -> None:
    assert AppConfig(api_prefix=raw).api_prefix == expected


def test_app_config_rejects_unknown_environment() -> None:
    with pytest.raises(ValidationError):
        AppConfig(app_env="qa")


def test_client_chat_url_and_default_timeout() -> None:
    config = ClientConfig(server_url="http://relay.local:9000/", api_prefix="webapp")

    assert config.chat_url == "http://relay.local:9000/webapp/api/chat"
    assert ClientConfig().timeout == 45.0
