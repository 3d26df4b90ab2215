"""Shared fixtures: a recording fake upstream and a wired test app."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from chat_relay.config.app_config import AppConfig
from chat_relay.config.providers import build_provider_table
from chat_relay.config.relay_config import RelayConfig
from chat_relay.main import create_app
from chat_relay.services.relay_service import RelayService, get_relay_service


class FakeUpstream:
    """Records every upstream request and answers with a canned response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.response = httpx.Response(200, json={"choices": [{"message": {"content": "hello"}}]})
        self.error: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response

    def reply_with(self, status_code: int = 200, **kwargs) -> None:
        self.response = httpx.Response(status_code, **kwargs)

    def fail_with(self, error: Exception) -> None:
        self.error = error

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "no upstream request was made"
        return self.requests[-1]

    @property
    def last_json(self) -> dict:
        return json.loads(self.last_request.content)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def environ() -> dict[str, str]:
    """Server environment seen by the relay; starts with no keys."""
    return {}


@pytest.fixture
def relay_config() -> RelayConfig:
    return RelayConfig(upstream_timeout=5.0, default_temperature=0.7, gemini_system_instruction=False)


@pytest.fixture
def relay_service(upstream: FakeUpstream, environ: dict[str, str], relay_config: RelayConfig) -> RelayService:
    return RelayService(
        providers=build_provider_table(),
        relay_config=relay_config,
        environ=environ,
        transport=httpx.MockTransport(upstream.handler),
    )


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(app_env="development", log_level="WARNING", api_prefix="")


@pytest.fixture
def client(app_config: AppConfig, relay_service: RelayService) -> TestClient:
    app = create_app(app_config)
    app.dependency_overrides[get_relay_service] = lambda: relay_service
    return TestClient(app)
