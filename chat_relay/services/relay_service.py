"""Provider-dispatch relay.

The RelayService turns one normalised chat request into exactly one
upstream call and normalises the answer back into ``{reply, provider,
model}``.  It is stateless: the provider table, relay settings, the
environment used for server-side keys and the HTTP transport are all
injected, and nothing outlives a single call.
"""

from __future__ import annotations

from functools import lru_cache
import json
import os
import time
from typing import Any, Mapping
from urllib.parse import urlsplit

import httpx
from loguru import logger
from pydantic import ValidationError

from ..config.providers import ProviderConfig, ProviderTable, get_provider_table
from ..config.relay_config import RelayConfig, get_relay_config
from ..models.chat_request import ChatRequest
from ..models.chat_response import ChatResponse
from ..utils import api_client
from ..utils.error_handler import (
    InvalidRequestError,
    MissingCredentialError,
    MissingFieldError,
    UnsupportedProviderError,
    UpstreamError,
)
from .upstream import adapter_for


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are accepted by the json module but are not JSON
    raise ValueError(f"{name} is not valid JSON")


def _describe_validation_error(exc: ValidationError) -> str:
    """Name the first offending field without echoing its value."""
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "body"
    return f"Invalid '{location}': {first.get('msg', 'invalid value')}"


class RelayService:
    """Validate, shape and forward chat requests to upstream providers.

    Parameters
    ----------
    providers: ProviderTable, optional
        Read-only provider table.  Defaults to :func:`get_provider_table`.
    relay_config: RelayConfig, optional
        Timeout, default temperature and Gemini system handling.
    environ: Mapping[str, str], optional
        Where server-side keys are looked up.  Defaults to ``os.environ``.
    transport: httpx.AsyncBaseTransport, optional
        Transport for the upstream client; tests pass a mock transport.
    """

    def __init__(
        self,
        providers: ProviderTable | None = None,
        relay_config: RelayConfig | None = None,
        environ: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.providers = providers if providers is not None else get_provider_table()
        self.relay_config = relay_config or get_relay_config()
        self.environ = environ if environ is not None else os.environ
        self.transport = transport

    # ------------------------------------------------------------------
    # Validation

    def parse_request(self, raw: bytes | str) -> ChatRequest:
        """Parse and validate a raw request body.

        Checks run in a fixed order and the first failure wins: body is
        JSON, ``provider`` present, ``messages`` non-empty, provider
        known, then field types.

        Raises
        ------
        InvalidRequestError, MissingFieldError, UnsupportedProviderError
        """
        try:
            data = json.loads(raw, parse_constant=_reject_constant)
        except ValueError as exc:
            raise InvalidRequestError("Invalid JSON body") from exc

        if not isinstance(data, dict):
            data = {}

        provider = data.get("provider")
        if not provider:
            raise MissingFieldError("Missing 'provider'")

        messages = data.get("messages")
        if not isinstance(messages, list) or not messages:
            raise MissingFieldError("Missing 'messages'")

        if not isinstance(provider, str) or provider not in self.providers:
            raise UnsupportedProviderError(f"Unsupported provider: {provider}")

        try:
            return ChatRequest.model_validate(data)
        except ValidationError as exc:
            raise InvalidRequestError(_describe_validation_error(exc)) from exc

    def get_provider(self, provider_id: str) -> ProviderConfig:
        provider = self.providers.get(provider_id)
        if provider is None:
            raise UnsupportedProviderError(f"Unsupported provider: {provider_id}")
        return provider

    # ------------------------------------------------------------------
    # Resolution

    def resolve_api_key(self, provider: ProviderConfig, client_key: str | None) -> tuple[str, str]:
        """Return ``(key, source)`` where source is ``client`` or ``server``.

        A non-empty caller key always wins over the environment variable
        named by the provider entry.
        """
        if client_key:
            return client_key, "client"
        server_key = self.environ.get(provider.env_var)
        if server_key:
            return server_key, "server"
        raise MissingCredentialError(
            f"Missing API key for {provider.id} (provide apiKey or set {provider.env_var})"
        )

    @staticmethod
    def resolve_model(provider: ProviderConfig, requested: str | None) -> str:
        return requested or provider.default_model

    def resolve_temperature(self, requested: float | None) -> float:
        return self.relay_config.default_temperature if requested is None else requested

    # ------------------------------------------------------------------
    # Relay

    async def handle(self, raw: bytes | str) -> ChatResponse:
        """Parse a raw body and relay it."""
        return await self.relay(self.parse_request(raw))

    async def relay(self, request: ChatRequest) -> ChatResponse:
        """Forward a validated request upstream and normalise the reply.

        Raises
        ------
        MissingCredentialError
            If no key can be resolved.
        UpstreamError
            If the provider fails, times out or answers with a non-JSON body.
        """
        provider = self.get_provider(request.provider)
        model = self.resolve_model(provider, request.model)
        api_key, key_source = self.resolve_api_key(provider, request.api_key)

        adapter = adapter_for(provider, self.relay_config.gemini_system_instruction)
        upstream = adapter.build_request(
            provider,
            request.messages,
            model=model,
            api_key=api_key,
            temperature=self.resolve_temperature(request.temperature),
            base_url=request.base_url,
        )

        timeout = self.relay_config.upstream_timeout
        logger.info(
            "Relaying chat: provider={} model={} host={} key_source={} messages={}",
            provider.id,
            model,
            urlsplit(upstream.url).netloc,
            key_source,
            len(request.messages),
        )
        started = time.perf_counter()
        try:
            response = await api_client.post(
                upstream.url,
                json=upstream.body,
                headers=upstream.headers,
                timeout=timeout,
                transport=self.transport,
            )
        except httpx.TimeoutException as exc:
            raise UpstreamError(
                f"{provider.id} upstream timed out after {timeout:g}s", status_code=504
            ) from exc
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise UpstreamError(f"{provider.id} upstream request failed: {exc}") from exc

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "Upstream {} answered {} in {:.0f} ms", provider.id, response.status_code, elapsed_ms
        )

        if not response.is_success:
            raise UpstreamError(
                f"{provider.id} upstream error: {response.text}",
                status_code=response.status_code,
            )

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise UpstreamError(f"{provider.id} upstream returned a non-JSON body") from exc

        return ChatResponse(
            reply=adapter.extract_reply(payload),
            provider=provider.id,
            model=model,
        )


@lru_cache()
def get_relay_service() -> RelayService:
    """Dependency injector for RelayService instances.

    FastAPI will call this function to obtain a singleton
    RelayService.  The lru_cache decorator ensures only one
    instance exists.
    """
    return RelayService()
