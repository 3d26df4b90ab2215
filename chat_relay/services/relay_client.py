"""HTTP client for the relay endpoint.

The client never raises for transport problems or error responses:
every outcome becomes a :class:`RelayResult`, so callers can render a
failure in the transcript and carry on.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from loguru import logger

from ..config.relay_config import ClientConfig, get_client_config
from ..models.chat_request import ChatRequest
from ..utils.helpers import dig

NO_REPLY = "(no reply)"


@dataclass(frozen=True)
class RelayResult:
    """Outcome of one relay call: a reply or an error text."""

    reply: str | None = None
    error: str | None = None
    status_code: int | None = None
    provider: str | None = None
    model: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _error_text(response: httpx.Response) -> str:
    """Prefer the relay's ``error`` field, then the raw body."""
    try:
        message = dig(response.json(), "error")
    except ValueError:
        message = None
    if isinstance(message, str) and message:
        return message
    return response.text or f"Request failed ({response.status_code})"


class RelayClient:
    """Send chat requests to ``POST /api/chat`` with a bounded wait.

    Parameters
    ----------
    client_config: ClientConfig, optional
        Server URL, mount prefix and timeout.
    http_client: httpx.Client, optional
        Pre-built client (for example FastAPI's ``TestClient``).  When
        omitted a client is created per call with the configured timeout.
    transport: httpx.BaseTransport, optional
        Transport for the per-call client; ignored with ``http_client``.
    """

    def __init__(
        self,
        client_config: ClientConfig | None = None,
        http_client: httpx.Client | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = client_config or get_client_config()
        self._http_client = http_client
        self._transport = transport

    def _post(self, body: dict[str, object]) -> httpx.Response:
        if self._http_client is not None:
            return self._http_client.post(self.config.chat_url, json=body)
        with httpx.Client(timeout=self.config.timeout, transport=self._transport) as client:
            return client.post(self.config.chat_url, json=body)

    def send(self, request: ChatRequest) -> RelayResult:
        logger.debug("Sending chat request to {} (provider={})", self.config.chat_url, request.provider)
        try:
            response = self._post(request.to_wire())
        except httpx.TimeoutException:
            logger.warning("Relay call timed out after {}s", self.config.timeout)
            return RelayResult(error=f"Request timed out after {self.config.timeout:g}s")
        except httpx.HTTPError as exc:
            logger.warning("Relay call failed: {}", exc)
            return RelayResult(error=f"Request failed: {exc}")

        if not response.is_success:
            return RelayResult(error=_error_text(response), status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            data = None
        reply = dig(data, "reply")
        return RelayResult(
            reply=reply if isinstance(reply, str) else NO_REPLY,
            status_code=response.status_code,
            provider=dig(data, "provider"),
            model=dig(data, "model"),
        )
