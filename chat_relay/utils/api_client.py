"""Simple HTTP client utilities using httpx.

The relay makes exactly one outbound request per chat call, so a fresh
``AsyncClient`` is opened and closed around each request.  Tests pass a
``transport`` (for example ``httpx.MockTransport``) to intercept calls.
"""

from __future__ import annotations

import httpx
from typing import Any, Dict, Optional


async def post(
    url: str,
    json: Dict[str, Any],
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 40.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.Response:
    """Perform an asynchronous HTTP POST request with a JSON body."""
    async with httpx.AsyncClient(
        timeout=timeout, transport=transport, follow_redirects=True
    ) as client:
        return await client.post(url, json=json, headers=headers)
