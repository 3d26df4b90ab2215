"""General helper functions used across the application."""

from __future__ import annotations

from typing import Any


def dig(data: Any, *path: str | int) -> Any:
    """Walk nested dicts and lists, returning ``None`` on the first miss.

    ``dig(payload, "choices", 0, "message", "content")`` reads
    ``payload["choices"][0]["message"]["content"]`` without raising when
    any level is absent or of the wrong type.
    """
    current = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
        elif not isinstance(current, dict):
            return None
        elif key not in current:
            return None
        current = current[key]
    return current
