"""Client-local persistence of the chat session.

Settings and transcript live in a small JSON key/value file under a
single namespaced key.  Loading never fails: a missing or damaged file
yields default settings, and fields that no longer validate are dropped
one by one so the rest of the session survives.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
import tempfile
from typing import Any

from loguru import logger
from pydantic import ValidationError

from ..models.session import SessionState

STORAGE_KEY = "chat_relay.playground.v1"


class SessionStore:
    """Read and write :class:`SessionState` to a JSON file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable session file {}: {}", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def load(self) -> SessionState:
        record = self._read_all().get(STORAGE_KEY)
        if not isinstance(record, dict):
            return SessionState()

        # Each pass removes the top-level fields that failed validation
        for _ in range(len(record) + 1):
            try:
                return SessionState.model_validate(record)
            except ValidationError as exc:
                invalid = {err["loc"][0] for err in exc.errors() if err.get("loc")}
                if not invalid & record.keys():
                    break
                logger.warning("Dropping invalid session fields: {}", ", ".join(sorted(map(str, invalid))))
                record = {key: value for key, value in record.items() if key not in invalid}
        return SessionState()

    def save(self, state: SessionState) -> None:
        """Write the session atomically; failures are logged, not raised."""
        data = self._read_all()
        data[STORAGE_KEY] = state.model_dump(by_alias=True, mode="json")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".session-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            logger.warning("Could not persist session to {}: {}", self.path, exc)
