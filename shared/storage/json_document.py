"""
Atomic JSON document helpers.

This module centralizes whole-file JSON reads and atomic writes for the
runtime's durable state (the match archive). Writers never leave a partially
written document behind: content goes to a temp file in the same directory,
is fsynced, and then replaces the target in one step.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from shared.logging.logger import get_logger

log = get_logger("shared.json_document")


class JsonDocumentError(Exception):
    """Raised when a JSON document cannot be read or written."""


class JsonDocument:
    """
    A single JSON file read and written as a whole.

    Errors are raised, never swallowed: callers decide whether a missing
    or unreadable document is fatal.
    """

    def __init__(self, path: Path | str, *, default: Any = None):
        self._path = Path(path)
        self._default = default

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def load(self) -> Any:
        """
        Return the parsed document, or a copy of the default when the file
        does not exist or is empty.
        """
        if not self._path.exists():
            return self._fresh_default()

        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise JsonDocumentError(f"Failed to read {self._path}: {e}") from e

        if not raw.strip():
            log.warning(f"JSON document {self._path} is empty; using default")
            return self._fresh_default()

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise JsonDocumentError(f"Malformed JSON in {self._path}: {e}") from e

    def _fresh_default(self) -> Any:
        return json.loads(json.dumps(self._default))

    # ------------------------------------------------------------------
    # Atomic writer
    # ------------------------------------------------------------------

    def write(self, payload: Any) -> None:
        serialized = json.dumps(payload, indent=2, ensure_ascii=False)

        temp_path = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", dir=self._path.parent, delete=False, encoding="utf-8"
            ) as tmp:
                temp_path = Path(tmp.name)
                tmp.write(serialized)
                tmp.flush()
                os.fsync(tmp.fileno())

            temp_path.replace(self._path)
        except OSError as e:
            if temp_path is not None and temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise JsonDocumentError(f"Failed to write {self._path}: {e}") from e
