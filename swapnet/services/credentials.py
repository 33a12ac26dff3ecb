"""Process-wide API key resolution with a persisted override."""

import logging
import threading
from pathlib import Path

from ..utils.storage import atomic_write_text

logger = logging.getLogger(__name__)


class CredentialStore:
    """Resolves the Gemini API key for every call.

    An explicitly set override always wins over the ambient default supplied
    at process start. The override is persisted to ``path`` so it survives
    restarts; ``clear()`` removes it and falls back to the ambient default.
    """

    def __init__(self, path: Path | None = None, default: str | None = None):
        self.path = path
        self.default = default or None
        self._lock = threading.Lock()
        self._override = self._load()

    def _load(self) -> str | None:
        if self.path is None or not self.path.exists():
            return None
        try:
            value = self.path.read_text(encoding="utf-8").strip()
        except OSError as e:
            logger.warning("Could not read stored API key at %s: %s", self.path, e)
            return None
        return value or None

    def get(self) -> str | None:
        """Current credential: the override if set, else the ambient default."""
        with self._lock:
            return self._override or self.default

    @property
    def has_override(self) -> bool:
        with self._lock:
            return self._override is not None

    def set(self, credential: str) -> None:
        """Store an override credential and persist it."""
        credential = credential.strip()
        if not credential:
            raise ValueError("API key must not be empty")
        with self._lock:
            if self.path is not None:
                atomic_write_text(self.path, credential)
            self._override = credential
        logger.info("API key override stored")

    def clear(self) -> None:
        """Drop the override; the ambient default (if any) applies again."""
        with self._lock:
            if self.path is not None:
                self.path.unlink(missing_ok=True)
            self._override = None
        logger.info("API key override cleared")

