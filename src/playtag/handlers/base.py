"""
Abstract base class for playtag metadata handlers.

Each handler stores a single playtag string in one container's native
metadata layout. Subclasses implement the ``_read``/``_write``/``_clear``
hooks and may raise; the public methods turn failures into a ``None`` or
``False`` result plus an error log record.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

from mutagen import MutagenError

from playtag.errors import PlaytagError

if TYPE_CHECKING:
    from playtag.config import Config

logger = logging.getLogger(__name__)

# Field name used by the frame-list and vorbis-comment layouts
PLAYTAG_FIELD = "PLAYTAG"

# Errors converted into a failed result at the handler boundary
HANDLER_ERRORS = (PlaytagError, MutagenError, OSError)


class _Failed:
    """Falsy marker for an operation that could not run."""

    _instance: _Failed | None = None

    def __new__(cls) -> _Failed:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "FAILED"


FAILED: Final = _Failed()


class TagHandler(ABC):
    """
    Stores and retrieves one playtag string in a media file.

    Handlers own their native handle for the duration of one dispatcher
    call; ``close`` releases it and may be called more than once.
    """

    name = "handler"

    def __init__(self, path: Path, config: Config | None = None):
        self.path = path
        self.config = config
        self._closed = False

    @classmethod
    @abstractmethod
    def open(cls, path: Path, mime: str, config: Config | None = None) -> TagHandler:
        """Open the native metadata object for ``path``."""
        pass

    @abstractmethod
    def _read(self) -> str | None:
        pass

    @abstractmethod
    def _write(self, value: str) -> None:
        pass

    @abstractmethod
    def _clear(self) -> None:
        pass

    def read(self) -> str | None:
        """Return the stored playtag string, or None when absent or unreadable."""
        try:
            return self._read()
        except HANDLER_ERRORS as e:
            self._report("read", e)
            return None

    def write(self, value: str | None) -> bool:
        """Replace the stored playtag; a blank value clears it."""
        if value is None or not value.strip():
            return self.clear()
        try:
            self._write(value.strip())
        except HANDLER_ERRORS as e:
            self._report("write", e)
            return False
        logger.debug(f"{self.name}: wrote playtag {value.strip()!r}")
        return True

    def clear(self) -> bool:
        """Remove the stored playtag; succeeds when nothing is stored."""
        try:
            self._clear()
        except HANDLER_ERRORS as e:
            self._report("clear", e)
            return False
        logger.debug(f"{self.name}: cleared playtag")
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._release()

    def _release(self) -> None:
        """Drop references to native objects."""
        pass

    def _report(self, operation: str, error: Exception) -> None:
        logger.error("Failed to %s playtag in %s: %s", operation, self.path, error)

    def __enter__(self) -> TagHandler:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
