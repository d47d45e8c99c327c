"""Atom-map handler for MP4/M4A files (iTunes freeform atom)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from mutagen.mp4 import MP4, AtomDataType, MP4FreeForm

from playtag.errors import NativeLibraryError
from playtag.handlers.base import TagHandler

if TYPE_CHECKING:
    from playtag.config import Config

logger = logging.getLogger(__name__)

CUSTOM_ATOM_PREFIX = "----:com.apple.iTunes:"
PLAYTAG_ATOM = f"{CUSTOM_ATOM_PREFIX}PlayTag"


class AtomMapHandler(TagHandler):
    """
    Stores the playtag in the ``----:com.apple.iTunes:PlayTag`` atom.

    The atom map holds one value per key, so writes overwrite in place.
    """

    name = "mp4"

    def __init__(self, path: Path, audio: Any, config: Config | None = None):
        super().__init__(path, config)
        self.audio = audio

    @classmethod
    def open(cls, path: Path, mime: str, config: Config | None = None) -> AtomMapHandler:
        try:
            audio = MP4(path)
        except Exception as e:
            raise NativeLibraryError(f"Could not open MP4 file: {e}") from e
        return cls(path, audio, config)

    def _read(self) -> str | None:
        tags = self.audio.tags
        if tags is None or PLAYTAG_ATOM not in tags:
            return None
        values = tags[PLAYTAG_ATOM]
        if not values:
            return None
        # MP4FreeForm is a bytes subclass
        value = values[0]
        if not isinstance(value, bytes):
            return str(value)
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("PlayTag atom in %s is not valid UTF-8", self.path)
            return value.decode("utf-8", errors="replace")

    def _write(self, value: str) -> None:
        if self.audio.tags is None:
            self.audio.add_tags()
        self.audio.tags[PLAYTAG_ATOM] = [MP4FreeForm(value.encode("utf-8"), dataformat=AtomDataType.UTF8)]
        self.audio.save()

    def _clear(self) -> None:
        tags = self.audio.tags
        if tags is None or PLAYTAG_ATOM not in tags:
            return
        del tags[PLAYTAG_ATOM]
        self.audio.save()

    def _release(self) -> None:
        self.audio = None
