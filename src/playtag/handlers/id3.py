"""Frame-list handler for MP3 files (ID3v2 ``TXXX:PLAYTAG`` frame)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from mutagen.id3 import ID3, TXXX, Encoding, ID3NoHeaderError

from playtag.errors import NativeLibraryError
from playtag.handlers.base import PLAYTAG_FIELD, TagHandler

if TYPE_CHECKING:
    from playtag.config import Config

logger = logging.getLogger(__name__)


class FrameListHandler(TagHandler):
    """
    Stores the playtag in a user-defined text frame.

    ID3 allows several TXXX frames with the same description; every
    matching frame is removed before the new one is added, and the tag is
    saved as ID3v2.4.
    """

    name = "id3"

    def __init__(self, path: Path, tags: ID3, config: Config | None = None, has_header: bool = True):
        super().__init__(path, config)
        self.tags = tags
        self.has_header = has_header

    @classmethod
    def open(cls, path: Path, mime: str, config: Config | None = None) -> FrameListHandler:
        try:
            return cls(path, ID3(path), config)
        except ID3NoHeaderError:
            logger.debug("No ID3 header in %s, starting a new tag", path)
            return cls(path, ID3(), config, has_header=False)
        except Exception as e:
            raise NativeLibraryError(f"Could not open ID3 tag: {e}") from e

    def _frames(self) -> list[TXXX]:
        return [frame for frame in self.tags.getall("TXXX") if frame.desc.upper() == PLAYTAG_FIELD]

    def _remove_frames(self) -> int:
        frames = self._frames()
        for frame in frames:
            # HashKey is "TXXX:<desc>", so case variants are distinct keys
            self.tags.delall(frame.HashKey)
        return len(frames)

    def _read(self) -> str | None:
        for frame in self._frames():
            if frame.text:
                return str(frame.text[0])
        return None

    def _write(self, value: str) -> None:
        self._remove_frames()
        self.tags.add(TXXX(encoding=Encoding.UTF8, desc=PLAYTAG_FIELD, text=[value]))
        self.tags.save(self.path, v2_version=4)
        self.has_header = True

    def _clear(self) -> None:
        if not self.has_header:
            return
        if self._remove_frames():
            self.tags.save(self.path, v2_version=4)

    def _release(self) -> None:
        self.tags = None  # pyright: ignore[reportAttributeAccessIssue]
