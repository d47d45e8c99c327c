"""Vorbis-comment handler for FLAC, Ogg Vorbis and Ogg Opus files."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from mutagen.flac import FLAC
from mutagen.oggopus import OggOpus
from mutagen.oggvorbis import OggVorbis

from playtag.errors import NativeLibraryError, UnsupportedContainerError
from playtag.handlers.base import PLAYTAG_FIELD, TagHandler

if TYPE_CHECKING:
    from playtag.config import Config

FILE_TYPES: dict[str, Any] = {
    "audio/flac": FLAC,
    "audio/x-flac": FLAC,
    "audio/ogg": OggVorbis,
    "audio/vorbis": OggVorbis,
    "audio/opus": OggOpus,
}


class VorbisCommentHandler(TagHandler):
    """
    Stores the playtag in a ``PLAYTAG`` comment field.

    Field names are case-insensitive and may repeat; a write removes every
    same-named field and adds a single one.
    """

    name = "vorbis"

    def __init__(self, path: Path, audio: Any, config: Config | None = None):
        super().__init__(path, config)
        self.audio = audio

    @classmethod
    def open(cls, path: Path, mime: str, config: Config | None = None) -> VorbisCommentHandler:
        file_type = FILE_TYPES.get(mime.lower())
        if file_type is None:
            raise UnsupportedContainerError(mime)
        try:
            audio = file_type(path)
        except Exception as e:
            raise NativeLibraryError(f"Could not open {file_type.__name__} file: {e}") from e
        return cls(path, audio, config)

    def _read(self) -> str | None:
        tags = self.audio.tags
        if tags is None or PLAYTAG_FIELD not in tags:
            return None
        values = tags[PLAYTAG_FIELD]
        return values[0] if values else None

    def _write(self, value: str) -> None:
        if self.audio.tags is None:
            self.audio.add_tags()
        # VCommentDict assignment drops every case variant of the key first
        self.audio.tags[PLAYTAG_FIELD] = [value]
        self.audio.save()

    def _clear(self) -> None:
        tags = self.audio.tags
        if tags is None or PLAYTAG_FIELD not in tags:
            return
        del tags[PLAYTAG_FIELD]
        self.audio.save()

    def _release(self) -> None:
        self.audio = None
