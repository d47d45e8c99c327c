"""Error types raised inside playtag and reported at the handler boundary."""

from __future__ import annotations


class PlaytagError(Exception):
    """Base class for playtag errors."""

    pass


class UnsupportedContainerError(PlaytagError):
    """The file's sniffed type has no tag handler."""

    def __init__(self, mime_type: str):
        super().__init__(f"Unsupported file format: {mime_type}")
        self.mime_type = mime_type


class NativeLibraryError(PlaytagError):
    """mutagen failed to open, modify or save a file's metadata."""

    pass


class ExternalToolError(PlaytagError):
    """An external tag tool exited non-zero, was missing, or produced unusable output."""

    pass


class PlayerError(PlaytagError):
    """The media player could not be located or launched."""

    pass
