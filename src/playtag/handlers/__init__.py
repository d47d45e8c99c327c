"""
Metadata handlers that store a playtag in media containers.

Four layouts are supported:
- Atom map: MP4/M4A freeform atom
- Frame list: ID3v2 TXXX frame (MP3)
- Vorbis comment: FLAC, Ogg Vorbis, Ogg Opus
- External tool: Matroska/WebM through MKVToolNix
"""

from __future__ import annotations

from playtag.handlers.base import FAILED, TagHandler
from playtag.handlers.factory import HANDLER_TABLE, open_handler, with_handler
from playtag.handlers.id3 import FrameListHandler
from playtag.handlers.matroska import MatroskaTagHandler, MkvToolnix
from playtag.handlers.mp4 import AtomMapHandler
from playtag.handlers.vorbis import VorbisCommentHandler

__all__ = [
    "FAILED",
    "TagHandler",
    "AtomMapHandler",
    "FrameListHandler",
    "VorbisCommentHandler",
    "MatroskaTagHandler",
    "MkvToolnix",
    "HANDLER_TABLE",
    "open_handler",
    "with_handler",
]
