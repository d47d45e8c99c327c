"""
Content-type sniffing for media files.

The container family decides which tag handler a file gets. Detection looks
at magic bytes in the file head and only falls back to the file extension
when the bytes are inconclusive.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

logger = logging.getLogger(__name__)

HEAD_SIZE = 4096

OCTET_STREAM = "application/octet-stream"

EBML_MAGIC = b"\x1a\x45\xdf\xa3"

# MPEG audio frame sync bytes (MPEG-1/2 layer III, with and without CRC)
MPEG_SYNC_PREFIXES = (b"\xff\xfb", b"\xff\xfa", b"\xff\xf3", b"\xff\xf2", b"\xff\xe3", b"\xff\xe2")

# Audio-only ISO base media brands
AUDIO_MP4_BRANDS = frozenset({b"M4A ", b"M4B ", b"M4P "})

EXTENSION_MIME_TYPES = {
    ".mp4": "video/mp4",
    ".m4v": "video/mp4",
    ".m4a": "audio/mp4",
    ".flac": "audio/flac",
    ".ogg": "audio/ogg",
}


class ContainerFamily(StrEnum):
    """Metadata layout families; each maps to one tag handler."""

    ATOM = "atom"
    FRAME = "frame"
    VORBIS = "vorbis"
    EXTERNAL = "external"
    UNSUPPORTED = "unsupported"


MIME_FAMILIES: dict[str, ContainerFamily] = {
    "application/mp4": ContainerFamily.ATOM,
    "audio/mp4": ContainerFamily.ATOM,
    "audio/x-m4a": ContainerFamily.ATOM,
    "video/mp4": ContainerFamily.ATOM,
    "audio/mpeg": ContainerFamily.FRAME,
    "audio/flac": ContainerFamily.VORBIS,
    "audio/x-flac": ContainerFamily.VORBIS,
    "audio/ogg": ContainerFamily.VORBIS,
    "audio/vorbis": ContainerFamily.VORBIS,
    "audio/opus": ContainerFamily.VORBIS,
    "video/webm": ContainerFamily.EXTERNAL,
    "video/x-matroska": ContainerFamily.EXTERNAL,
}


@dataclass(frozen=True)
class Detection:
    """Sniffed MIME type and the family it maps to."""

    mime: str
    family: ContainerFamily


def id3v2_size(head: bytes) -> int:
    """Length of a leading ID3v2 tag, header and footer included (0 if absent)."""
    if len(head) < 10 or not head.startswith(b"ID3"):
        return 0
    size = 0
    for byte in head[6:10]:
        size = (size << 7) | (byte & 0x7F)
    footer = 10 if head[5] & 0x10 else 0
    return 10 + size + footer


def mime_from_bytes(head: bytes) -> str | None:
    """
    Identify a media MIME type from the first bytes of a file.

    A leading ID3v2 tag is skipped so that tagged FLAC files are still
    recognised; an ID3 tag in front of anything else means MPEG audio.

    Returns:
        MIME type string, or None if the bytes match no known signature
    """
    if offset := id3v2_size(head):
        return mime_from_bytes(head[offset:]) or "audio/mpeg"

    if head.startswith(EBML_MAGIC):
        return "video/webm" if b"webm" in head else "video/x-matroska"

    if head.startswith(b"fLaC"):
        return "audio/flac"

    if head.startswith(b"OggS"):
        return "audio/opus" if b"OpusHead" in head else "audio/ogg"

    if head.startswith(b"ID3") or head.startswith(MPEG_SYNC_PREFIXES):
        return "audio/mpeg"

    if len(head) >= 12 and head[4:8] == b"ftyp":
        return "audio/mp4" if head[8:12] in AUDIO_MP4_BRANDS else "video/mp4"

    return None


def sniff_mime(path: Path | str) -> str:
    """
    Determine the MIME type of a file by content, then by extension.

    Args:
        path: File to inspect

    Returns:
        MIME type, or ``application/octet-stream`` when inconclusive
    """
    path = Path(path)
    with path.open("rb") as f:
        head = f.read(HEAD_SIZE)
        # ID3 tags can outgrow the head; sniff what follows the tag instead
        if offset := id3v2_size(head):
            f.seek(offset)
            return mime_from_bytes(f.read(HEAD_SIZE)) or "audio/mpeg"

    if mime := mime_from_bytes(head):
        return mime

    if mime := EXTENSION_MIME_TYPES.get(path.suffix.lower()):
        logger.debug(f"Content sniff inconclusive, using extension {path.suffix}")
        return mime

    return OCTET_STREAM


def family_for_mime(mime: str) -> ContainerFamily:
    return MIME_FAMILIES.get(mime.lower(), ContainerFamily.UNSUPPORTED)


def detect(path: Path | str) -> Detection:
    mime = sniff_mime(path)
    return Detection(mime=mime, family=family_for_mime(mime))


def detect_family(path: Path | str) -> ContainerFamily:
    return detect(path).family
