"""Pytest configuration and shared fixtures for playtag tests."""

from __future__ import annotations

import logging
import struct
import subprocess
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from mutagen.ogg import OggPage

# =============================================================================
# Media File Builders
# =============================================================================

MPEG_FRAME = b"\xff\xfb\x90\x00" + b"\x00" * 417

EBML_MATROSKA_HEADER = (
    b"\x1a\x45\xdf\xa3\xa3\x42\x86\x81\x01\x42\xf7\x81\x01\x42\xf2\x81\x04"
    b"\x42\xf3\x81\x08\x42\x82\x88matroska\x42\x87\x81\x04\x42\x85\x81\x02"
)


def create_minimal_mp3(path: Path) -> None:
    """Create a minimal MP3 file with an empty ID3v2.4 header."""
    id3_header = b"ID3\x04\x00\x00\x00\x00\x00\x00"
    path.write_bytes(id3_header + MPEG_FRAME)


def create_bare_mp3(path: Path) -> None:
    """Create an MP3 file with no ID3 tag at all."""
    path.write_bytes(MPEG_FRAME * 2)


def create_minimal_flac(path: Path) -> None:
    """Create a minimal FLAC file: signature plus a single STREAMINFO block."""
    # Block header: last-block bit set, type 0 (STREAMINFO), length 34
    block_header = bytes([0x80, 0x00, 0x00, 0x22])

    # sample rate (20 bits), channels-1 (3 bits), bits/sample-1 (5 bits), total samples (36 bits)
    packed = (44100 << 44) | ((2 - 1) << 41) | ((16 - 1) << 36) | 0
    streaminfo = (
        struct.pack(">HH", 4096, 4096)
        + b"\x00" * 6  # min/max frame size (unknown)
        + struct.pack(">Q", packed)
        + b"\x00" * 16  # MD5
    )
    path.write_bytes(b"fLaC" + block_header + streaminfo)


def create_id3_prefixed_flac(path: Path, padding: int = 0) -> None:
    """Create a FLAC file preceded by an ID3v2 tag holding ``padding`` zero bytes."""
    create_minimal_flac(path)
    syncsafe = bytes((padding >> shift) & 0x7F for shift in (21, 14, 7, 0))
    path.write_bytes(b"ID3\x04\x00\x00" + syncsafe + b"\x00" * padding + path.read_bytes())


def _box(kind: bytes, payload: bytes) -> bytes:
    return struct.pack(">I", 8 + len(payload)) + kind + payload


def create_minimal_mp4(path: Path) -> None:
    """Create a minimal M4A file: ftyp plus a moov holding only a movie header."""
    ftyp = _box(b"ftyp", b"M4A " + struct.pack(">I", 0) + b"M4A isom")
    # version/flags, created, modified, timescale, duration, then rate/volume/matrix/next id
    mvhd = _box(b"mvhd", b"\x00" * 4 + struct.pack(">IIII", 0, 0, 1000, 0) + b"\x00" * 80)
    path.write_bytes(ftyp + _box(b"moov", mvhd))


def create_minimal_ogg_vorbis(path: Path) -> None:
    """Create a minimal Ogg Vorbis stream: identification, comment and setup headers, one audio page."""
    # version, channels, sample rate, max/nominal/min bitrate, block sizes, framing
    identification = b"\x01vorbis" + struct.pack("<IBIiiiBB", 0, 2, 44100, 0, 128000, 0, 0xB8, 1)
    vendor = b"playtag"
    comment = b"\x03vorbis" + struct.pack("<I", len(vendor)) + vendor + struct.pack("<I", 0) + b"\x01"
    setup = b"\x05vorbis" + b"\x00" * 8

    pages = []
    for sequence, packets in enumerate([[identification], [comment, setup], [b"\x00" * 16]]):
        page = OggPage()
        page.serial = 1
        page.sequence = sequence
        page.packets = packets
        pages.append(page)
    pages[0].first = True
    pages[-1].last = True
    pages[-1].position = 44100

    path.write_bytes(b"".join(page.write() for page in pages))


def create_minimal_mkv(path: Path) -> None:
    """Create a file carrying a Matroska EBML header (contents are never parsed)."""
    path.write_bytes(EBML_MATROSKA_HEADER + b"\x00" * 64)


@pytest.fixture
def mp3_file(tmp_path: Path) -> Path:
    path = tmp_path / "song.mp3"
    create_minimal_mp3(path)
    return path


@pytest.fixture
def flac_file(tmp_path: Path) -> Path:
    path = tmp_path / "song.flac"
    create_minimal_flac(path)
    return path


@pytest.fixture
def mp4_file(tmp_path: Path) -> Path:
    path = tmp_path / "song.m4a"
    create_minimal_mp4(path)
    return path


@pytest.fixture
def ogg_file(tmp_path: Path) -> Path:
    path = tmp_path / "song.ogg"
    create_minimal_ogg_vorbis(path)
    return path


@pytest.fixture
def mkv_file(tmp_path: Path) -> Path:
    path = tmp_path / "movie.mkv"
    create_minimal_mkv(path)
    return path


# =============================================================================
# Subprocess Stand-ins
# =============================================================================


class FakeMkvToolnix:
    """
    Records MKVToolNix invocations and keeps an in-memory tag document.

    Installed over ``subprocess.run``; ``mkvpropedit`` calls copy the temp
    XML file's contents into ``self.xml`` so later extracts return them.
    """

    def __init__(self, xml: str = "", returncode: int = 0):
        self.xml = xml
        self.returncode = returncode
        self.calls: list[list[str]] = []
        self.applied: list[str | None] = []

    def __call__(self, cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.calls.append(list(cmd))
        tool = Path(cmd[0]).name
        if self.returncode != 0:
            return subprocess.CompletedProcess(cmd, self.returncode, "", "boom")

        if tool.startswith("mkvextract"):
            return subprocess.CompletedProcess(cmd, 0, self.xml, "")

        if tool.startswith("mkvpropedit"):
            target = cmd[cmd.index("--tags") + 1].removeprefix("all:")
            if target:
                self.xml = Path(target).read_text(encoding="utf-8")
                self.applied.append(self.xml)
            else:
                self.xml = ""
                self.applied.append(None)
            return subprocess.CompletedProcess(cmd, 0, "Done.\n", "")

        raise AssertionError(f"Unexpected command: {cmd}")

    @property
    def tools_run(self) -> list[str]:
        return [Path(cmd[0]).name for cmd in self.calls]


@pytest.fixture
def fake_mkvtoolnix(monkeypatch: pytest.MonkeyPatch) -> FakeMkvToolnix:
    """Route mkvextract/mkvpropedit through FakeMkvToolnix."""
    fake = FakeMkvToolnix()
    monkeypatch.setattr("playtag.handlers.matroska.shutil.which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr("playtag.handlers.matroska.subprocess.run", fake)
    return fake


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(autouse=True)
def _drop_cli_log_handler() -> Iterator[None]:
    """Remove the stderr handler the CLI installs so it does not outlive the test."""
    root_logger = logging.getLogger()
    level = root_logger.level
    yield
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        if handler.get_name() == "playtag":
            root_logger.removeHandler(handler)
