"""
Handler dispatch by container family.

``with_handler`` is the single entry point used by the tagging API: it
sniffs the file, opens the matching handler, runs an operation against it
and always releases the handler afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

from playtag.errors import UnsupportedContainerError
from playtag.handlers.base import FAILED, HANDLER_ERRORS, TagHandler, _Failed
from playtag.handlers.id3 import FrameListHandler
from playtag.handlers.matroska import MatroskaTagHandler
from playtag.handlers.mp4 import AtomMapHandler
from playtag.handlers.vorbis import VorbisCommentHandler
from playtag.sniff import ContainerFamily, Detection, detect

if TYPE_CHECKING:
    from playtag.config import Config

logger = logging.getLogger(__name__)

T = TypeVar("T")

HANDLER_TABLE: dict[ContainerFamily, type[TagHandler]] = {
    ContainerFamily.ATOM: AtomMapHandler,
    ContainerFamily.FRAME: FrameListHandler,
    ContainerFamily.VORBIS: VorbisCommentHandler,
    ContainerFamily.EXTERNAL: MatroskaTagHandler,
}


def open_handler(path: Path, detection: Detection, config: Config | None = None) -> TagHandler:
    """
    Open the handler for a detected file.

    Raises:
        UnsupportedContainerError: If the family has no handler
        NativeLibraryError: If the native metadata object cannot be opened
    """
    handler_cls = HANDLER_TABLE.get(detection.family)
    if handler_cls is None:
        raise UnsupportedContainerError(detection.mime)
    return handler_cls.open(path, detection.mime, config)


def with_handler(
    path: Path | str,
    operation: Callable[[TagHandler], T],
    config: Config | None = None,
) -> T | _Failed:
    """
    Run ``operation`` against the handler for ``path``.

    Args:
        path: Media file
        operation: Callable receiving the open handler
        config: Optional configuration passed to the handler

    Returns:
        The operation's result, or FAILED when the file is missing, has an
        unsupported type or cannot be opened. Exceptions raised by the
        operation itself propagate after the handler is closed.
    """
    path = Path(path)
    if not path.is_file():
        logger.warning("File not found: %s", path)
        return FAILED

    try:
        detection = detect(path)
    except OSError as e:
        logger.error("Could not read %s: %s", path, e)
        return FAILED

    if detection.family == ContainerFamily.UNSUPPORTED:
        logger.error("Unsupported file format: %s (%s)", detection.mime, path)
        return FAILED

    try:
        handler = open_handler(path, detection, config)
    except HANDLER_ERRORS as e:
        logger.error("Could not open %s: %s", path, e)
        return FAILED

    logger.debug(f"Using {handler.name} handler for {detection.mime}")
    try:
        return operation(handler)
    finally:
        handler.close()


## Tests


def test_handler_table_covers_supported_families():
    assert set(HANDLER_TABLE) == {family for family in ContainerFamily if family != ContainerFamily.UNSUPPORTED}


def test_with_handler_missing_file(tmp_path):  # pyright: ignore[reportMissingParameterType,reportUnknownParameterType]
    calls = []
    result = with_handler(tmp_path / "missing.mp3", calls.append)
    assert result is FAILED
    assert not result
    assert calls == []


def test_with_handler_unsupported_file(tmp_path):  # pyright: ignore[reportMissingParameterType,reportUnknownParameterType]
    target = tmp_path / "notes.txt"
    target.write_text("just text")
    calls = []
    assert with_handler(target, calls.append) is FAILED
    assert calls == []
