"""
High-level playtag API.

Reads, writes and edits the playtag stored in a media file. Every function
returns a plain result (string, None or bool) and reports problems through
logging, so callers only need to check the return value.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from pathlib import Path

from playtag.codec import BOOLEAN_FLAGS, TAG_VERSION, format_tag, parse_segment, parse_tag
from playtag.config import Config
from playtag.handlers.base import FAILED, TagHandler
from playtag.handlers.factory import with_handler

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".bak"


def _flags(config: Config | None) -> frozenset[str]:
    return config.flag_vocabulary if config else BOOLEAN_FLAGS


def _version(config: Config | None) -> str:
    return config.tags.version if config else TAG_VERSION


def backup_file(path: Path) -> Path:
    """Copy ``path`` to ``<path>.bak`` and return the backup location."""
    backup = path.with_name(path.name + BACKUP_SUFFIX)
    shutil.copy2(path, backup)
    logger.info("Backed up %s to %s", path, backup)
    return backup


def read_tag(path: Path | str, config: Config | None = None) -> str | None:
    """
    Read the playtag stored in ``path``.

    Returns:
        The stored string, or None when the file has no playtag or cannot be read
    """
    result = with_handler(path, lambda handler: handler.read(), config)
    if result is FAILED:
        return None
    if result is None:
        logger.info("No playtag tag found")
    return result


def _modify(path: Path | str, operation: Callable[[TagHandler], bool], config: Config | None) -> bool:
    path = Path(path)

    def run(handler: TagHandler) -> bool:
        if config is not None and config.backup:
            try:
                backup_file(path)
            except OSError as e:
                logger.error("Could not back up %s: %s", path, e)
                return False
        return operation(handler)

    return bool(with_handler(path, run, config))


def write_tag(path: Path | str, value: str | None, config: Config | None = None) -> bool:
    """
    Store ``value`` as the playtag of ``path``, replacing any previous one.

    A blank value clears the tag. When ``config.backup`` is set the file is
    copied to ``<file>.bak`` before it is modified.
    """
    return _modify(path, lambda handler: handler.write(value), config)


def clear_tag(path: Path | str, config: Config | None = None) -> bool:
    """Remove the playtag from ``path``; succeeds when there is none."""
    return _modify(path, lambda handler: handler.clear(), config)


def get_option(path: Path | str, key: str, config: Config | None = None) -> str | bool | None:
    """Return one option from the stored playtag, or None when it is absent."""
    options = parse_tag(read_tag(path, config), flags=_flags(config))
    return options.get(key)


def set_option(path: Path | str, assignment: str, config: Config | None = None) -> bool:
    """
    Merge a single ``key=value`` or flag into the stored playtag.

    An assignment with an empty value (``key=``) removes the option.
    """
    flags = _flags(config)
    parsed = parse_segment(assignment, flags)
    if parsed is None:
        logger.error(f"Invalid option assignment: {assignment!r}")
        return False
    key, value = parsed

    def update(handler: TagHandler) -> bool:
        options = parse_tag(handler.read(), flags=flags)
        if value == "":
            options.pop(key, None)
        else:
            options[key] = value
        if not options:
            return handler.clear()
        return handler.write(format_tag(options, version=_version(config)))

    return _modify(path, update, config)
