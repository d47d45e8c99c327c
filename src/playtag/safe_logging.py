"""Path-safe logging setup for playtag.

Log records that carry file paths are rendered as ``parent/name`` (or a
short hash) so shared logs do not leak the full directory layout. DEBUG
records are emitted without the level prefix.
"""

from __future__ import annotations

import hashlib
import logging
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any


def hash_path(file_path: Path | str, length: int = 12) -> str:
    """Hash a file path for logging.

    Args:
        file_path: Path to hash
        length: Length of hash to return

    Returns:
        Truncated SHA256 hash of the path
    """
    return hashlib.sha256(str(file_path).encode()).hexdigest()[:length]


def relativize_path(file_path: Path | str) -> str:
    """Return ``parent/name`` for a path, or just the name at the root."""
    path = Path(file_path)
    if path.parent.name:
        return f"{path.parent.name}/{path.name}"
    return path.name


def safe_path(file_path: Path | str, use_hash: bool = False) -> str:
    """Get a safe representation of a path for logging."""
    if use_hash:
        return f"file:{hash_path(file_path)}"
    return relativize_path(file_path)


class SafeLogFormatter(logging.Formatter):
    """Log formatter that shortens path arguments.

    Path objects passed as formatting arguments are replaced by their
    safe representation. DEBUG records are rendered as the bare message.
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        hash_paths: bool = False,
    ):
        super().__init__(fmt, datefmt)
        self.hash_paths = hash_paths

    def format(self, record: logging.LogRecord) -> str:
        # Copy so other handlers see the original record
        record = logging.makeLogRecord(record.__dict__)

        if record.args:
            record.args = self._sanitize_args(record.args)

        if record.levelno == logging.DEBUG:
            message = record.getMessage()
            if record.exc_info:
                message = f"{message}\n{self.formatException(record.exc_info)}"
            return message

        return super().format(record)

    def _sanitize_args(self, args: tuple[Any, ...] | Mapping[str, Any]) -> tuple[Any, ...] | dict[str, Any]:
        if isinstance(args, Mapping):
            return {key: self._sanitize_value(value) for key, value in args.items()}
        return tuple(self._sanitize_value(arg) for arg in args)

    def _sanitize_value(self, value: Any) -> Any:
        if isinstance(value, Path):
            return safe_path(value, use_hash=self.hash_paths)
        return value


def configure_logging(
    level: int | str = logging.INFO,
    format_string: str | None = None,
    hash_paths: bool = False,
) -> None:
    """Install a single stderr handler with SafeLogFormatter on the root logger.

    Calling this again replaces the handler installed by a previous call.

    Args:
        level: Logging level (number or name)
        format_string: Optional custom format string
        hash_paths: Whether to hash file paths
    """
    if format_string is None:
        format_string = "%(levelname)s: %(message)s"

    formatter = SafeLogFormatter(fmt=format_string, hash_paths=hash_paths)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    handler.set_name("playtag")

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == "playtag":
            root_logger.removeHandler(existing)

    root_logger.setLevel(level.upper() if isinstance(level, str) else level)
    root_logger.addHandler(handler)


## Tests


def _record(level: int, msg: str, args: tuple[Any, ...] = ()) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=args,
        exc_info=None,
    )


def test_hash_path():
    hash1 = hash_path(Path("/home/user/video/clip.mkv"))
    hash2 = hash_path(Path("/home/user/video/clip.mkv"))
    hash3 = hash_path(Path("/home/user/video/other.mkv"))

    assert len(hash1) == 12
    assert hash1 == hash2
    assert hash1 != hash3


def test_safe_path():
    path = Path("/home/user/video/clip.mkv")

    assert safe_path(path) == "video/clip.mkv"
    assert safe_path(Path("clip.mkv")) == "clip.mkv"

    hashed = safe_path(path, use_hash=True)
    assert hashed.startswith("file:")
    assert "clip.mkv" not in hashed


def test_formatter_prefixes_level():
    formatter = SafeLogFormatter(fmt="%(levelname)s: %(message)s")
    formatted = formatter.format(_record(logging.WARNING, "File not found: %s", (Path("/a/b/c.mp3"),)))
    assert formatted == "WARNING: File not found: b/c.mp3"


def test_formatter_debug_has_no_prefix():
    formatter = SafeLogFormatter(fmt="%(levelname)s: %(message)s")
    assert formatter.format(_record(logging.DEBUG, "running mkvextract")) == "running mkvextract"


def test_formatter_hash_paths():
    formatter = SafeLogFormatter(fmt="%(message)s", hash_paths=True)
    formatted = formatter.format(_record(logging.INFO, "%s", (Path("/a/b/c.mp3"),)))
    assert formatted.startswith("file:")
