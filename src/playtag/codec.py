"""
Playtag string codec.

A playtag is a versioned, semicolon-delimited list of options:

    v1; t=10-20; vol=+3dB; mirror

Options are either ``key=value`` pairs or bare boolean flags drawn from a
small closed vocabulary. Values cannot contain ``;`` (there is no escaping).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

TAG_VERSION = "v1"

# Bare tokens accepted without "=value"
BOOLEAN_FLAGS: frozenset[str] = frozenset({"mirror"})

SEPARATOR = ";"
JOINER = "; "

OptionMap = dict[str, str | bool]

_VERSION_RE = re.compile(r"^v\d+(?:\.\d+)*$")
_SECONDS_RE = re.compile(r"^\d+(?:\.\d+)?$")
_CLOCK_RE = re.compile(r"^\d+(?::\d+){1,2}(?:\.\d+)?$")

# H:M:S, M:S or S, with optional fraction on the last component
_TIME_PATTERN = r"\d+(?::\d+){0,2}(?:\.\d+)?"
_RANGE_RE = re.compile(rf"^(?P<start>{_TIME_PATTERN})?(?P<dash>-)?(?P<stop>{_TIME_PATTERN})?$")


@dataclass(frozen=True)
class TimeSpec:
    """Playback window in seconds; either bound may be open."""

    start: float | None = None
    stop: float | None = None


def is_version_token(text: str) -> bool:
    """Return True for tokens like ``v1`` or ``v1.2``."""
    return bool(_VERSION_RE.match(text.strip()))


def parse_segment(segment: str, flags: Iterable[str] = BOOLEAN_FLAGS) -> tuple[str, str | bool] | None:
    """
    Parse a single ``key=value`` or flag segment.

    Returns:
        (key, value) tuple, or None if the segment is malformed
    """
    segment = segment.strip()
    if "=" in segment:
        key, value = segment.split("=", 1)
        key = key.strip()
        if not key:
            return None
        return key, value.strip()
    if segment in flags:
        return segment, True
    return None


def parse_tag(text: str | None, *, flags: Iterable[str] = BOOLEAN_FLAGS) -> OptionMap:
    """
    Parse a playtag string into an ordered option map.

    Malformed segments are logged and skipped; parsing never fails, so tags
    written by newer versions still yield every option this version knows.

    Args:
        text: Raw tag string (None or blank yields an empty map)
        flags: Vocabulary of bare boolean flags

    Returns:
        Ordered mapping of option key to string value or True for flags
    """
    options: OptionMap = {}
    if text is None:
        return options

    text = text.strip()
    if not text:
        return options

    flag_set = frozenset(flags)
    segments = [segment.strip() for segment in text.split(SEPARATOR)]

    for index, segment in enumerate(segments):
        if not segment:
            continue
        if index == 0 and is_version_token(segment):
            continue

        parsed = parse_segment(segment, flag_set)
        if parsed is None:
            logger.warning(f"Ignoring invalid playtag segment: {segment!r}")
            continue

        key, value = parsed
        # Re-inserting moves nothing: dict keeps first position, last value wins
        options[key] = value

    return options


def format_tag(options: Mapping[str, str | bool] | None, *, version: str = TAG_VERSION) -> str:
    """
    Serialize an option map into a playtag string.

    The version token is always emitted first. Flags (True) render as bare
    keys; False/None entries are dropped.
    """
    parts = [version]
    for key, value in (options or {}).items():
        if value is True:
            parts.append(key)
        elif value is False or value is None:
            continue
        else:
            parts.append(f"{key}={value}")
    return JOINER.join(parts)


def parse_time(text: str | None) -> float | None:
    """
    Parse a time offset into seconds.

    Accepts ``SS[.ss]``, ``MM:SS[.ss]`` and ``HH:MM:SS[.ss]``. Components are
    read right to left, so missing higher units count as zero.

    Returns:
        Seconds as float, or None if the text is not a valid time
    """
    if text is None:
        return None
    text = text.strip()

    if _SECONDS_RE.match(text):
        return float(text)

    if not _CLOCK_RE.match(text):
        return None

    seconds = 0.0
    for multiplier, component in zip((1, 60, 3600), reversed(text.split(":")), strict=False):
        seconds += float(component) * multiplier
    return seconds


def parse_time_range(text: str | None) -> TimeSpec | None:
    """
    Parse the ``t`` option into a TimeSpec.

    ``a-b`` is a closed range, ``a`` and ``a-`` are start-only, ``-b`` is
    stop-only. Anything else yields None.
    """
    if text is None:
        return None
    match = _RANGE_RE.match(text.strip())
    if not match:
        return None

    start_text = match.group("start")
    stop_text = match.group("stop")
    if start_text is None and stop_text is None:
        return None
    if stop_text is not None and match.group("dash") is None:
        # "10" lands in start; a lone stop group can only follow a dash
        return None

    return TimeSpec(start=parse_time(start_text), stop=parse_time(stop_text))
