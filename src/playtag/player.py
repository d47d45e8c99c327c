"""
Playtag to VLC translation and player launch.

Options are mapped to VLC command-line arguments in a fixed order:

    vol=+3dB          -> --gain=0.15
    t=10-20           -> --start-time=10 --stop-time=20
    av-delay=0.5      -> --audio-desync=500
    aspect-ratio=16:9 -> --aspect-ratio=16:9
    mirror            -> --video-filter=transform{type=hflip}

Unknown options are ignored.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from playtag.codec import BOOLEAN_FLAGS, parse_tag, parse_time_range
from playtag.config import DEFAULT_PLAYER_CANDIDATES, Config
from playtag.errors import PlayerError
from playtag.tagging import read_tag

logger = logging.getLogger(__name__)

GAIN_RE = re.compile(r"^([+-]?\d+(?:\.\d+)?)\s*dB$", re.IGNORECASE)
DELAY_RE = re.compile(r"^[+-]?\d+(?:\.\d+)?$")

HFLIP_FILTER = "transform{type=hflip}"


def gain_arg(value: str) -> str | None:
    match = GAIN_RE.match(value.strip())
    if not match:
        logger.warning(f"Ignoring invalid volume: {value!r}")
        return None
    return f"--gain={float(match.group(1)) / 20}"


def time_args(value: str) -> list[str]:
    span = parse_time_range(value)
    if span is None:
        logger.warning(f"Ignoring invalid time range: {value!r}")
        return []
    args = []
    if span.start is not None:
        args.append(f"--start-time={int(span.start)}")
    if span.stop is not None:
        args.append(f"--stop-time={int(span.stop)}")
    return args


def delay_arg(value: str) -> str | None:
    value = value.strip()
    if not DELAY_RE.match(value):
        logger.warning(f"Ignoring invalid audio delay: {value!r}")
        return None
    return f"--audio-desync={int(float(value) * 1000)}"


def to_args(options: Mapping[str, str | bool]) -> list[str]:
    """
    Translate parsed playtag options into VLC arguments.

    Args:
        options: Option map from ``codec.parse_tag``

    Returns:
        Argument list in fixed order (gain, time, delay, aspect, mirror)
    """
    args: list[str] = []

    if isinstance(vol := options.get("vol"), str) and (arg := gain_arg(vol)):
        args.append(arg)

    if isinstance(t := options.get("t"), str):
        args.extend(time_args(t))

    if isinstance(delay := options.get("av-delay"), str) and (arg := delay_arg(delay)):
        args.append(arg)

    if isinstance(aspect := options.get("aspect-ratio"), str) and aspect:
        args.append(f"--aspect-ratio={aspect}")

    if options.get("mirror"):
        args.append(f"--video-filter={HFLIP_FILTER}")

    return args


def find_player_executable(config: Config | None = None) -> str | None:
    """
    Locate the player executable.

    The configured executable wins; otherwise the first candidate that
    resolves on this system is used.
    """
    if config is not None and config.player.executable:
        candidates = [config.player.executable]
    elif config is not None:
        candidates = config.player.candidates
    else:
        candidates = DEFAULT_PLAYER_CANDIDATES

    for candidate in candidates:
        if resolved := shutil.which(candidate):
            return resolved
    return None


def build_command(
    path: Path | str,
    player_args: Sequence[str],
    options: Mapping[str, str | bool],
    executable: str,
) -> list[str]:
    """Assemble ``[executable, *player_args, *to_args(options), path]``."""
    return [executable, *player_args, *to_args(options), str(path)]


def launch(cmd: list[str]) -> int:
    """
    Run the player and wait for it to exit.

    Raises:
        PlayerError: If the process cannot be started
    """
    logger.debug(f"Running {' '.join(cmd)}")
    try:
        return subprocess.run(cmd).returncode
    except OSError as e:
        raise PlayerError(f"Could not start {cmd[0]}: {e}") from e


def play(path: Path | str, player_args: Sequence[str] = (), config: Config | None = None) -> bool:
    """
    Play ``path`` with the options from its playtag.

    Returns:
        True if the player exited with status 0
    """
    path = Path(path)
    if not path.is_file():
        logger.warning("File not found: %s", path)
        return False

    executable = find_player_executable(config)
    if executable is None:
        logger.error("VLC executable not found")
        return False

    flags = config.flag_vocabulary if config else BOOLEAN_FLAGS
    options = parse_tag(read_tag(path, config), flags=flags)

    extra_args = config.player.extra_args if config else []
    cmd = build_command(path, [*extra_args, *player_args], options, executable)

    try:
        returncode = launch(cmd)
    except PlayerError as e:
        logger.error(str(e))
        return False

    if returncode != 0:
        logger.error(f"Player exited with status {returncode}")
        return False
    return True
