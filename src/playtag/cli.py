"""
Command-line interface for playtag.

Diagnostics go to stderr through the Rich console and the logging handler;
stdout carries only tag values and player arguments.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console

from playtag import __version__
from playtag.config import Config
from playtag.console import print_error, print_success, print_warning, set_console
from playtag.safe_logging import configure_logging


class ExitCode:
    """Standard exit codes for CLI commands."""

    SUCCESS = 0
    ERROR = 1


FILE_ARGUMENT = click.Path(dir_okay=False, path_type=Path)


@click.group()
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration TOML file",
)
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v for INFO, -vv for DEBUG)")
@click.option("-d", "--debug", is_flag=True, help="Debug output, including MKVToolNix output")
@click.option("-b", "--backup", is_flag=True, help="Copy each file to <file>.bak before modifying it")
@click.version_option(__version__, prog_name="playtag")
@click.pass_context
def playtag(
    ctx: click.Context,
    config: Path | None,
    verbose: int,
    debug: bool,
    backup: bool,
) -> None:
    """
    Playtag: store playback settings in media file metadata.

    A playtag such as "v1; t=10-20; vol=+3dB; mirror" is kept in the file's
    own tags and replayed as VLC options.
    """
    logger = logging.getLogger(__name__)

    # Load config (TOML + env vars)
    cfg = Config.load(config)

    # CLI > Env > Config File > Defaults
    if debug:
        cfg.debug = True
    if backup:
        cfg.backup = True

    if cfg.debug or verbose >= 2:
        log_level = logging.DEBUG
    elif verbose == 1:
        log_level = logging.INFO
    else:
        level_str = cfg.logging.level.upper()
        log_level = getattr(logging, level_str, logging.INFO)

    configure_logging(
        level=log_level,
        format_string=cfg.logging.format,
        hash_paths=cfg.logging.hash_paths,
    )
    set_console(Console(stderr=True))

    if config:
        logger.debug(f"Loaded config from {config}")

    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


@playtag.command()
@click.argument("file", type=FILE_ARGUMENT)
@click.pass_context
def read(ctx: click.Context, file: Path) -> None:
    """Print the playtag stored in FILE."""
    from playtag.tagging import read_tag

    tag = read_tag(file, ctx.obj["config"])
    if tag is None:
        print_warning(f"No playtag in {file}")
        sys.exit(ExitCode.ERROR)

    click.echo(tag)
    sys.exit(ExitCode.SUCCESS)


@playtag.command()
@click.argument("tag")
@click.argument("file", type=FILE_ARGUMENT)
@click.pass_context
def write(ctx: click.Context, tag: str, file: Path) -> None:
    """
    Store TAG as the playtag of FILE.

    Any previous playtag is replaced; an empty TAG clears it.
    """
    from playtag.tagging import write_tag

    if not write_tag(file, tag, ctx.obj["config"]):
        print_error(f"Could not write playtag to {file}")
        sys.exit(ExitCode.ERROR)

    sys.exit(ExitCode.SUCCESS)


@playtag.command()
@click.argument("file", type=FILE_ARGUMENT)
@click.pass_context
def clear(ctx: click.Context, file: Path) -> None:
    """Remove the playtag from FILE."""
    from playtag.tagging import clear_tag

    if not clear_tag(file, ctx.obj["config"]):
        print_error(f"Could not clear playtag in {file}")
        sys.exit(ExitCode.ERROR)

    sys.exit(ExitCode.SUCCESS)


@playtag.command()
@click.argument("key")
@click.argument("file", type=FILE_ARGUMENT)
@click.pass_context
def get(ctx: click.Context, key: str, file: Path) -> None:
    """Print the value of option KEY from the playtag of FILE."""
    from playtag.tagging import get_option

    value = get_option(file, key, ctx.obj["config"])
    if value is None:
        print_warning(f"Option {key!r} is not set in {file}")
        sys.exit(ExitCode.ERROR)

    click.echo("true" if value is True else value)
    sys.exit(ExitCode.SUCCESS)


@playtag.command(name="set")
@click.argument("assignment")
@click.argument("file", type=FILE_ARGUMENT)
@click.pass_context
def set_(ctx: click.Context, assignment: str, file: Path) -> None:
    """
    Set one option in the playtag of FILE.

    ASSIGNMENT is KEY=VALUE or a flag name; KEY= removes the option.
    """
    from playtag.tagging import set_option

    if not set_option(file, assignment, ctx.obj["config"]):
        print_error(f"Could not update playtag in {file}")
        sys.exit(ExitCode.ERROR)

    sys.exit(ExitCode.SUCCESS)


@playtag.command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.argument("args", nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_context
def play(ctx: click.Context, args: tuple[str, ...]) -> None:
    """
    Play FILE in VLC using its playtag.

    Usage: play [VLC_ARGS...] FILE. Arguments before FILE are passed to VLC
    ahead of the playtag options.
    """
    from playtag.player import play as play_file

    *player_args, file = args
    if not play_file(Path(file), player_args, ctx.obj["config"]):
        print_error(f"Could not play {file}")
        sys.exit(ExitCode.ERROR)

    sys.exit(ExitCode.SUCCESS)


playtag.add_command(play, name="vlc")


@playtag.command(name="format")
@click.argument("tag")
@click.pass_context
def format_(ctx: click.Context, tag: str) -> None:
    """Normalize TAG and print it with the player arguments it maps to."""
    from playtag.codec import format_tag, parse_tag
    from playtag.player import to_args

    cfg: Config = ctx.obj["config"]
    options = parse_tag(tag, flags=cfg.flag_vocabulary)
    click.echo(format_tag(options, version=cfg.tags.version))
    if args := to_args(options):
        click.echo(" ".join(args))
    print_success("Tag is valid" if options else "Tag is empty")
    sys.exit(ExitCode.SUCCESS)


def main() -> None:
    """Entry point for the playtag CLI."""
    playtag()


if __name__ == "__main__":
    main()
