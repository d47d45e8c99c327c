__all__ = (
    "__version__",
    "main",
    "Config",
    # Codec
    "TAG_VERSION",
    "TimeSpec",
    "format_tag",
    "parse_tag",
    "parse_time",
    "parse_time_range",
    # Sniffing
    "ContainerFamily",
    "detect_family",
    "sniff_mime",
    # Handlers
    "FAILED",
    "TagHandler",
    "with_handler",
    # Tagging
    "clear_tag",
    "get_option",
    "read_tag",
    "set_option",
    "write_tag",
    # Player
    "play",
    "to_args",
)

__version__ = "0.1.0"

from playtag.cli import main
from playtag.codec import TAG_VERSION, TimeSpec, format_tag, parse_tag, parse_time, parse_time_range
from playtag.config import Config
from playtag.handlers import FAILED, TagHandler, with_handler
from playtag.player import play, to_args
from playtag.sniff import ContainerFamily, detect_family, sniff_mime
from playtag.tagging import clear_tag, get_option, read_tag, set_option, write_tag
