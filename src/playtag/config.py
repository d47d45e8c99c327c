from __future__ import annotations

import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_PLAYER_CANDIDATES = [
    "vlc",
    "/usr/bin/vlc",
    "/usr/local/bin/vlc",
    "/Applications/VLC.app/Contents/MacOS/VLC",
    "C:\\Program Files\\VideoLAN\\VLC\\vlc.exe",
    "C:\\Program Files (x86)\\VideoLAN\\VLC\\vlc.exe",
]

TRUE_VALUES = ("true", "1", "yes")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO")  # DEBUG, INFO, WARNING, ERROR
    format: str = Field(default="%(levelname)s: %(message)s")
    hash_paths: bool = Field(default=False)


class TagsConfig(BaseModel):
    """Playtag serialization settings."""

    version: str = Field(default="v1", pattern=r"^v\d+(?:\.\d+)*$")
    # Bare tokens parsed as boolean flags
    flags: list[str] = Field(default_factory=lambda: ["mirror"])


class PlayerConfig(BaseModel):
    """Media player lookup and invocation."""

    executable: str | None = Field(default=None)
    candidates: list[str] = Field(default_factory=lambda: list(DEFAULT_PLAYER_CANDIDATES))
    extra_args: list[str] = Field(default_factory=list)


class MkvToolnixConfig(BaseModel):
    """MKVToolNix executables used for Matroska tags."""

    mkvextract: str = Field(default="mkvextract")
    mkvpropedit: str = Field(default="mkvpropedit")
    timeout_s: float = Field(default=60.0, ge=1.0)


class Config(BaseModel):
    """
    Main configuration for playtag.

    Loads from TOML file with optional environment variable overrides.
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    tags: TagsConfig = Field(default_factory=TagsConfig)
    player: PlayerConfig = Field(default_factory=PlayerConfig)
    mkvtoolnix: MkvToolnixConfig = Field(default_factory=MkvToolnixConfig)
    backup: bool = Field(default=False)
    debug: bool = Field(default=False)

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """
        Load configuration from TOML file with environment variable overrides.

        Environment variables take precedence and follow the pattern:
        PLAYTAG_<SECTION>_<KEY> (e.g., PLAYTAG_LOGGING_LEVEL). The top-level
        toggles are PLAYTAG_DEBUG and PLAYTAG_BACKUP.
        """
        config_dict: dict[str, object] = {}

        if config_path and config_path.exists():
            config_dict = tomllib.loads(config_path.read_text())

        config_dict = cls._merge_env_overrides(config_dict)
        return cls.model_validate(config_dict)

    @property
    def flag_vocabulary(self) -> frozenset[str]:
        return frozenset(self.tags.flags)

    @classmethod
    def _merge_env_overrides(cls, config_dict: dict[str, object]) -> dict[str, object]:
        """
        Merge environment variable overrides into config dictionary.

        Returns a new dictionary with env vars applied, ready for Pydantic validation.
        """
        env_prefix = "PLAYTAG_"

        if debug := os.getenv(f"{env_prefix}DEBUG"):
            config_dict["debug"] = debug.lower() in TRUE_VALUES

        if backup := os.getenv(f"{env_prefix}BACKUP"):
            config_dict["backup"] = backup.lower() in TRUE_VALUES

        logging_config = config_dict.setdefault("logging", {})
        if not isinstance(logging_config, dict):
            logging_config = {}
            config_dict["logging"] = logging_config

        if log_level := os.getenv(f"{env_prefix}LOGGING_LEVEL"):
            logging_config["level"] = log_level
        if log_format := os.getenv(f"{env_prefix}LOGGING_FORMAT"):
            logging_config["format"] = log_format
        if log_hash_paths := os.getenv(f"{env_prefix}LOGGING_HASH_PATHS"):
            logging_config["hash_paths"] = log_hash_paths.lower() in TRUE_VALUES

        tags = config_dict.setdefault("tags", {})
        if not isinstance(tags, dict):
            tags = {}
            config_dict["tags"] = tags

        if tag_flags := os.getenv(f"{env_prefix}TAGS_FLAGS"):
            tags["flags"] = [flag.strip() for flag in tag_flags.split(",") if flag.strip()]

        player = config_dict.setdefault("player", {})
        if not isinstance(player, dict):
            player = {}
            config_dict["player"] = player

        if player_exe := os.getenv(f"{env_prefix}PLAYER_EXECUTABLE"):
            player["executable"] = player_exe

        mkvtoolnix = config_dict.setdefault("mkvtoolnix", {})
        if not isinstance(mkvtoolnix, dict):
            mkvtoolnix = {}
            config_dict["mkvtoolnix"] = mkvtoolnix

        if mkvextract := os.getenv(f"{env_prefix}MKVEXTRACT"):
            mkvtoolnix["mkvextract"] = mkvextract
        if mkvpropedit := os.getenv(f"{env_prefix}MKVPROPEDIT"):
            mkvtoolnix["mkvpropedit"] = mkvpropedit
        if mkv_timeout := os.getenv(f"{env_prefix}MKVTOOLNIX_TIMEOUT_S"):
            mkvtoolnix["timeout_s"] = mkv_timeout

        return config_dict


## Tests


def test_config_defaults():
    config = Config()
    assert config.debug is False
    assert config.backup is False
    assert config.logging.level == "INFO"
    assert config.logging.format == "%(levelname)s: %(message)s"
    assert config.tags.version == "v1"
    assert config.flag_vocabulary == frozenset({"mirror"})
    assert config.player.executable is None
    assert config.player.candidates[0] == "vlc"
    assert config.mkvtoolnix.mkvextract == "mkvextract"
    assert config.mkvtoolnix.timeout_s == 60.0


def test_config_from_dict():
    config = Config.model_validate(
        {
            "backup": True,
            "player": {"executable": "/opt/vlc/vlc", "extra_args": ["--fullscreen"]},
            "tags": {"flags": ["mirror", "loop"]},
        }
    )
    assert config.backup is True
    assert config.player.executable == "/opt/vlc/vlc"
    assert config.player.extra_args == ["--fullscreen"]
    assert config.flag_vocabulary == frozenset({"mirror", "loop"})


def test_config_env_overrides(
    monkeypatch,  # pyright: ignore[reportMissingParameterType,reportUnknownParameterType]
):
    monkeypatch.setenv("PLAYTAG_DEBUG", "1")  # pyright: ignore[reportUnknownMemberType]
    monkeypatch.setenv("PLAYTAG_BACKUP", "yes")  # pyright: ignore[reportUnknownMemberType]
    monkeypatch.setenv("PLAYTAG_TAGS_FLAGS", "mirror, loop")  # pyright: ignore[reportUnknownMemberType]
    monkeypatch.setenv("PLAYTAG_MKVTOOLNIX_TIMEOUT_S", "5")  # pyright: ignore[reportUnknownMemberType]

    config = Config.load()
    assert config.debug is True
    assert config.backup is True
    assert config.tags.flags == ["mirror", "loop"]
    assert config.mkvtoolnix.timeout_s == 5.0


def test_config_load_nonexistent_file():
    config = Config.load(Path("/nonexistent/playtag.toml"))
    assert config.debug is False
    assert config.mkvtoolnix.mkvpropedit == "mkvpropedit"
