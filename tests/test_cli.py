"""CLI tests using click's CliRunner."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest
from click.testing import CliRunner

from playtag.cli import playtag
from playtag.tagging import read_tag, write_tag

TAG = "v1; t=10-20; vol=+3dB; mirror"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_write_then_read(runner: CliRunner, mp3_file: Path):
    result = runner.invoke(playtag, ["write", TAG, str(mp3_file)])
    assert result.exit_code == 0, result.output

    result = runner.invoke(playtag, ["read", str(mp3_file)])
    assert result.exit_code == 0
    assert TAG in result.output


def test_read_untagged_fails(runner: CliRunner, mp3_file: Path):
    result = runner.invoke(playtag, ["read", str(mp3_file)])
    assert result.exit_code == 1


def test_read_missing_file(runner: CliRunner, tmp_path: Path):
    result = runner.invoke(playtag, ["read", str(tmp_path / "missing.mp3")])
    assert result.exit_code == 1


def test_write_unsupported_file(runner: CliRunner, tmp_path: Path):
    target = tmp_path / "notes.txt"
    target.write_text("hello")
    result = runner.invoke(playtag, ["write", TAG, str(target)])
    assert result.exit_code == 1
    assert "Could not write playtag" in result.output


def test_clear(runner: CliRunner, flac_file: Path):
    write_tag(flac_file, TAG)
    result = runner.invoke(playtag, ["clear", str(flac_file)])
    assert result.exit_code == 0
    assert read_tag(flac_file) is None


def test_get_and_set(runner: CliRunner, mp3_file: Path):
    result = runner.invoke(playtag, ["set", "t=10-20", str(mp3_file)])
    assert result.exit_code == 0, result.output
    result = runner.invoke(playtag, ["set", "mirror", str(mp3_file)])
    assert result.exit_code == 0

    result = runner.invoke(playtag, ["get", "t", str(mp3_file)])
    assert result.exit_code == 0
    assert "10-20" in result.output

    result = runner.invoke(playtag, ["get", "mirror", str(mp3_file)])
    assert "true" in result.output

    result = runner.invoke(playtag, ["get", "vol", str(mp3_file)])
    assert result.exit_code == 1


def test_set_malformed(runner: CliRunner, mp3_file: Path):
    result = runner.invoke(playtag, ["set", "fullscreen", str(mp3_file)])
    assert result.exit_code == 1


def test_backup_flag(runner: CliRunner, mp3_file: Path):
    result = runner.invoke(playtag, ["-b", "write", TAG, str(mp3_file)])
    assert result.exit_code == 0
    assert mp3_file.with_name("song.mp3.bak").exists()


def test_backup_env(runner: CliRunner, mp3_file: Path):
    result = runner.invoke(playtag, ["write", TAG, str(mp3_file)], env={"PLAYTAG_BACKUP": "1"})
    assert result.exit_code == 0
    assert mp3_file.with_name("song.mp3.bak").exists()


def test_config_file(runner: CliRunner, mp3_file: Path, tmp_path: Path):
    config_path = tmp_path / "playtag.toml"
    config_path.write_text('backup = true\n\n[tags]\nflags = ["mirror", "loop"]\n')

    result = runner.invoke(playtag, ["--config", str(config_path), "set", "loop", str(mp3_file)])
    assert result.exit_code == 0, result.output
    assert read_tag(mp3_file) == "v1; loop"
    assert mp3_file.with_name("song.mp3.bak").exists()


def test_play_passes_player_args(runner: CliRunner, mp3_file: Path, monkeypatch: pytest.MonkeyPatch):
    write_tag(mp3_file, "v1; vol=+3dB")
    calls: list[list[str]] = []

    def run(cmd, **kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0)

    monkeypatch.setattr("playtag.player.shutil.which", lambda name: "/usr/bin/vlc")
    monkeypatch.setattr("playtag.player.subprocess.run", run)

    result = runner.invoke(playtag, ["play", "--fullscreen", "--rate=2", str(mp3_file)])
    assert result.exit_code == 0, result.output
    assert calls == [["/usr/bin/vlc", "--fullscreen", "--rate=2", "--gain=0.15", str(mp3_file)]]


def test_vlc_alias(runner: CliRunner, mp3_file: Path, monkeypatch: pytest.MonkeyPatch):
    calls: list[list[str]] = []
    monkeypatch.setattr("playtag.player.shutil.which", lambda name: "/usr/bin/vlc")
    monkeypatch.setattr("playtag.player.subprocess.run", lambda cmd, **kw: calls.append(cmd) or subprocess.CompletedProcess(cmd, 0))

    result = runner.invoke(playtag, ["vlc", str(mp3_file)])
    assert result.exit_code == 0
    assert calls == [["/usr/bin/vlc", str(mp3_file)]]


def test_play_requires_file(runner: CliRunner):
    result = runner.invoke(playtag, ["play"])
    assert result.exit_code == 2


def test_format_command(runner: CliRunner):
    result = runner.invoke(playtag, ["format", "mirror ; t=5-  ;bogus"])
    assert result.exit_code == 0
    assert "v1; mirror; t=5-" in result.output
    assert "--start-time=5 --video-filter=transform{type=hflip}" in result.output


def test_version(runner: CliRunner):
    result = runner.invoke(playtag, ["--version"])
    assert result.exit_code == 0
    assert "playtag" in result.output
