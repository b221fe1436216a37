"""Tests for sources/apple_music.py — AppleScript output parsing."""
from __future__ import annotations

import subprocess
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from nowplaying_status.sources.apple_music import AppleMusicSource, parse_script_output
from nowplaying_status.utils.errors import SourceError, UnknownPlayerStateError


def _runner(stdout="", returncode=0, stderr=""):
    return MagicMock(return_value=subprocess.CompletedProcess(
        args=["osascript"], returncode=returncode, stdout=stdout, stderr=stderr,
    ))


# ── parsing ──────────────────────────────────────────────────────────

def test_playing():
    snapshot = parse_script_output("playing|Radiohead|Reckoner|65.5|290.0\n")
    assert snapshot.artists == ["Radiohead"]
    assert snapshot.title == "Reckoner"
    assert snapshot.progress == timedelta(seconds=65.5)
    assert snapshot.duration == timedelta(seconds=290)
    assert snapshot.is_playing is True


def test_paused():
    assert parse_script_output("paused|A|T|1|2").is_playing is False


def test_stopped_is_nothing_playing():
    assert parse_script_output("stopped|||0|0") is None


def test_not_running_is_nothing_playing():
    assert parse_script_output("not_running") is None


def test_title_with_separator():
    snapshot = parse_script_output("playing|Artist|Live | Remastered|10|20")
    assert snapshot.artists == ["Artist"]
    assert snapshot.title == "Live | Remastered"


def test_locale_decimal_comma():
    snapshot = parse_script_output("playing|A|T|12,5|200,25")
    assert snapshot.progress == timedelta(seconds=12.5)


def test_unknown_state():
    with pytest.raises(UnknownPlayerStateError) as excinfo:
        parse_script_output("fast forwarding|A|T|1|2")
    assert excinfo.value.raw == "fast forwarding"
    assert isinstance(excinfo.value, SourceError)


def test_garbage_output():
    with pytest.raises(SourceError, match="Unexpected AppleScript output"):
        parse_script_output("hello")


def test_bad_numbers():
    with pytest.raises(SourceError, match="timing"):
        parse_script_output("playing|A|T|abc|2")


# ── running osascript ────────────────────────────────────────────────

def test_fetch_runs_osascript():
    runner = _runner("playing|A|T|1|2")
    source = AppleMusicSource(runner=runner)
    assert source.fetch_current().title == "T"
    args = runner.call_args[0][0]
    assert args[0] == "osascript"
    assert args[1] == "-e"


def test_fetch_nonzero_exit():
    source = AppleMusicSource(runner=_runner(returncode=1, stderr="execution error"))
    with pytest.raises(SourceError, match="execution error"):
        source.fetch_current()


def test_fetch_missing_binary():
    source = AppleMusicSource(runner=MagicMock(side_effect=FileNotFoundError("osascript")))
    with pytest.raises(SourceError, match="Could not run"):
        source.fetch_current()


def test_fetch_timeout():
    runner = MagicMock(side_effect=subprocess.TimeoutExpired(cmd="osascript", timeout=10))
    with pytest.raises(SourceError):
        AppleMusicSource(runner=runner).fetch_current()
