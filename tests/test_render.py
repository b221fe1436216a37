"""Tests for render.py — duration formatting and template substitution."""
from __future__ import annotations

from datetime import timedelta

from nowplaying_status.models.playback import PlaybackSnapshot
from nowplaying_status.render import format_duration, render_text


def _snapshot(**overrides) -> PlaybackSnapshot:
    defaults = {
        "artists": ["A", "B"],
        "title": "T",
        "progress": timedelta(seconds=65),
        "duration": timedelta(seconds=125),
    }
    defaults.update(overrides)
    return PlaybackSnapshot(**defaults)


# ── format_duration ──────────────────────────────────────────────────

def test_format_zero():
    assert format_duration(timedelta(0)) == "0:00"


def test_format_pads_seconds_only():
    assert format_duration(timedelta(seconds=65)) == "1:05"


def test_format_long_minutes_unpadded():
    assert format_duration(timedelta(minutes=75, seconds=3)) == "75:03"


def test_format_truncates_fraction():
    assert format_duration(timedelta(seconds=59.99)) == "0:59"


# ── render_text ──────────────────────────────────────────────────────

def test_render_full_template():
    text = render_text("{artist} - {title} ({progress}/{duration})", _snapshot(), ", ")
    assert text == "A, B - T (1:05/2:05)"


def test_render_custom_separator():
    assert render_text("{artist}", _snapshot(), " & ") == "A & B"


def test_render_repeated_placeholder():
    assert render_text("{title}/{title}", _snapshot()) == "T/T"


def test_render_keeps_unknown_braces():
    assert render_text("{album} {title} {}", _snapshot()) == "{album} T {}"


def test_render_title_with_placeholder_text():
    text = render_text("{title} {progress}", _snapshot(title="{progress}"))
    assert text == "{progress} 1:05"
