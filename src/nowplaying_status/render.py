"""Template rendering for the status text."""

from __future__ import annotations

import re
from datetime import timedelta

from nowplaying_status.models.playback import PlaybackSnapshot

_PLACEHOLDER = re.compile(r"\{(artist|title|progress|duration)\}")


def format_duration(duration: timedelta) -> str:
    """Render as ``M:SS``; minutes are not padded, fractional seconds are dropped."""
    total_seconds = max(int(duration.total_seconds()), 0)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"


def render_text(template: str, snapshot: PlaybackSnapshot, separator: str = ", ") -> str:
    """Substitute ``{artist}``, ``{title}``, ``{progress}`` and ``{duration}``.

    Single pass, so placeholder-like text inside a title is left alone, as are
    any other braces in the template.
    """
    values = {
        "artist": separator.join(snapshot.artists),
        "title": snapshot.title,
        "progress": format_duration(snapshot.progress),
        "duration": format_duration(snapshot.duration),
    }
    return _PLACEHOLDER.sub(lambda m: values[m.group(1)], template)
