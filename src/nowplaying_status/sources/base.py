"""Interface shared by all music sources."""

from __future__ import annotations

from typing import Protocol

from nowplaying_status.models.playback import PlaybackSnapshot


class Source(Protocol):
    """Produces the current playback snapshot, or None when nothing is playing."""

    def fetch_current(self) -> PlaybackSnapshot | None:
        """Raises SourceError on any I/O, authentication or parse failure."""
        ...

    def close(self) -> None:
        ...
