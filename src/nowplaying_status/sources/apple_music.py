"""Apple Music source driven by AppleScript (macOS only)."""

from __future__ import annotations

import logging
import subprocess
from datetime import timedelta
from typing import Callable

from nowplaying_status.models.playback import PlaybackSnapshot
from nowplaying_status.utils.errors import SourceError, UnknownPlayerStateError

logger = logging.getLogger(__name__)

SCRIPT = r'''
if application "Music" is running then
    tell application "Music"
        set a to ""
        set n to ""
        set p to 0
        set d to 0
        try
            set tr to current track
            set a to artist of tr
            set n to name of tr
            set p to player position
            set d to duration of tr
        end try
        return (player state as string) & "|" & a & "|" & n & "|" & (p as string) & "|" & (d as string)
    end tell
else
    return "not_running"
end if
'''

SCRIPT_TIMEOUT = 10.0


def _seconds(raw: str) -> timedelta:
    # AppleScript formats reals with the user's locale decimal separator
    return timedelta(seconds=float(raw.strip().replace(",", ".") or 0))


class AppleMusicSource:
    """Asks the local Music app for its current track via ``osascript``."""

    def __init__(
        self,
        osascript: str = "osascript",
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        self._osascript = osascript
        self._runner = runner

    def fetch_current(self) -> PlaybackSnapshot | None:
        try:
            result = self._runner(
                [self._osascript, "-e", SCRIPT],
                capture_output=True,
                text=True,
                timeout=SCRIPT_TIMEOUT,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise SourceError(f"Could not run {self._osascript}: {e}") from e

        if result.returncode != 0:
            raise SourceError(f"AppleScript failed ({result.returncode}): {result.stderr.strip()}")
        return parse_script_output(result.stdout)

    def close(self) -> None:
        pass


def parse_script_output(output: str) -> PlaybackSnapshot | None:
    """Parse ``state|artist|title|position|duration`` from the script."""
    output = output.strip()
    if output == "not_running":
        return None

    # Titles may contain the separator; state/artist lead, numbers trail
    head, _, rest = output.partition("|")
    parts = rest.rsplit("|", 2)
    if len(parts) != 3 or "|" not in parts[0]:
        raise SourceError(f"Unexpected AppleScript output: {output!r}")
    artist, title = parts[0].split("|", 1)
    state = head.strip()

    if state == "stopped":
        return None
    if state not in ("playing", "paused"):
        raise UnknownPlayerStateError(state)

    try:
        progress = _seconds(parts[1])
        duration = _seconds(parts[2])
    except ValueError as e:
        raise SourceError(f"Unexpected AppleScript timing values: {output!r}") from e

    return PlaybackSnapshot(
        artists=[artist] if artist else [],
        title=title,
        progress=progress,
        duration=duration,
        is_playing=state == "playing",
    )
