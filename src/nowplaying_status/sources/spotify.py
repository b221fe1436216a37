"""Spotify "currently playing" source."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

import httpx

from nowplaying_status.client import AuthorizedClient
from nowplaying_status.models.playback import PlaybackSnapshot
from nowplaying_status.utils.errors import AuthError, SourceError

logger = logging.getLogger(__name__)

CURRENTLY_PLAYING_URL = "https://api.spotify.com/v1/me/player/currently-playing"


class SpotifySource:
    """Reads the user's current track from the Spotify Web API."""

    def __init__(self, client: AuthorizedClient, url: str = CURRENTLY_PLAYING_URL) -> None:
        self._client = client
        self._url = url

    def fetch_current(self) -> PlaybackSnapshot | None:
        try:
            response = self._client.get(self._url)
        except AuthError as e:
            raise SourceError(f"Spotify authorization failed: {e}") from e
        except httpx.HTTPError as e:
            raise SourceError(f"Spotify request failed: {e}") from e

        if response.status_code == 204:
            return None
        if response.status_code != 200:
            raise SourceError(
                f"Spotify API error (HTTP {response.status_code}): {response.text}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SourceError(f"Spotify returned invalid JSON: {e}") from e
        return parse_currently_playing(data)

    def close(self) -> None:
        self._client.close()


def parse_currently_playing(data: Any) -> PlaybackSnapshot | None:
    """Map a currently-playing response body to a snapshot.

    A body without ``item`` (ad breaks, private sessions) counts as nothing playing.
    """
    if not isinstance(data, dict):
        raise SourceError(f"Unexpected Spotify response: {data!r}")

    item = data.get("item")
    if not item:
        return None
    if not isinstance(item, dict):
        raise SourceError(f"Malformed Spotify track: expected an object, got {type(item).__name__}")

    try:
        return PlaybackSnapshot(
            artists=[artist["name"] for artist in item.get("artists", [])],
            title=item["name"],
            progress=timedelta(milliseconds=data.get("progress_ms") or 0),
            duration=timedelta(milliseconds=item.get("duration_ms") or 0),
            is_playing=bool(data.get("is_playing", False)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise SourceError(f"Malformed Spotify track: {e}") from e
