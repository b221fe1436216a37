"""Playback snapshot model."""

from __future__ import annotations

from datetime import timedelta

from pydantic import BaseModel, Field


class PlaybackSnapshot(BaseModel):
    """A point-in-time read of what is currently playing.

    "Nothing playing" is represented by ``None`` wherever a snapshot is expected.
    """
    artists: list[str] = Field(default_factory=list)
    title: str
    progress: timedelta = timedelta(0)
    duration: timedelta = timedelta(0)
    is_playing: bool = True
