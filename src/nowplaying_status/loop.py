"""Poll-render-publish reconciliation loop.

Each tick reads the source, renders the status text and publishes it when it
differs from the last successfully published text. Failures are contained in
the tick that raised them.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from enum import Enum
from typing import Callable, Iterator

from nowplaying_status.models.playback import PlaybackSnapshot
from nowplaying_status.render import render_text
from nowplaying_status.sinks.base import Sink
from nowplaying_status.sources.base import Source
from nowplaying_status.utils.errors import SinkError, SourceError

logger = logging.getLogger(__name__)


class TickResult(str, Enum):
    PUBLISHED = "published"
    UNCHANGED = "unchanged"
    FETCH_FAILED = "fetch_failed"
    PUBLISH_FAILED = "publish_failed"
    ERROR = "error"


class IntervalTicker:
    """Yields on a fixed grid of ``start + k * interval``.

    Grid points that pass while a tick is still running are skipped, so at
    most one tick runs per elapsed interval and there is never a backlog.
    """

    def __init__(
        self,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        wait: Callable[[float], bool] | None = None,
        max_ticks: int | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._interval = interval
        self._clock = clock
        self._stop = threading.Event()
        self._wait = wait or self._stop.wait
        self._max_ticks = max_ticks

    def stop(self) -> None:
        """Stop after the current tick; interrupts a pending wait."""
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def __iter__(self) -> Iterator[int]:
        start = self._clock()
        index = 0
        ticks = 0
        while not self._stop.is_set():
            yield index
            ticks += 1
            if self._max_ticks is not None and ticks >= self._max_ticks:
                return

            elapsed = self._clock() - start
            next_index = max(math.ceil(elapsed / self._interval), index + 1)
            if next_index > index + 1:
                logger.warning(
                    "Tick took %.1fs, skipping %d missed tick(s)",
                    elapsed - index * self._interval, next_index - index - 1,
                )
            index = next_index

            delay = start + index * self._interval - self._clock()
            if self._wait(max(delay, 0.0)):
                return


class Reconciler:
    """Keeps a sink in sync with a source."""

    def __init__(
        self,
        source: Source,
        sink: Sink,
        template: str,
        default_text: str = "",
        separator: str = ", ",
    ) -> None:
        self._source = source
        self._sink = sink
        self._template = template
        self._default_text = default_text
        self._separator = separator
        self.last_published = ""

    def render(self, snapshot: PlaybackSnapshot | None) -> str:
        if snapshot is None:
            return self._default_text
        return render_text(self._template, snapshot, self._separator)

    def tick(self) -> TickResult:
        """Run one fetch/render/publish cycle. Never raises."""
        try:
            return self._tick()
        except Exception:
            logger.exception("Unexpected error during tick")
            return TickResult.ERROR

    def _tick(self) -> TickResult:
        try:
            snapshot = self._source.fetch_current()
        except SourceError as e:
            logger.error("Failed to get current track: %s", e)
            return TickResult.FETCH_FAILED

        if snapshot is None:
            logger.info("Nothing playing")
        else:
            logger.info(
                "Current track: %s - %s (%s)",
                ", ".join(snapshot.artists), snapshot.title,
                "playing" if snapshot.is_playing else "paused",
            )

        text = self.render(snapshot)
        if text == self.last_published:
            logger.info("Text unchanged, skipping update")
            return TickResult.UNCHANGED

        try:
            self._sink.publish(text)
        except SinkError as e:
            logger.error("Failed to publish: %s", e)
            return TickResult.PUBLISH_FAILED

        self.last_published = text
        logger.info("Published: %s", text)
        return TickResult.PUBLISHED

    def run(self, ticker: IntervalTicker) -> int:
        """Tick until the ticker stops. Returns the number of ticks run."""
        count = 0
        for _ in ticker:
            self.tick()
            count += 1
        return count

    def close(self) -> None:
        try:
            self._source.close()
        finally:
            self._sink.close()
