"""Interface shared by all sinks."""

from __future__ import annotations

from typing import Protocol


class Sink(Protocol):
    """Writes rendered status text to an external surface."""

    def publish(self, text: str) -> None:
        """Raises SinkError on network or authorization failure."""
        ...

    def close(self) -> None:
        ...
