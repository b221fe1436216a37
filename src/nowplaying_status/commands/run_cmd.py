"""The daemon command: authorize if needed, then run the reconciliation loop."""

from __future__ import annotations

import logging
import signal
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from nowplaying_status.config import load_config
from nowplaying_status.loop import IntervalTicker
from nowplaying_status.utils.errors import NowPlayingError, handle_error
from nowplaying_status.wiring import build_reconciler, session_for

logger = logging.getLogger(__name__)
console = Console(stderr=True)


def _install_signal_handlers(ticker: IntervalTicker) -> None:
    def _stop(signum, frame) -> None:
        logger.info("Received %s, stopping after the current tick", signal.Signals(signum).name)
        ticker.stop()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)


def _close_all(sessions: list) -> None:
    for session in sessions:
        if session is not None:
            session.close()


def run(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config.yaml")] = None,
    interactive: Annotated[
        bool,
        typer.Option("--interactive/--no-interactive", help="Sign in interactively when no credential or session is stored"),
    ] = True,
    auth_timeout: Annotated[
        Optional[float], typer.Option("--auth-timeout", help="Seconds to wait for the authorization redirect")
    ] = None,
) -> None:
    """Poll the music source and keep the sink's text in sync."""
    sessions = []
    try:
        config = load_config(config_file)
        source_session = session_for(config.source)
        sessions.append(source_session)
        sink_session = session_for(config.sink)
        sessions.append(sink_session)

        for session in sessions:
            if session is None:
                continue
            if interactive:
                session.authorize(timeout=auth_timeout)
            else:
                session.require_authorized()

        reconciler = build_reconciler(config, source_session, sink_session)
    except (NowPlayingError, OSError) as e:
        _close_all(sessions)
        handle_error(e)
        raise typer.Exit(1)

    ticker = IntervalTicker(config.interval)
    _install_signal_handlers(ticker)
    console.print(
        f"Polling [bold]{config.source.kind}[/bold] every {config.interval}s, "
        f"publishing to [bold]{config.sink.kind}[/bold]",
        style="green",
    )

    try:
        reconciler.run(ticker)
    finally:
        reconciler.close()
    logger.info("Stopped")
