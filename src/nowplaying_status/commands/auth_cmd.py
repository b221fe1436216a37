"""CLI commands for OAuth credentials and the Telegram user session."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from nowplaying_status.config import load_config
from nowplaying_status.sinks.bio import TelegramLogin
from nowplaying_status.utils.errors import ConfigError, NowPlayingError, handle_error
from nowplaying_status.utils.output import OutputFormat, print_record
from nowplaying_status.wiring import Login, session_for

console = Console(stderr=True)
app = typer.Typer(name="auth", help="Manage OAuth credentials and the Telegram session.")


class Target(str, Enum):
    SOURCE = "source"
    SINK = "sink"


ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config.yaml")]
TargetOption = Annotated[Target, typer.Option("--target", "-t", help="Which side's credential to use")]
OutputOption = Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")]


def _session(config_file: Path | None, target: Target) -> Login:
    config = load_config(config_file)
    section = config.source if target == Target.SOURCE else config.sink
    session = session_for(section)
    if session is None:
        raise ConfigError(f"The configured {target.value} ({section.kind}) needs no login")
    return session


def _status_row(session: Login) -> dict[str, object]:
    status = session.get_status()
    return {
        "has_token": status.has_token,
        "is_expired": status.is_expired,
        "expires_at": str(status.expires_at) if status.expires_at else "N/A",
        "seconds_remaining": status.seconds_remaining or 0,
    }


@app.command()
def login(
    config_file: ConfigOption = None,
    target: TargetOption = Target.SOURCE,
    timeout: Annotated[Optional[float], typer.Option("--timeout", help="Seconds to wait for the redirect")] = None,
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """Run the browser authorization flow and store the credential."""
    try:
        session = _session(config_file, target)
    except NowPlayingError as e:
        handle_error(e)
        raise typer.Exit(1)

    try:
        console.print(f"Authorizing [bold]{target.value}[/bold]...", style="yellow")
        session.authorize(timeout=timeout)
        print_record({"status": "authorized", **_status_row(session)}, output, title="Authorization")
    except (NowPlayingError, OSError) as e:
        console.print("[red]Authorization failed[/red]")
        handle_error(e)
        raise typer.Exit(1)
    finally:
        session.close()


@app.command()
def status(
    config_file: ConfigOption = None,
    target: TargetOption = Target.SOURCE,
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """Show the stored credential's status."""
    try:
        session = _session(config_file, target)
    except NowPlayingError as e:
        handle_error(e)
        raise typer.Exit(1)

    try:
        print_record(_status_row(session), output, title="Token Status")
    except NowPlayingError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        session.close()


@app.command()
def refresh(
    config_file: ConfigOption = None,
    target: TargetOption = Target.SOURCE,
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """Force a token refresh."""
    try:
        session = _session(config_file, target)
        if isinstance(session, TelegramLogin):
            session.close()
            raise ConfigError("Telegram sessions do not expire; nothing to refresh")
    except NowPlayingError as e:
        handle_error(e)
        raise typer.Exit(1)

    try:
        console.print(f"Force refreshing [bold]{target.value}[/bold] token...", style="yellow")
        session.get_access_token(force_refresh=True)
        print_record({"status": "refreshed", **_status_row(session)}, output, title="Token Refreshed")
    except NowPlayingError as e:
        console.print("[red]Token refresh failed[/red]")
        handle_error(e)
        raise typer.Exit(1)
    finally:
        session.close()
