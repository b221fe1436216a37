"""nowplaying-status — entry point.

Mirrors the currently playing track into a profile field or a pinned
channel message.
"""

from __future__ import annotations

import logging

import typer

from nowplaying_status.commands.auth_cmd import app as auth_app
from nowplaying_status.commands.config_cmd import app as config_app
from nowplaying_status.commands.run_cmd import run

app = typer.Typer(
    name="nowplaying-status",
    help="Keep a profile field or channel message in sync with what you are listening to.",
    no_args_is_help=True,
)

app.command(name="run")(run)
app.add_typer(auth_app, name="auth")
app.add_typer(config_app, name="config")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """nowplaying-status — sync now-playing text to a messaging surface."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("telethon").setLevel(logging.WARNING)


if __name__ == "__main__":
    app()
