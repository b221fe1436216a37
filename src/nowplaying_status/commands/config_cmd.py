"""CLI commands for the configuration file."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from nowplaying_status.config import config_path, load_config, write_default_config
from nowplaying_status.utils.errors import ConfigError, handle_error
from nowplaying_status.utils.output import OutputFormat, print_record

console = Console(stderr=True)
app = typer.Typer(name="config", help="Create and check the configuration file.")


@app.command()
def init(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config.yaml")] = None,
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing file")] = False,
) -> None:
    """Write a commented default config.yaml."""
    path = config_file or config_path()
    if not write_default_config(path, force=force):
        console.print(f"[yellow]{path} already exists[/yellow] (use --force to overwrite)")
        raise typer.Exit(1)
    console.print(f"[green]Wrote[/green] {path}")


@app.command()
def check(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config.yaml")] = None,
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Validate the config and show the selected source and sink."""
    try:
        config = load_config(config_file)
    except ConfigError as e:
        handle_error(e)
        raise typer.Exit(1)

    print_record(
        {
            "interval": config.interval,
            "source": config.source.kind,
            "sink": config.sink.kind,
            "template": config.template,
            "default": config.default,
        },
        output,
        title="Configuration",
    )
