"""Printing of single status records for the auth and config commands.

JSON goes to stdout so it can be piped; the table view goes to stderr next to
the other human-facing messages.
"""

from __future__ import annotations

import json
import sys
from enum import Enum
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console(stderr=True)


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    return escape(str(value))


def print_record(
    record: dict[str, Any],
    fmt: OutputFormat = OutputFormat.TABLE,
    title: str | None = None,
) -> None:
    """Print one record as JSON or as a two-column field/value table."""
    if fmt == OutputFormat.JSON:
        sys.stdout.write(json.dumps(record, indent=2, default=str) + "\n")
        return

    table = Table(title=title, show_header=False)
    table.add_column("field", style="bold")
    table.add_column("value", overflow="fold")
    for key, value in record.items():
        table.add_row(key.replace("_", " "), _cell(value))
    console.print(table)
