"""Formatting helpers shared by the commands."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from antx.client.types import Node

_SIZE_UNITS = ["B", "K", "M", "G", "T", "P"]


def human_readable_size(size: int) -> str:
    """Format a byte count like ``ls -h``: 0B, 512B, 1.5K, 12M."""
    if size <= 0:
        return "0B"

    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1

    if int(value) < 10 and unit > 0:
        return f"{value:.1f}{_SIZE_UNITS[unit]}"
    return f"{int(value)}{_SIZE_UNITS[unit]}"


def format_modified_date(value: str, now: datetime | None = None) -> str:
    """Format an ISO 8601 timestamp in local time, or ``N/A``."""
    if not value:
        return "N/A"
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return "N/A"

    local = parsed.astimezone() if parsed.tzinfo else parsed
    now = now or datetime.now()
    if local.year == now.year:
        return local.strftime("%b %d %H:%M")
    return local.strftime("%b %d  %Y")


def sort_nodes_for_listing(nodes: list[Node]) -> list[Node]:
    """Folders first, then files, each by title in code-point order."""
    folders = sorted((n for n in nodes if n.is_folder), key=lambda n: n.title)
    files = sorted((n for n in nodes if not n.is_folder), key=lambda n: n.title)
    return folders + files


def truncate(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def node_table(nodes: list[Node], title: str | None = None) -> Table:
    table = Table(title=title, box=None, header_style="bold", pad_edge=False)
    table.add_column("UUID", no_wrap=True)
    table.add_column("SIZE", justify="right")
    table.add_column("MODIFIED", no_wrap=True)
    table.add_column("MIMETYPE")
    table.add_column("TITLE")

    for node in sort_nodes_for_listing(nodes):
        title_text = escape(node.title)
        if node.is_folder:
            title_text = f"[bold blue]{title_text}[/bold blue]"
        table.add_row(
            escape(node.uuid),
            human_readable_size(node.size),
            format_modified_date(node.modified_time),
            escape(truncate(node.mimetype, 30)),
            title_text,
        )
    return table


def print_json(console: Console, data: Any) -> None:
    """Print an API result; strings are printed as-is."""
    if data is None:
        return
    if isinstance(data, str):
        console.print(data, markup=False, highlight=False)
        return
    console.print_json(json.dumps(data, default=str))
