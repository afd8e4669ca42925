"""Terminal view of one scrape, using Rich."""

from __future__ import annotations

import math
from typing import List, Optional

from prometheus_client.core import Metric
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from apcupsd_exporter import NAMESPACE, __version__


def _format_value(value: float) -> str:
    if not math.isfinite(value):
        return str(value)
    if value == int(value):
        return str(int(value))
    return f"{value:.2f}"


def active_flags(families: List[Metric]) -> List[str]:
    """Status flags whose indicator is 1, in vocabulary order."""
    for family in families:
        if family.name == f"{NAMESPACE}_status":
            return [s.labels["status"] for s in family.samples if s.value]
    return []


def build_status_table(families: List[Metric], source_name: str) -> Table:
    """One row per sample. Status flags are shown only when set."""
    table = Table(
        title=f"apcupsd-exporter v{__version__} -- {source_name}",
        show_header=True,
        header_style="bold",
    )
    table.add_column("Metric", style="cyan")
    table.add_column("Type", width=8)
    table.add_column("Value", justify="right")

    for family in families:
        for sample in family.samples:
            flag = sample.labels.get("status")
            if flag is not None:
                if not sample.value:
                    continue
                name = f'{sample.name}{{status="{flag}"}}'
            else:
                name = sample.name
            table.add_row(name, family.type, _format_value(sample.value))

    return table


def print_status(families: List[Metric], source_name: str, console: Optional[Console] = None):
    console = console or Console()

    labels = {}
    for family in families:
        if family.name == f"{NAMESPACE}_info" and family.samples:
            labels = family.samples[0].labels

    flags = active_flags(families)
    if flags == ["ONLINE"]:
        color = "green"
    elif "ONLINE" in flags:
        color = "yellow"
    else:
        color = "red"

    console.print(
        f"\n[bold]{escape(labels.get('ups_name') or '(unnamed)')}[/bold] "
        f"[dim]{escape(labels.get('model', ''))} on {escape(labels.get('hostname', ''))}[/dim]  "
        f"[{color}]{' '.join(flags) or 'UNKNOWN'}[/{color}]\n"
    )
    console.print(build_status_table(families, source_name))
    console.print()
