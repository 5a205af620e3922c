"""Rich output formatting for the sqli CLI.

All functions write to a :class:`rich.console.Console` (bound to *stderr*
by the app) so that rewritten SQL and ``--json`` output on *stdout* stay
clean for piping.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from sql_interrogator._types import ColumnDescriptor, PredicateDescriptor
    from sql_interrogator.telemetry.profiling import OperationStats

_NONE = "[dim]-[/dim]"


def _or_dash(value: Any) -> str:
    if value is None or value == "":
        return _NONE
    return str(value)


# ---------------------------------------------------------------------------
# Inspection
# ---------------------------------------------------------------------------


def display_summary(
    console: Console,
    *,
    first_table: str | None,
    databases: Sequence[str],
    order_by: str | None,
    top: int,
) -> None:
    """Render the scalar inspection results as a panel.

    Parameters
    ----------
    console:
        Rich console to write to (typically stderr).
    first_table:
        First FROM/JOIN table, or ``None``.
    databases:
        Database names, already sorted.
    order_by:
        ORDER BY clause as written, or ``None``.
    top:
        TOP value; 0 means none.
    """
    lines = [
        f"[bold]First table:[/bold] {_or_dash(first_table)}",
        f"[bold]Databases:[/bold]   {', '.join(databases) if databases else _NONE}",
        f"[bold]Order by:[/bold]    {_or_dash(order_by)}",
        f"[bold]Top:[/bold]         {top if top else _NONE}",
    ]
    console.print(Panel("\n".join(lines), title="Statement", border_style="blue"))


def display_columns(console: Console, columns: Sequence[ColumnDescriptor]) -> None:
    """Render projected columns as a table."""
    if not columns:
        console.print("[dim]No columns extracted.[/dim]")
        return

    table = Table(title="Columns", show_lines=False, pad_edge=True, expand=False)
    table.add_column("#", style="dim", width=4, justify="right")
    table.add_column("Database")
    table.add_column("Table")
    table.add_column("Name", style="bold")
    table.add_column("Alias", style="cyan")
    table.add_column("Expression")

    for idx, column in enumerate(columns, start=1):
        table.add_row(
            str(idx),
            _or_dash(column.database_name),
            _or_dash(column.table_name),
            column.column_name,
            _or_dash(column.alias),
            _or_dash(column.expression),
        )
    console.print(table)


def display_predicates(console: Console, predicates: Sequence[PredicateDescriptor]) -> None:
    """Render WHERE predicates as a table."""
    if not predicates:
        console.print("[dim]No WHERE predicates.[/dim]")
        return

    table = Table(title="Where", show_lines=False, pad_edge=True, expand=False)
    table.add_column("#", style="dim", width=4, justify="right")
    table.add_column("Column", style="bold")
    table.add_column("Operator", justify="center", style="magenta")
    table.add_column("Value")

    for idx, predicate in enumerate(predicates, start=1):
        table.add_row(str(idx), predicate.column.name, predicate.operator.value, predicate.value)
    console.print(table)


# ---------------------------------------------------------------------------
# Profiling
# ---------------------------------------------------------------------------


def display_profile_stats(console: Console, stats: Sequence[OperationStats]) -> None:
    """Render per-operation timings collected during the run."""
    if not stats:
        console.print("[dim]No operations profiled.[/dim]")
        return

    table = Table(title="Timings", show_lines=False, pad_edge=True, expand=False)
    table.add_column("Operation", style="bold")
    table.add_column("Calls", justify="right")
    table.add_column("Mean (ms)", justify="right")
    table.add_column("p95 (ms)", justify="right")
    table.add_column("Max (ms)", justify="right")
    table.add_column("Chars", justify="right", style="dim")

    for entry in stats:
        table.add_row(
            entry.operation,
            str(entry.count),
            f"{entry.mean_ms:.3f}",
            f"{entry.p95_ms:.3f}",
            f"{entry.max_ms:.3f}",
            str(entry.total_chars),
        )
    console.print(table)
