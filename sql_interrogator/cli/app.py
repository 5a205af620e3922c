"""sqli -- Typer-based command line for the interrogator.

``sqli inspect`` reports what the analysis functions extract from a
statement; ``sqli rewrite ...`` prints a rewritten statement.  Rewritten SQL
and ``--json`` output go to *stdout*; everything human-readable goes to
*stderr* via Rich.

Exit codes: 0 on success, 1 when a rewrite does not apply to the statement,
2 when no SQL text could be read.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from sql_interrogator._types import InvalidInputError
from sql_interrogator.cli.display import (
    display_columns,
    display_predicates,
    display_profile_stats,
    display_summary,
)
from sql_interrogator.config import Settings, configure_logging, load_settings
from sql_interrogator.interrogator import (
    convert_to_select_count,
    convert_to_select_distinct,
    convert_to_select_order_by,
    convert_to_select_top,
    extract_column_details,
    extract_database_names,
    extract_first_table_name,
    extract_order_by_clause,
    extract_table_references,
    extract_top_number,
    extract_where_clauses,
)
from sql_interrogator.parser.normalizer import PreprocessConfig
from sql_interrogator.telemetry.profiling import ProfileCollector

# ---------------------------------------------------------------------------
# App & global state
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="sqli",
    help="sqli - inspect and rewrite SQL SELECT statements without a database.",
    no_args_is_help=True,
)
console = Console(stderr=True)

rewrite_app = typer.Typer(
    name="rewrite",
    help="Rewrite a SELECT statement and print the result.",
    no_args_is_help=True,
)
app.add_typer(rewrite_app, name="rewrite")

# Mutable global options populated by the Typer callback.
_settings: Settings | None = None
_show_stats: bool = False

_SQL_HELP = "SQL text, or '-' to read from stdin."
_FILE_HELP = "Read the SQL text from this file instead."


# ---------------------------------------------------------------------------
# Callback -- global options
# ---------------------------------------------------------------------------


@app.callback()
def _global_options(
    stats: bool = typer.Option(
        False,
        "--stats/--no-stats",
        help="Print per-operation timings to stderr when the command ends.",
    ),
    structured_logging: bool = typer.Option(
        False,
        "--structured-logging/--plain-logging",
        help="Emit log records as single-line JSON.",
        envvar="SQLI_STRUCTURED_LOGGING",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Override SQLI_LOG_LEVEL (DEBUG, INFO, WARNING, ERROR).",
    ),
) -> None:
    """Global options applied to every command."""
    global _settings, _show_stats  # noqa: PLW0603
    overrides: dict[str, Any] = {"structured_logging": structured_logging}
    if log_level is not None:
        overrides["log_level"] = log_level
    _settings = load_settings(**overrides)
    _show_stats = stats
    configure_logging(_settings)
    ProfileCollector.configure(_settings.profile_max_results)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _preprocess_config() -> PreprocessConfig:
    settings = _settings if _settings is not None else load_settings()
    return settings.preprocess_config()


def read_sql(sql: str | None, file: Path | None) -> str:
    """Resolve the SQL text from an argument, ``-`` (stdin) or ``--file``.

    Raises
    ------
    InvalidInputError
        If nothing was given, the file cannot be read, or the text is blank.
    """
    if file is not None:
        try:
            text = file.read_text(encoding="utf-8")
        except OSError as exc:
            raise InvalidInputError(f"Cannot read {file}: {exc}") from exc
    elif sql == "-":
        text = sys.stdin.read()
    elif sql is None:
        raise InvalidInputError("No SQL given: pass it as an argument, '-' for stdin, or --file.")
    else:
        text = sql

    if not text.strip():
        raise InvalidInputError("SQL text is blank.")
    return text


def _load_input(sql: str | None, file: Path | None) -> str:
    try:
        return read_sql(sql, file)
    except InvalidInputError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2) from exc


def _print_stats() -> None:
    if _show_stats:
        display_profile_stats(console, ProfileCollector.get_instance().get_all_stats())


def _emit_rewrite(result: str | None, operation: str) -> None:
    """Print *result* on stdout, or explain why the rewrite did not apply."""
    _print_stats()
    if result is None:
        console.print(f"[yellow]{operation} rewrite does not apply to this statement.[/yellow]")
        raise typer.Exit(code=1)
    typer.echo(result)


def build_report(sql: str, config: PreprocessConfig) -> dict[str, Any]:
    """Run every extraction over *sql* and collect the results."""
    return {
        "first_table": extract_first_table_name(sql, config=config),
        "databases": sorted(extract_database_names(sql, config=config), key=str.casefold),
        "tables": [ref.fully_qualified for ref in extract_table_references(sql, config=config)],
        "columns": [c.model_dump() for c in extract_column_details(sql, config=config)],
        "predicates": [p.model_dump(mode="json") for p in extract_where_clauses(sql, config=config)],
        "order_by": extract_order_by_clause(sql, config=config),
        "top": extract_top_number(sql, config=config),
    }


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


@app.command("inspect")
def inspect_command(
    sql: str | None = typer.Argument(None, help=_SQL_HELP),
    file: Path | None = typer.Option(None, "--file", "-f", help=_FILE_HELP),
    json_output: bool = typer.Option(False, "--json", help="Emit the report as JSON on stdout."),
) -> None:
    """Show tables, databases, columns, predicates, ORDER BY and TOP of a statement."""
    text = _load_input(sql, file)
    config = _preprocess_config()

    if json_output:
        report = build_report(text, config)
        typer.echo(json.dumps(report, indent=2, sort_keys=True))
        _print_stats()
        return

    columns = extract_column_details(text, config=config)
    predicates = extract_where_clauses(text, config=config)
    display_summary(
        console,
        first_table=extract_first_table_name(text, config=config),
        databases=sorted(extract_database_names(text, config=config), key=str.casefold),
        order_by=extract_order_by_clause(text, config=config),
        top=extract_top_number(text, config=config),
    )
    display_columns(console, columns)
    display_predicates(console, predicates)
    _print_stats()


# ---------------------------------------------------------------------------
# rewrite
# ---------------------------------------------------------------------------


@rewrite_app.command("count")
def rewrite_count(
    sql: str | None = typer.Argument(None, help=_SQL_HELP),
    file: Path | None = typer.Option(None, "--file", "-f", help=_FILE_HELP),
) -> None:
    """Rewrite the statement into SELECT COUNT(*)."""
    text = _load_input(sql, file)
    _emit_rewrite(convert_to_select_count(text, config=_preprocess_config()), "COUNT")


@rewrite_app.command("distinct")
def rewrite_distinct(
    sql: str | None = typer.Argument(None, help=_SQL_HELP),
    file: Path | None = typer.Option(None, "--file", "-f", help=_FILE_HELP),
) -> None:
    """Add DISTINCT to the SELECT header."""
    text = _load_input(sql, file)
    _emit_rewrite(convert_to_select_distinct(text, config=_preprocess_config()), "DISTINCT")


@rewrite_app.command("top")
def rewrite_top(
    n: int = typer.Argument(..., help="Number of rows for TOP; must be positive."),
    sql: str | None = typer.Argument(None, help=_SQL_HELP),
    file: Path | None = typer.Option(None, "--file", "-f", help=_FILE_HELP),
) -> None:
    """Replace the SELECT header with SELECT [DISTINCT] TOP n."""
    text = _load_input(sql, file)
    _emit_rewrite(convert_to_select_top(text, n, config=_preprocess_config()), "TOP")


@rewrite_app.command("order-by")
def rewrite_order_by(
    clause: str = typer.Argument(..., help="New ordering, e.g. 'Name DESC'."),
    sql: str | None = typer.Argument(None, help=_SQL_HELP),
    file: Path | None = typer.Option(None, "--file", "-f", help=_FILE_HELP),
) -> None:
    """Replace or insert the ORDER BY clause, keeping OFFSET/FETCH."""
    text = _load_input(sql, file)
    _emit_rewrite(convert_to_select_order_by(text, clause, config=_preprocess_config()), "ORDER BY")


def main() -> None:
    app()
