"""Unit tests for sql_interrogator.cli.display."""

from __future__ import annotations

import io

from rich.console import Console

from sql_interrogator._types import ColumnDescriptor, ColumnName, ComparisonOperator, PredicateDescriptor
from sql_interrogator.cli.display import (
    display_columns,
    display_predicates,
    display_profile_stats,
    display_summary,
)
from sql_interrogator.telemetry.profiling import OperationStats

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _capture_console() -> tuple[Console, io.StringIO]:
    """Return a console that writes plain text to a buffer."""
    buf = io.StringIO()
    console = Console(file=buf, no_color=True, highlight=False, width=120)
    return console, buf


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


class TestDisplaySummary:
    def test_renders_values(self) -> None:
        console, buf = _capture_console()
        display_summary(console, first_table="Users", databases=["HR", "Sales"], order_by="ORDER BY Name", top=10)
        output = buf.getvalue()
        assert "Statement" in output
        assert "Users" in output
        assert "HR, Sales" in output
        assert "ORDER BY Name" in output
        assert "10" in output

    def test_missing_values_render_as_dash(self) -> None:
        console, buf = _capture_console()
        display_summary(console, first_table=None, databases=[], order_by=None, top=0)
        output = buf.getvalue()
        assert "First table: -" in output
        assert "Top:         -" in output


# ---------------------------------------------------------------------------
# Columns and predicates
# ---------------------------------------------------------------------------


class TestDisplayColumns:
    def test_renders_rows(self) -> None:
        console, buf = _capture_console()
        columns = [
            ColumnDescriptor(table_name="u", column=ColumnName(name="Name", alias="UserName"), expression="u.Name"),
            ColumnDescriptor(column=ColumnName(name="Total"), expression="a + b"),
        ]
        display_columns(console, columns)
        output = buf.getvalue()
        assert "Columns" in output
        assert "UserName" in output
        assert "a + b" in output

    def test_empty(self) -> None:
        console, buf = _capture_console()
        display_columns(console, [])
        assert "No columns extracted." in buf.getvalue()


class TestDisplayPredicates:
    def test_renders_rows(self) -> None:
        console, buf = _capture_console()
        predicates = [
            PredicateDescriptor(
                column=ColumnName(name="dbo.Users.Active"),
                operator=ComparisonOperator.IS_NOT,
                value="NULL",
            )
        ]
        display_predicates(console, predicates)
        output = buf.getvalue()
        assert "dbo.Users.Active" in output
        assert "IS NOT" in output
        assert "NULL" in output

    def test_empty(self) -> None:
        console, buf = _capture_console()
        display_predicates(console, [])
        assert "No WHERE predicates." in buf.getvalue()


# ---------------------------------------------------------------------------
# Profiling
# ---------------------------------------------------------------------------


class TestDisplayProfileStats:
    def test_renders_rows(self) -> None:
        console, buf = _capture_console()
        stats = [
            OperationStats(
                operation="sqli.extract_top_number",
                count=3,
                mean_ms=0.1234,
                p50_ms=0.1,
                p95_ms=0.2,
                p99_ms=0.2,
                min_ms=0.05,
                max_ms=0.25,
                total_chars=60,
            )
        ]
        display_profile_stats(console, stats)
        output = buf.getvalue()
        assert "sqli.extract_top_number" in output
        assert "0.123" in output
        assert "60" in output

    def test_empty(self) -> None:
        console, buf = _capture_console()
        display_profile_stats(console, [])
        assert "No operations profiled." in buf.getvalue()
