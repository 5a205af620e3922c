"""Public facade: preprocess caller text, then delegate to the core.

Every function accepts ``None`` and returns its sentinel (``None``, an empty
collection or ``0``) rather than raising for SQL it cannot interpret.  Each
call runs :func:`~sql_interrogator.parser.normalizer.normalize_statement`
first, so comments, ``USE``/``GO`` prologues and a leading CTE prologue
never reach the scanner.  Pass ``config=`` to change which of those steps
run.

Each function is profiled under ``sqli.<function name>``.
"""

from __future__ import annotations

import logging

from sql_interrogator._types import ColumnDescriptor, PredicateDescriptor, TableReference
from sql_interrogator.parser.columns import parse_column_list
from sql_interrogator.parser.normalizer import PreprocessConfig, normalize_statement
from sql_interrogator.parser.predicates import parse_where_clause
from sql_interrogator.parser.tables import database_names, first_table_name, iter_table_references
from sql_interrogator.rewriter.clause_rewriter import (
    order_by_clause,
    to_select_count,
    to_select_distinct,
    to_select_order_by,
    to_select_top,
    top_number,
)
from sql_interrogator.telemetry.profiling import profile_operation

logger = logging.getLogger(__name__)


def _prepare(sql: str | None, config: PreprocessConfig | None, *, keep_ctes: bool = False) -> str | None:
    if config is None:
        config = PreprocessConfig()
    if keep_ctes and config.strip_ctes:
        config = config.model_copy(update={"strip_ctes": False})
    return normalize_statement(sql, config)


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


@profile_operation("sqli.extract_first_table_name")
def extract_first_table_name(sql: str | None, *, config: PreprocessConfig | None = None) -> str | None:
    """Return the unqualified name of the first FROM/JOIN table of a SELECT.

    Derived tables and table-valued functions are skipped, so
    ``SELECT * FROM (SELECT * FROM [db].[dbo].[Users]) AS u`` yields
    ``"Users"``.
    """
    statement = _prepare(sql, config)
    if statement is None:
        return None
    return first_table_name(statement)


@profile_operation("sqli.extract_database_names")
def extract_database_names(sql: str | None, *, config: PreprocessConfig | None = None) -> set[str]:
    """Return the database names referenced by three-or-more part table names.

    Works for any statement type.  CTE bodies are searched too, so the CTE
    prologue is kept for this call.
    """
    statement = _prepare(sql, config, keep_ctes=True)
    if statement is None:
        return set()
    return database_names(statement)


@profile_operation("sqli.extract_table_references")
def extract_table_references(sql: str | None, *, config: PreprocessConfig | None = None) -> list[TableReference]:
    """Return every table target in text order, resolved into its parts."""
    statement = _prepare(sql, config, keep_ctes=True)
    if statement is None:
        return []
    return list(iter_table_references(statement))


@profile_operation("sqli.extract_column_details")
def extract_column_details(
    sql: str | None, *, config: PreprocessConfig | None = None
) -> list[ColumnDescriptor]:
    """Return one descriptor per projected column, function or aliased expression.

    Literals and unaliased complex expressions are left out.
    """
    statement = _prepare(sql, config)
    if statement is None:
        return []
    return parse_column_list(statement)


@profile_operation("sqli.extract_where_clauses")
def extract_where_clauses(
    sql: str | None, *, config: PreprocessConfig | None = None
) -> list[PredicateDescriptor]:
    """Return the comparison predicates of the top-level WHERE clause in order."""
    statement = _prepare(sql, config)
    if statement is None:
        return []
    return parse_where_clause(statement)


@profile_operation("sqli.extract_order_by_clause")
def extract_order_by_clause(sql: str | None, *, config: PreprocessConfig | None = None) -> str | None:
    """Return ``ORDER BY ...`` as written, without any OFFSET/FETCH suffix."""
    return order_by_clause(_prepare(sql, config))


@profile_operation("sqli.extract_top_number")
def extract_top_number(sql: str | None, *, config: PreprocessConfig | None = None) -> int:
    """Return the literal TOP value of a SELECT, or 0 when there is none."""
    return top_number(_prepare(sql, config))


# ---------------------------------------------------------------------------
# Rewrites
# ---------------------------------------------------------------------------


@profile_operation("sqli.convert_to_select_count")
def convert_to_select_count(sql: str | None, *, config: PreprocessConfig | None = None) -> str | None:
    """Rewrite a SELECT into a row count of the same rows."""
    return to_select_count(_prepare(sql, config))


@profile_operation("sqli.convert_to_select_top")
def convert_to_select_top(sql: str | None, n: int, *, config: PreprocessConfig | None = None) -> str | None:
    """Rewrite the header to ``SELECT [DISTINCT ]TOP n``, dropping the projection."""
    return to_select_top(_prepare(sql, config), n)


@profile_operation("sqli.convert_to_select_distinct")
def convert_to_select_distinct(sql: str | None, *, config: PreprocessConfig | None = None) -> str | None:
    """Add DISTINCT to the header; idempotent."""
    return to_select_distinct(_prepare(sql, config))


@profile_operation("sqli.convert_to_select_order_by")
def convert_to_select_order_by(
    sql: str | None, clause: str | None, *, config: PreprocessConfig | None = None
) -> str | None:
    """Replace or insert the ORDER BY clause, keeping any OFFSET/FETCH suffix."""
    return to_select_order_by(_prepare(sql, config), clause)
