"""Composable SELECT statement rewrites."""

from sql_interrogator.rewriter.clause_rewriter import (
    Rewrite,
    compose,
    order_by_clause,
    to_select_count,
    to_select_distinct,
    to_select_order_by,
    to_select_top,
    top_number,
)

__all__ = [
    "Rewrite",
    "compose",
    "order_by_clause",
    "to_select_count",
    "to_select_distinct",
    "to_select_order_by",
    "to_select_top",
    "top_number",
]
