"""SQL Interrogator: scanner-based analysis and rewriting of SELECT text."""

from sql_interrogator._types import (
    ColumnDescriptor,
    ColumnName,
    ComparisonOperator,
    InterrogatorError,
    InvalidInputError,
    PredicateDescriptor,
    TableReference,
)
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
from sql_interrogator.parser.normalizer import PreprocessConfig, normalize_statement
from sql_interrogator.rewriter.clause_rewriter import compose

__version__ = "0.1.0"

__all__ = [
    "ColumnDescriptor",
    "ColumnName",
    "ComparisonOperator",
    "InterrogatorError",
    "InvalidInputError",
    "PredicateDescriptor",
    "PreprocessConfig",
    "TableReference",
    "compose",
    "convert_to_select_count",
    "convert_to_select_distinct",
    "convert_to_select_order_by",
    "convert_to_select_top",
    "extract_column_details",
    "extract_database_names",
    "extract_first_table_name",
    "extract_order_by_clause",
    "extract_table_references",
    "extract_top_number",
    "extract_where_clauses",
    "normalize_statement",
]
