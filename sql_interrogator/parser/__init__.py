"""Statement parsing: preprocessing, identifiers, projections, predicates, tables."""

from sql_interrogator.parser.columns import parse_column_item, parse_column_list, projection_text
from sql_interrogator.parser.identifiers import (
    dotted_name,
    read_identifier_chain,
    resolve_qualified_name,
    resolve_table_reference,
    split_identifier_chain,
    unwrap_identifier,
)
from sql_interrogator.parser.normalizer import PreprocessConfig, normalize_statement
from sql_interrogator.parser.predicates import parse_predicate, parse_where_clause
from sql_interrogator.parser.tables import database_names, first_table_name, iter_table_references

__all__ = [
    "PreprocessConfig",
    "database_names",
    "dotted_name",
    "first_table_name",
    "iter_table_references",
    "normalize_statement",
    "parse_column_item",
    "parse_column_list",
    "parse_predicate",
    "parse_where_clause",
    "projection_text",
    "read_identifier_chain",
    "resolve_qualified_name",
    "resolve_table_reference",
    "split_identifier_chain",
    "unwrap_identifier",
]
