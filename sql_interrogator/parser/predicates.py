"""WHERE clause predicate parsing.

The WHERE body is split on top-level ``AND``/``OR``.  Each fragment is cut
at its first top-level comparison operator; at a given offset the longest
operator wins (``IS NOT`` before ``IS``, ``<>`` before ``<``).  A fragment
wrapped entirely in one pair of parentheses is unwrapped and split again.

``BETWEEN x AND y`` is not special-cased: the ``AND`` splits it and neither
half carries a comparison operator, so it yields nothing.  A fragment negated
with a leading ``NOT`` is dropped, and statements that are not SELECTs yield
nothing.
"""

from __future__ import annotations

import logging
import re

from sql_interrogator._types import Clause, ColumnName, ComparisonOperator, PredicateDescriptor
from sql_interrogator.parser.identifiers import dotted_name
from sql_interrogator.scanner.lexer import ScannedText
from sql_interrogator.scanner.locator import clause_body, is_select_statement, iter_keyword, split_top_level

logger = logging.getLogger(__name__)

_CONNECTIVES = ("AND", "OR")
_NULL_OPERATORS = frozenset({ComparisonOperator.IS, ComparisonOperator.IS_NOT})
_NEGATION_RE = re.compile(r"NOT(?![\w@#$])", re.IGNORECASE)


def find_operator(fragment: str | ScannedText) -> tuple[ComparisonOperator, int, int] | None:
    """Return the first top-level operator in *fragment* with its offsets."""
    scanned = ScannedText.of(fragment)
    best: tuple[ComparisonOperator, int, int] | None = None
    for operator in ComparisonOperator:
        match = next(iter_keyword(scanned, operator.value), None)
        if match is None:
            continue
        # Enum order is precedence order, so only a strictly earlier start wins.
        if best is None or match[0] < best[1]:
            best = (operator, match[0], match[1])
    return best


def parse_predicate(fragment: str) -> PredicateDescriptor | None:
    """Decompose one ``left operator right`` fragment."""
    found = find_operator(fragment)
    if found is None:
        logger.debug("No comparison operator in fragment: %.80s", fragment)
        return None
    operator, start, end = found
    left = fragment[:start].strip()
    right = fragment[end:].strip()
    if not left or not right:
        return None
    if _NEGATION_RE.match(left):
        logger.debug("Dropping negated fragment: %.80s", fragment)
        return None
    if operator in _NULL_OPERATORS and right.upper() == "NULL":
        right = "NULL"
    return PredicateDescriptor(column=ColumnName(name=dotted_name(left)), operator=operator, value=right)


def _is_wrapped(fragment: str) -> bool:
    if not fragment.startswith("("):
        return False
    return ScannedText.of(fragment).matching_paren(0) == len(fragment) - 1


def split_predicates(body: str) -> list[str]:
    """Split a WHERE body into leaf fragments, unwrapping parenthesised groups."""
    fragments: list[str] = []
    for piece in split_top_level(body, _CONNECTIVES):
        if _is_wrapped(piece):
            fragments.extend(split_predicates(piece[1:-1]))
        else:
            fragments.append(piece)
    return fragments


def parse_where_clause(sql: str | ScannedText) -> list[PredicateDescriptor]:
    """Parse the WHERE clause of a preprocessed statement.

    Parameters
    ----------
    sql:
        Statement text with comments and prologues already removed.

    Returns
    -------
    list[PredicateDescriptor]
        Predicates in text order; empty when there is no WHERE clause or
        the statement is not a SELECT.
    """
    scanned = ScannedText.of(sql)
    if not is_select_statement(scanned):
        logger.debug("Not a SELECT statement; no WHERE predicates")
        return []
    body = clause_body(scanned, Clause.WHERE)
    if not body:
        return []

    predicates: list[PredicateDescriptor] = []
    for fragment in split_predicates(body):
        predicate = parse_predicate(fragment)
        if predicate is not None:
            predicates.append(predicate)
    return predicates
