"""SELECT projection list parsing.

The projection (between the SELECT header and FROM) is split on top-level
commas, and each item is classified in this order:

1. An explicit ``AS alias`` or an implicit trailing alias is split off.
2. Numeric and string literals are skipped, aliased or not.
3. An identifier chain (``*`` and ``t.*`` included) resolves through
   :func:`~sql_interrogator.parser.identifiers.resolve_qualified_name`.
4. A single function call, optionally windowed with ``OVER (...)``, reports
   the function name and keeps the alias.
5. Anything else is a complex expression.  With an alias it is reported
   under the alias name (alias field unset); without one it is dropped.
"""

from __future__ import annotations

import logging
import re

from sql_interrogator._types import Clause, ColumnDescriptor, ColumnName
from sql_interrogator.parser.identifiers import (
    resolve_qualified_name,
    split_identifier_chain,
    unwrap_identifier,
)
from sql_interrogator.scanner.lexer import ScannedText
from sql_interrogator.scanner.locator import (
    clause_span,
    decompose_select,
    iter_keyword,
    split_top_level,
)

logger = logging.getLogger(__name__)

_NUMERIC_LITERAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?|0[xX][0-9a-fA-F]*")
_STRING_LITERAL_RE = re.compile(r"[nN]?'(?:[^']|'')*'", re.DOTALL)
_ALIAS_TOKEN_RE = re.compile(r'(?!\d)[\w@#$]+|\[[^\]]+\]|"[^"]+"|\'[^\']+\'')
_WINDOW_RE = re.compile(r"(?:OVER|WITHIN\s+GROUP|FILTER)\s*\(", re.IGNORECASE)

# Words that can never be an implicit alias.
_RESERVED = frozenset(
    {
        "ALL", "AND", "AS", "ASC", "BETWEEN", "BY", "CASE", "COLLATE", "DESC",
        "DISTINCT", "ELSE", "END", "ESCAPE", "EXISTS", "FROM", "IN", "IS",
        "LIKE", "NOT", "NULL", "ON", "OR", "OVER", "THEN", "TOP", "WHEN",
    }
)  # fmt: skip

# Reserved words that may still end an operand ("CASE ... END label").
_OPERAND_KEYWORDS = frozenset({"END", "NULL"})


# ---------------------------------------------------------------------------
# Item helpers
# ---------------------------------------------------------------------------


def is_literal(expression: str) -> bool:
    """True for bare numeric, hexadecimal, string and NULL literals."""
    candidate = expression.strip()
    return bool(
        _NUMERIC_LITERAL_RE.fullmatch(candidate)
        or _STRING_LITERAL_RE.fullmatch(candidate)
        or candidate.upper() == "NULL"
    )


def _top_level_tokens(scanned: ScannedText) -> list[tuple[int, int]]:
    """Split on top-level whitespace and return token ``(start, end)`` pairs."""
    tokens: list[tuple[int, int]] = []
    text = scanned.text
    start: int | None = None
    for i, ch in enumerate(text):
        breaking = ch.isspace() and scanned.is_top_level(i)
        if breaking:
            if start is not None:
                tokens.append((start, i))
                start = None
        elif start is None:
            start = i
    if start is not None:
        tokens.append((start, len(text)))
    return tokens


def _ends_operand(token: str) -> bool:
    upper = token.upper()
    if upper in _RESERVED and upper not in _OPERAND_KEYWORDS:
        return False
    last = token[-1]
    return last.isalnum() or last in "_@#$])\"'"


def split_alias(item: str) -> tuple[str, str | None]:
    """Split *item* into ``(expression, alias)``.

    The last top-level ``AS`` wins.  Without one, a trailing bare or
    delimited identifier that follows an operand is an implicit alias.
    """
    scanned = ScannedText.of(item)
    explicit = list(iter_keyword(scanned, "AS"))
    if explicit:
        as_start, as_end = explicit[-1]
        expression = item[:as_start].strip()
        alias = unwrap_identifier(item[as_end:])
        if expression and alias:
            return expression, alias
        return item.strip(), None

    tokens = _top_level_tokens(scanned)
    if len(tokens) >= 2:
        last_start, last_end = tokens[-1]
        prev_start, prev_end = tokens[-2]
        candidate = item[last_start:last_end]
        previous = item[prev_start:prev_end]
        if (
            _ALIAS_TOKEN_RE.fullmatch(candidate)
            and candidate.upper() not in _RESERVED
            and _ends_operand(previous)
        ):
            return item[:last_start].strip(), unwrap_identifier(candidate)

    return item.strip(), None


def _window_suffix_ok(rest: str) -> bool:
    """True if *rest* is empty or only ``OVER (...)`` style groups."""
    cursor = 0
    rest = rest.strip()
    while cursor < len(rest):
        match = _WINDOW_RE.match(rest, cursor)
        if match is None:
            return False
        scanned = ScannedText.of(rest)
        close = scanned.matching_paren(match.end() - 1)
        if close is None:
            return False
        cursor = close + 1
        while cursor < len(rest) and rest[cursor].isspace():
            cursor += 1
    return True


def function_reference_name(expression: str) -> str | None:
    """Return the function name if *expression* is one (windowed) call."""
    scanned = ScannedText.of(expression)
    open_idx = next(
        (
            i
            for i, ch in enumerate(expression)
            if ch == "(" and scanned.is_plain(i) and scanned.states[i].depth == 1
        ),
        None,
    )
    if not open_idx:
        return None
    segments = split_identifier_chain(expression[:open_idx])
    if segments is None or segments[-1] == "*":
        return None
    close = scanned.matching_paren(open_idx)
    if close is None:
        return None
    if not _window_suffix_ok(expression[close + 1 :]):
        return None
    return segments[-1]


def parse_column_item(item: str) -> ColumnDescriptor | None:
    """Classify a single projection item.

    Returns
    -------
    ColumnDescriptor | None
        ``None`` for literals and unaliased complex expressions.
    """
    expression, alias = split_alias(item)
    if not expression or is_literal(expression):
        return None

    segments = split_identifier_chain(expression)
    if segments is not None:
        resolved = resolve_qualified_name(segments)
        return ColumnDescriptor(
            database_name=resolved.database,
            table_name=resolved.table,
            column=ColumnName(name=resolved.name, alias=alias),
            expression=expression,
        )

    function_name = function_reference_name(expression)
    if function_name is not None:
        return ColumnDescriptor(column=ColumnName(name=function_name, alias=alias), expression=expression)

    if alias is None:
        logger.debug("Dropping unaliased complex expression: %.80s", expression)
        return None
    return ColumnDescriptor(column=ColumnName(name=alias), expression=expression)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def projection_text(sql: str | ScannedText) -> str | None:
    """Return the raw projection list of a SELECT statement.

    The list runs from the end of the header to FROM, or to the next
    located clause when there is no FROM.
    """
    scanned = ScannedText.of(sql)
    header = decompose_select(scanned)
    if header is None:
        return None
    span = clause_span(scanned, Clause.SELECT)
    end = header.from_offset if header.from_offset is not None else len(scanned.text)
    if span is not None:
        end = min(end, span.end_offset)
    return scanned.text[header.projection_offset : end]


def parse_column_list(sql: str | ScannedText) -> list[ColumnDescriptor]:
    """Parse the projection of a preprocessed SELECT statement.

    Parameters
    ----------
    sql:
        Statement text with comments, USE and CTE prologues already removed.

    Returns
    -------
    list[ColumnDescriptor]
        Descriptors in projection order; empty for non-SELECT input.
    """
    projection = projection_text(sql)
    if projection is None:
        return []

    descriptors: list[ColumnDescriptor] = []
    for item in split_top_level(projection, (",",)):
        descriptor = parse_column_item(item)
        if descriptor is not None:
            descriptors.append(descriptor)
    return descriptors
