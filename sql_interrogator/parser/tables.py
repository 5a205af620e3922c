"""Table target discovery.

Targets are the identifier chains that follow a table-introducing keyword
in plain text at any parenthesis depth, so derived tables and subqueries
are searched too.  Two views are built on the same walk:

* the first FROM/JOIN target of a SELECT, for "which table is this about";
* the database segment of every qualified target, for any statement type.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from sql_interrogator._types import TableReference
from sql_interrogator.parser.identifiers import read_identifier_chain, resolve_table_reference
from sql_interrogator.scanner.lexer import ScannedText
from sql_interrogator.scanner.locator import is_select_statement, iter_keyword

logger = logging.getLogger(__name__)

SELECT_SOURCE_KEYWORDS: tuple[str, ...] = ("FROM", "JOIN")
TABLE_KEYWORDS: tuple[str, ...] = ("FROM", "JOIN", "INTO", "UPDATE", "TABLE", "MERGE", "USING")


def _skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def iter_table_targets(
    sql: str | ScannedText,
    keywords: Iterable[str] = TABLE_KEYWORDS,
) -> Iterator[tuple[list[str], bool]]:
    """Yield ``(segments, is_call)`` for every chain following *keywords*.

    Targets opening with ``(`` (derived tables, column lists) are skipped.
    ``is_call`` is True when the chain is directly followed by ``(``, as for
    a table-valued function.
    """
    scanned = ScannedText.of(sql)
    text = scanned.text
    matches: list[tuple[int, int]] = []
    for keyword in keywords:
        matches.extend(iter_keyword(scanned, keyword, top_level_only=False))
    matches.sort()

    for _, keyword_end in matches:
        pos = _skip_whitespace(text, keyword_end)
        if pos >= len(text) or text[pos] == "(":
            continue
        chain = read_identifier_chain(text, pos)
        if chain is None:
            continue
        segments, end = chain
        after = _skip_whitespace(text, end)
        yield segments, after < len(text) and text[after] == "("


def iter_table_references(sql: str | ScannedText) -> Iterator[TableReference]:
    """Yield a :class:`TableReference` for every table target in *sql*."""
    for segments, _ in iter_table_targets(sql):
        if segments[-1] == "*":
            continue
        yield resolve_table_reference(segments)


def first_table_name(sql: str | ScannedText) -> str | None:
    """Return the last segment of the first FROM/JOIN target of a SELECT.

    Returns
    -------
    str | None
        ``None`` for non-SELECT statements, or when every candidate is a
        derived table or a table-valued function.
    """
    scanned = ScannedText.of(sql)
    if not is_select_statement(scanned):
        logger.debug("Not a SELECT statement; no first table")
        return None
    for segments, is_call in iter_table_targets(scanned, SELECT_SOURCE_KEYWORDS):
        if is_call or not segments[-1] or segments[-1] == "*":
            continue
        return segments[-1]
    logger.debug("No table target after FROM or JOIN")
    return None


def database_names(sql: str | ScannedText) -> set[str]:
    """Return the database names referenced by qualified table targets.

    Names are de-duplicated case-insensitively; the first spelling seen is
    kept.
    """
    seen: dict[str, str] = {}
    for reference in iter_table_references(sql):
        database = reference.database
        if not database:
            continue
        seen.setdefault(database.casefold(), database)
    return set(seen.values())
