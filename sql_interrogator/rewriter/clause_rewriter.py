"""SELECT header and ORDER BY rewriting.

Every rewrite follows the same three steps:

1. **Validate.**  ``None``, blank text, a statement that does not start with
   a top-level SELECT, or one without a top-level FROM yields ``None``.
2. **Decompose.**  Find the end of the header (SELECT plus any
   DISTINCT/ALL/TOP) and the FROM offset, noting whether DISTINCT was
   already present.
3. **Rebuild.**  Emit a new upper-case header and append the unmodified
   tail from FROM onwards.

Only COUNT over a DISTINCT statement and ORDER BY replacement touch the
tail.  All functions are ``str | None -> str | None`` so they chain with
:func:`compose`; ``None`` in means ``None`` out.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from sql_interrogator._types import Clause, SelectHeader
from sql_interrogator.scanner.lexer import ScannedText
from sql_interrogator.scanner.locator import clause_span, decompose_select, is_select_statement, locate

logger = logging.getLogger(__name__)

Rewrite = Callable[[str | None], str | None]

_SELECT_KEYWORD_LEN = len("SELECT")
_ORDER_BY_PREFIX_RE = re.compile(r"ORDER\s+BY(?![\w@#$])", re.IGNORECASE)
_QUANTIFIER_RE = re.compile(r"(?:DISTINCT|ALL)(?![\w@#$])", re.IGNORECASE)


def _decompose(sql: str | None) -> tuple[ScannedText, SelectHeader] | None:
    """Validate *sql* and return its scan and header, or ``None``."""
    if sql is None or not sql.strip():
        return None
    scanned = ScannedText.of(sql)
    header = decompose_select(scanned)
    if header is None:
        logger.debug("Rewrite skipped: not a SELECT statement")
        return None
    if header.from_offset is None:
        logger.debug("Rewrite skipped: no top-level FROM")
        return None
    return scanned, header


# ---------------------------------------------------------------------------
# Header rewrites
# ---------------------------------------------------------------------------


def to_select_count(sql: str | None) -> str | None:
    """Turn the projection into ``COUNT(*)``.

    A DISTINCT statement is wrapped whole, as
    ``SELECT COUNT(*) FROM (<statement>) AS DistinctCount``, because
    replacing its projection would change the row count.
    """
    decomposed = _decompose(sql)
    if decomposed is None:
        return None
    scanned, header = decomposed
    text = scanned.text
    prefix = text[: header.select_offset]

    if header.distinct:
        terminator = locate(scanned, Clause.TERMINATOR, start=header.select_offset)
        end = len(text) if terminator is None else terminator
        inner = text[header.select_offset : end].rstrip()
        return f"{prefix}SELECT COUNT(*) FROM ({inner}) AS DistinctCount{text[end:]}"

    return f"{prefix}SELECT COUNT(*) {text[header.from_offset :]}"


def to_select_top(sql: str | None, n: int) -> str | None:
    """Replace the header with ``SELECT [DISTINCT ]TOP n``.

    The projection is dropped and any existing TOP is replaced.  ``n`` must
    be positive.
    """
    if n <= 0:
        logger.debug("Rewrite skipped: TOP value must be positive, got %d", n)
        return None
    decomposed = _decompose(sql)
    if decomposed is None:
        return None
    scanned, header = decomposed
    text = scanned.text
    keyword = f"SELECT DISTINCT TOP {n}" if header.distinct else f"SELECT TOP {n}"
    return f"{text[: header.select_offset]}{keyword} {text[header.from_offset :]}"


def to_select_distinct(sql: str | None) -> str | None:
    """Make the header ``SELECT DISTINCT``, keeping projection and TOP.

    Idempotent; an existing ``ALL`` quantifier is replaced.
    """
    decomposed = _decompose(sql)
    if decomposed is None:
        return None
    scanned, header = decomposed
    text = scanned.text
    rest = text[header.select_offset + _SELECT_KEYWORD_LEN :].lstrip()
    if header.distinct or header.all_rows:
        quantifier = _QUANTIFIER_RE.match(rest)
        if quantifier is not None:
            rest = rest[quantifier.end() :].lstrip()
    return f"{text[: header.select_offset]}SELECT DISTINCT {rest}"


# ---------------------------------------------------------------------------
# ORDER BY
# ---------------------------------------------------------------------------


def _clean_order_by(clause: str | None) -> str | None:
    if clause is None:
        return None
    cleaned = clause.strip()
    prefix = _ORDER_BY_PREFIX_RE.match(cleaned)
    if prefix is not None:
        cleaned = cleaned[prefix.end() :].strip()
    return cleaned or None


def to_select_order_by(sql: str | None, clause: str | None) -> str | None:
    """Replace or insert the statement's ORDER BY clause.

    Any ``OFFSET ... [FETCH ...]`` pagination suffix is lifted out first and
    re-appended after the new clause.  Text from a top-level ``;`` onwards is
    kept as is.

    Parameters
    ----------
    sql:
        Preprocessed SELECT statement.
    clause:
        New ordering, with or without a leading ``ORDER BY``.
    """
    order_by = _clean_order_by(clause)
    if order_by is None:
        logger.debug("Rewrite skipped: blank ORDER BY clause")
        return None
    decomposed = _decompose(sql)
    if decomposed is None:
        return None
    scanned, header = decomposed
    text = scanned.text

    terminator = locate(scanned, Clause.TERMINATOR, start=header.from_offset)
    body_end = len(text) if terminator is None else terminator
    existing = locate(scanned, Clause.ORDER_BY, start=header.from_offset, end=body_end)
    offset = locate(scanned, Clause.OFFSET, start=header.from_offset, end=body_end)

    cut = min((o for o in (existing, offset) if o is not None), default=body_end)
    pagination = text[offset:body_end].strip() if offset is not None else ""

    rebuilt = f"{text[:cut].rstrip()} ORDER BY {order_by}"
    if pagination:
        rebuilt = f"{rebuilt} {pagination}"
    return rebuilt + text[body_end:]


# ---------------------------------------------------------------------------
# Header inspection
# ---------------------------------------------------------------------------


def order_by_clause(sql: str | None) -> str | None:
    """Return the ORDER BY clause of a SELECT as written, without any pagination suffix."""
    if sql is None:
        return None
    scanned = ScannedText.of(sql)
    if not is_select_statement(scanned):
        logger.debug("Not a SELECT statement; no ORDER BY clause")
        return None
    span = clause_span(scanned, Clause.ORDER_BY)
    if span is None:
        return None
    return span.text(scanned.text).strip() or None


def top_number(sql: str | None) -> int:
    """Return the literal TOP value of a SELECT, or 0 when absent."""
    if sql is None:
        return 0
    header = decompose_select(sql)
    if header is None or header.top is None:
        return 0
    return header.top


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def compose(*operations: Rewrite) -> Rewrite:
    """Chain rewrites left to right, stopping at the first ``None``.

    >>> from functools import partial
    >>> pipeline = compose(to_select_distinct, partial(to_select_top, n=5))
    >>> pipeline("SELECT Name FROM Users")
    'SELECT DISTINCT TOP 5 FROM Users'
    """

    def pipeline(sql: str | None) -> str | None:
        result = sql
        for operation in operations:
            if result is None:
                return None
            result = operation(result)
        return result

    return pipeline
