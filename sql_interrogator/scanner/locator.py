"""Clause boundary location on top of the lexical scanner.

Keywords are matched case-insensitively, as whole words, only where the
scanner reports plain text at parenthesis depth 0.  Multi-word keywords
(``GROUP BY``, ``ORDER BY``, ``NOT IN``, ``IS NOT``) match with any run of
whitespace between their words.

Clause spans are carved in precedence order::

    SELECT < FROM < WHERE < GROUP BY < HAVING < ORDER BY < OFFSET
           < (UNION | EXCEPT | INTERSECT | ; | end of text)

Each span ends at the next located keyword of higher precedence, or at the
end of the text.
"""

from __future__ import annotations

import functools
import logging
import re
from collections.abc import Iterable, Iterator

from sql_interrogator._types import Clause, ClauseSpan, SelectHeader
from sql_interrogator.scanner.lexer import ScannedText, is_word_char

logger = logging.getLogger(__name__)

_PRECEDENCE: tuple[Clause, ...] = (
    Clause.SELECT,
    Clause.FROM,
    Clause.WHERE,
    Clause.GROUP_BY,
    Clause.HAVING,
    Clause.ORDER_BY,
    Clause.OFFSET,
)

# Clauses that always close the current statement part.
_SET_BOUNDARIES: tuple[Clause, ...] = (
    Clause.UNION,
    Clause.EXCEPT,
    Clause.INTERSECT,
    Clause.TERMINATOR,
)

# Everything after SELECT up to the projection:
#   [DISTINCT | ALL] [TOP n | TOP (expr) [PERCENT] [WITH TIES]]
# A parenthesised TOP argument may nest two levels of parentheses.
_HEADER_RE = re.compile(
    r"""
    \s*
    (?:(?P<quantifier>DISTINCT|ALL)(?![\w@#$])\s*)?
    (?:
        TOP\s*
        (?:\((?P<paren>(?:[^()]|\((?:[^()]|\([^()]*\))*\))*)\)|(?<=\s)(?P<bare>\d+)(?![\w@#$]))
        (?P<percent>\s+PERCENT(?![\w@#$]))?
        (?:\s+WITH\s+TIES(?![\w@#$]))?
        \s*
    )?
    """,
    re.IGNORECASE | re.VERBOSE,
)
_TOP_LITERAL_RE = re.compile(r"[0-9]+")
# TOP takes a BIGINT row count.
_TOP_MAX = 2**63 - 1


@functools.lru_cache(maxsize=128)
def keyword_pattern(keyword: str) -> re.Pattern[str]:
    """Compile *keyword* so internal spaces match any whitespace run."""
    words = keyword.split()
    return re.compile(r"\s+".join(re.escape(w) for w in words), re.IGNORECASE)


def _matches_at(scanned: ScannedText, offset: int, keyword: str) -> int | None:
    """Return the end offset of a whole-word *keyword* match at *offset*."""
    text = scanned.text
    match = keyword_pattern(keyword).match(text, offset)
    if match is None:
        return None
    end = match.end()
    if keyword[0].isalpha() or keyword[0] == "_":
        if offset > 0 and is_word_char(text[offset - 1]):
            return None
        if end < len(text) and is_word_char(text[end]):
            return None
    return end


def iter_keyword(
    text: str | ScannedText,
    keyword: str,
    *,
    start: int = 0,
    end: int | None = None,
    top_level_only: bool = True,
) -> Iterator[tuple[int, int]]:
    """Yield ``(start, end)`` offsets of every match of *keyword*.

    Parameters
    ----------
    text:
        Raw or pre-scanned statement text.
    keyword:
        Keyword or operator, e.g. ``"ORDER BY"`` or ``";"``.
    start, end:
        Optional search window.
    top_level_only:
        When False, matches at any parenthesis depth are yielded as long as
        they are in plain text.
    """
    scanned = ScannedText.of(text)
    first = keyword[0].upper()
    stop = len(scanned.text) if end is None else min(end, len(scanned.text))
    states = scanned.states
    source = scanned.text
    for i in range(max(start, 0), stop):
        state = states[i]
        if not state.is_plain or (top_level_only and state.depth != 0):
            continue
        if source[i].upper() != first:
            continue
        match_end = _matches_at(scanned, i, keyword)
        if match_end is not None:
            yield i, match_end


def locate(
    text: str | ScannedText,
    keyword: str | Clause,
    *,
    start: int = 0,
    end: int | None = None,
) -> int | None:
    """Return the offset of the first top-level match of *keyword*, if any."""
    value = keyword.value if isinstance(keyword, Clause) else keyword
    for offset, _ in iter_keyword(text, value, start=start, end=end):
        return offset
    return None


def locate_span(
    text: str | ScannedText,
    keyword: str | Clause,
    *,
    start: int = 0,
    end: int | None = None,
) -> tuple[int, int] | None:
    """Like :func:`locate` but return ``(start, end)`` of the keyword token."""
    value = keyword.value if isinstance(keyword, Clause) else keyword
    for match in iter_keyword(text, value, start=start, end=end):
        return match
    return None


def statement_end(text: str | ScannedText, start: int = 0) -> int:
    """Return the offset of the first set operator or ``;`` after *start*."""
    scanned = ScannedText.of(text)
    candidates = [locate(scanned, clause, start=start) for clause in _SET_BOUNDARIES]
    found = [c for c in candidates if c is not None]
    return min(found) if found else len(scanned.text)


def clause_span(text: str | ScannedText, clause: Clause) -> ClauseSpan | None:
    """Return the span owned by *clause*, or ``None`` if it is not located.

    The span runs from the keyword to the next located keyword of higher
    precedence, a set operator, ``;``, or the end of the text.
    """
    scanned = ScannedText.of(text)
    token = locate_span(scanned, clause)
    if token is None:
        return None
    keyword_start, body_start = token

    if clause in _SET_BOUNDARIES:
        return ClauseSpan(clause, keyword_start, body_start, body_start)

    end = statement_end(scanned, body_start)
    index = _PRECEDENCE.index(clause)
    for later in _PRECEDENCE[index + 1 :]:
        found = locate(scanned, later, start=body_start, end=end)
        if found is not None:
            end = min(end, found)
    return ClauseSpan(clause, keyword_start, end, body_start)


def clause_body(text: str | ScannedText, clause: Clause) -> str | None:
    """Return the stripped body of *clause*, or ``None`` if absent."""
    scanned = ScannedText.of(text)
    span = clause_span(scanned, clause)
    if span is None:
        return None
    return span.body(scanned.text).strip()


def split_top_level(
    text: str | ScannedText,
    separators: Iterable[str] = (",",),
) -> list[str]:
    """Split *text* on top-level occurrences of any of *separators*.

    Word separators such as ``"AND"`` match as whole words; punctuation
    separators match literally.  Empty pieces are dropped.
    """
    scanned = ScannedText.of(text)
    source = scanned.text
    seps = list(separators)
    matches: list[tuple[int, int]] = []
    for sep in seps:
        matches.extend(iter_keyword(scanned, sep))
    matches.sort()

    pieces: list[str] = []
    cursor = 0
    for match_start, match_end in matches:
        if match_start < cursor:
            continue
        pieces.append(source[cursor:match_start])
        cursor = match_end
    pieces.append(source[cursor:])
    return [p for p in (piece.strip() for piece in pieces) if p]


def is_select_statement(text: str | ScannedText) -> bool:
    """True if the (preprocessed) text begins with a top-level SELECT."""
    scanned = ScannedText.of(text)
    source = scanned.text
    leading = len(source) - len(source.lstrip())
    if leading >= len(source):
        return False
    return locate(scanned, Clause.SELECT, start=leading, end=leading + 1) == leading


def _top_value(text: str | None) -> int | None:
    """Return a literal TOP argument as an int, or ``None`` if it is not one."""
    if text is None:
        return None
    literal = text.strip()
    if not _TOP_LITERAL_RE.fullmatch(literal):
        return None
    value = int(literal)
    if value > _TOP_MAX:
        logger.debug("TOP value out of range: %s", literal)
        return None
    return value


def decompose_select(text: str | ScannedText) -> SelectHeader | None:
    """Decompose the header of a SELECT statement.

    Returns
    -------
    SelectHeader | None
        ``None`` if the text does not start with a top-level SELECT.
    """
    scanned = ScannedText.of(text)
    if not is_select_statement(scanned):
        logger.debug("Not a SELECT statement; header decomposition skipped")
        return None

    source = scanned.text
    select_start, select_end = locate_span(scanned, Clause.SELECT)  # type: ignore[misc]
    match = _HEADER_RE.match(source, select_end)
    projection = match.end() if match else select_end

    quantifier = (match.group("quantifier") or "").upper() if match else ""
    top_text = (match.group("paren") or match.group("bare")) if match else None
    from_offset = locate(scanned, Clause.FROM, start=projection, end=statement_end(scanned, projection))

    return SelectHeader(
        select_offset=select_start,
        projection_offset=projection,
        from_offset=from_offset,
        distinct=quantifier == "DISTINCT",
        all_rows=quantifier == "ALL",
        top=_top_value(top_text),
        top_percent=bool(match and match.group("percent")),
    )
