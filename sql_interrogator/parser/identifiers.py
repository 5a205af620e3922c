"""Qualified identifier splitting and resolution.

An identifier chain is a dotted sequence of segments, each of which is a bare
word, a ``[bracketed]`` name or a ``"double-quoted"`` name.  Splitting and
resolution are separate pure functions so a catalog-aware resolver can
replace :func:`resolve_qualified_name` without touching the scanner.

Resolution rule (deliberately catalog-unaware)::

    N == 1  ->  (None,   None,     seg0)
    N == 2  ->  (None,   seg0,     seg1)
    N >= 3  ->  (seg0,   seg[N-2], seg[N-1])

Middle segments are discarded whatever N is, so a five-part chain reports
its first segment (the server) as the database.  That is existing
behaviour and is kept as is.
"""

from __future__ import annotations

from collections.abc import Sequence

from sql_interrogator._types import QualifiedName, TableReference
from sql_interrogator.scanner.lexer import is_word_char

_CLOSERS = {"[": "]", '"': '"'}


def _read_segment(text: str, pos: int) -> tuple[str, int] | None:
    """Read one chain segment starting at *pos*."""
    if pos >= len(text):
        return None
    ch = text[pos]
    if ch in _CLOSERS:
        close = text.find(_CLOSERS[ch], pos + 1)
        if close == -1:
            return None
        return text[pos + 1 : close], close + 1
    if ch == "*":
        return "*", pos + 1
    end = pos
    while end < len(text) and is_word_char(text[end]):
        end += 1
    if end == pos:
        return None
    return text[pos:end], end


def read_identifier_chain(text: str, pos: int = 0) -> tuple[list[str], int] | None:
    """Read an identifier chain starting exactly at *pos*.

    Parameters
    ----------
    text:
        Source text.
    pos:
        Offset of the first segment.

    Returns
    -------
    tuple[list[str], int] | None
        The unwrapped segments and the offset just past the chain, or
        ``None`` if no segment starts at *pos*.  ``db..table`` yields an
        empty middle segment.
    """
    first = _read_segment(text, pos)
    if first is None:
        return None
    segment, cursor = first
    segments = [segment]

    while segment != "*" and cursor < len(text) and text[cursor] == ".":
        if cursor + 1 < len(text) and text[cursor + 1] == ".":
            segments.append("")
            cursor += 1
            continue
        nxt = _read_segment(text, cursor + 1)
        if nxt is None:
            break
        segment, cursor = nxt
        segments.append(segment)

    return segments, cursor


def split_identifier_chain(text: str) -> list[str] | None:
    """Split *text* into chain segments, or ``None`` if it is not a pure chain.

    >>> split_identifier_chain("[dbo].Users.[First Name]")
    ['dbo', 'Users', 'First Name']
    """
    candidate = text.strip()
    if not candidate:
        return None
    result = read_identifier_chain(candidate, 0)
    if result is None:
        return None
    segments, end = result
    if end != len(candidate):
        return None
    return segments


def resolve_qualified_name(segments: Sequence[str]) -> QualifiedName:
    """Collapse *segments* to ``(database, table, name)``.

    Raises
    ------
    ValueError
        If *segments* is empty.
    """
    count = len(segments)
    if count == 0:
        raise ValueError("An identifier chain needs at least one segment")
    if count == 1:
        return QualifiedName(name=segments[0])
    if count == 2:
        return QualifiedName(table=segments[0], name=segments[1])
    return QualifiedName(database=segments[0], table=segments[-2], name=segments[-1])


def resolve_table_reference(segments: Sequence[str]) -> TableReference:
    """Interpret *segments* as a ``[server.][database.][schema.]table`` target.

    Chains longer than four segments fall back to
    :func:`resolve_qualified_name` for the database part.
    """
    count = len(segments)
    if count == 0:
        raise ValueError("A table reference needs at least one segment")
    if count == 1:
        return TableReference(name=segments[0])
    if count == 2:
        return TableReference(schema=segments[0], name=segments[1])
    if count == 3:
        return TableReference(database=segments[0], schema=segments[1], name=segments[2])
    if count == 4:
        return TableReference(
            server=segments[0],
            database=segments[1],
            schema=segments[2],
            name=segments[3],
        )
    resolved = resolve_qualified_name(segments)
    return TableReference(database=resolved.database, schema=resolved.table, name=resolved.name)


def unwrap_identifier(text: str) -> str:
    """Strip one layer of ``[]``, ``""`` or ``''`` delimiters from *text*."""
    candidate = text.strip()
    if len(candidate) >= 2:
        pairs = {"[": "]", '"': '"', "'": "'"}
        closer = pairs.get(candidate[0])
        if closer is not None and candidate.endswith(closer):
            return candidate[1:-1]
    return candidate


def dotted_name(text: str) -> str:
    """Render an identifier chain as a single dotted string.

    Text that is not a pure chain is returned stripped but otherwise
    unchanged.
    """
    segments = split_identifier_chain(text)
    if segments is None:
        return text.strip()
    return ".".join(segments)
