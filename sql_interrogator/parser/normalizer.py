"""Statement preprocessing ahead of analysis and rewriting.

The analysis core expects bare statement text.  The normaliser removes what
callers usually leave around it, in this order:

1. Replace every line and block comment with a single space.  Comment
   markers inside strings or delimited identifiers are left alone.
2. Drop leading ``USE <db>[;]`` prologues (each with an optional ``GO``)
   and standalone ``GO`` batch-separator lines.
3. Drop a leading ``WITH name AS (...)[, ...]`` CTE prologue, keeping the
   text from the first top-level ``SELECT`` after ``WITH``.
4. Trim surrounding whitespace; a blank result becomes ``None``.

All other whitespace is preserved, so offsets into the tail of a statement
stay meaningful for the rewriter.
"""

from __future__ import annotations

import logging
import re

from pydantic import BaseModel, Field

from sql_interrogator._types import Clause
from sql_interrogator.scanner.lexer import ScannedText
from sql_interrogator.scanner.locator import locate

logger = logging.getLogger(__name__)

_USE_RE = re.compile(
    r"""
    \s*USE\s+
    (?:\[[^\]]*\]|"[^"]*"|[\w@#$]+)
    \s*;?
    (?:\s*GO(?![\w@#$])\s*;?)?
    """,
    re.IGNORECASE | re.VERBOSE,
)
_GO_LINE_RE = re.compile(r"^[ \t]*GO[ \t]*;?[ \t]*$", re.IGNORECASE | re.MULTILINE)
_WITH_RE = re.compile(r"\s*;?\s*WITH(?![\w@#$])", re.IGNORECASE)


class PreprocessConfig(BaseModel):
    """Which preprocessing steps :func:`normalize_statement` applies."""

    strip_comments: bool = Field(
        default=True,
        description="Replace line and block comments with a single space.",
    )
    strip_use_statements: bool = Field(
        default=True,
        description="Remove leading USE prologues and GO separator lines.",
    )
    strip_ctes: bool = Field(
        default=True,
        description="Remove a leading WITH ... AS (...) prologue.",
    )


def strip_comments(sql: str) -> str:
    """Replace each comment in *sql* with one space."""
    scanned = ScannedText.of(sql)
    pieces: list[str] = []
    in_comment = False
    for ch, state in zip(sql, scanned.states):
        if state.in_comment:
            if not in_comment:
                pieces.append(" ")
                in_comment = True
            continue
        in_comment = False
        pieces.append(ch)
    return "".join(pieces)


def strip_use_statements(sql: str) -> str:
    """Remove leading ``USE`` prologues and every plain ``GO`` line."""
    result = sql
    match = _USE_RE.match(result)
    while match is not None:
        logger.debug("Dropping USE prologue: %s", match.group(0).strip())
        result = result[match.end() :]
        match = _USE_RE.match(result)

    scanned = ScannedText.of(result)
    pieces: list[str] = []
    cursor = 0
    for go in _GO_LINE_RE.finditer(result):
        if not scanned.is_plain(go.start()):
            continue
        pieces.append(result[cursor : go.start()])
        cursor = go.end()
    pieces.append(result[cursor:])
    return "".join(pieces)


def strip_cte_prologue(sql: str) -> str:
    """Keep the text from the first top-level SELECT after a leading ``WITH``.

    Text that does not start with ``WITH`` (optionally after ``;``), or has
    no top-level SELECT after it, is returned unchanged.
    """
    match = _WITH_RE.match(sql)
    if match is None:
        return sql
    select_offset = locate(ScannedText.of(sql), Clause.SELECT, start=match.end())
    if select_offset is None:
        logger.debug("CTE prologue without a top-level SELECT; left in place")
        return sql
    return sql[select_offset:]


def normalize_statement(sql: str | None, config: PreprocessConfig | None = None) -> str | None:
    """Prepare raw caller text for the analysis core.

    Parameters
    ----------
    sql:
        Raw statement text, possibly ``None``.
    config:
        Steps to apply.  Defaults to all of them.

    Returns
    -------
    str | None
        The normalised statement, or ``None`` when nothing but whitespace
        remains.
    """
    if sql is None:
        return None
    if config is None:
        config = PreprocessConfig()

    text = sql
    if config.strip_comments:
        text = strip_comments(text)
    if config.strip_use_statements:
        text = strip_use_statements(text)
    if config.strip_ctes:
        text = strip_cte_prologue(text)

    text = text.strip()
    if not text:
        logger.debug("Statement is blank after preprocessing")
        return None
    return text
