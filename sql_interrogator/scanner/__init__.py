"""Lexical scanning and clause boundary location."""

from sql_interrogator.scanner.lexer import ScannedText, is_word_char, scan
from sql_interrogator.scanner.locator import (
    clause_body,
    clause_span,
    decompose_select,
    is_select_statement,
    iter_keyword,
    locate,
    locate_span,
    split_top_level,
    statement_end,
)

__all__ = [
    "ScannedText",
    "clause_body",
    "clause_span",
    "decompose_select",
    "is_select_statement",
    "is_word_char",
    "iter_keyword",
    "locate",
    "locate_span",
    "scan",
    "split_top_level",
    "statement_end",
]
