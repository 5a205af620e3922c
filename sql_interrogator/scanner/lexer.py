"""Quote-, bracket-, comment- and parenthesis-aware lexical scanner.

A single left-to-right pass classifies every character offset of a SQL
statement.  Rules, checked in priority order at each character:

1. Inside a string, quoted identifier, bracket or comment, only that
   construct's own terminator exits it.
2. ``'`` opens a string literal; a doubled ``''`` inside it is an escaped
   quote.
3. ``"`` opens a double-quoted identifier.
4. ``[`` opens a bracket identifier, closed by the next ``]``.
5. ``--`` opens a line comment (closed by newline) and ``/*`` a block
   comment (closed by ``*/``).
6. ``(`` increments depth and ``)`` decrements it, floored at 0.

Unterminated constructs run to the end of the text.  Delimiters report the
state of the construct they belong to; an opening ``(`` reports the
incremented depth and a closing ``)`` the depth before decrementing.
"""

from __future__ import annotations

import functools
from collections.abc import Iterator
from dataclasses import dataclass

from sql_interrogator._types import ScanMode, ScanState

# Characters that make up a bare (undelimited) identifier or keyword.
_EXTRA_WORD_CHARS = frozenset("_@#$")


def is_word_char(ch: str) -> bool:
    """Return True if *ch* can be part of a bare identifier or keyword."""
    return ch.isalnum() or ch in _EXTRA_WORD_CHARS


@functools.lru_cache(maxsize=1024)
def _state(mode: ScanMode, depth: int) -> ScanState:
    return ScanState(mode=mode, depth=depth)


def scan(text: str) -> tuple[ScanState, ...]:
    """Return the :class:`ScanState` of every offset in *text*.

    Parameters
    ----------
    text:
        Statement text.  May be empty.

    Returns
    -------
    tuple[ScanState, ...]
        One state per character; ``len(result) == len(text)``.
    """
    states: list[ScanState] = []
    append = states.append
    mode = ScanMode.PLAIN
    depth = 0
    n = len(text)
    i = 0

    while i < n:
        ch = text[i]

        if mode is ScanMode.PLAIN:
            if ch == "'":
                mode = ScanMode.SINGLE_QUOTE
                append(_state(mode, depth))
            elif ch == '"':
                mode = ScanMode.DOUBLE_QUOTE
                append(_state(mode, depth))
            elif ch == "[":
                mode = ScanMode.BRACKET
                append(_state(mode, depth))
            elif ch == "-" and text.startswith("--", i):
                mode = ScanMode.LINE_COMMENT
                append(_state(mode, depth))
                append(_state(mode, depth))
                i += 2
                continue
            elif ch == "/" and text.startswith("/*", i):
                mode = ScanMode.BLOCK_COMMENT
                append(_state(mode, depth))
                append(_state(mode, depth))
                i += 2
                continue
            elif ch == "(":
                depth += 1
                append(_state(mode, depth))
            elif ch == ")":
                append(_state(mode, depth))
                depth = max(depth - 1, 0)
            else:
                append(_state(mode, depth))

        elif mode is ScanMode.SINGLE_QUOTE:
            append(_state(mode, depth))
            if ch == "'":
                if text.startswith("''", i):
                    append(_state(mode, depth))
                    i += 2
                    continue
                mode = ScanMode.PLAIN

        elif mode is ScanMode.DOUBLE_QUOTE:
            append(_state(mode, depth))
            if ch == '"':
                mode = ScanMode.PLAIN

        elif mode is ScanMode.BRACKET:
            append(_state(mode, depth))
            if ch == "]":
                mode = ScanMode.PLAIN

        elif mode is ScanMode.LINE_COMMENT:
            if ch == "\n":
                mode = ScanMode.PLAIN
            append(_state(mode, depth))

        else:  # BLOCK_COMMENT
            if ch == "*" and text.startswith("*/", i):
                append(_state(mode, depth))
                append(_state(mode, depth))
                mode = ScanMode.PLAIN
                i += 2
                continue
            append(_state(mode, depth))

        i += 1

    return tuple(states)


@dataclass(frozen=True, slots=True)
class ScannedText:
    """Statement text paired with its per-offset scan states.

    Build one with :meth:`of` and pass it to several locator calls so the
    text is scanned only once per operation.
    """

    text: str
    states: tuple[ScanState, ...]

    @classmethod
    def of(cls, text: str | ScannedText) -> ScannedText:
        """Return *text* scanned, or unchanged if it already is."""
        if isinstance(text, ScannedText):
            return text
        return cls(text=text, states=scan(text))

    def __len__(self) -> int:
        return len(self.text)

    def is_top_level(self, offset: int) -> bool:
        """True if *offset* is plain text at depth 0."""
        return self.states[offset].is_top_level

    def is_plain(self, offset: int) -> bool:
        return self.states[offset].is_plain

    def iter_top_level(self, start: int = 0, end: int | None = None) -> Iterator[int]:
        """Yield the offsets in ``[start, end)`` that are plain at depth 0."""
        stop = len(self.text) if end is None else min(end, len(self.text))
        states = self.states
        for i in range(max(start, 0), stop):
            if states[i].is_top_level:
                yield i

    def matching_paren(self, open_offset: int) -> int | None:
        """Return the offset of the ``)`` closing the ``(`` at *open_offset*.

        Returns ``None`` when the parenthesis is never closed.
        """
        depth = self.states[open_offset].depth
        for i in range(open_offset + 1, len(self.text)):
            state = self.states[i]
            if state.is_plain and self.text[i] == ")" and state.depth == depth:
                return i
        return None
