"""Shared value types for the interrogator.

Scanner and locator types are frozen, slotted dataclasses.  Descriptors that
leave the package through the public API are pydantic models so they can be
serialised by the CLI without extra glue.

ZERO dependency on any other sql_interrogator module.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class InterrogatorError(Exception):
    """Base for all sql_interrogator errors raised at the outer surfaces."""


class InvalidInputError(InterrogatorError):
    """Raised when no SQL text could be obtained from the caller."""


# ---------------------------------------------------------------------------
# Scanner state
# ---------------------------------------------------------------------------


class ScanMode(str, enum.Enum):
    """Lexical context of a single character offset."""

    PLAIN = "plain"
    SINGLE_QUOTE = "single_quote"
    DOUBLE_QUOTE = "double_quote"
    BRACKET = "bracket"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"


@dataclass(frozen=True, slots=True)
class ScanState:
    """Scanner state at one offset.

    A single ``mode`` replaces the six mutually exclusive flags, so at most
    one string/comment flag can ever be true.
    """

    mode: ScanMode = ScanMode.PLAIN
    depth: int = 0

    @property
    def is_plain(self) -> bool:
        return self.mode is ScanMode.PLAIN

    @property
    def is_top_level(self) -> bool:
        """Plain text at parenthesis depth 0."""
        return self.mode is ScanMode.PLAIN and self.depth == 0

    @property
    def in_single_quote(self) -> bool:
        return self.mode is ScanMode.SINGLE_QUOTE

    @property
    def in_double_quote(self) -> bool:
        return self.mode is ScanMode.DOUBLE_QUOTE

    @property
    def in_bracket(self) -> bool:
        return self.mode is ScanMode.BRACKET

    @property
    def in_line_comment(self) -> bool:
        return self.mode is ScanMode.LINE_COMMENT

    @property
    def in_block_comment(self) -> bool:
        return self.mode is ScanMode.BLOCK_COMMENT

    @property
    def in_comment(self) -> bool:
        return self.mode in (ScanMode.LINE_COMMENT, ScanMode.BLOCK_COMMENT)


# ---------------------------------------------------------------------------
# Clause location
# ---------------------------------------------------------------------------


class Clause(str, enum.Enum):
    """Top-level keywords the locator carves spans for, in precedence order."""

    SELECT = "SELECT"
    FROM = "FROM"
    WHERE = "WHERE"
    GROUP_BY = "GROUP BY"
    HAVING = "HAVING"
    ORDER_BY = "ORDER BY"
    OFFSET = "OFFSET"
    UNION = "UNION"
    EXCEPT = "EXCEPT"
    INTERSECT = "INTERSECT"
    TERMINATOR = ";"


@dataclass(frozen=True, slots=True)
class ClauseSpan:
    """Half-open range ``[start_offset, end_offset)`` owned by a clause keyword.

    ``body_offset`` is the first offset after the keyword token itself.
    """

    keyword: Clause
    start_offset: int
    end_offset: int
    body_offset: int

    def text(self, sql: str) -> str:
        """Return the full span, keyword included."""
        return sql[self.start_offset : self.end_offset]

    def body(self, sql: str) -> str:
        """Return the span without its keyword."""
        return sql[self.body_offset : self.end_offset]


@dataclass(frozen=True, slots=True)
class SelectHeader:
    """Decomposed ``SELECT [DISTINCT|ALL] [TOP n [PERCENT] [WITH TIES]]`` header."""

    select_offset: int
    projection_offset: int
    from_offset: int | None = None
    distinct: bool = False
    all_rows: bool = False
    top: int | None = None
    top_percent: bool = False

    @property
    def has_from(self) -> bool:
        return self.from_offset is not None


# ---------------------------------------------------------------------------
# Identifier references
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class QualifiedName:
    """Result of collapsing an identifier chain to ``(database, table, name)``."""

    database: str | None = None
    table: str | None = None
    name: str = ""


@dataclass(frozen=True, slots=True)
class TableReference:
    """A table target found after FROM, JOIN, INTO, UPDATE, TABLE, MERGE or USING."""

    server: str | None = None
    database: str | None = None
    schema: str | None = None
    name: str = ""

    @property
    def fully_qualified(self) -> str:
        """Return ``server.database.schema.name``, omitting None parts."""
        parts = [p for p in (self.server, self.database, self.schema, self.name) if p]
        return ".".join(parts)

    def __str__(self) -> str:
        return self.fully_qualified


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


class ColumnName(BaseModel):
    """A column name plus its optional alias."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Column, function or promoted alias name.")
    alias: str | None = Field(
        default=None,
        description="Alias for simple column/function references only.",
    )


class ColumnDescriptor(BaseModel):
    """One projected item of a SELECT list."""

    model_config = ConfigDict(frozen=True)

    database_name: str | None = Field(
        default=None,
        description="First segment of a three-or-more part identifier chain.",
    )
    table_name: str | None = Field(
        default=None,
        description="Second-to-last segment of a qualified identifier chain.",
    )
    column: ColumnName = Field(description="Resolved column name and alias.")
    expression: str | None = Field(
        default=None,
        description="Raw expression text of the item, without its alias.",
    )

    @property
    def column_name(self) -> str:
        return self.column.name

    @property
    def alias(self) -> str | None:
        return self.column.alias


class ComparisonOperator(str, enum.Enum):
    """Comparison operators in longest-match-first precedence order."""

    IS_NOT = "IS NOT"
    NOT_LIKE = "NOT LIKE"
    NOT_IN = "NOT IN"
    IS = "IS"
    NOT_EQUAL_ANSI = "<>"
    GREATER_EQUAL = ">="
    LESS_EQUAL = "<="
    NOT_EQUAL = "!="
    LIKE = "LIKE"
    IN = "IN"
    EQUAL = "="
    GREATER = ">"
    LESS = "<"


class PredicateDescriptor(BaseModel):
    """One ``operand operator operand`` fragment of a WHERE clause."""

    model_config = ConfigDict(frozen=True)

    column: ColumnName = Field(description="Left operand as a single dotted name.")
    operator: ComparisonOperator = Field(description="Canonical comparison operator.")
    value: str = Field(description="Right operand, verbatim.")
