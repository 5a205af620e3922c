"""Unit tests for sql_interrogator.parser.tables."""

from __future__ import annotations

import pytest

from sql_interrogator._types import TableReference
from sql_interrogator.parser.tables import (
    SELECT_SOURCE_KEYWORDS,
    database_names,
    first_table_name,
    iter_table_references,
    iter_table_targets,
)

# ---------------------------------------------------------------------------
# Target walk
# ---------------------------------------------------------------------------


class TestIterTableTargets:
    def test_marks_calls(self) -> None:
        targets = list(iter_table_targets("SELECT * FROM dbo.fn(1) f JOIN Orders o ON 1 = 1"))
        assert targets == [(["dbo", "fn"], True), (["Orders"], False)]

    def test_skips_derived_tables(self) -> None:
        targets = list(iter_table_targets("SELECT * FROM (SELECT * FROM Users) AS u", SELECT_SOURCE_KEYWORDS))
        assert targets == [(["Users"], False)]

    def test_keywords_in_strings_are_ignored(self) -> None:
        assert list(iter_table_targets("SELECT 'FROM x' AS a")) == []


class TestIterTableReferences:
    def test_resolves_parts(self) -> None:
        refs = list(iter_table_references("SELECT * FROM srv.Sales.dbo.Orders o JOIN dbo.Users u ON 1 = 1"))
        assert refs == [
            TableReference(server="srv", database="Sales", schema="dbo", name="Orders"),
            TableReference(schema="dbo", name="Users"),
        ]


# ---------------------------------------------------------------------------
# First table
# ---------------------------------------------------------------------------


class TestFirstTableName:
    @pytest.mark.parametrize(
        ("sql", "expected"),
        [
            ("SELECT * FROM Users", "Users"),
            ("SELECT * FROM dbo.Users", "Users"),
            ("SELECT * FROM [A].[B].[C]", "C"),
            ("SELECT * FROM [srv].[db].[dbo].[Users]", "Users"),
            ('SELECT * FROM "dbo"."Users"', "Users"),
            ("SELECT * FROM [dbo].Users u", "Users"),
            ("SELECT * FROM Users WITH (NOLOCK)", "Users"),
            ("SELECT * FROM Users u WITH (NOLOCK) JOIN Orders o ON o.UserId = u.Id", "Users"),
            ("SELECT * FROM (SELECT * FROM [db].[dbo].[Users]) AS u", "Users"),
            ("SELECT * FROM dbo.fn_GetUsers(1) f JOIN Orders o ON 1 = 1", "Orders"),
            ("select * from users", "users"),
            ("SELECT * FROM db..Users", "Users"),
        ],
    )
    def test_first_table(self, sql: str, expected: str) -> None:
        assert first_table_name(sql) == expected

    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT GETDATE()",
            "SELECT 1 + 1 AS Result",
            "UPDATE Users SET Active = 0",
            "INSERT INTO Users (Name) VALUES ('x')",
            "DELETE FROM Users",
            "",
        ],
    )
    def test_no_first_table(self, sql: str) -> None:
        assert first_table_name(sql) is None


# ---------------------------------------------------------------------------
# Database names
# ---------------------------------------------------------------------------


class TestDatabaseNames:
    @pytest.mark.parametrize(
        ("sql", "expected"),
        [
            ("SELECT * FROM [A].[B].[C]", {"A"}),
            ("SELECT * FROM srv.Sales.dbo.Orders", {"Sales"}),
            ("SELECT * FROM a.b.c.d.e", {"a"}),
            ("SELECT * FROM dbo.Users", set()),
            ("SELECT * FROM Users", set()),
            ("SELECT * FROM db..Users", {"db"}),
            (
                "SELECT * FROM Sales.dbo.Orders o JOIN HR.dbo.Staff s ON s.Id = o.StaffId",
                {"Sales", "HR"},
            ),
            (
                "SELECT * FROM Users WHERE Id IN (SELECT UserId FROM Audit.dbo.Log)",
                {"Audit"},
            ),
            ("INSERT INTO db1.dbo.T (a) SELECT a FROM db2.dbo.S", {"db1", "db2"}),
            ("UPDATE db1.dbo.T SET a = 1", {"db1"}),
            ("DELETE FROM db1.dbo.T WHERE a = 1", {"db1"}),
            ("CREATE TABLE db1.dbo.T (a INT)", {"db1"}),
            (
                "MERGE INTO db1.dbo.T AS t USING db2.dbo.S AS s ON t.Id = s.Id "
                "WHEN MATCHED THEN UPDATE SET t.a = s.a;",
                {"db1", "db2"},
            ),
            ("SELECT * FROM Продажи.dbo.Заказы", {"Продажи"}),
        ],
    )
    def test_database_names(self, sql: str, expected: set[str]) -> None:
        assert database_names(sql) == expected

    def test_case_insensitive_dedupe_keeps_first_spelling(self) -> None:
        sql = "SELECT * FROM Sales.dbo.A JOIN sales.dbo.B ON 1 = 1 JOIN SALES.dbo.C ON 1 = 1"
        assert database_names(sql) == {"Sales"}
