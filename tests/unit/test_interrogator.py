"""Unit tests for sql_interrogator.interrogator (the public facade)."""

from __future__ import annotations

from functools import partial

import pytest

import sql_interrogator
from sql_interrogator import (
    ComparisonOperator,
    PreprocessConfig,
    compose,
    convert_to_select_count,
    convert_to_select_distinct,
    convert_to_select_order_by,
    convert_to_select_top,
    extract_column_details,
    extract_database_names,
    extract_first_table_name,
    extract_order_by_clause,
    extract_table_references,
    extract_top_number,
    extract_where_clauses,
)
from sql_interrogator.telemetry.profiling import ProfileCollector

# ---------------------------------------------------------------------------
# Concrete scenarios
# ---------------------------------------------------------------------------


class TestScenarios:
    def test_distinct(self) -> None:
        assert convert_to_select_distinct("SELECT Name FROM Users") == "SELECT DISTINCT Name FROM Users"

    def test_top_over_distinct(self) -> None:
        assert convert_to_select_top("SELECT DISTINCT Name FROM Users", 10) == "SELECT DISTINCT TOP 10 FROM Users"

    def test_count_over_distinct(self) -> None:
        assert convert_to_select_count("SELECT DISTINCT Name FROM Users") == (
            "SELECT COUNT(*) FROM (SELECT DISTINCT Name FROM Users) AS DistinctCount"
        )

    def test_order_by_with_pagination(self) -> None:
        sql = "SELECT * FROM Users ORDER BY Name ASC OFFSET 10 ROWS FETCH NEXT 20 ROWS ONLY"
        assert convert_to_select_order_by(sql, "Email DESC") == (
            "SELECT * FROM Users ORDER BY Email DESC OFFSET 10 ROWS FETCH NEXT 20 ROWS ONLY"
        )

    def test_where_clauses(self) -> None:
        predicates = extract_where_clauses("SELECT * FROM Users WHERE Id = 1 AND Active = 1")
        assert [(p.column.name, p.operator, p.value) for p in predicates] == [
            ("Id", ComparisonOperator.EQUAL, "1"),
            ("Active", ComparisonOperator.EQUAL, "1"),
        ]

    def test_top_number(self) -> None:
        assert extract_top_number("SELECT TOP(10) * FROM Users") == 10

    def test_qualified_name_round_trip(self) -> None:
        sql = "SELECT * FROM [A].[B].[C]"
        assert extract_first_table_name(sql) == "C"
        assert extract_database_names(sql) == {"A"}


# ---------------------------------------------------------------------------
# Null propagation
# ---------------------------------------------------------------------------


class TestNullPropagation:
    @pytest.mark.parametrize(
        "operation",
        [
            convert_to_select_count,
            convert_to_select_distinct,
            partial(convert_to_select_top, n=5),
            partial(convert_to_select_order_by, clause="Name"),
            extract_first_table_name,
            extract_order_by_clause,
        ],
    )
    def test_none_in_none_out(self, operation) -> None:
        assert operation(None) is None

    def test_collection_sentinels(self) -> None:
        assert extract_column_details(None) == []
        assert extract_where_clauses(None) == []
        assert extract_database_names(None) == set()
        assert extract_table_references(None) == []
        assert extract_top_number(None) == 0

    def test_chain_stays_none(self) -> None:
        pipeline = compose(convert_to_select_count, convert_to_select_distinct)
        assert pipeline("SELECT GETDATE()") is None


class TestNonSelectStatements:
    @pytest.mark.parametrize(
        "sql",
        [
            "UPDATE Users SET Active = 0 WHERE Id = 5 ORDER BY Id",
            "DELETE FROM Users WHERE Id = 5 ORDER BY Id",
        ],
    )
    def test_select_only_operations_return_sentinels(self, sql: str) -> None:
        assert extract_where_clauses(sql) == []
        assert extract_order_by_clause(sql) is None
        assert extract_column_details(sql) == []
        assert extract_first_table_name(sql) is None
        assert extract_top_number(sql) == 0
        assert convert_to_select_count(sql) is None

    def test_database_names_still_reported(self) -> None:
        assert extract_database_names("DELETE FROM Sales.dbo.Users WHERE Id = 5") == {"Sales"}


# ---------------------------------------------------------------------------
# Preprocessing
# ---------------------------------------------------------------------------


class TestPreprocessing:
    _RAW = (
        "USE [Sales];\nGO\n"
        "-- monthly report\n"
        ";WITH recent AS (SELECT * FROM Sales.dbo.Orders WHERE Total > 0)\n"
        "SELECT /* who */ r.CustomerId, r.Total AS Amount FROM recent r WHERE r.Total > 100 ORDER BY r.Total DESC"
    )

    def test_columns_after_cte(self) -> None:
        columns = extract_column_details(self._RAW)
        assert [(c.table_name, c.column_name, c.alias) for c in columns] == [
            ("r", "CustomerId", None),
            ("r", "Total", "Amount"),
        ]

    def test_where_after_cte(self) -> None:
        predicates = extract_where_clauses(self._RAW)
        assert [(p.column.name, p.value) for p in predicates] == [("r.Total", "100")]

    def test_first_table_after_cte(self) -> None:
        assert extract_first_table_name(self._RAW) == "recent"

    def test_database_names_search_cte_bodies(self) -> None:
        assert extract_database_names(self._RAW) == {"Sales"}

    def test_order_by_after_cte(self) -> None:
        assert extract_order_by_clause(self._RAW) == "ORDER BY r.Total DESC"

    def test_rewrite_drops_prologue(self) -> None:
        assert convert_to_select_count(self._RAW) == (
            "SELECT COUNT(*) FROM recent r WHERE r.Total > 100 ORDER BY r.Total DESC"
        )

    def test_commented_out_clause_is_ignored(self) -> None:
        sql = "SELECT * FROM Users -- WHERE Id = 1"
        assert extract_where_clauses(sql) == []

    def test_config_can_keep_comments(self) -> None:
        sql = "SELECT a FROM t -- ORDER BY a"
        config = PreprocessConfig(strip_comments=False)
        assert extract_order_by_clause(sql) is None
        assert extract_order_by_clause(sql, config=config) is None
        assert convert_to_select_distinct(sql, config=config) == "SELECT DISTINCT a FROM t -- ORDER BY a"

    def test_config_can_keep_cte(self) -> None:
        sql = "WITH c AS (SELECT 1 AS a) SELECT a FROM c"
        assert extract_first_table_name(sql, config=PreprocessConfig(strip_ctes=False)) is None
        assert extract_first_table_name(sql) == "c"


# ---------------------------------------------------------------------------
# Table references
# ---------------------------------------------------------------------------


class TestExtractTableReferences:
    def test_references_in_order(self) -> None:
        refs = extract_table_references("SELECT * FROM srv.Sales.dbo.Orders o JOIN dbo.Users u ON 1 = 1")
        assert [r.fully_qualified for r in refs] == ["srv.Sales.dbo.Orders", "dbo.Users"]


# ---------------------------------------------------------------------------
# Profiling
# ---------------------------------------------------------------------------


class TestProfiling:
    def test_calls_are_recorded(self) -> None:
        extract_top_number("SELECT TOP 1 * FROM t")
        extract_top_number("SELECT * FROM t")
        stats = ProfileCollector.get_instance().get_stats("sqli.extract_top_number")
        assert stats is not None
        assert stats.count == 2
        assert stats.total_chars == len("SELECT TOP 1 * FROM t") + len("SELECT * FROM t")

    def test_operation_names(self) -> None:
        convert_to_select_distinct("SELECT a FROM t")
        extract_column_details("SELECT a FROM t")
        assert ProfileCollector.get_instance().operations() == [
            "sqli.convert_to_select_distinct",
            "sqli.extract_column_details",
        ]

    def test_wrapped_names_preserved(self) -> None:
        assert extract_where_clauses.__name__ == "extract_where_clauses"


class TestPackageExports:
    def test_all_names_resolve(self) -> None:
        for name in sql_interrogator.__all__:
            assert hasattr(sql_interrogator, name)
