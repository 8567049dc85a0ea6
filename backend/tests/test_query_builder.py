from datetime import datetime

from sensor_api.services import build_select_query
from sensor_api.services.database import DEFAULT_LIMIT, SELECT_COLUMNS

START = datetime(2025, 1, 1)
END = datetime(2025, 1, 31, 23, 59, 59)


def _compile(query):
    compiled = query.compile()
    return str(compiled), list(compiled.params.values())


def test_selects_every_column_in_order() -> None:
    query = build_select_query(10)
    assert [column.name for column in query.selected_columns] == list(SELECT_COLUMNS)
    assert SELECT_COLUMNS[:3] == ("id", "location", "recTime")
    assert SELECT_COLUMNS[3:] == (
        "temp", "rH", "VOC", "NOx", "pmass1", "pmass25", "pmass4", "pmass10", "HCHO", "CO2", "indoorTd",
    )


def test_no_bounds_means_no_where_clause() -> None:
    sql, params = _compile(build_select_query(10))

    assert "WHERE" not in sql
    assert "ORDER BY" in sql and "DESC" in sql
    assert "LIMIT" in sql
    assert params == [10]


def test_start_only_adds_one_comparison() -> None:
    sql, params = _compile(build_select_query(10, start=START))

    assert "WHERE" in sql
    assert sql.count(">=") == 1
    assert "<=" not in sql
    assert params == [START, 10]


def test_end_only_adds_one_comparison() -> None:
    sql, params = _compile(build_select_query(10, end=END))

    assert sql.count("<=") == 1
    assert ">=" not in sql
    assert params == [END, 10]


def test_both_bounds_are_joined_with_and() -> None:
    sql, params = _compile(build_select_query(50, start=START, end=END))

    where = sql.split("WHERE", 1)[1].split("ORDER BY", 1)[0]
    assert ">=" in where and "<=" in where
    assert " AND " in where
    assert params == [START, END, 50]


def test_orders_newest_first() -> None:
    sql, _ = _compile(build_select_query(10))
    order_by = sql.split("ORDER BY", 1)[1]
    assert "recTime" in order_by
    assert "DESC" in order_by


def test_non_positive_limit_falls_back_to_default() -> None:
    for limit in (0, -1):
        _, params = _compile(build_select_query(limit))
        assert params == [DEFAULT_LIMIT]
    assert DEFAULT_LIMIT == 15000


def test_filter_values_are_bound_not_inlined() -> None:
    nasty = "2025-01-01' OR '1'='1"
    sql, params = _compile(build_select_query(10, start=nasty))

    assert nasty not in sql
    assert "'1'='1" not in sql
    assert nasty in params
