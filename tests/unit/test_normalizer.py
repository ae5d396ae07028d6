from __future__ import annotations

import pytest

from metric_catalog.excel.coercion import ValueCoercer
from metric_catalog.excel.normalizer import (
    EmptySheetError,
    entity_key,
    normalize_sheet,
    parse_headers,
    parse_period,
)
from metric_catalog.models.metric import Metric
from metric_catalog.models.raw_sheet import RawSheet


@pytest.mark.parametrize(
    "header,expected",
    [
        ("Semana 1", 1),
        ("Period 12", 12),
        ("W07", 7),
        ("2024 semana 3", 2024),  # first digit run wins
        ("Semana 10 (parcial)", 10),
        (5, 5),
        (5.0, 5),
    ],
)
def test_parse_period_takes_first_digit_run(header, expected):
    assert parse_period(header) == expected


@pytest.mark.parametrize("header", [None, "", "Total", "Média"])
def test_parse_period_without_digits_is_none(header):
    assert parse_period(header) is None


def test_parse_headers_skips_entity_column():
    headers = parse_headers(("Escola", "Semana 1", "Obs", "Semana 2"))
    assert [h.column for h in headers] == [1, 2, 3]
    assert [h.period for h in headers] == [1, None, 2]
    assert headers[1].dropped
    assert headers[1].text == "Obs"


@pytest.mark.parametrize("cell,expected", [("A", "A"), ("  Escola X ", "Escola X"), (101, "101"), (101.0, "101"), (1.5, "1.5")])
def test_entity_key(cell, expected):
    assert entity_key(cell) == expected


@pytest.mark.parametrize("cell", [None, "", "   ", float("nan")])
def test_entity_key_empty(cell):
    assert entity_key(cell) is None


def _sheet(rows):
    return RawSheet.from_rows("accuracy index", rows)


def test_normalize_sheet_routes_values_through_coercer():
    sheet = _sheet([["Entity", "Period 1", "Period 2"], ["A", 0.8, 75], ["B", 1.2, None]])
    result = normalize_sheet(sheet, Metric.ACCURACY_INDEX, ValueCoercer())
    assert result.values[("A", 1)] == pytest.approx(80.0)
    assert result.values[("A", 2)] == 75.0
    assert result.values[("B", 1)] == 1.2
    assert result.values[("B", 2)] == 0.0
    assert result.data_rows == 2
    assert result.dropped_rows == 0


def test_normalize_sheet_drops_rows_without_entity():
    sheet = _sheet([["Entity", "Period 1"], [None, 5], ["", 6], ["A", 7], []])
    result = normalize_sheet(sheet, Metric.EXERCISE_INDEX, ValueCoercer())
    assert list(result.values) == [("A", 1)]
    assert result.dropped_rows == 3


def test_normalize_sheet_drops_columns_without_period():
    dropped = []
    sheet = _sheet([["Entity", "Notes", "Period 4"], ["A", "ignore me", 2]])
    result = normalize_sheet(sheet, Metric.EXERCISE_INDEX, ValueCoercer(), on_dropped_header=dropped.append)
    assert result.values == {("A", 4): 2.0}
    assert [h.text for h in dropped] == ["Notes"]
    assert len(result.dropped_headers) == 1


def test_normalize_sheet_short_rows_stop_at_row_end():
    sheet = _sheet([["Entity", "Semana 1", "Semana 2", "Semana 3"], ["A", 3], ["B", None, 2]])
    result = normalize_sheet(sheet, Metric.EXERCISE_INDEX, ValueCoercer())
    # blank inside the row reads as 0, nothing past the row end
    assert result.values == {("A", 1): 3.0, ("B", 1): 0.0, ("B", 2): 2.0}


def test_normalize_sheet_last_write_wins_for_duplicate_entity():
    sheet = _sheet([["Entity", "Period 1"], ["A", 1], ["A", 9]])
    result = normalize_sheet(sheet, Metric.EXERCISE_INDEX, ValueCoercer())
    assert result.values == {("A", 1): 9.0}


def test_normalize_sheet_last_write_wins_for_duplicate_period_columns():
    sheet = _sheet([["Entity", "Semana 1", "Semana 1 (revisada)"], ["A", 1, 4]])
    result = normalize_sheet(sheet, Metric.EXERCISE_INDEX, ValueCoercer())
    assert result.values == {("A", 1): 4.0}


@pytest.mark.parametrize("rows", [[], [["Entity", "Period 1"]]])
def test_normalize_sheet_without_data_rows_raises(rows):
    with pytest.raises(EmptySheetError):
        normalize_sheet(_sheet(rows), Metric.EXERCISE_INDEX, ValueCoercer())
