"""Unit tests for declared-type conversion."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from sheetimport.core.converters import CellType, TypeParser
from sheetimport.core.errors import TypeConversionError


@pytest.fixture()
def parser() -> TypeParser:
    return TypeParser()


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (12, 12),
        (1.5, 1.5),
        ("1,234", 1234),
        (" 3.25 ", 3.25),
        (True, 1),
        ("", None),
        (None, None),
    ],
)
def test_number_conversion(parser: TypeParser, raw, expected) -> None:
    assert parser.convert(CellType.NUMBER, raw) == expected


@pytest.mark.parametrize("raw", ["abc", "nan", "1.2.3"])
def test_number_conversion_rejects_garbage(parser: TypeParser, raw) -> None:
    with pytest.raises(TypeConversionError) as excinfo:
        parser.convert("number", raw)
    assert excinfo.value.value == raw


def test_string_conversion_keeps_integral_floats_clean(parser: TypeParser) -> None:
    assert parser.convert(CellType.STRING, 42.0) == "42"
    assert parser.convert(CellType.STRING, 2.5) == "2.5"
    assert parser.convert(CellType.STRING, date(2024, 3, 1)) == "2024-03-01"
    assert parser.convert(CellType.STRING, None) is None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("yes", True), ("X", True), ("off", False), (0, False), (2, True), (False, False), (" ", None)],
)
def test_boolean_conversion(parser: TypeParser, raw, expected) -> None:
    assert parser.convert(CellType.BOOLEAN, raw) is expected


def test_boolean_conversion_rejects_unknown_token(parser: TypeParser) -> None:
    with pytest.raises(TypeConversionError):
        parser.convert(CellType.BOOLEAN, "maybe")


def test_object_conversion_decodes_json(parser: TypeParser) -> None:
    assert parser.convert(CellType.OBJECT, '{"a": [1, 2]}') == {"a": [1, 2]}
    assert parser.convert(CellType.OBJECT, [1]) == [1]
    with pytest.raises(TypeConversionError):
        parser.convert(CellType.OBJECT, "{broken")


def test_date_conversion_accepts_cells_serials_and_text(parser: TypeParser) -> None:
    assert parser.convert(CellType.DATE, datetime(2024, 1, 2, 3, 4)) == datetime(2024, 1, 2, 3, 4)
    assert parser.convert(CellType.DATE, date(2024, 1, 2)) == datetime(2024, 1, 2)
    assert parser.convert(CellType.DATE, 45292) == datetime(2024, 1, 1)
    assert parser.convert(CellType.DATE, "2024-05-06") == datetime(2024, 5, 6)
    assert parser.convert(CellType.DATE, "") is None


def test_date_conversion_uses_explicit_format() -> None:
    parser = TypeParser(date_format="%d/%m/%Y")

    assert parser.convert(CellType.DATE, "06/05/2024") == datetime(2024, 5, 6)
    with pytest.raises(TypeConversionError):
        parser.convert(CellType.DATE, "2024-05-06")


def test_date_conversion_rejects_unparseable_text(parser: TypeParser) -> None:
    with pytest.raises(TypeConversionError):
        parser.convert(CellType.DATE, "not a date")


def test_virtual_values_pass_through(parser: TypeParser) -> None:
    marker = object()
    assert parser.convert(CellType.VIRTUAL, marker) is marker


@pytest.mark.parametrize("serial", [1e12, -1e12])
def test_date_conversion_rejects_out_of_range_serials(parser: TypeParser, serial) -> None:
    with pytest.raises(TypeConversionError) as excinfo:
        parser.convert(CellType.DATE, serial)
    assert excinfo.value.value == serial
