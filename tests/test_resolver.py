"""Tests for per-section field ordering."""

from __future__ import annotations

from sheetimport.core.resolver import resolve_cell_descriptions
from sheetimport.core.schema import SheetSection, build_import_description


def _sheet(content):
    return build_import_description({"sheets": [{"content": content}]})[0]


def test_addressless_fields_come_last_in_declared_order() -> None:
    sheet = _sheet(
        [
            {"fieldName": "v1", "section": "header", "type": "virtual"},
            {"fieldName": "a", "section": "header", "address": "A1"},
            {"fieldName": "t", "section": "table"},
            {"fieldName": "v2", "section": "header", "type": "virtual"},
            {"fieldName": "b", "section": "header", "address": "B1"},
        ]
    )

    names = [cell.field_name for cell in resolve_cell_descriptions(SheetSection.HEADER, sheet)]

    assert names == ["a", "b", "v1", "v2"]


def test_table_fields_keep_declared_order() -> None:
    sheet = _sheet(
        [
            {"fieldName": "first", "section": "table"},
            {"fieldName": "second", "section": "table"},
            {"fieldName": "note", "section": "footer", "address": "A20"},
        ]
    )

    assert [cell.field_name for cell in resolve_cell_descriptions("table", sheet)] == ["first", "second"]
    assert resolve_cell_descriptions(SheetSection.HEADER, sheet) == ()
