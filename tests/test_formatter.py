"""Tests for per-field formatting and the read-only record context."""

from __future__ import annotations

import pytest

from sheetimport.core.converters import CellType, TypeParser
from sheetimport.core.errors import TypeConversionError, ValidationError
from sheetimport.core.formatter import RecordBuilder, format_value
from sheetimport.core.schema import CellDescription, SheetSection


def test_set_value_runs_before_conversion_and_validation() -> None:
    seen = []

    def setter(raw, context):
        seen.append(dict(context["header"]))
        return "7"

    description = CellDescription(
        field_name="qty",
        section=SheetSection.HEADER,
        type=CellType.NUMBER,
        set_value=setter,
        validate=lambda value: value > 5,
    )
    builder = RecordBuilder("header")
    builder.set("code", "A1")

    with pytest.raises(ValidationError) as excinfo:
        format_value(description, "ignored", builder.context(), TypeParser())

    assert seen == [{"code": "A1"}]
    assert excinfo.value.value == 7
    assert excinfo.value.field_name == "qty"


def test_virtual_fields_skip_conversion() -> None:
    description = CellDescription(
        field_name="raw",
        section=SheetSection.TABLE,
        type=CellType.VIRTUAL,
        set_value=lambda raw, context: {"nested": True},
    )

    formatted = format_value(description, None, RecordBuilder("table").context(), TypeParser())

    assert formatted.name == "raw"
    assert formatted.value == {"nested": True}


def test_untyped_fields_keep_raw_values() -> None:
    description = CellDescription(field_name="any", section=SheetSection.FOOTER)

    assert format_value(description, 3.5, {}, TypeParser()).value == 3.5


def test_conversion_errors_name_the_field() -> None:
    description = CellDescription(field_name="flag", section=SheetSection.HEADER, type=CellType.BOOLEAN)

    with pytest.raises(TypeConversionError) as excinfo:
        format_value(description, "perhaps", {}, TypeParser())

    assert excinfo.value.field_name == "flag"
    assert "field=flag" in str(excinfo.value)


def test_context_snapshot_is_read_only_and_detached() -> None:
    builder = RecordBuilder(SheetSection.TABLE)
    builder.set("a", 1)
    context = builder.context()

    with pytest.raises(TypeError):
        context["table"]["a"] = 2  # type: ignore[index]
    builder.set("b", 2)

    assert dict(context["table"]) == {"a": 1}
    assert builder.build() == {"a": 1, "b": 2}
    assert len(builder) == 2
