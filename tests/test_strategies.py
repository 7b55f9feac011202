"""Tests for the named value-setter and validator strategies."""

from __future__ import annotations

from types import MappingProxyType

import pytest

from sheetimport.core.errors import SchemaError
from sheetimport.core.strategies import StrategyRegistry, default_registry, section_values


def _context(section: str = "table", **values):
    return MappingProxyType({section: MappingProxyType(values)})


def test_arithmetic_setters_read_previous_fields() -> None:
    context = _context(price=2.5, qty=4)

    assert default_registry.setter("multiply", field="qty", factor=3)(None, context) == 12
    assert default_registry.setter("sum_fields", fields=["price", "qty"])(None, context) == 6.5
    assert default_registry.setter("copy_field", field="price")(None, context) == 2.5


def test_multiply_with_missing_field_yields_none() -> None:
    assert default_registry.setter("multiply", field="absent", factor=2)(None, _context()) is None


def test_setters_can_target_a_named_section() -> None:
    context = MappingProxyType({"header": MappingProxyType({"currency": "EUR"})})

    assert default_registry.setter("copy_field", field="currency", section="header")(None, context) == "EUR"
    assert section_values(context, "footer") == {}


def test_text_setters() -> None:
    context = _context(first="Ada", last="Lovelace", middle=None)

    assert default_registry.setter("concat", fields=["first", "middle", "last"])(None, context) == "Ada Lovelace"
    assert default_registry.setter("upper")("abc", context) == "ABC"
    assert default_registry.setter("replace", old="-", new="")("12-34", context) == "1234"
    assert default_registry.setter("default", value="n/a")("  ", context) == "n/a"
    assert default_registry.setter("default", value="n/a")("kept", context) == "kept"
    assert default_registry.setter("constant", value=7)("ignored", context) == 7


@pytest.mark.parametrize(
    ("name", "args", "value", "invalid"),
    [
        ("required", {}, None, True),
        ("required", {}, " ", True),
        ("required", {}, 0, False),
        ("non_negative", {}, -1, True),
        ("non_negative", {}, 0, False),
        ("positive", {}, 0, True),
        ("range", {"min": 1, "max": 5}, 6, True),
        ("range", {"min": 1, "max": 5}, 3, False),
        ("range", {"min": 1}, None, False),
        ("range", {"min": 1, "max": 5}, "abc", False),
        ("pattern", {"regex": r"[A-Z]{3}"}, "EUR", False),
        ("pattern", {"regex": r"[A-Z]{3}"}, "EURO", True),
        ("one_of", {"values": ["a", "b"]}, "c", True),
    ],
)
def test_validators_report_invalid_values(name, args, value, invalid) -> None:
    assert default_registry.validator(name, **args)(value) is invalid


def test_registry_rejects_duplicates_and_unknown_names() -> None:
    registry = default_registry.copy()

    with pytest.raises(SchemaError):
        registry.register_setter("strip", lambda: (lambda raw, context: raw))
    with pytest.raises(SchemaError):
        registry.validator("nope")


def test_copy_is_independent_of_default_registry() -> None:
    registry = default_registry.copy()

    @registry.register_validator("even")
    def _even():
        return lambda value: value % 2 == 1

    assert "even" in registry.validator_names
    assert "even" not in default_registry.validator_names
    assert registry.validator("even")(3) is True
