"""Per-field formatting: computed values, type conversion and validation."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping

from .converters import CellType, TypeParser
from .errors import ExtractionError, ValidationError
from .schema import CellDescription, SheetSection


@dataclass(frozen=True, slots=True)
class FormattedValue:
    name: str
    value: Any


class RecordBuilder:
    """Accumulates one section (or one table row) field by field.

    Callbacks never see the mutable dict; ``context()`` hands out a read-only
    copy of what has been assigned so far.
    """

    __slots__ = ("section", "_values")

    def __init__(self, section: SheetSection | str) -> None:
        self.section = SheetSection(section)
        self._values: Dict[str, Any] = {}

    def set(self, name: str, value: Any) -> None:
        self._values[name] = value

    def context(self) -> Mapping[str, Mapping[str, Any]]:
        snapshot = MappingProxyType(dict(self._values))
        return MappingProxyType({self.section.value: snapshot})

    def build(self) -> Dict[str, Any]:
        return dict(self._values)

    def __len__(self) -> int:
        return len(self._values)


def format_value(
    description: CellDescription,
    value: Any,
    context: Mapping[str, Mapping[str, Any]],
    parser: TypeParser,
) -> FormattedValue:
    """Apply set_value, conversion and validation to one raw value."""

    if description.set_value is not None:
        value = description.set_value(value, context)
    if description.type is not None and description.type is not CellType.VIRTUAL:
        try:
            value = parser.convert(description.type, value)
        except ExtractionError as exc:
            exc.field_name = description.field_name
            raise
    if description.validate is not None and description.validate(value):
        raise ValidationError(
            f"validation failed for {description.field_name!r} with value {value!r}",
            field_name=description.field_name,
            value=value,
        )
    return FormattedValue(name=description.field_name, value=value)


__all__ = ["FormattedValue", "RecordBuilder", "format_value"]
