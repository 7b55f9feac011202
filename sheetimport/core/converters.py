"""Type conversion for declared cell types."""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Optional

import pandas as pd
from openpyxl.utils.datetime import from_excel

from .errors import TypeConversionError


class CellType(str, Enum):
    """Declared type of a cell description."""

    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    OBJECT = "object"
    DATE = "date"
    VIRTUAL = "virtual"


_TRUE_TOKENS = frozenset({"true", "yes", "y", "1", "x", "on"})
_FALSE_TOKENS = frozenset({"false", "no", "n", "0", "off"})
_NUMBER_SEPARATORS = re.compile(r"[,_\s]")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


class TypeParser:
    """Convert raw cell values according to a declared ``CellType``.

    Every converter returns ``None`` for absent input so optional cells stay
    empty instead of failing; the validate hook decides whether that is
    acceptable.
    """

    def __init__(self, date_format: Optional[str] = None) -> None:
        self.date_format = date_format
        self._dispatch: Dict[CellType, Callable[[Any], Any]] = {
            CellType.NUMBER: self.to_number,
            CellType.STRING: self.to_string,
            CellType.BOOLEAN: self.to_boolean,
            CellType.OBJECT: self.to_object,
            CellType.DATE: self.to_date,
        }

    def convert(self, cell_type: CellType | str, value: Any) -> Any:
        cell_type = CellType(cell_type)
        if cell_type is CellType.VIRTUAL:
            return value
        return self._dispatch[cell_type](value)

    @staticmethod
    def to_number(value: Any) -> int | float | Decimal | None:
        if _is_blank(value):
            return None
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, (int, float, Decimal)):
            return value
        text = _NUMBER_SEPARATORS.sub("", str(value).strip())
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError as exc:
            raise TypeConversionError(f"cannot convert {value!r} to number", value=value) from exc
        if not math.isfinite(number):
            raise TypeConversionError(f"cannot convert {value!r} to number", value=value)
        return number

    @staticmethod
    def to_string(value: Any) -> str | None:
        if value is None:
            return None
        if isinstance(value, str):
            return value
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, (datetime, date, time)):
            return value.isoformat()
        return str(value)

    @staticmethod
    def to_boolean(value: Any) -> bool | None:
        if _is_blank(value):
            return None
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float, Decimal)):
            return value != 0
        token = str(value).strip().lower()
        if token in _TRUE_TOKENS:
            return True
        if token in _FALSE_TOKENS:
            return False
        raise TypeConversionError(f"cannot convert {value!r} to boolean", value=value)

    @staticmethod
    def to_object(value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, (Mapping, list, tuple)):
            return value
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError as exc:
                raise TypeConversionError(f"cannot decode {value!r} as JSON", value=value) from exc
        return value

    def to_date(self, value: Any) -> datetime | None:
        if _is_blank(value):
            return None
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime.combine(value, time.min)
        if isinstance(value, bool):
            raise TypeConversionError(f"cannot convert {value!r} to date", value=value)
        if isinstance(value, (int, float)):
            # Excel serial date
            try:
                converted = from_excel(value)
            except (OverflowError, ValueError) as exc:
                raise TypeConversionError(f"serial {value!r} is out of the date range", value=value) from exc
            if isinstance(converted, datetime):
                return converted
            raise TypeConversionError(f"cannot convert {value!r} to date", value=value)
        text = str(value).strip()
        if self.date_format:
            try:
                return datetime.strptime(text, self.date_format)
            except ValueError as exc:
                raise TypeConversionError(
                    f"{value!r} does not match date format {self.date_format!r}", value=value
                ) from exc
        parsed = pd.to_datetime(text, errors="coerce")
        if pd.isna(parsed):
            raise TypeConversionError(f"cannot convert {value!r} to date", value=value)
        return parsed.to_pydatetime()


__all__ = ["CellType", "TypeParser"]
