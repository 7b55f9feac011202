"""Named value-setter and validator strategies.

Schema files reference callbacks by name (optionally with arguments); the
registry turns those references into callables when the schema is loaded::

    setValue: {name: multiply, args: {field: total, factor: 2}}
    validate: required

A value setter receives ``(raw_value, context)`` where ``context`` maps the
section name to a read-only snapshot of the fields computed so far. A
validator receives the converted value and returns ``True`` when the value is
INVALID.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, Optional

from .errors import SchemaError

ValueSetter = Callable[[Any, Mapping[str, Mapping[str, Any]]], Any]
Validator = Callable[[Any], bool]
SetterFactory = Callable[..., ValueSetter]
ValidatorFactory = Callable[..., Validator]


def section_values(context: Mapping[str, Mapping[str, Any]], section: Optional[str] = None) -> Mapping[str, Any]:
    """Return the snapshot for ``section`` (or the only section in ``context``)."""

    if section is not None:
        return context.get(section) or {}
    for values in context.values():
        return values or {}
    return {}


class StrategyRegistry:
    """Registry of named strategy factories."""

    def __init__(self) -> None:
        self._setters: Dict[str, SetterFactory] = {}
        self._validators: Dict[str, ValidatorFactory] = {}

    def register_setter(self, name: str, factory: SetterFactory | None = None):
        """Register a setter factory; usable as ``@registry.register_setter("name")``."""

        def _decorator(func: SetterFactory) -> SetterFactory:
            if name in self._setters:
                raise SchemaError(f"value setter {name!r} is already registered")
            self._setters[name] = func
            return func

        return _decorator(factory) if factory is not None else _decorator

    def register_validator(self, name: str, factory: ValidatorFactory | None = None):
        """Register a validator factory; usable as ``@registry.register_validator("name")``."""

        def _decorator(func: ValidatorFactory) -> ValidatorFactory:
            if name in self._validators:
                raise SchemaError(f"validator {name!r} is already registered")
            self._validators[name] = func
            return func

        return _decorator(factory) if factory is not None else _decorator

    def setter(self, name: str, **args: Any) -> ValueSetter:
        factory = self._setters.get(name)
        if factory is None:
            raise SchemaError(f"unknown value setter {name!r}")
        return _build(factory, name, args)

    def validator(self, name: str, **args: Any) -> Validator:
        factory = self._validators.get(name)
        if factory is None:
            raise SchemaError(f"unknown validator {name!r}")
        return _build(factory, name, args)

    @property
    def setter_names(self) -> tuple[str, ...]:
        return tuple(sorted(self._setters))

    @property
    def validator_names(self) -> tuple[str, ...]:
        return tuple(sorted(self._validators))

    def copy(self) -> "StrategyRegistry":
        clone = StrategyRegistry()
        clone._setters.update(self._setters)
        clone._validators.update(self._validators)
        return clone


def _build(factory: Callable[..., Any], name: str, args: Mapping[str, Any]) -> Any:
    try:
        return factory(**args)
    except TypeError as exc:
        raise SchemaError(f"invalid arguments for strategy {name!r}: {exc}") from exc


def _as_number(value: Any) -> Any:
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return value
    return None


default_registry = StrategyRegistry()


# ─── value setters ─────────────────────────────────────


@default_registry.register_setter("constant")
def _constant(value: Any = None) -> ValueSetter:
    return lambda raw, context: value


@default_registry.register_setter("default")
def _default(value: Any) -> ValueSetter:
    def _apply(raw: Any, context: Mapping[str, Mapping[str, Any]]) -> Any:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return value
        return raw

    return _apply


@default_registry.register_setter("strip")
def _strip() -> ValueSetter:
    return lambda raw, context: raw.strip() if isinstance(raw, str) else raw


@default_registry.register_setter("upper")
def _upper() -> ValueSetter:
    return lambda raw, context: raw.upper() if isinstance(raw, str) else raw


@default_registry.register_setter("lower")
def _lower() -> ValueSetter:
    return lambda raw, context: raw.lower() if isinstance(raw, str) else raw


@default_registry.register_setter("replace")
def _replace(old: str, new: str = "") -> ValueSetter:
    return lambda raw, context: raw.replace(old, new) if isinstance(raw, str) else raw


@default_registry.register_setter("copy_field")
def _copy_field(field: str, section: Optional[str] = None) -> ValueSetter:
    return lambda raw, context: section_values(context, section).get(field)


@default_registry.register_setter("multiply")
def _multiply(field: str, factor: float, section: Optional[str] = None) -> ValueSetter:
    def _apply(raw: Any, context: Mapping[str, Mapping[str, Any]]) -> Any:
        number = _as_number(section_values(context, section).get(field))
        return None if number is None else number * factor

    return _apply


@default_registry.register_setter("sum_fields")
def _sum_fields(fields: Iterable[str], section: Optional[str] = None) -> ValueSetter:
    names = tuple(fields)

    def _apply(raw: Any, context: Mapping[str, Mapping[str, Any]]) -> Any:
        values = section_values(context, section)
        numbers = [_as_number(values.get(name)) for name in names]
        return sum(n for n in numbers if n is not None)

    return _apply


@default_registry.register_setter("concat")
def _concat(fields: Iterable[str], separator: str = " ", section: Optional[str] = None) -> ValueSetter:
    names = tuple(fields)

    def _apply(raw: Any, context: Mapping[str, Mapping[str, Any]]) -> str:
        values = section_values(context, section)
        parts = [str(values[name]) for name in names if values.get(name) not in (None, "")]
        return separator.join(parts)

    return _apply


# ─── validators ────────────────────────────────────────


@default_registry.register_validator("required")
def _required() -> Validator:
    return lambda value: value is None or (isinstance(value, str) and not value.strip())


@default_registry.register_validator("non_negative")
def _non_negative() -> Validator:
    return lambda value: _as_number(value) is not None and value < 0


@default_registry.register_validator("positive")
def _positive() -> Validator:
    return lambda value: _as_number(value) is not None and value <= 0


@default_registry.register_validator("range")
def _range(min: Optional[float] = None, max: Optional[float] = None) -> Validator:  # noqa: A002
    def _check(value: Any) -> bool:
        if _as_number(value) is None:
            return False
        if min is not None and value < min:
            return True
        return max is not None and value > max

    return _check


@default_registry.register_validator("max_length")
def _max_length(length: int) -> Validator:
    return lambda value: value is not None and len(str(value)) > length


@default_registry.register_validator("pattern")
def _pattern(regex: str) -> Validator:
    compiled = re.compile(regex)
    return lambda value: value is not None and compiled.fullmatch(str(value)) is None


@default_registry.register_validator("one_of")
def _one_of(values: Iterable[Any]) -> Validator:
    allowed = tuple(values)
    return lambda value: value is not None and value not in allowed


__all__ = [
    "StrategyRegistry",
    "ValueSetter",
    "Validator",
    "default_registry",
    "section_values",
]
