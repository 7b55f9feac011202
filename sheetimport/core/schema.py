"""Import description: per-sheet layout of header, table and footer fields."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .converters import CellType
from .errors import SchemaError
from .strategies import StrategyRegistry, Validator, ValueSetter, default_registry


class SheetSection(str, Enum):
    """Structurally distinct region of a sheet."""

    HEADER = "header"
    TABLE = "table"
    FOOTER = "footer"


# ─── file layer ────────────────────────────────────────


class StrategyRef(BaseModel):
    """Reference to a registered strategy, with keyword arguments."""

    model_config = ConfigDict(extra="forbid")

    name: str
    args: Dict[str, Any] = Field(default_factory=dict)


class CellDescriptionConfig(BaseModel):
    """One ``content`` entry as written in the schema file."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    type: Optional[CellType] = None
    field_name: str = Field(alias="fieldName", min_length=1)
    section: SheetSection
    address: Optional[str] = None
    set_value: Union[str, StrategyRef, None] = Field(default=None, alias="setValue")
    validate_ref: Union[str, StrategyRef, None] = Field(default=None, alias="validate")


class SheetDescriptionConfig(BaseModel):
    """One ``sheets`` entry as written in the schema file."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    start_table: int = Field(default=1, alias="startTable", ge=0)
    end_table: Optional[int] = Field(default=None, alias="endTable", ge=0)
    content: List[CellDescriptionConfig] = Field(default_factory=list)


class ImportDescriptionConfig(BaseModel):
    """Top level schema file model."""

    model_config = ConfigDict(extra="forbid")

    sheets: List[SheetDescriptionConfig] = Field(default_factory=list)


# ─── resolved layer ────────────────────────────────────


@dataclass(frozen=True, slots=True)
class CellDescription:
    """How to locate, compute, convert and validate one output field."""

    field_name: str
    section: SheetSection
    type: Optional[CellType] = None
    address: Optional[str] = None
    set_value: Optional[ValueSetter] = field(default=None, compare=False)
    validate: Optional[Validator] = field(default=None, compare=False)

    @property
    def is_virtual(self) -> bool:
        return self.type is CellType.VIRTUAL


@dataclass(frozen=True, slots=True)
class SheetDescription:
    """Layout of a single worksheet, bound to its schema position."""

    index: int
    start_table: int = 1
    end_table: Optional[int] = None
    content: tuple[CellDescription, ...] = ()


@dataclass(frozen=True, slots=True)
class ImportDescription:
    """Ordered sheet layouts, indexed by worksheet position."""

    sheets: tuple[SheetDescription, ...] = ()

    def __len__(self) -> int:
        return len(self.sheets)

    def __getitem__(self, index: int) -> SheetDescription:
        return self.sheets[index]


def _resolve_ref(ref: Union[str, StrategyRef, None], kind: str, registry: StrategyRegistry) -> Any:
    if ref is None:
        return None
    if isinstance(ref, str):
        ref = StrategyRef(name=ref)
    if kind == "setter":
        return registry.setter(ref.name, **ref.args)
    return registry.validator(ref.name, **ref.args)


def build_import_description(
    payload: Mapping[str, Any],
    registry: StrategyRegistry | None = None,
) -> ImportDescription:
    """Validate a plain schema payload and resolve its strategy references."""

    registry = registry or default_registry
    try:
        config = ImportDescriptionConfig.model_validate(payload)
    except PydanticValidationError as exc:
        raise SchemaError(f"invalid import description: {exc}") from exc

    sheets = []
    for index, sheet in enumerate(config.sheets):
        content = []
        for position, cell in enumerate(sheet.content):
            try:
                content.append(
                    CellDescription(
                        field_name=cell.field_name,
                        section=cell.section,
                        type=cell.type,
                        address=cell.address or None,
                        set_value=_resolve_ref(cell.set_value, "setter", registry),
                        validate=_resolve_ref(cell.validate_ref, "validator", registry),
                    )
                )
            except SchemaError as exc:
                raise SchemaError(f"sheets[{index}].content[{position}] ({cell.field_name}): {exc}") from exc
        sheets.append(
            SheetDescription(
                index=index,
                start_table=sheet.start_table,
                end_table=sheet.end_table or None,
                content=tuple(content),
            )
        )
    return ImportDescription(sheets=tuple(sheets))


def _read_payload(path: Path) -> Any:
    if path.suffix.lower() == ".json":
        with path.open("r", encoding="utf-8") as fh:
            try:
                return json.load(fh)
            except json.JSONDecodeError as exc:
                raise SchemaError(f"invalid JSON in {path}: {exc}") from exc
    yaml = YAML(typ="safe")
    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.load(fh)
        except YAMLError as exc:
            raise SchemaError(f"invalid YAML in {path}: {exc}") from exc


def load_import_description(
    path: str | Path,
    registry: StrategyRegistry | None = None,
) -> ImportDescription:
    """Load an import description from a YAML or JSON file."""

    schema_path = Path(path)
    if not schema_path.exists():
        raise SchemaError(f"import description not found: {schema_path}")
    payload = _read_payload(schema_path) or {}
    if not isinstance(payload, Mapping):
        raise SchemaError(f"import description must be a mapping: {schema_path}")
    return build_import_description(payload, registry)


__all__ = [
    "CellDescription",
    "ImportDescription",
    "SheetDescription",
    "SheetSection",
    "build_import_description",
    "load_import_description",
]
