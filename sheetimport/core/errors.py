"""Custom exceptions used across sheetimport."""

from __future__ import annotations

from typing import Any


class SheetImportError(Exception):
    """Base error for the application."""


class ConfigError(SheetImportError):
    """Configuration related error."""


class SchemaError(ConfigError):
    """Raised when an import description cannot be loaded or resolved."""


class SourceReadError(SheetImportError):
    """Raised when a workbook source is of an unsupported kind."""


class JobRegistryError(SheetImportError):
    """Raised on duplicate or unknown job names in the job registry."""


class ExtractionError(SheetImportError):
    """Base for failures tied to a single field of a sheet."""

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        value: Any = None,
        sheet_index: int | None = None,
        section: str | None = None,
        row: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field_name = field_name
        self.value = value
        self.sheet_index = sheet_index
        self.section = section
        self.row = row

    def locate(self, *, sheet_index: int, section: str, row: int | None = None) -> "ExtractionError":
        """Attach sheet/section/row coordinates, returning self for re-raising."""

        self.sheet_index = sheet_index
        self.section = section
        if row is not None:
            self.row = row
        return self

    def __str__(self) -> str:
        parts = []
        if self.sheet_index is not None:
            parts.append(f"sheet={self.sheet_index}")
        if self.section is not None:
            parts.append(f"section={self.section}")
        if self.row is not None:
            parts.append(f"row={self.row}")
        if self.field_name is not None:
            parts.append(f"field={self.field_name}")
        if not parts:
            return self.message
        return f"{self.message} ({' '.join(parts)})"


class ValidationError(ExtractionError):
    """Raised when a field's validate predicate reports the value as invalid."""


class TypeConversionError(ExtractionError):
    """Raised when a raw value cannot be converted to its declared type."""
