"""`sheetimport` extracts schema-described records from spreadsheet workbooks."""

# Module responsibilities:
# - Re-export the importer, its options and the handler contract as the stable API surface.
# - Keep the package version in one place.

from __future__ import annotations

from .core import (
    ExtractionResult,
    HandlerFilter,
    ImportDescription,
    Importer,
    ImporterHandler,
    ImporterOptions,
    SheetSection,
    StrategyRegistry,
    default_registry,
    load_import_description,
)
from .core.errors import SchemaError, SheetImportError, ValidationError

__all__ = [
    "ExtractionResult",
    "HandlerFilter",
    "ImportDescription",
    "Importer",
    "ImporterHandler",
    "ImporterOptions",
    "SchemaError",
    "SheetImportError",
    "SheetSection",
    "StrategyRegistry",
    "ValidationError",
    "default_registry",
    "load_import_description",
]

__version__ = "0.1.0"
