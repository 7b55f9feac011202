"""Extraction engine: schema, conversion, extraction and handler pipeline."""

from .converters import CellType, TypeParser
from .errors import (
    ConfigError,
    ExtractionError,
    JobRegistryError,
    SchemaError,
    SheetImportError,
    SourceReadError,
    TypeConversionError,
    ValidationError,
)
from .importer import Importer, ImporterOptions
from .pipeline import ExtractionResult, HandlerFilter, HandlerPipeline, ImporterHandler
from .resolver import resolve_cell_descriptions
from .schema import (
    CellDescription,
    ImportDescription,
    SheetDescription,
    SheetSection,
    build_import_description,
    load_import_description,
)
from .strategies import StrategyRegistry, default_registry
from .stream import WorkbookStreamSink

__all__ = [
    "CellDescription",
    "CellType",
    "ConfigError",
    "ExtractionError",
    "ExtractionResult",
    "HandlerFilter",
    "HandlerPipeline",
    "ImportDescription",
    "Importer",
    "ImporterHandler",
    "ImporterOptions",
    "JobRegistryError",
    "SchemaError",
    "SheetDescription",
    "SheetImportError",
    "SheetSection",
    "SourceReadError",
    "StrategyRegistry",
    "TypeConversionError",
    "TypeParser",
    "ValidationError",
    "WorkbookStreamSink",
    "build_import_description",
    "default_registry",
    "load_import_description",
    "resolve_cell_descriptions",
]
