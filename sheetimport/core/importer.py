"""Workbook importer: drives header, footer and table extraction per sheet."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .converters import TypeParser
from .errors import SheetImportError
from .extractor import TableExtractor, extract_section
from .logger import get_logger
from .pipeline import ExtractionResult, HandlerFilter, HandlerPipeline
from .schema import ImportDescription, SheetDescription, SheetSection, load_import_description
from .strategies import StrategyRegistry
from .stream import WorkbookStreamSink
from .workbook import Workbook, WorkbookSource, Worksheet, open_workbook

logger = get_logger(__name__)


class ImporterOptions(BaseModel):
    """Construction options for :class:`Importer`."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    schema_path: Optional[Path] = None
    description: Optional[Any] = None
    chunk_size: int = Field(default=1, ge=1)
    handlers: List[Any] = Field(default_factory=list)
    date_format: Optional[str] = None
    strategies: Optional[StrategyRegistry] = None

    @field_validator("description")
    @classmethod
    def _check_description(cls, value: Any) -> Any:
        if value is not None and not isinstance(value, ImportDescription):
            raise ValueError("description must be an ImportDescription")
        return value

    @model_validator(mode="after")
    def _require_schema(self) -> "ImporterOptions":
        if self.schema_path is None and self.description is None:
            raise ValueError("either schema_path or description is required")
        return self


class Importer:
    """Extract workbook sections and feed them to the handler pipeline.

    Usage::

        importer = Importer(ImporterOptions(schema_path="report.yaml", chunk_size=50,
                                            handlers=[JsonLinesHandler("out.jsonl")]))
        await importer.load("report.xlsx")

    ``load`` returns nothing; every extracted section reaches callers only
    through the registered handlers.
    """

    def __init__(self, options: ImporterOptions) -> None:
        self.options = options
        if options.description is not None:
            self.description = options.description
        else:
            self.description = load_import_description(options.schema_path, options.strategies)
        self.chunk_size = options.chunk_size
        self.pipeline = HandlerPipeline(options.handlers)
        self.parser = TypeParser(date_format=options.date_format)

    @classmethod
    def from_description(
        cls,
        description: ImportDescription,
        *,
        handlers: Optional[List[Any]] = None,
        chunk_size: int = 1,
        date_format: Optional[str] = None,
    ) -> "Importer":
        """Build an importer around an already resolved description."""

        return cls(
            ImporterOptions(
                description=description,
                handlers=list(handlers or []),
                chunk_size=chunk_size,
                date_format=date_format,
            )
        )

    async def _read_section(self, section: SheetSection, worksheet: Worksheet, sheet: SheetDescription) -> None:
        result = extract_section(section, worksheet, sheet, self.parser)
        await self.pipeline.invoke(result, HandlerFilter(sheet.index, section, worksheet.title))

    async def _read_table(self, worksheet: Worksheet, sheet: SheetDescription) -> int:
        extractor = TableExtractor(sheet, worksheet, self.parser, self.chunk_size)
        table_filter = HandlerFilter(sheet.index, SheetSection.TABLE, worksheet.title)
        delivered = 0
        for chunk in extractor.iter_chunks():
            await self.pipeline.invoke(ExtractionResult(table=chunk), table_filter)
            delivered += len(chunk)
        return delivered

    async def read_worksheet(self, workbook: Workbook, sheet: SheetDescription) -> None:
        worksheet = workbook.get_sheet(sheet.index + 1)
        if worksheet is None:
            logger.info("Sheet %s not present in workbook, skipping", sheet.index)
            return

        logger.info("Reading sheet %s (%s)", sheet.index, worksheet.title)
        await self._read_section(SheetSection.HEADER, worksheet, sheet)
        await self._read_section(SheetSection.FOOTER, worksheet, sheet)
        rows = await self._read_table(worksheet, sheet)
        logger.info("Sheet %s done: %s table rows delivered", sheet.index, rows)

    async def run(self, workbook: Workbook) -> None:
        for sheet in self.description.sheets:
            await self.read_worksheet(workbook, sheet)

    async def load(self, source: WorkbookSource) -> None:
        """Open ``source`` (path, bytes or binary stream) and import every declared sheet."""

        workbook = await asyncio.to_thread(open_workbook, source)
        try:
            await self.run(workbook)
        except SheetImportError as exc:
            logger.error("Import failed: %s", exc)
            raise
        finally:
            workbook.close()

    def create_stream(self) -> WorkbookStreamSink:
        """Return a writable byte sink that iterates rows once the bytes are complete.

        Rows read this way are only logged; they do not reach the handlers.
        """

        return WorkbookStreamSink()


__all__ = ["Importer", "ImporterOptions"]
