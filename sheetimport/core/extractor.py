"""Section and table extraction from a worksheet."""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

from .converters import TypeParser
from .errors import ExtractionError
from .formatter import RecordBuilder, format_value
from .logger import get_logger
from .pipeline import ExtractionResult
from .resolver import resolve_cell_descriptions
from .schema import SheetDescription, SheetSection
from .workbook import Worksheet

logger = get_logger(__name__)


def extract_section(
    section: SheetSection | str,
    worksheet: Worksheet,
    sheet: SheetDescription,
    parser: TypeParser,
) -> ExtractionResult:
    """Fold the header or footer descriptions of ``sheet`` into one record.

    Returns a result whose section value is ``None`` when the section declares
    no fields.
    """

    section = SheetSection(section)
    if section is SheetSection.TABLE:
        raise ValueError("use TableExtractor for the table section")

    descriptions = resolve_cell_descriptions(section, sheet)
    record: Optional[Dict[str, Any]] = None
    if descriptions:
        builder = RecordBuilder(section)
        for description in descriptions:
            raw = worksheet.get_cell_value(description.address) if description.address else None
            try:
                formatted = format_value(description, raw, builder.context(), parser)
            except ExtractionError as exc:
                raise exc.locate(sheet_index=sheet.index, section=section.value)
            builder.set(formatted.name, formatted.value)
        record = builder.build()
    return ExtractionResult(**{section.value: record})


class TableExtractor:
    """Stream table rows of one worksheet in chunks of at most ``chunk_size``.

    Column ``i + 1`` of each row (column A first) feeds the ``i``-th resolved
    table description. The mapping is resolved once per sheet.
    """

    def __init__(
        self,
        sheet: SheetDescription,
        worksheet: Worksheet,
        parser: TypeParser,
        chunk_size: int = 1,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self.sheet = sheet
        self.worksheet = worksheet
        self.parser = parser
        self.chunk_size = chunk_size
        self.header_table = resolve_cell_descriptions(SheetSection.TABLE, sheet)

    @property
    def first_row(self) -> int:
        return self.sheet.start_table + 1

    @property
    def last_row(self) -> int:
        if self.sheet.end_table:
            return self.sheet.end_table - 1
        return self.worksheet.row_count

    def build_row(self, values: tuple[Any, ...], row_number: int) -> Dict[str, Any]:
        builder = RecordBuilder(SheetSection.TABLE)
        for position, description in enumerate(self.header_table):
            raw = values[position] if position < len(values) else None
            try:
                formatted = format_value(description, raw, builder.context(), self.parser)
            except ExtractionError as exc:
                raise exc.locate(sheet_index=self.sheet.index, section=SheetSection.TABLE.value, row=row_number)
            builder.set(formatted.name, formatted.value)
        return builder.build()

    def iter_chunks(self) -> Iterator[List[Dict[str, Any]]]:
        """Yield chunks of exactly ``chunk_size`` row records, the last one possibly shorter.

        Blank rows do not count towards a chunk; rows keep being fetched until
        the buffer is full or the table ends.
        """

        index = self.first_row
        last = self.last_row
        chunk: List[Dict[str, Any]] = []
        chunk_start = index
        while index <= last:
            count = min(self.chunk_size, last - index + 1)
            for offset, values in enumerate(self.worksheet.get_rows(index, count)):
                if all(value is None for value in values):
                    continue
                if not chunk:
                    chunk_start = index + offset
                chunk.append(self.build_row(values, index + offset))
                if len(chunk) == self.chunk_size:
                    self._log_chunk(chunk_start, index + offset, chunk)
                    yield chunk
                    chunk = []
            index += count
        if chunk:
            self._log_chunk(chunk_start, last, chunk)
            yield chunk

    def _log_chunk(self, first: int, final: int, chunk: List[Dict[str, Any]]) -> None:
        logger.debug(
            "Table chunk sheet=%s rows=%s-%s records=%s", self.sheet.index, first, final, len(chunk)
        )


__all__ = ["TableExtractor", "extract_section"]
