"""Thin adapter over openpyxl exposing the reads the importer needs.

Cell values are the cached results stored in the file (``data_only=True``);
formulas are never evaluated here.
"""

from __future__ import annotations

import io
import os
from pathlib import Path
from typing import IO, Any, List, Optional, Union

from openpyxl import load_workbook
from openpyxl.workbook.workbook import Workbook as OpenpyxlWorkbook
from openpyxl.worksheet.worksheet import Worksheet as OpenpyxlWorksheet

from .errors import SourceReadError
from .logger import get_logger

logger = get_logger(__name__)

WorkbookSource = Union[str, os.PathLike, bytes, bytearray, memoryview, IO[bytes]]


class Worksheet:
    """Read-only view on a single worksheet."""

    def __init__(self, sheet: OpenpyxlWorksheet) -> None:
        self._sheet = sheet
        # cell lookups by address materialize cells, so pin the extent first
        self._row_count = sheet.max_row or 0

    @property
    def title(self) -> str:
        return self._sheet.title

    @property
    def row_count(self) -> int:
        return self._row_count

    def get_cell_value(self, address: str) -> Any:
        return self._sheet[address].value

    def get_rows(self, start: int, count: int) -> List[tuple[Any, ...]]:
        """Return ``count`` rows starting at 1-based row ``start``, as raw values."""

        if count <= 0:
            return []
        return [
            tuple(row)
            for row in self._sheet.iter_rows(min_row=start, max_row=start + count - 1, values_only=True)
        ]


class Workbook:
    """Loaded workbook with 1-based positional sheet access."""

    def __init__(self, workbook: OpenpyxlWorkbook) -> None:
        self._workbook = workbook

    @property
    def sheet_names(self) -> list[str]:
        return list(self._workbook.sheetnames)

    def get_sheet(self, position: int) -> Optional[Worksheet]:
        sheets = self._workbook.worksheets
        if position < 1 or position > len(sheets):
            return None
        return Worksheet(sheets[position - 1])

    def close(self) -> None:
        self._workbook.close()


def _as_binary_stream(source: WorkbookSource) -> Union[str, IO[bytes]]:
    if isinstance(source, (str, os.PathLike)):
        return str(Path(source).expanduser())
    if isinstance(source, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(source))
    if hasattr(source, "read"):
        if hasattr(source, "seekable") and source.seekable():
            return source
        # zip parsing needs random access
        return io.BytesIO(source.read())
    raise SourceReadError(f"unsupported workbook source: {type(source).__name__}")


def open_workbook(source: WorkbookSource) -> Workbook:
    """Open a workbook from a path, an in-memory buffer or a binary stream.

    Errors raised by openpyxl (corrupt archive, unknown format, missing file)
    propagate unchanged.
    """

    target = _as_binary_stream(source)
    logger.debug("Opening workbook from %s", target if isinstance(target, str) else type(source).__name__)
    workbook = load_workbook(target, data_only=True)
    return Workbook(workbook)


__all__ = ["Workbook", "WorkbookSource", "Worksheet", "open_workbook"]
