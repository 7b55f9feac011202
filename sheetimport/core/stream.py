"""Progressive byte sink for workbooks.

Incomplete extension point: bytes written to the sink are buffered and, once
the sink is closed, each worksheet is walked row by row in read-only mode.
Rows are only logged and counted; nothing is sent through the handler
pipeline.
"""

from __future__ import annotations

import tempfile
from typing import Optional

from openpyxl import load_workbook

from .logger import get_logger

logger = get_logger(__name__)

_SPOOL_LIMIT = 8 * 1024 * 1024


class WorkbookStreamSink:
    """Writable sink accepting workbook bytes incrementally."""

    def __init__(self) -> None:
        self._buffer = tempfile.SpooledTemporaryFile(max_size=_SPOOL_LIMIT)
        self._closed = False
        self.bytes_written = 0
        self.rows_seen = 0
        self.sheets_seen: list[str] = []

    @property
    def closed(self) -> bool:
        return self._closed

    def writable(self) -> bool:
        return not self._closed

    def write(self, data: bytes) -> int:
        if self._closed:
            raise ValueError("write to a closed workbook stream")
        written = self._buffer.write(data)
        self.bytes_written += written
        return written

    def close(self) -> int:
        """Finish the stream and walk the buffered workbook; returns rows seen."""

        if self._closed:
            return self.rows_seen
        self._closed = True
        try:
            if self.bytes_written:
                self._buffer.seek(0)
                self._iterate_rows()
        finally:
            self._buffer.close()
        return self.rows_seen

    def _iterate_rows(self) -> None:
        workbook = load_workbook(self._buffer, read_only=True, data_only=True)
        try:
            for worksheet in workbook.worksheets:
                self.sheets_seen.append(worksheet.title)
                for row in worksheet.iter_rows(values_only=True):
                    self.rows_seen += 1
                    logger.debug("stream row sheet=%s values=%s", worksheet.title, row)
        finally:
            workbook.close()
        logger.info("Workbook stream finished: %s sheets, %s rows", len(self.sheets_seen), self.rows_seen)

    def __enter__(self) -> "WorkbookStreamSink":
        return self

    def __exit__(self, exc_type: Optional[type], exc: Optional[BaseException], tb: object) -> None:
        if exc_type is None:
            self.close()
        else:
            self._closed = True
            self._buffer.close()


__all__ = ["WorkbookStreamSink"]
