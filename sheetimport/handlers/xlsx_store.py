"""
RESPONSIBILITIES
- Persist extracted sections into an XLSX workbook via openpyxl.
- Guard each write with a cooperative lock file and save atomically.
PROCESS OVERVIEW
1. The first invocation removes a previous output unless ``append`` is set.
2. Header/footer records land in the ``sections`` sheet as key/value rows.
3. Table chunks land in ``table_<sheet_index>``; the first chunk fixes the
   column header, later unseen keys are appended as new columns.
4. Every write loads the workbook, appends, and swaps a temporary file in.
"""

from __future__ import annotations

import asyncio
import json
import os
import threading
from contextlib import contextmanager
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Iterator, Mapping, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from ..core.errors import SheetImportError
from ..core.logger import get_logger
from ..core.pipeline import ExtractionResult, HandlerFilter, ImporterHandler
from ..core.schema import SheetSection
from .jsonl import json_default

logger = get_logger(__name__)

SECTIONS_SHEET = "sections"
SECTIONS_COLUMNS: tuple[str, ...] = ("sheet_index", "sheet_name", "section", "field", "value")

_IN_PROCESS_LOCKS: dict[Path, threading.Lock] = {}
_LOCK_REGISTRY_GUARD = threading.Lock()


class StoreLockedError(SheetImportError):
    """Raised when the target workbook is locked by another writer."""


def _inprocess_lock(path: Path) -> threading.Lock:
    with _LOCK_REGISTRY_GUARD:
        lock = _IN_PROCESS_LOCKS.get(path)
        if lock is None:
            lock = threading.Lock()
            _IN_PROCESS_LOCKS[path] = lock
        return lock


@contextmanager
def workbook_lock(path: Path) -> Iterator[None]:
    """Acquire a cooperative lock file guarding the given workbook."""

    path = path.resolve()
    inproc = _inprocess_lock(path)
    if not inproc.acquire(timeout=10):
        raise StoreLockedError(f"Timeout acquiring in-process lock for {path}")
    lock_path = path.with_suffix(path.suffix + ".lock")
    fd: int | None = None
    try:
        try:
            fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError as exc:
            raise StoreLockedError(f"Workbook appears locked: {lock_path}") from exc
        os.write(fd, str(os.getpid()).encode("ascii"))
        yield
    finally:
        if fd is not None:
            os.close(fd)
            os.unlink(lock_path)
        inproc.release()


def _atomic_save(workbook: Workbook, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    workbook.save(tmp_path)
    os.replace(tmp_path, path)


def _cell_value(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool, datetime, date, time)):
        return value
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, ensure_ascii=False, default=json_default)
    return str(value)


def _header(worksheet: Worksheet) -> list[str]:
    row = next(worksheet.iter_rows(min_row=1, max_row=1, values_only=True), None)
    return [str(cell) for cell in (row or ()) if cell is not None]


def _sheet(workbook: Workbook, title: str, columns: Sequence[str]) -> Worksheet:
    if title in workbook.sheetnames:
        return workbook[title]
    worksheet = workbook.create_sheet(title=title)
    worksheet.append(list(columns))
    return worksheet


class XlsxStoreHandler(ImporterHandler):
    """Write sections and table chunks into an output workbook."""

    name = "xlsx"

    def __init__(self, path: Path | str, *, append: bool = False) -> None:
        self.path = Path(path).expanduser()
        self._fresh = not append

    async def run(self, result: ExtractionResult, filter: HandlerFilter) -> None:  # noqa: A002
        await asyncio.to_thread(self._write, result, filter)

    def _open(self) -> Workbook:
        if self._fresh:
            self._fresh = False
            if self.path.exists():
                self.path.unlink()
        if self.path.exists():
            return load_workbook(self.path)
        workbook = Workbook()
        workbook.remove(workbook.active)
        return workbook

    def _write(self, result: ExtractionResult, filter: HandlerFilter) -> None:  # noqa: A002
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with workbook_lock(self.path):
            workbook = self._open()
            try:
                if filter.section is SheetSection.TABLE:
                    self._append_table(workbook, result, filter)
                else:
                    self._append_section(workbook, result, filter)
                _atomic_save(workbook, self.path)
            finally:
                workbook.close()

    def _append_section(self, workbook: Workbook, result: ExtractionResult, filter: HandlerFilter) -> None:  # noqa: A002
        worksheet = _sheet(workbook, SECTIONS_SHEET, SECTIONS_COLUMNS)
        record = getattr(result, filter.section.value) or {}
        for field_name, value in record.items():
            worksheet.append(
                [filter.sheet_index, filter.sheet_name, filter.section.value, field_name, _cell_value(value)]
            )

    def _append_table(self, workbook: Workbook, result: ExtractionResult, filter: HandlerFilter) -> None:  # noqa: A002
        rows = result.table or []
        if not rows:
            return
        title = f"table_{filter.sheet_index}"
        worksheet = _sheet(workbook, title, list(rows[0].keys()))
        columns = _header(worksheet)
        for row in rows:
            for key in row:
                if key not in columns:
                    columns.append(key)
                    worksheet.cell(row=1, column=len(columns), value=key)
            worksheet.append([_cell_value(row.get(column)) for column in columns])
        logger.debug("Stored %s rows in %s!%s", len(rows), self.path.name, title)
