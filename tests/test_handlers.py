"""Tests for the built-in handlers and the handler factory."""

from __future__ import annotations

import asyncio
import inspect
import json
from datetime import datetime
from pathlib import Path

import pytest
from openpyxl import load_workbook

from sheetimport.core.errors import ConfigError
from sheetimport.core.pipeline import ExtractionResult, HandlerFilter
from sheetimport.core.schema import SheetSection
from sheetimport.handlers import (
    DataFrameHandler,
    JsonLinesHandler,
    RecordingHandler,
    XlsxStoreHandler,
    handler_from_config,
)
from sheetimport.handlers.xlsx_store import StoreLockedError, workbook_lock


def _feed(handler, *calls) -> None:
    async def _go() -> None:
        for result, flt in calls:
            outcome = handler.run(result, flt)
            if inspect.isawaitable(outcome):
                await outcome

    asyncio.run(_go())


HEADER = HandlerFilter(0, SheetSection.HEADER, "Report")
TABLE = HandlerFilter(0, SheetSection.TABLE, "Report")


def test_jsonl_handler_writes_one_line_per_call(tmp_path: Path) -> None:
    path = tmp_path / "out" / "sections.jsonl"
    path.parent.mkdir()
    path.write_text("stale\n", encoding="utf-8")
    handler = JsonLinesHandler(path)

    _feed(
        handler,
        (ExtractionResult(header={"issued": datetime(2024, 1, 2)}), HEADER),
        (ExtractionResult(table=[{"a": 1}, {"a": 2}]), TABLE),
    )

    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert lines == [
        {"sheet_index": 0, "sheet_name": "Report", "section": "header", "header": {"issued": "2024-01-02T00:00:00"}},
        {"sheet_index": 0, "sheet_name": "Report", "section": "table", "table": [{"a": 1}, {"a": 2}]},
    ]
    assert handler.lines_written == 2


def test_xlsx_handler_stores_sections_and_growing_tables(tmp_path: Path) -> None:
    path = tmp_path / "store.xlsx"
    handler = XlsxStoreHandler(path)

    _feed(
        handler,
        (ExtractionResult(header={"total": 42, "tags": ["a"]}), HEADER),
        (ExtractionResult(table=[{"a": 1, "b": "x"}]), TABLE),
        (ExtractionResult(table=[{"a": 2, "b": "y", "c": True}]), TABLE),
    )

    workbook = load_workbook(path)
    try:
        sections = list(workbook["sections"].iter_rows(values_only=True))
        assert sections == [
            ("sheet_index", "sheet_name", "section", "field", "value"),
            (0, "Report", "header", "total", 42),
            (0, "Report", "header", "tags", '["a"]'),
        ]
        table = list(workbook["table_0"].iter_rows(values_only=True))
        assert table == [("a", "b", "c"), (1, "x", None), (2, "y", True)]
    finally:
        workbook.close()
    assert not path.with_suffix(".xlsx.lock").exists()


def test_workbook_lock_rejects_a_held_lock_file(tmp_path: Path) -> None:
    path = tmp_path / "busy.xlsx"
    (tmp_path / "busy.xlsx.lock").write_text("1", encoding="utf-8")

    with pytest.raises(StoreLockedError):
        with workbook_lock(path):
            pass


def test_dataframe_handler_concatenates_chunks() -> None:
    handler = DataFrameHandler()

    _feed(
        handler,
        (ExtractionResult(header={"id": 7}), HEADER),
        (ExtractionResult(table=[{"a": 1}, {"a": 2}]), TABLE),
        (ExtractionResult(table=[{"a": 3}]), TABLE),
        (ExtractionResult(footer=None), HandlerFilter(0, SheetSection.FOOTER, "Report")),
    )

    assert handler.frame(0)["a"].tolist() == [1, 2, 3]
    assert handler.frame(5).empty
    assert handler.headers == {0: {"id": 7}}
    assert handler.footers == {0: None}
    assert list(handler.frames) == [0]


def test_recording_handler_keeps_detached_copies() -> None:
    handler = RecordingHandler()
    rows = [{"a": 1}]

    _feed(handler, (ExtractionResult(table=rows), TABLE))
    rows[0]["a"] = 99

    assert handler.table_rows(0) == [{"a": 1}]
    assert handler.table_rows(1) == []


def test_handler_factory_resolves_relative_paths(tmp_path: Path) -> None:
    jsonl = handler_from_config({"type": "jsonl", "path": "out/a.jsonl"}, tmp_path)
    xlsx = handler_from_config({"type": "excel", "path": "b.xlsx", "append": True}, tmp_path)

    assert isinstance(jsonl, JsonLinesHandler)
    assert jsonl.path == tmp_path / "out" / "a.jsonl"
    assert isinstance(xlsx, XlsxStoreHandler)
    assert xlsx.path == tmp_path / "b.xlsx"
    assert isinstance(handler_from_config({"type": "pandas"}), DataFrameHandler)
    assert isinstance(handler_from_config({"type": "memory"}), RecordingHandler)


@pytest.mark.parametrize("cfg", [{"type": "ftp"}, {}, {"type": "jsonl"}])
def test_handler_factory_rejects_bad_entries(cfg) -> None:
    with pytest.raises(ConfigError):
        handler_from_config(cfg)
