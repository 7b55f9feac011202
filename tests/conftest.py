from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Iterable, Mapping

import pytest
from openpyxl import Workbook

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sheetimport.core.schema import build_import_description  # noqa: E402


def build_workbook(path: Path, sheets: Iterable[Mapping[str, Any]]) -> Path:
    """Write a workbook where each sheet is ``{"title": str, "cells": {addr: value}, "rows": {row: [values]}}``."""

    wb = Workbook()
    wb.remove(wb.active)
    for layout in sheets:
        ws = wb.create_sheet(title=layout.get("title", f"Sheet{len(wb.sheetnames) + 1}"))
        for row_number, values in layout.get("rows", {}).items():
            for column, value in enumerate(values, start=1):
                if value is not None:
                    ws.cell(row=row_number, column=column, value=value)
        for address, value in layout.get("cells", {}).items():
            ws[address] = value
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    return path


@pytest.fixture()
def report_workbook(tmp_path: Path) -> Path:
    """Title row, header labels on row 2 and three data rows."""

    return build_workbook(
        tmp_path / "report.xlsx",
        [
            {
                "title": "Report",
                "rows": {
                    1: ["Monthly report"],
                    2: ["a", "b"],
                    3: [1, "x"],
                    4: [2, "y"],
                    5: [3, "z"],
                },
            }
        ],
    )


@pytest.fixture()
def table_description():
    return build_import_description(
        {
            "sheets": [
                {
                    "startTable": 2,
                    "content": [
                        {"fieldName": "a", "type": "number", "section": "table"},
                        {"fieldName": "b", "type": "string", "section": "table"},
                    ],
                }
            ]
        }
    )
