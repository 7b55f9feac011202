"""Append each extracted section to a JSON-lines file."""

from __future__ import annotations

import json
from datetime import date, datetime, time
from decimal import Decimal
from pathlib import Path
from typing import Any

from ..core.logger import get_logger
from ..core.pipeline import ExtractionResult, HandlerFilter, ImporterHandler

logger = get_logger(__name__)


def json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return str(value)


class JsonLinesHandler(ImporterHandler):
    """Write one line per invocation: provenance plus the section payload.

    The file is truncated on the first invocation unless ``append`` is set.
    """

    name = "jsonl"

    def __init__(self, path: Path | str, *, append: bool = False) -> None:
        self.path = Path(path).expanduser()
        self._mode = "a" if append else "w"
        self.lines_written = 0

    async def run(self, result: ExtractionResult, filter: HandlerFilter) -> None:  # noqa: A002
        line = {
            "sheet_index": filter.sheet_index,
            "sheet_name": filter.sheet_name,
            "section": filter.section.value,
            **result.to_dict(),
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open(self._mode, encoding="utf-8") as fh:
            fh.write(json.dumps(line, ensure_ascii=False, default=json_default))
            fh.write("\n")
        self._mode = "a"
        self.lines_written += 1
