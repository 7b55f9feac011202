"""In-memory handler keeping every invocation it sees."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from ..core.pipeline import ExtractionResult, HandlerFilter, ImporterHandler
from ..core.schema import SheetSection


@dataclass(frozen=True, slots=True)
class RecordedCall:
    result: ExtractionResult
    filter: HandlerFilter


class RecordingHandler(ImporterHandler):
    """Copy each result into ``calls``; useful for tests and small workbooks."""

    name = "recorder"

    def __init__(self) -> None:
        self.calls: List[RecordedCall] = []

    async def run(self, result: ExtractionResult, filter: HandlerFilter) -> None:  # noqa: A002
        snapshot = ExtractionResult(
            header=dict(result.header) if result.header is not None else None,
            footer=dict(result.footer) if result.footer is not None else None,
            table=[dict(row) for row in result.table] if result.table is not None else None,
        )
        self.calls.append(RecordedCall(result=snapshot, filter=filter))

    def sections(self, section: SheetSection | str) -> List[RecordedCall]:
        section = SheetSection(section)
        return [call for call in self.calls if call.filter.section is section]

    def table_rows(self, sheet_index: int | None = None) -> List[Dict[str, Any]]:
        rows: List[Dict[str, Any]] = []
        for call in self.sections(SheetSection.TABLE):
            if sheet_index is not None and call.filter.sheet_index != sheet_index:
                continue
            rows.extend(call.result.table or [])
        return rows
