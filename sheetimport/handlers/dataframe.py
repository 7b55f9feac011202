"""Collect table chunks into pandas DataFrames per sheet."""

from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from ..core.pipeline import ExtractionResult, HandlerFilter, ImporterHandler
from ..core.schema import SheetSection


class DataFrameHandler(ImporterHandler):
    """Accumulate table rows per sheet; header/footer records are kept as dicts.

    Chunks are kept as separate frames and concatenated on access.
    """

    name = "dataframe"

    def __init__(self) -> None:
        self._chunks: Dict[int, List[pd.DataFrame]] = {}
        self.headers: Dict[int, Dict[str, Any] | None] = {}
        self.footers: Dict[int, Dict[str, Any] | None] = {}

    def run(self, result: ExtractionResult, filter: HandlerFilter) -> None:  # noqa: A002
        if filter.section is SheetSection.HEADER:
            self.headers[filter.sheet_index] = result.header
        elif filter.section is SheetSection.FOOTER:
            self.footers[filter.sheet_index] = result.footer
        elif result.table:
            self._chunks.setdefault(filter.sheet_index, []).append(pd.DataFrame.from_records(result.table))

    def frame(self, sheet_index: int) -> pd.DataFrame:
        chunks = self._chunks.get(sheet_index)
        if not chunks:
            return pd.DataFrame()
        return pd.concat(chunks, ignore_index=True)

    @property
    def frames(self) -> Dict[int, pd.DataFrame]:
        return {index: self.frame(index) for index in sorted(self._chunks)}
