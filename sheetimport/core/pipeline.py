"""Ordered post-processing of extracted sections.

Handlers form a transform chain: each one receives what the previous handler
returned, and a handler returning ``None`` passes its input through
unchanged. Handlers run one after another, never concurrently, and every
handler runs for every invocation.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, Iterable, List, Optional, Protocol, Union

from .logger import get_logger
from .schema import SheetSection

logger = get_logger(__name__)


@dataclass(slots=True)
class ExtractionResult:
    """Payload of one pipeline invocation.

    Header and footer invocations fill exactly one of ``header``/``footer``;
    table invocations carry one chunk of rows in ``table``.
    """

    header: Optional[Dict[str, Any]] = None
    footer: Optional[Dict[str, Any]] = None
    table: Optional[List[Dict[str, Any]]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.header is not None:
            payload["header"] = self.header
        if self.footer is not None:
            payload["footer"] = self.footer
        if self.table is not None:
            payload["table"] = self.table
        return payload


@dataclass(frozen=True, slots=True)
class HandlerFilter:
    """Provenance of an invocation: which sheet and section produced it."""

    sheet_index: int
    section: SheetSection
    sheet_name: Optional[str] = field(default=None, compare=False)


HandlerOutcome = Union[ExtractionResult, None, Awaitable[Optional[ExtractionResult]]]


class SupportsRun(Protocol):
    def run(self, result: ExtractionResult, filter: HandlerFilter) -> HandlerOutcome:  # noqa: A002
        ...


class ImporterHandler(ABC):
    """Base class for handlers consuming extracted sections.

    Subclasses implement ``run``. It may be ``async def`` or a plain method
    and may return a replacement result for the next handler, or ``None`` to
    pass the input on unchanged.
    """

    name: str = "handler"

    @abstractmethod
    def run(self, result: ExtractionResult, filter: HandlerFilter) -> HandlerOutcome:  # noqa: A002
        """Consume (and optionally transform) one extraction result."""


class HandlerPipeline:
    """Invoke handlers sequentially in registration order."""

    def __init__(self, handlers: Iterable[SupportsRun] = ()) -> None:
        self._handlers: List[SupportsRun] = list(handlers)
        for handler in self._handlers:
            if not callable(getattr(handler, "run", None)):
                raise TypeError(f"handler {handler!r} does not provide run(result, filter)")

    @property
    def handlers(self) -> tuple[SupportsRun, ...]:
        return tuple(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    async def invoke(self, result: ExtractionResult, filter: HandlerFilter) -> ExtractionResult:  # noqa: A002
        current = result
        for position, handler in enumerate(self._handlers, start=1):
            label = getattr(handler, "name", type(handler).__name__)
            logger.debug(
                "Handler %s/%s %s sheet=%s section=%s",
                position,
                len(self._handlers),
                label,
                filter.sheet_index,
                filter.section.value,
            )
            try:
                outcome = handler.run(current, filter)
                if inspect.isawaitable(outcome):
                    outcome = await outcome
            except Exception:
                logger.error("Handler %s failed on sheet=%s section=%s", label, filter.sheet_index, filter.section.value)
                raise
            if outcome is not None:
                current = outcome
        return current


__all__ = [
    "ExtractionResult",
    "HandlerFilter",
    "HandlerPipeline",
    "ImporterHandler",
    "SupportsRun",
]
