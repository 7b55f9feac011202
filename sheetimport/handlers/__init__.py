"""Built-in handlers and the config-driven handler factory."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from ..core.errors import ConfigError
from ..core.pipeline import ImporterHandler
from .dataframe import DataFrameHandler
from .jsonl import JsonLinesHandler
from .recorder import RecordedCall, RecordingHandler
from .xlsx_store import XlsxStoreHandler


def handler_from_config(cfg: Mapping[str, Any], base_dir: Path | None = None) -> ImporterHandler:
    """Build a handler from a profile entry such as ``{type: jsonl, path: out.jsonl}``."""

    htype = str((cfg or {}).get("type", "")).lower()
    append = bool(cfg.get("append", False))
    if htype in {"jsonl", "json_lines"}:
        return JsonLinesHandler(_resolve_path(cfg, base_dir), append=append)
    if htype in {"xlsx", "excel"}:
        return XlsxStoreHandler(_resolve_path(cfg, base_dir), append=append)
    if htype in {"dataframe", "pandas"}:
        return DataFrameHandler()
    if htype in {"recorder", "memory"}:
        return RecordingHandler()
    raise ConfigError(f"unknown handler type: {htype or '<missing>'}")


def _resolve_path(cfg: Mapping[str, Any], base_dir: Path | None) -> Path:
    raw = cfg.get("path")
    if not raw:
        raise ConfigError(f"handler {cfg.get('type')!r} requires a path")
    path = Path(str(raw)).expanduser()
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    return path


__all__ = [
    "DataFrameHandler",
    "JsonLinesHandler",
    "RecordedCall",
    "RecordingHandler",
    "XlsxStoreHandler",
    "handler_from_config",
]
