"""Importer profile loading.

A profile is a YAML file naming the schema, chunking, date format and the
handlers to attach. Relative paths are resolved against the profile's
directory. ``SHEETIMPORT_*`` environment variables (a ``.env`` file is read
if present) override the file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError

from sheetimport.core.errors import ConfigError
from sheetimport.core.importer import ImporterOptions
from sheetimport.handlers import handler_from_config

CHUNK_SIZE_ENV = "SHEETIMPORT_CHUNK_SIZE"
DATE_FORMAT_ENV = "SHEETIMPORT_DATE_FORMAT"


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"profile not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("profile must be a mapping")
    return data


def _env_overrides(section: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(section)
    chunk_size = os.getenv(CHUNK_SIZE_ENV)
    if chunk_size:
        try:
            merged["chunk_size"] = int(chunk_size)
        except ValueError as exc:
            raise ConfigError(f"{CHUNK_SIZE_ENV} must be an integer, got {chunk_size!r}") from exc
    date_format = os.getenv(DATE_FORMAT_ENV)
    if date_format:
        merged["date_format"] = date_format
    return merged


def build_options(section: Mapping[str, Any], base_dir: Path) -> ImporterOptions:
    """Turn the ``importer`` mapping of a profile into :class:`ImporterOptions`."""

    schema = section.get("schema")
    if not schema:
        raise ConfigError("importer.schema is required")
    schema_path = Path(str(schema)).expanduser()
    if not schema_path.is_absolute():
        schema_path = base_dir / schema_path

    handlers_node = section.get("handlers") or []
    if not isinstance(handlers_node, list):
        raise ConfigError("importer.handlers must be a list")
    handlers = []
    for idx, entry in enumerate(handlers_node):
        if not isinstance(entry, Mapping):
            raise ConfigError(f"importer.handlers[{idx}] must be a mapping")
        handlers.append(handler_from_config(entry, base_dir))

    try:
        return ImporterOptions(
            schema_path=schema_path,
            chunk_size=section.get("chunk_size", 1),
            date_format=section.get("date_format"),
            handlers=handlers,
        )
    except PydanticValidationError as exc:
        raise ConfigError(f"invalid importer profile: {exc}") from exc


def load_importer_profile(path: str | Path) -> ImporterOptions:
    """Load importer options from a YAML profile."""

    load_dotenv(override=False)
    profile_path = Path(path).expanduser().resolve()
    data = _load_yaml(profile_path)
    section = data.get("importer")
    if not isinstance(section, dict):
        raise ConfigError("profile must define an 'importer' mapping")
    return build_options(_env_overrides(section), profile_path.parent)


__all__ = ["build_options", "load_importer_profile"]
