"""Typer based command line entry points for sheetimport."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from pathlib import Path
from typing import Optional

import typer

from sheetimport.config import load_importer_profile
from sheetimport.core.errors import ConfigError, ExtractionError
from sheetimport.core.importer import Importer, ImporterOptions
from sheetimport.core.logger import configure_logging, get_logger
from sheetimport.core.pipeline import ExtractionResult, HandlerFilter, ImporterHandler
from sheetimport.core.resolver import resolve_cell_descriptions
from sheetimport.core.schema import SheetSection, load_import_description
from sheetimport.handlers import JsonLinesHandler, XlsxStoreHandler

app = typer.Typer(help="Extract schema-described records from spreadsheet workbooks.")


class _SummaryHandler(ImporterHandler):
    """Counts invocations and table rows for the final report."""

    name = "summary"

    def __init__(self) -> None:
        self.sections: Counter[str] = Counter()
        self.rows = 0

    def run(self, result: ExtractionResult, filter: HandlerFilter) -> None:  # noqa: A002
        self.sections[filter.section.value] += 1
        self.rows += len(result.table or [])


@app.callback()
def main_callback(
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (DEBUG/INFO/WARNING)."),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Directory for the rotating log file."),
) -> None:
    """Configure logging before executing commands."""

    level_value = getattr(logging, log_level.upper(), None)
    if not isinstance(level_value, int):
        raise typer.BadParameter(f"Unknown log level: {log_level}")
    logger = configure_logging(log_dir)
    logger.setLevel(level_value)


@app.command("run")
def run_import(
    workbook: Path = typer.Argument(..., exists=True, dir_okay=False, resolve_path=True, help="Workbook to import."),
    schema: Optional[Path] = typer.Option(None, "--schema", help="Import description (YAML or JSON)."),
    profile: Optional[Path] = typer.Option(None, "--profile", help="Importer profile YAML."),
    chunk_size: Optional[int] = typer.Option(None, "--chunk-size", min=1, help="Table rows per handler call."),
    date_format: Optional[str] = typer.Option(None, "--date-format", help="strptime format for date cells."),
    jsonl: Optional[Path] = typer.Option(None, "--jsonl", help="Write sections to a JSON-lines file."),
    xlsx: Optional[Path] = typer.Option(None, "--xlsx", help="Write sections to an XLSX workbook."),
) -> None:
    """Import WORKBOOK and report what reached the handlers."""

    logger = get_logger("cli")
    if (schema is None) == (profile is None):
        raise typer.BadParameter("Provide exactly one of --schema or --profile.")

    try:
        if profile is not None:
            options = load_importer_profile(profile)
        else:
            options = ImporterOptions(schema_path=schema)
        updates = {}
        if chunk_size is not None:
            updates["chunk_size"] = chunk_size
        if date_format is not None:
            updates["date_format"] = date_format
        handlers = list(options.handlers)
        if jsonl is not None:
            handlers.append(JsonLinesHandler(jsonl))
        if xlsx is not None:
            handlers.append(XlsxStoreHandler(xlsx))
        summary = _SummaryHandler()
        handlers.append(summary)
        updates["handlers"] = handlers
        importer = Importer(options.model_copy(update=updates))
    except ConfigError as exc:
        logger.error("sheetimport.cli config_error: %s", exc)
        typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc

    try:
        asyncio.run(importer.load(workbook))
    except ExtractionError as exc:
        typer.secho(f"Import failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(
        f"header={summary.sections['header']} footer={summary.sections['footer']} "
        f"table_chunks={summary.sections['table']} rows={summary.rows}"
    )


@app.command("sections")
def show_sections(
    schema: Path = typer.Argument(..., exists=True, dir_okay=False, resolve_path=True, help="Import description."),
) -> None:
    """Print the resolved field order per sheet and section."""

    try:
        description = load_import_description(schema)
    except ConfigError as exc:
        typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc

    for sheet in description.sheets:
        end = sheet.end_table - 1 if sheet.end_table else "end"
        typer.echo(f"sheet {sheet.index} (table rows {sheet.start_table + 1}..{end})")
        for section in SheetSection:
            fields = resolve_cell_descriptions(section, sheet)
            if not fields:
                continue
            labels = ", ".join(
                f"{cell.field_name}@{cell.address}" if cell.address else cell.field_name for cell in fields
            )
            typer.echo(f"  {section.value}: {labels}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
