from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER_NAME = "sheetimport"
LOG_DIR_ENV = "SHEETIMPORT_LOG_DIR"

_CONFIGURED = False


def _build_formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def configure_logging(log_dir: Path | str | None = None, level: int = logging.INFO) -> logging.Logger:
    """Configure the package root logger once.

    A console handler on stderr is always installed. A rotating file handler
    writing ``sheetimport.log`` is added when ``log_dir`` (or the
    ``SHEETIMPORT_LOG_DIR`` environment variable) names a directory.
    """
    global _CONFIGURED
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if _CONFIGURED:
        if log_dir is not None:
            _attach_file_handler(logger, Path(log_dir))
        return logger

    logger.setLevel(level)
    logger.propagate = False

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_build_formatter())
    logger.addHandler(console)

    target = log_dir or os.getenv(LOG_DIR_ENV)
    if target:
        _attach_file_handler(logger, Path(target))

    _CONFIGURED = True
    return logger


def _attach_file_handler(logger: logging.Logger, log_dir: Path) -> None:
    log_dir = log_dir.expanduser()
    log_path = (log_dir / "sheetimport.log").resolve()
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and Path(handler.baseFilename) == log_path:
            return
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(log_path, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(_build_formatter())
    logger.addHandler(file_handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger scoped under the ``sheetimport`` namespace."""

    root = configure_logging()
    if not name:
        return root
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return root.getChild(name)
