"""
Logging for the statement_parser package.

Library modules only call logging.getLogger(__name__); handlers are attached
once, by an entrypoint, through configure_logging().
"""
from __future__ import annotations

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

from .config import get_settings

_PKG_LOGGER_NAME = "statement_parser"
_CONFIGURED = False


def _parse_level(level: Union[int, str, None]) -> int:
    if isinstance(level, int):
        return level
    if level is None:
        level = get_settings().log_level
    level = str(level).strip().upper()
    if level.isdigit():
        return int(level)
    numeric = getattr(logging, level, None)
    return numeric if isinstance(numeric, int) else logging.INFO


def configure_logging(level: Union[int, str, None] = None, console: Optional[Console] = None) -> logging.Logger:
    """Attach a single RichHandler (stderr) to the package logger. Idempotent."""
    global _CONFIGURED
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    logger.setLevel(_parse_level(level))
    if _CONFIGURED:
        return logger

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    handler = RichHandler(console=console or Console(stderr=True), show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False

    # pdfminer is very chatty at DEBUG
    logging.getLogger("pdfminer").setLevel(logging.WARNING)

    _CONFIGURED = True
    return logger


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
