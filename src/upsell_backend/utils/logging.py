"""Rich-backed logging for the upsell backend."""

from __future__ import annotations

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

from upsell_backend.utils.diagnostics import DiagnosticError

Logger = logging.Logger

_LOGGER_NAME = "upsell"


def _rich_handler() -> RichHandler:
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_time=True,
        show_level=True,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def get_logger(level: str | None = None) -> logging.Logger:
    """Return the ``upsell`` logger, attaching the Rich handler on first use.

    Passing ``level`` sets the logger's level on every call, so the last caller wins.
    """

    logger = logging.getLogger(_LOGGER_NAME)
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(_rich_handler())
        logger.propagate = False
        if logger.level == logging.NOTSET:
            logger.setLevel(logging.INFO)
    if level is not None:
        logger.setLevel(level.upper())
    return logger


def log_structured(logger: Logger, event: str, **extra: Any) -> None:
    """Emit an info event with ``extra`` context attached."""

    logger.info("%s", event, extra=extra)


def log_diagnostic(logger: Logger, event: str, diagnostic: DiagnosticError, **extra: Any) -> None:
    """Log an upstream failure at error level together with its diagnostic fields."""

    logger.error("%s: %s", event, diagnostic, extra={**diagnostic.to_extra(), **extra})


__all__ = ["get_logger", "log_structured", "log_diagnostic", "Logger"]
