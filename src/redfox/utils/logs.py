"""Logging setup for the CLI."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "redfox"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def resolve_level(level: str, verbose: int = 0, quiet: bool = False) -> int:
    """Combine the configured level with -v/-q flags."""
    if quiet:
        return logging.WARNING
    if verbose > 0:
        return logging.DEBUG
    return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)


def configure_logging(
    level: str = "info",
    log_file: str | Path | None = None,
    verbose: int = 0,
    quiet: bool = False,
) -> logging.Logger:
    """Configure the ``redfox`` logger with a rich console handler and optional file."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_level(level, verbose, quiet))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=verbose > 1,
        rich_tracebacks=verbose > 0,
    )
    logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
