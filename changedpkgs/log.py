"""Logging setup for the command line."""

import logging

from rich.console import Console
from rich.logging import RichHandler

from .events import ImpactEvent, format_event

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

logger = logging.getLogger("changedpkgs")


def configure_logging(level: str = "warn", console: Console | None = None) -> None:
    """Send the package's log records to stderr through rich, at `level`."""
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        show_time=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(LEVELS[level])
    logger.propagate = False


def log_event(event: ImpactEvent) -> None:
    """Impact event callback that writes events to the debug log."""
    logger.debug(format_event(event), extra={"impact": event.to_dict()})
