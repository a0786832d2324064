"""Centralized logging configuration for the Tyr CLI.

Library modules only ever call ``logging.getLogger(__name__)``; this module
is used by the command-line entry point to decide where those records go.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_FORMAT = "%(name)s | %(message)s"


def setup_logging(level: str = "WARNING") -> None:
    """Configure the root logger with a single Rich handler on stderr.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR).
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Remove existing handlers so repeated CLI invocations don't duplicate output
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt="%H:%M:%S"))
    root_logger.addHandler(handler)

    # httpx logs every request at INFO; keep that for --verbose only
    logging.getLogger("httpx").setLevel(
        logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    )
