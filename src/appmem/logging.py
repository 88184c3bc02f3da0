"""Consoles and logging for appmem.

The report is the only thing written to stdout. Diagnostics and errors go
to stderr so ``appmem --json | jq`` keeps working with ``--verbose``.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "appmem"

_report_console = Console()
_diagnostic_console = Console(stderr=True)


def get_logger() -> logging.Logger:
    """The package logger, writing through rich to stderr."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = RichHandler(
            console=_diagnostic_console, show_time=False, show_path=False, markup=False
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def set_verbose(verbose: bool) -> None:
    """Show debug messages, such as skipped processes, or hide them again."""
    get_logger().setLevel(logging.DEBUG if verbose else logging.INFO)


def console() -> Console:
    return _report_console


def err_console() -> Console:
    return _diagnostic_console
