"""Logging setup for the CLI."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from dbhash.cli.common.output import err_console


def configure_logging(verbose: bool) -> None:
    """Route `dbhash` debug logs to stderr through Rich when `verbose` is set."""
    if not verbose:
        return

    logger = logging.getLogger("dbhash")
    logger.setLevel(logging.DEBUG)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(
            RichHandler(console=err_console, show_path=False, markup=False)
        )
