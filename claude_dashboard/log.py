"""Logging setup shared by the CLI and the dashboard."""

from __future__ import annotations

import logging
from pathlib import Path

from .config import LOG_FILE

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool = False, log_file: Path = LOG_FILE) -> None:
    """Send records to the log file; the TUI owns the terminal."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        filename=str(log_file),
    )
