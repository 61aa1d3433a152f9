"""Simple logging utilities for rankbar."""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(level: str = "WARNING", log_file: Optional[Path] = None) -> logging.Logger:
    """Configure the ``rankbar`` package logger.

    With a ``log_file`` the output goes only to that file, which keeps the
    TUI screen clean; otherwise it goes to stderr.
    """
    logger = logging.getLogger("rankbar")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        output = logging.FileHandler(log_file)
    else:
        output = logging.StreamHandler(sys.stderr)

    output.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(output)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    logger.propagate = False
    return logger
