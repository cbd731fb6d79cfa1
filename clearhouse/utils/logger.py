"""
Logging setup for Clearhouse.

Every module logs through ``get_logger(name)`` under the ``clearhouse``
namespace. Records go to stdout through colorlog and, when a log
directory is given, to ``<log_dir>/clearhouse.log`` as plain text.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

import colorlog

ROOT_LOGGER = "clearhouse"
LOG_FILE = "clearhouse.log"

_FORMAT = "%(asctime)s [%(name)s] %(levelname)-8s %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

_console: Optional[logging.Handler] = None
_file: Optional[logging.Handler] = None


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Configure the ``clearhouse`` logger.

    The console handler is installed once; later calls change the level
    and swap the file handler. Module loggers exist from import time, so
    the CLI calls this again once it knows the requested level.

    Args:
        level: Level for the logger and all of its handlers
        log_dir: Also append records to ``clearhouse.log`` in this directory
    """
    global _console, _file
    root = logging.getLogger(ROOT_LOGGER)

    if _console is None:
        _console = colorlog.StreamHandler(sys.stdout)
        _console.setFormatter(colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s [%(name)s] %(levelname)-8s%(reset)s %(message)s",
            datefmt=_DATE_FORMAT,
            log_colors=_COLORS,
        ))
        root.addHandler(_console)

    if _file is not None:
        root.removeHandler(_file)
        _file.close()
        _file = None

    if log_dir is not None:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        _file = logging.FileHandler(path / LOG_FILE)
        _file.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
        root.addHandler(_file)

    root.setLevel(level)
    for handler in root.handlers:
        handler.setLevel(level)
    return root


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a subsystem ('catalog', 'clearing', 'storage', ...)"""
    if _console is None:
        setup_logging()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
