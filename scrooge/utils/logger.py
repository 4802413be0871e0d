"""
Logging for Scrooge.

All loggers hang off the ``scrooge`` root so one call configures the
pool, handler and cli subsystems together. Console output is colored
with colorlog and written to stderr, which keeps stdout free for command
output such as ``keygen`` JSON.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

import colorlog

ROOT_LOGGER = "scrooge"
LOG_FILE_NAME = "scrooge.log"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_CONSOLE_FORMAT = "%(log_color)s%(asctime)s [%(name)s] %(levelname)-8s%(reset)s %(message)s"
_FILE_FORMAT = "%(asctime)s [%(name)s] %(levelname)-8s %(message)s"
_LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


class ScroogeLogger:
    """Owns the handlers attached to the ``scrooge`` root logger."""

    _configured = False

    @classmethod
    def setup(
        cls,
        level: int = logging.INFO,
        log_dir: Optional[Union[str, Path]] = None,
        log_to_file: bool = False,
        force: bool = False,
    ):
        """
        Attach a colored stderr handler, and optionally a file handler.

        Args:
            level: Threshold for the root logger and its handlers
            log_dir: Directory for ``scrooge.log`` (default ./logs)
            log_to_file: Also write plain-text logs to file
            force: Replace handlers from an earlier setup
        """
        if cls._configured and not force:
            return

        root = logging.getLogger(ROOT_LOGGER)
        root.setLevel(level)
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()

        console = colorlog.StreamHandler(sys.stderr)
        console.setFormatter(
            colorlog.ColoredFormatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT, log_colors=_LOG_COLORS)
        )
        root.addHandler(console)

        if log_to_file:
            directory = Path(log_dir) if log_dir else Path("logs")
            directory.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(directory / LOG_FILE_NAME)
            file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT))
            root.addHandler(file_handler)

        for handler in root.handlers:
            handler.setLevel(level)

        cls._configured = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Logger for a subsystem (``pool``, ``handler``, ``cli``)."""
        if not cls._configured:
            cls.setup()
        return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def get_logger(name: str) -> logging.Logger:
    return ScroogeLogger.get_logger(name)


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[Union[str, Path]] = None,
    log_to_file: bool = False,
):
    """Reconfigure logging, replacing any earlier handlers."""
    ScroogeLogger.setup(level=level, log_dir=log_dir, log_to_file=log_to_file, force=True)


def setup_from_config(config, debug: bool = False):
    """Configure logging from a ``LedgerConfig``; ``debug`` forces DEBUG."""
    setup_logging(
        level=logging.DEBUG if debug else config.log_level,
        log_dir=config.log_dir,
        log_to_file=config.log_to_file,
    )
