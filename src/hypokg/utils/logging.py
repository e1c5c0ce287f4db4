"""
Logging for HypoKG.

All loggers live under the ``hypokg`` namespace so a single call to
``setup_logging`` (or ``configure_logging`` from a loaded config) controls
every phase. Library code only ever asks for loggers; handlers are installed
by entry points such as the CLI.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from .config import GeneralConfig, get_logs_dir

ROOT_LOGGER = "hypokg"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEBUG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "%(filename)s:%(lineno)d - %(message)s"
)


def _resolve_log_path(log_file: Union[str, Path]) -> Path:
    """Relative log files go under the project's logs/ directory."""
    log_path = Path(log_file)
    if not log_path.is_absolute():
        log_path = get_logs_dir() / log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return log_path


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Install console (stderr) and optional file handlers on the hypokg logger.

    Calling it again replaces the previous handlers, so the CLI and tests can
    reconfigure freely.

    Args:
        level: Level name; unknown names fall back to INFO
        log_file: Optional log file, relative paths resolve under logs/
        format_string: Record format; DEBUG runs include file and line

    Returns:
        The ``hypokg`` logger.
    """
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)
    if format_string is None:
        format_string = DEBUG_FORMAT if numeric_level <= logging.DEBUG else LOG_FORMAT
    formatter = logging.Formatter(format_string)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(numeric_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(_resolve_log_path(log_file)))

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def configure_logging(
    general: GeneralConfig,
    verbose: bool = False,
    log_file: Optional[str] = None
) -> logging.Logger:
    """Set up logging from the ``general.logging`` section; flags override it."""
    level = "DEBUG" if verbose else general.logging.get("level") or "INFO"
    return setup_logging(level=level, log_file=log_file or general.logging.get("file"))


def get_logger(name: str) -> logging.Logger:
    """Logger ``hypokg.<name>``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


class LoggerMixin:
    """Gives a component class a ``hypokg.<ClassName>`` logger."""

    @property
    def logger(self) -> logging.Logger:
        return get_logger(self.__class__.__name__)
