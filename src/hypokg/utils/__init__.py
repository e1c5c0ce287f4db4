"""Utility modules for HypoKG."""

from .config import load_config, HypoKGConfig
from .logging import setup_logging, configure_logging, get_logger, LoggerMixin

__all__ = [
    "load_config",
    "HypoKGConfig",
    "setup_logging",
    "configure_logging",
    "get_logger",
    "LoggerMixin",
]
