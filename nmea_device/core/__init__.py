"""Shared infrastructure: logging and config file loading."""

from .config_loader import load_config_values
from .logging_config import configure_logging
from .logging_utils import StructuredLogger, ensure_structured_logger, get_module_logger

__all__ = [
    "StructuredLogger",
    "configure_logging",
    "ensure_structured_logger",
    "get_module_logger",
    "load_config_values",
]
