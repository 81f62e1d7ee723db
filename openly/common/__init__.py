"""Common utilities for Openly."""

from .logging_config import setup_logging, get_logger
from .urls import build_base_url, build_short_url

__all__ = [
    "setup_logging",
    "get_logger",
    "build_base_url",
    "build_short_url",
]
