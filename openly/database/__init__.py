"""Storage layer for Openly."""

from .base import OpenlyDBBase
from .sqlite import OpenlySQLiteDB
from .cache import RedisCache
from .models import Link

__all__ = ["OpenlyDBBase", "OpenlySQLiteDB", "RedisCache", "Link"]
