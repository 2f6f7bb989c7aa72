"""
Store module for short URL data.

This module implements the Strategy Pattern for pluggable persistence.
"""

from .strategies import (
    StoreStrategy,
    StoreError,
    ScanPage,
    RedisStore,
    SQLStore,
    InMemoryStore,
)
from .factory import StoreFactory, StoreBackend

__all__ = [
    "StoreStrategy",
    "StoreError",
    "ScanPage",
    "RedisStore",
    "SQLStore",
    "InMemoryStore",
    "StoreFactory",
    "StoreBackend",
]
