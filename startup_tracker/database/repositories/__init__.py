"""
Database repositories package.

Provides repository pattern implementation for database operations.
"""

from .base import BaseRepository, StorageError
from .startup_repository import StartupRepository

__all__ = [
    "BaseRepository",
    "StorageError",
    "StartupRepository",
]
