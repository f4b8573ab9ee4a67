"""
Database models for the Startup Tracker.
"""

from .base import Base
from .startup import Startup

__all__ = [
    "Base",
    "Startup",
]
