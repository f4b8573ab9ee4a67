"""
Application services built on top of the scrapers and the database layer.
"""

from .ingestion import IngestionService, IngestionSummary

__all__ = [
    "IngestionService",
    "IngestionSummary",
]
