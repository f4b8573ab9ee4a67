"""
Base repository class.

Provides common read operations and query utilities for all repositories.
"""

import logging
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from ..models.base import Base

logger = logging.getLogger(__name__)

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=Base)


class StorageError(Exception):
    """Raised when a repository operation fails."""

    def __init__(self, message: str, operation: str = None):
        self.message = message
        self.operation = operation
        super().__init__(message)


class BaseRepository(Generic[ModelType]):
    """Base repository with common read operations."""

    # Columns used to order listings; subclasses override
    default_order: Sequence[Any] = ()

    def __init__(self, model: Type[ModelType], session: Session):
        """Initialize repository with model and session."""
        self.model = model
        self.session = session

    def get_all(self, limit: Optional[int] = None, offset: Optional[int] = None) -> List[ModelType]:
        """Get all model instances in default order with optional pagination."""
        try:
            stmt = select(self.model)

            if self.default_order:
                stmt = stmt.order_by(*self.default_order)
            if offset:
                stmt = stmt.offset(offset)
            if limit:
                stmt = stmt.limit(limit)

            result = self.session.execute(stmt)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Error getting all {self.model.__name__}: {e}")
            raise

    def count(self) -> int:
        """Count total number of model instances."""
        try:
            stmt = select(func.count()).select_from(self.model)
            return self.session.execute(stmt).scalar_one()
        except Exception as e:
            logger.error(f"Error counting {self.model.__name__}: {e}")
            raise

    def find_by(self, **kwargs) -> List[ModelType]:
        """Find model instances by field values."""
        try:
            conditions = []
            for key, value in kwargs.items():
                if hasattr(self.model, key):
                    conditions.append(getattr(self.model, key) == value)

            if not conditions:
                return []

            stmt = select(self.model).where(and_(*conditions))
            result = self.session.execute(stmt)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Error finding {self.model.__name__} by criteria: {e}")
            raise

    def find_one_by(self, **kwargs) -> Optional[ModelType]:
        """Find single model instance by field values."""
        instances = self.find_by(**kwargs)
        return instances[0] if instances else None

    def paginate(self, page: int = 1, page_size: int = 20) -> Dict[str, Any]:
        """Paginate model instances."""
        try:
            offset = (page - 1) * page_size

            total_count = self.count()
            instances = self.get_all(limit=page_size, offset=offset)

            total_pages = (total_count + page_size - 1) // page_size

            return {
                "items": instances,
                "total_count": total_count,
                "page": page,
                "page_size": page_size,
                "total_pages": total_pages,
                "has_next": page < total_pages,
                "has_prev": page > 1
            }
        except Exception as e:
            logger.error(f"Error paginating {self.model.__name__}: {e}")
            raise
