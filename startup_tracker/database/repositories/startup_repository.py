"""
Startup Repository

Data access for startups: ordered listing, counting and the insert-or-ignore
batch upsert keyed by company name.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...utils.logging import log_database_operation
from ..models.startup import NOT_FOUND, Startup
from .base import BaseRepository, StorageError


class StartupRepository(BaseRepository[Startup]):
    """Repository for startup records."""

    default_order = (Startup.created_at.desc(), Startup.name.asc())

    def __init__(self, session: Session):
        super().__init__(Startup, session)

    def list_startups(self, limit: Optional[int] = None, offset: int = 0) -> List[Dict[str, Any]]:
        """All startups, newest first."""
        return [startup.to_dict() for startup in self.get_all(limit=limit, offset=offset)]

    def _insert(self):
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return pg_insert(Startup)
        if dialect == "sqlite":
            return sqlite_insert(Startup)
        raise StorageError(f"Upsert not supported on dialect '{dialect}'", "upsert")

    def upsert_many(self, records: List[Dict[str, Any]]) -> int:
        """
        Insert records, ignoring any whose name already exists.

        Duplicate names inside the batch are collapsed first; the first
        occurrence wins. The whole batch is one statement, so it either lands
        completely or not at all.

        Args:
            records: Dicts with name, website, linkedin_url and optional
                source / created_at

        Returns:
            Number of rows actually inserted
        """
        rows = []
        seen = set()
        now = datetime.now(timezone.utc)
        for record in records:
            name = record.get("name")
            if not name or name in seen:
                continue
            seen.add(name)
            created_at = record.get("created_at") or now
            rows.append({
                "id": uuid.uuid4(),
                "name": name,
                "website": record.get("website") or NOT_FOUND,
                "linkedin_url": record.get("linkedin_url") or NOT_FOUND,
                "source": record.get("source"),
                "created_at": created_at,
                "updated_at": created_at,
            })

        if not rows:
            return 0

        stmt = self._insert().values(rows).on_conflict_do_nothing(index_elements=["name"])
        try:
            result = self.session.execute(stmt)
            self.session.flush()
        except SQLAlchemyError as e:
            log_database_operation("UPSERT", Startup.__tablename__, len(rows), False, str(e))
            raise StorageError(f"Failed to upsert startups: {e}", "upsert") from e

        inserted = result.rowcount if result.rowcount is not None and result.rowcount >= 0 else len(rows)
        log_database_operation("UPSERT", Startup.__tablename__, inserted)
        return inserted
