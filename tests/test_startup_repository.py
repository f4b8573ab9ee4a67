"""
StartupRepository tests against a temporary SQLite database
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import text

from startup_tracker.database.connection import get_db
from startup_tracker.database.repositories import StartupRepository, StorageError


def row(name, **extra):
    return {"name": name, "website": f"https://{name.lower()}.test", "linkedin_url": "not found", **extra}


class TestUpsertMany:

    def test_inserts_and_counts(self, session_factory):
        with get_db(session_factory) as session:
            inserted = StartupRepository(session).upsert_many([row("Acme"), row("Beta")])

        with get_db(session_factory) as session:
            repo = StartupRepository(session)
            assert inserted == 2
            assert repo.count() == 2

    def test_same_batch_twice_keeps_total(self, session_factory):
        batch = [row("Acme"), row("Beta"), row("Gamma")]

        with get_db(session_factory) as session:
            StartupRepository(session).upsert_many(batch)
        with get_db(session_factory) as session:
            second = StartupRepository(session).upsert_many(batch)

        with get_db(session_factory) as session:
            assert StartupRepository(session).count() == 3
        assert second == 0

    def test_existing_row_is_not_overwritten(self, session_factory):
        with get_db(session_factory) as session:
            StartupRepository(session).upsert_many([row("Acme", source="portfolio")])
        with get_db(session_factory) as session:
            StartupRepository(session).upsert_many([
                {"name": "Acme", "website": "https://changed.test", "source": "directory"},
            ])

        with get_db(session_factory) as session:
            acme = StartupRepository(session).find_one_by(name="Acme")
            assert acme.website == "https://acme.test"
            assert acme.source == "portfolio"

    def test_duplicate_names_within_batch_first_wins(self, session_factory):
        with get_db(session_factory) as session:
            inserted = StartupRepository(session).upsert_many([
                row("Acme", source="portfolio"),
                {"name": "Acme", "website": "https://second.test", "source": "directory"},
            ])

        with get_db(session_factory) as session:
            repo = StartupRepository(session)
            assert inserted == 1
            assert repo.count() == 1
            assert repo.find_one_by(name="Acme").source == "portfolio"

    def test_missing_fields_get_sentinels(self, session_factory):
        with get_db(session_factory) as session:
            StartupRepository(session).upsert_many([{"name": "Bare"}, {"name": ""}, {"website": "x"}])

        with get_db(session_factory) as session:
            startups = StartupRepository(session).list_startups()
        assert len(startups) == 1
        assert startups[0]["website"] == "not found"
        assert startups[0]["linkedin_url"] == "not found"

    def test_empty_batch(self, session_factory):
        with get_db(session_factory) as session:
            assert StartupRepository(session).upsert_many([]) == 0

    def test_failure_raises_storage_error(self, session_factory):
        with get_db(session_factory) as session:
            session.execute(text("DROP TABLE startups"))

        with pytest.raises(StorageError) as exc_info:
            with get_db(session_factory) as session:
                StartupRepository(session).upsert_many([row("Acme")])
        assert exc_info.value.operation == "upsert"


class TestListing:

    def test_newest_first_then_name(self, session_factory):
        now = datetime.now(timezone.utc)
        with get_db(session_factory) as session:
            StartupRepository(session).upsert_many([
                row("Old", created_at=now - timedelta(days=1)),
                row("Zeta", created_at=now),
                row("Alpha", created_at=now),
            ])

        with get_db(session_factory) as session:
            names = [s["name"] for s in StartupRepository(session).list_startups()]
        assert names == ["Alpha", "Zeta", "Old"]

    def test_paginate(self, session_factory):
        with get_db(session_factory) as session:
            StartupRepository(session).upsert_many([row(f"Company{i:02d}") for i in range(5)])

        with get_db(session_factory) as session:
            result = StartupRepository(session).paginate(page=2, page_size=2)

        assert result["total_count"] == 5
        assert result["total_pages"] == 3
        assert [s.name for s in result["items"]] == ["Company02", "Company03"]
        assert result["has_next"] and result["has_prev"]
