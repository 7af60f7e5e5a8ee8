"""Tests for deduplicator functionality."""

import sqlite3
from dataclasses import replace
from datetime import date

import pytest

from lmk_scraper.core.deduplicator import (
    DeduplicationStore,
    InsertOutcome,
    generate_content_hash,
    is_unique_violation,
)
from lmk_scraper.core.exceptions import StoreError
from lmk_scraper.core.models import Finding


def create_finding(name: str = "Bäckerei Sonnenschein", **kwargs) -> Finding:
    """Helper to create test findings."""
    data = dict(
        authority="Landratsamt Karlsruhe",
        published_at_raw="15.04.2025",
        found_at_raw="02.04.2025",
        name=name,
        address="Hauptstraße 12, 76131 Karlsruhe",
        reason="Mängel bei der Betriebshygiene",
        legal_basis="Art. 4 Abs. 2 VO (EG) Nr. 852/2004",
        info="",
        published_at=date(2025, 4, 15),
        found_at=date(2025, 4, 2),
    )
    data.update(kwargs)
    return Finding(**data)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "db.sqlite"


class TestGenerateContentHash:
    """Tests for generate_content_hash function."""

    def test_consistent_hash(self):
        """Test that same content produces same hash."""
        assert generate_content_hash(create_finding()) == generate_content_hash(create_finding())

    def test_sha256_hex(self):
        content_hash = generate_content_hash(create_finding())

        assert len(content_hash) == 64
        int(content_hash, 16)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("authority", "Stadt Stuttgart"),
            ("name", "Imbiss am Markt"),
            ("info", "erledigt"),
            ("published_at_raw", "16.04.2025"),
            ("found_at", None),
        ],
    )
    def test_single_field_changes_hash(self, field, value):
        original = create_finding()
        changed = replace(original, **{field: value})

        assert generate_content_hash(original) != generate_content_hash(changed)


class TestIsUniqueViolation:
    """Tests for the unique constraint check."""

    def test_unique_violation(self):
        conn = sqlite3.connect(":memory:")
        conn.execute("create table t (v text unique not null)")
        conn.execute("insert into t values ('a')")

        with pytest.raises(sqlite3.IntegrityError) as exc_info:
            conn.execute("insert into t values ('a')")

        assert is_unique_violation(exc_info.value) is True

    def test_not_null_violation(self):
        conn = sqlite3.connect(":memory:")
        conn.execute("create table t (v text unique not null)")

        with pytest.raises(sqlite3.IntegrityError) as exc_info:
            conn.execute("insert into t values (null)")

        assert is_unique_violation(exc_info.value) is False

    def test_operational_error(self):
        assert is_unique_violation(sqlite3.OperationalError("no such table: items")) is False


class TestDeduplicationStore:
    """Tests for DeduplicationStore class."""

    def test_creates_schema(self, db_path):
        with DeduplicationStore(db_path):
            pass

        conn = sqlite3.connect(db_path)
        columns = [row[1] for row in conn.execute("pragma table_info(items)")]
        assert columns == [
            "id",
            "hash",
            "authority",
            "published_at",
            "found_at",
            "name",
            "address",
            "reason",
            "legal_basis",
            "info",
        ]

    def test_inserted_then_duplicate(self, db_path):
        with DeduplicationStore(db_path) as store:
            assert store.record_seen(create_finding()) is InsertOutcome.INSERTED
            assert store.record_seen(create_finding()) is InsertOutcome.DUPLICATE
            assert len(store) == 1

    def test_different_findings_inserted(self, db_path):
        with DeduplicationStore(db_path) as store:
            assert store.record_seen(create_finding()) is InsertOutcome.INSERTED
            assert store.record_seen(create_finding(info="erledigt")) is InsertOutcome.INSERTED
            assert len(store) == 2

    def test_filter_new_keeps_order(self, db_path):
        findings = [create_finding(name=n) for n in ("C", "A", "B")]

        with DeduplicationStore(db_path) as store:
            store.record_seen(findings[1])
            new_findings = store.filter_new(findings)

        assert [f.name for f in new_findings] == ["C", "B"]

    def test_history_survives_reopen(self, db_path):
        """Test that a second run sees the first run's findings."""
        findings = [create_finding(name="A"), create_finding(name="B")]

        with DeduplicationStore(db_path) as store:
            assert store.filter_new(findings) == findings

        with DeduplicationStore(db_path) as store:
            assert store.filter_new(findings + [create_finding(name="C")]) == [create_finding(name="C")]
            assert len(store) == 3

    def test_stored_values(self, db_path):
        with DeduplicationStore(db_path) as store:
            store.filter_new([create_finding(found_at=None, found_at_raw="keine Angabe")])

        row = sqlite3.connect(db_path).execute(
            "select hash, published_at, found_at, name from items"
        ).fetchone()
        assert row == (
            generate_content_hash(create_finding(found_at=None, found_at_raw="keine Angabe")),
            "2025-04-15",
            "",
            "Bäckerei Sonnenschein",
        )

    def test_insert_failure_dropped(self, db_path):
        """Test that other insert errors drop the finding without aborting."""
        with DeduplicationStore(db_path) as store:
            store._conn.execute("drop table items")

            assert store.record_seen(create_finding()) is InsertOutcome.FAILED
            assert store.filter_new([create_finding(name="A")]) == []

    def test_open_failure(self, tmp_path):
        with pytest.raises(StoreError):
            DeduplicationStore(tmp_path / "missing" / "db.sqlite").open()

    def test_requires_open(self, db_path):
        with pytest.raises(StoreError):
            DeduplicationStore(db_path).record_seen(create_finding())
