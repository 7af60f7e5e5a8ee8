"""
Finding deduplication using content hashing.

Persists every finding once in a SQLite file, keyed by a SHA-256
fingerprint of its full content. Re-inserting a known finding hits the
unique constraint and is reported as a duplicate.
"""

import hashlib
import json
import sqlite3
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union

import structlog

from .exceptions import StoreError
from .models import Finding


INIT_STATEMENT = """
    create table if not exists items (
        id integer primary key not null,
        hash text unique not null,
        authority text not null,
        published_at text not null,
        found_at text not null,
        name text not null,
        address text not null,
        reason text not null,
        legal_basis text not null,
        info text not null
    )
"""

INSERT_STATEMENT = """
    insert into items (
        hash,
        authority,
        published_at,
        found_at,
        name,
        address,
        reason,
        legal_basis,
        info
    ) values (
        ?, ?, ?, ?, ?, ?, ?, ?, ?
    )
"""


def generate_content_hash(finding: Finding) -> str:
    """
    Generate SHA-256 fingerprint for a finding.

    Hash covers every field, raw date strings included, serialized as
    JSON with sorted keys.

    Args:
        finding: Finding to fingerprint

    Returns:
        SHA-256 hex digest
    """
    content = json.dumps(
        finding.to_canonical_dict(),
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
    )
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def is_unique_violation(exc: sqlite3.Error) -> bool:
    """Check whether an insert failed on the unique hash constraint."""
    return (
        isinstance(exc, sqlite3.IntegrityError)
        and getattr(exc, "sqlite_errorcode", None) == sqlite3.SQLITE_CONSTRAINT_UNIQUE
    )


class InsertOutcome(str, Enum):
    """Result of recording a finding."""
    INSERTED = "inserted"
    DUPLICATE = "duplicate"
    FAILED = "failed"


class DeduplicationStore:
    """
    SQLite-backed history of seen findings.

    Usage:
        with DeduplicationStore("./db.sqlite") as store:
            new_findings = store.filter_new(findings)
    """

    def __init__(
        self,
        path: Union[str, Path],
        logger: Optional[structlog.typing.FilteringBoundLogger] = None,
    ):
        """
        Initialize store.

        Args:
            path: SQLite file path (created if missing)
            logger: Logger to report with (module logger if not provided)
        """
        self.path = str(path)
        self.logger = (logger or structlog.get_logger(__name__)).bind(
            component="store", path=self.path
        )
        self._conn: Optional[sqlite3.Connection] = None

    def __enter__(self) -> "DeduplicationStore":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> None:
        """Open the database and create the items table if needed."""
        try:
            self._conn = sqlite3.connect(self.path)
            exists = self._conn.execute(
                "select 1 from sqlite_master where type = 'table' and name = 'items'"
            ).fetchone()
            if not exists:
                with self._conn:
                    self._conn.execute(INIT_STATEMENT)
                self.logger.info("database_initialized")
        except sqlite3.Error as e:
            self.close()
            raise StoreError(f"failed to open sqlite database {self.path}: {e}") from e

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            try:
                self._conn.close()
            except sqlite3.Error as e:
                self.logger.warning("close_failed", error=str(e))
            self._conn = None

    def record_seen(self, finding: Finding) -> InsertOutcome:
        """
        Insert a finding unless its fingerprint is already stored.

        Args:
            finding: Finding to record

        Returns:
            INSERTED for new findings, DUPLICATE for known ones,
            FAILED when the insert broke for any other reason
        """
        if self._conn is None:
            raise StoreError("Store not opened. Use 'with' context.")

        content_hash = generate_content_hash(finding)

        try:
            self._conn.execute(
                INSERT_STATEMENT,
                (
                    content_hash,
                    finding.authority,
                    finding.published_at.isoformat() if finding.published_at else "",
                    finding.found_at.isoformat() if finding.found_at else "",
                    finding.name,
                    finding.address,
                    finding.reason,
                    finding.legal_basis,
                    finding.info,
                ),
            )
        except sqlite3.Error as e:
            if is_unique_violation(e):
                self.logger.debug("finding_seen_before", hash=content_hash[:8])
                return InsertOutcome.DUPLICATE

            self.logger.error(
                "insert_failed",
                error=str(e),
                hash=content_hash[:8],
                finding=finding.to_dict(),
            )
            return InsertOutcome.FAILED

        self.logger.debug("finding_inserted", hash=content_hash[:8], name=finding.name[:50])
        return InsertOutcome.INSERTED

    def filter_new(self, findings: Iterable[Finding]) -> list[Finding]:
        """
        Record findings and return the ones not seen before.

        Args:
            findings: Findings in display order

        Returns:
            Newly inserted findings, original order kept
        """
        if self._conn is None:
            raise StoreError("Store not opened. Use 'with' context.")

        new_findings = []
        total = 0
        for finding in findings:
            total += 1
            if self.record_seen(finding) is InsertOutcome.INSERTED:
                new_findings.append(finding)

        try:
            self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"failed to commit findings: {e}") from e

        self.logger.info("deduplication_complete", total=total, new=len(new_findings))
        return new_findings

    def __len__(self) -> int:
        """Return number of stored findings."""
        if self._conn is None:
            return 0
        return self._conn.execute("select count(*) from items").fetchone()[0]
