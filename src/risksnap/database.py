# src/risksnap/database.py
"""Snapshot storage for analysis results."""

import json
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from risksnap.config import settings
from risksnap.errors import StorageError
from risksnap.models import AnalysisResult, SnapshotRecord

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS risk_snapshots (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    url TEXT NOT NULL,
    requested_url TEXT,
    created_at TIMESTAMP NOT NULL,
    overall_risk TEXT NOT NULL,

    -- JSON-encoded analysis sections
    strengths TEXT NOT NULL,
    risk_breakdown TEXT NOT NULL,
    issues TEXT NOT NULL,
    recommendations TEXT NOT NULL,
    raw_signals TEXT NOT NULL
);
"""

CREATE_INDEX_SQL = "CREATE INDEX IF NOT EXISTS idx_risk_snapshots_url ON risk_snapshots (url);"
CREATE_REQUESTED_INDEX_SQL = (
    "CREATE INDEX IF NOT EXISTS idx_risk_snapshots_requested_url "
    "ON risk_snapshots (requested_url);"
)

# Columns added after the first release, with their DDL type
ADDED_COLUMNS = {"requested_url": "TEXT"}

JSON_COLUMNS = ("strengths", "risk_breakdown", "issues", "recommendations", "raw_signals")


class AbstractSnapshotStore(ABC):
    """Abstract base class defining the snapshot storage interface."""

    @abstractmethod
    def connect(self) -> None:
        """Establish database connection."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close database connection."""
        pass

    @abstractmethod
    def create_schema(self) -> None:
        """Create the necessary database tables."""
        pass

    @abstractmethod
    def save_snapshot(
        self,
        result: AnalysisResult,
        created_at: Optional[datetime] = None,
        requested_url: Optional[str] = None,
    ) -> SnapshotRecord:
        """Persist an analysis result.

        Args:
            result: The analysis to store
            created_at: Timestamp to record (now if None)
            requested_url: URL the user asked for, when it differs from
                ``result.url`` after redirects (defaults to ``result.url``)

        Returns:
            SnapshotRecord carrying the assigned id
        """
        pass

    @abstractmethod
    def get_snapshot(self, snapshot_id: int) -> Optional[SnapshotRecord]:
        """Load one snapshot by id, or None if it does not exist."""
        pass

    @abstractmethod
    def get_snapshots_for_url(self, url: str) -> List[SnapshotRecord]:
        """Retrieve all snapshots for a URL.

        Args:
            url: Either the requested URL or the final URL after redirects

        Returns:
            Snapshots ordered by created_at ascending.
        """
        pass


class SqliteSnapshotStore(AbstractSnapshotStore):
    """SQLite implementation for local storage."""

    def __init__(self, db_url: Optional[str] = None):
        """Initialize local SQLite storage.

        Args:
            db_url: Database URL (sqlite:///path/to/db.db). Defaults to settings.DATABASE_URL.
        """
        self.db_url = db_url or settings.DATABASE_URL
        self.db_path = self.db_url.replace("sqlite:///", "")
        self.conn: Optional[sqlite3.Connection] = None
        self.connect()
        self.create_schema()

    def connect(self) -> None:
        """Establish SQLite connection."""
        try:
            self.conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open snapshot database {self.db_path}: {e}") from e
        self.conn.row_factory = sqlite3.Row
        logger.debug(f"Connected to local SQLite database: {self.db_path}")

    def close(self) -> None:
        """Close SQLite connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.debug("Closed local SQLite connection")

    def create_schema(self) -> None:
        """Create the snapshots table if it doesn't exist."""
        try:
            with self.conn:
                self.conn.execute(CREATE_TABLE_SQL)
                existing = self.get_table_columns()
                for column, column_type in ADDED_COLUMNS.items():
                    if column not in existing:
                        logger.info(f"Adding column {column} to risk_snapshots")
                        self.conn.execute(
                            f"ALTER TABLE risk_snapshots ADD COLUMN {column} {column_type}"
                        )
                self.conn.execute(CREATE_INDEX_SQL)
                self.conn.execute(CREATE_REQUESTED_INDEX_SQL)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to create snapshot schema: {e}") from e
        logger.debug("Schema verified/created for local SQLite")

    def get_table_columns(self) -> set:
        """Get column names from the snapshots table."""
        cursor = self.conn.cursor()
        cursor.execute("PRAGMA table_info(risk_snapshots);")
        return {row["name"] for row in cursor.fetchall()}

    def save_snapshot(
        self,
        result: AnalysisResult,
        created_at: Optional[datetime] = None,
        requested_url: Optional[str] = None,
    ) -> SnapshotRecord:
        created_at = created_at or datetime.now()
        requested_url = requested_url or result.url
        data = result.to_dict()

        row = {
            "url": result.url,
            "requested_url": requested_url,
            "created_at": created_at.isoformat(),
            "overall_risk": result.overall_risk,
        }
        row.update({column: json.dumps(data[column]) for column in JSON_COLUMNS})

        columns = ', '.join(row.keys())
        placeholders = ', '.join('?' for _ in row)
        insert_sql = f"INSERT INTO risk_snapshots ({columns}) VALUES ({placeholders})"

        try:
            with self.conn:
                cursor = self.conn.execute(insert_sql, tuple(row.values()))
        except sqlite3.Error as e:
            raise StorageError(f"Failed to save analysis for {result.url}: {e}") from e

        logger.debug(f"Saved snapshot {cursor.lastrowid} for url: {result.url}")
        return SnapshotRecord(
            result=result,
            id=cursor.lastrowid,
            created_at=created_at,
            requested_url=requested_url,
        )

    def get_snapshot(self, snapshot_id: int) -> Optional[SnapshotRecord]:
        rows = self._query("SELECT * FROM risk_snapshots WHERE id = ?", (snapshot_id,))
        return rows[0] if rows else None

    def get_snapshots_for_url(self, url: str) -> List[SnapshotRecord]:
        return self._query(
            "SELECT * FROM risk_snapshots WHERE url = ? OR requested_url = ? "
            "ORDER BY created_at ASC, id ASC",
            (url, url),
        )

    def _query(self, sql: str, params: tuple) -> List[SnapshotRecord]:
        try:
            cursor = self.conn.cursor()
            cursor.execute(sql, params)
            return [_row_to_record(dict(row)) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise StorageError(f"Failed to load snapshots: {e}") from e


def _row_to_record(row: Dict[str, Any]) -> SnapshotRecord:
    data = {column: json.loads(row[column]) for column in JSON_COLUMNS}
    data["url"] = row["url"]
    data["overall_risk"] = row["overall_risk"]
    return SnapshotRecord(
        result=AnalysisResult.from_dict(data),
        id=row["id"],
        created_at=datetime.fromisoformat(row["created_at"]),
        requested_url=row.get("requested_url") or row["url"],
    )


def get_store(db_url: Optional[str] = None) -> AbstractSnapshotStore:
    """Factory function to create the snapshot store.

    Args:
        db_url: Database URL. Defaults to settings.DATABASE_URL.

    Returns:
        An AbstractSnapshotStore instance.

    Raises:
        ValueError: If the URL names an unsupported backend.
    """
    db_url = db_url or settings.DATABASE_URL

    if db_url.startswith("sqlite:///"):
        logger.info("Using local SQLite snapshot store")
        return SqliteSnapshotStore(db_url)

    raise ValueError(
        f"Unsupported database URL: '{db_url}'. "
        "Supported: 'sqlite:///path/to/file.db'"
    )
