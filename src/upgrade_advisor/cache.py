"""SQLite-based cache layer for AI analysis results.

This module provides a persistent cache so that researching the same
upgrade (package, installed version, target version, provider) twice in a
short period does not repeat the remote call.
"""

import contextlib
import sqlite3
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Optional


class AnalysisCache:
    """SQLite cache for storing successful analyses.

    Entries expire after a TTL (24 hours by default). Only successful
    analyses should be stored; error descriptions are never cached.

    Attributes:
        db_path: Path to the SQLite database file.
        ttl_hours: Number of hours before cache entries expire.
    """

    DEFAULT_TTL_HOURS = 24

    def __init__(
        self,
        db_path: Optional[Path] = None,
        ttl_hours: int = DEFAULT_TTL_HOURS,
    ):
        """Initialize the analysis cache.

        Args:
            db_path: Path to SQLite database. If None, uses
                ~/.cache/upgrade_advisor/cache.db.
            ttl_hours: Number of hours before cache entries expire.
        """
        if db_path is None:
            cache_dir = Path.home() / ".cache" / "upgrade_advisor"
            cache_dir.mkdir(parents=True, exist_ok=True)
            db_path = cache_dir / "cache.db"

        self.db_path = db_path
        self.ttl_hours = ttl_hours
        self._conn: Optional[sqlite3.Connection] = None
        self._init_database()

    def __enter__(self) -> "AnalysisCache":
        """Hold one connection open for every lookup inside the block."""
        self._conn = sqlite3.connect(self.db_path)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Release the connection held by the block."""
        if self._conn:
            self._conn.close()
            self._conn = None

    @contextlib.contextmanager
    def _connect(self):
        """Yield the connection held by a with block, or a short-lived one.

        Outside a with block every call opens its own connection and closes
        it when the caller is done.
        """
        if self._conn:
            yield self._conn
        else:
            conn = sqlite3.connect(self.db_path)
            try:
                yield conn
            finally:
                conn.close()

    def _init_database(self) -> None:
        """Initialize the database schema if it doesn't exist."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS analysis_cache (
                    package_id TEXT NOT NULL,
                    current_version TEXT NOT NULL,
                    available_version TEXT NOT NULL,
                    provider TEXT NOT NULL,
                    analysis TEXT NOT NULL,
                    analyzed_at TEXT NOT NULL,
                    expires_at TEXT NOT NULL,
                    PRIMARY KEY (package_id, current_version, available_version, provider)
                )
                """
            )
            cursor.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_analysis_expires
                ON analysis_cache(expires_at)
                """
            )
            conn.commit()

    def get(
        self,
        package_id: str,
        current_version: str,
        available_version: str,
        provider: str,
    ) -> Optional[str]:
        """Retrieve a cached analysis.

        Returns:
            The analysis text on a hit, None on a miss or an expired entry.
        """
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT analysis, expires_at
                FROM analysis_cache
                WHERE package_id = ? AND current_version = ?
                  AND available_version = ? AND provider = ?
                """,
                (package_id, current_version, available_version, provider),
            )
            row = cursor.fetchone()

        if row is None:
            return None

        analysis, expires_at_str = row
        if datetime.now(UTC) >= datetime.fromisoformat(expires_at_str):
            return None
        return analysis

    def set(
        self,
        package_id: str,
        current_version: str,
        available_version: str,
        provider: str,
        analysis: str,
    ) -> None:
        """Store an analysis in the cache, replacing any previous entry."""
        analyzed_at = datetime.now(UTC)
        expires_at = analyzed_at + timedelta(hours=self.ttl_hours)

        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                REPLACE INTO analysis_cache
                (package_id, current_version, available_version, provider,
                 analysis, analyzed_at, expires_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    package_id,
                    current_version,
                    available_version,
                    provider,
                    analysis,
                    analyzed_at.isoformat(),
                    expires_at.isoformat(),
                ),
            )
            conn.commit()

    def clear(self, package_id: Optional[str] = None) -> None:
        """Clear cache entries.

        Args:
            package_id: If specified, clear only this package's entries.
                If None, clear all entries.
        """
        with self._connect() as conn:
            cursor = conn.cursor()
            if package_id is None:
                cursor.execute("DELETE FROM analysis_cache")
            else:
                cursor.execute(
                    "DELETE FROM analysis_cache WHERE package_id = ?",
                    (package_id,),
                )
            conn.commit()

    def info(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with cache information:
                - path: Path to cache database file
                - count: Number of cached entries
                - size_bytes: Database file size in bytes
        """
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM analysis_cache")
            count = cursor.fetchone()[0]

        size_bytes = self.db_path.stat().st_size if self.db_path.exists() else 0

        return {
            "path": str(self.db_path),
            "count": count,
            "size_bytes": size_bytes,
        }
