from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from hn_watch.models import Link
from hn_watch.utils.datetime_utils import parse_datetime_utc

from .base import SeenRecord, StorageError, Store


class SQLiteStore(Store):
    def __init__(self, db_path: str, busy_timeout_seconds: float = 30.0) -> None:
        self.db_path = Path(db_path)
        self.busy_timeout_seconds = busy_timeout_seconds

    def init_db(self) -> None:
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"failed to create {self.db_path.parent}: {exc}") from exc
        connection = self._connect()
        try:
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS links (
                    item_url TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    url TEXT NOT NULL,
                    first_seen_at TEXT NOT NULL
                )
                """
            )
        except sqlite3.Error as exc:
            raise StorageError(f"failed to initialize {self.db_path}: {exc}") from exc
        finally:
            connection.close()

    def exists(self, item_url: str) -> bool:
        connection = self._connect()
        try:
            return self._exists(connection, item_url)
        except sqlite3.Error as exc:
            raise StorageError(f"failed to look up {item_url}: {exc}") from exc
        finally:
            connection.close()

    def get(self, item_url: str) -> SeenRecord | None:
        connection = self._connect()
        try:
            row = connection.execute(
                """
                SELECT item_url, title, url, first_seen_at
                FROM links
                WHERE item_url = ?
                """,
                (item_url,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"failed to read {item_url}: {exc}") from exc
        finally:
            connection.close()

        if row is None:
            return None

        first_seen_at = parse_datetime_utc(row["first_seen_at"])
        if first_seen_at is None:
            raise StorageError(f"corrupt first_seen_at for {item_url}: {row['first_seen_at']!r}")

        return SeenRecord(
            item_url=row["item_url"],
            title=row["title"],
            url=row["url"],
            first_seen_at=first_seen_at,
        )

    def put(self, link: Link) -> None:
        connection = self._connect()
        try:
            self._insert(connection, link, or_ignore=True)
        except sqlite3.Error as exc:
            raise StorageError(f"failed to store {link.item_url}: {exc}") from exc
        finally:
            connection.close()

    def try_claim(self, link: Link) -> bool:
        connection = self._connect()
        try:
            # IMMEDIATE takes the write lock up front so concurrent claimers
            # serialize before the existence check.
            connection.execute("BEGIN IMMEDIATE")
            if self._exists(connection, link.item_url):
                connection.rollback()
                return False
            self._insert(connection, link, or_ignore=False)
            connection.commit()
            return True
        except sqlite3.Error as exc:
            if connection.in_transaction:
                connection.rollback()
            raise StorageError(f"failed to claim {link.item_url}: {exc}") from exc
        finally:
            connection.close()

    def _exists(self, connection: sqlite3.Connection, item_url: str) -> bool:
        row = connection.execute(
            "SELECT 1 FROM links WHERE item_url = ?",
            (item_url,),
        ).fetchone()
        return row is not None

    def _insert(self, connection: sqlite3.Connection, link: Link, *, or_ignore: bool) -> None:
        verb = "INSERT OR IGNORE" if or_ignore else "INSERT"
        connection.execute(
            f"""
            {verb} INTO links (item_url, title, url, first_seen_at)
            VALUES (?, ?, ?, ?)
            """,
            (
                link.item_url,
                link.title,
                link.url,
                datetime.now(timezone.utc).isoformat(),
            ),
        )

    def _connect(self) -> sqlite3.Connection:
        # Autocommit mode; transactions are opened explicitly where needed.
        try:
            connection = sqlite3.connect(
                self.db_path,
                timeout=self.busy_timeout_seconds,
                isolation_level=None,
            )
        except sqlite3.Error as exc:
            raise StorageError(f"failed to open {self.db_path}: {exc}") from exc
        connection.row_factory = sqlite3.Row
        return connection
