"""SQLite implementations of repository interfaces."""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterable
from datetime import UTC, date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any
from uuid import UUID

from bitcoin_accounting.domain.exchange_rates import ExchangeRate, ExchangeRateSource
from bitcoin_accounting.repositories.interfaces import (
    ExchangeRateRepository,
    SnapshotRepository,
)


class SQLiteDatabase:
    """SQLite database connection manager."""

    def __init__(
        self, path: str | Path = ":memory:", check_same_thread: bool = True
    ) -> None:
        self._path = str(path)
        self._check_same_thread = check_same_thread
        self._connection: sqlite3.Connection | None = None

    @property
    def path(self) -> str:
        return self._path

    def get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(
                self._path, check_same_thread=self._check_same_thread
            )
            self._connection.row_factory = sqlite3.Row
        return self._connection

    def initialize(self) -> None:
        """Create all database tables."""
        conn = self.get_connection()
        conn.executescript(
            """
            -- BTC prices, one per currency and date
            CREATE TABLE IF NOT EXISTS exchange_rates (
                id TEXT PRIMARY KEY,
                currency TEXT NOT NULL,
                price TEXT NOT NULL,
                effective_date TEXT NOT NULL,
                source TEXT NOT NULL DEFAULT 'manual',
                created_at TEXT NOT NULL,
                UNIQUE(currency, effective_date)
            );
            CREATE INDEX IF NOT EXISTS idx_exchange_rates_currency_date
                ON exchange_rates(currency, effective_date);

            -- Ledger state snapshots, newest has the highest id
            CREATE TABLE IF NOT EXISTS ledger_snapshots (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                label TEXT NOT NULL DEFAULT '',
                payload TEXT NOT NULL,
                created_at TEXT NOT NULL
            );
            """
        )
        conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None


class SQLiteExchangeRateRepository(ExchangeRateRepository):
    def __init__(self, db: SQLiteDatabase) -> None:
        self._db = db

    def add(self, rate: ExchangeRate) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            INSERT INTO exchange_rates (id, currency, price, effective_date,
                                        source, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(currency, effective_date) DO UPDATE SET
                id = excluded.id,
                price = excluded.price,
                source = excluded.source,
                created_at = excluded.created_at
            """,
            (
                str(rate.id),
                rate.currency,
                str(rate.price),
                rate.effective_date.isoformat(),
                rate.source.value,
                rate.created_at.isoformat(),
            ),
        )
        conn.commit()

    def get_rate(self, currency: str, effective_date: date) -> ExchangeRate | None:
        conn = self._db.get_connection()
        row = conn.execute(
            """
            SELECT * FROM exchange_rates
            WHERE currency = ? AND effective_date = ?
            """,
            (currency, effective_date.isoformat()),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_exchange_rate(row)

    def get_latest_rate(
        self,
        currency: str,
        on_or_before: date | None = None,
    ) -> ExchangeRate | None:
        conn = self._db.get_connection()
        query = "SELECT * FROM exchange_rates WHERE currency = ?"
        params: list[str] = [currency]
        if on_or_before is not None:
            query += " AND effective_date <= ?"
            params.append(on_or_before.isoformat())
        query += " ORDER BY effective_date DESC LIMIT 1"

        row = conn.execute(query, params).fetchone()
        if row is None:
            return None
        return self._row_to_exchange_rate(row)

    def list_by_currency(
        self,
        currency: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Iterable[ExchangeRate]:
        conn = self._db.get_connection()
        query = "SELECT * FROM exchange_rates WHERE currency = ?"
        params: list[str] = [currency]

        if start_date is not None:
            query += " AND effective_date >= ?"
            params.append(start_date.isoformat())
        if end_date is not None:
            query += " AND effective_date <= ?"
            params.append(end_date.isoformat())

        query += " ORDER BY effective_date"
        rows = conn.execute(query, params).fetchall()
        return [self._row_to_exchange_rate(row) for row in rows]

    def delete(self, currency: str, effective_date: date) -> None:
        conn = self._db.get_connection()
        conn.execute(
            "DELETE FROM exchange_rates WHERE currency = ? AND effective_date = ?",
            (currency, effective_date.isoformat()),
        )
        conn.commit()

    def _row_to_exchange_rate(self, row: sqlite3.Row) -> ExchangeRate:
        return ExchangeRate(
            id=UUID(row["id"]),
            currency=row["currency"],
            price=Decimal(row["price"]),
            effective_date=date.fromisoformat(row["effective_date"]),
            source=ExchangeRateSource(row["source"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteSnapshotRepository(SnapshotRepository):
    """Stores encoded ledger states as JSON documents."""

    def __init__(self, db: SQLiteDatabase) -> None:
        self._db = db

    def save(self, snapshot: dict[str, Any], label: str = "") -> int:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """
            INSERT INTO ledger_snapshots (label, payload, created_at)
            VALUES (?, ?, ?)
            """,
            (
                label,
                json.dumps(snapshot, sort_keys=True),
                datetime.now(UTC).isoformat(),
            ),
        )
        conn.commit()
        snapshot_id = cursor.lastrowid
        assert snapshot_id is not None
        return snapshot_id

    def get(self, snapshot_id: int) -> dict[str, Any] | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT payload FROM ledger_snapshots WHERE id = ?", (snapshot_id,)
        ).fetchone()
        if row is None:
            return None
        payload: dict[str, Any] = json.loads(row["payload"])
        return payload

    def latest(self) -> dict[str, Any] | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT payload FROM ledger_snapshots ORDER BY id DESC LIMIT 1"
        ).fetchone()
        if row is None:
            return None
        payload: dict[str, Any] = json.loads(row["payload"])
        return payload

    def list_ids(self) -> list[int]:
        conn = self._db.get_connection()
        rows = conn.execute("SELECT id FROM ledger_snapshots ORDER BY id").fetchall()
        return [row["id"] for row in rows]
