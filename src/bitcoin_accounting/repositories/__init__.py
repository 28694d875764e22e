from bitcoin_accounting.repositories.interfaces import (
    ExchangeRateRepository,
    SnapshotRepository,
)
from bitcoin_accounting.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteExchangeRateRepository,
    SQLiteSnapshotRepository,
)

__all__ = [
    "ExchangeRateRepository",
    "SnapshotRepository",
    "SQLiteDatabase",
    "SQLiteExchangeRateRepository",
    "SQLiteSnapshotRepository",
]
