"""The owned ledger aggregate: outpoints, lots and the entry log."""

import threading
from collections.abc import Iterable
from datetime import date
from typing import Any

from bitcoin_accounting.domain.entries import AccountingEntry
from bitcoin_accounting.services.cost_basis import CostBasisBook
from bitcoin_accounting.services.outpoint_ledger import OutpointLedger

SNAPSHOT_VERSION = 1


class LedgerState:
    """Ledger, cost basis book and append-only entry log for one holder.

    A state is passed explicitly to the processor and readers; there is no
    process-wide instance. ``lock`` serializes writers, and readers take
    copies under it so they only ever observe committed transactions.
    """

    def __init__(
        self,
        currency: str = "USD",
        ledger: OutpointLedger | None = None,
        book: CostBasisBook | None = None,
        entries: Iterable[AccountingEntry] = (),
        next_entry_id: int | None = None,
    ) -> None:
        self.currency = currency
        self.ledger = ledger if ledger is not None else OutpointLedger()
        self.book = book if book is not None else CostBasisBook()
        self._entries: list[AccountingEntry] = list(entries)
        if next_entry_id is None:
            next_entry_id = max((entry.id for entry in self._entries), default=0) + 1
        self._next_entry_id = next_entry_id
        self.lock = threading.RLock()

    def next_entry_id(self) -> int:
        entry_id = self._next_entry_id
        self._next_entry_id += 1
        return entry_id

    def append_entries(self, entries: Iterable[AccountingEntry]) -> None:
        with self.lock:
            self._entries.extend(entries)

    def entries(self) -> tuple[AccountingEntry, ...]:
        with self.lock:
            return tuple(self._entries)

    def entries_between(self, start_date: date, end_date: date) -> list[AccountingEntry]:
        return [
            entry for entry in self.entries() if start_date <= entry.date <= end_date
        ]

    def unspent_balance(self) -> int:
        with self.lock:
            return self.ledger.unspent_balance()

    def encode(self) -> dict[str, Any]:
        """Serializable snapshot of the whole state."""
        with self.lock:
            return {
                "version": SNAPSHOT_VERSION,
                "currency": self.currency,
                "next_entry_id": self._next_entry_id,
                "ledger": self.ledger.encode(),
                "lots": self.book.encode(),
                "entries": [entry.encode() for entry in self._entries],
            }

    @classmethod
    def decode(cls, data: dict[str, Any]) -> "LedgerState":
        version = data.get("version")
        if version != SNAPSHOT_VERSION:
            raise ValueError(f"Unsupported snapshot version: {version}")
        return cls(
            currency=data["currency"],
            ledger=OutpointLedger.decode(data["ledger"]),
            book=CostBasisBook.decode(data["lots"]),
            entries=[AccountingEntry.decode(item) for item in data["entries"]],
            next_entry_id=int(data["next_entry_id"]),
        )
