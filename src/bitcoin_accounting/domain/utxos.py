"""Outpoints and unspent transaction outputs."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID


@dataclass(frozen=True, slots=True, order=True)
class Outpoint:
    """Reference to a transaction output: ``(txid, vout)``."""

    txid: str
    vout: int

    def __post_init__(self) -> None:
        if not self.txid:
            raise ValueError("Outpoint txid must not be empty")
        if self.vout < 0:
            raise ValueError(f"Outpoint index must be non-negative, got {self.vout}")

    def __str__(self) -> str:
        return f"{self.txid}:{self.vout}"

    @classmethod
    def parse(cls, value: str) -> "Outpoint":
        """Parse the ``txid:vout`` string form."""
        txid, sep, vout = value.rpartition(":")
        if not sep or not vout.isdigit():
            raise ValueError(f"Invalid outpoint: {value!r}")
        return cls(txid, int(vout))


@dataclass(frozen=True, slots=True)
class UTXO:
    """An unspent output together with the cost basis it was acquired at."""

    outpoint: Outpoint
    amount: int
    acquisition_date: date
    acquisition_price: Decimal
    lot_id: UUID
    recipient: str = ""

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError(f"UTXO amount must be positive, got {self.amount}")
        if not isinstance(self.acquisition_price, Decimal):
            object.__setattr__(
                self, "acquisition_price", Decimal(str(self.acquisition_price))
            )

    def encode(self) -> dict[str, Any]:
        return {
            "outpoint": str(self.outpoint),
            "amount": self.amount,
            "acquisition_date": self.acquisition_date.isoformat(),
            "acquisition_price": str(self.acquisition_price),
            "lot_id": str(self.lot_id),
            "recipient": self.recipient,
        }

    @classmethod
    def decode(cls, data: dict[str, Any]) -> "UTXO":
        return cls(
            outpoint=Outpoint.parse(data["outpoint"]),
            amount=int(data["amount"]),
            acquisition_date=date.fromisoformat(data["acquisition_date"]),
            acquisition_price=Decimal(data["acquisition_price"]),
            lot_id=UUID(data["lot_id"]),
            recipient=data.get("recipient", ""),
        )
