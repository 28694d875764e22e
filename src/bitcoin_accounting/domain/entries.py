"""Accounting entries emitted by the transaction processor."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from bitcoin_accounting.domain.value_objects import EntryKind


def _decimal_or_none(value: str | None) -> Decimal | None:
    return Decimal(value) if value is not None else None


@dataclass(frozen=True, slots=True)
class AccountingEntry:
    """One acquisition or disposal of a quantity of BTC.

    Disposal entries carry the matched cost basis, the proceeds net of the
    allocated fee, and the realized gain or loss (proceeds minus cost basis).
    """

    id: int
    date: date
    kind: EntryKind
    amount: int
    unit_price: Decimal
    txid: str
    outpoint: str
    lot_id: UUID
    acquisition_date: date
    cost_basis: Decimal | None = None
    proceeds: Decimal | None = None
    fee_allocated: Decimal | None = None
    realized_gain_loss: Decimal | None = None

    @classmethod
    def acquisition(
        cls,
        entry_id: int,
        entry_date: date,
        amount: int,
        unit_price: Decimal,
        txid: str,
        outpoint: str,
        lot_id: UUID,
    ) -> "AccountingEntry":
        return cls(
            id=entry_id,
            date=entry_date,
            kind=EntryKind.ACQUISITION,
            amount=amount,
            unit_price=unit_price,
            txid=txid,
            outpoint=outpoint,
            lot_id=lot_id,
            acquisition_date=entry_date,
        )

    @classmethod
    def disposal(
        cls,
        entry_id: int,
        entry_date: date,
        amount: int,
        unit_price: Decimal,
        txid: str,
        outpoint: str,
        lot_id: UUID,
        acquisition_date: date,
        cost_basis: Decimal,
        proceeds: Decimal,
        fee_allocated: Decimal,
    ) -> "AccountingEntry":
        return cls(
            id=entry_id,
            date=entry_date,
            kind=EntryKind.DISPOSAL,
            amount=amount,
            unit_price=unit_price,
            txid=txid,
            outpoint=outpoint,
            lot_id=lot_id,
            acquisition_date=acquisition_date,
            cost_basis=cost_basis,
            proceeds=proceeds,
            fee_allocated=fee_allocated,
            realized_gain_loss=proceeds - cost_basis,
        )

    @property
    def is_disposal(self) -> bool:
        return self.kind == EntryKind.DISPOSAL

    @property
    def is_acquisition(self) -> bool:
        return self.kind == EntryKind.ACQUISITION

    @property
    def holding_period_days(self) -> int:
        return (self.date - self.acquisition_date).days

    @property
    def is_long_term(self) -> bool:
        return self.holding_period_days > 365

    @property
    def sort_key(self) -> tuple[date, int]:
        return (self.date, self.id)

    def encode(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "kind": self.kind.value,
            "amount": self.amount,
            "unit_price": str(self.unit_price),
            "txid": self.txid,
            "outpoint": self.outpoint,
            "lot_id": str(self.lot_id),
            "acquisition_date": self.acquisition_date.isoformat(),
            "cost_basis": _str_or_none(self.cost_basis),
            "proceeds": _str_or_none(self.proceeds),
            "fee_allocated": _str_or_none(self.fee_allocated),
            "realized_gain_loss": _str_or_none(self.realized_gain_loss),
        }

    @classmethod
    def decode(cls, data: dict[str, Any]) -> "AccountingEntry":
        return cls(
            id=int(data["id"]),
            date=date.fromisoformat(data["date"]),
            kind=EntryKind(data["kind"]),
            amount=int(data["amount"]),
            unit_price=Decimal(data["unit_price"]),
            txid=data["txid"],
            outpoint=data["outpoint"],
            lot_id=UUID(data["lot_id"]),
            acquisition_date=date.fromisoformat(data["acquisition_date"]),
            cost_basis=_decimal_or_none(data.get("cost_basis")),
            proceeds=_decimal_or_none(data.get("proceeds")),
            fee_allocated=_decimal_or_none(data.get("fee_allocated")),
            realized_gain_loss=_decimal_or_none(data.get("realized_gain_loss")),
        )


def _str_or_none(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None
