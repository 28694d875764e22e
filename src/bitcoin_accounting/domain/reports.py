"""Period report value objects."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from bitcoin_accounting.domain.entries import AccountingEntry


@dataclass(frozen=True, slots=True)
class ReportLine:
    entry: AccountingEntry
    fair_value: Decimal | None = None

    def to_dict(self) -> dict[str, Any]:
        row = self.entry.encode()
        row["fair_value"] = str(self.fair_value) if self.fair_value is not None else None
        return row


@dataclass(frozen=True, slots=True)
class ReportTotals:
    total_acquired: int = 0
    total_disposed: int = 0
    total_cost_basis: Decimal = Decimal("0")
    total_proceeds: Decimal = Decimal("0")
    net_realized_gain_loss: Decimal = Decimal("0")

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_acquired": self.total_acquired,
            "total_disposed": self.total_disposed,
            "total_cost_basis": str(self.total_cost_basis),
            "total_proceeds": str(self.total_proceeds),
            "net_realized_gain_loss": str(self.net_realized_gain_loss),
        }


@dataclass(frozen=True, slots=True)
class RollForward:
    """Satoshi holdings roll-forward from the start to the end of the period."""

    opening_balance: int = 0
    acquired: int = 0
    disposed: int = 0

    @property
    def closing_balance(self) -> int:
        return self.opening_balance + self.acquired - self.disposed

    def to_dict(self) -> dict[str, Any]:
        return {
            "opening_balance": self.opening_balance,
            "acquired": self.acquired,
            "disposed": self.disposed,
            "closing_balance": self.closing_balance,
        }


@dataclass(frozen=True, slots=True)
class Report:
    start_date: date
    end_date: date
    currency: str
    lines: tuple[ReportLine, ...] = field(default_factory=tuple)
    totals: ReportTotals = field(default_factory=ReportTotals)
    roll_forward: RollForward = field(default_factory=RollForward)

    @property
    def entries(self) -> list[AccountingEntry]:
        return [line.entry for line in self.lines]

    def to_dict(self) -> dict[str, Any]:
        return {
            "report_name": "Bitcoin Holdings Report",
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "currency": self.currency,
            "data": [line.to_dict() for line in self.lines],
            "totals": self.totals.to_dict(),
            "roll_forward": self.roll_forward.to_dict(),
        }
