"""Realized gain/loss aggregation over the entry log."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from bitcoin_accounting.domain.entries import AccountingEntry
from bitcoin_accounting.domain.value_objects import Money
from bitcoin_accounting.exceptions import InvalidDateRangeError
from bitcoin_accounting.services.ledger_state import LedgerState


@dataclass(frozen=True, slots=True)
class GainLossBreakdown:
    short_term: Money
    long_term: Money
    disposals: int

    @property
    def total(self) -> Money:
        return self.short_term + self.long_term


class GainLossCalculator:
    """Pure aggregation over disposal entries; never mutates the state."""

    def __init__(self, state: LedgerState) -> None:
        self._state = state

    def _disposals(self, start_date: date, end_date: date) -> list[AccountingEntry]:
        if start_date > end_date:
            raise InvalidDateRangeError(start_date, end_date)
        return [
            entry
            for entry in self._state.entries_between(start_date, end_date)
            if entry.is_disposal
        ]

    def realized_gain_loss(self, start_date: date, end_date: date) -> Money:
        """Sum of realized gain/loss of disposals dated within [start, end]."""
        total = Decimal("0")
        for entry in self._disposals(start_date, end_date):
            total += entry.realized_gain_loss or Decimal("0")
        return Money(total, self._state.currency)

    def breakdown(self, start_date: date, end_date: date) -> GainLossBreakdown:
        """Split realized gain/loss by holding period (over 365 days is long term)."""
        short_term = Decimal("0")
        long_term = Decimal("0")
        disposals = self._disposals(start_date, end_date)
        for entry in disposals:
            gain = entry.realized_gain_loss or Decimal("0")
            if entry.is_long_term:
                long_term += gain
            else:
                short_term += gain
        return GainLossBreakdown(
            short_term=Money(short_term, self._state.currency),
            long_term=Money(long_term, self._state.currency),
            disposals=len(disposals),
        )
