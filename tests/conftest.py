from collections.abc import Callable
from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from bitcoin_accounting.domain.transactions import Transaction, TxOutput
from bitcoin_accounting.domain.utxos import Outpoint
from bitcoin_accounting.services.exchange_rates import InMemoryRateProvider
from bitcoin_accounting.services.ledger_state import LedgerState
from bitcoin_accounting.services.transaction_processor import TransactionProcessor

ONE_BTC = 100_000_000

BTC_USD = {
    date(2021, 1, 1): Decimal("10000"),
    date(2021, 3, 1): Decimal("20000"),
    date(2021, 6, 1): Decimal("30000"),
    date(2022, 6, 1): Decimal("20000"),
}


def at(day: date) -> datetime:
    """Noon UTC on ``day``."""
    return datetime(day.year, day.month, day.day, 12, 0, tzinfo=UTC)


FundFn = Callable[..., list[Outpoint]]


@pytest.fixture
def rates() -> InMemoryRateProvider:
    return InMemoryRateProvider(BTC_USD)


@pytest.fixture
def state() -> LedgerState:
    return LedgerState()


@pytest.fixture
def processor(state: LedgerState, rates: InMemoryRateProvider) -> TransactionProcessor:
    return TransactionProcessor(state, rates)


@pytest.fixture
def fund(processor: TransactionProcessor) -> FundFn:
    """Record an external acquisition and return the new outpoints."""

    def _fund(
        txid: str,
        *amounts: int,
        on: date = date(2021, 1, 1),
        price: str | None = None,
        recipient: str = "treasury",
    ) -> list[Outpoint]:
        txn = Transaction(
            txid=txid,
            timestamp=at(on),
            outputs=[TxOutput(amount, recipient) for amount in amounts],
        )
        processor.acquire(txn, unit_price=Decimal(price) if price else None)
        return [Outpoint(txid, index) for index in range(len(amounts))]

    return _fund
