from datetime import date
from decimal import Decimal

import pytest
from conftest import ONE_BTC, at

from bitcoin_accounting.domain.transactions import Transaction
from bitcoin_accounting.domain.utxos import Outpoint
from bitcoin_accounting.domain.value_objects import Money
from bitcoin_accounting.exceptions import InvalidDateRangeError
from bitcoin_accounting.services.gain_loss import GainLossCalculator


@pytest.fixture
def calculator(state) -> GainLossCalculator:
    return GainLossCalculator(state)


@pytest.fixture
def history(processor, fund):
    """One short-term gain in 2021, one long-term gain in 2022."""
    first, second = fund("buy", ONE_BTC, ONE_BTC)
    processor.apply(Transaction(txid="s1", timestamp=at(date(2021, 6, 1)), inputs=[first]))
    processor.apply(Transaction(txid="s2", timestamp=at(date(2022, 6, 1)), inputs=[second]))


class TestRealizedGainLoss:
    @pytest.mark.usefixtures("history")
    def test_sums_disposals_in_range(self, calculator: GainLossCalculator):
        assert calculator.realized_gain_loss(date(2021, 1, 1), date(2022, 12, 31)) == Money(
            Decimal("30000"), "USD"
        )

    @pytest.mark.usefixtures("history")
    def test_range_is_inclusive(self, calculator: GainLossCalculator):
        assert calculator.realized_gain_loss(
            date(2021, 6, 1), date(2021, 6, 1)
        ).amount == Decimal("20000")

    @pytest.mark.usefixtures("history")
    def test_empty_range_is_zero(self, calculator: GainLossCalculator):
        assert calculator.realized_gain_loss(date(2023, 1, 1), date(2023, 12, 31)).amount == 0

    def test_start_after_end_raises(self, calculator: GainLossCalculator):
        with pytest.raises(InvalidDateRangeError):
            calculator.realized_gain_loss(date(2021, 2, 1), date(2021, 1, 1))

    def test_loss_is_negative(self, processor, calculator: GainLossCalculator, fund):
        [outpoint] = fund("buy", ONE_BTC, on=date(2021, 6, 1))
        processor.apply(
            Transaction(txid="sell", timestamp=at(date(2022, 6, 1)), inputs=[outpoint])
        )

        assert calculator.realized_gain_loss(
            date(2022, 1, 1), date(2022, 12, 31)
        ).amount == Decimal("-10000")

    def test_acquisitions_do_not_count(self, calculator: GainLossCalculator, fund):
        fund("buy", ONE_BTC)

        assert calculator.realized_gain_loss(date(2021, 1, 1), date(2021, 1, 1)).amount == 0


class TestBreakdown:
    @pytest.mark.usefixtures("history")
    def test_splits_by_holding_period(self, calculator: GainLossCalculator):
        breakdown = calculator.breakdown(date(2021, 1, 1), date(2022, 12, 31))

        assert breakdown.disposals == 2
        assert breakdown.short_term.amount == Decimal("20000")
        assert breakdown.long_term.amount == Decimal("10000")
        assert breakdown.total.amount == Decimal("30000")

    def test_exactly_one_year_is_short_term(self, processor, calculator, fund):
        [outpoint] = fund("buy", ONE_BTC, on=date(2021, 6, 1), price="10000")
        # 2021-06-01 to 2022-06-01 is 365 days
        processor.apply(
            Transaction(txid="sell", timestamp=at(date(2022, 6, 1)), inputs=[outpoint])
        )

        breakdown = calculator.breakdown(date(2022, 6, 1), date(2022, 6, 1))

        assert breakdown.long_term.amount == 0
        assert breakdown.short_term.amount == Decimal("10000")

    def test_does_not_mutate_state(self, state, calculator: GainLossCalculator, fund):
        fund("buy", ONE_BTC)
        before = state.encode()

        calculator.breakdown(date(2021, 1, 1), date(2021, 12, 31))

        assert state.encode() == before
        assert Outpoint("buy", 0) in state.ledger
