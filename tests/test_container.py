"""Tests for the dependency injection container."""

from datetime import date
from decimal import Decimal

import pytest
from conftest import ONE_BTC, at

from bitcoin_accounting.config import Settings
from bitcoin_accounting.container import Container
from bitcoin_accounting.domain.exchange_rates import ExchangeRate
from bitcoin_accounting.domain.transactions import Transaction, TxOutput
from bitcoin_accounting.domain.utxos import Outpoint
from bitcoin_accounting.domain.value_objects import Currency, RatePolicy


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(sqlite_path=tmp_path / "data" / "ledger.db")


class TestContainer:
    def test_creates_database_lazily(self, settings: Settings):
        container = Container(settings=settings)

        assert not settings.sqlite_path.exists()
        container.database
        assert settings.sqlite_path.exists()
        container.close()

    def test_services_are_cached(self, settings: Settings):
        container = Container(settings=settings)

        assert container.processor is container.processor
        assert container.processor.state is container.ledger_state
        container.close()

    def test_rate_provider_follows_settings(self, tmp_path):
        settings = Settings(
            sqlite_path=tmp_path / "ledger.db",
            rate_policy=RatePolicy.NEAREST_PRIOR,
            rate_max_lookback_days=2,
        )
        container = Container(settings=settings)

        assert container.rate_provider.policy == RatePolicy.NEAREST_PRIOR
        assert container.rate_provider.max_lookback_days == 2
        container.close()

    def test_fresh_state_uses_configured_currency(self, tmp_path):
        container = Container(
            settings=Settings(sqlite_path=tmp_path / "ledger.db", fiat_currency=Currency.EUR)
        )

        assert container.ledger_state.currency == "EUR"
        container.close()


class TestStatePersistence:
    def test_state_survives_restart(self, settings: Settings):
        container = Container(settings=settings)
        container.rate_provider.add_rate(
            ExchangeRate(price=Decimal("10000"), effective_date=date(2021, 1, 1))
        )
        container.processor.acquire(
            Transaction(txid="buy", timestamp=at(date(2021, 1, 1)), outputs=[TxOutput(ONE_BTC)])
        )
        container.save_state(label="buy")
        container.close()

        restarted = Container(settings=settings)

        assert Outpoint("buy", 0) in restarted.ledger_state.ledger
        assert restarted.ledger_state.book.total_cost_basis() == Decimal("10000")
        assert len(restarted.ledger_state.entries()) == 1
        restarted.close()

    def test_currency_mismatch_with_stored_state(self, settings: Settings):
        container = Container(settings=settings)
        container.save_state()
        container.close()

        other = Container(settings=settings.model_copy(update={"fiat_currency": Currency.EUR}))

        with pytest.raises(ValueError, match="USD"):
            other.ledger_state
        other.close()
