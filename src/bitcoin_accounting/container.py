"""Dependency injection container for Bitcoin Accounting.

Provides centralized dependency management using a simple container pattern.
This allows for:
- Easy testing through dependency replacement
- Configuration-driven service instantiation
- Lazy initialization of the database and the ledger state

Usage:
    from bitcoin_accounting.container import Container

    container = Container()
    container.processor.apply(txn)
    container.save_state()
"""

from functools import cached_property

from bitcoin_accounting.config import Settings, get_settings
from bitcoin_accounting.logging_config import get_logger
from bitcoin_accounting.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteExchangeRateRepository,
    SQLiteSnapshotRepository,
)
from bitcoin_accounting.services.exchange_rates import RepositoryRateProvider
from bitcoin_accounting.services.gain_loss import GainLossCalculator
from bitcoin_accounting.services.ledger_state import LedgerState
from bitcoin_accounting.services.reporting import ReportGenerator
from bitcoin_accounting.services.transaction_processor import TransactionProcessor

logger = get_logger(__name__)


class Container:
    """Dependency injection container.

    Provides lazy-loaded access to the ledger services and repositories.
    Services are instantiated on first access and cached for reuse.

    The container can be configured with custom settings for testing:

        test_settings = Settings(sqlite_path=tmp_path / "ledger.db")
        container = Container(settings=test_settings)
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        logger.debug(
            "container_created",
            sqlite_path=str(self._settings.sqlite_path),
            environment=self._settings.environment.value,
        )

    @property
    def settings(self) -> Settings:
        """Get application settings."""
        return self._settings

    @cached_property
    def database(self) -> SQLiteDatabase:
        """Get the SQLite database, creating its tables on first access."""
        path = self._settings.sqlite_path
        if str(path) != ":memory:":
            path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("initializing_sqlite_database", path=str(path))

        db = SQLiteDatabase(path)
        db.initialize()
        return db

    @cached_property
    def exchange_rate_repository(self) -> SQLiteExchangeRateRepository:
        return SQLiteExchangeRateRepository(self.database)

    @cached_property
    def snapshot_repository(self) -> SQLiteSnapshotRepository:
        return SQLiteSnapshotRepository(self.database)

    @cached_property
    def rate_provider(self) -> RepositoryRateProvider:
        """Get the rate provider configured with the lookup policy."""
        return RepositoryRateProvider(
            self.exchange_rate_repository,
            currency=self._settings.fiat_currency.value,
            policy=self._settings.rate_policy,
            max_lookback_days=self._settings.rate_max_lookback_days,
        )

    @cached_property
    def ledger_state(self) -> LedgerState:
        """Get the ledger state, restored from the latest snapshot if any."""
        snapshot = self.snapshot_repository.latest()
        if snapshot is None:
            logger.info("ledger_state_created", currency=self._settings.fiat_currency.value)
            return LedgerState(currency=self._settings.fiat_currency.value)

        state = LedgerState.decode(snapshot)
        if state.currency != self._settings.fiat_currency.value:
            raise ValueError(
                f"Stored ledger is kept in {state.currency}, "
                f"settings ask for {self._settings.fiat_currency.value}"
            )
        logger.info(
            "ledger_state_restored",
            entries=len(state.entries()),
            unspent=len(state.ledger),
        )
        return state

    @cached_property
    def processor(self) -> TransactionProcessor:
        return TransactionProcessor(self.ledger_state, self.rate_provider)

    @cached_property
    def gain_loss_calculator(self) -> GainLossCalculator:
        return GainLossCalculator(self.ledger_state)

    @cached_property
    def report_generator(self) -> ReportGenerator:
        return ReportGenerator(self.ledger_state, self.rate_provider)

    def save_state(self, label: str = "") -> int:
        """Persist the current ledger state as a new snapshot."""
        snapshot_id = self.snapshot_repository.save(self.ledger_state.encode(), label)
        logger.info("ledger_state_saved", snapshot_id=snapshot_id, label=label)
        return snapshot_id

    def close(self) -> None:
        if "database" in self.__dict__:
            self.database.close()
