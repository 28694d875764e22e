from bitcoin_accounting.services.cost_basis import CostBasisBook, LotConsumption
from bitcoin_accounting.services.exchange_rates import (
    InMemoryRateProvider,
    PolicyRateProvider,
    RepositoryRateProvider,
)
from bitcoin_accounting.services.gain_loss import GainLossBreakdown, GainLossCalculator
from bitcoin_accounting.services.interfaces import ExchangeRateProvider
from bitcoin_accounting.services.ledger_state import LedgerState
from bitcoin_accounting.services.outpoint_ledger import OutpointLedger
from bitcoin_accounting.services.reporting import ReportGenerator
from bitcoin_accounting.services.transaction_processor import (
    TransactionProcessor,
    allocate_fee,
)

__all__ = [
    "CostBasisBook",
    "ExchangeRateProvider",
    "GainLossBreakdown",
    "GainLossCalculator",
    "InMemoryRateProvider",
    "LedgerState",
    "LotConsumption",
    "OutpointLedger",
    "PolicyRateProvider",
    "ReportGenerator",
    "RepositoryRateProvider",
    "TransactionProcessor",
    "allocate_fee",
]
