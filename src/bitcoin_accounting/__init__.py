from bitcoin_accounting.domain.entries import AccountingEntry
from bitcoin_accounting.domain.transactions import Transaction, TxOutput
from bitcoin_accounting.domain.utxos import UTXO, Outpoint
from bitcoin_accounting.domain.value_objects import (
    Currency,
    EntryKind,
    LotSelection,
    Money,
    RatePolicy,
)

__all__ = [
    "AccountingEntry",
    "Currency",
    "EntryKind",
    "LotSelection",
    "Money",
    "Outpoint",
    "RatePolicy",
    "Transaction",
    "TxOutput",
    "UTXO",
]

__version__ = "0.1.0"
