from bitcoin_accounting.domain.entries import AccountingEntry
from bitcoin_accounting.domain.exchange_rates import ExchangeRate, ExchangeRateSource
from bitcoin_accounting.domain.lots import Lot
from bitcoin_accounting.domain.reports import Report, ReportLine, ReportTotals, RollForward
from bitcoin_accounting.domain.transactions import Transaction, TxOutput
from bitcoin_accounting.domain.utxos import UTXO, Outpoint
from bitcoin_accounting.domain.value_objects import (
    SATS_PER_BTC,
    Currency,
    EntryKind,
    LotSelection,
    Money,
    RatePolicy,
    btc_to_sats,
    fiat_value,
    sats_to_btc,
)

__all__ = [
    "SATS_PER_BTC",
    "AccountingEntry",
    "Currency",
    "EntryKind",
    "ExchangeRate",
    "ExchangeRateSource",
    "Lot",
    "LotSelection",
    "Money",
    "Outpoint",
    "RatePolicy",
    "Report",
    "ReportLine",
    "ReportTotals",
    "RollForward",
    "Transaction",
    "TxOutput",
    "UTXO",
    "btc_to_sats",
    "fiat_value",
    "sats_to_btc",
]
