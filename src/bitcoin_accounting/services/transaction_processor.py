"""TransactionProcessor: the single mutator of the ledger state."""

from collections.abc import Iterable
from decimal import ROUND_DOWN, Decimal
from uuid import uuid4

from bitcoin_accounting.domain.entries import AccountingEntry
from bitcoin_accounting.domain.transactions import Transaction, TxOutput
from bitcoin_accounting.domain.utxos import UTXO
from bitcoin_accounting.domain.value_objects import CENT, fiat_value
from bitcoin_accounting.exceptions import (
    AlreadySpentError,
    BitcoinAccountingError,
    InsufficientInputsError,
    LotConservationViolation,
    MalformedTransactionError,
)
from bitcoin_accounting.logging_config import LogContext, get_logger
from bitcoin_accounting.services.interfaces import ExchangeRateProvider
from bitcoin_accounting.services.ledger_state import LedgerState

logger = get_logger(__name__)


def allocate_fee(fee_value: Decimal, weights: list[int]) -> list[Decimal]:
    """Split ``fee_value`` pro-rata over ``weights`` in whole cents.

    Largest-remainder method: each share is rounded down to cents, and the
    cents left over go one at a time to the largest fractional remainders
    (later positions first on ties). Any sub-cent residue of ``fee_value``
    itself lands on the last share. Shares are never negative and always sum
    to ``fee_value`` exactly.
    """
    if not weights:
        return []
    if fee_value == 0:
        return [Decimal("0")] * len(weights)

    total = sum(weights)
    exact = [fee_value * weight / total for weight in weights]
    shares = [value.quantize(CENT, rounding=ROUND_DOWN) for value in exact]

    whole_cents = fee_value.quantize(CENT, rounding=ROUND_DOWN)
    leftover = int((whole_cents - sum(shares, Decimal("0"))) / CENT)
    by_remainder = sorted(
        range(len(weights)),
        key=lambda index: (exact[index] - shares[index], index),
        reverse=True,
    )
    for index in by_remainder[:leftover]:
        shares[index] += CENT

    shares[-1] += fee_value - whole_cents
    return shares


class TransactionProcessor:
    """Validates transactions and applies them to a LedgerState atomically.

    Every check (input availability, output uniqueness, value balance, price
    lookup) runs before the first mutation, so a rejected transaction leaves
    the ledger, the book and the entry log untouched.
    """

    def __init__(
        self,
        state: LedgerState,
        rates: ExchangeRateProvider,
        owned_recipients: Iterable[str] | None = None,
    ) -> None:
        if rates.currency != state.currency:
            raise ValueError(
                f"Rate provider quotes {rates.currency}, ledger is kept in {state.currency}"
            )
        self._state = state
        self._rates = rates
        self._owned = frozenset(owned_recipients) if owned_recipients is not None else None

    @property
    def state(self) -> LedgerState:
        return self._state

    def is_tracked(self, output: TxOutput) -> bool:
        """Whether an output stays with the holder and becomes a UTXO."""
        return self._owned is None or output.recipient in self._owned

    def apply(self, txn: Transaction) -> list[AccountingEntry]:
        """Spend the transaction's inputs and record its tracked outputs.

        Emits one Disposal entry per input and one Acquisition entry per
        tracked output.

        Raises:
            MalformedTransactionError: No inputs, negative fee or a
                non-positive output amount
            OutpointNotFoundError: An input is not in the ledger
            AlreadySpentError: An input was spent before, or is referenced
                twice in this transaction
            DuplicateOutpointError: An output outpoint already exists
            InsufficientInputsError: Inputs are less than outputs plus fee
            RateUnavailableError: No price for the transaction date
        """
        with LogContext(txid=txn.txid):
            try:
                if not txn.inputs:
                    raise MalformedTransactionError(txn.txid, "transaction has no inputs")
                self._validate_amounts(txn)

                with self._state.lock:
                    spent = self._check_inputs(txn)
                    tracked = self._check_outputs(txn)

                    available = sum(utxo.amount for utxo in spent)
                    required = txn.total_output + txn.fee
                    if available < required:
                        raise InsufficientInputsError(available, required, txn.txid)

                    price = self._rates.price_at(txn.date)
                    entries = self._commit_disposals(txn, spent, price)
                    entries.extend(self._commit_outputs(txn, tracked, price))
                    self._state.append_entries(entries)
            except LotConservationViolation:
                logger.critical("lot_conservation_violation", txid=txn.txid)
                raise
            except BitcoinAccountingError as exc:
                logger.warning(
                    "transaction_rejected", kind=exc.kind.value, reason=exc.message
                )
                raise

            logger.info(
                "transaction_applied",
                disposals=len(spent),
                acquisitions=len(tracked),
                fee=txn.fee,
                unit_price=str(price),
            )
        return entries

    def acquire(
        self, txn: Transaction, unit_price: Decimal | None = None
    ) -> list[AccountingEntry]:
        """Record BTC received from outside the ledger (purchase, income).

        The transaction has no inputs. Each tracked output opens a lot at
        ``unit_price``, or at the provider's price for the transaction date
        when no price is given.
        """
        with LogContext(txid=txn.txid):
            try:
                if txn.inputs:
                    raise MalformedTransactionError(
                        txn.txid, "acquisitions take no inputs"
                    )
                if txn.fee != 0:
                    raise MalformedTransactionError(
                        txn.txid, "acquisitions carry no fee"
                    )
                if not txn.outputs:
                    raise MalformedTransactionError(txn.txid, "transaction has no outputs")
                self._validate_amounts(txn)
                if unit_price is not None and unit_price <= 0:
                    raise MalformedTransactionError(
                        txn.txid, f"unit price must be positive, got {unit_price}"
                    )

                with self._state.lock:
                    tracked = self._check_outputs(txn)
                    if not tracked:
                        raise MalformedTransactionError(
                            txn.txid, "no output belongs to the holder"
                        )
                    price = (
                        unit_price
                        if unit_price is not None
                        else self._rates.price_at(txn.date)
                    )
                    entries = self._commit_outputs(txn, tracked, price)
                    self._state.append_entries(entries)
            except BitcoinAccountingError as exc:
                logger.warning(
                    "acquisition_rejected", kind=exc.kind.value, reason=exc.message
                )
                raise

            logger.info(
                "acquisition_recorded",
                acquisitions=len(tracked),
                unit_price=str(price),
            )
        return entries

    def _validate_amounts(self, txn: Transaction) -> None:
        if txn.fee < 0:
            raise MalformedTransactionError(txn.txid, f"negative fee {txn.fee}")
        for index, output in enumerate(txn.outputs):
            if output.amount <= 0:
                raise MalformedTransactionError(
                    txn.txid, f"output {index} has non-positive amount {output.amount}"
                )

    def _check_inputs(self, txn: Transaction) -> list[UTXO]:
        """Dry-run every spend; returns the UTXOs in input order."""
        seen = set()
        spent: list[UTXO] = []
        for outpoint in txn.inputs:
            utxo = self._state.ledger.check_spendable(outpoint)
            if outpoint in seen:
                raise AlreadySpentError(outpoint)
            seen.add(outpoint)
            spent.append(utxo)
        return spent

    def _check_outputs(self, txn: Transaction) -> list[tuple[int, TxOutput]]:
        tracked: list[tuple[int, TxOutput]] = []
        for index, output in enumerate(txn.outputs):
            if not self.is_tracked(output):
                continue
            self._state.ledger.check_addable(txn.output_outpoint(index))
            tracked.append((index, output))
        return tracked

    def _commit_disposals(
        self, txn: Transaction, spent: list[UTXO], price: Decimal
    ) -> list[AccountingEntry]:
        fee_value = fiat_value(txn.fee, price)
        shares = allocate_fee(fee_value, [utxo.amount for utxo in spent])

        entries: list[AccountingEntry] = []
        for utxo, fee_share in zip(spent, shares, strict=True):
            self._state.ledger.spend(utxo.outpoint)
            consumption = self._state.book.consume(utxo.outpoint, utxo.amount)
            entries.append(
                AccountingEntry.disposal(
                    entry_id=self._state.next_entry_id(),
                    entry_date=txn.date,
                    amount=utxo.amount,
                    unit_price=price,
                    txid=txn.txid,
                    outpoint=str(utxo.outpoint),
                    lot_id=consumption.lot_id,
                    acquisition_date=consumption.acquisition_date,
                    cost_basis=consumption.cost_basis,
                    proceeds=fiat_value(utxo.amount, price) - fee_share,
                    fee_allocated=fee_share,
                )
            )
        return entries

    def _commit_outputs(
        self,
        txn: Transaction,
        tracked: list[tuple[int, TxOutput]],
        price: Decimal,
    ) -> list[AccountingEntry]:
        entries: list[AccountingEntry] = []
        for index, output in tracked:
            utxo = UTXO(
                outpoint=txn.output_outpoint(index),
                amount=output.amount,
                acquisition_date=txn.date,
                acquisition_price=price,
                lot_id=uuid4(),
                recipient=output.recipient,
            )
            self._state.ledger.add(utxo)
            self._state.book.open_lot(utxo)
            entries.append(
                AccountingEntry.acquisition(
                    entry_id=self._state.next_entry_id(),
                    entry_date=txn.date,
                    amount=utxo.amount,
                    unit_price=price,
                    txid=txn.txid,
                    outpoint=str(utxo.outpoint),
                    lot_id=utxo.lot_id,
                )
            )
        return entries
