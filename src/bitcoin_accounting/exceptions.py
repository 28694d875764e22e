"""Domain exception hierarchy for Bitcoin Accounting.

Errors caused by input or ledger state inherit from BitcoinAccountingError.
Every exception here carries an ErrorKind tag, so callers can branch
exhaustively on ``error.kind`` instead of on message strings.
LotConservationViolation marks an engine bug and is an AssertionError.
"""

from datetime import date
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed set of error kinds raised by the ledger core."""

    DUPLICATE_OUTPOINT = "duplicate_outpoint"
    OUTPOINT_NOT_FOUND = "outpoint_not_found"
    ALREADY_SPENT = "already_spent"
    AMOUNT_EXCEEDS_LOT = "amount_exceeds_lot"
    INSUFFICIENT_INPUTS = "insufficient_inputs"
    RATE_UNAVAILABLE = "rate_unavailable"
    INVALID_DATE_RANGE = "invalid_date_range"
    MALFORMED_TRANSACTION = "malformed_transaction"
    LOT_CONSERVATION_VIOLATION = "lot_conservation_violation"


class BitcoinAccountingError(Exception):
    """Base exception for all Bitcoin Accounting errors.

    Includes an error kind, an error code for machine-readable output and
    extra context.
    """

    kind: ErrorKind
    error_code: str = "BTCA_ERROR"

    def __init__(
        self,
        message: str,
        *,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured output."""
        return {
            "error": self.error_code,
            "kind": self.kind.value,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Outpoint Errors
# =============================================================================


class DuplicateOutpointError(BitcoinAccountingError):
    """Raised when an outpoint is added to the ledger a second time."""

    kind = ErrorKind.DUPLICATE_OUTPOINT
    error_code = "DUPLICATE_OUTPOINT"

    def __init__(self, outpoint: object) -> None:
        super().__init__(
            f"Outpoint already exists: {outpoint}",
            context={"outpoint": str(outpoint)},
        )


class OutpointNotFoundError(BitcoinAccountingError):
    """Raised when spending an outpoint the ledger has never seen."""

    kind = ErrorKind.OUTPOINT_NOT_FOUND
    error_code = "OUTPOINT_NOT_FOUND"

    def __init__(self, outpoint: object) -> None:
        super().__init__(
            f"Outpoint not found: {outpoint}",
            context={"outpoint": str(outpoint)},
        )


class AlreadySpentError(BitcoinAccountingError):
    """Raised when spending an outpoint that has already been spent."""

    kind = ErrorKind.ALREADY_SPENT
    error_code = "ALREADY_SPENT"

    def __init__(self, outpoint: object) -> None:
        super().__init__(
            f"Outpoint already spent: {outpoint}",
            context={"outpoint": str(outpoint)},
        )


# =============================================================================
# Lot Errors
# =============================================================================


class AmountExceedsLotError(BitcoinAccountingError):
    """Raised when consuming more satoshis than a lot has remaining."""

    kind = ErrorKind.AMOUNT_EXCEEDS_LOT
    error_code = "AMOUNT_EXCEEDS_LOT"

    def __init__(self, outpoint: object, requested: int, remaining: int) -> None:
        super().__init__(
            f"Cannot consume {requested} sats from lot backing {outpoint}: "
            f"only {remaining} remaining",
            context={
                "outpoint": str(outpoint),
                "requested": requested,
                "remaining": remaining,
            },
        )


class LotConservationViolation(AssertionError):
    """Raised when a lot split does not conserve satoshis.

    This signals a bug in the engine, not bad input, so it derives from
    AssertionError rather than BitcoinAccountingError. Handlers of user
    errors, the CLI included, never catch it.
    """

    kind = ErrorKind.LOT_CONSERVATION_VIOLATION
    error_code = "LOT_CONSERVATION_VIOLATION"

    def __init__(self, lot_id: object, before: int, consumed: int, after: int) -> None:
        self.message = (
            f"Lot {lot_id} split is not conserved: {before} != {consumed} + {after}"
        )
        super().__init__(self.message)
        self.context: dict[str, Any] = {
            "lot_id": str(lot_id),
            "remaining_before": before,
            "consumed": consumed,
            "remaining_after": after,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.error_code,
            "kind": self.kind.value,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Transaction Errors
# =============================================================================


class InsufficientInputsError(BitcoinAccountingError):
    """Raised when inputs cannot cover outputs plus fee."""

    kind = ErrorKind.INSUFFICIENT_INPUTS
    error_code = "INSUFFICIENT_INPUTS"

    def __init__(self, available: int, required: int, txid: str | None = None) -> None:
        super().__init__(
            f"Insufficient inputs: required {required} sats, available {available} sats",
            context={"txid": txid, "available": available, "required": required},
        )


class MalformedTransactionError(BitcoinAccountingError):
    """Raised when a transaction is structurally invalid."""

    kind = ErrorKind.MALFORMED_TRANSACTION
    error_code = "MALFORMED_TRANSACTION"

    def __init__(self, txid: str, reason: str) -> None:
        super().__init__(
            f"Malformed transaction {txid}: {reason}",
            context={"txid": txid, "reason": reason},
        )


# =============================================================================
# Rate and Reporting Errors
# =============================================================================


class RateUnavailableError(BitcoinAccountingError):
    """Raised when no exchange rate exists for a date."""

    kind = ErrorKind.RATE_UNAVAILABLE
    error_code = "RATE_UNAVAILABLE"

    def __init__(self, rate_date: date, currency: str = "USD") -> None:
        super().__init__(
            f"No BTC/{currency} rate available for {rate_date.isoformat()}",
            context={"date": rate_date.isoformat(), "currency": currency},
        )
        self.rate_date = rate_date


class InvalidDateRangeError(BitcoinAccountingError):
    """Raised when a report range starts after it ends."""

    kind = ErrorKind.INVALID_DATE_RANGE
    error_code = "INVALID_DATE_RANGE"

    def __init__(self, start_date: date, end_date: date) -> None:
        super().__init__(
            f"Invalid date range: {start_date.isoformat()} is after {end_date.isoformat()}",
            context={
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
            },
        )
