from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

SATS_PER_BTC = 100_000_000
CENT = Decimal("0.01")


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"
    CHF = "CHF"
    CAD = "CAD"
    AUD = "AUD"


class LotSelection(str, Enum):
    FIFO = "fifo"
    LIFO = "lifo"
    HIFO = "hifo"


class RatePolicy(str, Enum):
    EXACT = "exact"
    NEAREST_PRIOR = "nearest_prior"


class EntryKind(str, Enum):
    ACQUISITION = "acquisition"
    DISPOSAL = "disposal"


def btc_to_sats(btc: Decimal | str | int) -> int:
    """Convert a BTC amount to satoshis, rejecting sub-satoshi precision."""
    value = Decimal(str(btc)) * SATS_PER_BTC
    if value != value.to_integral_value():
        raise ValueError(f"Amount {btc} BTC is not a whole number of satoshis")
    return int(value)


def sats_to_btc(sats: int) -> Decimal:
    return Decimal(sats) / SATS_PER_BTC


def fiat_value(sats: int, unit_price: Decimal) -> Decimal:
    """Exact fiat value of ``sats`` at ``unit_price`` per whole BTC."""
    return Decimal(sats) * unit_price / SATS_PER_BTC


@dataclass(frozen=True, slots=True)
class Money:
    amount: Decimal
    currency: Currency | str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))

        if isinstance(self.currency, str) and not isinstance(self.currency, Currency):
            try:
                currency_enum = Currency[self.currency]
                object.__setattr__(self, "currency", currency_enum)
            except KeyError:
                raise ValueError(f"Invalid currency: {self.currency}")
        elif not isinstance(self.currency, Currency):
            raise ValueError(f"Invalid currency: {self.currency}")

    def __add__(self, other: "Money") -> "Money":
        if self.currency != other.currency:
            raise ValueError(f"Cannot add {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount == other.amount and self.currency == other.currency


__all__ = [
    "CENT",
    "SATS_PER_BTC",
    "Currency",
    "EntryKind",
    "LotSelection",
    "Money",
    "RatePolicy",
    "btc_to_sats",
    "fiat_value",
    "sats_to_btc",
]
