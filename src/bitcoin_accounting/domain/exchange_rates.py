"""Exchange rate domain model for BTC pricing."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4


class ExchangeRateSource(str, Enum):
    """Source of exchange rate data."""

    MANUAL = "manual"
    EXCHANGE = "exchange"
    INDEX = "index"
    API = "api"


def _utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class ExchangeRate:
    """Immutable BTC price value object.

    Represents the fiat price of one whole BTC on a specific date.
    """

    price: Decimal
    effective_date: date
    currency: str = "USD"
    id: UUID = field(default_factory=uuid4)
    source: ExchangeRateSource = ExchangeRateSource.MANUAL
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        """Validate and coerce price to Decimal."""
        if not isinstance(self.price, Decimal):
            object.__setattr__(self, "price", Decimal(str(self.price)))
        if self.price <= 0:
            raise ValueError(f"Exchange rate must be positive, got {self.price}")

    @property
    def pair(self) -> str:
        """Return currency pair string like 'BTC/USD'."""
        return f"BTC/{self.currency}"
