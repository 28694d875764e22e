from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal


class ExchangeRateProvider(ABC):
    """Date to BTC price lookup consumed by the ledger core.

    Implementations raise RateUnavailableError when they have no price for
    the requested date under their configured policy. The core never
    substitutes a value of its own.
    """

    currency: str = "USD"

    @abstractmethod
    def price_at(self, rate_date: date) -> Decimal:
        pass
