from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import date
from typing import Any

from bitcoin_accounting.domain.exchange_rates import ExchangeRate


class ExchangeRateRepository(ABC):
    @abstractmethod
    def add(self, rate: ExchangeRate) -> None:
        pass

    @abstractmethod
    def get_rate(self, currency: str, effective_date: date) -> ExchangeRate | None:
        pass

    @abstractmethod
    def get_latest_rate(
        self,
        currency: str,
        on_or_before: date | None = None,
    ) -> ExchangeRate | None:
        pass

    @abstractmethod
    def list_by_currency(
        self,
        currency: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Iterable[ExchangeRate]:
        pass

    @abstractmethod
    def delete(self, currency: str, effective_date: date) -> None:
        pass


class SnapshotRepository(ABC):
    @abstractmethod
    def save(self, snapshot: dict[str, Any], label: str = "") -> int:
        pass

    @abstractmethod
    def get(self, snapshot_id: int) -> dict[str, Any] | None:
        pass

    @abstractmethod
    def latest(self) -> dict[str, Any] | None:
        pass

    @abstractmethod
    def list_ids(self) -> list[int]:
        pass
