"""Exchange rate providers backed by memory or the rate repository."""

from abc import abstractmethod
from collections.abc import Mapping
from datetime import date
from decimal import Decimal

from bitcoin_accounting.domain.exchange_rates import ExchangeRate
from bitcoin_accounting.domain.value_objects import RatePolicy
from bitcoin_accounting.exceptions import RateUnavailableError
from bitcoin_accounting.logging_config import get_logger
from bitcoin_accounting.repositories.interfaces import ExchangeRateRepository
from bitcoin_accounting.services.interfaces import ExchangeRateProvider

logger = get_logger(__name__)


class PolicyRateProvider(ExchangeRateProvider):
    """Applies the exact-date or nearest-prior-date lookup policy."""

    def __init__(
        self,
        currency: str = "USD",
        policy: RatePolicy = RatePolicy.EXACT,
        max_lookback_days: int = 7,
    ) -> None:
        self.currency = currency
        self.policy = policy
        self.max_lookback_days = max_lookback_days

    @abstractmethod
    def _exact(self, rate_date: date) -> Decimal | None:
        pass

    @abstractmethod
    def _latest_on_or_before(self, rate_date: date) -> tuple[date, Decimal] | None:
        pass

    def price_at(self, rate_date: date) -> Decimal:
        price = self._exact(rate_date)
        if price is not None:
            return price

        if self.policy == RatePolicy.NEAREST_PRIOR:
            prior = self._latest_on_or_before(rate_date)
            if prior is not None:
                prior_date, prior_price = prior
                age = (rate_date - prior_date).days
                if age <= self.max_lookback_days:
                    logger.debug(
                        "exchange_rate_prior_used",
                        requested=rate_date.isoformat(),
                        used=prior_date.isoformat(),
                        age_days=age,
                    )
                    return prior_price

        logger.warning(
            "exchange_rate_not_found",
            date=rate_date.isoformat(),
            currency=self.currency,
            policy=self.policy.value,
        )
        raise RateUnavailableError(rate_date, self.currency)


class InMemoryRateProvider(PolicyRateProvider):
    """Rate table held in a dict, for tests and one-off runs."""

    def __init__(
        self,
        rates: Mapping[date, Decimal | str | int] | None = None,
        currency: str = "USD",
        policy: RatePolicy = RatePolicy.EXACT,
        max_lookback_days: int = 7,
    ) -> None:
        super().__init__(currency, policy, max_lookback_days)
        self._rates: dict[date, Decimal] = {}
        for rate_date, price in (rates or {}).items():
            self.add_rate(rate_date, price)

    def add_rate(self, rate_date: date, price: Decimal | str | int) -> None:
        rate = ExchangeRate(
            price=Decimal(str(price)), effective_date=rate_date, currency=self.currency
        )
        self._rates[rate.effective_date] = rate.price

    def _exact(self, rate_date: date) -> Decimal | None:
        return self._rates.get(rate_date)

    def _latest_on_or_before(self, rate_date: date) -> tuple[date, Decimal] | None:
        candidates = [d for d in self._rates if d <= rate_date]
        if not candidates:
            return None
        latest = max(candidates)
        return latest, self._rates[latest]


class RepositoryRateProvider(PolicyRateProvider):
    """Rates read from an ExchangeRateRepository."""

    def __init__(
        self,
        exchange_rate_repo: ExchangeRateRepository,
        currency: str = "USD",
        policy: RatePolicy = RatePolicy.EXACT,
        max_lookback_days: int = 7,
    ) -> None:
        super().__init__(currency, policy, max_lookback_days)
        self._repo = exchange_rate_repo

    def add_rate(self, rate: ExchangeRate) -> None:
        if rate.currency != self.currency:
            raise ValueError(
                f"Rate quoted in {rate.currency}, provider uses {self.currency}"
            )
        self._repo.add(rate)

    def _exact(self, rate_date: date) -> Decimal | None:
        rate = self._repo.get_rate(self.currency, rate_date)
        return rate.price if rate is not None else None

    def _latest_on_or_before(self, rate_date: date) -> tuple[date, Decimal] | None:
        rate = self._repo.get_latest_rate(self.currency, on_or_before=rate_date)
        if rate is None:
            return None
        return rate.effective_date, rate.price
