from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from bitcoin_accounting.domain.utxos import Outpoint
from bitcoin_accounting.domain.value_objects import fiat_value
from bitcoin_accounting.exceptions import AmountExceedsLotError, LotConservationViolation


@dataclass
class Lot:
    outpoint: Outpoint
    acquisition_date: date
    acquisition_price: Decimal
    original_amount: int
    id: UUID = field(default_factory=uuid4)
    parent_id: UUID | None = None
    remaining_amount: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.acquisition_price, Decimal):
            self.acquisition_price = Decimal(str(self.acquisition_price))
        if self.original_amount <= 0:
            raise ValueError(
                f"Lot amount must be positive, got {self.original_amount}"
            )
        if self.remaining_amount is None:
            self.remaining_amount = self.original_amount

    @property
    def remaining(self) -> int:
        assert self.remaining_amount is not None
        return self.remaining_amount

    @property
    def is_open(self) -> bool:
        return self.remaining > 0

    @property
    def remaining_cost(self) -> Decimal:
        return fiat_value(self.remaining, self.acquisition_price)

    def cost_of(self, amount: int) -> Decimal:
        return fiat_value(amount, self.acquisition_price)

    def consume(self, amount: int) -> "Lot | None":
        """Consume ``amount`` satoshis, closing this lot.

        When the amount is less than what remains, the remainder moves to a
        new lot with the same acquisition date and price, whose parent is
        this lot. Returns that remainder lot, or None on a full consume.
        """
        if amount <= 0:
            raise ValueError(f"Consumed amount must be positive, got {amount}")
        before = self.remaining
        if amount > before:
            raise AmountExceedsLotError(self.outpoint, amount, before)

        remainder: Lot | None = None
        if amount < before:
            remainder = Lot(
                outpoint=self.outpoint,
                acquisition_date=self.acquisition_date,
                acquisition_price=self.acquisition_price,
                original_amount=before - amount,
                parent_id=self.id,
            )
        self.remaining_amount = 0

        after = remainder.remaining if remainder is not None else 0
        if before != amount + after:
            raise LotConservationViolation(self.id, before, amount, after)
        return remainder

    def encode(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "parent_id": str(self.parent_id) if self.parent_id else None,
            "outpoint": str(self.outpoint),
            "acquisition_date": self.acquisition_date.isoformat(),
            "acquisition_price": str(self.acquisition_price),
            "original_amount": self.original_amount,
            "remaining_amount": self.remaining,
        }

    @classmethod
    def decode(cls, data: dict[str, Any]) -> "Lot":
        return cls(
            outpoint=Outpoint.parse(data["outpoint"]),
            acquisition_date=date.fromisoformat(data["acquisition_date"]),
            acquisition_price=Decimal(data["acquisition_price"]),
            original_amount=int(data["original_amount"]),
            id=UUID(data["id"]),
            parent_id=UUID(data["parent_id"]) if data.get("parent_id") else None,
            remaining_amount=int(data["remaining_amount"]),
        )
