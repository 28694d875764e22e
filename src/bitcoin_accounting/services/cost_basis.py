"""Cost basis book: the acquisition lots backing each unspent output."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from bitcoin_accounting.domain.lots import Lot
from bitcoin_accounting.domain.utxos import UTXO, Outpoint
from bitcoin_accounting.domain.value_objects import LotSelection
from bitcoin_accounting.exceptions import (
    DuplicateOutpointError,
    InsufficientInputsError,
    OutpointNotFoundError,
)
from bitcoin_accounting.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class LotConsumption:
    """Cost basis released by consuming satoshis from a lot."""

    outpoint: Outpoint
    lot_id: UUID
    amount: int
    cost_basis: Decimal
    acquisition_date: date
    acquisition_price: Decimal
    remainder_lot_id: UUID | None = None


class CostBasisBook:
    """Tracks the open lot behind every outpoint and the lots already closed.

    Each UTXO is backed by exactly one open lot. Consuming part of a lot
    closes it and moves the remainder into a child lot with the same
    acquisition date and price.
    """

    def __init__(self, open_lots: Iterable[Lot] = (), closed_lots: Iterable[Lot] = ()) -> None:
        self._open: dict[Outpoint, Lot] = {}
        self._closed: list[Lot] = list(closed_lots)
        for lot in open_lots:
            self._register(lot)

    def _register(self, lot: Lot) -> None:
        if lot.outpoint in self._open:
            raise DuplicateOutpointError(lot.outpoint)
        self._open[lot.outpoint] = lot

    def open_lot(self, utxo: UTXO) -> Lot:
        """Open the lot carrying the acquisition cost of a new UTXO."""
        lot = Lot(
            outpoint=utxo.outpoint,
            acquisition_date=utxo.acquisition_date,
            acquisition_price=utxo.acquisition_price,
            original_amount=utxo.amount,
            id=utxo.lot_id,
        )
        self._register(lot)
        return lot

    def lot_for(self, outpoint: Outpoint) -> Lot | None:
        return self._open.get(outpoint)

    def consume(self, outpoint: Outpoint, amount: int) -> LotConsumption:
        lot = self._open.get(outpoint)
        if lot is None:
            raise OutpointNotFoundError(outpoint)

        cost_basis = lot.cost_of(amount)
        remainder = lot.consume(amount)

        del self._open[outpoint]
        self._closed.append(lot)
        if remainder is not None:
            self._open[outpoint] = remainder
            logger.debug(
                "lot_split",
                lot_id=str(lot.id),
                remainder_lot_id=str(remainder.id),
                consumed=amount,
                remaining=remainder.remaining,
            )

        return LotConsumption(
            outpoint=outpoint,
            lot_id=lot.id,
            amount=amount,
            cost_basis=cost_basis,
            acquisition_date=lot.acquisition_date,
            acquisition_price=lot.acquisition_price,
            remainder_lot_id=remainder.id if remainder is not None else None,
        )

    def open_lots(self) -> list[Lot]:
        return [self._open[outpoint] for outpoint in sorted(self._open)]

    def closed_lots(self) -> list[Lot]:
        return list(self._closed)

    def cost_basis_of(self, outpoint: Outpoint) -> Decimal:
        lot = self._open.get(outpoint)
        if lot is None:
            raise OutpointNotFoundError(outpoint)
        return lot.remaining_cost

    def total_cost_basis(self) -> Decimal:
        return sum((lot.remaining_cost for lot in self._open.values()), Decimal("0"))

    def open_amount(self) -> int:
        return sum(lot.remaining for lot in self._open.values())

    def select_outpoints(
        self,
        amount: int,
        policy: LotSelection = LotSelection.FIFO,
    ) -> list[Outpoint]:
        """Pick whole outpoints covering ``amount`` in the order ``policy`` gives.

        Used to build explicit-input transactions; the book itself is not
        modified.
        """
        if amount <= 0:
            raise ValueError(f"Requested amount must be positive, got {amount}")

        selected: list[Outpoint] = []
        covered = 0
        for lot in self._sort_lots_by_policy(list(self._open.values()), policy):
            if covered >= amount:
                break
            selected.append(lot.outpoint)
            covered += lot.remaining

        if covered < amount:
            raise InsufficientInputsError(available=covered, required=amount)
        return selected

    def _sort_lots_by_policy(self, lots: list[Lot], policy: LotSelection) -> list[Lot]:
        """Sort lots according to the selection policy."""
        if policy == LotSelection.LIFO:
            return sorted(
                lots, key=lambda lot: (lot.acquisition_date, lot.outpoint), reverse=True
            )
        elif policy == LotSelection.HIFO:
            return sorted(
                lots, key=lambda lot: (-lot.acquisition_price, lot.acquisition_date, lot.outpoint)
            )
        else:
            return sorted(lots, key=lambda lot: (lot.acquisition_date, lot.outpoint))

    def encode(self) -> dict[str, Any]:
        return {
            "open": [lot.encode() for lot in self.open_lots()],
            "closed": [lot.encode() for lot in self._closed],
        }

    @classmethod
    def decode(cls, data: dict[str, Any]) -> "CostBasisBook":
        return cls(
            open_lots=[Lot.decode(item) for item in data.get("open", [])],
            closed_lots=[Lot.decode(item) for item in data.get("closed", [])],
        )
