"""Authoritative set of unspent outputs."""

from collections.abc import Iterable
from typing import Any

from bitcoin_accounting.domain.utxos import UTXO, Outpoint
from bitcoin_accounting.exceptions import (
    AlreadySpentError,
    DuplicateOutpointError,
    OutpointNotFoundError,
)


class OutpointLedger:
    """Unspent-output index plus the spent history kept for audit.

    An outpoint is unique across the ledger's lifetime: once added it can be
    spent exactly once and never added again.
    """

    def __init__(
        self,
        unspent: Iterable[UTXO] = (),
        spent: Iterable[UTXO] = (),
    ) -> None:
        self._unspent: dict[Outpoint, UTXO] = {}
        self._spent: dict[Outpoint, UTXO] = {}
        for utxo in spent:
            self._spent[utxo.outpoint] = utxo
        for utxo in unspent:
            self.add(utxo)

    def __contains__(self, outpoint: object) -> bool:
        return outpoint in self._unspent

    def __len__(self) -> int:
        return len(self._unspent)

    def add(self, utxo: UTXO) -> None:
        self.check_addable(utxo.outpoint)
        self._unspent[utxo.outpoint] = utxo

    def check_addable(self, outpoint: Outpoint) -> None:
        if outpoint in self._unspent or outpoint in self._spent:
            raise DuplicateOutpointError(outpoint)

    def check_spendable(self, outpoint: Outpoint) -> UTXO:
        """Return the UTXO ``spend`` would remove, without removing it."""
        utxo = self._unspent.get(outpoint)
        if utxo is not None:
            return utxo
        if outpoint in self._spent:
            raise AlreadySpentError(outpoint)
        raise OutpointNotFoundError(outpoint)

    def spend(self, outpoint: Outpoint) -> UTXO:
        utxo = self.check_spendable(outpoint)
        del self._unspent[outpoint]
        self._spent[outpoint] = utxo
        return utxo

    def get(self, outpoint: Outpoint) -> UTXO | None:
        return self._unspent.get(outpoint) or self._spent.get(outpoint)

    def is_spent(self, outpoint: Outpoint) -> bool:
        return outpoint in self._spent

    def unspent(self) -> list[UTXO]:
        return [self._unspent[outpoint] for outpoint in sorted(self._unspent)]

    def spent(self) -> list[UTXO]:
        return [self._spent[outpoint] for outpoint in sorted(self._spent)]

    def unspent_balance(self) -> int:
        return sum(utxo.amount for utxo in self._unspent.values())

    def encode(self) -> dict[str, Any]:
        return {
            "unspent": [utxo.encode() for utxo in self.unspent()],
            "spent": [utxo.encode() for utxo in self.spent()],
        }

    @classmethod
    def decode(cls, data: dict[str, Any]) -> "OutpointLedger":
        return cls(
            unspent=[UTXO.decode(item) for item in data.get("unspent", [])],
            spent=[UTXO.decode(item) for item in data.get("spent", [])],
        )
