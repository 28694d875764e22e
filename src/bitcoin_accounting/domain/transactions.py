from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any

from bitcoin_accounting.domain.utxos import Outpoint


@dataclass(frozen=True, slots=True)
class TxOutput:
    amount: int
    recipient: str = ""


@dataclass
class Transaction:
    """An already-validated Bitcoin transaction as seen by the ledger.

    Amounts and the fee are integer satoshis. Output ``i`` is identified by
    the outpoint ``(txid, i)``.
    """

    txid: str
    timestamp: datetime
    inputs: list[Outpoint] = field(default_factory=list)
    outputs: list[TxOutput] = field(default_factory=list)
    fee: int = 0

    def __post_init__(self) -> None:
        if self.timestamp.tzinfo is None:
            self.timestamp = self.timestamp.replace(tzinfo=UTC)

    @property
    def date(self) -> date:
        return self.timestamp.astimezone(UTC).date()

    @property
    def total_output(self) -> int:
        return sum(output.amount for output in self.outputs)

    def output_outpoint(self, index: int) -> Outpoint:
        return Outpoint(self.txid, index)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transaction":
        """Build a transaction from its JSON shape.

        ``inputs`` are ``"txid:vout"`` strings, ``outputs`` are objects with
        ``amount`` and optional ``recipient``.
        """
        return cls(
            txid=data["txid"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            inputs=[Outpoint.parse(value) for value in data.get("inputs", [])],
            outputs=[
                TxOutput(
                    amount=int(output["amount"]),
                    recipient=output.get("recipient", ""),
                )
                for output in data.get("outputs", [])
            ],
            fee=int(data.get("fee", 0)),
        )
