"""
Wallet types — transactions in the history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, UTC
from enum import Enum
from uuid import uuid4

from settle._types import Money, Record, money_from_record, money_to_record


class TransactionKind(Enum):
    CREDIT = "credit"
    DEBIT = "debit"


def _transaction_id() -> str:
    return f"txn_{uuid4().hex[:16]}"


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    Immutable entry of the wallet history.

    gateway_transaction_id links a credit to the gateway payment that
    funded it; order_id links it to the order it settled.
    """

    kind: TransactionKind
    amount: Money
    description: str
    id: str = field(default_factory=_transaction_id)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    gateway_transaction_id: str | None = None
    order_id: str | None = None

    @property
    def signed_amount(self) -> Money:
        return self.amount if self.kind is TransactionKind.CREDIT else -self.amount

    def to_record(self) -> Record:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "amount": money_to_record(self.amount),
            "description": self.description,
            "timestamp": self.timestamp.isoformat(),
            "gateway_transaction_id": self.gateway_transaction_id,
            "order_id": self.order_id,
        }

    @classmethod
    def from_record(cls, record: Record) -> Transaction:
        return cls(
            kind=TransactionKind(record["kind"]),
            amount=money_from_record(record["amount"]),
            description=record["description"],
            id=record["id"],
            timestamp=datetime.fromisoformat(record["timestamp"]),
            gateway_transaction_id=record.get("gateway_transaction_id"),
            order_id=record.get("order_id"),
        )


__all__ = ("TransactionKind", "Transaction")
