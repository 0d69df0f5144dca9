"""
Settlement types — paid attempts awaiting commit.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, UTC
from enum import Enum

from settle._types import Money, Record, money_from_record, money_to_record
from settle.gateway import Order, PaymentMethod


# ═══════════════════════════════════════════════════════════════════════════════
# Settlement State — Attempt Lifecycle After pay()
# ═══════════════════════════════════════════════════════════════════════════════


class SettlementState(Enum):
    """
    State of a settlement record.

    Lifecycle:
        PENDING → COMMITTED (verified, side effects applied)
                → FAILED (verification disagreed)
    """

    PENDING = "pending"
    COMMITTED = "committed"
    FAILED = "failed"


class SettlementPurpose(Enum):
    CHECKOUT = "checkout"
    TOP_UP = "top_up"


# ═══════════════════════════════════════════════════════════════════════════════
# Settlement Record — Stored State
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class SettlementRecord:
    """
    A paid attempt, keyed by order id.

    Note: transaction_id is what recovery re-verifies; pay() is never
    called again for a record.

    credit_amount: Top-ups only, the amount to credit (order amount minus
    the processing fee).
    """

    order: Order
    purpose: SettlementPurpose
    method: PaymentMethod
    transaction_id: str
    state: SettlementState = SettlementState.PENDING
    credit_amount: Money | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    error: str | None = None

    @property
    def order_id(self) -> str:
        return self.order.order_id

    @property
    def is_pending(self) -> bool:
        return self.state == SettlementState.PENDING

    @property
    def is_committed(self) -> bool:
        return self.state == SettlementState.COMMITTED

    @property
    def is_failed(self) -> bool:
        return self.state == SettlementState.FAILED

    def with_state(self, state: SettlementState, error: str | None = None) -> SettlementRecord:
        return replace(self, state=state, error=error)

    def to_record(self) -> Record:
        return {
            "order": self.order.to_record(),
            "purpose": self.purpose.value,
            "method": self.method.value,
            "transaction_id": self.transaction_id,
            "state": self.state.value,
            "credit_amount": (
                money_to_record(self.credit_amount) if self.credit_amount is not None else None
            ),
            "created_at": self.created_at.isoformat(),
            "error": self.error,
        }

    @classmethod
    def from_record(cls, record: Record) -> SettlementRecord:
        credit = record.get("credit_amount")
        return cls(
            order=Order.from_record(record["order"]),
            purpose=SettlementPurpose(record["purpose"]),
            method=PaymentMethod(record["method"]),
            transaction_id=record["transaction_id"],
            state=SettlementState(record["state"]),
            credit_amount=money_from_record(credit) if credit is not None else None,
            created_at=datetime.fromisoformat(record["created_at"]),
            error=record.get("error"),
        )


__all__ = (
    "SettlementState",
    "SettlementPurpose",
    "SettlementRecord",
)
