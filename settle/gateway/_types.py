"""
Gateway types — orders, payment and verification results.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, UTC
from enum import Enum
from typing import Any

from settle._types import Money, Record, money_from_record, money_to_record


# ═══════════════════════════════════════════════════════════════════════════════
# Payment Method
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentMethod(Enum):
    WALLET = "wallet"
    CARD = "card"
    UPI = "upi"
    NETBANKING = "netbanking"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    PaymentMethod.WALLET: "Digital Wallet",
    PaymentMethod.CARD: "Credit/Debit Card",
    PaymentMethod.UPI: "UPI Payment",
    PaymentMethod.NETBANKING: "Net Banking",
}


# ═══════════════════════════════════════════════════════════════════════════════
# Order
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(Enum):
    """
    Lifecycle:
        CREATED → PAID
                → FAILED
    """

    CREATED = "created"
    PAID = "paid"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class Order:
    """
    Gateway order. Amount is fixed at creation.

    Note: Only status ever changes, as a new value via with_status().
    """

    order_id: str
    amount: Money
    currency: str
    line_items: tuple[Record, ...] = ()
    status: OrderStatus = OrderStatus.CREATED
    metadata: Record = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def with_status(self, status: OrderStatus) -> Order:
        return replace(self, status=status)

    def to_record(self) -> Record:
        return {
            "order_id": self.order_id,
            "amount": money_to_record(self.amount),
            "currency": self.currency,
            "line_items": list(self.line_items),
            "status": self.status.value,
            "metadata": dict(self.metadata),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: Record) -> Order:
        return cls(
            order_id=record["order_id"],
            amount=money_from_record(record["amount"]),
            currency=record["currency"],
            line_items=tuple(record.get("line_items", ())),
            status=OrderStatus(record["status"]),
            metadata=dict(record.get("metadata", {})),
            created_at=datetime.fromisoformat(record["created_at"]),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Results
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentResult:
    """Outcome of pay(). success=False is a terminal decline."""

    success: bool
    message: str
    transaction_id: str | None = None


CAPTURED = "captured"


@dataclass(frozen=True, slots=True)
class VerificationResult:
    transaction_id: str
    status: str
    verified: bool

    @property
    def is_settled(self) -> bool:
        return self.verified and self.status == CAPTURED


# ═══════════════════════════════════════════════════════════════════════════════
# Exceptions — Raised By Gateways, Lifted At The Orchestrator Boundary
# ═══════════════════════════════════════════════════════════════════════════════


class GatewayUnavailable(Exception):
    """Gateway could not be reached or timed out."""


class DuplicatePayment(Exception):
    """pay() called twice for the same order."""

    def __init__(self, order_id: str, *args: Any) -> None:
        super().__init__(f"Order {order_id} has already been paid", *args)
        self.order_id = order_id


__all__ = (
    "PaymentMethod",
    "OrderStatus",
    "Order",
    "PaymentResult",
    "CAPTURED",
    "VerificationResult",
    "GatewayUnavailable",
    "DuplicatePayment",
)
