"""
Checkout types — inputs, quotes and confirmations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, UTC

from settle._types import Money, Record, money_from_record, money_to_record
from settle.gateway import PaymentMethod


# ═══════════════════════════════════════════════════════════════════════════════
# Inputs
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Customer:
    name: str
    phone: str
    address: str


@dataclass(frozen=True, slots=True)
class CardDetails:
    """Raw card input. Never persisted and never sent unmasked."""

    number: str
    expiry: str
    cvv: str
    holder: str

    def __repr__(self) -> str:
        return f"CardDetails(number='****', expiry={self.expiry!r}, holder={self.holder!r})"


@dataclass(frozen=True, slots=True)
class UpiDetails:
    upi_id: str


@dataclass(frozen=True, slots=True)
class NetBankingDetails:
    bank: str


type MethodDetails = CardDetails | UpiDetails | NetBankingDetails | None
"""Method-specific input. Wallet payments take None."""


# ═══════════════════════════════════════════════════════════════════════════════
# Quotes
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutQuote:
    subtotal: Money
    tax: Money
    delivery_fee: Money
    grand_total: Money

    def to_record(self) -> Record:
        return {
            "subtotal": money_to_record(self.subtotal),
            "tax": money_to_record(self.tax),
            "delivery_fee": money_to_record(self.delivery_fee),
            "grand_total": money_to_record(self.grand_total),
        }


@dataclass(frozen=True, slots=True)
class TopUpQuote:
    """amount is credited; total (amount + fee) is charged."""

    amount: Money
    processing_fee: Money
    total: Money


# ═══════════════════════════════════════════════════════════════════════════════
# Results
# ═══════════════════════════════════════════════════════════════════════════════


COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class LastOrder:
    """The persisted last completed order, replaced on every checkout."""

    order_id: str
    items: tuple[Record, ...]
    total: Money
    payment_method: PaymentMethod
    transaction_id: str
    order_date: datetime = field(default_factory=lambda: datetime.now(UTC))
    status: str = COMPLETED

    def to_record(self) -> Record:
        return {
            "order_id": self.order_id,
            "items": list(self.items),
            "total": money_to_record(self.total),
            "payment_method": self.payment_method.value,
            "transaction_id": self.transaction_id,
            "order_date": self.order_date.isoformat(),
            "status": self.status,
        }

    @classmethod
    def from_record(cls, record: Record) -> LastOrder:
        return cls(
            order_id=record["order_id"],
            items=tuple(record.get("items", ())),
            total=money_from_record(record["total"]),
            payment_method=PaymentMethod(record["payment_method"]),
            transaction_id=record["transaction_id"],
            order_date=datetime.fromisoformat(record["order_date"]),
            status=record.get("status", COMPLETED),
        )


@dataclass(frozen=True, slots=True)
class OrderConfirmation:
    order_id: str
    transaction_id: str
    quote: CheckoutQuote
    payment_method: PaymentMethod
    items: tuple[Record, ...]
    wallet_balance: Money
    completed_at: datetime


@dataclass(frozen=True, slots=True)
class TopUpConfirmation:
    order_id: str
    transaction_id: str
    quote: TopUpQuote
    balance: Money
    completed_at: datetime


@dataclass(frozen=True, slots=True)
class RecoveryReport:
    """Outcome of one recover() pass, by order id."""

    committed: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()
    still_pending: tuple[str, ...] = ()

    @property
    def is_clean(self) -> bool:
        return not self.still_pending


__all__ = (
    "Customer",
    "CardDetails",
    "UpiDetails",
    "NetBankingDetails",
    "MethodDetails",
    "CheckoutQuote",
    "TopUpQuote",
    "COMPLETED",
    "LastOrder",
    "OrderConfirmation",
    "TopUpConfirmation",
    "RecoveryReport",
)
