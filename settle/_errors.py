"""
Error taxonomy — every expected failure is a CheckoutError value.

Errors travel inside kungfu.Error, never raised. The kind decides the
category; the category decides what a caller may do next:

    VALIDATION    fix the input, nothing was sent to the gateway
    BUSINESS      terminal outcome (declined, not enough money)
    TRANSPORT     gateway unreachable, a new attempt may be started
    VERIFICATION  paid but not confirmed, nothing committed; when pending,
                  recover() settles it and a new attempt is refused
    STORAGE       persistence backend failed
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


# ═══════════════════════════════════════════════════════════════════════════════
# Kinds & Categories
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorCategory(Enum):
    VALIDATION = auto()
    BUSINESS = auto()
    TRANSPORT = auto()
    VERIFICATION = auto()
    STORAGE = auto()


class CheckoutErrorKind(Enum):
    """Kinds of checkout / wallet / cart errors."""

    INVALID_QUANTITY = auto()
    INVALID_AMOUNT = auto()
    EMPTY_CART = auto()
    OUT_OF_RANGE = auto()
    MISSING_METHOD_DETAILS = auto()
    MISSING_CUSTOMER_DETAILS = auto()
    UNSUPPORTED_METHOD = auto()

    PAYMENT_DECLINED = auto()
    INSUFFICIENT_FUNDS = auto()
    ALREADY_PAID = auto()  # Same order paid twice (caller error)

    GATEWAY_UNAVAILABLE = auto()

    VERIFICATION_FAILED = auto()
    SETTLEMENT_PENDING = auto()  # Paid, awaiting recover()

    PERSISTENCE_FAILED = auto()

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORIES[self]


_CATEGORIES: dict[CheckoutErrorKind, ErrorCategory] = {
    CheckoutErrorKind.INVALID_QUANTITY: ErrorCategory.VALIDATION,
    CheckoutErrorKind.INVALID_AMOUNT: ErrorCategory.VALIDATION,
    CheckoutErrorKind.EMPTY_CART: ErrorCategory.VALIDATION,
    CheckoutErrorKind.OUT_OF_RANGE: ErrorCategory.VALIDATION,
    CheckoutErrorKind.MISSING_METHOD_DETAILS: ErrorCategory.VALIDATION,
    CheckoutErrorKind.MISSING_CUSTOMER_DETAILS: ErrorCategory.VALIDATION,
    CheckoutErrorKind.UNSUPPORTED_METHOD: ErrorCategory.VALIDATION,
    CheckoutErrorKind.PAYMENT_DECLINED: ErrorCategory.BUSINESS,
    CheckoutErrorKind.INSUFFICIENT_FUNDS: ErrorCategory.BUSINESS,
    CheckoutErrorKind.ALREADY_PAID: ErrorCategory.BUSINESS,
    CheckoutErrorKind.GATEWAY_UNAVAILABLE: ErrorCategory.TRANSPORT,
    CheckoutErrorKind.VERIFICATION_FAILED: ErrorCategory.VERIFICATION,
    CheckoutErrorKind.SETTLEMENT_PENDING: ErrorCategory.VERIFICATION,
    CheckoutErrorKind.PERSISTENCE_FAILED: ErrorCategory.STORAGE,
}


# ═══════════════════════════════════════════════════════════════════════════════
# CheckoutError
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutError:
    """
    Expected failure of a cart, wallet, checkout or top-up operation.

    order_id is set once an order exists, so the UI can show it next to
    the message.
    """

    kind: CheckoutErrorKind
    message: str
    order_id: str | None = None

    @property
    def category(self) -> ErrorCategory:
        return self.kind.category

    @property
    def retriable(self) -> bool:
        """True when starting a fresh attempt (new order) may succeed."""
        return self.category is ErrorCategory.TRANSPORT

    def with_order(self, order_id: str) -> CheckoutError:
        return CheckoutError(self.kind, self.message, order_id)

    def __str__(self) -> str:
        return f"[{self.kind.name}] {self.message}"


class Errors:
    """Constructors for the common errors."""

    @staticmethod
    def invalid_quantity(quantity: int) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.INVALID_QUANTITY,
            f"Quantity must be a positive integer, got {quantity!r}",
        )

    @staticmethod
    def invalid_amount(amount: object) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.INVALID_AMOUNT,
            f"Amount must be greater than zero, got {amount}",
        )

    @staticmethod
    def empty_cart() -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.EMPTY_CART,
            "Your cart is empty. Please add items to cart first.",
        )

    @staticmethod
    def out_of_range(amount: object, low: object, high: object) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.OUT_OF_RANGE,
            f"Amount {amount} must be between {low} and {high}",
        )

    @staticmethod
    def missing_method_details(method: str, missing: str) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.MISSING_METHOD_DETAILS,
            f"Missing {missing} for {method} payment",
        )

    @staticmethod
    def missing_customer_details(missing: str) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.MISSING_CUSTOMER_DETAILS,
            f"Missing customer {missing}",
        )

    @staticmethod
    def unsupported_method(method: str, purpose: str) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.UNSUPPORTED_METHOD,
            f"{method} cannot be used for {purpose}",
        )

    @staticmethod
    def declined(message: str, order_id: str | None = None) -> CheckoutError:
        return CheckoutError(CheckoutErrorKind.PAYMENT_DECLINED, message, order_id)

    @staticmethod
    def insufficient_funds(balance: object, amount: object) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.INSUFFICIENT_FUNDS,
            f"Insufficient wallet balance: {balance} available, {amount} required",
        )

    @staticmethod
    def already_paid(order_id: str) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.ALREADY_PAID,
            f"Order {order_id} has already been paid",
            order_id,
        )

    @staticmethod
    def gateway_unavailable(message: str, order_id: str | None = None) -> CheckoutError:
        return CheckoutError(CheckoutErrorKind.GATEWAY_UNAVAILABLE, message, order_id)

    @staticmethod
    def verification_failed(message: str, order_id: str | None = None) -> CheckoutError:
        return CheckoutError(CheckoutErrorKind.VERIFICATION_FAILED, message, order_id)

    @staticmethod
    def settlement_pending(order_id: str, message: str | None = None) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.SETTLEMENT_PENDING,
            message or f"Payment for order {order_id} is awaiting confirmation. Run recover() before paying again.",
            order_id,
        )

    @staticmethod
    def persistence_failed(message: str, order_id: str | None = None) -> CheckoutError:
        return CheckoutError(CheckoutErrorKind.PERSISTENCE_FAILED, message, order_id)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "ErrorCategory",
    "CheckoutErrorKind",
    "CheckoutError",
    "Errors",
)
