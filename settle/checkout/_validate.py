"""
Validation — customer and payment-method details.

Runs before any gateway call. On success yields the payload the gateway
receives, with the card number already masked and the cvv dropped.
"""

from __future__ import annotations

from kungfu import Result, Ok, Error

from settle._errors import CheckoutError, Errors
from settle._types import Money
from settle.checkout._types import (
    CardDetails,
    Customer,
    MethodDetails,
    NetBankingDetails,
    UpiDetails,
)
from settle.gateway import PaymentMethod

MASK_PREFIX = "**** **** **** "


def mask_card_number(number: str) -> str:
    """'4111 1111 1111 1234' -> '**** **** **** 1234'."""
    digits = "".join(number.split())
    return MASK_PREFIX + digits[-4:]


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def validate_customer(customer: Customer | None) -> Result[Customer, CheckoutError]:
    if customer is None:
        return Error(Errors.missing_customer_details("name, phone, address"))

    missing = [
        label
        for label, value in (
            ("name", customer.name),
            ("phone", customer.phone),
            ("address", customer.address),
        )
        if _blank(value)
    ]
    if missing:
        return Error(Errors.missing_customer_details(", ".join(missing)))
    return Ok(customer)


def validate_method(
    method: PaymentMethod,
    details: MethodDetails,
    *,
    total: Money,
    wallet_balance: Money,
) -> Result[dict[str, str], CheckoutError]:
    """
    Check method details and build the gateway payload.

    | method     | requirement                       |
    |------------|-----------------------------------|
    | wallet     | wallet_balance >= total           |
    | card       | number, expiry, cvv, holder       |
    | upi        | upi id                            |
    | netbanking | bank                              |
    """
    name = method.display_name

    match method:
        case PaymentMethod.WALLET:
            if wallet_balance < total:
                return Error(Errors.insufficient_funds(wallet_balance, total))
            return Ok({})

        case PaymentMethod.CARD:
            if not isinstance(details, CardDetails):
                return Error(Errors.missing_method_details(name, "card details"))
            missing = [
                label
                for label, value in (
                    ("card number", details.number),
                    ("expiry", details.expiry),
                    ("cvv", details.cvv),
                    ("card holder", details.holder),
                )
                if _blank(value)
            ]
            if missing:
                return Error(Errors.missing_method_details(name, ", ".join(missing)))
            return Ok({
                "card_number": mask_card_number(details.number),
                "expiry": details.expiry.strip(),
                "holder": details.holder.strip(),
            })

        case PaymentMethod.UPI:
            if not isinstance(details, UpiDetails) or _blank(details.upi_id):
                return Error(Errors.missing_method_details(name, "UPI ID"))
            return Ok({"upi_id": details.upi_id.strip()})

        case PaymentMethod.NETBANKING:
            if not isinstance(details, NetBankingDetails) or _blank(details.bank):
                return Error(Errors.missing_method_details(name, "bank"))
            return Ok({"bank": details.bank.strip()})


__all__ = (
    "MASK_PREFIX",
    "mask_card_number",
    "validate_customer",
    "validate_method",
)
