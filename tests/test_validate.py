from decimal import Decimal

import pytest

from settle._errors import CheckoutErrorKind, ErrorCategory
from settle.checkout import (
    CardDetails,
    Customer,
    NetBankingDetails,
    UpiDetails,
    mask_card_number,
    validate_customer,
    validate_method,
)
from settle.gateway import PaymentMethod
from tests.helpers import err, ok

TOTAL = Decimal("677")
BALANCE = Decimal("1500")


def card(**overrides: str) -> CardDetails:
    fields = {"number": "4111 1111 1111 1234", "expiry": "12/29", "cvv": "123", "holder": "Asha Rao"}
    fields.update(overrides)
    return CardDetails(**fields)


@pytest.mark.parametrize(
    "number",
    ["4111 1111 1111 1234", "4111111111111234", " 4111-1111-1111-1234 ".replace("-", " ")],
)
def test_mask_card_number(number: str) -> None:
    assert mask_card_number(number) == "**** **** **** 1234"


def test_card_payload_is_masked_without_cvv() -> None:
    payload = ok(validate_method(PaymentMethod.CARD, card(), total=TOTAL, wallet_balance=BALANCE))

    assert payload == {"card_number": "**** **** **** 1234", "expiry": "12/29", "holder": "Asha Rao"}
    assert "123" not in payload.values()


@pytest.mark.parametrize("field", ["number", "expiry", "cvv", "holder"])
def test_card_requires_every_field(field: str) -> None:
    e = err(
        validate_method(PaymentMethod.CARD, card(**{field: "  "}), total=TOTAL, wallet_balance=BALANCE),
        CheckoutErrorKind.MISSING_METHOD_DETAILS,
    )
    assert e.category is ErrorCategory.VALIDATION


def test_card_repr_hides_number_and_cvv() -> None:
    text = repr(card())

    assert "4111" not in text
    assert "123" not in text


def test_upi_requires_id() -> None:
    err(
        validate_method(PaymentMethod.UPI, UpiDetails(""), total=TOTAL, wallet_balance=BALANCE),
        CheckoutErrorKind.MISSING_METHOD_DETAILS,
    )
    assert ok(
        validate_method(PaymentMethod.UPI, UpiDetails("asha@okbank"), total=TOTAL, wallet_balance=BALANCE)
    ) == {"upi_id": "asha@okbank"}


def test_netbanking_requires_bank() -> None:
    err(
        validate_method(PaymentMethod.NETBANKING, None, total=TOTAL, wallet_balance=BALANCE),
        CheckoutErrorKind.MISSING_METHOD_DETAILS,
    )
    assert ok(
        validate_method(
            PaymentMethod.NETBANKING, NetBankingDetails("HDFC Bank"), total=TOTAL, wallet_balance=BALANCE
        )
    ) == {"bank": "HDFC Bank"}


def test_details_of_wrong_method_are_missing() -> None:
    err(
        validate_method(PaymentMethod.CARD, UpiDetails("asha@okbank"), total=TOTAL, wallet_balance=BALANCE),
        CheckoutErrorKind.MISSING_METHOD_DETAILS,
    )


def test_wallet_requires_sufficient_balance() -> None:
    err(
        validate_method(PaymentMethod.WALLET, None, total=TOTAL, wallet_balance=Decimal("500")),
        CheckoutErrorKind.INSUFFICIENT_FUNDS,
    )
    assert ok(validate_method(PaymentMethod.WALLET, None, total=TOTAL, wallet_balance=TOTAL)) == {}


def test_customer_details_required() -> None:
    e = err(validate_customer(Customer("Asha", "", " ")), CheckoutErrorKind.MISSING_CUSTOMER_DETAILS)

    assert "phone" in e.message
    assert "address" in e.message
    assert "name" not in e.message

    err(validate_customer(None), CheckoutErrorKind.MISSING_CUSTOMER_DETAILS)
