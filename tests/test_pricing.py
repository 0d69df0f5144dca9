from decimal import Decimal

import pytest

from settle._errors import CheckoutErrorKind
from settle.checkout import quote_cart, quote_top_up
from settle.config import Settings
from tests.helpers import err, ok


def test_checkout_quote_worked_example() -> None:
    quote = quote_cart(Decimal("597"), Settings())

    assert quote.subtotal == Decimal("597")
    assert quote.tax == Decimal("30")
    assert quote.delivery_fee == Decimal("50")
    assert quote.grand_total == Decimal("677")


@pytest.mark.parametrize(
    ("subtotal", "tax"),
    [
        ("10", "1"),     # 0.5 rounds half-up
        ("29", "1"),     # 1.45
        ("30", "2"),     # 1.5
        ("249", "12"),   # 12.45
        ("0", "0"),
    ],
)
def test_tax_rounds_half_up_to_whole_unit(subtotal: str, tax: str) -> None:
    assert quote_cart(Decimal(subtotal), Settings()).tax == Decimal(tax)


def test_custom_pricing() -> None:
    settings = Settings().with_pricing(tax_rate="0.18", delivery_fee=0)

    quote = quote_cart(Decimal("100"), settings)

    assert quote.grand_total == Decimal("118")


def test_top_up_worked_example() -> None:
    quote = ok(quote_top_up(Decimal("100"), Settings()))

    assert quote.amount == Decimal("100")
    assert quote.processing_fee == Decimal("2")
    assert quote.total == Decimal("102")


@pytest.mark.parametrize(
    ("amount", "fee"),
    [
        ("10", "2"),
        ("199", "2"),
        ("500", "5.00"),
        ("1234", "12.34"),
        ("10000", "100.00"),
    ],
)
def test_processing_fee_is_max_of_minimum_and_one_percent(amount: str, fee: str) -> None:
    quote = ok(quote_top_up(amount, Settings()))

    assert quote.processing_fee == Decimal(fee)
    assert quote.total == Decimal(amount) + Decimal(fee)


@pytest.mark.parametrize("amount", ["9", "9.99", "10000.01", "50000"])
def test_top_up_out_of_range(amount: str) -> None:
    err(quote_top_up(amount, Settings()), CheckoutErrorKind.OUT_OF_RANGE)


def test_top_up_non_positive_is_invalid_amount() -> None:
    err(quote_top_up(0, Settings()), CheckoutErrorKind.INVALID_AMOUNT)
