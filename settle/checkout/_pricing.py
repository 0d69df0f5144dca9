"""
Pricing — checkout and top-up totals.

    quote_cart(Decimal("597"), settings)
    # CheckoutQuote(subtotal=597, tax=30, delivery_fee=50, grand_total=677)

    quote_top_up(Decimal("100"), settings)
    # Ok(TopUpQuote(amount=100, processing_fee=2.00, total=102.00))
"""

from __future__ import annotations

from kungfu import Result, Ok, Error

from settle._errors import CheckoutError, Errors
from settle._types import Money, ZERO, money, round_cent, round_unit
from settle.checkout._types import CheckoutQuote, TopUpQuote
from settle.config import Settings


def quote_cart(subtotal: Money, settings: Settings) -> CheckoutQuote:
    """Tax is rounded half-up to a whole unit; delivery is a flat fee."""
    tax = round_unit(subtotal * settings.tax_rate)
    return CheckoutQuote(
        subtotal=subtotal,
        tax=tax,
        delivery_fee=settings.delivery_fee,
        grand_total=subtotal + tax + settings.delivery_fee,
    )


def quote_top_up(amount: Money | int | str, settings: Settings) -> Result[TopUpQuote, CheckoutError]:
    """
    Validate the range and add the processing fee.

    fee = max(fee_min, fee_rate * amount), quantized to 0.01.
    """
    amount = money(amount)
    if amount <= ZERO:
        return Error(Errors.invalid_amount(amount))
    if not settings.top_up_min <= amount <= settings.top_up_max:
        return Error(Errors.out_of_range(amount, settings.top_up_min, settings.top_up_max))

    fee = max(settings.processing_fee_min, round_cent(amount * settings.processing_fee_rate))
    return Ok(TopUpQuote(amount=amount, processing_fee=fee, total=amount + fee))


__all__ = ("quote_cart", "quote_top_up")
