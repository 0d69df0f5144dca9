"""
Core types for settle.

Re-exports from kungfu + money helpers shared by every module.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Any

# Re-export from kungfu
from kungfu import Result, Ok, Error

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

type Money = Decimal
"""Amount in the session currency. Never a float."""

type Record = dict[str, Any]
"""JSON-compatible structured value, as written to persistence."""

CENT = Decimal("0.01")
UNIT = Decimal("1")
ZERO = Decimal("0")


def money(value: Decimal | int | str) -> Money:
    """
    Coerce to Decimal.

    Floats are rejected: 0.1 + 0.2 is not a price.
    """
    if isinstance(value, float):
        raise TypeError("money must not be a float; pass str, int or Decimal")
    if isinstance(value, Decimal):
        return value
    return Decimal(value)


def round_unit(value: Decimal) -> Money:
    """Round half-up to a whole currency unit (597 * 0.05 -> 30)."""
    return value.quantize(UNIT, rounding=ROUND_HALF_UP)


def round_cent(value: Decimal) -> Money:
    """Round half-up to 0.01."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def money_to_record(value: Money) -> str:
    return str(value)


def money_from_record(value: str | int) -> Money:
    return Decimal(str(value))


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    # Money
    "Money",
    "Record",
    "CENT",
    "UNIT",
    "ZERO",
    "money",
    "round_unit",
    "round_cent",
    "money_to_record",
    "money_from_record",
)
