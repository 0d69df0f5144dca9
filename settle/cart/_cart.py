"""
Cart — insertion-ordered lines keyed by item id.

Every mutation is write-through: the new snapshot is persisted first and
only then applied in memory. A storage failure leaves the cart as it was.

    match Cart.load(store):
        case Ok(cart):
            cart.add(biryani, 2)
            cart.total()  # Decimal("498")
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from kungfu import Result, Ok, Error

from settle._errors import CheckoutError, Errors
from settle._types import Money, ZERO
from settle.cart._types import CartLine, PricedItem
from settle.persistence import Keys, Persistence

log = logging.getLogger(__name__)


def _is_count(quantity: object) -> bool:
    return isinstance(quantity, int) and not isinstance(quantity, bool)


class Cart:
    """Selected items and quantities."""

    def __init__(self, store: Persistence | None = None, lines: list[CartLine] | None = None) -> None:
        self._store = store
        self._lines: dict[str, CartLine] = {line.item_id: line for line in lines or ()}

    @classmethod
    def load(cls, store: Persistence) -> Result[Cart, CheckoutError]:
        """Rehydrate the persisted snapshot; nothing stored means empty."""
        match store.get(Keys.CART_ITEMS):
            case Ok(None):
                return Ok(cls(store))
            case Ok(records):
                lines = [CartLine.from_record(r) for r in records]
                return Ok(cls(store, [line for line in lines if line.quantity >= 1]))
            case Error(e):
                return Error(Errors.persistence_failed(f"Could not load cart: {e.message}"))

    # ───────────────────────────────────────────────────────────────────────────
    # Queries
    # ───────────────────────────────────────────────────────────────────────────

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines.values())

    def get(self, item_id: str) -> CartLine | None:
        return self._lines.get(item_id)

    def total(self) -> Money:
        """Subtotal, recomputed on every call."""
        return sum((line.line_total for line in self._lines.values()), ZERO)

    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._lines

    def __repr__(self) -> str:
        return f"Cart(lines={len(self._lines)}, total={self.total()})"

    # ───────────────────────────────────────────────────────────────────────────
    # Mutations
    # ───────────────────────────────────────────────────────────────────────────

    def add(self, item: PricedItem, quantity: int = 1) -> Result[CartLine, CheckoutError]:
        """Insert a snapshot of the item, or merge into its existing line."""
        if not _is_count(quantity) or quantity <= 0:
            return Error(Errors.invalid_quantity(quantity))

        existing = self._lines.get(item.id)
        line = (
            existing.with_quantity(existing.quantity + quantity)
            if existing is not None
            else CartLine.of(item, quantity)
        )

        updated = dict(self._lines)
        updated[item.id] = line
        match self._commit(updated):
            case Error(e):
                return Error(e)
            case Ok(_):
                return Ok(line)

    def set_quantity(self, item_id: str, quantity: int) -> Result[None, CheckoutError]:
        """
        Replace the quantity of a line.

        quantity <= 0 removes the line; an unknown item_id is a no-op.
        """
        if not _is_count(quantity):
            return Error(Errors.invalid_quantity(quantity))

        existing = self._lines.get(item_id)
        if existing is None:
            return Ok(None)
        if quantity <= 0:
            return self.remove(item_id)

        updated = dict(self._lines)
        updated[item_id] = existing.with_quantity(quantity)
        return self._commit(updated)

    def remove(self, item_id: str) -> Result[None, CheckoutError]:
        if item_id not in self._lines:
            return Ok(None)
        updated = {k: v for k, v in self._lines.items() if k != item_id}
        return self._commit(updated)

    def clear(self) -> Result[None, CheckoutError]:
        if self._store is not None:
            match self._store.remove(Keys.CART_ITEMS):
                case Error(e):
                    return Error(Errors.persistence_failed(f"Could not clear cart: {e.message}"))
                case Ok(_):
                    pass
        self._lines = {}
        return Ok(None)

    def _commit(self, updated: dict[str, CartLine]) -> Result[None, CheckoutError]:
        if self._store is not None:
            snapshot = [line.to_record() for line in updated.values()]
            match self._store.set(Keys.CART_ITEMS, snapshot):
                case Error(e):
                    log.error("cart write failed: %s", e.message)
                    return Error(Errors.persistence_failed(f"Could not save cart: {e.message}"))
                case Ok(_):
                    pass
        self._lines = updated
        return Ok(None)


__all__ = ("Cart",)
