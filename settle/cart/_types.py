"""
Cart types — purchasable items and cart lines.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from settle._types import Money, Record, money, money_from_record, money_to_record


# ═══════════════════════════════════════════════════════════════════════════════
# PricedItem — What The Catalog Supplies
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PricedItem:
    """Already-priced purchasable item, as supplied by a CatalogProvider."""

    id: str
    name: str
    price: Money
    image_ref: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "price", money(self.price))
        if self.price < 0:
            raise ValueError(f"Item {self.id} has a negative price")


# ═══════════════════════════════════════════════════════════════════════════════
# CartLine — Snapshot Of An Item At First Add
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartLine:
    """
    One line of the cart.

    Note: unit_price is captured when the item is first added and never
    refreshed from the catalog.
    """

    item_id: str
    name: str
    unit_price: Money
    quantity: int
    image_ref: str | None = None

    @classmethod
    def of(cls, item: PricedItem, quantity: int) -> CartLine:
        return cls(item.id, item.name, item.price, quantity, item.image_ref)

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity

    def with_quantity(self, quantity: int) -> CartLine:
        return replace(self, quantity=quantity)

    def to_record(self) -> Record:
        return {
            "item_id": self.item_id,
            "name": self.name,
            "unit_price": money_to_record(self.unit_price),
            "quantity": self.quantity,
            "image_ref": self.image_ref,
        }

    @classmethod
    def from_record(cls, record: Record) -> CartLine:
        return cls(
            item_id=str(record["item_id"]),
            name=record["name"],
            unit_price=money_from_record(record["unit_price"]),
            quantity=int(record["quantity"]),
            image_ref=record.get("image_ref"),
        )


__all__ = ("PricedItem", "CartLine")
