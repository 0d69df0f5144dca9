"""
Catalog — source of already-priced purchasable items.

The checkout core never fetches or filters menus; it only consumes
PricedItem values from a CatalogProvider.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Protocol

from settle.cart import PricedItem


class CatalogProvider(Protocol):
    def list_purchasable_items(self, filter: str | None = None) -> Sequence[PricedItem]:
        ...


class StaticCatalog:
    """
    Fixed menu grouped by category.

    filter matches a category name exactly or an item name by substring,
    case-insensitively.
    """

    def __init__(self, categories: Mapping[str, Sequence[PricedItem]]) -> None:
        self._categories = {name: tuple(items) for name, items in categories.items()}

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(self._categories)

    def list_purchasable_items(self, filter: str | None = None) -> Sequence[PricedItem]:
        if not filter:
            return [item for items in self._categories.values() for item in items]

        needle = filter.strip().lower()
        for name, items in self._categories.items():
            if name.lower() == needle:
                return list(items)
        return [
            item
            for items in self._categories.values()
            for item in items
            if needle in item.name.lower()
        ]

    def find(self, item_id: str) -> PricedItem | None:
        for items in self._categories.values():
            for item in items:
                if item.id == item_id:
                    return item
        return None


def _item(id: str, name: str, price: str) -> PricedItem:
    return PricedItem(id, name, Decimal(price), f"https://www.themealdb.com/images/media/meals/{id}.jpg")


DEFAULT_MENU: dict[str, list[PricedItem]] = {
    "Chicken": [
        _item("52795", "Chicken Handi", "249"),
        _item("52772", "Teriyaki Chicken Casserole", "289"),
        _item("52940", "Brown Stew Chicken", "229"),
    ],
    "Vegetarian": [
        _item("52807", "Baingan Bharta", "149"),
        _item("52785", "Dal Fry", "119"),
        _item("53025", "Ratatouille", "179"),
    ],
    "Pasta": [
        _item("52982", "Spaghetti alla Carbonara", "199"),
        _item("52829", "Grilled Mac and Cheese Sandwich", "169"),
    ],
    "Dessert": [
        _item("52893", "Apple & Blackberry Crumble", "129"),
        _item("52855", "Banana Pancakes", "99"),
    ],
    "Side": [
        _item("52913", "Brie wrapped in prosciutto & brioche", "79"),
        _item("53049", "Garlic Bread", "49"),
    ],
}


def default_catalog() -> StaticCatalog:
    return StaticCatalog(DEFAULT_MENU)


__all__ = ("CatalogProvider", "StaticCatalog", "DEFAULT_MENU", "default_catalog")
