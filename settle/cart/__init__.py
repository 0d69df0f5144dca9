"""
Cart — items selected for checkout.

    from settle import cart as K

    cart = K.Cart(store)
    cart.add(K.PricedItem("52772", "Teriyaki Chicken", Decimal("289")), 2)
    cart.set_quantity("52772", 0)   # removes the line
"""

from settle.cart._types import PricedItem, CartLine
from settle.cart._cart import Cart

__all__ = ("PricedItem", "CartLine", "Cart")
