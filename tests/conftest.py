from __future__ import annotations

from decimal import Decimal

import pytest

from settle.cart import Cart, PricedItem
from settle.checkout import CheckoutOrchestrator, Customer, UpiDetails
from settle.config import Settings
from settle.gateway import ScriptedGateway
from settle.wallet import Wallet
from tests.helpers import FailingStore


@pytest.fixture
def settings() -> Settings:
    return Settings().with_gateway(latency_scale=0)


@pytest.fixture
def store() -> FailingStore:
    return FailingStore()


@pytest.fixture
def gateway() -> ScriptedGateway:
    return ScriptedGateway()


@pytest.fixture
def biryani() -> PricedItem:
    return PricedItem("52795", "Chicken Biryani", Decimal("249"))


@pytest.fixture
def pancakes() -> PricedItem:
    return PricedItem("52855", "Banana Pancakes", Decimal("99"))


@pytest.fixture
def cart(store: FailingStore) -> Cart:
    return Cart(store)


@pytest.fixture
def full_cart(cart: Cart, biryani: PricedItem, pancakes: PricedItem) -> Cart:
    """Subtotal 597: 2 x 249 + 99."""
    cart.add(biryani, 2)
    cart.add(pancakes, 1)
    return cart


@pytest.fixture
def wallet(store: FailingStore, settings: Settings) -> Wallet:
    return Wallet(store, balance=settings.default_balance, history_limit=settings.history_limit)


@pytest.fixture
def orchestrator(
    wallet: Wallet,
    gateway: ScriptedGateway,
    store: FailingStore,
    settings: Settings,
) -> CheckoutOrchestrator:
    return CheckoutOrchestrator(wallet, gateway, store, settings)


@pytest.fixture
def customer() -> Customer:
    return Customer("Asha Rao", "9876543210", "12 MG Road, Bengaluru")


@pytest.fixture
def upi() -> UpiDetails:
    return UpiDetails("asha@okbank")
