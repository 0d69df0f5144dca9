"""
Session — everything one user's storefront needs, opened together.

    match Session.open(settings=Settings.from_env()):
        case Ok(session):
            session.cart.add(item, 2)
            result = await session.checkout(PaymentMethod.UPI, UpiDetails("me@upi"), customer)
        case Error(e):
            print(e.message)

State is scoped to the Session instance; nothing is process-global.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from kungfu import Result, Ok, Error

from settle._errors import CheckoutError, Errors
from settle._types import Money
from settle.cart import Cart
from settle.checkout import (
    CheckoutOrchestrator,
    Customer,
    MethodDetails,
    OrderConfirmation,
    RecoveryReport,
    TopUpConfirmation,
)
from settle.config import Settings
from settle.gateway import PaymentGateway, PaymentMethod, SimulatedGateway
from settle.persistence import Keys, Persistence, SQLAlchemyStore
from settle.wallet import Wallet

log = logging.getLogger(__name__)


@dataclass(slots=True)
class Session:
    settings: Settings
    store: Persistence
    gateway: PaymentGateway
    cart: Cart
    wallet: Wallet
    orchestrator: CheckoutOrchestrator

    @classmethod
    def open(
        cls,
        *,
        store: Persistence | None = None,
        gateway: PaymentGateway | None = None,
        settings: Settings | None = None,
    ) -> Result[Session, CheckoutError]:
        """
        Rehydrate cart and wallet from persistence.

        Defaults: SQLAlchemyStore at settings.db_url, SimulatedGateway tuned
        by settings and keeping its captures in the same store.
        """
        settings = settings or Settings()

        if store is None:
            try:
                store = SQLAlchemyStore.from_url(settings.db_url)
            except Exception as e:
                return Error(Errors.persistence_failed(f"Could not open {settings.db_url}: {e}"))

        gateway = gateway or SimulatedGateway(
            success_rate=settings.gateway_success_rate,
            latency_scale=settings.gateway_latency_scale,
            store=store,
        )

        match Cart.load(store):
            case Error(e):
                return Error(e)
            case Ok(cart):
                pass

        match Wallet.load(
            store,
            default_balance=settings.default_balance,
            history_limit=settings.history_limit,
        ):
            case Error(e):
                return Error(e)
            case Ok(wallet):
                pass

        orchestrator = CheckoutOrchestrator(wallet, gateway, store, settings)
        log.debug("session opened: %r, %r", cart, wallet)
        return Ok(cls(settings, store, gateway, cart, wallet, orchestrator))

    async def checkout(
        self,
        method: PaymentMethod,
        details: MethodDetails,
        customer: Customer | None,
    ) -> Result[OrderConfirmation, CheckoutError]:
        return await self.orchestrator.checkout(self.cart, method, details, customer)

    async def top_up(
        self,
        amount: Money | int | str,
        method: PaymentMethod,
        details: MethodDetails,
    ) -> Result[TopUpConfirmation, CheckoutError]:
        return await self.orchestrator.top_up(amount, method, details)

    async def recover(self) -> Result[RecoveryReport, CheckoutError]:
        return await self.orchestrator.recover(self.cart)

    def reset(self) -> Result[None, CheckoutError]:
        """Empty the cart, reset the wallet to the default balance, forget the last order."""
        match self.cart.clear():
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        match self.wallet.reset(self.settings.default_balance):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        match self.store.remove(Keys.LAST_ORDER):
            case Error(e):
                return Error(Errors.persistence_failed(f"Could not clear last order: {e.message}"))
            case Ok(_):
                return Ok(None)


__all__ = ("Session",)
