"""
Simulated gateway — random outcomes with artificial network latency.

Stands in for a hosted checkout: create 1.0s, pay 2.0s, verify 0.5s,
approves 90% of payments. Pass a seeded random.Random for repeatable runs
and latency_scale=0 to skip the sleeps.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Mapping
from typing import Any
from uuid import uuid4

from kungfu import Ok, Error

from settle._types import Money
from settle.gateway._types import (
    CAPTURED,
    DuplicatePayment,
    GatewayUnavailable,
    Order,
    OrderStatus,
    PaymentMethod,
    PaymentResult,
    VerificationResult,
)
from settle.persistence import Keys, Persistence

log = logging.getLogger(__name__)

CREATE_LATENCY = 1.0
PAY_LATENCY = 2.0
VERIFY_LATENCY = 0.5

APPROVED_MESSAGE = "Payment successful"
DECLINED_MESSAGE = "Payment failed. Please check your details."

TRANSACTION_PREFIX = "TXN"


def new_order_id() -> str:
    return f"order_{uuid4().hex[:14]}"


def new_transaction_id() -> str:
    return f"{TRANSACTION_PREFIX}{uuid4().hex[:12].upper()}"


class SimulatedGateway:
    """
    In-process gateway.

    Note: verify() confirms only transaction ids this gateway captured. Pass
    the session's store to keep captures across restarts, so pending
    settlements left by an earlier process can still be recovered.
    """

    def __init__(
        self,
        *,
        success_rate: float = 0.9,
        latency_scale: float = 1.0,
        rng: random.Random | None = None,
        store: Persistence | None = None,
    ) -> None:
        self._success_rate = success_rate
        self._latency_scale = latency_scale
        self._rng = rng or random.Random()
        self._store = store
        self._paid: set[str] = set()
        self._captured: dict[str, str] = {}  # transaction_id -> order_id

    async def _delay(self, seconds: float) -> None:
        if self._latency_scale > 0:
            await asyncio.sleep(seconds * self._latency_scale)

    def _capture(self, transaction_id: str, order_id: str) -> None:
        self._captured[transaction_id] = order_id
        if self._store is None:
            return
        match self._store.get(Keys.GATEWAY_CAPTURES):
            case Ok(raw):
                captured = {**(raw or {}), transaction_id: order_id}
            case Error(e):
                log.error("capture %s kept in memory only: %s", transaction_id, e.message)
                return
        match self._store.set(Keys.GATEWAY_CAPTURES, captured):
            case Error(e):
                log.error("capture %s kept in memory only: %s", transaction_id, e.message)
            case Ok(_):
                pass

    def _is_captured(self, transaction_id: str) -> bool:
        if transaction_id in self._captured:
            return True
        if self._store is None:
            return False
        match self._store.get(Keys.GATEWAY_CAPTURES):
            case Ok(raw):
                return transaction_id in (raw or {})
            case Error(e):
                raise GatewayUnavailable(f"Capture records unreadable: {e.message}")

    async def create_order(
        self,
        amount: Money,
        currency: str,
        metadata: Mapping[str, Any],
    ) -> Order:
        await self._delay(CREATE_LATENCY)
        order = Order(
            order_id=new_order_id(),
            amount=amount,
            currency=currency,
            line_items=tuple(metadata.get("items", ())),
            metadata={k: v for k, v in metadata.items() if k != "items"},
        )
        log.debug("order %s created for %s %s", order.order_id, amount, currency)
        return order

    async def pay(
        self,
        order: Order,
        method: PaymentMethod,
        details: Mapping[str, str],
    ) -> PaymentResult:
        if order.order_id in self._paid or order.status is not OrderStatus.CREATED:
            raise DuplicatePayment(order.order_id)
        self._paid.add(order.order_id)

        await self._delay(PAY_LATENCY)

        if self._rng.random() < self._success_rate:
            transaction_id = new_transaction_id()
            self._capture(transaction_id, order.order_id)
            return PaymentResult(True, APPROVED_MESSAGE, transaction_id)

        log.debug("order %s declined (%s)", order.order_id, method.value)
        return PaymentResult(False, DECLINED_MESSAGE)

    async def verify(self, transaction_id: str) -> VerificationResult:
        await self._delay(VERIFY_LATENCY)
        known = self._is_captured(transaction_id)
        return VerificationResult(
            transaction_id=transaction_id,
            status=CAPTURED if known else "not_found",
            verified=known,
        )


__all__ = (
    "APPROVED_MESSAGE",
    "DECLINED_MESSAGE",
    "SimulatedGateway",
    "new_order_id",
    "new_transaction_id",
)
