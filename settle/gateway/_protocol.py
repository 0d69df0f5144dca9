"""
PaymentGateway protocol — contract shared by simulated and real gateways.

Three separate steps:

    order = await gateway.create_order(amount, currency, metadata)
    payment = await gateway.pay(order, method, details)
    verification = await gateway.verify(payment.transaction_id)

Implementations raise GatewayUnavailable on transport failures and
DuplicatePayment when an order is paid twice. A decline is not an
exception: pay() returns PaymentResult(success=False).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from settle._types import Money
from settle.gateway._types import Order, PaymentMethod, PaymentResult, VerificationResult


class PaymentGateway(Protocol):
    async def create_order(
        self,
        amount: Money,
        currency: str,
        metadata: Mapping[str, Any],
    ) -> Order:
        ...

    async def pay(
        self,
        order: Order,
        method: PaymentMethod,
        details: Mapping[str, str],
    ) -> PaymentResult:
        """details are already masked; no full card number reaches a gateway."""
        ...

    async def verify(self, transaction_id: str) -> VerificationResult:
        ...


__all__ = ("PaymentGateway",)
