"""
Scripted gateway — deterministic outcomes for tests and demos.

    gw = ScriptedGateway(approve=False)                  # every pay() declines
    gw = ScriptedGateway(verified=False)                 # pay ok, verify disagrees
    gw = ScriptedGateway(unavailable_at=Step.VERIFY)     # verify() raises

Settings are plain attributes and may be changed between calls.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from enum import Enum
from typing import Any

from settle._types import Money
from settle.gateway._simulated import (
    APPROVED_MESSAGE,
    DECLINED_MESSAGE,
    new_order_id,
    new_transaction_id,
)
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


class Step(Enum):
    CREATE_ORDER = "create_order"
    PAY = "pay"
    VERIFY = "verify"


class ScriptedGateway:
    def __init__(
        self,
        *,
        approve: bool = True,
        verified: bool = True,
        unavailable_at: Step | None = None,
        decline_message: str = DECLINED_MESSAGE,
    ) -> None:
        self.approve = approve
        self.verified = verified
        self.unavailable_at = unavailable_at
        self.decline_message = decline_message

        self.calls: Counter[Step] = Counter()
        self.orders: list[Order] = []
        self.payments: list[tuple[str, PaymentMethod, dict[str, str]]] = []
        self._paid: set[str] = set()

    def _enter(self, step: Step) -> None:
        self.calls[step] += 1
        if self.unavailable_at is step:
            raise GatewayUnavailable(f"Gateway unavailable during {step.value}")

    async def create_order(
        self,
        amount: Money,
        currency: str,
        metadata: Mapping[str, Any],
    ) -> Order:
        self._enter(Step.CREATE_ORDER)
        order = Order(
            order_id=new_order_id(),
            amount=amount,
            currency=currency,
            line_items=tuple(metadata.get("items", ())),
            metadata={k: v for k, v in metadata.items() if k != "items"},
        )
        self.orders.append(order)
        return order

    async def pay(
        self,
        order: Order,
        method: PaymentMethod,
        details: Mapping[str, str],
    ) -> PaymentResult:
        if order.order_id in self._paid or order.status is not OrderStatus.CREATED:
            raise DuplicatePayment(order.order_id)
        self._enter(Step.PAY)
        self._paid.add(order.order_id)
        self.payments.append((order.order_id, method, dict(details)))

        if not self.approve:
            return PaymentResult(False, self.decline_message)
        return PaymentResult(True, APPROVED_MESSAGE, new_transaction_id())

    async def verify(self, transaction_id: str) -> VerificationResult:
        self._enter(Step.VERIFY)
        return VerificationResult(
            transaction_id=transaction_id,
            status=CAPTURED if self.verified else "failed",
            verified=self.verified,
        )


__all__ = ("Step", "ScriptedGateway")
