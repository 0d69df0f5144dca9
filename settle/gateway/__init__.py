"""
Gateway — order creation, payment and verification.

    from settle import gateway as P

    gateway: P.PaymentGateway = P.SimulatedGateway(success_rate=0.9)
    order = await gateway.create_order(Decimal("677"), "INR", {"items": [...]})
    payment = await gateway.pay(order, P.PaymentMethod.UPI, {"upi_id": "me@upi"})
    if payment.success:
        verification = await gateway.verify(payment.transaction_id)

Tests inject P.ScriptedGateway for deterministic outcomes.
"""

from settle.gateway._types import (
    PaymentMethod,
    OrderStatus,
    Order,
    PaymentResult,
    CAPTURED,
    VerificationResult,
    GatewayUnavailable,
    DuplicatePayment,
)
from settle.gateway._protocol import PaymentGateway
from settle.gateway._simulated import (
    APPROVED_MESSAGE,
    DECLINED_MESSAGE,
    SimulatedGateway,
    new_order_id,
    new_transaction_id,
)
from settle.gateway._scripted import Step, ScriptedGateway

__all__ = (
    "PaymentMethod",
    "OrderStatus",
    "Order",
    "PaymentResult",
    "CAPTURED",
    "VerificationResult",
    "GatewayUnavailable",
    "DuplicatePayment",
    "PaymentGateway",
    "APPROVED_MESSAGE",
    "DECLINED_MESSAGE",
    "SimulatedGateway",
    "new_order_id",
    "new_transaction_id",
    "Step",
    "ScriptedGateway",
)
