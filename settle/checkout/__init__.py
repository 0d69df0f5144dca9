"""
Checkout — pricing, validation and the settlement pipeline.

    from settle import checkout as C

    orchestrator = C.CheckoutOrchestrator(wallet, gateway, store, settings)

    orchestrator.quote(cart)                # CheckoutQuote, no side effects
    orchestrator.can_proceed(cart, method, details, customer)

    result = await orchestrator.checkout(cart, method, details, customer)
    result = await orchestrator.top_up(Decimal("100"), method, details)
    report = await orchestrator.recover(cart)
"""

from settle.checkout._types import (
    Customer,
    CardDetails,
    UpiDetails,
    NetBankingDetails,
    MethodDetails,
    CheckoutQuote,
    TopUpQuote,
    LastOrder,
    OrderConfirmation,
    TopUpConfirmation,
    RecoveryReport,
)
from settle.checkout._pricing import quote_cart, quote_top_up
from settle.checkout._validate import mask_card_number, validate_customer, validate_method
from settle.checkout._attempt import Stage, TRANSITIONS, IllegalTransition, Attempt
from settle.checkout._orchestrator import CheckoutOrchestrator

__all__ = (
    # Types
    "Customer",
    "CardDetails",
    "UpiDetails",
    "NetBankingDetails",
    "MethodDetails",
    "CheckoutQuote",
    "TopUpQuote",
    "LastOrder",
    "OrderConfirmation",
    "TopUpConfirmation",
    "RecoveryReport",
    # Pricing & validation
    "quote_cart",
    "quote_top_up",
    "mask_card_number",
    "validate_customer",
    "validate_method",
    # State machine
    "Stage",
    "TRANSITIONS",
    "IllegalTransition",
    "Attempt",
    # Orchestrator
    "CheckoutOrchestrator",
)
