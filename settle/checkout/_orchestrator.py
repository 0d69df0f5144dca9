"""
CheckoutOrchestrator — one checkout or top-up: create → pay → verify → commit.

Usage:

    orchestrator = CheckoutOrchestrator(wallet, gateway, store, settings)

    match await orchestrator.checkout(cart, PaymentMethod.UPI, UpiDetails("me@upi"), customer):
        case Ok(confirmation):
            print(confirmation.order_id)
        case Error(e) if e.retriable:
            ...  # start a new attempt
        case Error(e) if e.kind is CheckoutErrorKind.SETTLEMENT_PENDING:
            await orchestrator.recover(cart)
        case Error(e):
            print(e.message)

Side effects (cart cleared, wallet debited/credited, last order replaced)
happen only after pay() and verify() agree. A successful pay() is written to
the settlement ledger first, so a crash before commit is recovered with
recover() by re-verifying the stored transaction id, never by paying again.
While any record is pending, checkout() and top_up() refuse to start.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, UTC
from typing import Any
from uuid import uuid4

from combinators import lift as L
from kungfu import Result, Ok, Error

from settle._errors import CheckoutError, CheckoutErrorKind, Errors
from settle._types import Money
from settle.cart import Cart
from settle.checkout._attempt import Attempt, Stage
from settle.checkout._pricing import quote_cart, quote_top_up
from settle.checkout._types import (
    CheckoutQuote,
    Customer,
    LastOrder,
    MethodDetails,
    OrderConfirmation,
    RecoveryReport,
    TopUpConfirmation,
    TopUpQuote,
)
from settle.checkout._validate import validate_customer, validate_method
from settle.config import Settings
from settle.gateway import (
    DuplicatePayment,
    Order,
    OrderStatus,
    PaymentGateway,
    PaymentMethod,
    new_order_id,
)
from settle.persistence import Keys, Persistence
from settle.settlement import SettlementLedger, SettlementPurpose, SettlementRecord
from settle.wallet import Wallet

log = logging.getLogger(__name__)

WALLET_TRANSACTION_PREFIX = "WLT"


def _now() -> datetime:
    return datetime.now(UTC)


def _gateway_error(step: str, order_id: str | None) -> Callable[[Exception], CheckoutError]:
    """Map an exception raised by a gateway coroutine to a CheckoutError."""

    def convert(e: Exception) -> CheckoutError:
        if isinstance(e, DuplicatePayment):
            return Errors.already_paid(e.order_id)
        return Errors.gateway_unavailable(f"Gateway unavailable during {step}: {e}", order_id)

    return convert


# ═══════════════════════════════════════════════════════════════════════════════
# Orchestrator
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutOrchestrator:
    def __init__(
        self,
        wallet: Wallet,
        gateway: PaymentGateway,
        store: Persistence,
        settings: Settings | None = None,
        ledger: SettlementLedger | None = None,
    ) -> None:
        self._wallet = wallet
        self._gateway = gateway
        self._store = store
        self._settings = settings or Settings()
        self._ledger = ledger or SettlementLedger(store)
        self._in_flight = 0
        self._last_attempt: Attempt | None = None

    @property
    def ledger(self) -> SettlementLedger:
        return self._ledger

    @property
    def is_processing(self) -> bool:
        """True while an attempt is in flight. Not enforced."""
        return self._in_flight > 0

    @property
    def last_attempt(self) -> Attempt | None:
        """The most recent checkout or top-up attempt, with its stage trail."""
        return self._last_attempt

    # ───────────────────────────────────────────────────────────────────────────
    # Queries — No Side Effects
    # ───────────────────────────────────────────────────────────────────────────

    def quote(self, cart: Cart) -> CheckoutQuote:
        return quote_cart(cart.total(), self._settings)

    def quote_top_up(self, amount: Money | int | str) -> Result[TopUpQuote, CheckoutError]:
        return quote_top_up(amount, self._settings)

    def validate(
        self,
        cart: Cart,
        method: PaymentMethod,
        details: MethodDetails,
        customer: Customer | None,
    ) -> Result[dict[str, str], CheckoutError]:
        """Every pre-gateway check of checkout(); yields the gateway payload."""
        if cart.is_empty:
            return Error(Errors.empty_cart())

        match validate_customer(customer):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        return validate_method(
            method,
            details,
            total=self.quote(cart).grand_total,
            wallet_balance=self._wallet.balance,
        )

    def can_proceed(
        self,
        cart: Cart,
        method: PaymentMethod,
        details: MethodDetails,
        customer: Customer | None,
    ) -> bool:
        """Whether the pay button should be enabled."""
        match self.validate(cart, method, details, customer):
            case Ok(_):
                return True
            case Error(_):
                return False

    def last_order(self) -> Result[LastOrder | None, CheckoutError]:
        match self._store.get(Keys.LAST_ORDER):
            case Error(e):
                return Error(Errors.persistence_failed(f"Could not load last order: {e.message}"))
            case Ok(None):
                return Ok(None)
            case Ok(record):
                return Ok(LastOrder.from_record(record))

    def _refuse_if_pending(self) -> Result[None, CheckoutError]:
        """A new attempt may not start while a paid one awaits recover()."""
        match self._ledger.pending():
            case Error(e):
                return Error(e)
            case Ok([]):
                return Ok(None)
            case Ok([oldest, *_]):
                log.warning("new attempt refused: order %s awaits recover()", oldest.order_id)
                return Error(Errors.settlement_pending(oldest.order_id))

    def _begin(self, purpose: SettlementPurpose) -> Attempt:
        attempt = Attempt(purpose)
        self._last_attempt = attempt
        self._in_flight += 1
        return attempt

    def _end(self, attempt: Attempt) -> None:
        self._in_flight -= 1
        log.debug("%s %s finished: %s", attempt.purpose.value, attempt.order_id, attempt.describe())

    # ───────────────────────────────────────────────────────────────────────────
    # Checkout
    # ───────────────────────────────────────────────────────────────────────────

    async def checkout(
        self,
        cart: Cart,
        method: PaymentMethod,
        details: MethodDetails,
        customer: Customer | None,
    ) -> Result[OrderConfirmation, CheckoutError]:
        match self.validate(cart, method, details, customer):
            case Error(e):
                return Error(e)
            case Ok(payload):
                pass

        match self._refuse_if_pending():
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        quote = self.quote(cart)
        items = tuple(line.to_record() for line in cart)

        attempt = self._begin(SettlementPurpose.CHECKOUT)
        try:
            if method is PaymentMethod.WALLET:
                settled = self._settle_from_wallet(attempt, quote, items)
            else:
                metadata: dict[str, Any] = {
                    "items": list(items),
                    "purpose": SettlementPurpose.CHECKOUT.value,
                    "quote": quote.to_record(),
                    "customer": {"name": customer.name, "phone": customer.phone} if customer else {},
                }
                settled = await self._settle(attempt, quote.grand_total, method, payload, metadata)

            match settled:
                case Error(e):
                    return Error(e)
                case Ok(record):
                    pass

            match self._commit_checkout(record, cart):
                case Error(e):
                    attempt.advance(Stage.PENDING)
                    return Error(e)
                case Ok(_):
                    attempt.advance(Stage.COMMITTED)

            log.info(
                "checkout %s committed: %s %s via %s",
                record.order_id, quote.grand_total, self._settings.currency, method.value,
            )
            return Ok(OrderConfirmation(
                order_id=record.order_id,
                transaction_id=record.transaction_id,
                quote=quote,
                payment_method=method,
                items=items,
                wallet_balance=self._wallet.balance,
                completed_at=_now(),
            ))
        finally:
            self._end(attempt)

    def _settle_from_wallet(
        self,
        attempt: Attempt,
        quote: CheckoutQuote,
        items: tuple[dict[str, Any], ...],
    ) -> Result[SettlementRecord, CheckoutError]:
        """
        Local settlement: the wallet debit is authoritative, no gateway pay/verify.

        The record is pending before the debit, so a debit whose commit does
        not finish is completed by recover() rather than charged again.
        """
        order = Order(
            order_id=new_order_id(),
            amount=quote.grand_total,
            currency=self._settings.currency,
            line_items=items,
            status=OrderStatus.PAID,
            metadata={"purpose": SettlementPurpose.CHECKOUT.value, "quote": quote.to_record()},
        )
        record = SettlementRecord(
            order=order,
            purpose=SettlementPurpose.CHECKOUT,
            method=PaymentMethod.WALLET,
            transaction_id=f"{WALLET_TRANSACTION_PREFIX}{uuid4().hex[:12].upper()}",
        )
        attempt.order_id = order.order_id

        match self._ledger.set_pending(record):
            case Error(e):
                attempt.advance(Stage.FAILED)
                return Error(e)
            case Ok(_):
                attempt.advance(Stage.ORDER_CREATED)

        match self._wallet.debit(
            order.amount,
            f"Order payment - {order.order_id}",
            order_id=order.order_id,
            gateway_transaction_id=record.transaction_id,
        ):
            case Error(e):
                attempt.advance(Stage.FAILED)
                self._mark_failed(order.order_id, e.message)
                return Error(e.with_order(order.order_id))
            case Ok(_):
                attempt.transaction_id = record.transaction_id
                attempt.advance(Stage.PAID)
                attempt.advance(Stage.VERIFIED)

        return Ok(record)

    def _commit_checkout(self, record: SettlementRecord, cart: Cart) -> Result[None, CheckoutError]:
        match cart.clear():
            case Error(e):
                log.error("checkout %s paid but cart not cleared: %s", record.order_id, e.message)
                return Error(e.with_order(record.order_id))
            case Ok(_):
                pass

        last = LastOrder(
            order_id=record.order_id,
            items=record.order.line_items,
            total=record.order.amount,
            payment_method=record.method,
            transaction_id=record.transaction_id,
        )
        match self._store.set(Keys.LAST_ORDER, last.to_record()):
            case Error(e):
                log.error("checkout %s paid but last order not saved: %s", record.order_id, e.message)
                return Error(Errors.persistence_failed(
                    f"Could not save last order: {e.message}", record.order_id,
                ))
            case Ok(_):
                pass

        return self._mark_committed(record.order_id)

    # ───────────────────────────────────────────────────────────────────────────
    # Top-up
    # ───────────────────────────────────────────────────────────────────────────

    async def top_up(
        self,
        amount: Money | int | str,
        method: PaymentMethod,
        details: MethodDetails,
    ) -> Result[TopUpConfirmation, CheckoutError]:
        """Charge amount + processing fee through the gateway, credit amount."""
        if method is PaymentMethod.WALLET:
            return Error(Errors.unsupported_method(method.display_name, "adding money"))

        match self.quote_top_up(amount):
            case Error(e):
                return Error(e)
            case Ok(quote):
                pass

        match validate_method(method, details, total=quote.total, wallet_balance=self._wallet.balance):
            case Error(e):
                return Error(e)
            case Ok(payload):
                pass

        match self._refuse_if_pending():
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        attempt = self._begin(SettlementPurpose.TOP_UP)
        try:
            metadata: dict[str, Any] = {
                "purpose": SettlementPurpose.TOP_UP.value,
                "credit_amount": str(quote.amount),
                "processing_fee": str(quote.processing_fee),
            }
            match await self._settle(
                attempt, quote.total, method, payload, metadata, credit_amount=quote.amount,
            ):
                case Error(e):
                    return Error(e)
                case Ok(record):
                    pass

            match self._commit_top_up(record):
                case Error(e):
                    attempt.advance(Stage.PENDING)
                    return Error(e)
                case Ok(_):
                    attempt.advance(Stage.COMMITTED)

            log.info("top-up %s committed: +%s via %s", record.order_id, quote.amount, method.value)
            return Ok(TopUpConfirmation(
                order_id=record.order_id,
                transaction_id=record.transaction_id,
                quote=quote,
                balance=self._wallet.balance,
                completed_at=_now(),
            ))
        finally:
            self._end(attempt)

    def _commit_top_up(self, record: SettlementRecord) -> Result[None, CheckoutError]:
        if self._wallet.find(order_id=record.order_id) is None:
            if record.credit_amount is None:
                return Error(Errors.persistence_failed(
                    f"Top-up record {record.order_id} has no credit amount", record.order_id,
                ))
            match self._wallet.credit(
                record.credit_amount,
                f"Money Added - {record.method.display_name}",
                gateway_transaction_id=record.transaction_id,
                order_id=record.order_id,
            ):
                case Error(e):
                    log.error("top-up %s verified but not credited: %s", record.order_id, e.message)
                    return Error(e.with_order(record.order_id))
                case Ok(_):
                    pass
        return self._mark_committed(record.order_id)

    # ───────────────────────────────────────────────────────────────────────────
    # Shared Pipeline: create_order → pay → ledger → verify
    # ───────────────────────────────────────────────────────────────────────────

    async def _call[T](
        self,
        step: str,
        fn: Callable[[], Awaitable[T]],
        order_id: str | None = None,
    ) -> Result[T, CheckoutError]:
        return await L.catching_async(fn, on_error=_gateway_error(step, order_id))

    async def _settle(
        self,
        attempt: Attempt,
        amount: Money,
        method: PaymentMethod,
        payload: dict[str, str],
        metadata: dict[str, Any],
        *,
        credit_amount: Money | None = None,
    ) -> Result[SettlementRecord, CheckoutError]:
        """Run the gateway steps; Ok means paid, verified and recorded as pending."""
        currency = self._settings.currency

        match await self._call(
            "create_order",
            lambda: self._gateway.create_order(amount, currency, metadata),
        ):
            case Error(e):
                attempt.advance(Stage.FAILED)
                log.warning("%s: order creation failed: %s", attempt.purpose.value, e.message)
                return Error(e)
            case Ok(order):
                attempt.order_id = order.order_id
                attempt.advance(Stage.ORDER_CREATED)

        if order.amount != amount:
            attempt.advance(Stage.VERIFICATION_FAILED)
            log.warning(
                "anomaly: order %s amount %s does not match quoted %s",
                order.order_id, order.amount, amount,
            )
            return Error(Errors.verification_failed(
                f"Order amount {order.amount} does not match {amount}", order.order_id,
            ))

        match await self._call(
            "pay",
            lambda: self._gateway.pay(order, method, payload),
            order.order_id,
        ):
            case Error(e):
                attempt.advance(Stage.FAILED)
                log.warning("order %s: pay failed: %s", order.order_id, e.message)
                return Error(e)
            case Ok(payment) if not payment.success or payment.transaction_id is None:
                attempt.advance(Stage.FAILED)
                log.warning("order %s declined: %s", order.order_id, payment.message)
                return Error(Errors.declined(payment.message, order.order_id))
            case Ok(payment):
                attempt.transaction_id = payment.transaction_id
                attempt.advance(Stage.PAID)

        record = SettlementRecord(
            order=order.with_status(OrderStatus.PAID),
            purpose=attempt.purpose,
            method=method,
            transaction_id=payment.transaction_id,
            credit_amount=credit_amount,
        )
        match self._ledger.set_pending(record):
            case Error(e):
                log.error(
                    "order %s paid (%s) but not recorded as pending: %s",
                    order.order_id, payment.transaction_id, e.message,
                )
            case Ok(_):
                pass

        match await self._verify(record):
            case Error(e) if e.kind is CheckoutErrorKind.SETTLEMENT_PENDING:
                attempt.advance(Stage.PENDING)
                return Error(e)
            case Error(e):
                attempt.advance(Stage.VERIFICATION_FAILED)
                return Error(e)
            case Ok(_):
                attempt.advance(Stage.VERIFIED)

        return Ok(record)

    async def _verify(self, record: SettlementRecord) -> Result[None, CheckoutError]:
        """
        Confirm a paid record with the gateway.

        Transport failure leaves the record pending (SETTLEMENT_PENDING, not
        retriable: the money has moved); a disagreement marks it failed.
        """
        match await self._call(
            "verify",
            lambda: self._gateway.verify(record.transaction_id),
            record.order_id,
        ):
            case Error(e):
                log.warning(
                    "order %s: verify unavailable, left pending (%s)",
                    record.order_id, record.transaction_id,
                )
                return Error(Errors.settlement_pending(
                    record.order_id,
                    f"{e.message}. Payment {record.transaction_id} is awaiting confirmation; "
                    "run recover() before paying again.",
                ))
            case Ok(verification):
                pass

        if verification.is_settled and verification.transaction_id == record.transaction_id:
            return Ok(None)

        reason = (
            f"Transaction {record.transaction_id} not confirmed "
            f"(status={verification.status}, verified={verification.verified})"
        )
        log.warning("anomaly: order %s: %s", record.order_id, reason)
        self._mark_failed(record.order_id, reason)
        return Error(Errors.verification_failed(reason, record.order_id))

    def _confirm(self, record: SettlementRecord) -> Result[None, CheckoutError] | None:
        """Wallet records are confirmed by their debit; None means ask the gateway."""
        if record.method is not PaymentMethod.WALLET:
            return None
        if self._wallet.find(order_id=record.order_id) is not None:
            return Ok(None)
        reason = f"No wallet debit found for order {record.order_id}"
        log.warning("order %s: %s", record.order_id, reason)
        self._mark_failed(record.order_id, reason)
        return Error(Errors.verification_failed(reason, record.order_id))

    def _mark_committed(self, order_id: str) -> Result[None, CheckoutError]:
        match self._ledger.set_committed(order_id):
            case Error(e):
                # Side effects are applied; recovery will find them and not repeat them.
                log.error("order %s committed but ledger not updated: %s", order_id, e.message)
            case Ok(_):
                pass
        return Ok(None)

    def _mark_failed(self, order_id: str, reason: str) -> None:
        match self._ledger.set_failed(order_id, reason):
            case Error(e):
                log.error("order %s: could not mark failed: %s", order_id, e.message)
            case Ok(_):
                pass

    # ───────────────────────────────────────────────────────────────────────────
    # Recovery
    # ───────────────────────────────────────────────────────────────────────────

    async def recover(self, cart: Cart) -> Result[RecoveryReport, CheckoutError]:
        """
        Re-verify every pending settlement and commit or fail it.

        Never calls pay(). Safe to run repeatedly: a top-up already credited
        or a checkout already recorded as the last order is not applied again.
        Wallet checkouts are confirmed by their debit instead of the gateway.
        """
        match self._ledger.pending():
            case Error(e):
                return Error(e)
            case Ok(pending):
                pass

        committed: list[str] = []
        failed: list[str] = []
        still_pending: list[str] = []

        self._in_flight += 1
        try:
            for record in pending:
                confirmed = self._confirm(record)
                if confirmed is None:
                    confirmed = await self._verify(record)

                match confirmed:
                    case Error(e) if e.kind is CheckoutErrorKind.SETTLEMENT_PENDING:
                        still_pending.append(record.order_id)
                        continue
                    case Error(_):
                        failed.append(record.order_id)
                        continue
                    case Ok(_):
                        pass

                match record.purpose:
                    case SettlementPurpose.TOP_UP:
                        outcome = self._commit_top_up(record)
                    case SettlementPurpose.CHECKOUT:
                        outcome = self._recover_checkout(record, cart)

                match outcome:
                    case Error(_):
                        still_pending.append(record.order_id)
                    case Ok(_):
                        log.info("recovered %s %s", record.purpose.value, record.order_id)
                        committed.append(record.order_id)
        finally:
            self._in_flight -= 1

        return Ok(RecoveryReport(tuple(committed), tuple(failed), tuple(still_pending)))

    def _recover_checkout(self, record: SettlementRecord, cart: Cart) -> Result[None, CheckoutError]:
        match self.last_order():
            case Ok(last) if last is not None and last.order_id == record.order_id:
                return self._mark_committed(record.order_id)
            case _:
                return self._commit_checkout(record, cart)


__all__ = ("WALLET_TRANSACTION_PREFIX", "CheckoutOrchestrator")
