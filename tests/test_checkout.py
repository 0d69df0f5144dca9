from decimal import Decimal

from settle._errors import CheckoutErrorKind, ErrorCategory
from settle.cart import Cart
from settle.checkout import CardDetails, CheckoutOrchestrator, Customer, Stage, UpiDetails
from settle.config import Settings
from settle.gateway import (
    DECLINED_MESSAGE,
    DuplicatePayment,
    PaymentMethod,
    ScriptedGateway,
    Step,
)
from settle.persistence import Keys
from settle.settlement import SettlementState
from settle.wallet import TransactionKind, Wallet
from tests.helpers import FailingStore, err, ok, run


def card() -> CardDetails:
    return CardDetails("4111 1111 1111 1234", "12/29", "123", "Asha Rao")


def test_quote_and_can_proceed(
    orchestrator: CheckoutOrchestrator, full_cart: Cart, customer: Customer, upi: UpiDetails
) -> None:
    assert orchestrator.quote(full_cart).grand_total == Decimal("677")
    assert orchestrator.can_proceed(full_cart, PaymentMethod.UPI, upi, customer)
    assert not orchestrator.can_proceed(full_cart, PaymentMethod.UPI, UpiDetails(""), customer)
    assert not orchestrator.can_proceed(Cart(), PaymentMethod.UPI, upi, customer)


def test_card_checkout_commits(
    orchestrator: CheckoutOrchestrator,
    gateway: ScriptedGateway,
    full_cart: Cart,
    wallet: Wallet,
    store: FailingStore,
    customer: Customer,
) -> None:
    done = ok(run(orchestrator.checkout(full_cart, PaymentMethod.CARD, card(), customer)))

    assert done.quote.grand_total == Decimal("677")
    assert done.transaction_id.startswith("TXN")
    assert [item["item_id"] for item in done.items] == ["52795", "52855"]

    assert full_cart.is_empty
    assert ok(store.get(Keys.CART_ITEMS)) is None
    assert wallet.balance == Decimal("1500")
    assert done.wallet_balance == Decimal("1500")
    assert wallet.history == ()

    last = ok(orchestrator.last_order())
    assert last.order_id == done.order_id
    assert last.status == "completed"
    assert last.total == Decimal("677")
    assert last.payment_method is PaymentMethod.CARD
    assert last.transaction_id == done.transaction_id

    record = ok(orchestrator.ledger.get(done.order_id))
    assert record.state is SettlementState.COMMITTED

    assert gateway.orders[0].amount == Decimal("677")
    assert gateway.calls[Step.VERIFY] == 1
    assert not orchestrator.is_processing
    assert orchestrator.last_attempt.trail == [
        Stage.IDLE, Stage.ORDER_CREATED, Stage.PAID, Stage.VERIFIED, Stage.COMMITTED,
    ]


def test_card_number_never_reaches_gateway_or_storage(
    orchestrator: CheckoutOrchestrator,
    gateway: ScriptedGateway,
    full_cart: Cart,
    store: FailingStore,
    customer: Customer,
) -> None:
    ok(run(orchestrator.checkout(full_cart, PaymentMethod.CARD, card(), customer)))

    _, method, details = gateway.payments[0]
    assert method is PaymentMethod.CARD
    assert details["card_number"] == "**** **** **** 1234"
    assert "cvv" not in details

    for key in store.keys():
        assert "4111" not in str(ok(store.get(key)))


def test_last_order_is_replaced(
    orchestrator: CheckoutOrchestrator,
    full_cart: Cart,
    biryani,
    customer: Customer,
    upi: UpiDetails,
) -> None:
    first = ok(run(orchestrator.checkout(full_cart, PaymentMethod.UPI, upi, customer)))
    full_cart.add(biryani, 1)
    second = ok(run(orchestrator.checkout(full_cart, PaymentMethod.UPI, upi, customer)))

    assert first.order_id != second.order_id
    assert ok(orchestrator.last_order()).order_id == second.order_id


def test_decline_is_terminal_and_changes_nothing(
    orchestrator: CheckoutOrchestrator,
    gateway: ScriptedGateway,
    full_cart: Cart,
    wallet: Wallet,
    customer: Customer,
    upi: UpiDetails,
) -> None:
    gateway.approve = False

    e = err(run(orchestrator.checkout(full_cart, PaymentMethod.UPI, upi, customer)), CheckoutErrorKind.PAYMENT_DECLINED)

    assert e.message == DECLINED_MESSAGE
    assert e.category is ErrorCategory.BUSINESS
    assert not e.retriable
    assert e.order_id == gateway.orders[0].order_id
    assert full_cart.total() == Decimal("597")
    assert wallet.balance == Decimal("1500")
    assert gateway.calls[Step.PAY] == 1
    assert gateway.calls[Step.VERIFY] == 0
    assert ok(orchestrator.ledger.pending()) == []
    assert ok(orchestrator.last_order()) is None
    assert orchestrator.last_attempt.stage is Stage.FAILED


def test_empty_cart_fails_before_gateway(
    orchestrator: CheckoutOrchestrator, gateway: ScriptedGateway, customer: Customer, upi: UpiDetails
) -> None:
    err(run(orchestrator.checkout(Cart(), PaymentMethod.UPI, upi, customer)), CheckoutErrorKind.EMPTY_CART)

    assert sum(gateway.calls.values()) == 0


def test_missing_customer_fails_before_gateway(
    orchestrator: CheckoutOrchestrator, gateway: ScriptedGateway, full_cart: Cart, upi: UpiDetails
) -> None:
    err(
        run(orchestrator.checkout(full_cart, PaymentMethod.UPI, upi, Customer("Asha", "", "MG Road"))),
        CheckoutErrorKind.MISSING_CUSTOMER_DETAILS,
    )

    assert sum(gateway.calls.values()) == 0
    assert full_cart.total() == Decimal("597")


def test_wallet_short_of_total(
    gateway: ScriptedGateway,
    store: FailingStore,
    settings: Settings,
    full_cart: Cart,
    customer: Customer,
) -> None:
    wallet = Wallet(store, balance=Decimal("500"))
    orchestrator = CheckoutOrchestrator(wallet, gateway, store, settings)

    assert not orchestrator.can_proceed(full_cart, PaymentMethod.WALLET, None, customer)
    err(run(orchestrator.checkout(full_cart, PaymentMethod.WALLET, None, customer)), CheckoutErrorKind.INSUFFICIENT_FUNDS)

    assert sum(gateway.calls.values()) == 0
    assert wallet.balance == Decimal("500")
    assert full_cart.total() == Decimal("597")


def test_wallet_checkout_debits_locally(
    orchestrator: CheckoutOrchestrator,
    gateway: ScriptedGateway,
    full_cart: Cart,
    wallet: Wallet,
    customer: Customer,
) -> None:
    done = ok(run(orchestrator.checkout(full_cart, PaymentMethod.WALLET, None, customer)))

    assert wallet.balance == Decimal("823")
    assert done.wallet_balance == Decimal("823")
    assert wallet.history[0].kind is TransactionKind.DEBIT
    assert wallet.history[0].amount == Decimal("677")
    assert wallet.history[0].order_id == done.order_id
    assert done.transaction_id.startswith("WLT")
    assert full_cart.is_empty
    assert ok(orchestrator.last_order()).payment_method is PaymentMethod.WALLET
    assert sum(gateway.calls.values()) == 0


def test_gateway_unavailable_at_create_is_retriable(
    orchestrator: CheckoutOrchestrator,
    gateway: ScriptedGateway,
    full_cart: Cart,
    wallet: Wallet,
    customer: Customer,
    upi: UpiDetails,
) -> None:
    gateway.unavailable_at = Step.CREATE_ORDER

    e = err(run(orchestrator.checkout(full_cart, PaymentMethod.UPI, upi, customer)), CheckoutErrorKind.GATEWAY_UNAVAILABLE)

    assert e.retriable
    assert e.category is ErrorCategory.TRANSPORT
    assert gateway.calls[Step.PAY] == 0
    assert full_cart.total() == Decimal("597")
    assert wallet.balance == Decimal("1500")
    assert not orchestrator.is_processing

    gateway.unavailable_at = None
    ok(run(orchestrator.checkout(full_cart, PaymentMethod.UPI, upi, customer)))
    assert full_cart.is_empty


def test_gateway_unavailable_at_pay(
    orchestrator: CheckoutOrchestrator,
    gateway: ScriptedGateway,
    full_cart: Cart,
    customer: Customer,
    upi: UpiDetails,
) -> None:
    gateway.unavailable_at = Step.PAY

    e = err(run(orchestrator.checkout(full_cart, PaymentMethod.UPI, upi, customer)), CheckoutErrorKind.GATEWAY_UNAVAILABLE)

    assert e.order_id == gateway.orders[0].order_id
    assert ok(orchestrator.ledger.pending()) == []
    assert full_cart.total() == Decimal("597")


def test_verify_unavailable_leaves_settlement_pending(
    orchestrator: CheckoutOrchestrator,
    gateway: ScriptedGateway,
    full_cart: Cart,
    customer: Customer,
    upi: UpiDetails,
) -> None:
    gateway.unavailable_at = Step.VERIFY

    e = err(run(orchestrator.checkout(full_cart, PaymentMethod.UPI, upi, customer)), CheckoutErrorKind.SETTLEMENT_PENDING)

    assert not e.retriable
    assert e.category is ErrorCategory.VERIFICATION
    pending = ok(orchestrator.ledger.pending())
    assert [r.order_id for r in pending] == [e.order_id]
    assert pending[0].transaction_id.startswith("TXN")
    assert full_cart.total() == Decimal("597")
    assert ok(orchestrator.last_order()) is None
    assert orchestrator.last_attempt.stage is Stage.PENDING


def test_paid_but_unverified_checkout_is_never_charged_again(
    orchestrator: CheckoutOrchestrator,
    gateway: ScriptedGateway,
    full_cart: Cart,
    biryani,
    customer: Customer,
    upi: UpiDetails,
) -> None:
    gateway.unavailable_at = Step.VERIFY
    first = err(run(orchestrator.checkout(full_cart, PaymentMethod.UPI, upi, customer)))

    gateway.unavailable_at = None
    refused = err(
        run(orchestrator.checkout(full_cart, PaymentMethod.UPI, upi, customer)),
        CheckoutErrorKind.SETTLEMENT_PENDING,
    )
    assert refused.order_id == first.order_id
    err(run(orchestrator.top_up(Decimal("100"), PaymentMethod.UPI, upi)), CheckoutErrorKind.SETTLEMENT_PENDING)
    assert gateway.calls[Step.CREATE_ORDER] == 1
    assert len(gateway.payments) == 1

    report = ok(run(orchestrator.recover(full_cart)))

    assert report.committed == (first.order_id,)
    assert full_cart.is_empty
    assert ok(orchestrator.last_order()).order_id == first.order_id
    assert len(gateway.payments) == 1

    full_cart.add(biryani, 1)
    second = ok(run(orchestrator.checkout(full_cart, PaymentMethod.UPI, upi, customer)))

    assert len(gateway.payments) == 2
    assert ok(orchestrator.last_order()).order_id == second.order_id
    assert ok(run(orchestrator.recover(full_cart))).committed == ()
    assert ok(orchestrator.last_order()).order_id == second.order_id


def test_verification_mismatch_commits_nothing(
    orchestrator: CheckoutOrchestrator,
    gateway: ScriptedGateway,
    full_cart: Cart,
    wallet: Wallet,
    customer: Customer,
    upi: UpiDetails,
    caplog,
) -> None:
    gateway.verified = False

    e = err(run(orchestrator.checkout(full_cart, PaymentMethod.UPI, upi, customer)), CheckoutErrorKind.VERIFICATION_FAILED)

    assert e.category is ErrorCategory.VERIFICATION
    assert full_cart.total() == Decimal("597")
    assert wallet.balance == Decimal("1500")
    assert ok(orchestrator.last_order()) is None
    record = ok(orchestrator.ledger.get(e.order_id))
    assert record.state is SettlementState.FAILED
    assert "anomaly" in caplog.text


def test_duplicate_payment_is_already_paid(
    store: FailingStore,
    wallet: Wallet,
    settings: Settings,
    full_cart: Cart,
    customer: Customer,
    upi: UpiDetails,
) -> None:
    class Replaying(ScriptedGateway):
        async def pay(self, order, method, details):
            raise DuplicatePayment(order.order_id)

    orchestrator = CheckoutOrchestrator(wallet, Replaying(), store, settings)

    e = err(run(orchestrator.checkout(full_cart, PaymentMethod.UPI, upi, customer)), CheckoutErrorKind.ALREADY_PAID)

    assert e.category is ErrorCategory.BUSINESS
    assert full_cart.total() == Decimal("597")


def test_storage_failure_at_commit_keeps_settlement_pending(
    orchestrator: CheckoutOrchestrator,
    full_cart: Cart,
    store: FailingStore,
    customer: Customer,
    upi: UpiDetails,
) -> None:
    store.fail_keys = {Keys.CART_ITEMS}

    e = err(run(orchestrator.checkout(full_cart, PaymentMethod.UPI, upi, customer)), CheckoutErrorKind.PERSISTENCE_FAILED)

    assert [r.order_id for r in ok(orchestrator.ledger.pending())] == [e.order_id]
    assert full_cart.total() == Decimal("597")


def test_wallet_checkout_commit_failure_is_finished_by_recovery(
    orchestrator: CheckoutOrchestrator,
    gateway: ScriptedGateway,
    full_cart: Cart,
    wallet: Wallet,
    store: FailingStore,
    customer: Customer,
) -> None:
    store.fail_keys = {Keys.CART_ITEMS}

    e = err(run(orchestrator.checkout(full_cart, PaymentMethod.WALLET, None, customer)), CheckoutErrorKind.PERSISTENCE_FAILED)

    assert wallet.balance == Decimal("823")
    assert full_cart.total() == Decimal("597")
    record = ok(orchestrator.ledger.get(e.order_id))
    assert record.is_pending
    assert record.method is PaymentMethod.WALLET
    assert orchestrator.last_attempt.stage is Stage.PENDING

    err(run(orchestrator.checkout(full_cart, PaymentMethod.WALLET, None, customer)), CheckoutErrorKind.SETTLEMENT_PENDING)
    assert wallet.balance == Decimal("823")

    store.fail_keys = set()
    report = ok(run(orchestrator.recover(full_cart)))

    assert report.committed == (e.order_id,)
    assert full_cart.is_empty
    assert wallet.balance == Decimal("823")
    assert len(wallet.history) == 1
    last = ok(orchestrator.last_order())
    assert last.order_id == e.order_id
    assert last.total == Decimal("677")
    assert sum(gateway.calls.values()) == 0


def test_wallet_debit_failure_changes_nothing(
    orchestrator: CheckoutOrchestrator,
    full_cart: Cart,
    wallet: Wallet,
    store: FailingStore,
    customer: Customer,
) -> None:
    store.fail_keys = {Keys.USER_BALANCE}

    e = err(run(orchestrator.checkout(full_cart, PaymentMethod.WALLET, None, customer)), CheckoutErrorKind.PERSISTENCE_FAILED)

    assert wallet.balance == Decimal("1500")
    assert full_cart.total() == Decimal("597")
    assert ok(orchestrator.ledger.get(e.order_id)).is_failed
    assert ok(orchestrator.ledger.pending()) == []
    assert orchestrator.last_attempt.stage is Stage.FAILED
