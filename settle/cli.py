"""
Interactive CLI — a terminal storefront over one Session.

┌─────────────────────────────────────────────────────────────────────────┐
│  COMMAND      TOUCHES                              GATEWAY CALLS        │
├─────────────────────────────────────────────────────────────────────────┤
│  add/qty/rm   Cart (write-through)                 none                 │
│  quote        Cart, pricing                        none                 │
│  checkout     Cart, Wallet, ledger, last order     create, pay, verify  │
│  topup        Wallet, ledger                       create, pay, verify  │
│  recover      Pending ledger records               verify only          │
└─────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from kungfu import Ok, Error

from settle._errors import CheckoutErrorKind
from settle._session import Session
from settle.catalog import StaticCatalog, default_catalog
from settle.checkout import (
    CardDetails,
    Customer,
    MethodDetails,
    NetBankingDetails,
    UpiDetails,
)
from settle.config import Settings, configure_logging
from settle.gateway import PaymentMethod


# ═══════════════════════════════════════════════════════════════════════════════
# Help
# ═══════════════════════════════════════════════════════════════════════════════

HELP_TEXT = """
┌─────────────────────────────────────────────────────────────────────────────┐
│                              COMMANDS                                        │
├─────────────────────────────────────────────────────────────────────────────┤
│  menu [filter]              List items (category or name filter)            │
│  add <item> [qty]           Add item to cart                                │
│  qty <item> <qty>           Set quantity (0 removes)                        │
│  rm <item>                  Remove item                                     │
│  cart                       Show cart and totals                            │
│  clear                      Empty the cart                                  │
│  checkout <method>          Pay for the cart                                │
│  topup <amount> <method>    Add money to the wallet                         │
├─────────────────────────────────────────────────────────────────────────────┤
│  wallet                     Balance and recent transactions                 │
│  last                       Last completed order                            │
│  recover                    Re-verify interrupted payments                  │
│  reset                      Empty cart, reset wallet, forget last order     │
│  help                       Show this help                                  │
│  quit                       Exit                                            │
└─────────────────────────────────────────────────────────────────────────────┘

Methods: wallet, card, upi, netbanking

Examples:
  add 52795 2          → Two Chicken Handi
  checkout upi         → Prompts for UPI ID and delivery details
  topup 500 card       → Charges 505.00, credits 500
"""


def print_help() -> None:
    print(HELP_TEXT)


# ═══════════════════════════════════════════════════════════════════════════════
# Display
# ═══════════════════════════════════════════════════════════════════════════════

def print_menu(catalog: StaticCatalog, filter: str | None = None) -> None:
    items = catalog.list_purchasable_items(filter)
    if not items:
        print(f"  Nothing matches {filter!r}. Categories: {', '.join(catalog.categories)}")
        return
    print("\n┌────────────────────────────────────────────────────────┐")
    print("│                        MENU                             │")
    print("├────────────────────────────────────────────────────────┤")
    for item in items:
        print(f"│  [{item.id:5}] {item.name:36} {item.price:>8} │")
    print("└────────────────────────────────────────────────────────┘")


def print_cart(session: Session) -> None:
    cart = session.cart
    if cart.is_empty:
        print("\n  Cart is empty.")
        return
    quote = session.orchestrator.quote(cart)
    currency = session.settings.currency
    print("\n┌────────────────────────────────────────────────────────┐")
    print(f"│  CART ({cart.item_count()} items)".ljust(57) + "│")
    print("├────────────────────────────────────────────────────────┤")
    for line in cart:
        print(f"│  {line.quantity:>2}x {line.name:32} {line.line_total:>10}     │")
    print(f"""├────────────────────────────────────────────────────────┤
│  Subtotal:      {quote.subtotal:>12} {currency:3}                    │
│  Tax:           {quote.tax:>12} {currency:3}                    │
│  Delivery:      {quote.delivery_fee:>12} {currency:3}                    │
├────────────────────────────────────────────────────────┤
│  TOTAL:         {quote.grand_total:>12} {currency:3}                    │
└────────────────────────────────────────────────────────┘""")


def print_wallet(session: Session) -> None:
    wallet = session.wallet
    print(f"\n  Balance: {wallet.balance} {session.settings.currency}")
    if not wallet.history:
        print("  No transactions yet.")
        return
    for txn in wallet.history:
        print(f"    {txn.timestamp:%Y-%m-%d %H:%M}  {txn.signed_amount:>+11}  {txn.description}")


def print_last(session: Session) -> None:
    match session.orchestrator.last_order():
        case Ok(None):
            print("\n  No completed orders yet.")
        case Ok(last):
            print(f"\n  Order {last.order_id} ({last.status})")
            print(f"    Paid {last.total} via {last.payment_method.display_name}, txn {last.transaction_id}")
            for item in last.items:
                print(f"    • {item['quantity']}x {item['name']}")
        case Error(e):
            print(f"\n  ✗ {e}")


# ═══════════════════════════════════════════════════════════════════════════════
# Prompts
# ═══════════════════════════════════════════════════════════════════════════════

def parse_method(raw: str) -> PaymentMethod | None:
    try:
        return PaymentMethod(raw.lower())
    except ValueError:
        print(f"  ✗ Unknown method: {raw} (wallet, card, upi, netbanking)")
        return None


def prompt_details(method: PaymentMethod) -> MethodDetails:
    match method:
        case PaymentMethod.CARD:
            return CardDetails(
                number=input("  Card number: "),
                expiry=input("  Expiry (MM/YY): "),
                cvv=input("  CVV: "),
                holder=input("  Card holder: "),
            )
        case PaymentMethod.UPI:
            return UpiDetails(input("  UPI ID: "))
        case PaymentMethod.NETBANKING:
            return NetBankingDetails(input("  Bank: "))
        case PaymentMethod.WALLET:
            return None


def prompt_customer() -> Customer:
    return Customer(
        name=input("  Name: "),
        phone=input("  Phone: "),
        address=input("  Delivery address: "),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Commands
# ═══════════════════════════════════════════════════════════════════════════════

def cmd_add(session: Session, catalog: StaticCatalog, item_id: str, qty: int) -> None:
    item = catalog.find(item_id)
    if item is None:
        print(f"  ✗ No item {item_id}")
        return
    match session.cart.add(item, qty):
        case Ok(line):
            print(f"  ✓ {line.name} × {line.quantity}")
        case Error(e):
            print(f"  ✗ {e}")


async def cmd_checkout(session: Session, method: PaymentMethod) -> None:
    if session.cart.is_empty:
        print("  ✗ Your cart is empty. Please add items to cart first.")
        return
    print_cart(session)
    details = prompt_details(method)
    customer = prompt_customer()

    print("\n  Processing payment...")
    match await session.checkout(method, details, customer):
        case Ok(done):
            print(f"""
╔════════════════════════════════════════════════════════╗
║  ORDER {done.order_id:47} ║
╠════════════════════════════════════════════════════════╣
║  Paid:        {done.quote.grand_total:>12} via {done.payment_method.display_name:20} ║
║  Transaction: {done.transaction_id:40} ║
║  Wallet:      {done.wallet_balance:>12}                             ║
╚════════════════════════════════════════════════════════╝

  ✓ Payment successful! Your order is on its way.
""")
        case Error(e) if e.retriable:
            print(f"\n  ✗ {e.message}")
            print("  Nothing was committed. You can try again.")
        case Error(e) if e.kind is CheckoutErrorKind.SETTLEMENT_PENDING:
            print(f"\n  … {e.message}")
            print("  Run 'recover' to finish it. You will not be charged again.")
        case Error(e):
            order = f" (order {e.order_id})" if e.order_id else ""
            print(f"\n  ✗ Checkout failed: {e}{order}")


async def cmd_top_up(session: Session, raw_amount: str, method: PaymentMethod) -> None:
    try:
        amount = Decimal(raw_amount)
    except InvalidOperation:
        print(f"  ✗ Not an amount: {raw_amount}")
        return

    match session.orchestrator.quote_top_up(amount):
        case Error(e):
            print(f"  ✗ {e.message}")
            return
        case Ok(quote):
            print(f"  Amount {quote.amount} + fee {quote.processing_fee} = {quote.total}")

    details = prompt_details(method)
    print("\n  Processing payment...")
    match await session.top_up(amount, method, details):
        case Ok(done):
            print(f"  ✓ Added {done.quote.amount}. Balance: {done.balance} (txn {done.transaction_id})")
        case Error(e) if e.kind is CheckoutErrorKind.SETTLEMENT_PENDING:
            print(f"  … {e.message}")
            print("  Run 'recover' to finish it. You will not be charged again.")
        case Error(e):
            print(f"  ✗ Top-up failed: {e}")


async def cmd_recover(session: Session) -> None:
    match await session.recover():
        case Ok(report):
            if not (report.committed or report.failed or report.still_pending):
                print("  Nothing to recover.")
                return
            for order_id in report.committed:
                print(f"  ✓ {order_id} committed")
            for order_id in report.failed:
                print(f"  ✗ {order_id} could not be verified")
            for order_id in report.still_pending:
                print(f"  … {order_id} still pending")
        case Error(e):
            print(f"  ✗ {e}")


# ═══════════════════════════════════════════════════════════════════════════════
# Main Loop
# ═══════════════════════════════════════════════════════════════════════════════

BANNER = """
╔════════════════════════════════════════════════════════════════════════════╗
║                              SETTLE                                         ║
╠════════════════════════════════════════════════════════════════════════════╣
║                                                                             ║
║  Cart, wallet and payment settlement against a simulated gateway:           ║
║                                                                             ║
║    • create order → pay → verify → commit                                  ║
║    • nothing changes unless the payment is verified                        ║
║    • interrupted payments are re-verified, never charged twice             ║
║                                                                             ║
╚════════════════════════════════════════════════════════════════════════════╝
"""


async def run_cli(settings: Settings | None = None, catalog: StaticCatalog | None = None) -> None:
    settings = settings or Settings.from_env()
    catalog = catalog or default_catalog()
    configure_logging(settings.log_level)

    match Session.open(settings=settings):
        case Ok(session):
            pass
        case Error(e):
            print(f"  ✗ Could not open session: {e}")
            return

    print(BANNER)
    print_help()
    print_menu(catalog)
    print_wallet(session)

    match session.orchestrator.ledger.pending():
        case Ok(pending) if pending:
            print(f"\n  ⚠️  {len(pending)} interrupted payment(s). Run 'recover'.")
        case _:
            pass

    while True:
        try:
            line = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            break

        if not line:
            continue

        parts = line.split()
        cmd = parts[0].lower()

        try:
            match cmd:
                case "quit" | "exit" | "q":
                    print("Bye!")
                    break

                case "help" | "h" | "?":
                    print_help()

                case "menu":
                    print_menu(catalog, " ".join(parts[1:]) or None)

                case "add":
                    if len(parts) not in (2, 3):
                        print("  Usage: add <item> [qty]")
                        continue
                    cmd_add(session, catalog, parts[1], int(parts[2]) if len(parts) == 3 else 1)

                case "qty":
                    if len(parts) != 3:
                        print("  Usage: qty <item> <qty>")
                        continue
                    match session.cart.set_quantity(parts[1], int(parts[2])):
                        case Error(e):
                            print(f"  ✗ {e}")
                        case Ok(_):
                            print_cart(session)

                case "rm" | "remove":
                    if len(parts) != 2:
                        print("  Usage: rm <item>")
                        continue
                    match session.cart.remove(parts[1]):
                        case Error(e):
                            print(f"  ✗ {e}")
                        case Ok(_):
                            print_cart(session)

                case "cart":
                    print_cart(session)

                case "clear":
                    match session.cart.clear():
                        case Error(e):
                            print(f"  ✗ {e}")
                        case Ok(_):
                            print("  ✓ Cart cleared")

                case "checkout":
                    if len(parts) != 2:
                        print("  Usage: checkout <method>")
                        continue
                    if method := parse_method(parts[1]):
                        await cmd_checkout(session, method)

                case "topup":
                    if len(parts) != 3:
                        print("  Usage: topup <amount> <method>")
                        continue
                    if method := parse_method(parts[2]):
                        await cmd_top_up(session, parts[1], method)

                case "wallet":
                    print_wallet(session)

                case "last":
                    print_last(session)

                case "recover":
                    await cmd_recover(session)

                case "reset":
                    match session.reset():
                        case Error(e):
                            print(f"  ✗ {e}")
                        case Ok(_):
                            print(f"  ✓ Reset. Balance: {session.wallet.balance}")

                case _:
                    print(f"  ✗ Unknown command: {cmd}")
                    print("  Type 'help' for available commands.")

        except ValueError:
            print("  ✗ Quantity must be a number")


__all__ = ("run_cli",)
