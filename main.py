"""CLI entry point for the UPI Pay Simulator."""

import argparse
import asyncio
import random

from upi_sim.config import settings
from upi_sim.data.ledger import Ledger
from upi_sim.data.merchants import MerchantDirectory
from upi_sim.errors import InternalError, TransactionNotFound, TransportError, ValidationError
from upi_sim.models.intent import PaymentIntent
from upi_sim.models.receipt import Receipt
from upi_sim.payments.orchestrator import PaymentOrchestrator
from upi_sim.payments.parser import parse_with_dialect
from upi_sim.payments.remote import RemotePaymentClient
from upi_sim.payments.resolver import TransactionResolver
from upi_sim.payments.validation import intent_from_entry
from upi_sim.utils.logging import AuditLogger


HELP_TEXT = """Available commands:
  /help      - Show this help message
  /manual    - Enter payment details by hand
  /history   - List payments made in this session
  /txn <id>  - Look up a transaction
  /quit      - Exit

Anything else is treated as a scanned QR payload, for example:
  upi://pay?pa=chaipoint@okaxis&pn=Chai%20Point&am=40
  {"merchant": "FreshMart", "upiId": "freshmart@ybl", "amount": 250}
  merchant=Demo Merchant; upi=demo@upi; amount=250"""


def build_orchestrator(use_remote: bool, remote_url: str, seed: int | None) -> PaymentOrchestrator:
    """Wire the ledger, resolver and remote client together."""
    ledger = Ledger()
    resolver = TransactionResolver(ledger, random.Random(seed))
    remote = None
    if use_remote:
        remote = RemotePaymentClient(remote_url, settings.remote.timeout_seconds)
    audit = AuditLogger(
        log_dir=settings.log_dir,
        enabled=settings.audit_enabled,
        level=settings.log_level,
        use_presidio=settings.pii_use_presidio,
    )
    return PaymentOrchestrator(resolver, remote=remote, audit=audit)


def print_intent(intent: PaymentIntent):
    details = intent.to_display_dict()
    badge = "verified" if intent.verified else "unverified"
    print(f"\n  Paying:  {details['merchant']} ({badge})")
    print(f"  UPI ID:  {details['upi_id']}")
    print(f"  Amount:  {settings.currency_symbol}{details['amount']}")


def print_receipt(receipt: Receipt):
    print()
    print("-" * 40)
    if receipt.status.value == "SUCCESS":
        print("  Payment successful")
        print(f"  {settings.currency_symbol}{receipt.amount:.2f}")
        print(f"  paid to {receipt.payee_name}")
    else:
        print(f"  {receipt.message}")
    print(f"  UPI transaction ID: {receipt.transaction_id}")
    print(f"  {receipt.display_timestamp()}")
    print("-" * 40)


def prompt_amount(intent: PaymentIntent) -> PaymentIntent:
    """Ask for the amount when the QR code did not carry one."""
    while intent.amount is None:
        text = input("  Enter amount: ").strip()
        try:
            entered = intent_from_entry(amount=text)
        except ValidationError as e:
            print(f"  {e.message}")
            continue
        intent = intent.model_copy(update={"amount": entered.amount})
    return intent


async def submit(orchestrator: PaymentOrchestrator, intent: PaymentIntent) -> Receipt:
    try:
        return await orchestrator.submit_payment(intent)
    finally:
        await orchestrator.drain()


def pay(orchestrator: PaymentOrchestrator, intent: PaymentIntent):
    """Confirm and submit a payment, printing the receipt."""
    print_intent(intent)
    answer = input("\n  Pay now? [Y/n]: ").strip().lower()
    if answer not in ("", "y", "yes"):
        print("  Payment cancelled.")
        return

    print("  Processing...")
    try:
        receipt = asyncio.run(submit(orchestrator, intent))
    except ValidationError as e:
        print(f"  {e.message}")
        return
    except InternalError:
        print("  Something went wrong. No money has moved, please try again.")
        return
    print_receipt(receipt)


def show_history(orchestrator: PaymentOrchestrator):
    transactions = orchestrator.resolver.ledger.list()
    if not transactions:
        print("\nNo payments resolved locally in this session.")
    for txn in transactions:
        d = txn.to_display_dict(settings.currency_symbol)
        print(f"  {d['id']} | {d['status']:<7} | {d['amount']:>10} | {d['payee']}")

    if orchestrator.remote is None:
        return
    try:
        remote_transactions = asyncio.run(orchestrator.remote.list_transactions())
    except TransportError as e:
        print(f"\n(Payment service unavailable: {e.message})")
        return
    if remote_transactions:
        print("\nRecorded by the payment service:")
    for txn in remote_transactions:
        d = txn.to_display_dict(settings.currency_symbol)
        print(f"  {d['id']} | {d['status']:<7} | {d['amount']:>10} | {d['payee']}")


def show_transaction(orchestrator: PaymentOrchestrator, transaction_id: str):
    try:
        txn = orchestrator.resolver.ledger.get(transaction_id)
    except TransactionNotFound:
        if orchestrator.remote is None:
            print(f"\nTransaction {transaction_id} not found.")
            return
        try:
            txn = asyncio.run(orchestrator.remote.get_transaction(transaction_id))
        except (TransactionNotFound, TransportError) as e:
            print(f"\n{e.message}")
            return

    for key, value in txn.to_display_dict(settings.currency_symbol).items():
        print(f"  {key:<8} {value}")


def run_repl(orchestrator: PaymentOrchestrator, directory: MerchantDirectory):
    """Run the interactive REPL."""
    print("=" * 60)
    print("UPI Pay Simulator")
    print("=" * 60)
    if orchestrator.remote is not None:
        print(f"Payment service: {orchestrator.remote.base_url} (falls back to local)")
    else:
        print("Payment service: local only")
    print()
    print(HELP_TEXT)
    print("-" * 60)

    while True:
        try:
            user_input = input("\nScan: ").strip()

            if not user_input:
                continue

            if user_input.startswith("/"):
                command, _, argument = user_input.partition(" ")
                command = command.lower()

                if command in ("/quit", "/exit"):
                    print("\nGoodbye!")
                    break

                elif command == "/help":
                    print(HELP_TEXT)

                elif command == "/manual":
                    merchant = input("  Merchant name: ").strip()
                    upi_id = input("  UPI ID (optional): ").strip()
                    amount = input("  Amount: ").strip()
                    try:
                        intent = intent_from_entry(merchant, amount, upi_id)
                    except ValidationError as e:
                        print(f"  {e.message}")
                        continue
                    pay(orchestrator, prompt_amount(directory.enrich(intent)))

                elif command == "/history":
                    show_history(orchestrator)

                elif command == "/txn":
                    if not argument.strip():
                        print("Usage: /txn <transaction id>")
                    else:
                        show_transaction(orchestrator, argument.strip())

                else:
                    print(f"\nUnknown command: {user_input}")
                    print("Type /help for available commands.")
                continue

            intent, dialect = parse_with_dialect(user_input)
            orchestrator.audit.log_scan(user_input, dialect.value, intent.model_dump(mode="json"))
            intent = directory.enrich(intent)
            pay(orchestrator, prompt_amount(intent))

        except KeyboardInterrupt:
            print("\n\nGoodbye!")
            break
        except EOFError:
            print("\n\nGoodbye!")
            break


def serve(host: str, port: int):
    """Run the payment API."""
    import uvicorn

    uvicorn.run(
        "upi_sim.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="UPI Pay Simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                          # Pay interactively, remote service first
  python main.py --no-remote              # Resolve every payment locally
  python main.py --serve                  # Run the payment service API
  python main.py --parse "upi://pay?pa=rahul@bank&am=50"
        """,
    )

    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the payment service API instead of the REPL",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.api_host,
        help=f"Host for --serve (default: {settings.api_host})",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.api_port,
        help=f"Port for --serve (default: {settings.api_port})",
    )

    parser.add_argument(
        "--remote-url",
        type=str,
        default=settings.remote.base_url,
        help=f"Payment service URL (default: {settings.remote.base_url})",
    )

    parser.add_argument(
        "--no-remote",
        action="store_true",
        help="Do not contact the payment service",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=settings.random_seed,
        help="Seed for simulated outcomes",
    )

    parser.add_argument(
        "--parse",
        type=str,
        metavar="RAW",
        default=None,
        help="Print the payment intent parsed from RAW and exit",
    )

    args = parser.parse_args()

    if args.serve:
        serve(args.host, args.port)
        return

    directory = MerchantDirectory()

    if args.parse is not None:
        intent, dialect = parse_with_dialect(args.parse)
        intent = directory.enrich(intent)
        print(f"Dialect: {dialect.value}")
        for key, value in intent.to_display_dict().items():
            print(f"  {key:<12} {value}")
        return

    use_remote = settings.remote.enabled and not args.no_remote
    orchestrator = build_orchestrator(use_remote, args.remote_url, args.seed)
    run_repl(orchestrator, directory)


if __name__ == "__main__":
    main()
