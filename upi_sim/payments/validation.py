"""Validation of payment intents before submission."""

from decimal import Decimal
from typing import Any

from upi_sim.errors import InvalidAmount, MissingPayee
from upi_sim.models.intent import NameSource, PaymentIntent, derive_display_name
from upi_sim.payments.parser import parse_amount


def validate_intent(intent: PaymentIntent) -> PaymentIntent:
    """Check that an intent can be submitted.

    Raises:
        InvalidAmount: If the amount is missing or not greater than zero
        MissingPayee: If neither a merchant name nor a UPI ID is present
    """
    if intent.amount is None:
        raise InvalidAmount("Enter an amount to pay")
    if intent.amount <= 0:
        raise InvalidAmount()
    if not intent.has_payee:
        raise MissingPayee()
    return intent


def intent_from_entry(
    merchant_name: str = "",
    amount: Any = None,
    payee_id: str = "",
) -> PaymentIntent:
    """Build an intent from values typed by the payer.

    Raises:
        InvalidAmount: If the amount text is present but not a number
    """
    amount_value: Decimal | None = None
    if amount is not None and str(amount).strip():
        amount_value = parse_amount(amount)
        if amount_value is None:
            raise InvalidAmount(f"'{amount}' is not a valid amount")

    merchant_name = (merchant_name or "").strip()
    payee_id = (payee_id or "").strip()
    if merchant_name:
        name_source = NameSource.MANUAL
    elif payee_id:
        merchant_name = derive_display_name(payee_id)
        name_source = NameSource.DERIVED
    else:
        name_source = NameSource.NONE

    return PaymentIntent(
        merchant_name=merchant_name,
        payee_id=payee_id,
        amount=amount_value,
        name_source=name_source,
    )
