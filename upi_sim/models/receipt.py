"""Receipt and resolution outcome models."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from .transaction import Transaction, TransactionStatus


MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

STATUS_MESSAGES = {
    TransactionStatus.SUCCESS: "Payment successful",
    TransactionStatus.FAILED: "Payment failed. Please try again.",
    TransactionStatus.PENDING: "Payment is processing. Check the status again shortly.",
}


class ResolutionOutcome(BaseModel):
    """Which path settled a payment, or why it was never attempted."""

    kind: Literal["remote", "local", "rejected"]
    transaction: Transaction | None = None
    error: str | None = None

    @classmethod
    def remote(cls, transaction: Transaction) -> "ResolutionOutcome":
        return cls(kind="remote", transaction=transaction)

    @classmethod
    def local(cls, transaction: Transaction) -> "ResolutionOutcome":
        return cls(kind="local", transaction=transaction)

    @classmethod
    def rejected(cls, error: str) -> "ResolutionOutcome":
        return cls(kind="rejected", error=error)


class Receipt(BaseModel):
    """Outcome of a payment submission as shown to the payer."""

    transaction_id: str = Field(description="Transaction ID for support lookup")
    status: TransactionStatus = Field(description="Outcome of the payment")
    source: Literal["remote", "local"] = Field(description="Which path resolved the payment")
    created_at: datetime = Field(description="When the payment was resolved")
    message: str = Field(description="Human-readable outcome")
    amount: Decimal | None = Field(default=None, description="Amount paid (omitted on failure)")
    payee_name: str | None = Field(default=None, description="Payee name (omitted on failure)")
    payee_id: str | None = Field(default=None, description="Payee UPI ID (omitted on failure)")

    @classmethod
    def from_outcome(cls, outcome: ResolutionOutcome, message: str | None = None) -> "Receipt":
        """Build a receipt from a remote or local outcome.

        Failed receipts carry only the transaction ID, so they read as
        "failed, try again" rather than as a confirmation.
        """
        if outcome.transaction is None:
            raise ValueError(f"Cannot build a receipt from a {outcome.kind} outcome")

        txn = outcome.transaction
        receipt = cls(
            transaction_id=txn.transaction_id,
            status=txn.status,
            source=outcome.kind,
            created_at=txn.created_at,
            message=message or STATUS_MESSAGES[txn.status],
        )
        if txn.status == TransactionStatus.FAILED:
            return receipt
        return receipt.model_copy(update={
            "amount": txn.amount,
            "payee_name": txn.payee_name,
            "payee_id": txn.payee_id,
        })

    @property
    def is_final(self) -> bool:
        """False while the payment is still PENDING."""
        return self.status != TransactionStatus.PENDING

    @property
    def retry_allowed(self) -> bool:
        return self.status == TransactionStatus.FAILED

    def display_timestamp(self) -> str:
        """Format as ``18 Oct 2026 • 3:05 PM`` in local time."""
        local = self.created_at.astimezone()
        hours = local.hour % 12 or 12
        ampm = "PM" if local.hour >= 12 else "AM"
        return f"{local.day} {MONTHS[local.month - 1]} {local.year} • {hours}:{local.minute:02d} {ampm}"
