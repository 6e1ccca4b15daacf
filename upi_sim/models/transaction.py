"""Transaction model."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TransactionStatus(str, Enum):
    """Settled (or advisory) state of a payment."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    PENDING = "PENDING"


class Transaction(BaseModel):
    """Represents a resolved UPI payment.

    Instances are frozen: the status is assigned once, when the payment is
    resolved. A retry is a new transaction.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    transaction_id: str = Field(alias="transactionId", description="Unique transaction identifier")
    amount: Decimal = Field(description="Amount paid")
    payee_name: str = Field(alias="payeeName", description="Name shown for the payee")
    payee_id: str = Field(default="", alias="upiId", description="Payee UPI ID")
    status: TransactionStatus = Field(description="Transaction status")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="timestamp",
        description="When the transaction was resolved",
    )

    def to_wire_dict(self) -> dict:
        """Return the JSON shape used by the payment API."""
        return self.model_dump(mode="json", by_alias=True)

    def to_display_dict(self, currency_symbol: str = "₹") -> dict:
        """Return a dictionary suitable for display to users."""
        return {
            "id": self.transaction_id,
            "amount": f"{currency_symbol}{self.amount:.2f}",
            "payee": self.payee_name,
            "upi_id": self.payee_id or "N/A",
            "status": self.status.value,
            "date": self.created_at.astimezone().strftime("%Y-%m-%d %H:%M"),
        }
