"""Payment intent model."""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class NameSource(str, Enum):
    """Where the merchant name on an intent came from."""

    NONE = "none"
    SCANNED = "scanned"
    MANUAL = "manual"
    DERIVED = "derived"
    DIRECTORY = "directory"


def derive_display_name(payee_id: str) -> str:
    """Build a placeholder name from the local part of a UPI ID.

    ``rahul@bank`` becomes ``Rahul``. Only the first character is upper-cased.
    """
    local_part = payee_id.strip().split("@", 1)[0]
    return local_part[:1].upper() + local_part[1:]


class PaymentIntent(BaseModel):
    """Who to pay and how much, before the payment is submitted."""

    merchant_name: str = Field(default="", description="Merchant display name")
    payee_id: str = Field(default="", description="Payee UPI ID (name@bank)")
    amount: Decimal | None = Field(default=None, description="Amount to pay")
    name_source: NameSource = Field(
        default=NameSource.NONE, description="Origin of merchant_name"
    )

    @property
    def verified(self) -> bool:
        """True only when the name was confirmed by the merchant directory."""
        return self.name_source == NameSource.DIRECTORY

    @property
    def display_name(self) -> str:
        """Merchant name, falling back to the name derived from the UPI ID."""
        if self.merchant_name:
            return self.merchant_name
        if self.payee_id:
            return derive_display_name(self.payee_id)
        return ""

    @property
    def has_payee(self) -> bool:
        return bool(self.merchant_name.strip() or self.payee_id.strip())

    def to_display_dict(self) -> dict:
        """Return a dictionary suitable for display to users."""
        return {
            "merchant": self.display_name or "N/A",
            "upi_id": self.payee_id or "N/A",
            "amount": f"{self.amount:.2f}" if self.amount is not None else "N/A",
            "verified": self.verified,
            "name_source": self.name_source.value,
        }
