"""Models module - Pydantic data models."""

from .intent import PaymentIntent, NameSource, derive_display_name
from .merchant import MerchantRecord
from .transaction import Transaction, TransactionStatus
from .receipt import Receipt, ResolutionOutcome

__all__ = [
    "PaymentIntent",
    "NameSource",
    "derive_display_name",
    "MerchantRecord",
    "Transaction",
    "TransactionStatus",
    "Receipt",
    "ResolutionOutcome",
]
