"""Local resolution of payment intents into recorded transactions."""

import random
import string
from datetime import datetime, timezone
from typing import Any, Protocol, Sequence, TypeVar

from upi_sim.data.ledger import Ledger
from upi_sim.errors import DuplicateTransactionId, InternalError
from upi_sim.models.intent import PaymentIntent
from upi_sim.models.transaction import Transaction, TransactionStatus
from upi_sim.payments.validation import validate_intent
from upi_sim.utils.logging import get_logger


T = TypeVar("T")

logger = get_logger("upi_sim.resolver")

TRANSACTION_ID_PREFIX = "TXN"
TRANSACTION_ID_LENGTH = 8
TRANSACTION_ID_ALPHABET = string.ascii_uppercase + string.digits

# 90% success, 10% failure
OUTCOMES = (TransactionStatus.SUCCESS, TransactionStatus.FAILED)
OUTCOME_WEIGHTS = (90, 10)


class RandomSource(Protocol):
    """Source of randomness for IDs and outcomes.

    ``random.Random`` satisfies this protocol, so a seeded instance makes
    resolution deterministic.
    """

    def choice(self, seq: Sequence[T]) -> T: ...

    def choices(
        self,
        population: Sequence[T],
        weights: Sequence[float] | None = None,
        *,
        cum_weights: Sequence[float] | None = None,
        k: int = 1,
    ) -> list[T]: ...


class TransactionResolver:
    """Settles payment intents locally and records them in the ledger."""

    def __init__(self, ledger: Ledger, random_source: RandomSource | None = None):
        self.ledger = ledger
        self.random_source: RandomSource = random_source or random.Random()

    def mint_transaction_id(self) -> str:
        """Generate an ID such as ``TXN7F8A92KX``."""
        token = "".join(
            self.random_source.choice(TRANSACTION_ID_ALPHABET)
            for _ in range(TRANSACTION_ID_LENGTH)
        )
        return f"{TRANSACTION_ID_PREFIX}{token}"

    def draw_status(self) -> TransactionStatus:
        """Draw a settled outcome from the weighted distribution."""
        return self.random_source.choices(OUTCOMES, weights=OUTCOME_WEIGHTS)[0]

    def resolve(self, intent: PaymentIntent) -> Transaction:
        """Settle an intent and record the resulting transaction.

        Raises:
            InvalidAmount: If the amount is missing or not greater than zero
            MissingPayee: If neither a merchant name nor a UPI ID is present
            InternalError: If a fresh transaction ID collides twice
        """
        validate_intent(intent)

        fields: dict[str, Any] = {
            "transaction_id": self.mint_transaction_id(),
            "amount": intent.amount,
            "payee_name": intent.display_name,
            "payee_id": intent.payee_id,
            "status": self.draw_status(),
            "created_at": datetime.now(timezone.utc),
        }

        try:
            return self.ledger.insert(Transaction(**fields))
        except DuplicateTransactionId as e:
            logger.warning(f"{e.message}, minting a new ID")

        fields["transaction_id"] = self.mint_transaction_id()
        try:
            return self.ledger.insert(Transaction(**fields))
        except DuplicateTransactionId as e:
            raise InternalError(
                f"Could not mint a unique transaction ID: {e.message}"
            ) from e
