"""In-memory transaction ledger."""

from threading import Lock
from typing import Sequence

from upi_sim.errors import DuplicateTransactionId, TransactionNotFound
from upi_sim.models.transaction import Transaction


class Ledger:
    """Insert-once store of transactions keyed by transaction ID.

    Lives for the lifetime of the process. Entries are never updated or
    removed; listing preserves insertion order.
    """

    def __init__(self):
        self._transactions: dict[str, Transaction] = {}
        self._lock = Lock()

    def insert(self, transaction: Transaction) -> Transaction:
        """Record a transaction.

        Raises:
            DuplicateTransactionId: If the ID is already recorded
        """
        with self._lock:
            if transaction.transaction_id in self._transactions:
                raise DuplicateTransactionId(transaction.transaction_id)
            self._transactions[transaction.transaction_id] = transaction
        return transaction

    def get(self, transaction_id: str) -> Transaction:
        """Look up a transaction by ID.

        Raises:
            TransactionNotFound: If no transaction has this ID
        """
        with self._lock:
            try:
                return self._transactions[transaction_id]
            except KeyError:
                raise TransactionNotFound(transaction_id) from None

    def list(self) -> Sequence[Transaction]:
        """All transactions in insertion order."""
        with self._lock:
            return tuple(self._transactions.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._transactions)

    def __contains__(self, transaction_id: object) -> bool:
        with self._lock:
            return transaction_id in self._transactions
