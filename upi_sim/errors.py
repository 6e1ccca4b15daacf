"""Custom exceptions for the payment simulator."""


class PaymentError(Exception):
    """Base exception for payment simulator errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationError(PaymentError):
    """Raised when a payment intent cannot be submitted as entered."""

    pass


class InvalidAmount(ValidationError):
    """Raised when the amount is absent, not a number or not positive."""

    def __init__(self, message: str = "Enter an amount greater than zero"):
        super().__init__(message)


class MissingPayee(ValidationError):
    """Raised when neither a merchant name nor a UPI ID is known."""

    def __init__(self, message: str = "Enter a merchant name or UPI ID"):
        super().__init__(message)


class TransportError(PaymentError):
    """Raised when the remote payment service cannot give an answer."""

    pass


class RemoteTimeout(TransportError):
    """Raised when the remote payment service does not answer in time."""

    def __init__(self, message: str = "Remote payment service timed out"):
        super().__init__(message)


class RemoteUnavailable(TransportError):
    """Raised when the remote payment service is unreachable or misbehaves."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class DuplicateTransactionId(PaymentError):
    """Raised when a transaction ID is already present in the ledger."""

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} already exists")


class TransactionNotFound(PaymentError):
    """Raised when a transaction ID is not present in the ledger."""

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")


class InternalError(PaymentError):
    """Raised when the simulator cannot keep its own invariants."""

    pass
