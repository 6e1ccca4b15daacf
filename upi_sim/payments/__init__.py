"""Payments module - parsing, resolution and submission of payments."""

from .parser import Dialect, find_intent_url, parse, parse_with_dialect, parse_amount, to_intent_url
from .validation import validate_intent, intent_from_entry
from .resolver import TransactionResolver, RandomSource
from .remote import RemotePaymentClient
from .orchestrator import PaymentOrchestrator

__all__ = [
    "Dialect",
    "find_intent_url",
    "parse",
    "parse_with_dialect",
    "parse_amount",
    "to_intent_url",
    "validate_intent",
    "intent_from_entry",
    "TransactionResolver",
    "RandomSource",
    "RemotePaymentClient",
    "PaymentOrchestrator",
]
