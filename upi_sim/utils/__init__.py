"""Utilities module - Logging, PII masking, resilience."""

from .pii import mask_pii, mask_upi_id, mask_amount
from .logging import get_logger, AuditLogger
from .resilience import CircuitBreaker, CircuitBreakerOpen

__all__ = [
    "mask_pii",
    "mask_upi_id",
    "mask_amount",
    "get_logger",
    "AuditLogger",
    "CircuitBreaker",
    "CircuitBreakerOpen",
]
