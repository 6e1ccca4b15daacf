"""Payment submission with remote resolution and local fallback."""

import asyncio

from upi_sim.config import settings
from upi_sim.errors import InternalError, TransportError, ValidationError
from upi_sim.models.intent import PaymentIntent
from upi_sim.models.receipt import Receipt, ResolutionOutcome
from upi_sim.payments.remote import RemotePaymentClient
from upi_sim.payments.resolver import TransactionResolver
from upi_sim.payments.validation import validate_intent
from upi_sim.utils.logging import AuditLogger, get_logger
from upi_sim.utils.resilience import CircuitBreaker


logger = get_logger("upi_sim.orchestrator")


class PaymentOrchestrator:
    """Single entry point for submitting payments.

    The remote service is tried first. Any transport failure falls back to
    the local resolver, so a payment always completes even with no backend.
    A FAILED or PENDING answer from the remote service is final and is not
    re-resolved locally.
    """

    def __init__(
        self,
        resolver: TransactionResolver,
        remote: RemotePaymentClient | None = None,
        breaker: CircuitBreaker | None = None,
        audit: AuditLogger | None = None,
        min_latency_seconds: float | None = None,
    ):
        self.resolver = resolver
        self.remote = remote
        self.breaker = breaker or CircuitBreaker(
            failure_threshold=settings.circuit_breaker_threshold,
            recovery_timeout=settings.circuit_breaker_recovery_seconds,
        )
        self.audit = audit or AuditLogger(
            log_dir=settings.log_dir,
            enabled=settings.audit_enabled,
            level=settings.log_level,
            use_presidio=settings.pii_use_presidio,
        )
        self.min_latency_seconds = (
            settings.latency.min_latency_seconds
            if min_latency_seconds is None
            else min_latency_seconds
        )
        self._inflight: set[asyncio.Task] = set()

    async def _resolve_remote(self, intent: PaymentIntent) -> ResolutionOutcome:
        transaction = await self.breaker.call(self.remote.pay, intent)
        return ResolutionOutcome.remote(transaction)

    async def _resolve_validated(self, intent: PaymentIntent) -> ResolutionOutcome:
        if self.remote is not None:
            try:
                return await self._resolve_remote(intent)
            except TransportError as e:
                self.audit.log_fallback(e.message)

        return ResolutionOutcome.local(self.resolver.resolve(intent))

    async def resolve(self, intent: PaymentIntent) -> ResolutionOutcome:
        """Resolve an intent without the latency floor.

        Invalid intents come back as a ``rejected`` outcome instead of raising.
        """
        try:
            validate_intent(intent)
        except ValidationError as e:
            self.audit.log_validation_failure(e.message)
            return ResolutionOutcome.rejected(e.message)
        return await self._resolve_validated(intent)

    async def _complete(self, intent: PaymentIntent) -> Receipt:
        floor = asyncio.sleep(self.min_latency_seconds)
        try:
            _, outcome = await asyncio.gather(floor, self._resolve_validated(intent))
        except InternalError as e:
            self.audit.log_internal_error(e.message)
            raise

        txn = outcome.transaction
        self.audit.log_resolution(outcome.kind, txn.transaction_id, txn.status.value)
        return Receipt.from_outcome(outcome)

    async def submit_payment(self, intent: PaymentIntent) -> Receipt:
        """Submit a payment and wait for its receipt.

        The receipt is never returned before ``min_latency_seconds`` have
        passed. If the caller stops waiting, the payment still completes and
        is recorded; only the receipt is dropped.

        Raises:
            ValidationError: If the intent cannot be submitted
            InternalError: If local resolution cannot mint a unique ID
        """
        try:
            validate_intent(intent)
        except ValidationError as e:
            self.audit.log_validation_failure(e.message)
            raise

        self.audit.log_submission(intent.payee_id, intent.amount)

        task = asyncio.ensure_future(self._complete(intent))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return await asyncio.shield(task)

    async def drain(self):
        """Wait for submissions whose callers stopped waiting."""
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)
