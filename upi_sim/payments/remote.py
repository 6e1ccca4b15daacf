"""HTTP client for the remote payment-resolution service."""

from typing import Any

import httpx
from pydantic import ValidationError as ModelValidationError

from upi_sim.errors import RemoteTimeout, RemoteUnavailable, TransactionNotFound
from upi_sim.models.intent import PaymentIntent
from upi_sim.models.transaction import Transaction
from upi_sim.utils.logging import get_logger


logger = get_logger("upi_sim.remote")


class RemotePaymentClient:
    """Async client for the payment API served by ``upi_sim.api``.

    Every transport-level problem (connection errors, timeouts, non-2xx
    answers, bodies that do not parse) is raised as a ``TransportError``
    subclass. A FAILED payment is a normal answer, not an error.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 3.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            transport=self._transport,
        )

    async def _send(self, method: str, path: str, payload: dict | None = None) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.request(method, path, json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"Payment service timeout on {path}: {e}")
            raise RemoteTimeout(
                f"Payment service timeout after {self.timeout_seconds}s"
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Payment service connection error on {path}: {e}")
            raise RemoteUnavailable(f"Failed to connect to payment service: {e}") from e

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"Payment service returned {status_code} for {e.request.url.path}")
            raise RemoteUnavailable(
                f"Payment service returned {status_code}", status_code=status_code
            ) from e

        try:
            body = response.json()
        except ValueError as e:
            raise RemoteUnavailable("Payment service returned a body that is not JSON") from e
        if not isinstance(body, dict):
            raise RemoteUnavailable("Payment service returned an unexpected body")
        return body

    @staticmethod
    def _transaction(body: dict[str, Any]) -> Transaction:
        try:
            return Transaction.model_validate(body)
        except ModelValidationError as e:
            raise RemoteUnavailable(f"Payment service returned a malformed transaction: {e}") from e

    async def pay(self, intent: PaymentIntent) -> Transaction:
        """Submit a payment and return the transaction the service settled."""
        payload = {
            "amount": str(intent.amount) if intent.amount is not None else None,
            "payeeName": intent.display_name,
            "upiId": intent.payee_id,
        }
        body = self._json(await self._send("POST", "/pay", payload))
        # Services may omit the echo fields on FAILED answers
        return self._transaction({
            "amount": payload["amount"],
            "payeeName": payload["payeeName"],
            "upiId": payload["upiId"],
            **{key: value for key, value in body.items() if value is not None},
        })

    async def scan_qr(self, upi_id: str | None = None, qr_data: str | None = None) -> dict[str, Any]:
        """Resolve a UPI ID, or a raw QR payload, to a payee."""
        payload = {"upiId": upi_id, "qrData": qr_data}
        return self._json(await self._send("POST", "/scan-qr", payload))

    async def validate_upi(self, upi_id: str) -> dict[str, Any]:
        return self._json(await self._send("POST", "/validate-upi", {"upiId": upi_id}))

    async def generate_qr(self, intent: PaymentIntent) -> dict[str, Any]:
        payload = {
            "merchantName": intent.merchant_name or None,
            "upiId": intent.payee_id or None,
            "amount": str(intent.amount) if intent.amount is not None else None,
        }
        return self._json(await self._send("POST", "/generate-qr", payload))

    async def get_transaction(self, transaction_id: str) -> Transaction:
        """Fetch a transaction recorded by the service.

        Raises:
            TransactionNotFound: If the service does not know the ID
        """
        response = await self._send("GET", f"/transaction/{transaction_id}")
        if response.status_code == 404:
            raise TransactionNotFound(transaction_id)
        return self._transaction(self._json(response))

    async def list_transactions(self) -> list[Transaction]:
        body = self._json(await self._send("GET", "/transactions"))
        return [self._transaction(item) for item in body.get("transactions", [])]
