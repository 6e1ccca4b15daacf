"""Tests for the payment API and its HTTP client."""

import random
from decimal import Decimal

import httpx
import pytest
from fastapi.testclient import TestClient

from upi_sim.api.app import MAX_QR_DATA_LENGTH, create_app
from upi_sim.data.ledger import Ledger
from upi_sim.errors import RemoteTimeout, RemoteUnavailable, TransactionNotFound
from upi_sim.models.intent import PaymentIntent
from upi_sim.models.transaction import TransactionStatus
from upi_sim.payments.orchestrator import PaymentOrchestrator
from upi_sim.payments.remote import RemotePaymentClient
from upi_sim.payments.resolver import TransactionResolver


class AlwaysSucceeds(random.Random):
    """Seeded source whose outcome draw is always SUCCESS."""

    def choices(self, population, weights=None, *, cum_weights=None, k=1):
        return [population[0]] * k


@pytest.fixture
def server_ledger():
    return Ledger()


@pytest.fixture
def app(server_ledger, audit):
    resolver = TransactionResolver(server_ledger, AlwaysSucceeds(5))
    return create_app(ledger=server_ledger, resolver=resolver, audit=audit)


@pytest.fixture
def client(app):
    return TestClient(app)


def pay(client, **body):
    return client.post("/pay", json=body)


class TestPay:
    """Tests for POST /pay."""

    def test_successful_payment(self, client, server_ledger):
        response = pay(client, amount=250, payeeName="Demo Merchant", upiId="demo@upi")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "SUCCESS"
        assert data["transactionId"].startswith("TXN")
        assert Decimal(data["amount"]) == Decimal("250")
        assert data["payeeName"] == "Demo Merchant"
        assert data["upiId"] == "demo@upi"
        assert data["message"]
        assert data["timestamp"]
        assert data["transactionId"] in server_ledger

    @pytest.mark.parametrize("amount", [0, -5, "0.00"])
    def test_non_positive_amount(self, client, server_ledger, amount):
        response = pay(client, amount=amount, payeeName="Shop")

        assert response.status_code == 400
        assert response.json()["status"] == "FAILED"
        assert response.json()["message"]
        assert len(server_ledger) == 0

    def test_non_numeric_amount(self, client, server_ledger):
        response = pay(client, amount="ten", payeeName="Shop")
        assert response.status_code == 400
        assert len(server_ledger) == 0

    def test_missing_payee_name(self, client, server_ledger):
        response = pay(client, amount=10, upiId="rahul@bank")
        assert response.status_code == 400
        assert response.json() == {"status": "FAILED", "message": "payeeName is required"}
        assert len(server_ledger) == 0

    def test_body_not_json(self, client):
        response = client.post("/pay", content="amount=10", headers={"content-type": "application/json"})
        assert response.status_code == 400
        assert response.json()["status"] == "FAILED"


class TestTransactions:
    """Tests for transaction lookup endpoints."""

    def test_known_transaction(self, client, server_ledger):
        created = pay(client, amount="99.50", payeeName="Bookworm Books", upiId="bookworm@hdfcbank").json()

        response = client.get(f"/transaction/{created['transactionId']}")
        assert response.status_code == 200
        record = server_ledger.get(created["transactionId"])
        assert response.json() == record.to_wire_dict()

    def test_unknown_transaction(self, client):
        response = client.get("/transaction/TXNNOTHERE")
        assert response.status_code == 404
        assert response.json() == {"status": "FAILED", "message": "not found"}

    def test_list_in_order(self, client):
        first = pay(client, amount=1, payeeName="A").json()["transactionId"]
        second = pay(client, amount=2, payeeName="B").json()["transactionId"]

        data = client.get("/transactions").json()
        assert data["status"] == "SUCCESS"
        assert [t["transactionId"] for t in data["transactions"]] == [first, second]


class TestScanAndValidate:
    """Tests for payee lookup endpoints."""

    def test_scan_known_upi_id(self, client):
        data = client.post("/scan-qr", json={"upiId": "demo@upi"}).json()
        assert data == {
            "status": "SUCCESS",
            "payeeName": "Demo Merchant",
            "upiId": "demo@upi",
            "verified": True,
            "amount": None,
        }

    def test_scan_unknown_upi_id(self, client):
        data = client.post("/scan-qr", json={"upiId": "rahul@bank"}).json()
        assert data["payeeName"] == "Rahul"
        assert data["verified"] is False

    def test_scan_qr_payload(self, client):
        data = client.post("/scan-qr", json={"qrData": "upi://pay?pa=chaipoint@okaxis&am=40"}).json()
        assert data["payeeName"] == "Chai Point"
        assert data["verified"] is True
        assert Decimal(data["amount"]) == Decimal("40")

    def test_scan_nothing(self, client):
        response = client.post("/scan-qr", json={})
        assert response.status_code == 400

    def test_scan_oversized_payload(self, client):
        response = client.post("/scan-qr", json={"qrData": "a" * (MAX_QR_DATA_LENGTH + 1)})
        assert response.status_code == 400
        assert response.json()["status"] == "FAILED"

    def test_validate_invalid(self, client):
        assert client.post("/validate-upi", json={"upiId": "rahul"}).json()["status"] == "INVALID"
        assert client.post("/validate-upi", json={}).json()["status"] == "INVALID"

    def test_validate_valid(self, client):
        data = client.post("/validate-upi", json={"upiId": "freshmart@ybl"}).json()
        assert data == {"status": "VALID", "payeeName": "FreshMart Supermarket", "verified": True}


class TestGenerateQr:
    """Tests for POST /generate-qr."""

    def test_defaults(self, client):
        data = client.post("/generate-qr", json={}).json()
        assert data["status"] == "SUCCESS"
        assert data["qrData"] == "upi://pay?pa=demo@upi&pn=Demo%20Merchant&cu=INR"
        assert data["details"] == {"payeeName": "Demo Merchant", "upiId": "demo@upi", "amount": None}

    def test_with_amount(self, client):
        data = client.post("/generate-qr", json={
            "merchantName": "Chai Point", "upiId": "chaipoint@okaxis", "amount": 40,
        }).json()
        assert data["qrData"] == "upi://pay?pa=chaipoint@okaxis&pn=Chai%20Point&am=40.00&cu=INR"

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"


class TestRemoteClientAgainstApi:
    """The HTTP client and orchestrator talking to the real API in-process."""

    @pytest.fixture
    def remote(self, app):
        return RemotePaymentClient("http://payments.test", transport=httpx.ASGITransport(app=app))

    @pytest.mark.asyncio
    async def test_orchestrator_uses_remote(self, remote, server_ledger, ledger, resolver, audit, intent):
        orchestrator = PaymentOrchestrator(resolver, remote=remote, audit=audit, min_latency_seconds=0)
        receipt = await orchestrator.submit_payment(intent)

        assert receipt.source == "remote"
        assert receipt.status == TransactionStatus.SUCCESS
        assert receipt.transaction_id in server_ledger
        assert len(ledger) == 0

    @pytest.mark.asyncio
    async def test_get_and_list(self, remote, intent):
        txn = await remote.pay(intent)

        fetched = await remote.get_transaction(txn.transaction_id)
        assert fetched == txn
        assert [t.transaction_id for t in await remote.list_transactions()] == [txn.transaction_id]

        with pytest.raises(TransactionNotFound):
            await remote.get_transaction("TXNNOTHERE")

    @pytest.mark.asyncio
    async def test_lookup_endpoints(self, remote):
        assert (await remote.scan_qr(upi_id="demo@upi"))["verified"] is True
        assert (await remote.validate_upi("nope"))["status"] == "INVALID"
        qr = await remote.generate_qr(PaymentIntent(merchant_name="Shop", payee_id="shop@ybl"))
        assert qr["qrData"].startswith("upi://pay?pa=shop@ybl")


def mock_client(handler) -> RemotePaymentClient:
    return RemotePaymentClient("http://payments.test", transport=httpx.MockTransport(handler))


class TestRemoteClientFailures:
    """Transport problems become TransportError subclasses."""

    @pytest.mark.asyncio
    async def test_server_error(self, intent):
        client = mock_client(lambda request: httpx.Response(503, json={"status": "FAILED"}))
        with pytest.raises(RemoteUnavailable) as exc_info:
            await client.pay(intent)
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_connection_refused(self, intent):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RemoteUnavailable):
            await mock_client(handler).pay(intent)

    @pytest.mark.asyncio
    async def test_timeout(self, intent):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(RemoteTimeout):
            await mock_client(handler).pay(intent)

    @pytest.mark.asyncio
    async def test_malformed_body(self, intent):
        client = mock_client(lambda request: httpx.Response(200, json={"status": "MAYBE"}))
        with pytest.raises(RemoteUnavailable):
            await client.pay(intent)

    @pytest.mark.asyncio
    async def test_body_not_json(self, intent):
        client = mock_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(RemoteUnavailable):
            await client.pay(intent)

    @pytest.mark.asyncio
    async def test_failed_answer_without_echo_fields(self, intent):
        client = mock_client(lambda request: httpx.Response(200, json={
            "status": "FAILED",
            "transactionId": "TXNFAIL0001",
            "message": "Bank declined",
        }))
        txn = await client.pay(intent)
        assert txn.status == TransactionStatus.FAILED
        assert txn.transaction_id == "TXNFAIL0001"
        assert txn.amount == Decimal("40")

    @pytest.mark.asyncio
    async def test_orchestrator_falls_back_on_server_error(self, resolver, ledger, audit, intent):
        client = mock_client(lambda request: httpx.Response(500))
        orchestrator = PaymentOrchestrator(resolver, remote=client, audit=audit, min_latency_seconds=0)

        receipt = await orchestrator.submit_payment(intent)
        assert receipt.source == "local"
        assert receipt.transaction_id in ledger
