"""Shared fixtures for the test suite."""

import random
from decimal import Decimal

import pytest

from upi_sim.data.ledger import Ledger
from upi_sim.data.merchants import MerchantDirectory
from upi_sim.errors import RemoteUnavailable
from upi_sim.models.intent import NameSource, PaymentIntent
from upi_sim.models.transaction import Transaction, TransactionStatus
from upi_sim.payments.resolver import TransactionResolver
from upi_sim.utils.logging import AuditLogger


@pytest.fixture
def ledger():
    """An empty ledger."""
    return Ledger()


@pytest.fixture
def directory():
    """The default merchant directory."""
    return MerchantDirectory()


@pytest.fixture
def resolver(ledger):
    """A resolver with a fixed seed."""
    return TransactionResolver(ledger, random.Random(42))


@pytest.fixture
def audit(tmp_path):
    """An audit logger writing into a temporary directory."""
    return AuditLogger(log_dir=tmp_path / "logs", use_presidio=False)


@pytest.fixture
def intent():
    """A valid intent for a known merchant."""
    return PaymentIntent(
        merchant_name="Chai Point",
        payee_id="chaipoint@okaxis",
        amount=Decimal("40"),
        name_source=NameSource.SCANNED,
    )


class FailingRemote:
    """Remote client stand-in whose transport always fails."""

    base_url = "http://unreachable.test"

    def __init__(self):
        self.calls = 0

    async def pay(self, intent):
        self.calls += 1
        raise RemoteUnavailable("Failed to connect to payment service: refused")


class AnsweringRemote:
    """Remote client stand-in that settles every payment with a fixed status."""

    base_url = "http://remote.test"

    def __init__(self, status: TransactionStatus, transaction_id: str = "TXNREMOTE01"):
        self.status = status
        self.transaction_id = transaction_id
        self.calls = 0

    async def pay(self, intent):
        self.calls += 1
        return Transaction(
            transaction_id=self.transaction_id,
            amount=intent.amount,
            payee_name=intent.display_name,
            payee_id=intent.payee_id,
            status=self.status,
        )


@pytest.fixture
def failing_remote():
    return FailingRemote()


@pytest.fixture
def answering_remote():
    """Factory for remotes that answer with a given status."""
    return AnsweringRemote
