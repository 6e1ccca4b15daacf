"""Tests for the merchant directory."""

from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from upi_sim.data.merchants import MerchantDirectory, is_valid_upi_id
from upi_sim.models.intent import NameSource, PaymentIntent
from upi_sim.models.merchant import MerchantRecord
from upi_sim.payments.parser import parse


class TestLookup:
    """Tests for MerchantDirectory.lookup and describe."""

    def test_known_merchant(self, directory):
        record = directory.lookup("demo@upi")
        assert record == MerchantRecord(display_name="Demo Merchant", verified=True)

    def test_lookup_ignores_case_and_whitespace(self, directory):
        assert directory.lookup("  ChaiPoint@OKAXIS ").display_name == "Chai Point"

    def test_unknown_merchant(self, directory):
        assert directory.lookup("nobody@bank") is None
        assert directory.lookup("") is None

    def test_describe_unknown_derives_name(self, directory):
        assert directory.describe("rahul@bank") == ("Rahul", False)

    def test_describe_known(self, directory):
        assert directory.describe("freshmart@ybl") == ("FreshMart Supermarket", True)

    def test_records_are_immutable(self, directory):
        record = directory.lookup("demo@upi")
        with pytest.raises(PydanticValidationError):
            record.display_name = "Changed"

    def test_custom_records(self):
        directory = MerchantDirectory({"Shop@Bank": MerchantRecord(display_name="Shop", verified=True)})
        assert len(directory) == 1
        assert directory.lookup("shop@bank").display_name == "Shop"


class TestEnrich:
    """Tests for filling merchant names from the directory."""

    def test_derived_name_replaced(self, directory):
        intent = parse("upi://pay?pa=chaipoint@okaxis&am=40")
        assert intent.name_source == NameSource.DERIVED

        enriched = directory.enrich(intent)
        assert enriched.merchant_name == "Chai Point"
        assert enriched.name_source == NameSource.DIRECTORY
        assert enriched.verified is True
        assert enriched.amount == Decimal("40")

    def test_scanned_name_kept(self, directory):
        intent = parse("upi://pay?pa=demo@upi&pn=My%20Shop")
        enriched = directory.enrich(intent)
        assert enriched.merchant_name == "My Shop"
        assert enriched.name_source == NameSource.SCANNED

    def test_unknown_payee_unchanged(self, directory):
        intent = parse("upi://pay?pa=rahul@bank")
        assert directory.enrich(intent) == intent

    def test_unverified_directory_entry(self, directory):
        intent = parse("pa=ramesh.kirana@paytm")
        enriched = directory.enrich(intent)
        assert enriched.merchant_name == "Ramesh Kirana Store"
        assert enriched.verified is False

    def test_original_intent_not_mutated(self, directory):
        intent = PaymentIntent(payee_id="demo@upi", amount=Decimal("5"))
        directory.enrich(intent)
        assert intent.merchant_name == ""


class TestUpiIdShape:
    """Tests for UPI ID validation."""

    @pytest.mark.parametrize("upi_id", ["rahul@bank", "98765@ybl", "a.b-c@ok.axis"])
    def test_valid(self, upi_id):
        assert is_valid_upi_id(upi_id)

    @pytest.mark.parametrize("upi_id", ["", "rahul", "rahul@", "@bank", "a@b@c", "ra hul@bank"])
    def test_invalid(self, upi_id):
        assert not is_valid_upi_id(upi_id)
