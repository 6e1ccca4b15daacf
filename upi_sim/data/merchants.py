"""Static merchant directory keyed by UPI ID."""

import re
from types import MappingProxyType
from typing import Mapping

from upi_sim.models.intent import NameSource, PaymentIntent, derive_display_name
from upi_sim.models.merchant import MerchantRecord


UPI_ID_RE = re.compile(r"^[^@\s]+@[^@\s]+$")

# Reference data loaded at import; keys are lower-case UPI IDs
MERCHANTS: Mapping[str, MerchantRecord] = MappingProxyType({
    "demo@upi": MerchantRecord(display_name="Demo Merchant", verified=True),
    "chaipoint@okaxis": MerchantRecord(display_name="Chai Point", verified=True),
    "freshmart@ybl": MerchantRecord(display_name="FreshMart Supermarket", verified=True),
    "metro.rail@icici": MerchantRecord(display_name="Metro Rail Recharge", verified=True),
    "cityhospital@sbi": MerchantRecord(display_name="City Hospital Pharmacy", verified=True),
    "ramesh.kirana@paytm": MerchantRecord(display_name="Ramesh Kirana Store", verified=False),
    "bookworm@hdfcbank": MerchantRecord(display_name="Bookworm Books", verified=True),
})


def is_valid_upi_id(payee_id: str) -> bool:
    """Check that a UPI ID has a non-empty name and an ``@`` handle."""
    return bool(payee_id) and UPI_ID_RE.match(payee_id.strip()) is not None


class MerchantDirectory:
    """Read-only lookup of verified merchant names."""

    def __init__(self, records: Mapping[str, MerchantRecord] | None = None):
        source = MERCHANTS if records is None else records
        self._records: Mapping[str, MerchantRecord] = MappingProxyType(
            {key.strip().lower(): record for key, record in source.items()}
        )

    def lookup(self, payee_id: str) -> MerchantRecord | None:
        """Get the merchant record for a UPI ID, or None if unknown."""
        if not payee_id:
            return None
        return self._records.get(payee_id.strip().lower())

    def describe(self, payee_id: str) -> tuple[str, bool]:
        """Return ``(display_name, verified)`` for a UPI ID.

        Unknown IDs get a name derived from the ID and are unverified.
        """
        record = self.lookup(payee_id)
        if record is None:
            return derive_display_name(payee_id), False
        return record.display_name, record.verified

    def enrich(self, intent: PaymentIntent) -> PaymentIntent:
        """Fill in the merchant name from the directory.

        Only intents without a name, or with a name derived from the UPI ID,
        are changed. A name the payer scanned or typed is kept.
        """
        if intent.name_source not in (NameSource.NONE, NameSource.DERIVED):
            return intent

        record = self.lookup(intent.payee_id)
        if record is None:
            return intent

        # Unverified entries keep the unverified marker
        source = NameSource.DIRECTORY if record.verified else NameSource.DERIVED
        return intent.model_copy(update={
            "merchant_name": record.display_name,
            "name_source": source,
        })

    def __len__(self) -> int:
        return len(self._records)
