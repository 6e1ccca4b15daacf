"""Parsing of scanned QR payloads into payment intents.

Three payload dialects are accepted, tried in this order:

1. Intent URL: ``upi://pay?pa=rahul@bank&pn=Rahul%20Stores&am=250.00``
2. Structured: ``{"merchant": "Rahul Stores", "upiId": "rahul@bank", "amount": 250}``
3. Key-value pairs: ``merchant=Rahul Stores; upi=rahul@bank; amount=250``

Text matching none of them is taken as a merchant name. Parsing never raises.
"""

import json
import re
import string
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any
from urllib.parse import parse_qs, quote, urlencode, urlsplit

from upi_sim.models.intent import NameSource, PaymentIntent, derive_display_name
from upi_sim.utils.logging import get_logger


logger = get_logger("upi_sim.parser")


class Dialect(str, Enum):
    """Encoding a scanned payload was read as."""

    EMPTY = "empty"
    INTENT_URL = "intent_url"
    STRUCTURED = "structured"
    KEY_VALUE = "key_value"
    PLAIN_TEXT = "plain_text"


# Intent links look like scheme://pay?... for any URL scheme
PAY_MARKER = "://pay?"
SCHEME_CHARS = frozenset(string.ascii_letters + string.digits + "+.-")

# Synonyms in priority order; the first non-empty one wins
STRUCTURED_KEYS = {
    "merchant_name": ("merchant", "payee", "pn"),
    "payee_id": ("upiId", "pa", "upi"),
    "amount": ("amount", "am"),
}

KEY_VALUE_PATTERNS = {
    "merchant_name": re.compile(r"(?:merchant|pn|payee)[:=]\s*([^;,\n]+)", re.IGNORECASE),
    "payee_id": re.compile(r"(?:upiId|upi|pa)[:=]\s*([^;,\n]+)", re.IGNORECASE),
    "amount": re.compile(r"(?:amount|am)[:=]\s*([^;,\n]+)", re.IGNORECASE),
}

AMOUNT_NOISE_RE = re.compile(r"₹|\brs\.?|\binr\b|[,\s]", re.IGNORECASE)


def parse_amount(text: Any) -> Decimal | None:
    """Read an amount such as ``250``, ``₹1,250.50`` or ``Rs. 99``.

    Returns None for empty or non-numeric text.
    """
    if text is None:
        return None
    cleaned = AMOUNT_NOISE_RE.sub("", str(text))
    if not cleaned:
        return None
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def find_intent_url(raw: str) -> int | None:
    """Return the index where the first ``scheme://pay?`` link starts, or None.

    The scheme is the run of scheme characters before the marker, starting
    at its first ASCII letter.
    """
    marker = raw.find(PAY_MARKER)
    while marker != -1:
        start = marker
        while start > 0 and raw[start - 1] in SCHEME_CHARS:
            start -= 1
        while start < marker and raw[start] not in string.ascii_letters:
            start += 1
        if start < marker:
            return start
        marker = raw.find(PAY_MARKER, marker + 1)
    return None


def detect_dialect(raw: str) -> Dialect:
    """Guess the dialect of a payload from its markers alone."""
    if not raw or not raw.strip():
        return Dialect.EMPTY
    if find_intent_url(raw) is not None:
        return Dialect.INTENT_URL
    if raw.strip().startswith("{"):
        return Dialect.STRUCTURED
    if any(pattern.search(raw) for pattern in KEY_VALUE_PATTERNS.values()):
        return Dialect.KEY_VALUE
    return Dialect.PLAIN_TEXT


def _parse_intent_url(raw: str, start: int) -> dict[str, str]:
    url = raw[start:].splitlines()[0].strip()
    params = parse_qs(urlsplit(url).query, keep_blank_values=True)
    return {
        "payee_id": params.get("pa", [""])[0].strip(),
        "merchant_name": params.get("pn", [""])[0].strip(),
        "amount": params.get("am", [""])[0].strip(),
    }


def _parse_structured(raw: str) -> dict[str, str] | None:
    try:
        obj = json.loads(raw)
    except (ValueError, RecursionError):
        logger.debug("Structured payload is not valid JSON, trying key-value pairs")
        return None
    if not isinstance(obj, dict):
        return None

    fields = {}
    for field, keys in STRUCTURED_KEYS.items():
        fields[field] = ""
        for key in keys:
            value = obj.get(key)
            if value is not None and str(value).strip():
                fields[field] = str(value).strip()
                break
    return fields


def _parse_key_values(raw: str) -> dict[str, str] | None:
    fields = {}
    for field, pattern in KEY_VALUE_PATTERNS.items():
        match = pattern.search(raw)
        fields[field] = match.group(1).strip() if match else ""
    if not any(fields.values()):
        return None
    return fields


def _build_intent(fields: dict[str, str]) -> PaymentIntent:
    merchant_name = fields.get("merchant_name", "")
    payee_id = fields.get("payee_id", "")

    if merchant_name:
        name_source = NameSource.SCANNED
    elif payee_id:
        merchant_name = derive_display_name(payee_id)
        name_source = NameSource.DERIVED
    else:
        name_source = NameSource.NONE

    return PaymentIntent(
        merchant_name=merchant_name,
        payee_id=payee_id,
        amount=parse_amount(fields.get("amount")),
        name_source=name_source,
    )


def parse_with_dialect(raw: str) -> tuple[PaymentIntent, Dialect]:
    """Parse a scanned payload and report which dialect was used."""
    if not raw or not raw.strip():
        return PaymentIntent(), Dialect.EMPTY

    start = find_intent_url(raw)
    if start is not None:
        return _build_intent(_parse_intent_url(raw, start)), Dialect.INTENT_URL

    if raw.strip().startswith("{"):
        fields = _parse_structured(raw.strip())
        if fields is not None:
            return _build_intent(fields), Dialect.STRUCTURED

    fields = _parse_key_values(raw)
    if fields is not None:
        return _build_intent(fields), Dialect.KEY_VALUE

    return PaymentIntent(
        merchant_name=raw.strip(),
        name_source=NameSource.SCANNED,
    ), Dialect.PLAIN_TEXT


def parse(raw: str) -> PaymentIntent:
    """Convert a raw scanned string into a payment intent."""
    intent, _ = parse_with_dialect(raw)
    return intent


def to_intent_url(intent: PaymentIntent, scheme: str = "upi", currency: str = "INR") -> str:
    """Render an intent as a canonical ``upi://pay?...`` string."""
    params = {}
    if intent.payee_id:
        params["pa"] = intent.payee_id
    if intent.merchant_name:
        params["pn"] = intent.merchant_name
    if intent.amount is not None:
        params["am"] = f"{intent.amount:.2f}"
    params["cu"] = currency
    return f"{scheme}://pay?{urlencode(params, quote_via=quote, safe='@')}"
