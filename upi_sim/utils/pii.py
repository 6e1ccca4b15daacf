"""PII masking utilities for payment logs."""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from presidio_analyzer import AnalyzerEngine, RecognizerResult
from presidio_anonymizer import AnonymizerEngine
from presidio_anonymizer.entities import OperatorConfig


# Initialize Presidio engines (lazy loading)
_analyzer: Optional[AnalyzerEngine] = None
_anonymizer: Optional[AnonymizerEngine] = None


def _get_analyzer() -> AnalyzerEngine:
    """Get or create the Presidio analyzer engine."""
    global _analyzer
    if _analyzer is None:
        _analyzer = AnalyzerEngine()
    return _analyzer


def _get_anonymizer() -> AnonymizerEngine:
    """Get or create the Presidio anonymizer engine."""
    global _anonymizer
    if _anonymizer is None:
        _anonymizer = AnonymizerEngine()
    return _anonymizer


# Personal entity types the NLP pass looks for
PAYER_ENTITIES = [
    "PERSON",
    "PHONE_NUMBER",
    "EMAIL_ADDRESS",
    "CREDIT_CARD",
    "IBAN_CODE",
    "LOCATION",
]

PRESIDIO_OPERATORS = {
    "PERSON": OperatorConfig("replace", {"new_value": "[REDACTED_PERSON]"}),
    "PHONE_NUMBER": OperatorConfig("replace", {"new_value": "[REDACTED_PHONE]"}),
    "EMAIL_ADDRESS": OperatorConfig("replace", {"new_value": "[REDACTED_EMAIL]"}),
    "CREDIT_CARD": OperatorConfig("replace", {"new_value": "[REDACTED_CREDIT_CARD]"}),
    "IBAN_CODE": OperatorConfig("replace", {"new_value": "[REDACTED_IBAN]"}),
    "LOCATION": OperatorConfig("replace", {"new_value": "[REDACTED_LOCATION]"}),
    "DEFAULT": OperatorConfig("replace", {"new_value": "[REDACTED]"}),
}

# name@handle, with the handle allowed to omit a dot (rahul@okaxis)
UPI_ID_PATTERN = re.compile(r'\b([A-Za-z0-9._-]+)@([A-Za-z][A-Za-z0-9.-]*)\b')

SENSITIVE_FIELDS = {
    "upi_id", "upiid", "payee_id", "pa", "phone", "pin", "upi_pin",
    "account_number", "token", "secret",
}


def mask_upi_id(upi_id: str) -> str:
    """Mask a UPI ID, keeping the first two characters and the handle.

    ``9876543210@ybl`` becomes ``98********@ybl``.
    """
    if not upi_id:
        return ""
    local, sep, handle = upi_id.partition("@")
    visible = local[:2]
    return f"{visible}{'*' * max(len(local) - 2, 0)}{sep}{handle}"


def mask_amount(amount: Decimal | float | str | None, currency_symbol: str = "₹") -> str:
    """Mask an amount for logging, showing only decimal places."""
    if amount is None:
        return f"{currency_symbol}**.XX"
    if isinstance(amount, str):
        try:
            amount = Decimal(amount)
        except InvalidOperation:
            return f"{currency_symbol}**.XX"
    return f"{currency_symbol}**.{int(amount * 100) % 100:02d}"


def _mask_pii_regex(text: str) -> str:
    """Apply rule-based regex masking for common PII patterns.

    Masks:
    - UPI IDs (name@handle)
    - Indian mobile numbers (10 digits starting 6-9, optional +91)
    - Bank account numbers (9-18 digits)
    """
    text = UPI_ID_PATTERN.sub(lambda m: mask_upi_id(m.group(0)), text)

    # Mobile numbers
    text = re.sub(
        r'(?<!\d)(?:\+91[-\s]?)?[6-9]\d{9}(?!\d)',
        '[REDACTED_PHONE]',
        text
    )

    # Bank account numbers
    text = re.sub(
        r'\b\d{9,18}\b',
        '[REDACTED_ACCOUNT]',
        text
    )

    return text


def _mask_pii_presidio(text: str) -> str:
    """Apply Microsoft Presidio-based PII detection and anonymization.

    Catches what the regex pass cannot, such as payer names.
    """
    analyzer = _get_analyzer()
    anonymizer = _get_anonymizer()

    results: list[RecognizerResult] = analyzer.analyze(
        text=text,
        entities=PAYER_ENTITIES,
        language="en",
    )

    if not results:
        return text

    anonymized = anonymizer.anonymize(
        text=text,
        analyzer_results=results,
        operators=PRESIDIO_OPERATORS,
    )

    return anonymized.text


def mask_pii(text: str, use_presidio: bool = True) -> str:
    """Mask PII in free text such as raw scanned payloads.

    UPI IDs, phone and account numbers are masked by regex first; Presidio
    then picks up names and other entities.

    Args:
        text: The text to redact PII from.
        use_presidio: Whether to apply Presidio detection after regex.
            Set to False when the spaCy model is not installed.

    Returns:
        Text with PII redacted.
    """
    if not text:
        return text

    masked_text = _mask_pii_regex(text)

    if use_presidio:
        masked_text = _mask_pii_presidio(masked_text)

    return masked_text


def redact_for_logging(data: dict, use_presidio: bool = True) -> dict:
    """Redact sensitive fields from a dictionary for logging."""
    redacted = {}
    for key, value in data.items():
        if key.lower() in SENSITIVE_FIELDS:
            if isinstance(value, str) and "@" in value:
                redacted[key] = mask_upi_id(value)
            else:
                redacted[key] = "[REDACTED]"
        elif key.lower() == "amount":
            redacted[key] = mask_amount(value) if value not in (None, "") else value
        elif isinstance(value, dict):
            redacted[key] = redact_for_logging(value, use_presidio)
        elif isinstance(value, list):
            redacted[key] = [
                redact_for_logging(v, use_presidio) if isinstance(v, dict) else v
                for v in value
            ]
        elif isinstance(value, str):
            redacted[key] = mask_pii(value, use_presidio)
        else:
            redacted[key] = value

    return redacted
