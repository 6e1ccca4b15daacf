"""Structured audit logging with PII redaction."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from upi_sim.utils.pii import mask_amount, mask_pii, mask_upi_id, redact_for_logging


def get_logger(name: str, level: str = "INFO") -> logging.Logger:
    """Get a configured logger instance."""
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(getattr(logging, level.upper()))
    return logger


class AuditLogger:
    """Audit logger for the payment flow with PII protection.

    Entries are appended to a daily JSONL file. When ``enabled`` is False
    only the stderr logger is used.
    """

    def __init__(
        self,
        log_dir: Path | None = None,
        enabled: bool = True,
        level: str = "INFO",
        use_presidio: bool = True,
    ):
        self.log_dir = log_dir or Path("logs")
        self.enabled = enabled
        self.use_presidio = use_presidio
        if self.enabled:
            self.log_dir.mkdir(parents=True, exist_ok=True)
        self._logger = get_logger("upi_sim.audit", level)

    def _get_log_file(self) -> Path:
        """Get the current audit log file path."""
        date_str = datetime.now().strftime("%Y-%m-%d")
        return self.log_dir / f"audit_{date_str}.jsonl"

    def _write_entry(self, entry: dict):
        """Write an audit entry to the log file."""
        if not self.enabled:
            return
        entry["timestamp"] = datetime.now().isoformat()

        with open(self._get_log_file(), "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, default=str) + "\n")

    def log_scan(self, raw: str, dialect: str, intent: dict[str, Any]):
        """Log a parsed QR payload."""
        entry = {
            "event": "scan",
            "dialect": dialect,
            "raw_length": len(raw),
            "raw_preview": mask_pii(raw[:120], self.use_presidio),
            "intent": redact_for_logging(intent, self.use_presidio),
        }
        self._write_entry(entry)
        self._logger.debug(f"Scanned payload parsed as {dialect}")

    def log_submission(self, payee_id: str, amount: Any):
        """Log a payment submission before resolution starts."""
        entry = {
            "event": "submission",
            "payee_id": mask_upi_id(payee_id),
            "amount": mask_amount(amount),
        }
        self._write_entry(entry)
        self._logger.info(f"Payment submitted to {mask_upi_id(payee_id) or 'unnamed payee'}")

    def log_validation_failure(self, reason: str):
        """Log an intent rejected before resolution."""
        entry = {
            "event": "validation_failure",
            "reason": reason,
        }
        self._write_entry(entry)
        self._logger.info(f"Payment rejected: {reason}")

    def log_fallback(self, reason: str):
        """Log a switch from the remote service to local resolution."""
        entry = {
            "event": "fallback",
            "reason": mask_pii(reason, self.use_presidio),
        }
        self._write_entry(entry)
        self._logger.warning(
            f"Remote payment service unavailable, resolving locally: {entry['reason']}"
        )

    def log_resolution(self, source: str, transaction_id: str, status: str):
        """Log a settled payment."""
        entry = {
            "event": "resolution",
            "source": source,
            "transaction_id": transaction_id,
            "status": status,
        }
        self._write_entry(entry)
        self._logger.info(f"Transaction {transaction_id} resolved {status} ({source})")

    def log_internal_error(self, details: str):
        """Log a fatal invariant violation."""
        entry = {
            "event": "internal_error",
            "details": mask_pii(details, self.use_presidio),
        }
        self._write_entry(entry)
        self._logger.error(f"Internal error: {entry['details']}")
