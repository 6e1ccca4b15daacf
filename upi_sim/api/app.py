"""FastAPI application for the simulated payment-resolution service."""

import random
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from upi_sim import __version__
from upi_sim.config import settings
from upi_sim.data.ledger import Ledger
from upi_sim.data.merchants import MerchantDirectory, is_valid_upi_id
from upi_sim.errors import InternalError, MissingPayee, TransactionNotFound, ValidationError
from upi_sim.payments.parser import parse_with_dialect, to_intent_url
from upi_sim.payments.resolver import TransactionResolver
from upi_sim.payments.validation import intent_from_entry, validate_intent
from upi_sim.utils.logging import AuditLogger, get_logger


logger = get_logger("upi_sim.api", settings.log_level)

Amount = str | float | int | None

# QR codes top out at a few KB of payload
MAX_QR_DATA_LENGTH = 4096


class GenerateQrRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    merchant_name: str | None = Field(default=None, alias="merchantName")
    upi_id: str | None = Field(default=None, alias="upiId")
    amount: Amount = None


class ScanQrRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    upi_id: str | None = Field(default=None, alias="upiId")
    qr_data: str | None = Field(default=None, alias="qrData", max_length=MAX_QR_DATA_LENGTH)


class ValidateUpiRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    upi_id: str | None = Field(default=None, alias="upiId")


class PayRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: Amount = None
    payee_name: str | None = Field(default=None, alias="payeeName")
    upi_id: str | None = Field(default=None, alias="upiId")


def _failed(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "FAILED", "message": message})


def create_app(
    ledger: Ledger | None = None,
    directory: MerchantDirectory | None = None,
    resolver: TransactionResolver | None = None,
    audit: AuditLogger | None = None,
) -> FastAPI:
    """Build the payment API around an explicit ledger and directory."""
    if ledger is None:
        ledger = resolver.ledger if resolver is not None else Ledger()
    if directory is None:
        directory = MerchantDirectory()
    if resolver is None:
        resolver = TransactionResolver(ledger, random.Random(settings.random_seed))
    audit = audit or AuditLogger(
        log_dir=settings.log_dir,
        enabled=settings.audit_enabled,
        level=settings.log_level,
        use_presidio=settings.pii_use_presidio,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting payment service with {len(directory)} known merchants")
        yield
        logger.info(f"Payment service stopped, {len(ledger)} transactions recorded")

    app = FastAPI(
        title="UPI Pay Simulator",
        description="Simulated UPI payment-resolution service",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.ledger = ledger
    app.state.directory = directory
    app.state.resolver = resolver

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        audit.log_validation_failure(exc.message)
        return _failed(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        return _failed(400, "Invalid request body")

    @app.exception_handler(TransactionNotFound)
    async def not_found_handler(request: Request, exc: TransactionNotFound):
        return _failed(404, "not found")

    @app.exception_handler(InternalError)
    async def internal_error_handler(request: Request, exc: InternalError):
        audit.log_internal_error(exc.message)
        return _failed(500, "Payment could not be completed")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": "upi-pay-simulator",
            "transactions": len(ledger),
        }

    @app.post("/generate-qr")
    async def generate_qr(body: GenerateQrRequest) -> dict[str, Any]:
        """Render a payment intent as a QR payload string."""
        intent = intent_from_entry(
            merchant_name=body.merchant_name or settings.default_merchant_name,
            amount=body.amount,
            payee_id=body.upi_id or settings.default_upi_id,
        )
        return {
            "status": "SUCCESS",
            "qrData": to_intent_url(intent),
            "details": {
                "payeeName": intent.merchant_name,
                "upiId": intent.payee_id,
                "amount": str(intent.amount) if intent.amount is not None else None,
            },
        }

    @app.post("/scan-qr")
    async def scan_qr(body: ScanQrRequest) -> dict[str, Any]:
        """Resolve a scanned payload or UPI ID to a payee."""
        if body.qr_data:
            intent, dialect = parse_with_dialect(body.qr_data)
            audit.log_scan(body.qr_data, dialect.value, intent.model_dump(mode="json"))
            intent = directory.enrich(intent)
            payee_name, upi_id, verified = intent.display_name, intent.payee_id, intent.verified
            amount = str(intent.amount) if intent.amount is not None else None
        elif body.upi_id and body.upi_id.strip():
            upi_id = body.upi_id.strip()
            payee_name, verified = directory.describe(upi_id)
            amount = None
        else:
            raise MissingPayee("Provide a UPI ID or QR data to scan")

        return {
            "status": "SUCCESS",
            "payeeName": payee_name,
            "upiId": upi_id,
            "verified": verified,
            "amount": amount,
        }

    @app.post("/validate-upi")
    async def validate_upi(body: ValidateUpiRequest) -> dict[str, Any]:
        """Check the shape of a UPI ID and look up its merchant."""
        if not is_valid_upi_id(body.upi_id or ""):
            return {"status": "INVALID", "message": "UPI ID must look like name@bank"}

        name, verified = directory.describe(body.upi_id)
        return {"status": "VALID", "payeeName": name, "verified": verified}

    @app.post("/pay")
    async def pay(body: PayRequest) -> dict[str, Any]:
        """Settle a payment and record it."""
        if not (body.payee_name or "").strip():
            raise MissingPayee("payeeName is required")

        intent = validate_intent(intent_from_entry(
            merchant_name=body.payee_name,
            amount=body.amount,
            payee_id=body.upi_id or "",
        ))
        txn = resolver.resolve(intent)
        audit.log_resolution("local", txn.transaction_id, txn.status.value)

        return {
            "message": "Demo UPI transaction simulated",
            **txn.to_wire_dict(),
        }

    @app.get("/transaction/{transaction_id}")
    async def get_transaction(transaction_id: str) -> dict[str, Any]:
        """Get a recorded transaction by ID."""
        return ledger.get(transaction_id).to_wire_dict()

    @app.get("/transactions")
    async def list_transactions() -> dict[str, Any]:
        """List recorded transactions in the order they were made."""
        return {
            "status": "SUCCESS",
            "transactions": [txn.to_wire_dict() for txn in ledger.list()],
        }

    return app
