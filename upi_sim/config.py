"""Configuration module using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class RemoteConfig(BaseModel):
    # Remote payment-resolution service
    enabled: bool = Field(
        default=True, description="Try the remote payment service before resolving locally"
    )
    base_url: str = Field(
        default="http://localhost:5000", description="Base URL of the remote payment service"
    )
    timeout_seconds: float = Field(
        default=3.0, description="Call-level timeout for remote requests"
    )

class LatencyConfig(BaseModel):
    # Perceived processing time
    min_latency_seconds: float = Field(
        default=1.5, description="Minimum time before a payment outcome is revealed"
    )

class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    remote: RemoteConfig = RemoteConfig()

    latency: LatencyConfig = LatencyConfig()

    # Resilience Settings
    circuit_breaker_threshold: int = Field(
        default=3, description="Remote failures before the circuit breaker opens"
    )
    circuit_breaker_recovery_seconds: float = Field(
        default=30.0, description="Seconds before an open circuit is probed again"
    )

    # Outcome randomness
    random_seed: int | None = Field(
        default=None, description="Seed for the outcome random source (None for system entropy)"
    )

    # Display defaults
    currency_symbol: str = Field(default="₹", description="Currency symbol for display")
    default_merchant_name: str = Field(
        default="Demo Merchant", description="Merchant used when generating a demo QR"
    )
    default_upi_id: str = Field(
        default="demo@upi", description="UPI ID used when generating a demo QR"
    )

    # API server
    api_host: str = Field(default="127.0.0.1", description="Host for the payment API")
    api_port: int = Field(default=5000, description="Port for the payment API")

    # Paths
    log_dir: Path = Field(default=Path("logs"), description="Directory for audit logs")
    log_level: str = Field(default="INFO", description="Logging level")
    audit_enabled: bool = Field(default=True, description="Write JSONL audit entries")
    pii_use_presidio: bool = Field(
        default=True, description="Run Presidio NLP masking after the regex pass (needs the spaCy model)"
    )


# Global settings instance
settings = Settings()
