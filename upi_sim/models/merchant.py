"""Merchant model."""

from pydantic import BaseModel, ConfigDict, Field


class MerchantRecord(BaseModel):
    """A merchant known to the directory."""

    model_config = ConfigDict(frozen=True)

    display_name: str = Field(description="Merchant display name")
    verified: bool = Field(default=True, description="Whether the merchant is verified")
