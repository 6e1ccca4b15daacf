"""Data module - transaction ledger and merchant directory."""

from .ledger import Ledger
from .merchants import MerchantDirectory, MERCHANTS, is_valid_upi_id

__all__ = ["Ledger", "MerchantDirectory", "MERCHANTS", "is_valid_upi_id"]
