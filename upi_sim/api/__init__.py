"""API module - HTTP interface of the payment service."""

from .app import create_app

__all__ = ["create_app"]
