"""Permit documents - version ledger and HTTP endpoints."""

from .ledger import DocumentVersionLedger

__all__ = ["DocumentVersionLedger"]
