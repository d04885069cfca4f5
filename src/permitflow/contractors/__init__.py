"""Contractors - companies performing permitted work."""

from .service import ContractorService

__all__ = ["ContractorService"]
