"""Customers - property owners permits are filed for."""

from .service import CustomerService

__all__ = ["CustomerService"]
