"""Customers domain module - command types"""

from .commands import CreateCustomerCommand, UpdateCustomerCommand

__all__ = ["CreateCustomerCommand", "UpdateCustomerCommand"]
