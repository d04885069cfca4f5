"""Contractors domain module - contact method enum, command types"""

from .commands import ContactMethod, CreateContractorCommand, UpdateContractorCommand

__all__ = ["ContactMethod", "CreateContractorCommand", "UpdateContractorCommand"]
