"""Task automation - rule table and engine."""

from .rules import (
    AutomationRule,
    AutomationRuleRegistry,
    TaskTemplate,
    DEFAULT_RULES,
    SEND_TO_BILLING,
)
from .engine import TaskAutomationEngine

__all__ = [
    "AutomationRule",
    "AutomationRuleRegistry",
    "TaskTemplate",
    "DEFAULT_RULES",
    "SEND_TO_BILLING",
    "TaskAutomationEngine",
]
