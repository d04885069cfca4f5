"""Automation rules - status transitions mapped to task templates.

A rule says "when a permit moves from `from_status` to `to_status`, make sure
a task built from `template` exists". `from_status=None` matches any source
status. New rules are registered on an AutomationRuleRegistry; the lifecycle
manager never needs to change when rules are added.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..domain.permits import PermitStatus
from ..domain.tasks import TaskPriority, TaskStatus


@dataclass(frozen=True)
class TaskTemplate:
    """Blueprint for an automatically created task.

    `key` identifies the template per permit; it is stored on the task as
    automation_key and is what the uniqueness constraint is enforced on.
    """
    key: str
    name: str
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.NOT_STARTED


@dataclass(frozen=True)
class AutomationRule:
    """Maps a status transition to a task template."""
    to_status: PermitStatus
    template: TaskTemplate
    from_status: Optional[PermitStatus] = None  # None matches any source

    @property
    def name(self) -> str:
        source = self.from_status.value if self.from_status else "*"
        return f"{source}->{self.to_status.value}:{self.template.key}"

    def matches(self, old_status: PermitStatus, new_status: PermitStatus) -> bool:
        if new_status != self.to_status:
            return False
        return self.from_status is None or self.from_status == old_status


SEND_TO_BILLING = TaskTemplate(
    key="send_to_billing",
    name="Send to Billing",
    description="Permit approved - send to billing department",
    priority=TaskPriority.HIGH,
)


DEFAULT_RULES: Tuple[AutomationRule, ...] = (
    AutomationRule(to_status=PermitStatus.APPROVED, template=SEND_TO_BILLING),
)


RuleKey = Tuple[Optional[PermitStatus], PermitStatus]


class AutomationRuleRegistry:
    """Registry of automation rules keyed by (from_status, to_status).

    Usage:
        registry = AutomationRuleRegistry()  # ships with DEFAULT_RULES
        registry.register(AutomationRule(
            from_status=PermitStatus.ISSUED,
            to_status=PermitStatus.INSPECTIONS,
            template=TaskTemplate(key="schedule_inspection", name="Schedule inspection"),
        ))

        for rule in registry.rules_for(old, new):
            ...

    Registries are plain instances so tests and hosts can build their own
    rule tables without touching global state.
    """

    def __init__(self, rules: Optional[List[AutomationRule]] = None):
        self._rules: Dict[RuleKey, List[AutomationRule]] = {}
        for rule in DEFAULT_RULES if rules is None else rules:
            self.register(rule)

    def register(self, rule: AutomationRule) -> None:
        """Add a rule.

        Raises:
            ValueError: If a rule with the same transition and template key
                is already registered (prevents accidental override)
        """
        bucket = self._rules.setdefault((rule.from_status, rule.to_status), [])
        if any(existing.template.key == rule.template.key for existing in bucket):
            raise ValueError(f"Automation rule '{rule.name}' is already registered")
        bucket.append(rule)

    def unregister(self, rule: AutomationRule) -> None:
        """Remove a rule (mainly useful in tests)."""
        bucket = self._rules.get((rule.from_status, rule.to_status), [])
        if rule in bucket:
            bucket.remove(rule)

    def rules_for(
        self,
        old_status: PermitStatus,
        new_status: PermitStatus,
    ) -> List[AutomationRule]:
        """Rules triggered by old_status -> new_status.

        Exact-source rules come first, then wildcard rules.
        """
        exact = self._rules.get((old_status, new_status), [])
        wildcard = self._rules.get((None, new_status), [])
        return [rule for rule in exact + wildcard if rule.matches(old_status, new_status)]

    def list_rules(self) -> List[AutomationRule]:
        return [rule for bucket in self._rules.values() for rule in bucket]
