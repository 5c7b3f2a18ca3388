"""
Action Item Generator

Groups findings into at most three prioritized, dated action items.
"""

from datetime import datetime
from typing import List

from compliance_engine.models import (
    ActionItem,
    DetailedFinding,
    FindingCategory,
    Priority,
    Severity,
)
from compliance_engine.utils import add_days


class ActionItemGenerator:

    def generate(self, findings: List[DetailedFinding], reference_time: datetime) -> List[ActionItem]:
        items: List[ActionItem] = []

        critical = [f for f in findings if f.severity == Severity.CRITICAL]
        major = [f for f in findings if f.severity == Severity.MAJOR]

        def _next_id() -> str:
            return f"action-{len(items) + 1}"

        critical_item_id = None
        if critical:
            critical_item_id = _next_id()
            items.append(ActionItem(
                id=critical_item_id,
                title="Address Critical Compliance Issues",
                description=f"Resolve {len(critical)} critical compliance issues",
                priority=Priority.CRITICAL,
                category="compliance",
                assigned_to="Design Team Lead",
                due_date=add_days(reference_time, 7),
                estimated_hours=len(critical) * 4,
                related_findings=[f.id for f in critical],
            ))

        if major:
            items.append(ActionItem(
                id=_next_id(),
                title="Resolve Major Issues",
                description=f"Address {len(major)} major compliance issues",
                priority=Priority.HIGH,
                category="compliance",
                assigned_to="Design Team",
                due_date=add_days(reference_time, 14),
                estimated_hours=len(major) * 2,
                dependencies=[critical_item_id] if critical_item_id else [],
                related_findings=[f.id for f in major],
            ))

        if findings:
            items.append(ActionItem(
                id=_next_id(),
                title="Quality Review and Documentation",
                description="Comprehensive quality review of submittal documentation",
                priority=Priority.MEDIUM,
                category=FindingCategory.QUALITY_CONTROL.value,
                assigned_to="Quality Reviewer",
                due_date=add_days(reference_time, 21),
                estimated_hours=8,
                related_findings=[f.id for f in findings],
            ))

        return items
