"""Data-quality validation for cycles and their group details.

The KPI calculators tolerate malformed details: a detail without location is
never attributed, a dangling weight link falls through to the next tier.
This module reports such data so it can be fixed at the source instead of
silently degrading the figures.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd

from farm_kpi.models.cycle import Cycle, GroupDetail


class ValidationSeverity(Enum):
    """Severity levels for validation issues."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class ValidationIssue:
    """Represents a single validation issue.

    Attributes:
        id: Unique identifier for the issue type
        category: Category of validation (e.g., "Location", "Weights")
        severity: Severity level (INFO, WARNING, ERROR, CRITICAL)
        title: Short title describing the issue
        description: Detailed description of the issue
        impact: Explanation of how this affects the KPIs
        fix_guidance: Guidance on how to fix the issue
        affected_data: Optional DataFrame showing affected details
        metadata: Additional metadata about the issue
    """
    id: str
    category: str
    severity: ValidationSeverity
    title: str
    description: str
    impact: str
    fix_guidance: str
    affected_data: Optional[pd.DataFrame] = None
    metadata: Optional[Dict[str, Any]] = None


class ValidationError(Exception):
    """Custom exception for validation errors with context."""

    def __init__(self, message: str, context: Optional[Dict] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with context."""
        msg = f"Data Validation Error: {self.message}"
        if self.context:
            msg += "\n\nContext:"
            for key, value in self.context.items():
                msg += f"\n  {key}: {value}"
        return msg


def _details_frame(details: List[GroupDetail]) -> pd.DataFrame:
    return pd.DataFrame([
        {
            "detail_id": d.id,
            "count": d.count,
            "start_date": d.start_date,
            "end_date": d.end_date,
            "area_id": d.area_id,
            "area_group_id": d.area_group_id,
        }
        for d in details
    ])


def _context_key(issue: ValidationIssue) -> str:
    """Issue id, qualified by the detail for per-detail issues."""
    detail_id = (issue.metadata or {}).get("detail_id")
    return f"{issue.id} [{detail_id}]" if detail_id else issue.id


class CycleValidator:
    """Checks a cycle for data the KPI engine cannot use reliably.

    Validates:
    - Dates: cycle and detail windows
    - Location: every active detail references an area or area group
    - Weights: start-weight links resolve and carry an end weight
    - Groups: start/end group flags are consistent
    """

    def __init__(self, cycle: Cycle):
        """Initialize validator with the cycle to validate.

        Args:
            cycle: Cycle with group details
        """
        self.cycle = cycle
        self.issues: List[ValidationIssue] = []

    def validate_all(self) -> List[ValidationIssue]:
        """Run all validation checks and return list of issues."""
        self.issues = []

        self.check_dates()
        self.check_locations()
        self.check_weight_links()
        self.check_group_flags()
        self.check_inert_details()

        return self.issues

    def check_dates(self):
        """Validate cycle and detail windows."""
        cycle = self.cycle

        if cycle.end_date is not None and cycle.end_date < cycle.start_date:
            self.issues.append(ValidationIssue(
                id="DATE_001",
                category="Dates",
                severity=ValidationSeverity.CRITICAL,
                title="Cycle ends before it starts",
                description=f"Cycle {cycle.id} ends on {cycle.end_date} but starts on {cycle.start_date}.",
                impact="Cycle duration and every per-day figure are meaningless.",
                fix_guidance="Correct the start or end date of the cycle.",
            ))

        inverted = [
            d for d in cycle.active_details
            if d.start_date is not None and d.end_date is not None and d.end_date < d.start_date
        ]
        if inverted:
            self.issues.append(ValidationIssue(
                id="DATE_002",
                category="Dates",
                severity=ValidationSeverity.ERROR,
                title="Group ends before it starts",
                description=f"{len(inverted)} group detail(s) have an end date before their start date.",
                impact="These groups never count as present: no consumption and no headcount.",
                fix_guidance="Correct the timeframe of the listed group details.",
                affected_data=_details_frame(inverted),
            ))

        outside = []
        for d in cycle.active_details:
            if d.start_date is not None and d.start_date < cycle.start_date:
                outside.append(d)
            elif cycle.end_date is not None and d.end_date is not None and d.end_date > cycle.end_date:
                outside.append(d)
        if outside:
            self.issues.append(ValidationIssue(
                id="DATE_003",
                category="Dates",
                severity=ValidationSeverity.WARNING,
                title="Group outside the cycle window",
                description=f"{len(outside)} group detail(s) extend beyond the cycle's dates.",
                impact="Consumption outside the cycle may be counted for these groups.",
                fix_guidance="Align the group timeframe with the cycle or extend the cycle.",
                affected_data=_details_frame(outside),
            ))

    def check_locations(self):
        """Validate that active details reference exactly one location."""
        missing = [d for d in self.cycle.active_details if not d.area_id and not d.area_group_id]
        if missing:
            self.issues.append(ValidationIssue(
                id="LOC_001",
                category="Location",
                severity=ValidationSeverity.ERROR,
                title="Group without area",
                description=f"{len(missing)} group detail(s) reference neither an area nor an area group.",
                impact="No consumption can be attributed to these animals; area metrics skip them.",
                fix_guidance="Assign an area or an area group to each listed detail.",
                affected_data=_details_frame(missing),
            ))

        both = [d for d in self.cycle.active_details if d.area_id and d.area_group_id]
        if both:
            self.issues.append(ValidationIssue(
                id="LOC_002",
                category="Location",
                severity=ValidationSeverity.WARNING,
                title="Group with area and area group",
                description=f"{len(both)} group detail(s) reference both an area and an area group.",
                impact="Area metrics use the area; consumption booked on the group may be missed.",
                fix_guidance="Keep only one location reference per detail.",
                affected_data=_details_frame(both),
            ))

    def check_weight_links(self):
        """Validate start-weight links between details."""
        cycle = self.cycle
        for detail in cycle.details:
            source_id = detail.start_weight_source_detail_id
            if not source_id:
                continue

            if source_id == detail.id:
                self.issues.append(ValidationIssue(
                    id="WEIGHT_001",
                    category="Weights",
                    severity=ValidationSeverity.ERROR,
                    title="Group links start weight to itself",
                    description=f"Detail {detail.id} names itself as start-weight source.",
                    impact="The link is ignored; the start weight falls back to the next tier.",
                    fix_guidance="Link the detail to the group the animals came from.",
                    metadata={"detail_id": detail.id},
                ))
                continue

            source = cycle.get_detail(source_id)
            if source is None:
                self.issues.append(ValidationIssue(
                    id="WEIGHT_002",
                    category="Weights",
                    severity=ValidationSeverity.ERROR,
                    title="Start-weight link to unknown group",
                    description=f"Detail {detail.id} links to detail {source_id}, which is not part of cycle {cycle.id}.",
                    impact="The link is ignored; the start weight falls back to the next tier.",
                    fix_guidance="Link the detail to a group of the same cycle.",
                    metadata={"detail_id": detail.id, "source_detail_id": source_id},
                ))
            elif source.actual_weight_per_animal is None:
                self.issues.append(ValidationIssue(
                    id="WEIGHT_003",
                    category="Weights",
                    severity=ValidationSeverity.WARNING,
                    title="Start-weight source has no end weight",
                    description=f"Detail {detail.id} inherits from detail {source_id}, which has no end weight yet.",
                    impact="The weight chain is incomplete; the start weight falls back to the next tier.",
                    fix_guidance="Enter the end weight of the source group.",
                    metadata={"detail_id": detail.id, "source_detail_id": source_id},
                ))

    def check_group_flags(self):
        """Validate start/end group flags."""
        details = self.cycle.active_details
        has_start = any(d.is_start_group for d in details)
        has_end = any(d.is_end_group for d in details)

        if has_end and not has_start:
            self.issues.append(ValidationIssue(
                id="GROUP_001",
                category="Groups",
                severity=ValidationSeverity.WARNING,
                title="End group without start group",
                description="The cycle marks end groups but no start group.",
                impact="Purchase costs are counted for every priced group while sales use only end groups.",
                fix_guidance="Mark the group(s) in which the animals were bought as start group.",
            ))
        elif has_start and not has_end:
            self.issues.append(ValidationIssue(
                id="GROUP_002",
                category="Groups",
                severity=ValidationSeverity.WARNING,
                title="Start group without end group",
                description="The cycle marks start groups but no end group.",
                impact="Sales revenue is counted for every priced group while purchases use only start groups.",
                fix_guidance="Mark the group(s) from which the animals were sold as end group.",
            ))

    def check_inert_details(self):
        """Report details without animals."""
        inert = [d for d in self.cycle.details if not d.is_active]
        if inert:
            self.issues.append(ValidationIssue(
                id="INFO_001",
                category="Groups",
                severity=ValidationSeverity.INFO,
                title="Groups without animals",
                description=f"{len(inert)} group detail(s) have a count of 0.",
                impact="These details are ignored in every calculation.",
                fix_guidance="Remove the details or enter the animal count.",
                affected_data=_details_frame(inert),
            ))

    def issues_by_severity(self, severity: ValidationSeverity) -> List[ValidationIssue]:
        """Issues of one severity level."""
        return [i for i in self.issues if i.severity == severity]

    def get_summary_stats(self) -> Dict[str, Any]:
        """Get summary statistics of validation results.

        Returns:
            Dictionary with counts by severity and category
        """
        stats = {
            'total_issues': len(self.issues),
            'by_severity': {
                severity.value: len(self.issues_by_severity(severity))
                for severity in ValidationSeverity
            },
            'by_category': {}
        }
        for issue in self.issues:
            stats['by_category'][issue.category] = stats['by_category'].get(issue.category, 0) + 1
        return stats

    def has_errors(self) -> bool:
        """Check if any errors or critical issues exist."""
        return any(i.severity in [ValidationSeverity.ERROR, ValidationSeverity.CRITICAL]
                   for i in self.issues)

    def raise_for_errors(self) -> None:
        """Raise ValidationError if any errors or critical issues exist."""
        if not self.issues:
            self.validate_all()
        if self.has_errors():
            blocking = [i for i in self.issues
                        if i.severity in [ValidationSeverity.ERROR, ValidationSeverity.CRITICAL]]
            raise ValidationError(
                f"Cycle {self.cycle.id} has {len(blocking)} blocking data issue(s)",
                context={_context_key(issue): issue.title for issue in blocking},
            )
