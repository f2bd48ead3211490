"""Tests for cycle data validation."""

import pytest
from datetime import date

from farm_kpi.models import Cycle, GroupDetail
from farm_kpi.validation import (
    CycleValidator,
    ValidationError,
    ValidationSeverity,
)


def issue_ids(issues):
    return {issue.id for issue in issues}


class TestCycleValidator:
    """Tests for CycleValidator checks."""

    def test_clean_cycle(self, moving_cycle):
        """A consistent cycle produces no issues."""
        validator = CycleValidator(moving_cycle)
        assert validator.validate_all() == []
        assert not validator.has_errors()
        validator.raise_for_errors()

    def test_inverted_cycle_dates(self):
        """A cycle ending before its start is critical."""
        cycle = Cycle(id="C", start_date=date(2025, 2, 1), end_date=date(2025, 1, 1))
        issues = CycleValidator(cycle).validate_all()
        assert "DATE_001" in issue_ids(issues)
        assert issues[0].severity == ValidationSeverity.CRITICAL

    def test_detail_date_issues(self):
        """Inverted details and details outside the cycle are reported."""
        cycle = Cycle(
            id="C",
            start_date=date(2025, 1, 1),
            end_date=date(2025, 1, 31),
            details=[
                GroupDetail(id="D1", count=10, area_id="A1",
                            start_date=date(2025, 1, 20), end_date=date(2025, 1, 10)),
                GroupDetail(id="D2", count=10, area_id="A2",
                            start_date=date(2024, 12, 20), end_date=date(2025, 1, 10)),
            ],
        )
        validator = CycleValidator(cycle)
        issues = {i.id: i for i in validator.validate_all()}
        assert issues["DATE_002"].severity == ValidationSeverity.ERROR
        assert list(issues["DATE_002"].affected_data["detail_id"]) == ["D1"]
        assert issues["DATE_003"].severity == ValidationSeverity.WARNING
        assert list(issues["DATE_003"].affected_data["detail_id"]) == ["D2"]

    def test_location_issues(self):
        """Details need exactly one location reference."""
        cycle = Cycle(
            id="C",
            start_date=date(2025, 1, 1),
            details=[
                GroupDetail(id="D1", count=10),
                GroupDetail(id="D2", count=10, area_id="A1", area_group_id="G1"),
                GroupDetail(id="D3", count=0),
            ],
        )
        validator = CycleValidator(cycle)
        ids = issue_ids(validator.validate_all())
        assert {"LOC_001", "LOC_002", "INFO_001"} <= ids
        assert validator.has_errors()

    def test_weight_link_issues(self):
        """Self links, dangling links and sources without end weight are reported."""
        cycle = Cycle(
            id="C",
            start_date=date(2025, 1, 1),
            details=[
                GroupDetail(id="D1", count=10, area_id="A1"),
                GroupDetail(id="D2", count=10, area_id="A2", start_weight_source_detail_id="D2"),
                GroupDetail(id="D3", count=10, area_id="A3", start_weight_source_detail_id="X"),
                GroupDetail(id="D4", count=10, area_id="A4", start_weight_source_detail_id="D1"),
            ],
        )
        issues = {i.id: i for i in CycleValidator(cycle).validate_all()}
        assert issues["WEIGHT_001"].metadata["detail_id"] == "D2"
        assert issues["WEIGHT_002"].metadata["source_detail_id"] == "X"
        assert issues["WEIGHT_003"].severity == ValidationSeverity.WARNING

    def test_group_flag_issues(self):
        """One-sided start/end flags are warnings."""
        only_end = Cycle(
            id="C",
            start_date=date(2025, 1, 1),
            details=[GroupDetail(id="D1", count=10, area_id="A1", is_end_group=True)],
        )
        validator = CycleValidator(only_end)
        assert issue_ids(validator.validate_all()) == {"GROUP_001"}
        assert not validator.has_errors()

    def test_summary_stats(self):
        """Summary counts issues by severity and category."""
        cycle = Cycle(
            id="C",
            start_date=date(2025, 1, 1),
            details=[GroupDetail(id="D1", count=10), GroupDetail(id="D2", count=0)],
        )
        validator = CycleValidator(cycle)
        validator.validate_all()
        stats = validator.get_summary_stats()
        assert stats["total_issues"] == 2
        assert stats["by_severity"]["error"] == 1
        assert stats["by_severity"]["info"] == 1
        assert stats["by_category"] == {"Location": 1, "Groups": 1}

    def test_raise_for_errors(self):
        """Blocking issues raise with their ids as context."""
        cycle = Cycle(id="C", start_date=date(2025, 1, 1), details=[GroupDetail(id="D1", count=10)])
        with pytest.raises(ValidationError) as excinfo:
            CycleValidator(cycle).raise_for_errors()
        assert "LOC_001" in excinfo.value.context
        assert "Cycle C" in str(excinfo.value)

    def test_raise_for_errors_lists_every_detail(self):
        """Repeated issue types are listed once per affected detail."""
        cycle = Cycle(
            id="C",
            start_date=date(2025, 1, 1),
            details=[
                GroupDetail(id="D1", count=10, area_id="A1", start_weight_source_detail_id="X"),
                GroupDetail(id="D2", count=10, area_id="A2", start_weight_source_detail_id="Y"),
            ],
        )
        with pytest.raises(ValidationError) as excinfo:
            CycleValidator(cycle).raise_for_errors()
        assert set(excinfo.value.context) == {"WEIGHT_002 [D1]", "WEIGHT_002 [D2]"}
        assert "2 blocking data issue(s)" in str(excinfo.value)
        assert str(excinfo.value).count("WEIGHT_002") == 2
