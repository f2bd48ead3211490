"""Tests for population and duration calculations."""

import pytest
from datetime import date

from farm_kpi.calculations import (
    FixedClock,
    PopulationEntry,
    animal_days,
    cycle_duration,
    detail_window,
    max_simultaneous,
    total_animals_from_details,
)
from farm_kpi.models import Cycle, GroupDetail


class TestMaxSimultaneous:
    """Tests for max_simultaneous."""

    def test_sequential_transfer_not_double_counted(self):
        """Animals moving from one group to the next are counted once."""
        entries = [
            PopulationEntry(100, date(2025, 1, 1), date(2025, 1, 31)),
            PopulationEntry(100, date(2025, 2, 1), date(2025, 2, 28)),
        ]
        assert max_simultaneous(entries, date(2025, 1, 1)) == 100

    def test_split_into_parallel_groups(self):
        """A split into two parallel groups keeps the initial headcount."""
        entries = [
            PopulationEntry(100, date(2025, 1, 1), date(2025, 1, 31)),
            PopulationEntry(50, date(2025, 2, 1), date(2025, 3, 31)),
            PopulationEntry(50, date(2025, 2, 1), date(2025, 3, 31)),
        ]
        assert max_simultaneous(entries, date(2025, 1, 1), date(2025, 3, 31)) == 100

    def test_overlapping_groups_are_summed(self):
        """Groups present at the same time add up."""
        entries = [
            PopulationEntry(60, date(2025, 1, 1), date(2025, 1, 20)),
            PopulationEntry(40, date(2025, 1, 10), date(2025, 1, 31)),
        ]
        assert max_simultaneous(entries, date(2025, 1, 1)) == 100

    def test_shared_boundary_day_overlaps(self):
        """Windows are inclusive: a shared boundary day counts both groups."""
        entries = [
            PopulationEntry(30, date(2025, 1, 1), date(2025, 1, 15)),
            PopulationEntry(20, date(2025, 1, 15), date(2025, 1, 31)),
        ]
        assert max_simultaneous(entries, date(2025, 1, 1)) == 50

    def test_no_dates_sums_all(self):
        """Without any dates full overlap is assumed."""
        entries = [PopulationEntry(30), PopulationEntry(20)]
        assert max_simultaneous(entries, date(2025, 1, 1)) == 50

    def test_zero_and_negative_counts_ignored(self):
        """Entries with count <= 0 never contribute."""
        entries = [
            PopulationEntry(0, date(2025, 1, 1), date(2025, 1, 31)),
            PopulationEntry(-5, date(2025, 1, 1), date(2025, 1, 31)),
            PopulationEntry(10, date(2025, 1, 1), date(2025, 1, 31)),
        ]
        assert max_simultaneous(entries, date(2025, 1, 1)) == 10

    def test_empty(self):
        """No entries means no animals."""
        assert max_simultaneous([], date(2025, 1, 1)) == 0

    def test_none_rejected(self):
        """None is a contract violation, not an empty collection."""
        with pytest.raises(ValueError):
            max_simultaneous(None, date(2025, 1, 1))

    def test_open_start_uses_window_start(self):
        """A missing start date falls back to the window start."""
        entries = [
            PopulationEntry(40, None, date(2025, 1, 10)),
            PopulationEntry(60, date(2025, 1, 5), None),
        ]
        assert max_simultaneous(entries, date(2025, 1, 1)) == 100


class TestDurations:
    """Tests for cycle duration, detail windows and animal-days."""

    def test_cycle_duration_inclusive(self):
        """Jan 1 to Jan 30 lasts 30 days."""
        assert cycle_duration(date(2025, 1, 1), date(2025, 1, 30)) == 30

    def test_single_day_cycle(self):
        """Start equals end lasts one day."""
        assert cycle_duration(date(2025, 1, 1), date(2025, 1, 1)) == 1

    def test_ongoing_cycle_uses_clock(self):
        """Open cycles are measured up to today."""
        clock = FixedClock(date(2025, 1, 10))
        assert cycle_duration(date(2025, 1, 1), None, clock) == 10

    def test_detail_window_fallbacks(self):
        """Missing detail dates fall back to the cycle, then to today."""
        clock = FixedClock(date(2025, 2, 15))
        cycle = Cycle(id="C", start_date=date(2025, 1, 1))
        detail = GroupDetail(count=10)
        assert detail_window(detail, cycle, clock) == (date(2025, 1, 1), date(2025, 2, 15))

        closed = cycle.model_copy(update={"end_date": date(2025, 1, 31)})
        assert detail_window(detail, closed, clock) == (date(2025, 1, 1), date(2025, 1, 31))

    def test_animal_days(self):
        """Animal-days are count times inclusive days present."""
        cycle = Cycle(id="C", start_date=date(2025, 1, 1), end_date=date(2025, 1, 31))
        details = [
            GroupDetail(count=10, start_date=date(2025, 1, 1), end_date=date(2025, 1, 10)),
            GroupDetail(count=5, start_date=date(2025, 1, 11), end_date=date(2025, 1, 20)),
            GroupDetail(count=0, start_date=date(2025, 1, 1), end_date=date(2025, 1, 31)),
        ]
        assert animal_days(details, cycle) == 10 * 10 + 5 * 10

    def test_total_animals_from_details(self, moving_cycle):
        """Headcount of the moving cycle is the rearing group size."""
        assert total_animals_from_details(moving_cycle.details, moving_cycle) == 100
