"""Tests for area and area-group metrics."""

import pytest
from datetime import date

from farm_kpi.calculations import (
    AllocationBasis,
    AreaMetricsCalculator,
    CostAllocationStrategy,
    HeadCountAllocation,
    WeightSource,
    compute_area_metrics,
    compute_cycle_metrics,
)
from farm_kpi.models import CostTransaction, Cycle, GroupDetail


@pytest.fixture
def moving_consumption(make_event):
    """Consumption of the moving cycle, one event outside its window."""
    return [
        make_event(date(2025, 1, 15), 1000, 400, area_id="A1", feed_type_name="Ferkelfutter"),
        make_event(date(2025, 2, 15), 2000, 900, area_id="A2", feed_type_id="FT2", feed_type_name="Mast"),
        make_event(date(2025, 3, 1), 1500, 700, area_id="A3", feed_type_id="FT2", feed_type_name="Mast"),
        make_event(date(2025, 2, 15), 100, 50, area_id="A1"),  # rearing already empty
    ]


@pytest.fixture
def moving_costs():
    """One shared cost and one feed-category cost."""
    return [
        CostTransaction(id="T1", amount=1000, transaction_date=date(2025, 2, 1), category="Tierarzt"),
        CostTransaction(id="T2", amount=300, transaction_date=date(2025, 2, 1), category="Futterkosten"),
    ]


def by_key(results):
    return {r.area_id: r for r in results}


class TestAreaMetrics:
    """Tests for AreaMetricsCalculator."""

    def test_feed_attribution_and_shares(self, moving_cycle, moving_consumption, moving_costs, clock):
        """Feed is attributed per area and only inside the area's window."""
        results = by_key(compute_area_metrics(moving_cycle, moving_consumption, moving_costs, clock=clock))

        assert set(results) == {"A1", "A2", "A3"}
        assert results["A1"].total_feed_cost == pytest.approx(400.0)
        assert results["A1"].total_feed_quantity == pytest.approx(1000.0)
        assert results["A2"].total_feed_cost == pytest.approx(900.0)
        assert results["A3"].total_feed_cost == pytest.approx(700.0)
        assert results["A1"].percentage_of_total == pytest.approx(20.0)
        assert results["A2"].percentage_of_total == pytest.approx(45.0)
        assert results["A3"].percentage_of_total == pytest.approx(35.0)
        assert sum(r.percentage_of_total for r in results.values()) == pytest.approx(100.0)

    def test_per_animal_figures(self, moving_cycle, moving_consumption, moving_costs, clock):
        """Per-animal cost and profit figures of an end group."""
        area = by_key(compute_area_metrics(moving_cycle, moving_consumption, moving_costs, clock=clock))["A2"]

        assert area.animal_count == 50
        assert area.feed_cost_per_animal == pytest.approx(18.0)
        assert area.allocated_cost_per_animal == pytest.approx(5.0)
        assert area.total_cost_per_animal == pytest.approx(23.0)
        assert area.profit_loss_direct_per_animal == pytest.approx(192.0)
        assert area.profit_loss_full_per_animal == pytest.approx(187.0)
        assert area.feed_cost_per_day == pytest.approx(10.0)
        assert area.feed_cost_per_kg == pytest.approx(0.2)
        assert area.animal_type == "Nicht spezifiziert"

    def test_linked_weight_provenance(self, moving_cycle, moving_consumption, clock):
        """Linked start weights report their source area."""
        results = by_key(compute_area_metrics(moving_cycle, moving_consumption, clock=clock))

        assert results["A2"].start_weight == pytest.approx(30.0)
        assert results["A2"].weight_gain == pytest.approx(90.0)
        assert results["A2"].weight_source == WeightSource.LINKED.value
        assert results["A2"].weight_source_label == "Aufzucht"
        assert results["A1"].weight_source == WeightSource.DIRECT.value
        assert results["A1"].weight_source_label is None

    def test_shared_costs_fully_allocated(self, moving_cycle, moving_consumption, moving_costs, clock):
        """Allocations over all groups add up to the shared (non-feed) costs."""
        results = compute_area_metrics(moving_cycle, moving_consumption, moving_costs, clock=clock)
        allocated = sum(r.allocated_cost_per_animal * r.animal_count for r in results)
        assert allocated == pytest.approx(1000.0)

    def test_filter_does_not_change_numbers(self, moving_cycle, moving_consumption, moving_costs, clock):
        """Filtering selects output rows; shares and allocations stay the same."""
        full = by_key(compute_area_metrics(moving_cycle, moving_consumption, moving_costs, clock=clock))
        filtered = compute_area_metrics(
            moving_cycle, moving_consumption, moving_costs, area_filter=["A2"], clock=clock
        )
        assert [r.area_id for r in filtered] == ["A2"]
        assert filtered[0] == full["A2"]

    def test_feed_types_per_area(self, moving_cycle, moving_consumption, clock):
        """Feed usage is broken down by feed type."""
        area = by_key(compute_area_metrics(moving_cycle, moving_consumption, clock=clock))["A3"]
        assert list(area.feed_types) == ["FT2"]
        usage = area.feed_types["FT2"]
        assert usage.name == "Mast"
        assert usage.quantity == pytest.approx(1500.0)
        assert usage.cost == pytest.approx(700.0)

    def test_same_area_details_merge(self, make_event, clock):
        """Details of one area merge with the maximum simultaneous count."""
        cycle = Cycle(
            id="C",
            start_date=date(2025, 1, 1),
            end_date=date(2025, 2, 28),
            details=[
                GroupDetail(id="D1", count=50, area_id="A1", area_name="Stall",
                            start_date=date(2025, 1, 1), end_date=date(2025, 1, 20)),
                GroupDetail(id="D2", count=40, area_id="A1", area_name="Stall",
                            start_date=date(2025, 2, 1), end_date=date(2025, 2, 28)),
            ],
        )
        events = [
            make_event(date(2025, 1, 10), 100, 40, area_id="A1"),
            make_event(date(2025, 1, 25), 100, 40, area_id="A1"),  # gap between groups
            make_event(date(2025, 2, 10), 100, 40, area_id="A1"),
        ]
        results = compute_area_metrics(cycle, events, clock=clock)
        assert len(results) == 1
        assert results[0].animal_count == 50
        assert results[0].total_feed_cost == pytest.approx(80.0)

    def test_area_group_detail(self, make_event, clock):
        """Group details receive consumption of member areas."""
        cycle = Cycle(
            id="C",
            start_date=date(2025, 1, 1),
            end_date=date(2025, 1, 31),
            details=[GroupDetail(id="D1", count=20, area_group_id="G1")],
        )
        events = [make_event(date(2025, 1, 10), 100, 40, area_id="A9", area_group_id="G1")]
        results = compute_area_metrics(cycle, events, clock=clock)
        assert results[0].is_group is True
        assert results[0].area_name == "Unbekannte Gruppe"
        assert results[0].total_feed_cost == pytest.approx(40.0)

    def test_attribution_by_area_name(self, moving_cycle, make_event, clock):
        """Events without area id are matched by area name."""
        events = [make_event(date(2025, 2, 10), 100, 40, area_name="Mast Nord")]
        area = by_key(compute_area_metrics(moving_cycle, events, clock=clock))["A2"]
        assert area.total_feed_cost == pytest.approx(40.0)

    def test_detail_without_location_skipped(self, clock):
        """Details without area or group produce no row."""
        cycle = Cycle(
            id="C",
            start_date=date(2025, 1, 1),
            end_date=date(2025, 1, 31),
            details=[GroupDetail(id="D1", count=20)],
        )
        assert compute_area_metrics(cycle, [], clock=clock) == []

    def test_custom_allocation_strategy(self, moving_cycle, moving_costs, clock):
        """The allocation strategy is pluggable."""

        class ByAnimalDays(CostAllocationStrategy):
            def allocate_per_animal(self, total_cost, groups):
                total_days = sum(b.animal_days for b in groups.values())
                return {
                    key: total_cost * b.animal_days / total_days / b.animal_count
                    for key, b in groups.items()
                }

        calculator = AreaMetricsCalculator(clock=clock, allocation=ByAnimalDays())
        results = by_key(calculator.calculate(moving_cycle, [], moving_costs))
        # A1: 100 x 31 days, A2/A3: 50 x 59 days each
        total_days = 100 * 31 + 2 * 50 * 59
        assert results["A1"].allocated_cost_per_animal == pytest.approx(1000 * 3100 / total_days / 100)


class TestHeadCountAllocation:
    """Tests for HeadCountAllocation."""

    def test_equal_share_per_animal(self):
        """Every animal carries the same share."""
        allocation = HeadCountAllocation().allocate_per_animal(
            600.0, {"A": AllocationBasis(100), "B": AllocationBasis(50)}
        )
        assert allocation["A"] == pytest.approx(4.0)
        assert allocation["B"] == pytest.approx(4.0)

    def test_empty_group(self):
        """Groups without animals get nothing."""
        allocation = HeadCountAllocation().allocate_per_animal(600.0, {"A": AllocationBasis(0)})
        assert allocation == {"A": 0.0}


class TestAreaMetricsConsistency:
    """Area metrics stay consistent with the cycle view."""

    def test_untracked_area_id_not_matched_by_name(self, simple_cycle, make_event, clock):
        """An event with an untracked area id is not attributed by its area name."""
        events = [make_event(date(2025, 1, 10), 10, 5, area_id="AX", area_name="Stall 1")]
        area = compute_area_metrics(simple_cycle, events, clock=clock)[0]
        assert area.total_feed_cost == 0.0
        assert compute_cycle_metrics(simple_cycle, events, clock=clock).total_feed_cost == 0.0

    def test_zero_count_detail_ignored(self, moving_cycle, moving_consumption, moving_costs, clock):
        """A flagged, priced detail without animals changes nothing."""
        inert = GroupDetail(
            id="D4", count=0, area_id="A4", area_name="Leer",
            start_date=date(2025, 1, 1), end_date=date(2025, 3, 31),
            buy_price_per_animal=999.0, sell_price_per_animal=999.0,
            is_start_group=True, is_end_group=True,
        )
        with_inert = moving_cycle.model_copy(update={"details": moving_cycle.details + [inert]})

        baseline = compute_area_metrics(moving_cycle, moving_consumption, moving_costs, clock=clock)
        results = compute_area_metrics(with_inert, moving_consumption, moving_costs, clock=clock)
        assert [r.area_id for r in results] == ["A1", "A2", "A3"]
        assert [r.allocated_cost_per_animal for r in results] == pytest.approx(
            [r.allocated_cost_per_animal for r in baseline]
        )
        assert results == baseline

    def test_deterministic(self, moving_cycle, moving_consumption, moving_costs, clock):
        """Same inputs produce equal results."""
        first = compute_area_metrics(moving_cycle, moving_consumption, moving_costs, clock=clock)
        second = compute_area_metrics(moving_cycle, moving_consumption, moving_costs, clock=clock)
        assert first == second
