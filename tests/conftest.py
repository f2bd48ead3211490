"""Pytest configuration and shared fixtures."""

import pytest
from datetime import date

from farm_kpi.calculations import FixedClock
from farm_kpi.models import (
    ConsumptionEvent,
    CostTransaction,
    Cycle,
    GroupDetail,
    IncomeTransaction,
)


@pytest.fixture
def clock():
    """Clock pinned well after the test cycles."""
    return FixedClock(date(2025, 6, 30))


@pytest.fixture
def simple_cycle():
    """Closed 30-day cycle with one group of 100 animals in one barn."""
    return Cycle(
        id="C1",
        farm_id="F1",
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 30),
        name="Durchgang 1",
        details=[
            GroupDetail(
                id="D1",
                count=100,
                start_date=date(2025, 1, 1),
                end_date=date(2025, 1, 30),
                area_id="A1",
                area_name="Stall 1",
                animal_type="Mastschwein",
                expected_weight_per_animal=30.0,
                actual_weight_per_animal=120.0,
                buy_price_per_animal=50.0,
                sell_price_per_animal=200.0,
            ),
        ],
    )


@pytest.fixture
def simple_consumption():
    """Feed delivered to the barn of the simple cycle."""
    return [
        ConsumptionEvent(
            date=date(2025, 1, 10),
            quantity=450.0,
            total_cost=225.0,
            feed_type_id="FT1",
            feed_type_name="Vormast",
            feed_unit="kg",
            area_id="A1",
            area_name="Stall 1",
        ),
    ]


@pytest.fixture
def simple_costs():
    """One non-feed cost transaction of the simple cycle."""
    return [
        CostTransaction(
            id="T1",
            amount=800.0,
            transaction_date=date(2025, 1, 15),
            cycle_id="C1",
            cost_type_name="Tierarzt",
            category="Tiergesundheit",
        ),
    ]


@pytest.fixture
def moving_cycle():
    """Cycle whose 100 animals move from rearing into two fattening barns.

    - D1: 100 animals in rearing (A1), Jan 1 - Jan 31, start group
    - D2: 50 animals in fattening barn A2, Feb 1 - Mar 31, end group
    - D3: 50 animals in fattening barn A3, Feb 1 - Mar 31, end group
    """
    return Cycle(
        id="C2",
        farm_id="F1",
        start_date=date(2025, 1, 1),
        end_date=date(2025, 3, 31),
        details=[
            GroupDetail(
                id="D1",
                count=100,
                start_date=date(2025, 1, 1),
                end_date=date(2025, 1, 31),
                area_id="A1",
                area_name="Aufzucht",
                expected_weight_per_animal=8.0,
                actual_weight_per_animal=30.0,
                buy_price_per_animal=60.0,
                is_start_group=True,
            ),
            GroupDetail(
                id="D2",
                count=50,
                start_date=date(2025, 2, 1),
                end_date=date(2025, 3, 31),
                area_id="A2",
                area_name="Mast Nord",
                start_weight_source_detail_id="D1",
                actual_weight_per_animal=120.0,
                sell_price_per_animal=210.0,
                is_end_group=True,
            ),
            GroupDetail(
                id="D3",
                count=50,
                start_date=date(2025, 2, 1),
                end_date=date(2025, 3, 31),
                area_id="A3",
                area_name="Mast Süd",
                start_weight_source_detail_id="D1",
                actual_weight_per_animal=110.0,
                sell_price_per_animal=200.0,
                is_end_group=True,
            ),
        ],
    )


@pytest.fixture
def income():
    """Income transaction for the moving cycle."""
    return [
        IncomeTransaction(
            id="I1",
            amount=500.0,
            transaction_date=date(2025, 3, 31),
            income_type="Tierwohlprämie",
            cycle_id="C2",
        ),
    ]


@pytest.fixture
def make_event():
    """Factory for consumption events with sensible defaults."""
    def _make(day, quantity, cost, area_id=None, feed_type_id="FT1", **kwargs):
        return ConsumptionEvent(
            date=day,
            quantity=quantity,
            total_cost=cost,
            feed_type_id=feed_type_id,
            area_id=area_id,
            **kwargs,
        )
    return _make
