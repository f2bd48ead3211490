"""Area and area-group metrics calculator.

Distributes the cycle KPIs over the areas and area groups the animals
occupied. Consumption is attributed to a group key and counted only inside
the window of one of that key's details. Shared (non-feed) costs are
allocated by a pluggable strategy, head count by default.

Formulas per group:
- Feed cost per animal: group feed cost / group animals
- Feed cost per day: group feed cost / cycle duration
- Feed cost per kg: group feed cost / (group animals × weight gain)
- Percentage of total: group feed cost / feed cost of all tracked groups × 100
- Total cost per animal: buy price + feed cost per animal + allocated shared cost
- Profit/loss direct: sell price − buy price − feed cost per animal
- Profit/loss full: sell price − total cost per animal
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from farm_kpi.models.consumption import ConsumptionEvent
from farm_kpi.models.cycle import Cycle, GroupDetail
from farm_kpi.models.settings import DEFAULT_SETTINGS, KPISettings
from farm_kpi.models.transactions import CostTransaction
from .clock import Clock, SYSTEM_CLOCK
from .consumption_filter import find_active_detail
from .cost_allocation import AllocationBasis, CostAllocationStrategy, HeadCountAllocation
from .cycle_metrics_calculator import partition_cost_transactions
from .metrics_breakdown import AreaMetrics, FeedTypeUsage
from .time_window import animal_days, cycle_duration, total_animals_from_details
from .value_resolution import (
    WeightSource,
    effective_buy_price,
    effective_end_weight,
    effective_sell_price,
    resolve_start_weight,
)

logger = logging.getLogger(__name__)


@dataclass
class _FeedTally:
    """Running feed totals of one feed type within a group."""
    name: str
    quantity: float = 0.0
    cost: float = 0.0


@dataclass
class _GroupTally:
    """Running totals of one group key while consumption is attributed."""
    key: str
    name: str
    is_group: bool
    details: List[GroupDetail] = field(default_factory=list)
    feed_quantity: float = 0.0
    feed_cost: float = 0.0
    feed_types: Dict[str, _FeedTally] = field(default_factory=dict)

    def add(self, event: ConsumptionEvent) -> None:
        cost = event.total_cost or 0.0
        self.feed_quantity += event.quantity
        self.feed_cost += cost
        usage = self.feed_types.get(event.feed_type_id)
        if usage is None:
            usage = self.feed_types[event.feed_type_id] = _FeedTally(event.feed_type_name or event.feed_type_id)
        usage.quantity += event.quantity
        usage.cost += cost


class AreaMetricsCalculator:
    """
    Calculates per-area and per-group KPIs of a cycle.

    Example:
        calculator = AreaMetricsCalculator(allocation=HeadCountAllocation())
        for area in calculator.calculate(cycle, consumption, costs):
            print(area)
    """

    def __init__(
        self,
        settings: KPISettings = DEFAULT_SETTINGS,
        clock: Clock = SYSTEM_CLOCK,
        allocation: Optional[CostAllocationStrategy] = None
    ):
        """
        Initialize area metrics calculator.

        Args:
            settings: Calculation settings
            clock: Clock used for open-ended cycles and details
            allocation: Shared-cost allocation strategy (head count if None)
        """
        self.settings = settings
        self.clock = clock
        self.allocation = allocation or HeadCountAllocation()

    def calculate(
        self,
        cycle: Cycle,
        consumption: Sequence[ConsumptionEvent],
        cost_transactions: Optional[Sequence[CostTransaction]] = None,
        area_filter: Optional[Iterable[str]] = None
    ) -> List[AreaMetrics]:
        """
        Calculate metrics for every tracked area and area group.

        Args:
            cycle: Cycle with group details
            consumption: Consumption events (attributed and window-checked here)
            cost_transactions: Cost transactions of this cycle
            area_filter: Area/group ids to return (empty or None = all)

        Returns:
            Area metrics in detail order
        """
        if cycle is None:
            raise ValueError("cycle is required")
        if consumption is None:
            raise ValueError("consumption must be a collection, got None")
        cost_transactions = cost_transactions or []
        selected = set(area_filter or [])

        tallies = self._init_tallies(cycle.details)
        self._attribute_consumption(cycle, consumption, tallies)

        duration = cycle_duration(cycle.start_date, cycle.end_date, self.clock)
        animal_counts = {
            key: total_animals_from_details(tally.details, cycle)
            for key, tally in tallies.items()
        }

        _, shared_transactions = partition_cost_transactions(
            cost_transactions, self.settings.feed_cost_category
        )
        shared_costs = sum(t.amount for t in shared_transactions)
        allocated = self.allocation.allocate_per_animal(
            shared_costs,
            {
                key: AllocationBasis(
                    animal_count=animal_counts[key],
                    animal_days=animal_days(tally.details, cycle, self.clock),
                )
                for key, tally in tallies.items()
            },
        )

        total_feed_cost = sum(t.feed_cost for t in tallies.values())

        results: List[AreaMetrics] = []
        for key, tally in tallies.items():
            if selected and key not in selected:
                continue
            results.append(self._build_metrics(
                cycle, tally, animal_counts[key], allocated.get(key, 0.0),
                total_feed_cost, duration,
            ))
        return results

    def _init_tallies(self, details: Sequence[GroupDetail]) -> Dict[str, _GroupTally]:
        """One tally per area id or area group id; same-key details merge."""
        tallies: Dict[str, _GroupTally] = {}
        for detail in details:
            if not detail.is_active:
                continue
            if detail.area_id:
                key, is_group = detail.area_id, False
                name = detail.area_name or self.settings.unknown_area_name
            elif detail.area_group_id:
                key, is_group = detail.area_group_id, True
                name = detail.area_group_name or self.settings.unknown_group_name
            else:
                logger.debug(f"Detail {detail.id} has no area or area group, skipped")
                continue
            if key not in tallies:
                tallies[key] = _GroupTally(key=key, name=name, is_group=is_group)
            tallies[key].details.append(detail)
        return tallies

    def _attribute_consumption(
        self,
        cycle: Cycle,
        consumption: Iterable[ConsumptionEvent],
        tallies: Dict[str, _GroupTally]
    ) -> None:
        """Add each event to its group if it falls in one of the group's windows."""
        area_by_name: Dict[str, str] = {}
        for tally in tallies.values():
            if not tally.is_group:
                for detail in tally.details:
                    if detail.area_name and detail.area_name not in area_by_name:
                        area_by_name[detail.area_name] = tally.key

        unattributed = 0
        outside_window = 0
        for event in consumption:
            key = self._target_key(event, tallies, area_by_name)
            if key is None:
                unattributed += 1
                continue
            tally = tallies[key]
            if find_active_detail(event, tally.details, cycle, self.clock) is None:
                outside_window += 1
                continue
            tally.add(event)

        if unattributed or outside_window:
            logger.debug(
                f"Cycle {cycle.id}: {unattributed} consumption events without tracked area, "
                f"{outside_window} outside their area's window"
            )

    @staticmethod
    def _target_key(
        event: ConsumptionEvent,
        tallies: Dict[str, _GroupTally],
        area_by_name: Dict[str, str]
    ) -> Optional[str]:
        """Direct area match, then group membership, then area name (events without area id only)."""
        if event.area_id and event.area_id in tallies and not tallies[event.area_id].is_group:
            return event.area_id
        if event.area_group_id and event.area_group_id in tallies and tallies[event.area_group_id].is_group:
            return event.area_group_id
        if not event.area_id and event.area_name and event.area_name in area_by_name:
            return area_by_name[event.area_name]
        return None

    def _build_metrics(
        self,
        cycle: Cycle,
        tally: _GroupTally,
        animal_count: int,
        allocated_per_animal: float,
        total_feed_cost: float,
        duration: int
    ) -> AreaMetrics:
        detail = tally.details[0]

        resolved_start = resolve_start_weight(detail, cycle.details, cycle)
        start_weight = resolved_start.value
        end_weight = effective_end_weight(detail, cycle)
        weight_gain = (
            end_weight - start_weight
            if start_weight is not None and end_weight is not None
            else 0.0
        )

        weight_source_label = None
        if resolved_start.source == WeightSource.LINKED:
            source = cycle.get_detail(resolved_start.source_detail_id)
            weight_source_label = source.location_name if source else None

        buy_price = effective_buy_price(detail, cycle) or 0.0
        sell_price = effective_sell_price(detail, cycle) or 0.0

        feed_cost_per_animal = tally.feed_cost / animal_count if animal_count > 0 else 0.0
        feed_cost_per_day = tally.feed_cost / duration if duration > 0 else 0.0
        feed_cost_per_kg = (
            tally.feed_cost / (animal_count * weight_gain)
            if weight_gain > 0 and animal_count > 0
            else 0.0
        )
        percentage_of_total = (tally.feed_cost / total_feed_cost) * 100 if total_feed_cost > 0 else 0.0
        total_cost_per_animal = buy_price + feed_cost_per_animal + allocated_per_animal

        return AreaMetrics(
            area_id=tally.key,
            area_name=tally.name,
            is_group=tally.is_group,
            animal_count=animal_count,
            animal_type=detail.animal_type or self.settings.unspecified_animal_type,
            total_feed_quantity=tally.feed_quantity,
            total_feed_cost=tally.feed_cost,
            feed_cost_per_animal=feed_cost_per_animal,
            allocated_cost_per_animal=allocated_per_animal,
            total_cost_per_animal=total_cost_per_animal,
            feed_cost_per_day=feed_cost_per_day,
            feed_cost_per_kg=feed_cost_per_kg,
            percentage_of_total=percentage_of_total,
            profit_loss_direct_per_animal=sell_price - buy_price - feed_cost_per_animal,
            profit_loss_full_per_animal=sell_price - total_cost_per_animal,
            feed_types={
                feed_type_id: FeedTypeUsage(feed_type_id, usage.name, usage.quantity, usage.cost)
                for feed_type_id, usage in tally.feed_types.items()
            },
            start_weight=start_weight,
            end_weight=end_weight,
            weight_gain=weight_gain if weight_gain > 0 else None,
            weight_source=resolved_start.source.value,
            weight_source_label=weight_source_label,
        )


def compute_area_metrics(
    cycle: Cycle,
    consumption: Sequence[ConsumptionEvent],
    cost_transactions: Optional[Sequence[CostTransaction]] = None,
    area_filter: Optional[Iterable[str]] = None,
    settings: KPISettings = DEFAULT_SETTINGS,
    clock: Clock = SYSTEM_CLOCK,
    allocation: Optional[CostAllocationStrategy] = None
) -> List[AreaMetrics]:
    """Calculate area metrics with a one-off calculator."""
    return AreaMetricsCalculator(settings, clock, allocation).calculate(
        cycle, consumption, cost_transactions, area_filter
    )
