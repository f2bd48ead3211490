"""KPI calculation module.

This module provides the cycle-metrics engine for livestock production runs:
- Population: maximum animals present at any time across moving groups
- Value resolution: start/end weights and prices with fallback chain
- Consumption filtering: feed counted only while animals are present
- Cycle metrics: revenue, costs, profit/loss, feed conversion, daily gains
- Area metrics: per-area KPIs with proportional shared-cost allocation
- Feed components: consumption by feed type with animal-day rates
- Profit preview: reduced-input profit/loss for data-entry forms
- Feed pricing: consumption costs from dated price tiers

Key components:
- CycleMetrics, AreaMetrics, FeedComponentSummary: Result records
- CycleMetricsCalculator: Cycle-level KPIs
- AreaMetricsCalculator: Per-area/group KPIs
- FeedComponentCalculator: Feed type summary
- CostAllocationStrategy / HeadCountAllocation: Shared-cost allocation
- Clock / SystemClock / FixedClock: Source of "today" for open windows
"""

from .clock import Clock, SystemClock, FixedClock, SYSTEM_CLOCK
from .time_window import (
    PopulationEntry,
    max_simultaneous,
    total_animals_from_details,
    cycle_duration,
    detail_window,
    animal_days,
)
from .value_resolution import (
    WeightSource,
    ResolvedValue,
    resolve_start_weight,
    effective_start_weight,
    effective_end_weight,
    effective_buy_price,
    effective_sell_price,
)
from .consumption_filter import filter_active_consumption
from .cost_allocation import AllocationBasis, CostAllocationStrategy, HeadCountAllocation
from .metrics_breakdown import CycleMetrics, AreaMetrics, FeedTypeUsage, FeedComponentSummary
from .cycle_metrics_calculator import (
    CycleMetricsCalculator,
    compute_cycle_metrics,
    partition_cost_transactions,
    attribute_animal_prices,
)
from .area_metrics_calculator import AreaMetricsCalculator, compute_area_metrics
from .feed_component_calculator import FeedComponentCalculator, summarize_feed_components
from .profit_preview import estimate_profit_loss
from .feed_pricing import (
    find_applicable_price_tier,
    calculate_consumption_cost,
    ensure_consumption_costs,
    price_consumption,
    weighted_average_price,
)

__all__ = [
    "Clock",
    "SystemClock",
    "FixedClock",
    "SYSTEM_CLOCK",
    "PopulationEntry",
    "max_simultaneous",
    "total_animals_from_details",
    "cycle_duration",
    "detail_window",
    "animal_days",
    "WeightSource",
    "ResolvedValue",
    "resolve_start_weight",
    "effective_start_weight",
    "effective_end_weight",
    "effective_buy_price",
    "effective_sell_price",
    "filter_active_consumption",
    "AllocationBasis",
    "CostAllocationStrategy",
    "HeadCountAllocation",
    "CycleMetrics",
    "AreaMetrics",
    "FeedTypeUsage",
    "FeedComponentSummary",
    "CycleMetricsCalculator",
    "compute_cycle_metrics",
    "partition_cost_transactions",
    "attribute_animal_prices",
    "AreaMetricsCalculator",
    "compute_area_metrics",
    "FeedComponentCalculator",
    "summarize_feed_components",
    "estimate_profit_loss",
    "find_applicable_price_tier",
    "calculate_consumption_cost",
    "ensure_consumption_costs",
    "price_consumption",
    "weighted_average_price",
]
