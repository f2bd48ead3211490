"""Analysis module for cycle KPI results.

This module provides tools for evaluating cycles and their feed
consumption, including:
- Evaluation of many cycles from pre-fetched collections
- Profit/loss write-back values
- Consumption pivot tables by time, feed type, area and supplier
"""

from .cycle_evaluation import (
    CycleEvaluation,
    CycleEvaluator,
    compute_metrics_for_cycles,
    consumption_in_cycle_range,
    group_by_cycle,
    profit_loss_updates,
)
from .consumption_pivot import (
    PivotAggregation,
    PivotDimension,
    PivotValue,
    build_consumption_pivot,
    consumption_to_dataframe,
)

__all__ = [
    "CycleEvaluation",
    "CycleEvaluator",
    "compute_metrics_for_cycles",
    "consumption_in_cycle_range",
    "group_by_cycle",
    "profit_loss_updates",
    "PivotAggregation",
    "PivotDimension",
    "PivotValue",
    "build_consumption_pivot",
    "consumption_to_dataframe",
]
