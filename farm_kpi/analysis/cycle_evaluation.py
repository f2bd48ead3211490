"""Cycle evaluation over pre-fetched data.

Evaluation pages and dashboards show many cycles at once. Inputs are
fetched once (a wide consumption range, all transactions of the relevant
cycles) and split per cycle in memory:

    evaluator = CycleEvaluator(clock=FixedClock(date(2025, 6, 30)))
    evaluations = evaluator.evaluate_many(cycles, consumption, costs, income)
    updates = profit_loss_updates(evaluations)  # written back by the caller
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from farm_kpi.calculations.area_metrics_calculator import AreaMetricsCalculator
from farm_kpi.calculations.clock import Clock, SYSTEM_CLOCK
from farm_kpi.calculations.consumption_filter import filter_active_consumption
from farm_kpi.calculations.cost_allocation import CostAllocationStrategy
from farm_kpi.calculations.cycle_metrics_calculator import CycleMetricsCalculator
from farm_kpi.calculations.feed_component_calculator import FeedComponentCalculator
from farm_kpi.calculations.metrics_breakdown import AreaMetrics, CycleMetrics, FeedComponentSummary
from farm_kpi.models.consumption import ConsumptionEvent
from farm_kpi.models.cycle import Cycle
from farm_kpi.models.settings import DEFAULT_SETTINGS, KPISettings
from farm_kpi.models.transactions import CostTransaction, IncomeTransaction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleEvaluation:
    """
    All KPI views of one cycle.

    Attributes:
        cycle: Evaluated cycle
        metrics: Cycle-level KPIs
        area_metrics: Per-area/group KPIs
        feed_components: Consumption by feed type (active windows only)
    """
    cycle: Cycle
    metrics: CycleMetrics
    area_metrics: List[AreaMetrics] = field(default_factory=list)
    feed_components: List[FeedComponentSummary] = field(default_factory=list)


def group_by_cycle(transactions: Iterable) -> Dict[Optional[str], List]:
    """Group transactions by their cycle id."""
    grouped: Dict[Optional[str], List] = defaultdict(list)
    for transaction in transactions:
        grouped[transaction.cycle_id].append(transaction)
    return grouped


def consumption_in_cycle_range(
    consumption: Iterable[ConsumptionEvent],
    cycle: Cycle,
    clock: Clock = SYSTEM_CLOCK
) -> List[ConsumptionEvent]:
    """Consumption between cycle start and cycle end (today if ongoing)."""
    end = cycle.end_date if cycle.end_date is not None else clock.today()
    return [e for e in consumption if cycle.start_date <= e.date <= end]


class CycleEvaluator:
    """
    Evaluates cycles with shared calculators and settings.

    Example:
        evaluator = CycleEvaluator(settings=KPISettings())
        evaluation = evaluator.evaluate(cycle, consumption, costs, income)
        print(evaluation.metrics)
    """

    def __init__(
        self,
        settings: KPISettings = DEFAULT_SETTINGS,
        clock: Clock = SYSTEM_CLOCK,
        allocation: Optional[CostAllocationStrategy] = None
    ):
        """
        Initialize cycle evaluator.

        Args:
            settings: Calculation settings
            clock: Clock used for open-ended cycles and details
            allocation: Shared-cost allocation strategy for area metrics
        """
        self.settings = settings
        self.clock = clock
        self.cycle_calculator = CycleMetricsCalculator(settings, clock)
        self.area_calculator = AreaMetricsCalculator(settings, clock, allocation)
        self.feed_calculator = FeedComponentCalculator(settings, clock)

    def evaluate(
        self,
        cycle: Cycle,
        consumption: Sequence[ConsumptionEvent],
        cost_transactions: Optional[Sequence[CostTransaction]] = None,
        income_transactions: Optional[Sequence[IncomeTransaction]] = None,
        area_filter: Optional[Iterable[str]] = None
    ) -> CycleEvaluation:
        """
        Evaluate one cycle.

        Args:
            cycle: Cycle with group details
            consumption: Consumption events of the cycle's farm
            cost_transactions: Cost transactions of this cycle
            income_transactions: Income transactions of this cycle
            area_filter: Area/group ids for the area view (empty = all)

        Returns:
            Cycle evaluation
        """
        in_range = consumption_in_cycle_range(consumption, cycle, self.clock)
        active = filter_active_consumption(in_range, cycle.details, cycle, clock=self.clock)
        return CycleEvaluation(
            cycle=cycle,
            metrics=self.cycle_calculator.calculate(cycle, in_range, cost_transactions, income_transactions),
            area_metrics=self.area_calculator.calculate(cycle, in_range, cost_transactions, area_filter),
            feed_components=self.feed_calculator.summarize(cycle, active),
        )

    def evaluate_many(
        self,
        cycles: Sequence[Cycle],
        consumption: Sequence[ConsumptionEvent],
        cost_transactions: Sequence[CostTransaction] = (),
        income_transactions: Sequence[IncomeTransaction] = ()
    ) -> Dict[str, CycleEvaluation]:
        """
        Evaluate several cycles from shared, pre-fetched collections.

        Transactions are matched to cycles by ``cycle_id``; transactions
        without a cycle are ignored.

        Args:
            cycles: Cycles to evaluate
            consumption: Consumption covering all cycles
            cost_transactions: Cost transactions of all cycles
            income_transactions: Income transactions of all cycles

        Returns:
            Evaluations keyed by cycle id
        """
        if cycles is None or consumption is None:
            raise ValueError("cycles and consumption must be collections, got None")

        costs_by_cycle = group_by_cycle(cost_transactions)
        income_by_cycle = group_by_cycle(income_transactions)

        evaluations: Dict[str, CycleEvaluation] = {}
        for cycle in cycles:
            evaluations[cycle.id] = self.evaluate(
                cycle,
                consumption,
                costs_by_cycle.get(cycle.id, []),
                income_by_cycle.get(cycle.id, []),
            )

        logger.info(f"Evaluated {len(evaluations)} cycles from {len(consumption)} consumption events")
        return evaluations


def compute_metrics_for_cycles(
    cycles: Sequence[Cycle],
    consumption: Sequence[ConsumptionEvent],
    cost_transactions: Sequence[CostTransaction] = (),
    income_transactions: Sequence[IncomeTransaction] = (),
    settings: KPISettings = DEFAULT_SETTINGS,
    clock: Clock = SYSTEM_CLOCK
) -> Dict[str, CycleMetrics]:
    """
    Cycle metrics for several cycles from shared, pre-fetched collections.

    Returns:
        Cycle metrics keyed by cycle id
    """
    if cycles is None or consumption is None:
        raise ValueError("cycles and consumption must be collections, got None")

    calculator = CycleMetricsCalculator(settings, clock)
    costs_by_cycle = group_by_cycle(cost_transactions)
    income_by_cycle = group_by_cycle(income_transactions)
    return {
        cycle.id: calculator.calculate(
            cycle,
            consumption_in_cycle_range(consumption, cycle, clock),
            costs_by_cycle.get(cycle.id, []),
            income_by_cycle.get(cycle.id, []),
        )
        for cycle in cycles
    }


def profit_loss_updates(results: Dict[str, object]) -> Dict[str, float]:
    """
    Profit/loss per cycle id, ready to be written back onto cycle records.

    Args:
        results: CycleMetrics or CycleEvaluation keyed by cycle id

    Returns:
        Profit/loss keyed by cycle id
    """
    updates = {}
    for cycle_id, result in results.items():
        metrics = result.metrics if isinstance(result, CycleEvaluation) else result
        updates[cycle_id] = metrics.profit_loss
    return updates
