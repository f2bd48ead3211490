"""Cycle metrics calculator.

Single source of truth for cycle-level KPIs used by data-entry previews,
dashboard widgets and evaluation reports.

Formulas:
- Total animals: maximum animals present at any time
- Weight gain: count-weighted average of (end − start) over details with both weights
- Total feed cost: filtered consumption cost + feed-category cost transactions
- Additional costs: all other cost transactions
- Animal purchase cost / sales revenue: count × price of attributed details
- Total revenue: animal sales revenue + income transactions
- Total costs: total feed cost + additional costs + animal purchase cost
- Profit/loss: total revenue − total costs
- Profit margin: profit/loss / total revenue × 100
- Feed conversion ratio: feed quantity / (animals with weights × weight gain)
- Feed cost per kg: total feed cost / (animals with weights × weight gain)
- Feed cost per animal: total feed cost / total animals
- Daily feed cost: total feed cost / cycle duration
- Feed efficiency: (animals with weights × weight gain) / total feed cost
- Daily gain: weight gain / cycle duration × 1000 (g/day)
- Net daily gain: slaughter weight / lifetime days × 1000 (g/day)
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from farm_kpi.models.consumption import ConsumptionEvent
from farm_kpi.models.cycle import Cycle, GroupDetail
from farm_kpi.models.settings import DEFAULT_SETTINGS, KPISettings, PriceAttributionMode
from farm_kpi.models.transactions import CostTransaction, IncomeTransaction
from .clock import Clock, SYSTEM_CLOCK
from .consumption_filter import filter_active_consumption
from .metrics_breakdown import CycleMetrics
from .time_window import cycle_duration, total_animals_from_details
from .value_resolution import (
    effective_buy_price,
    effective_end_weight,
    effective_sell_price,
    effective_start_weight,
)

logger = logging.getLogger(__name__)


def partition_cost_transactions(
    cost_transactions: Iterable[CostTransaction],
    feed_cost_category: str
) -> Tuple[List[CostTransaction], List[CostTransaction]]:
    """
    Split cost transactions into feed-category and other costs.

    Args:
        cost_transactions: Cost transactions
        feed_cost_category: Category counted as feed cost (case-insensitive)

    Returns:
        (feed_transactions, other_transactions)
    """
    feed: List[CostTransaction] = []
    other: List[CostTransaction] = []
    for transaction in cost_transactions:
        if transaction.is_category(feed_cost_category):
            feed.append(transaction)
        else:
            other.append(transaction)
    return feed, other


def attribute_animal_prices(
    cycle: Cycle,
    mode: PriceAttributionMode = PriceAttributionMode.AUTO
) -> Tuple[float, float]:
    """
    Calculate animal purchase cost and sales revenue.

    With flags, only start groups are bought and only end groups are sold,
    so animals moving between areas are not priced twice. In AUTO mode the
    start flags decide purchases and the end flags decide sales, each
    falling back to every priced detail when no detail carries the flag.

    Args:
        cycle: Cycle with details
        mode: Attribution mode

    Returns:
        (animal_purchase_cost, animal_sales_revenue)
    """
    details = cycle.active_details

    if mode == PriceAttributionMode.FLAGGED:
        use_start_flags = use_end_flags = True
    elif mode == PriceAttributionMode.LEGACY:
        use_start_flags = use_end_flags = False
    else:
        use_start_flags = any(d.is_start_group for d in details)
        use_end_flags = any(d.is_end_group for d in details)

    purchase_cost = 0.0
    sales_revenue = 0.0
    for detail in details:
        buy_price = effective_buy_price(detail, cycle)
        if buy_price is not None and (detail.is_start_group or not use_start_flags):
            purchase_cost += detail.count * buy_price

        sell_price = effective_sell_price(detail, cycle)
        if sell_price is not None and (detail.is_end_group or not use_end_flags):
            sales_revenue += detail.count * sell_price

    return purchase_cost, sales_revenue


def weighted_weights(
    details: Sequence[GroupDetail],
    cycle: Cycle
) -> Tuple[Optional[float], Optional[float], int]:
    """
    Count-weighted average start and end weight over details with both weights.

    Args:
        details: Group details
        cycle: Parent cycle

    Returns:
        (start_weight, end_weight, animals_with_weights); weights are None
        when no detail has both
    """
    weighted_start = 0.0
    weighted_end = 0.0
    animals_with_weights = 0
    for detail in details:
        if not detail.is_active:
            continue
        start = effective_start_weight(detail, details, cycle)
        end = effective_end_weight(detail, cycle)
        if start is None or end is None:
            continue
        weighted_start += start * detail.count
        weighted_end += end * detail.count
        animals_with_weights += detail.count

    if animals_with_weights == 0:
        return None, None, 0
    return weighted_start / animals_with_weights, weighted_end / animals_with_weights, animals_with_weights


class CycleMetricsCalculator:
    """
    Calculates all cycle-level KPIs.

    Pure and stateless apart from its configuration: the same inputs always
    produce the same CycleMetrics (open-ended cycles depend on the clock).

    Example:
        calculator = CycleMetricsCalculator(settings=KPISettings())
        metrics = calculator.calculate(cycle, consumption, costs, income)
        print(metrics.profit_loss)
    """

    def __init__(
        self,
        settings: KPISettings = DEFAULT_SETTINGS,
        clock: Clock = SYSTEM_CLOCK
    ):
        """
        Initialize cycle metrics calculator.

        Args:
            settings: Calculation settings
            clock: Clock used for open-ended cycles and details
        """
        self.settings = settings
        self.clock = clock

    def calculate(
        self,
        cycle: Cycle,
        consumption: Sequence[ConsumptionEvent],
        cost_transactions: Optional[Sequence[CostTransaction]] = None,
        income_transactions: Optional[Sequence[IncomeTransaction]] = None
    ) -> CycleMetrics:
        """
        Calculate cycle metrics.

        Args:
            cycle: Cycle with group details
            consumption: Consumption events (filtered by active windows here)
            cost_transactions: Cost transactions of this cycle
            income_transactions: Income transactions of this cycle

        Returns:
            Complete cycle metrics
        """
        if cycle is None:
            raise ValueError("cycle is required")
        if consumption is None:
            raise ValueError("consumption must be a collection, got None")
        cost_transactions = cost_transactions or []
        income_transactions = income_transactions or []

        details = cycle.details
        total_animals = total_animals_from_details(details, cycle)

        # Weights
        start_weight, end_weight, animals_with_weights = weighted_weights(details, cycle)
        if animals_with_weights == 0:
            start_weight = cycle.expected_weight_per_animal or 0.0
            end_weight = cycle.actual_weight_per_animal or 0.0
        weight_gain = end_weight - start_weight

        # Feed
        active_consumption = filter_active_consumption(consumption, details, cycle, clock=self.clock)
        consumption_feed_cost = sum(e.total_cost or 0.0 for e in active_consumption)
        total_feed_quantity = sum(e.quantity for e in active_consumption)

        feed_transactions, other_transactions = partition_cost_transactions(
            cost_transactions, self.settings.feed_cost_category
        )
        feed_category_transaction_costs = sum(t.amount for t in feed_transactions)
        additional_costs = sum(t.amount for t in other_transactions)
        total_feed_cost = consumption_feed_cost + feed_category_transaction_costs

        # Animals bought and sold
        animal_purchase_cost, animal_sales_revenue = attribute_animal_prices(
            cycle, self.settings.price_attribution
        )

        additional_income = sum(t.amount for t in income_transactions)
        total_revenue = animal_sales_revenue + additional_income

        duration = cycle_duration(cycle.start_date, cycle.end_date, self.clock)

        total_costs = total_feed_cost + additional_costs + animal_purchase_cost
        profit_loss = total_revenue - total_costs
        profit_margin = (profit_loss / total_revenue) * 100 if total_revenue != 0 else 0.0

        # Performance ratios (only animals with complete weight data)
        kg_gained = animals_with_weights * weight_gain
        has_gain = weight_gain > 0 and animals_with_weights > 0
        feed_conversion_ratio = total_feed_quantity / kg_gained if has_gain else 0.0
        feed_cost_per_kg = total_feed_cost / kg_gained if has_gain else 0.0
        feed_cost_per_animal = total_feed_cost / total_animals if total_animals > 0 else 0.0
        daily_feed_cost = total_feed_cost / duration if duration > 0 else 0.0
        feed_efficiency = (
            kg_gained / total_feed_cost
            if total_feed_cost > 0 and animals_with_weights > 0
            else 0.0
        )

        daily_gain_grams = (
            (weight_gain / duration) * 1000
            if duration > 0 and weight_gain > 0
            else None
        )
        net_daily_gain_grams = None
        if cycle.slaughter_weight_kg and cycle.total_lifetime_days and cycle.total_lifetime_days > 0:
            net_daily_gain_grams = (cycle.slaughter_weight_kg / cycle.total_lifetime_days) * 1000

        logger.debug(
            f"Cycle {cycle.id}: {total_animals} animals, {len(active_consumption)}/{len(consumption)} "
            f"consumption events in window, profit/loss {profit_loss:.2f}"
        )

        return CycleMetrics(
            total_animals=total_animals,
            animals_with_weights=animals_with_weights,
            average_weight=end_weight,
            start_weight=start_weight,
            weight_gain=weight_gain,
            feed_conversion_ratio=feed_conversion_ratio,
            mortality_rate=cycle.mortality_rate or 0.0,
            total_feed_cost=total_feed_cost,
            total_feed_quantity=total_feed_quantity,
            feed_cost_per_animal=feed_cost_per_animal,
            feed_cost_per_kg=feed_cost_per_kg,
            total_revenue=total_revenue,
            total_costs=total_costs,
            profit_loss=profit_loss,
            profit_margin=profit_margin,
            cycle_duration=duration,
            daily_feed_cost=daily_feed_cost,
            feed_efficiency=feed_efficiency,
            animal_purchase_cost=animal_purchase_cost,
            additional_costs=additional_costs,
            daily_gain_grams=daily_gain_grams,
            net_daily_gain_grams=net_daily_gain_grams,
            feed_category_transaction_costs=feed_category_transaction_costs,
            consumption_feed_cost=consumption_feed_cost,
            additional_income=additional_income,
            animal_sales_revenue=animal_sales_revenue,
        )


def compute_cycle_metrics(
    cycle: Cycle,
    consumption: Sequence[ConsumptionEvent],
    cost_transactions: Optional[Sequence[CostTransaction]] = None,
    income_transactions: Optional[Sequence[IncomeTransaction]] = None,
    settings: KPISettings = DEFAULT_SETTINGS,
    clock: Clock = SYSTEM_CLOCK
) -> CycleMetrics:
    """Calculate cycle metrics with a one-off calculator."""
    return CycleMetricsCalculator(settings, clock).calculate(
        cycle, consumption, cost_transactions, income_transactions
    )
