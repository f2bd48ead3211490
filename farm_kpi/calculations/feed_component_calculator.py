"""Feed component summary (consumption aggregated by feed type)."""

from typing import Dict, List, Sequence

from farm_kpi.models.consumption import ConsumptionEvent
from farm_kpi.models.cycle import Cycle
from farm_kpi.models.settings import DEFAULT_SETTINGS, KPISettings
from .clock import Clock, SYSTEM_CLOCK
from .metrics_breakdown import FeedComponentSummary
from .time_window import animal_days, cycle_duration


class FeedComponentCalculator:
    """
    Aggregates a cycle's consumption by feed type.

    Per-animal rates use animal-days, so groups that were present only part
    of the cycle weigh proportionally less. Consumption is taken as given;
    pass it through ``filter_active_consumption`` first to restrict it to
    active windows.

    Example:
        calculator = FeedComponentCalculator()
        for component in calculator.summarize(cycle, consumption):
            print(component)
    """

    def __init__(
        self,
        settings: KPISettings = DEFAULT_SETTINGS,
        clock: Clock = SYSTEM_CLOCK
    ):
        self.settings = settings
        self.clock = clock

    def summarize(
        self,
        cycle: Cycle,
        consumption: Sequence[ConsumptionEvent]
    ) -> List[FeedComponentSummary]:
        """
        Summarize consumption per feed type.

        Args:
            cycle: Cycle with group details
            consumption: Consumption events of the cycle

        Returns:
            Feed component summaries sorted by total cost, descending
        """
        if consumption is None:
            raise ValueError("consumption must be a collection, got None")

        duration = cycle_duration(cycle.start_date, cycle.end_date, self.clock)
        total_animal_days = animal_days(cycle.details, cycle, self.clock)

        totals: Dict[str, Dict] = {}
        for event in consumption:
            entry = totals.get(event.feed_type_id)
            if entry is None:
                entry = totals[event.feed_type_id] = {
                    "name": event.feed_type_name or event.feed_type_id,
                    "unit": event.feed_unit or self.settings.default_feed_unit,
                    "quantity": 0.0,
                    "cost": 0.0,
                }
            entry["quantity"] += event.quantity
            entry["cost"] += event.total_cost or 0.0

        total_feed_cost = sum(entry["cost"] for entry in totals.values())

        summaries = []
        for feed_type_id, entry in totals.items():
            quantity = entry["quantity"]
            cost = entry["cost"]
            per_animal_day = quantity / total_animal_days if total_animal_days > 0 else 0.0
            summaries.append(FeedComponentSummary(
                feed_type_id=feed_type_id,
                feed_type_name=entry["name"],
                unit=entry["unit"],
                total_quantity=quantity,
                total_cost=cost,
                weighted_avg_price=cost / quantity if quantity > 0 else 0.0,
                percentage_of_total=(cost / total_feed_cost) * 100 if total_feed_cost > 0 else 0.0,
                daily_consumption=quantity / duration if duration > 0 else 0.0,
                quantity_per_animal_per_day=per_animal_day,
                # Derived from the per-day rate so both figures stay consistent
                quantity_per_animal=per_animal_day * duration,
            ))

        summaries.sort(key=lambda s: s.total_cost, reverse=True)
        return summaries


def summarize_feed_components(
    cycle: Cycle,
    consumption: Sequence[ConsumptionEvent],
    settings: KPISettings = DEFAULT_SETTINGS,
    clock: Clock = SYSTEM_CLOCK
) -> List[FeedComponentSummary]:
    """Summarize feed components with a one-off calculator."""
    return FeedComponentCalculator(settings, clock).summarize(cycle, consumption)
