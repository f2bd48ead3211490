"""Feed pricing from dated price tiers.

Consumption is priced with the tier valid on the consumption date. When
several tiers of a feed type are valid, the one that started most recently
wins.
"""

import logging
from datetime import date as Date
from typing import Iterable, List, Optional, Sequence

from farm_kpi.models.consumption import ConsumptionEvent, PriceTier

logger = logging.getLogger(__name__)


def find_applicable_price_tier(
    feed_type_id: str,
    on_date: Date,
    price_tiers: Optional[Sequence[PriceTier]]
) -> Optional[PriceTier]:
    """
    Find the price tier of a feed type valid on a date.

    Args:
        feed_type_id: Feed type reference
        on_date: Consumption date
        price_tiers: Candidate tiers of any feed type

    Returns:
        Most recent valid tier, or None
    """
    if not price_tiers:
        return None

    valid = [
        tier for tier in price_tiers
        if tier.feed_type_id == feed_type_id and tier.is_valid_on(on_date)
    ]
    if not valid:
        return None
    return max(valid, key=lambda tier: tier.valid_from)


def calculate_consumption_cost(event: ConsumptionEvent, price_tiers: Sequence[PriceTier]) -> float:
    """Cost of an event from its applicable tier (0 if none)."""
    tier = find_applicable_price_tier(event.feed_type_id, event.date, price_tiers)
    if tier is None:
        return 0.0
    return event.quantity * tier.price_per_unit


def ensure_consumption_costs(
    events: Iterable[ConsumptionEvent],
    price_tiers: Sequence[PriceTier]
) -> List[ConsumptionEvent]:
    """
    Fill in missing consumption costs.

    Events with a positive cost are kept as they are; all others are priced
    from the tiers. Inputs are not modified.

    Args:
        events: Consumption events
        price_tiers: Price tiers

    Returns:
        Events with costs
    """
    result = []
    for event in events:
        if event.total_cost and event.total_cost > 0:
            result.append(event)
        else:
            result.append(event.model_copy(update={"total_cost": calculate_consumption_cost(event, price_tiers)}))
    return result


def price_consumption(
    events: Iterable[ConsumptionEvent],
    price_tiers: Sequence[PriceTier]
) -> List[ConsumptionEvent]:
    """
    Price every event from the tiers, ignoring stored costs.

    The applicable tier's supplier is stamped onto the event so reports and
    evaluations price and attribute consumption the same way.

    Args:
        events: Consumption events
        price_tiers: Price tiers

    Returns:
        Repriced event copies
    """
    result = []
    for event in events:
        tier = find_applicable_price_tier(event.feed_type_id, event.date, price_tiers)
        if tier is None:
            logger.warning(f"No price tier found for feed type {event.feed_type_id} on {event.date}")
            update = {"total_cost": 0.0, "supplier_id": None, "supplier_name": None}
        else:
            update = {
                "total_cost": event.quantity * tier.price_per_unit,
                "supplier_id": tier.supplier_id,
                "supplier_name": tier.supplier_name,
            }
        result.append(event.model_copy(update=update))
    return result


def weighted_average_price(events: Iterable[ConsumptionEvent]) -> float:
    """Total cost / total quantity (0 without quantity)."""
    total_quantity = 0.0
    total_cost = 0.0
    for event in events:
        total_quantity += event.quantity
        total_cost += event.total_cost or 0.0
    if total_quantity == 0:
        return 0.0
    return total_cost / total_quantity
