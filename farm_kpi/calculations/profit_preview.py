"""Estimated profit/loss for data-entry previews.

Uses the same revenue/cost decomposition as CycleMetricsCalculator so a
preview matches the later calculated value for equivalent inputs:

    profit_loss = animals × sell − animals × buy − feed cost − additional costs
"""

from typing import Optional


def estimate_profit_loss(
    total_animals: int,
    buy_price_per_animal: Optional[float] = None,
    sell_price_per_animal: Optional[float] = None,
    total_feed_cost: Optional[float] = None,
    additional_costs: Optional[float] = None
) -> Optional[float]:
    """
    Estimate profit/loss from form inputs.

    Args:
        total_animals: Number of animals
        buy_price_per_animal: Purchase price per animal (missing = 0)
        sell_price_per_animal: Sale price per animal (missing = 0)
        total_feed_cost: Feed cost (missing = 0)
        additional_costs: Other costs (missing = 0)

    Returns:
        Estimated profit/loss, or None when there are no animals
    """
    if total_animals == 0:
        return None

    revenue = total_animals * (sell_price_per_animal or 0.0)
    animal_purchase_cost = total_animals * (buy_price_per_animal or 0.0)
    return revenue - animal_purchase_cost - (total_feed_cost or 0.0) - (additional_costs or 0.0)
