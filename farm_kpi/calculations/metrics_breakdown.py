"""KPI result data models.

Immutable records produced whole by one calculation call. All records are
plain data and serialize with ``to_dict()``.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CycleMetrics:
    """
    Cycle-level KPIs.

    Attributes:
        total_animals: Maximum animals present at any time
        animals_with_weights: Animals with both start and end weight resolved
        average_weight: Count-weighted average end weight (kg)
        start_weight: Count-weighted average start weight (kg)
        weight_gain: Count-weighted average weight gain (kg/animal)
        feed_conversion_ratio: Feed quantity per kg gained (0 if undefined)
        mortality_rate: Mortality rate (%)
        total_feed_cost: Consumption cost + feed-category transactions
        total_feed_quantity: Consumed feed quantity within active windows
        feed_cost_per_animal: Total feed cost per animal
        feed_cost_per_kg: Total feed cost per kg gained
        total_revenue: Animal sales + additional income
        total_costs: Feed + additional + animal purchase costs
        profit_loss: Revenue minus costs
        profit_margin: Profit/loss as percent of revenue
        cycle_duration: Inclusive duration in days
        daily_feed_cost: Feed cost per day
        feed_efficiency: kg gained per currency unit of feed
        animal_purchase_cost: Purchase cost of attributed details
        additional_costs: Non-feed cost transactions
        daily_gain_grams: Weight gain per day in grams (None if not computable)
        net_daily_gain_grams: Slaughter weight per lifetime day in grams (None if not computable)
        feed_category_transaction_costs: Feed-category cost transactions
        consumption_feed_cost: Consumption-only feed cost
        additional_income: Income transactions (premiums, bonuses, subsidies)
        animal_sales_revenue: Sales revenue of attributed details
    """
    total_animals: int = 0
    animals_with_weights: int = 0
    average_weight: float = 0.0
    start_weight: float = 0.0
    weight_gain: float = 0.0
    feed_conversion_ratio: float = 0.0
    mortality_rate: float = 0.0
    total_feed_cost: float = 0.0
    total_feed_quantity: float = 0.0
    feed_cost_per_animal: float = 0.0
    feed_cost_per_kg: float = 0.0
    total_revenue: float = 0.0
    total_costs: float = 0.0
    profit_loss: float = 0.0
    profit_margin: float = 0.0
    cycle_duration: int = 0
    daily_feed_cost: float = 0.0
    feed_efficiency: float = 0.0
    animal_purchase_cost: float = 0.0
    additional_costs: float = 0.0
    daily_gain_grams: Optional[float] = None
    net_daily_gain_grams: Optional[float] = None
    feed_category_transaction_costs: float = 0.0
    consumption_feed_cost: float = 0.0
    additional_income: float = 0.0
    animal_sales_revenue: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary representation."""
        return asdict(self)

    def __str__(self) -> str:
        """String representation."""
        return (
            f"Cycle Metrics: {self.total_animals} animals, {self.cycle_duration} days\n"
            f"  Revenue: {self.total_revenue:,.2f} "
            f"(sales {self.animal_sales_revenue:,.2f}, income {self.additional_income:,.2f})\n"
            f"  Costs: {self.total_costs:,.2f} "
            f"(feed {self.total_feed_cost:,.2f}, animals {self.animal_purchase_cost:,.2f}, "
            f"other {self.additional_costs:,.2f})\n"
            f"  Profit/Loss: {self.profit_loss:,.2f} ({self.profit_margin:.1f}%)\n"
            f"  FCR: {self.feed_conversion_ratio:.2f}, gain {self.weight_gain:.1f} kg/animal"
        )


@dataclass(frozen=True)
class FeedTypeUsage:
    """Feed quantity and cost of one feed type within an area group."""
    feed_type_id: str
    name: str
    quantity: float = 0.0
    cost: float = 0.0


@dataclass(frozen=True)
class AreaMetrics:
    """
    KPIs of one area or area group within a cycle.

    Attributes:
        area_id: Area id or area group id (group key)
        area_name: Display name
        is_group: Key refers to an area group
        animal_count: Animals in the group
        animal_type: Animal type label
        total_feed_quantity: Feed attributed to the group
        total_feed_cost: Feed cost attributed to the group
        feed_cost_per_animal: Group feed cost per animal
        allocated_cost_per_animal: Shared costs allocated per animal
        total_cost_per_animal: Buy price + feed + allocated shared costs
        feed_cost_per_day: Group feed cost per cycle day
        feed_cost_per_kg: Group feed cost per kg gained
        percentage_of_total: Share of all tracked groups' feed cost (%)
        profit_loss_direct_per_animal: Sell − buy − own feed cost
        profit_loss_full_per_animal: Sell − total cost per animal
        feed_types: Feed usage by feed type id
        start_weight: Resolved start weight (kg)
        end_weight: Resolved end weight (kg)
        weight_gain: Positive weight gain (kg), None otherwise
        weight_source: Start-weight chain tier
        weight_source_label: Linked detail's location name (linked weights)
    """
    area_id: str
    area_name: str
    is_group: bool = False
    animal_count: int = 0
    animal_type: str = ""
    total_feed_quantity: float = 0.0
    total_feed_cost: float = 0.0
    feed_cost_per_animal: float = 0.0
    allocated_cost_per_animal: float = 0.0
    total_cost_per_animal: float = 0.0
    feed_cost_per_day: float = 0.0
    feed_cost_per_kg: float = 0.0
    percentage_of_total: float = 0.0
    profit_loss_direct_per_animal: float = 0.0
    profit_loss_full_per_animal: float = 0.0
    feed_types: Dict[str, FeedTypeUsage] = field(default_factory=dict)
    start_weight: Optional[float] = None
    end_weight: Optional[float] = None
    weight_gain: Optional[float] = None
    weight_source: Optional[str] = None
    weight_source_label: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary representation."""
        return asdict(self)

    def __str__(self) -> str:
        """String representation."""
        return (
            f"{self.area_name}: {self.animal_count} animals, feed {self.total_feed_cost:,.2f} "
            f"({self.percentage_of_total:.1f}%), P/L direct {self.profit_loss_direct_per_animal:,.2f} "
            f"/ full {self.profit_loss_full_per_animal:,.2f} per animal"
        )


@dataclass(frozen=True)
class FeedComponentSummary:
    """
    Cycle consumption of one feed type.

    Attributes:
        feed_type_id: Feed type reference
        feed_type_name: Feed type display name
        unit: Feed unit
        total_quantity: Consumed quantity
        total_cost: Consumption cost
        weighted_avg_price: Total cost / total quantity
        percentage_of_total: Share of total feed cost (%)
        daily_consumption: Quantity per cycle day
        quantity_per_animal_per_day: Quantity per animal-day
        quantity_per_animal: Quantity per animal over the whole cycle
    """
    feed_type_id: str
    feed_type_name: str
    unit: str
    total_quantity: float = 0.0
    total_cost: float = 0.0
    weighted_avg_price: float = 0.0
    percentage_of_total: float = 0.0
    daily_consumption: float = 0.0
    quantity_per_animal_per_day: float = 0.0
    quantity_per_animal: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary representation."""
        return asdict(self)

    def __str__(self) -> str:
        """String representation."""
        return (
            f"{self.feed_type_name}: {self.total_quantity:,.1f} {self.unit} "
            f"@ {self.weighted_avg_price:.4f} = {self.total_cost:,.2f} ({self.percentage_of_total:.1f}%)"
        )
