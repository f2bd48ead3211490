"""Pivot tables over feed consumption.

Consumption can be broken down along time dimensions (date, week, month,
quarter, year) and master-data dimensions (feed type, area, area group,
supplier). Missing master data is shown under a fixed label so every event
lands in exactly one row.
"""

from enum import Enum
from typing import Iterable, Optional, Sequence

import pandas as pd

from farm_kpi.models.consumption import ConsumptionEvent


class PivotDimension(str, Enum):
    """Dimensions a consumption pivot can be grouped by."""
    DATE = "date"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"
    FEED_TYPE = "feed_type"
    AREA = "area"
    AREA_GROUP = "area_group"
    SUPPLIER = "supplier"


class PivotValue(str, Enum):
    """Measures a consumption pivot can show."""
    QUANTITY = "quantity"
    TOTAL_COST = "total_cost"
    PRICE_PER_UNIT = "price_per_unit"


class PivotAggregation(str, Enum):
    """Aggregation functions."""
    SUM = "sum"
    AVG = "avg"
    COUNT = "count"
    MIN = "min"
    MAX = "max"


_PANDAS_AGGREGATION = {
    PivotAggregation.SUM: "sum",
    PivotAggregation.AVG: "mean",
    PivotAggregation.COUNT: "count",
    PivotAggregation.MIN: "min",
    PivotAggregation.MAX: "max",
}

UNKNOWN_FEED_TYPE = "Unbekannt"
NO_AREA = "Ohne Bereich"
NO_AREA_GROUP = "Ohne Gruppe"
NO_SUPPLIER = "Ohne Lieferant"
TOTAL_LABEL = "Gesamt"


def consumption_to_dataframe(events: Iterable[ConsumptionEvent]) -> pd.DataFrame:
    """
    Flat table of consumption events with all pivot dimensions.

    Args:
        events: Consumption events

    Returns:
        DataFrame with one row per event
    """
    rows = []
    for event in events:
        iso_year, iso_week, _ = event.date.isocalendar()
        quarter = (event.date.month - 1) // 3 + 1
        rows.append({
            "date": event.date.isoformat(),
            "week": f"{iso_year}-W{iso_week:02d}",
            "month": f"{event.date.year}-{event.date.month:02d}",
            "quarter": f"{event.date.year}-Q{quarter}",
            "year": str(event.date.year),
            "feed_type": event.feed_type_name or UNKNOWN_FEED_TYPE,
            "area": event.area_name or NO_AREA,
            "area_group": event.area_group_name or NO_AREA_GROUP,
            "supplier": event.supplier_name or NO_SUPPLIER,
            "quantity": event.quantity,
            "total_cost": event.total_cost or 0.0,
            "price_per_unit": (event.total_cost or 0.0) / event.quantity if event.quantity else 0.0,
        })

    columns = [d.value for d in PivotDimension] + [v.value for v in PivotValue]
    return pd.DataFrame(rows, columns=columns)


def build_consumption_pivot(
    events: Iterable[ConsumptionEvent],
    rows: Sequence[PivotDimension],
    columns: Optional[PivotDimension] = None,
    value: PivotValue = PivotValue.TOTAL_COST,
    aggregation: PivotAggregation = PivotAggregation.SUM,
    totals: bool = True
) -> pd.DataFrame:
    """
    Build a consumption pivot table.

    For price per unit with SUM aggregation the price is derived from the
    summed cost and quantity of each cell (a weighted average price), not
    by adding up unit prices.

    Args:
        events: Consumption events
        rows: Row dimensions (outermost first)
        columns: Optional column dimension
        value: Measure to show
        aggregation: Aggregation function
        totals: Add a "Gesamt" row (and column)

    Returns:
        Pivot table (empty DataFrame for no events)

    Raises:
        ValueError: If no row dimension is given
    """
    if not rows:
        raise ValueError("At least one row dimension is required")

    data = consumption_to_dataframe(events)
    if data.empty:
        return pd.DataFrame()

    index = [PivotDimension(d).value for d in rows]
    pivot_columns = [PivotDimension(columns).value] if columns else None
    value = PivotValue(value)
    aggregation = PivotAggregation(aggregation)

    def pivot(measure: str, aggfunc: str) -> pd.DataFrame:
        return pd.pivot_table(
            data,
            index=index,
            columns=pivot_columns,
            values=measure,
            aggfunc=aggfunc,
            fill_value=0,
            margins=totals,
            margins_name=TOTAL_LABEL,
        )

    if value == PivotValue.PRICE_PER_UNIT and aggregation == PivotAggregation.SUM:
        cost = pivot(PivotValue.TOTAL_COST.value, "sum")
        quantity = pivot(PivotValue.QUANTITY.value, "sum")
        # Same index and columns; divide by position so value column names don't matter
        price = (cost / quantity.where(quantity != 0).to_numpy()).fillna(0.0)
        if pivot_columns is None:
            price.columns = [value.value]
        return price

    return pivot(value.value, _PANDAS_AGGREGATION[aggregation])
