"""Effective weight and price resolution for group details.

Animals are usually weighed once at intake and once at the end, often in
different areas. Details that carry no weight of their own therefore
inherit one through a fallback chain.

Start weight priority:
1. Detail value (expected_weight_per_animal)
2. Linked source detail's END weight (start_weight_source_detail_id)
3. Pure end group: count-weighted average start weight of all start groups
4. Cycle-level default
5. Unresolved (None)

End weight, buy price and sell price: detail value, then cycle default.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from farm_kpi.models.cycle import Cycle, GroupDetail

logger = logging.getLogger(__name__)


class WeightSource(str, Enum):
    """Tier of the start-weight chain that produced a value."""
    DIRECT = "direct"
    LINKED = "linked"
    START_GROUP_AVERAGE = "start_group_average"
    CYCLE_DEFAULT = "cycle_default"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class ResolvedValue:
    """
    Resolved value with its provenance.

    Attributes:
        value: Resolved value (None = unresolved)
        source: Chain tier that produced the value
        source_detail_id: Linked detail id (LINKED only)
    """
    value: Optional[float]
    source: WeightSource
    source_detail_id: Optional[str] = None


def _find_detail(details: Sequence[GroupDetail], detail_id: str) -> Optional[GroupDetail]:
    for candidate in details:
        if candidate.id == detail_id:
            return candidate
    return None


def resolve_start_weight(
    detail: GroupDetail,
    all_details: Sequence[GroupDetail],
    cycle: Cycle
) -> ResolvedValue:
    """
    Resolve a detail's start weight through the fallback chain.

    Args:
        detail: Detail to resolve
        all_details: All details of the same cycle (for chaining)
        cycle: Parent cycle (for the default)

    Returns:
        ResolvedValue with value and source tier
    """
    if detail.expected_weight_per_animal is not None:
        return ResolvedValue(detail.expected_weight_per_animal, WeightSource.DIRECT)

    if detail.start_weight_source_detail_id:
        source = _find_detail(all_details, detail.start_weight_source_detail_id)
        if source is None:
            logger.warning(
                f"Detail {detail.id} links start weight to unknown detail "
                f"{detail.start_weight_source_detail_id} in cycle {cycle.id}"
            )
        elif source.actual_weight_per_animal is not None:
            # Only the source's END weight may be inherited
            return ResolvedValue(
                source.actual_weight_per_animal,
                WeightSource.LINKED,
                source_detail_id=source.id,
            )

    if detail.is_end_group and not detail.is_start_group:
        start_groups = [
            d for d in all_details
            if d.is_start_group and d.expected_weight_per_animal is not None and d.count > 0
        ]
        total_count = sum(g.count for g in start_groups)
        if total_count > 0:
            weighted = sum(g.expected_weight_per_animal * g.count for g in start_groups)
            return ResolvedValue(weighted / total_count, WeightSource.START_GROUP_AVERAGE)

    if cycle.expected_weight_per_animal is not None:
        return ResolvedValue(cycle.expected_weight_per_animal, WeightSource.CYCLE_DEFAULT)

    return ResolvedValue(None, WeightSource.UNRESOLVED)


def effective_start_weight(
    detail: GroupDetail,
    all_details: Sequence[GroupDetail],
    cycle: Cycle
) -> Optional[float]:
    """Effective start weight (kg/animal), None if unresolved."""
    return resolve_start_weight(detail, all_details, cycle).value


def effective_end_weight(detail: GroupDetail, cycle: Cycle) -> Optional[float]:
    """Effective end weight (kg/animal): detail value, then cycle default."""
    if detail.actual_weight_per_animal is not None:
        return detail.actual_weight_per_animal
    return cycle.actual_weight_per_animal


def effective_buy_price(detail: GroupDetail, cycle: Cycle) -> Optional[float]:
    """Effective purchase price per animal: detail value, then cycle default."""
    if detail.buy_price_per_animal is not None:
        return detail.buy_price_per_animal
    return cycle.buy_price_per_animal


def effective_sell_price(detail: GroupDetail, cycle: Cycle) -> Optional[float]:
    """Effective sale price per animal: detail value, then cycle default."""
    if detail.sell_price_per_animal is not None:
        return detail.sell_price_per_animal
    return cycle.sell_price_per_animal
