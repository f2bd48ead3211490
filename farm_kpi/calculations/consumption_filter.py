"""Consumption timeframe filtering.

Consumption only counts while animals are actually present: an event must
belong to a location tracked by an active group detail (directly by area,
or through the area's group membership) and fall within that detail's
window.
"""

import logging
from collections import defaultdict
from datetime import date as Date
from typing import Dict, Iterable, List, Optional, Sequence

from farm_kpi.models.consumption import ConsumptionEvent
from farm_kpi.models.cycle import Cycle, GroupDetail
from .clock import Clock, SYSTEM_CLOCK
from .time_window import detail_window

logger = logging.getLogger(__name__)


class DetailLocationIndex:
    """
    Lookup of active group details by area id and area group id.

    Built once per cycle so filtering stays linear in the number of events.
    """

    def __init__(self, details: Iterable[GroupDetail]):
        self.by_area: Dict[str, List[GroupDetail]] = defaultdict(list)
        self.by_group: Dict[str, List[GroupDetail]] = defaultdict(list)
        for detail in details:
            if not detail.is_active:
                continue
            if detail.area_id:
                self.by_area[detail.area_id].append(detail)
            if detail.area_group_id:
                self.by_group[detail.area_group_id].append(detail)

    def candidates(self, event: ConsumptionEvent) -> List[GroupDetail]:
        """Details whose location matches the event, direct matches first."""
        matches: List[GroupDetail] = []
        if event.area_id:
            matches.extend(self.by_area.get(event.area_id, []))
        if event.area_group_id:
            matches.extend(self.by_group.get(event.area_group_id, []))
        return matches


def find_active_detail(
    event: ConsumptionEvent,
    candidates: Sequence[GroupDetail],
    cycle: Cycle,
    clock: Clock = SYSTEM_CLOCK
) -> Optional[GroupDetail]:
    """
    Find the first candidate detail whose window contains the event date.

    Args:
        event: Consumption event
        candidates: Location-matched details
        cycle: Parent cycle (window fallbacks)
        clock: Clock for open-ended windows

    Returns:
        Matching detail, or None
    """
    for detail in candidates:
        start, end = detail_window(detail, cycle, clock)
        if start <= event.date <= end:
            return detail
    return None


def filter_active_consumption(
    events: Iterable[ConsumptionEvent],
    details: Sequence[GroupDetail],
    cycle: Cycle,
    cycle_end_date: Optional[Date] = None,
    clock: Clock = SYSTEM_CLOCK
) -> List[ConsumptionEvent]:
    """
    Keep only consumption that falls within an active group's window.

    Every location-matching detail is checked, not only the first one: an
    area used by two groups one after the other keeps the consumption of
    both periods.

    Args:
        events: Consumption events (not modified)
        details: Group details with timeframes
        cycle: Parent cycle (start-date fallback)
        cycle_end_date: End-date fallback for open details (defaults to cycle.end_date)
        clock: Clock used when neither detail nor cycle has an end date

    Returns:
        Events within an active window, in input order
    """
    if events is None:
        raise ValueError("events must be a collection, got None")
    if details is None:
        raise ValueError("details must be a collection, got None")

    if cycle_end_date is not None and cycle_end_date != cycle.end_date:
        cycle = cycle.model_copy(update={"end_date": cycle_end_date})

    index = DetailLocationIndex(details)
    kept: List[ConsumptionEvent] = []
    dropped = 0
    for event in events:
        if find_active_detail(event, index.candidates(event), cycle, clock) is not None:
            kept.append(event)
        else:
            dropped += 1

    if dropped:
        logger.debug(f"Cycle {cycle.id}: kept {len(kept)} consumption events, dropped {dropped} outside active windows")

    return kept
