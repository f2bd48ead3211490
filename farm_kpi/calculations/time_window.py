"""Population and duration calculations over dated group windows.

Animals move between areas during a cycle: 100 animals in a rearing area
that are later split into two fattening areas of 50 each are still 100
animals, not 200. The headcount is the maximum number of animals present at
any single instant.
"""

from dataclasses import dataclass
from datetime import date as Date
from typing import Iterable, List, Optional, Tuple

from farm_kpi.models.cycle import Cycle, GroupDetail
from .clock import Clock, SYSTEM_CLOCK


@dataclass(frozen=True)
class PopulationEntry:
    """
    Animal count present during a window.

    Attributes:
        count: Number of animals
        start: First day present (None = window start)
        end: Last day present (None = window end, or open)
    """
    count: int
    start: Optional[Date] = None
    end: Optional[Date] = None


def max_simultaneous(
    entries: Iterable[PopulationEntry],
    window_start: Date,
    window_end: Optional[Date] = None
) -> int:
    """
    Calculate the maximum number of animals present at any instant.

    The population only changes at an entry boundary, so it is enough to
    evaluate the sum of counts at every distinct start/end date.

    Args:
        entries: Count entries with optional start/end dates
        window_start: Start used for entries without a start date
        window_end: End used for entries without an end date (None = open)

    Returns:
        Maximum simultaneous population (0 for no entries)
    """
    if entries is None:
        raise ValueError("entries must be a collection, got None")

    valid = [e for e in entries if e.count > 0]
    if not valid:
        return 0

    instants = set()
    for entry in valid:
        if entry.start is not None:
            instants.add(entry.start)
        if entry.end is not None:
            instants.add(entry.end)

    # No dates at all: overlap cannot be determined, assume full overlap
    if not instants:
        return sum(e.count for e in valid)

    windows: List[Tuple[Date, Optional[Date], int]] = [
        (
            entry.start if entry.start is not None else window_start,
            entry.end if entry.end is not None else window_end,
            entry.count,
        )
        for entry in valid
    ]

    max_animals = 0
    for instant in sorted(instants):
        present = sum(
            count for start, end, count in windows
            if start <= instant and (end is None or instant <= end)
        )
        max_animals = max(max_animals, present)

    return max_animals


def total_animals_from_details(details: Iterable[GroupDetail], cycle: Cycle) -> int:
    """
    Calculate the cycle headcount from its group details.

    Args:
        details: Group details (zero-count details are ignored)
        cycle: Parent cycle providing the bounding window

    Returns:
        Maximum simultaneous population
    """
    entries = [
        PopulationEntry(count=d.count, start=d.start_date, end=d.end_date)
        for d in details
    ]
    return max_simultaneous(entries, cycle.start_date, cycle.end_date)


def inclusive_days(start: Date, end: Date) -> int:
    """Number of calendar days from start to end, both included."""
    return (end - start).days + 1


def cycle_duration(
    start_date: Date,
    end_date: Optional[Date] = None,
    clock: Clock = SYSTEM_CLOCK
) -> int:
    """
    Calculate cycle duration in days (inclusive, a one-day cycle lasts 1 day).

    Args:
        start_date: Cycle start date
        end_date: Cycle end date (None = ongoing, measured up to today)
        clock: Clock providing today's date for ongoing cycles

    Returns:
        Duration in days
    """
    end = end_date if end_date is not None else clock.today()
    return inclusive_days(start_date, end)


def detail_window(
    detail: GroupDetail,
    cycle: Cycle,
    clock: Clock = SYSTEM_CLOCK
) -> Tuple[Date, Date]:
    """
    Resolve the active window of a group detail.

    Start falls back to the cycle start. End falls back to the cycle end,
    then to today.

    Args:
        detail: Group detail
        cycle: Parent cycle
        clock: Clock for open-ended windows

    Returns:
        (start, end) tuple, both inclusive
    """
    start = detail.start_date or cycle.start_date
    if detail.end_date is not None:
        end = detail.end_date
    elif cycle.end_date is not None:
        end = cycle.end_date
    else:
        end = clock.today()
    return start, end


def detail_contains(
    detail: GroupDetail,
    cycle: Cycle,
    on_date: Date,
    clock: Clock = SYSTEM_CLOCK
) -> bool:
    """Check if a date lies within a detail's active window."""
    start, end = detail_window(detail, cycle, clock)
    return start <= on_date <= end


def animal_days(
    details: Iterable[GroupDetail],
    cycle: Cycle,
    clock: Clock = SYSTEM_CLOCK
) -> int:
    """
    Sum animal-days over details (count × inclusive days present).

    Args:
        details: Group details
        cycle: Parent cycle
        clock: Clock for open-ended windows

    Returns:
        Total animal-days
    """
    total = 0
    for detail in details:
        if not detail.is_active:
            continue
        start, end = detail_window(detail, cycle, clock)
        total += detail.count * max(0, inclusive_days(start, end))
    return total
