"""Occurrence generator: maps a recurrence descriptor to concrete due dates."""
from datetime import date, timedelta
from typing import Iterator, List, Optional
import logging

from budget_recurrence.config import MAX_OCCURRENCE_SCAN, BUSINESS_DAY_SHIFT
from budget_recurrence.schedule.calendar import (
    add_months,
    last_business_day_of_month,
    month_index,
    nearest_business_day,
)
from budget_recurrence.schedule.recurrence import RecurrenceDescriptor


logger = logging.getLogger(__name__)


class ScanCeilingReached(Exception):
    """A schedule stopped advancing for more steps than the scan ceiling allows."""


def occurrence_at(
    descriptor: RecurrenceDescriptor,
    n: int,
    direction: Optional[str] = None
) -> Optional[date]:
    """Return the n-th (0-based) occurrence of a recurrence.

    Args:
        descriptor: Recurrence rule
        n: Occurrence index, 0 is the first cycle
        direction: Weekend shift policy for business_days_only
            (default: config.BUSINESS_DAY_SHIFT)

    Returns:
        The occurrence date before any end date check, or None when it
        would fall past the last representable date
    """
    if n < 0:
        raise ValueError(f"Occurrence index must be non-negative: {n}")

    frequency = descriptor.frequency
    shift = direction or BUSINESS_DAY_SHIFT

    try:
        if frequency.is_month_based:
            months = n * frequency.month_step
            if descriptor.last_business_day_of_month:
                anchor = add_months(descriptor.start_date.replace(day=1), months)
                return last_business_day_of_month(anchor.year, anchor.month)
            occurrence = add_months(descriptor.start_date, months)
        else:
            occurrence = descriptor.start_date + timedelta(days=n * frequency.cycle_days)
    except (OverflowError, ValueError):
        return None

    if descriptor.business_days_only:
        occurrence = nearest_business_day(occurrence, shift)
    return occurrence


def _first_candidate_index(descriptor: RecurrenceDescriptor, from_date: date) -> int:
    """Index of the last cycle known to fall before from_date (0 if none).

    Every occurrence before this index is strictly earlier than from_date,
    so scanning can begin here with the same result as scanning from 0.
    """
    frequency = descriptor.frequency
    if frequency.is_month_based:
        elapsed = month_index(from_date) - month_index(descriptor.start_date)
        cycles = elapsed // frequency.month_step
    else:
        cycles = (from_date - descriptor.start_date).days // frequency.cycle_days
    return max(0, cycles - 1)


def iter_occurrences(
    descriptor: RecurrenceDescriptor,
    start_index: int = 0,
    direction: Optional[str] = None,
    max_stalls: Optional[int] = None
) -> Iterator[date]:
    """Lazily yield occurrences in ascending order without duplicates.

    Stops at the descriptor's end date or at the end of the calendar.
    Only steps that fail to move past the previous occurrence count toward
    the ceiling (default: config.MAX_OCCURRENCE_SCAN); once that many pile
    up in a row a warning is logged and ScanCeilingReached is raised.
    """
    if max_stalls is None:
        max_stalls = MAX_OCCURRENCE_SCAN

    previous = None
    stalls = 0
    index = start_index
    while True:
        occurrence = occurrence_at(descriptor, index, direction)
        index += 1
        if occurrence is None:
            return
        if descriptor.end_date is not None and occurrence > descriptor.end_date:
            return

        if previous is not None and occurrence <= previous:
            stalls += 1
            if stalls >= max_stalls:
                logger.warning(
                    f"Occurrence scan ceiling ({max_stalls}) reached for "
                    f"{descriptor.frequency.key} schedule starting {descriptor.start_date}"
                )
                raise ScanCeilingReached(descriptor)
            continue

        stalls = 0
        previous = occurrence
        yield occurrence


def find_first_occurrence_on_or_after(
    descriptor: RecurrenceDescriptor,
    from_date: date,
    direction: Optional[str] = None
) -> Optional[date]:
    """Return the first occurrence >= from_date, or None if the schedule is exhausted."""
    start_index = _first_candidate_index(descriptor, from_date)
    try:
        for occurrence in iter_occurrences(descriptor, start_index, direction):
            if occurrence >= from_date:
                return occurrence
    except ScanCeilingReached:
        return None
    return None


def enumerate_occurrences(
    descriptor: RecurrenceDescriptor,
    range_start: date,
    range_end: date,
    direction: Optional[str] = None
) -> List[date]:
    """Return all occurrences within [range_start, range_end], ascending.

    Occurrences after the descriptor's end date are never included. An
    inverted range, or a schedule that hits the scan ceiling, yields an
    empty list.
    """
    if range_start > range_end:
        return []

    dates = []
    start_index = _first_candidate_index(descriptor, range_start)
    try:
        for occurrence in iter_occurrences(descriptor, start_index, direction):
            if occurrence > range_end:
                break
            if occurrence >= range_start:
                dates.append(occurrence)
    except ScanCeilingReached:
        return []

    logger.debug(
        f"{len(dates)} {descriptor.frequency.key} occurrences between {range_start} and {range_end}"
    )
    return dates
