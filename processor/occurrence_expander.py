"""Expand normalized events into per-day occurrences."""
import logging
from datetime import timedelta
from typing import Iterable, List

from processor.day_keys import local_day_key, start_of_day
from processor.models import NormalizedEvent, Occurrence

logger = logging.getLogger(__name__)

MAX_SPAN_DAYS = 60
MIN_SPLIT_DURATION = timedelta(hours=24)


def span_day_keys(event: NormalizedEvent) -> List[str]:
    """
    Compute the local day keys an event is counted on.

    Events shorter than 24 hours stay on their start day even when they cross
    midnight. Longer events cover every local day from the start day through
    the end day, unless that range exceeds MAX_SPAN_DAYS. An end at exactly
    local midnight closes the previous day.

    Args:
        event: Normalized event

    Returns:
        Ordered list of day keys (never empty)
    """
    start, end = event.start, event.end
    single_day = [local_day_key(start)]

    if end is None or end <= start or end - start < MIN_SPLIT_DURATION:
        return single_day

    first_day = start_of_day(start)
    last_day = start_of_day(end)
    if end == last_day:
        # Ending exactly at midnight does not occupy the new day
        last_day -= timedelta(days=1)
    span = (last_day.date() - first_day.date()).days + 1

    if span > MAX_SPAN_DAYS:
        logger.warning(
            f"Event {event.get('title', '')!r} spans {span} days; "
            f"counting it on its start day only"
        )
        return single_day

    return [local_day_key(first_day + timedelta(days=offset)) for offset in range(span)]


def expand(events: Iterable[NormalizedEvent]) -> List[Occurrence]:
    """
    Split events into one occurrence per spanned local day.

    A positive attendance estimate is divided evenly across the occurrences.

    Args:
        events: Normalized events

    Returns:
        List of Occurrence objects, grouped by event in input order
    """
    occurrences = []

    for event in events:
        day_keys = span_day_keys(event)
        span = len(day_keys)

        estimate = event.attendance_estimate
        allocated = estimate / span if estimate is not None else None

        for index, day_key in enumerate(day_keys, start=1):
            occurrences.append(Occurrence(
                event=event,
                day_key=day_key,
                is_multi_day=span > 1,
                span_days=span,
                span_index=index,
                attendance_allocated=allocated
            ))

    return occurrences
