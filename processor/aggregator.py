"""Day and week aggregation of event occurrences."""
from typing import Dict, Iterable, List, Mapping

from processor.day_keys import local_day_key, week_key as week_key_for
from processor.models import DaySummary, Occurrence, WeekSummary, attendance_value


def group_by_day(occurrences: Iterable[Occurrence]) -> Dict[str, List[Occurrence]]:
    """
    Group occurrences by day key, preserving input order.

    Occurrences without a day key fall back to their start's day key; those
    with neither are dropped.
    """
    grouped: Dict[str, List[Occurrence]] = {}

    for occurrence in occurrences:
        key = occurrence.day_key
        if not key and occurrence.event is not None:
            key = local_day_key(occurrence.start)
        if not key:
            continue
        grouped.setdefault(key, []).append(occurrence)

    return grouped


def day_summary(occurrences: Iterable[Occurrence]) -> DaySummary:
    """Summarize one day's occurrences."""
    items = tuple(occurrences)
    return DaySummary(
        event_count=len(items),
        attendance_sum=sum(attendance_value(o.attendance) for o in items),
        occurrences=items
    )


def week_summary(day_summaries: Mapping[str, DaySummary], week_key: str) -> WeekSummary:
    """
    Summarize the days of one Monday-start week.

    Args:
        day_summaries: DaySummary per day key
        week_key: Monday day key of the week

    Returns:
        WeekSummary over the days belonging to that week
    """
    day_keys = [key for key in day_summaries if week_key_for(key) == week_key]
    return WeekSummary(
        week_key=week_key,
        event_count=sum(day_summaries[key].event_count for key in day_keys),
        attendance_sum=sum(day_summaries[key].attendance_sum for key in day_keys),
        day_keys=tuple(day_keys)
    )


def summaries_by_week(day_summaries: Mapping[str, DaySummary]) -> Dict[str, WeekSummary]:
    """Build a WeekSummary for every week touched by the given days."""
    week_keys = []
    for day_key in day_summaries:
        key = week_key_for(day_key)
        if key not in week_keys:
            week_keys.append(key)

    return {key: week_summary(day_summaries, key) for key in week_keys}
