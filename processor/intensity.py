"""Intensity scoring for day and week summaries."""
from typing import Dict, Iterable, Mapping, Union

from processor.models import DaySummary, WeekSummary

DAY_ATTENDANCE_CAP = 15000
DAY_COUNT_CAP = 5

ATTENDANCE_WEIGHT = 0.6
COUNT_WEIGHT = 0.4
GAMMA = 1.8

DISPLAY_MIN = 0.25
DISPLAY_MAX = 0.75

Summary = Union[DaySummary, WeekSummary]


def intensity(summary: Summary, attendance_cap: float, count_cap: float) -> float:
    """
    Score how busy a summary is on a 0..1 scale.

    Attendance and event count are each normalized against their cap, blended
    60/40 and curved with a 1.8 gamma so quiet days stay low and busy days
    stay apart.

    Args:
        summary: Day or week summary
        attendance_cap: Attendance that counts as fully busy
        count_cap: Event count that counts as fully busy

    Returns:
        Score in [0, 1]

    Raises:
        ValueError: If a cap is not positive
    """
    if attendance_cap <= 0 or count_cap <= 0:
        raise ValueError(
            f"Intensity caps must be positive, got {attendance_cap} and {count_cap}"
        )

    a = min(max(summary.attendance_sum, 0) / attendance_cap, 1.0)
    c = min(max(summary.event_count, 0) / count_cap, 1.0)
    blended = ATTENDANCE_WEIGHT * a + COUNT_WEIGHT * c
    return blended ** GAMMA


def day_intensity(summary: DaySummary) -> float:
    """Absolute intensity of a day against fixed venue-scale caps."""
    return intensity(summary, DAY_ATTENDANCE_CAP, DAY_COUNT_CAP)


def week_intensities(week_summaries: Mapping[str, WeekSummary]) -> Dict[str, float]:
    """
    Relative intensity of each week among the weeks in view.

    Caps are the largest attendance sum and event count across the given
    weeks, each at least 1.
    """
    summaries = list(week_summaries.values())
    attendance_cap = max([s.attendance_sum for s in summaries] + [1])
    count_cap = max([s.event_count for s in summaries] + [1])

    return {
        key: intensity(summary, attendance_cap, count_cap)
        for key, summary in week_summaries.items()
    }


def peak_intensity(scores: Iterable[float]) -> float:
    """Unclamped maximum of the displayed scores (0 when nothing is shown)."""
    return max(scores, default=0.0)


def clamp_for_display(score: float, low: float = DISPLAY_MIN, high: float = DISPLAY_MAX) -> float:
    """Clamp a score into the sub-range the header bar renders."""
    return min(max(score, low), high)
