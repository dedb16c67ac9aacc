"""Build the render model for the current view."""
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from processor.aggregator import day_summary, group_by_day, summaries_by_week
from processor.day_keys import add_days, local_day_key, week_start_monday
from processor.intensity import (
    clamp_for_display,
    day_intensity,
    peak_intensity,
    week_intensities,
)
from processor.models import (
    DayForecast,
    DaySummary,
    Occurrence,
    WeatherFeed,
    WeekSummary,
)
from view.view_state import DAY, MONTH, ViewState

WEEK_DAYS = 7
MONTH_ROWS = 5


@dataclass(frozen=True)
class DayCell:
    """One displayed day."""
    day_key: str
    summary: Optional[DaySummary] = None
    intensity: float = 0.0
    forecast: Optional[DayForecast] = None
    is_placeholder: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'dayKey': self.day_key,
            'summary': self.summary.to_dict() if self.summary else None,
            'intensity': self.intensity,
            'forecast': self.forecast.to_dict() if self.forecast else None,
            'isPlaceholder': self.is_placeholder
        }


@dataclass(frozen=True)
class WeekCell:
    """One displayed week with its relative intensity."""
    summary: WeekSummary
    intensity: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = self.summary.to_dict()
        data['intensity'] = self.intensity
        return data


@dataclass
class RenderModel:
    """Everything the presentation layer needs to draw one view."""
    view: ViewState
    days: Tuple[DayCell, ...]
    weeks: Tuple[WeekCell, ...]
    grouped: Dict[str, List[Occurrence]]
    peak_intensity: float
    header_forecast: Optional[DayForecast] = None
    weather_available: bool = False
    events_generated_at: Optional[str] = None
    events_error: Optional[str] = None
    weather_error: Optional[str] = None

    @property
    def display_intensity(self) -> float:
        return clamp_for_display(self.peak_intensity)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'view': self.view.to_dict(),
            'days': [cell.to_dict() for cell in self.days],
            'weeks': [cell.to_dict() for cell in self.weeks],
            'grouped': {
                key: [occurrence.to_dict() for occurrence in items]
                for key, items in self.grouped.items()
            },
            'peakIntensity': self.peak_intensity,
            'displayIntensity': self.display_intensity,
            'headerForecast': self.header_forecast.to_dict() if self.header_forecast else None,
            'weatherAvailable': self.weather_available,
            'eventsGeneratedAt': self.events_generated_at,
            'eventsError': self.events_error,
            'weatherError': self.weather_error
        }


def displayed_day_keys(state: ViewState, today: date) -> List[Tuple[str, bool]]:
    """
    List the day keys a view shows, each with a placeholder flag.

    Week: seven days from the override (or today). Day: the selected day.
    Month: five Monday-aligned rows starting on the Monday of today's week,
    with days before today as placeholders.
    """
    today_key = local_day_key(today)

    if state.mode == DAY:
        return [(state.selected_day or today_key, False)]

    if state.mode == MONTH:
        grid_start = local_day_key(week_start_monday(today))
        keys = [add_days(grid_start, offset) for offset in range(MONTH_ROWS * WEEK_DAYS)]
        return [(key, key < today_key) for key in keys]

    start = state.week_start_override or today_key
    return [(add_days(start, offset), False) for offset in range(WEEK_DAYS)]


def select_view(
    state: ViewState,
    occurrences: Iterable[Occurrence],
    today: date,
    weather: Optional[WeatherFeed] = None
) -> RenderModel:
    """
    Slice the occurrences for the current view and score them.

    Args:
        state: Current view state
        occurrences: Expanded occurrences of the latest snapshot
        today: Current local date
        weather: Latest weather feed, if any

    Returns:
        RenderModel for the view
    """
    grouped_all = group_by_day(occurrences)
    day_keys = displayed_day_keys(state, today)

    days = []
    day_summaries: Dict[str, DaySummary] = {}

    for key, is_placeholder in day_keys:
        if is_placeholder:
            days.append(DayCell(day_key=key, is_placeholder=True))
            continue

        summary = day_summary(grouped_all.get(key, []))
        day_summaries[key] = summary
        days.append(DayCell(
            day_key=key,
            summary=summary,
            intensity=day_intensity(summary),
            forecast=weather.forecast_for_day(key) if weather else None
        ))

    # Placeholders carry no summary; the first month row still holds today
    week_summaries = summaries_by_week(day_summaries)
    scores = week_intensities(week_summaries)
    weeks = tuple(WeekCell(summary=summary, intensity=scores[key])
                  for key, summary in week_summaries.items())

    if state.mode == DAY:
        selected = day_keys[0][0]
        grouped = {selected: sorted(grouped_all.get(selected, []), key=lambda o: o.start)}
    else:
        grouped = {
            key: sorted(grouped_all[key], key=lambda o: o.start)
            for key in day_summaries if key in grouped_all
        }

    if state.mode == MONTH:
        peak = peak_intensity(cell.intensity for cell in weeks)
    else:
        peak = peak_intensity(cell.intensity for cell in days)

    weather_available = bool(weather and weather.ok)

    return RenderModel(
        view=state,
        days=tuple(days),
        weeks=weeks,
        grouped=grouped,
        peak_intensity=peak,
        header_forecast=weather.header_forecast(local_day_key(today)) if weather else None,
        weather_available=weather_available
    )
