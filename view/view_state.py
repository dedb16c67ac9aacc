"""View state and user-triggered transitions."""
import logging
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Mapping, Optional

from processor.day_keys import (
    is_day_key,
    local_day_key,
    parse_day_key,
    week_start_monday,
)

logger = logging.getLogger(__name__)

WEEK = 'week'
DAY = 'day'
MONTH = 'month'
VIEW_MODES = (WEEK, DAY, MONTH)

PREVIEW_TRUE_VALUES = ('', '1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class ViewState:
    """Which view is shown and what it is anchored on."""
    mode: str = WEEK
    selected_day: Optional[str] = None
    week_start_override: Optional[str] = None
    preview: bool = False

    def to_dict(self) -> dict:
        return {
            'mode': self.mode,
            'selectedDay': self.selected_day,
            'weekStartOverride': self.week_start_override,
            'preview': self.preview
        }


def is_preview(params: Mapping[str, Optional[str]]) -> bool:
    """Preview is on when the parameter is present and empty or truthy."""
    if 'preview' not in params or params['preview'] is None:
        return False
    return str(params['preview']).strip().lower() in PREVIEW_TRUE_VALUES


def initial_view_state(params: Optional[Mapping[str, Optional[str]]], today: date) -> ViewState:
    """
    Build the starting view from query parameters.

    Args:
        params: Query parameters (view, day, weekStart, preview)
        today: Current local date

    Returns:
        ViewState; week view unless a parameter asks otherwise
    """
    params = params or {}
    preview = is_preview(params)

    mode = str(params.get('view') or '').strip().lower()
    if mode not in VIEW_MODES:
        if mode:
            logger.warning(f"Ignoring unknown view parameter: {mode!r}")
        mode = MONTH if preview else WEEK

    selected_day = None
    week_start_override = None

    if mode == DAY:
        day_param = params.get('day')
        selected_day = day_param if is_day_key(day_param) else local_day_key(today)

    if mode == WEEK and is_day_key(params.get('weekStart')):
        week_start_override = params['weekStart']

    return ViewState(
        mode=mode,
        selected_day=selected_day,
        week_start_override=week_start_override,
        preview=preview
    )


def select_day(state: ViewState, day_key: str) -> ViewState:
    """Open the day view for a day picked from the week or month view."""
    if state.preview:
        return state
    parse_day_key(day_key)
    return replace(state, mode=DAY, selected_day=day_key)


def back_to_week(state: ViewState) -> ViewState:
    """Return to the rolling week view."""
    return replace(state, mode=WEEK, selected_day=None, week_start_override=None)


def select_week(state: ViewState, day_key: str, today: date) -> ViewState:
    """
    Open the week view for a day picked from the month view.

    A day inside the rolling current week (today through today+6) keeps the
    rolling window; any other day anchors the week on its Monday.
    """
    if state.preview:
        return state

    day = parse_day_key(day_key)
    today_key = local_day_key(today)
    window_end_key = local_day_key(today + timedelta(days=6))

    if today_key <= day_key <= window_end_key:
        override = None
    else:
        override = local_day_key(week_start_monday(day))

    return replace(state, mode=WEEK, selected_day=None, week_start_override=override)


def switch_mode(state: ViewState, mode: str, today: date) -> ViewState:
    """Switch views from the top navigation."""
    if mode not in VIEW_MODES:
        raise ValueError(f"Unknown view mode: {mode!r}")

    selected_day = local_day_key(today) if mode == DAY else None
    return replace(state, mode=mode, selected_day=selected_day, week_start_override=None)
