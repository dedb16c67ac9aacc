"""Unit tests for view state transitions."""
import pytest
from datetime import date

from view.view_state import (
    DAY,
    MONTH,
    WEEK,
    ViewState,
    back_to_week,
    initial_view_state,
    select_day,
    select_week,
    switch_mode,
)

# Wednesday
TODAY = date(2025, 6, 4)


class TestInitialViewState:
    """Test cases for initial_view_state()."""

    def test_defaults_to_week(self):
        """Test the default view without parameters."""
        assert initial_view_state(None, TODAY) == ViewState(mode=WEEK)
        assert initial_view_state({}, TODAY) == ViewState(mode=WEEK)

    def test_view_parameter(self):
        """Test requesting a view by parameter."""
        assert initial_view_state({"view": "month"}, TODAY).mode == MONTH

    def test_day_view_uses_day_parameter(self):
        """Test the day parameter seeds the selected day."""
        state = initial_view_state({"view": "day", "day": "2025-06-10"}, TODAY)

        assert state.mode == DAY
        assert state.selected_day == "2025-06-10"

    def test_day_view_defaults_to_today(self):
        """Test an invalid day parameter falls back to today."""
        state = initial_view_state({"view": "day", "day": "tomorrow"}, TODAY)

        assert state.selected_day == "2025-06-04"

    def test_week_start_parameter(self):
        """Test the weekStart parameter seeds the override."""
        state = initial_view_state({"weekStart": "2025-06-16"}, TODAY)

        assert state.mode == WEEK
        assert state.week_start_override == "2025-06-16"

    def test_unknown_view_falls_back(self):
        """Test that an unknown view is ignored."""
        assert initial_view_state({"view": "year"}, TODAY).mode == WEEK

    @pytest.mark.parametrize("value", ["", "1", "true", "YES", "on"])
    def test_preview_defaults_to_month(self, value):
        """Test that preview mode opens the extended outlook."""
        state = initial_view_state({"preview": value}, TODAY)

        assert state.mode == MONTH
        assert state.preview is True

    def test_preview_off(self):
        """Test a falsy preview value."""
        state = initial_view_state({"preview": "0"}, TODAY)

        assert state.mode == WEEK
        assert state.preview is False


class TestTransitions:
    """Test cases for user-triggered transitions."""

    def test_select_day(self):
        """Test drilling into a day."""
        state = select_day(ViewState(mode=WEEK), "2025-06-06")

        assert state == ViewState(mode=DAY, selected_day="2025-06-06")

    def test_select_day_rejects_bad_key(self):
        """Test that an invalid day key is refused."""
        with pytest.raises(ValueError):
            select_day(ViewState(), "June 6")

    def test_transitions_return_new_state(self):
        """Test that the original state is not mutated."""
        original = ViewState(mode=WEEK)
        select_day(original, "2025-06-06")

        assert original == ViewState(mode=WEEK)

    def test_back_clears_override(self):
        """Test the back action."""
        state = back_to_week(
            ViewState(mode=DAY, selected_day="2025-06-20", week_start_override="2025-06-16")
        )

        assert state == ViewState(mode=WEEK)

    def test_select_week_outside_current_window(self):
        """Test picking a later week from the month view."""
        state = select_week(ViewState(mode=MONTH), "2025-06-19", TODAY)

        assert state.mode == WEEK
        assert state.week_start_override == "2025-06-16"

    def test_select_week_inside_current_window(self):
        """Test picking a day inside the rolling week keeps the rolling window."""
        state = select_week(
            ViewState(mode=MONTH, week_start_override="2025-06-16"), "2025-06-09", TODAY
        )

        # 2025-06-09 is within today..today+6
        assert state.mode == WEEK
        assert state.week_start_override is None

    def test_select_week_day_after_window(self):
        """Test the first day past the rolling window."""
        state = select_week(ViewState(mode=MONTH), "2025-06-11", TODAY)

        assert state.week_start_override == "2025-06-09"

    def test_preview_blocks_drill_down(self):
        """Test that preview mode ignores day and week selection."""
        state = ViewState(mode=MONTH, preview=True)

        assert select_day(state, "2025-06-06") is state
        assert select_week(state, "2025-06-20", TODAY) is state

    def test_switch_mode_to_day_selects_today(self):
        """Test the day nav button."""
        state = switch_mode(ViewState(mode=MONTH), DAY, TODAY)

        assert state == ViewState(mode=DAY, selected_day="2025-06-04")

    def test_switch_mode_clears_override(self):
        """Test the week nav button resets to the rolling week."""
        state = switch_mode(ViewState(mode=WEEK, week_start_override="2025-06-16"), WEEK, TODAY)

        assert state.week_start_override is None

    def test_switch_mode_rejects_unknown(self):
        """Test an unknown mode."""
        with pytest.raises(ValueError):
            switch_mode(ViewState(), "agenda", TODAY)
