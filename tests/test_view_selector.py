"""Unit tests for the view selector."""
import json

import pytest
from datetime import date, datetime

from processor.models import DayForecast, NormalizedEvent, WeatherFeed
from processor.occurrence_expander import expand
from view.view_selector import displayed_day_keys, select_view
from view.view_state import DAY, MONTH, WEEK, ViewState

# Wednesday
TODAY = date(2025, 6, 4)


def make_event(title, start, end=None, attendance=None):
    fields = {"title": title}
    if attendance is not None:
        fields["attendanceEstimate"] = attendance
    return NormalizedEvent(fields=fields, start=start, end=end)


@pytest.fixture
def occurrences():
    """Occurrences across the first weeks of June 2025."""
    return expand([
        make_event("Late show", datetime(2025, 6, 4, 21, 0), attendance=800),
        make_event("Matinee", datetime(2025, 6, 4, 13, 0), attendance=200),
        make_event("Festival", datetime(2025, 6, 6, 10, 0), datetime(2025, 6, 8, 22, 0),
                   attendance=9000),
        make_event("Stadium", datetime(2025, 6, 19, 19, 0), attendance=40000),
    ])


@pytest.fixture
def weather():
    return WeatherFeed(ok=True, days=[
        DayForecast(date="2025-06-04", hi=88, lo=70, short_forecast="Sunny"),
        DayForecast(date="2025-06-05", hi=84, lo=68, short_forecast="Storms"),
    ])


class TestDisplayedDayKeys:
    """Test cases for displayed_day_keys()."""

    def test_week_is_rolling_from_today(self):
        keys = displayed_day_keys(ViewState(mode=WEEK), TODAY)

        assert [k for k, _ in keys] == [
            "2025-06-04", "2025-06-05", "2025-06-06", "2025-06-07",
            "2025-06-08", "2025-06-09", "2025-06-10"
        ]

    def test_week_with_override(self):
        keys = displayed_day_keys(ViewState(mode=WEEK, week_start_override="2025-06-16"), TODAY)

        assert keys[0] == ("2025-06-16", False)
        assert keys[-1] == ("2025-06-22", False)

    def test_month_grid(self):
        """Test the five-row Monday-aligned grid with leading placeholders."""
        keys = displayed_day_keys(ViewState(mode=MONTH), TODAY)

        assert len(keys) == 35
        assert keys[0] == ("2025-06-02", True)
        assert keys[1] == ("2025-06-03", True)
        assert keys[2] == ("2025-06-04", False)
        assert keys[-1] == ("2025-07-06", False)

    def test_day(self):
        keys = displayed_day_keys(ViewState(mode=DAY, selected_day="2025-06-07"), TODAY)

        assert keys == [("2025-06-07", False)]


class TestSelectView:
    """Test cases for select_view()."""

    def test_week_view(self, occurrences, weather):
        """Test the rolling week view summaries and scores."""
        model = select_view(ViewState(mode=WEEK), occurrences, TODAY, weather)

        assert len(model.days) == 7
        first = model.days[0]
        assert first.day_key == "2025-06-04"
        assert first.summary.event_count == 2
        assert first.summary.attendance_sum == 1000
        assert first.forecast.short_forecast == "Sunny"

        festival_days = [cell for cell in model.days
                         if cell.day_key in ("2025-06-06", "2025-06-07", "2025-06-08")]
        assert all(cell.summary.attendance_sum == 3000 for cell in festival_days)

        # The stadium event is outside the rolling window
        assert "2025-06-19" not in model.grouped
        assert model.peak_intensity == max(cell.intensity for cell in model.days)

    def test_week_view_grouped_sorted_by_start(self, occurrences):
        """Test that grouped occurrences are ordered by start time."""
        model = select_view(ViewState(mode=WEEK), occurrences, TODAY)

        titles = [o.event.get("title") for o in model.grouped["2025-06-04"]]
        assert titles == ["Matinee", "Late show"]

    def test_week_view_weeks(self, occurrences):
        """Test that the rolling window reports both weeks it touches."""
        model = select_view(ViewState(mode=WEEK), occurrences, TODAY)

        week_keys = [cell.summary.week_key for cell in model.weeks]
        assert week_keys == ["2025-06-02", "2025-06-09"]
        assert model.weeks[0].intensity == pytest.approx(1.0)

    def test_day_view(self, occurrences, weather):
        """Test the day view slice."""
        state = ViewState(mode=DAY, selected_day="2025-06-07")
        model = select_view(state, occurrences, TODAY, weather)

        assert list(model.grouped) == ["2025-06-07"]
        occurrence = model.grouped["2025-06-07"][0]
        assert occurrence.span_days == 3
        assert occurrence.span_index == 2
        assert model.days[0].forecast is None
        assert model.peak_intensity == model.days[0].intensity

    def test_day_view_empty_day_still_present(self, occurrences):
        """Test that a day without events is still in the grouped map."""
        model = select_view(ViewState(mode=DAY, selected_day="2025-06-30"), occurrences, TODAY)

        assert model.grouped == {"2025-06-30": []}
        assert model.days[0].summary.event_count == 0
        assert model.peak_intensity == 0

    def test_month_view(self, occurrences):
        """Test the extended outlook grid and relative week scores."""
        model = select_view(ViewState(mode=MONTH), occurrences, TODAY)

        assert len(model.days) == 35
        assert model.days[0].is_placeholder is True
        assert model.days[0].summary is None
        assert model.days[0].intensity == 0

        assert [cell.summary.week_key for cell in model.weeks] == [
            "2025-06-02", "2025-06-09", "2025-06-16", "2025-06-23", "2025-06-30"
        ]
        by_week = {cell.summary.week_key: cell for cell in model.weeks}
        assert by_week["2025-06-16"].summary.attendance_sum == 40000
        assert by_week["2025-06-23"].intensity == 0
        assert model.peak_intensity == max(cell.intensity for cell in model.weeks)

    def test_day_intensity_is_absolute(self, occurrences):
        """Test that day cells use fixed caps in the month grid."""
        model = select_view(ViewState(mode=MONTH), occurrences, TODAY)

        stadium = next(cell for cell in model.days if cell.day_key == "2025-06-19")
        quiet = next(cell for cell in model.days if cell.day_key == "2025-06-05")
        assert stadium.intensity == pytest.approx((0.6 + 0.4 * 0.2) ** 1.8)
        assert quiet.intensity == 0

    def test_weather_unavailable(self, occurrences):
        """Test a view without weather."""
        model = select_view(ViewState(), occurrences, TODAY, WeatherFeed(ok=False))

        assert model.weather_available is False
        assert model.header_forecast is None
        assert all(cell.forecast is None for cell in model.days)

    def test_header_forecast(self, occurrences, weather):
        model = select_view(ViewState(), occurrences, TODAY, weather)

        assert model.header_forecast.date == "2025-06-04"

    def test_display_intensity_is_clamped(self, occurrences):
        model = select_view(ViewState(mode=DAY, selected_day="2025-06-30"), occurrences, TODAY)

        assert model.peak_intensity == 0
        assert model.display_intensity == 0.25

    def test_to_dict_is_json_serializable(self, occurrences, weather):
        """Test the presentation contract."""
        model = select_view(ViewState(mode=WEEK), occurrences, TODAY, weather)

        data = json.loads(json.dumps(model.to_dict()))

        assert data["view"]["mode"] == "week"
        assert data["days"][0]["summary"] == {"eventCount": 2, "attendanceSum": 1000}
        festival = data["grouped"]["2025-06-06"][0]
        assert festival["title"] == "Festival"
        assert festival["isMultiDay"] is True
        assert festival["spanDays"] == 3
        assert festival["attendanceAllocated"] == 3000
        assert festival["start"] == "2025-06-06T10:00:00"
