"""Data models for event processing."""
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

ATTENDANCE_FIELDS = ('attendanceEstimate', 'attendance_estimate')


def parse_attendance(value: Any) -> Optional[float]:
    """
    Read an attendance estimate as a positive finite number.

    Args:
        value: Raw field value (number or numeric string)

    Returns:
        Float estimate or None when missing, non-numeric or not positive
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError, OverflowError):
        return None

    if not math.isfinite(number) or number <= 0:
        return None
    return number


@dataclass(frozen=True)
class NormalizedEvent:
    """Raw event record plus its resolved local start and end."""
    fields: Dict[str, Any]
    start: datetime
    end: Optional[datetime] = None

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    @property
    def attendance_estimate(self) -> Optional[float]:
        for key in ATTENDANCE_FIELDS:
            estimate = parse_attendance(self.fields.get(key))
            if estimate is not None:
                return estimate
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.fields)
        data['start'] = self.start.isoformat()
        data['end'] = self.end.isoformat() if self.end else None
        return data


@dataclass(frozen=True)
class Allocated:
    """Attendance share apportioned to one day of an event."""
    value: float


@dataclass(frozen=True)
class RawEstimate:
    """Un-apportioned attendance estimate of a single-day event."""
    value: float


@dataclass(frozen=True)
class Unknown:
    """No usable attendance data."""


Attendance = Union[Allocated, RawEstimate, Unknown]


def attendance_value(attendance: Attendance) -> float:
    """Reduce an Attendance value to the number it contributes to a sum."""
    if isinstance(attendance, (Allocated, RawEstimate)):
        return attendance.value
    return 0.0


@dataclass(frozen=True)
class Occurrence:
    """One local calendar day projection of a normalized event."""
    event: NormalizedEvent
    day_key: str
    is_multi_day: bool = False
    span_days: int = 1
    span_index: int = 1
    attendance_allocated: Optional[float] = None

    @property
    def start(self) -> datetime:
        return self.event.start

    @property
    def attendance(self) -> Attendance:
        """
        Resolve which attendance figure this occurrence contributes.

        An allocated share wins. The raw estimate is only used for a
        single-day occurrence, so a multi-day estimate is never counted once
        per spanned day.
        """
        allocated = self.attendance_allocated
        if allocated is not None and math.isfinite(allocated):
            return Allocated(allocated)

        raw = self.event.attendance_estimate
        if raw is not None and self.span_days == 1:
            return RawEstimate(raw)

        return Unknown()

    def to_dict(self) -> Dict[str, Any]:
        data = self.event.to_dict()
        data.update({
            'dayKey': self.day_key,
            'isMultiDay': self.is_multi_day,
            'spanDays': self.span_days,
            'spanIndex': self.span_index,
            'attendanceAllocated': self.attendance_allocated
        })
        return data


@dataclass(frozen=True)
class DaySummary:
    """Event count and attendance for one day."""
    event_count: int
    attendance_sum: float
    occurrences: Tuple[Occurrence, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'eventCount': self.event_count,
            'attendanceSum': self.attendance_sum
        }


@dataclass(frozen=True)
class WeekSummary:
    """Event count and attendance for a Monday-start week."""
    week_key: str
    event_count: int
    attendance_sum: float
    day_keys: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'weekKey': self.week_key,
            'eventCount': self.event_count,
            'attendanceSum': self.attendance_sum,
            'dayKeys': list(self.day_keys)
        }


@dataclass(frozen=True)
class DayForecast:
    """Daily forecast entry from the weather feed."""
    date: str
    hi: Optional[float] = None
    lo: Optional[float] = None
    hi_unit: Optional[str] = None
    lo_unit: Optional[str] = None
    precip: Optional[float] = None
    short_forecast: str = ''
    icon: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date,
            'hi': self.hi,
            'lo': self.lo,
            'hiUnit': self.hi_unit,
            'loUnit': self.lo_unit,
            'precip': self.precip,
            'shortForecast': self.short_forecast,
            'icon': self.icon
        }


@dataclass
class EventsFeed:
    """Events snapshot as served by the events feed."""
    events: List[Dict[str, Any]] = field(default_factory=list)
    generated_at: Optional[str] = None


@dataclass
class WeatherFeed:
    """Daily forecast snapshot as served by the weather feed."""
    ok: bool = False
    days: List[DayForecast] = field(default_factory=list)
    generated_at: Optional[str] = None

    def forecast_for_day(self, day_key: str) -> Optional[DayForecast]:
        if not self.ok:
            return None
        for forecast in self.days:
            if forecast.date == day_key:
                return forecast
        return None

    def header_forecast(self, today_key: str) -> Optional[DayForecast]:
        """Today's forecast, else the first day the feed has."""
        if not self.ok:
            return None
        forecast = self.forecast_for_day(today_key)
        if forecast:
            return forecast
        return self.days[0] if self.days else None


@dataclass
class FeedResult:
    """Outcome of loading one feed."""
    payload: Any
    source: str
    error: Optional[str] = None
