"""Event processor for normalizing raw event records."""
import logging
import math
import re
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from processor.day_keys import local_day_key, start_of_day
from processor.models import NormalizedEvent

logger = logging.getLogger(__name__)

DATE_ONLY_PATTERN = re.compile(r'^(\d{4})-(\d{2})-(\d{2})$')

# (keys, parser) pairs; the parser receives the values of keys in order.
FieldAlias = Tuple[Tuple[str, ...], Callable[..., Optional[datetime]]]


class EventProcessor:
    """Processor that resolves canonical local start/end timestamps."""

    DATE_FORMATS = [
        '%Y-%m-%d',      # ISO 8601
        '%m/%d/%Y',      # US format
        '%m-%d-%Y',      # US format with dashes
        '%B %d, %Y',     # Full month name
        '%b %d, %Y',     # Abbreviated month name
        '%Y/%m/%d',      # Alternative ISO format
    ]

    DATETIME_FORMATS = [
        '%Y-%m-%d %H:%M',
        '%Y-%m-%d %I:%M %p',
        '%m/%d/%Y %H:%M',
        '%m/%d/%Y %I:%M %p',
        '%B %d, %Y %I:%M %p',
    ]

    # Always UTC, whatever the zone name says
    HTTP_DATE_FORMATS = [
        '%a, %d %b %Y %H:%M:%S GMT',
        '%a, %d %b %Y %H:%M:%S UTC',
    ]

    TIME_FORMATS = [
        '%H:%M',         # 24-hour format
        '%H:%M:%S',      # 24-hour with seconds
        '%I:%M %p',      # 12-hour format with AM/PM
        '%I:%M%p',       # 12-hour format without space
        '%I:%M:%S %p',   # 12-hour with seconds and AM/PM
        '%I %p',         # Hour only with AM/PM
        '%I%p',
    ]

    def __init__(self, tz: Optional[tzinfo] = None):
        """
        Initialize the processor.

        Args:
            tz: Dashboard timezone used for local wall-clock values
                (default: the system local timezone)
        """
        self.tz = tz

    @property
    def start_fields(self) -> Sequence[FieldAlias]:
        return (
            (('Start_Date_UTC',), self.parse_instant),
            (('start_date_utc',), self.parse_instant),
            (('start_at_utc',), self.parse_instant),
            (('startAtUtc',), self.parse_instant),
            (('startDateUtc',), self.parse_instant),
            (('startDateUTC',), self.parse_instant),
            (('startDate', 'startTime'), self.combine_date_time),
            (('start_local_date', 'start_local_time'), self.combine_date_time),
        )

    @property
    def end_fields(self) -> Sequence[FieldAlias]:
        return (
            (('End_Date_UTC',), self.parse_instant),
            (('end_date_utc',), self.parse_instant),
            (('end_at_utc',), self.parse_instant),
            (('endAtUtc',), self.parse_instant),
            (('endDateUtc',), self.parse_instant),
            (('endDateUTC',), self.parse_instant),
            (('endDate', 'endTime'), self.combine_date_time),
            (('end_local_date', 'end_local_time'), self.combine_date_time),
        )

    def normalize(self, raw_records: Iterable[Any]) -> List[NormalizedEvent]:
        """
        Normalize raw event records.

        Args:
            raw_records: Raw records from the events feed

        Returns:
            List of NormalizedEvent objects; records without a start are dropped
        """
        normalized = []
        total = 0

        for record in raw_records:
            total += 1
            if not isinstance(record, Mapping):
                logger.debug(f"Skipping non-mapping event record: {record!r}")
                continue

            start = self.resolve(record, self.start_fields)
            if start is None:
                logger.debug(
                    f"Skipping event without a resolvable start: "
                    f"{record.get('title', '')!r}"
                )
                continue

            end = self.resolve(record, self.end_fields)
            normalized.append(NormalizedEvent(fields=dict(record), start=start, end=end))

        logger.info(f"Normalized {len(normalized)} events out of {total} records")
        return normalized

    def resolve(
        self,
        record: Mapping[str, Any],
        aliases: Sequence[FieldAlias]
    ) -> Optional[datetime]:
        """
        Resolve a timestamp from the first alias entry that parses.

        Args:
            record: Raw event record
            aliases: Ordered (keys, parser) pairs

        Returns:
            Local naive datetime or None
        """
        for keys, parser in aliases:
            values = [record.get(key) for key in keys]
            if _is_blank(values[0]):
                continue
            resolved = parser(*values)
            if resolved is not None:
                return resolved
        return None

    def parse_instant(self, value: Any) -> Optional[datetime]:
        """
        Parse a combined datetime value as an absolute instant.

        Accepts datetime/date objects, epoch milliseconds and datetime strings.
        Date-only YYYY-MM-DD strings are local calendar dates.

        Returns:
            Local naive datetime or None if the value cannot be parsed
        """
        if _is_blank(value) or isinstance(value, bool):
            return None

        if isinstance(value, datetime):
            return self._to_local(value)

        if isinstance(value, date):
            return start_of_day(value)

        if isinstance(value, (int, float)):
            return self._from_epoch_ms(value)

        text = str(value).strip()

        local_date = _parse_date_only(text)
        if local_date is not None:
            return local_date

        return self._parse_datetime_text(text)

    def combine_date_time(self, date_value: Any, time_value: Any = None) -> Optional[datetime]:
        """
        Combine a legacy date field with an optional time-of-day field.

        Only the hour and minute of the time field are applied; a time that
        cannot be parsed leaves the result at local midnight.

        Returns:
            Local naive datetime or None if the date cannot be parsed
        """
        day = self._parse_date(date_value)
        if day is None:
            return None

        if not _is_blank(time_value):
            hour_minute = self._parse_time_of_day(time_value)
            if hour_minute is not None:
                day = day.replace(hour=hour_minute[0], minute=hour_minute[1])

        return day

    def _parse_date(self, value: Any) -> Optional[datetime]:
        if isinstance(value, bool):
            return None
        if isinstance(value, datetime):
            return start_of_day(self._to_local(value))
        if isinstance(value, date):
            return start_of_day(value)
        if isinstance(value, (int, float)):
            instant = self._from_epoch_ms(value)
            return start_of_day(instant) if instant else None

        text = str(value).strip()
        local_date = _parse_date_only(text)
        if local_date is not None:
            return local_date

        for fmt in self.DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue

        instant = self._parse_datetime_text(text)
        return start_of_day(instant) if instant else None

    def _parse_time_of_day(self, value: Any) -> Optional[Tuple[int, int]]:
        if isinstance(value, datetime):
            local = self._to_local(value)
            return local.hour, local.minute

        if isinstance(value, bool) or not isinstance(value, str):
            return None

        text = value.strip()

        for fmt in self.TIME_FORMATS:
            try:
                parsed = datetime.strptime(text.upper(), fmt)
                return parsed.hour, parsed.minute
            except ValueError:
                continue

        instant = self._parse_datetime_text(text)
        if instant is not None:
            return instant.hour, instant.minute

        return None

    def _parse_datetime_text(self, text: str) -> Optional[datetime]:
        iso_text = text[:-1] + '+00:00' if text.endswith(('Z', 'z')) else text
        try:
            return self._to_local(datetime.fromisoformat(iso_text))
        except ValueError:
            pass

        for fmt in self.DATETIME_FORMATS:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue

        for fmt in self.HTTP_DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                return self._to_local(parsed.replace(tzinfo=timezone.utc))
            except ValueError:
                continue

        return None

    def _from_epoch_ms(self, value: float) -> Optional[datetime]:
        try:
            if not math.isfinite(value):
                return None
            instant = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
        return self._to_local(instant)

    def _to_local(self, value: datetime) -> datetime:
        """Convert an aware datetime to naive local time; naive stays as is."""
        if value.tzinfo is None:
            return value
        return value.astimezone(self.tz).replace(tzinfo=None)


def filter_upcoming(events: Iterable[NormalizedEvent], today: date) -> List[NormalizedEvent]:
    """
    Keep events that start today or later.

    Args:
        events: Normalized events
        today: Current local date

    Returns:
        Events whose start day key is on or after today
    """
    today_key = local_day_key(today)
    return [event for event in events if local_day_key(event.start) >= today_key]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_date_only(text: str) -> Optional[datetime]:
    match = DATE_ONLY_PATTERN.match(text)
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day)
    except ValueError:
        return None
