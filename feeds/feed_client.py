"""HTTP client for the events and weather feeds."""
import logging
import math
import time
from typing import Any, Optional

import requests

from processor.models import DayForecast, EventsFeed, WeatherFeed

logger = logging.getLogger(__name__)


class FeedClient:
    """Client for the cached events and weather feed endpoints."""

    MAX_RETRIES = 3
    BASE_DELAY = 1  # seconds

    def __init__(self, timeout: int = 30, session: Optional[requests.Session] = None):
        """
        Initialize the feed client.

        Args:
            timeout: HTTP request timeout in seconds (default: 30)
            session: Optional requests session to reuse connections
        """
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_json(self, url: str) -> Any:
        """
        Fetch a JSON document with retry logic.

        Args:
            url: Feed URL

        Returns:
            Decoded JSON body

        Raises:
            requests.RequestException: If all retry attempts fail
            ValueError: If the response body is not JSON
        """
        for attempt in range(self.MAX_RETRIES):
            try:
                logger.info(f"Fetching feed {url} (attempt {attempt + 1}/{self.MAX_RETRIES})")
                response = self.session.get(
                    url,
                    headers={'Accept': 'application/json'},
                    timeout=self.timeout
                )
                response.raise_for_status()
                break

            except requests.RequestException as e:
                if attempt < self.MAX_RETRIES - 1:
                    # Calculate exponential backoff delay
                    delay = self.BASE_DELAY * (2 ** attempt)
                    logger.warning(
                        f"Request failed (attempt {attempt + 1}/{self.MAX_RETRIES}): {e}. "
                        f"Retrying in {delay} seconds..."
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"All {self.MAX_RETRIES} retry attempts failed. Last error: {e}"
                    )
                    raise

        try:
            return response.json()
        except ValueError as e:
            raise ValueError(f"Feed {url} returned non-JSON response: {e}") from e


def parse_events_payload(payload: Any) -> EventsFeed:
    """
    Read an events feed document.

    Accepts {events: [...], generatedAt} or a bare list of records. Anything
    else yields an empty feed.
    """
    if isinstance(payload, list):
        return EventsFeed(events=payload)

    if not isinstance(payload, dict):
        logger.warning(f"Events feed is not an object: {type(payload).__name__}")
        return EventsFeed()

    events = payload.get('events')
    if not isinstance(events, list):
        logger.warning("Events feed has no events array; treating as empty")
        events = []

    generated_at = payload.get('generatedAt') or payload.get('updatedAt')
    return EventsFeed(events=events, generated_at=generated_at)


def parse_weather_payload(payload: Any) -> WeatherFeed:
    """
    Read a weather feed document.

    The feed is only usable when it reports ok and carries a days array; day
    entries without a date are skipped.
    """
    if not isinstance(payload, dict):
        return WeatherFeed()

    generated_at = payload.get('generatedAt') or payload.get('updatedAt')
    days = payload.get('days')

    if not payload.get('ok') or not isinstance(days, list):
        return WeatherFeed(ok=False, generated_at=generated_at)

    forecasts = []
    for entry in days:
        forecast = _parse_day_forecast(entry)
        if forecast:
            forecasts.append(forecast)

    return WeatherFeed(ok=True, days=forecasts, generated_at=generated_at)


def _parse_day_forecast(entry: Any) -> Optional[DayForecast]:
    if not isinstance(entry, dict) or not entry.get('date'):
        return None

    return DayForecast(
        date=str(entry['date']),
        hi=_number_or_none(entry.get('hi')),
        lo=_number_or_none(entry.get('lo')),
        hi_unit=entry.get('hiUnit'),
        lo_unit=entry.get('loUnit'),
        precip=_number_or_none(entry.get('precip')),
        short_forecast=entry.get('shortForecast') or '',
        icon=entry.get('icon') or ''
    )


def _number_or_none(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None
