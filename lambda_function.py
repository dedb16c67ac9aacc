"""AWS Lambda handler for the event horizon dashboard."""
import json
import logging
import os
import time
from datetime import datetime, timedelta
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from feeds.feed_client import FeedClient, parse_events_payload, parse_weather_payload
from feeds.feed_loader import FeedLoader
from processor.event_processor import EventProcessor
from storage.snapshot_store import SnapshotStore
from view.dashboard import Dashboard
from view.view_state import initial_view_state


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def json_response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'headers': {
            'Content-Type': 'application/json; charset=utf-8',
            'Cache-Control': 'no-store'
        },
        'body': json.dumps(body)
    }


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler: load both feeds and render the requested view.

    Args:
        event: API Gateway event; queryStringParameters may carry
            view, day, weekStart and preview
        context: Lambda context object

    Returns:
        Response dict with statusCode and the render model as JSON body
    """
    # Read configuration from environment variables
    events_url = os.environ.get('EVENTS_FEED_URL', '')
    weather_url = os.environ.get('WEATHER_FEED_URL', '')
    table_name = os.environ.get('TABLE_NAME', '')
    log_level = os.environ.get('LOG_LEVEL', 'INFO')
    timeout_seconds = int(os.environ.get('TIMEOUT_SECONDS', '30'))
    max_age_hours = float(os.environ.get('SNAPSHOT_MAX_AGE_HOURS', '24'))
    timezone_name = os.environ.get('TIMEZONE', '')

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    start_time = time.time()
    params = (event or {}).get('queryStringParameters') or {}
    logger.info(
        "Lambda execution started",
        extra={
            'table_name': table_name,
            'params': params
        }
    )

    try:
        tz = ZoneInfo(timezone_name) if timezone_name else None
        today = _local_now(tz).date()

        store = SnapshotStore(table_name=table_name) if table_name else None
        loader = FeedLoader(
            client=FeedClient(timeout=timeout_seconds),
            store=store,
            max_age=timedelta(hours=max_age_hours)
        )

        dashboard = Dashboard(
            processor=EventProcessor(tz=tz),
            state=initial_view_state(params, today),
            clock=lambda: _local_now(tz).date()
        )

        # The two feeds are independent; either may fail on its own
        logger.info("Loading events feed")
        events_result = loader.load('events', events_url)
        if events_result.payload is None:
            dashboard.fail_events(events_result.error or 'Events unavailable')
        else:
            dashboard.load_events(parse_events_payload(events_result.payload))

        logger.info("Loading weather feed")
        weather_result = loader.load('weather', weather_url)
        if weather_result.payload is None:
            dashboard.fail_weather(weather_result.error or 'Weather unavailable')
        else:
            dashboard.load_weather(parse_weather_payload(weather_result.payload))

        model = dashboard.render()
        duration = time.time() - start_time

        logger.info(
            "Lambda execution completed successfully",
            extra={
                'duration_seconds': round(duration, 2),
                'view': model.view.mode,
                'events_source': events_result.source,
                'weather_source': weather_result.source,
                'occurrences': len(dashboard.occurrences)
            }
        )

        body = model.to_dict()
        body['sources'] = {
            'events': events_result.source,
            'weather': weather_result.source
        }
        return json_response(200, body)

    except Exception as e:
        duration = time.time() - start_time

        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )

        return json_response(500, {
            'message': 'Dashboard render failed',
            'error': str(e),
            'error_type': type(e).__name__,
            'duration_seconds': round(duration, 2)
        })


def _local_now(tz: Optional[ZoneInfo]) -> datetime:
    return datetime.now(tz) if tz else datetime.now()
