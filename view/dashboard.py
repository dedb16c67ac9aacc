"""Dashboard session: latest snapshots plus the current view."""
import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, List, Optional

from processor.event_processor import EventProcessor, filter_upcoming
from processor.models import EventsFeed, Occurrence, WeatherFeed
from processor.occurrence_expander import expand
from view import view_state
from view.view_selector import RenderModel, select_view
from view.view_state import ViewState

logger = logging.getLogger(__name__)


class Dashboard:
    """
    Holds the latest events and weather snapshots and the current view.

    Loads overwrite the previous snapshot (last write wins) and every render
    recomputes summaries and intensities from scratch.
    """

    def __init__(
        self,
        processor: Optional[EventProcessor] = None,
        state: Optional[ViewState] = None,
        clock: Optional[Callable[[], date]] = None
    ):
        """
        Initialize an empty dashboard.

        Args:
            processor: Event normalizer (default: system local timezone)
            state: Initial view state (default: rolling week)
            clock: Returns the current local date
        """
        self.processor = processor or EventProcessor()
        self.state = state or ViewState()
        self.clock = clock or (lambda: datetime.now().date())

        self.occurrences: List[Occurrence] = []
        self.weather: Optional[WeatherFeed] = None
        self.events_generated_at: Optional[str] = None
        self.events_error: Optional[str] = None
        self.weather_error: Optional[str] = None

    def load_events(self, feed: EventsFeed) -> RenderModel:
        """Replace the event set with a new snapshot and re-render."""
        today = self.clock()
        normalized = self.processor.normalize(feed.events)
        upcoming = filter_upcoming(normalized, today)

        self.occurrences = expand(upcoming)
        self.events_generated_at = feed.generated_at
        self.events_error = None

        logger.info(
            f"Loaded {len(upcoming)} upcoming events "
            f"({len(self.occurrences)} daily occurrences)"
        )
        return self.render()

    def fail_events(self, error: str) -> RenderModel:
        """Record an events feed failure and continue with no events."""
        logger.error(f"Events feed unavailable: {error}")
        self.occurrences = []
        self.events_generated_at = None
        self.events_error = error
        return self.render()

    def load_weather(self, feed: WeatherFeed) -> RenderModel:
        self.weather = feed
        self.weather_error = None if feed.ok else 'Weather unavailable'
        return self.render()

    def fail_weather(self, error: str) -> RenderModel:
        logger.error(f"Weather feed unavailable: {error}")
        self.weather = None
        self.weather_error = error
        return self.render()

    def show_day(self, day_key: str) -> RenderModel:
        self.state = view_state.select_day(self.state, day_key)
        return self.render()

    def show_week_of(self, day_key: str) -> RenderModel:
        self.state = view_state.select_week(self.state, day_key, self.clock())
        return self.render()

    def back(self) -> RenderModel:
        self.state = view_state.back_to_week(self.state)
        return self.render()

    def switch_mode(self, mode: str) -> RenderModel:
        self.state = view_state.switch_mode(self.state, mode, self.clock())
        return self.render()

    def render(self) -> RenderModel:
        """Compute the render model for whatever view is current."""
        model = select_view(self.state, self.occurrences, self.clock(), self.weather)
        return replace(
            model,
            events_generated_at=self.events_generated_at,
            events_error=self.events_error,
            weather_error=self.weather_error
        )
