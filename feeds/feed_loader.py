"""Cache-first, fail-soft loading of feed snapshots."""
import logging
from datetime import datetime, timedelta
from typing import Optional

import requests
from botocore.exceptions import ClientError

from feeds.feed_client import FeedClient
from processor.models import FeedResult
from storage.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

SOURCE_LIVE = 'live'
SOURCE_CACHE = 'cache'
SOURCE_STALE_CACHE = 'stale-cache'
SOURCE_NONE = 'none'


class FeedLoader:
    """Serve a fresh cached snapshot, otherwise fetch and cache a live one."""

    def __init__(
        self,
        client: FeedClient,
        store: Optional[SnapshotStore] = None,
        max_age: timedelta = timedelta(hours=24)
    ):
        """
        Initialize the loader.

        Args:
            client: Feed HTTP client
            store: Snapshot cache; None disables caching
            max_age: Age after which a cached snapshot is refetched
        """
        self.client = client
        self.store = store
        self.max_age = max_age

    def load(self, feed_name: str, url: str, now: Optional[datetime] = None) -> FeedResult:
        """
        Load one feed without raising on fetch or cache errors.

        Args:
            feed_name: Feed identifier used as the cache key
            url: Feed URL; empty skips the live fetch
            now: Current time for the staleness check

        Returns:
            FeedResult with the raw payload and where it came from
        """
        cached = self._read_cache(feed_name)

        if cached and not self.store.is_stale(cached, self.max_age, now):
            logger.info(f"Serving cached '{feed_name}' snapshot")
            return FeedResult(payload=cached['payload'], source=SOURCE_CACHE)

        if not url:
            error = f"No URL configured for feed '{feed_name}'"
            return self._fallback(feed_name, cached, error)

        try:
            payload = self.client.fetch_json(url)
        except (requests.RequestException, ValueError) as e:
            logger.error(
                f"Failed to fetch feed '{feed_name}': {e}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            return self._fallback(feed_name, cached, str(e))

        self._write_cache(feed_name, payload)
        return FeedResult(payload=payload, source=SOURCE_LIVE)

    def _fallback(self, feed_name: str, cached: Optional[dict], error: str) -> FeedResult:
        if cached:
            logger.warning(f"Serving stale '{feed_name}' snapshot: {error}")
            return FeedResult(payload=cached['payload'], source=SOURCE_STALE_CACHE, error=error)
        return FeedResult(payload=None, source=SOURCE_NONE, error=error)

    def _read_cache(self, feed_name: str) -> Optional[dict]:
        if self.store is None:
            return None
        try:
            return self.store.get_snapshot(feed_name)
        except ClientError as e:
            logger.warning(f"Snapshot cache read failed for '{feed_name}': {e}")
            return None

    def _write_cache(self, feed_name: str, payload) -> None:
        if self.store is None:
            return
        try:
            self.store.put_snapshot(feed_name, payload)
        except ClientError as e:
            logger.warning(f"Snapshot cache write failed for '{feed_name}': {e}")
