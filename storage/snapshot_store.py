"""DynamoDB cache for the latest feed snapshots."""
import json
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Keeps one snapshot per feed; every write overwrites the previous one."""

    def __init__(self, table_name: str):
        """
        Initialize DynamoDB client and table reference.

        Args:
            table_name: Name of the DynamoDB table (hash key: feed_name)
        """
        self.table_name = table_name
        self.dynamodb = boto3.resource('dynamodb')
        self.table = self.dynamodb.Table(table_name)
        logger.info(f"Initialized SnapshotStore for table: {table_name}")

    def get_snapshot(self, feed_name: str) -> Optional[Dict[str, Any]]:
        """
        Read the cached snapshot of a feed.

        Args:
            feed_name: Feed identifier ('events' or 'weather')

        Returns:
            Dict with payload, generated_at and stored_at, or None if missing

        Raises:
            ClientError: If the DynamoDB read fails
        """
        try:
            response = self.table.get_item(Key={'feed_name': feed_name})
        except ClientError as e:
            logger.error(f"Error reading snapshot '{feed_name}': {e}")
            raise

        item = response.get('Item')
        if not item:
            logger.info(f"No cached snapshot for feed '{feed_name}'")
            return None

        return self._item_to_snapshot(item)

    def put_snapshot(self, feed_name: str, payload: Any) -> Dict[str, Any]:
        """
        Overwrite the cached snapshot of a feed.

        Args:
            feed_name: Feed identifier
            payload: JSON-serializable feed document

        Returns:
            The stored snapshot

        Raises:
            ClientError: If the DynamoDB write fails
        """
        generated_at = None
        if isinstance(payload, dict):
            generated_at = payload.get('generatedAt') or payload.get('updatedAt')

        item = {
            'feed_name': feed_name,
            'payload': json.dumps(payload),
            'stored_at': int(time.time())
        }
        if generated_at:
            item['generated_at'] = str(generated_at)

        try:
            self.table.put_item(Item=item)
        except ClientError as e:
            logger.error(f"Error writing snapshot '{feed_name}': {e}")
            raise

        logger.info(f"Stored snapshot for feed '{feed_name}'")
        return self._item_to_snapshot(item)

    def is_stale(
        self,
        snapshot: Dict[str, Any],
        max_age: timedelta,
        now: Optional[datetime] = None
    ) -> bool:
        """
        Check whether a snapshot is older than max_age.

        Age is measured from the feed's generated_at timestamp when it parses,
        otherwise from when the snapshot was stored. A naive now is read as UTC.
        """
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        produced = _parse_timestamp(snapshot.get('generated_at'))

        if produced is None and snapshot.get('stored_at') is not None:
            produced = datetime.fromtimestamp(int(snapshot['stored_at']), tz=timezone.utc)

        if produced is None:
            return True

        return now - produced > max_age

    def _item_to_snapshot(self, item: dict) -> Optional[Dict[str, Any]]:
        try:
            return {
                'payload': json.loads(item['payload']),
                'generated_at': item.get('generated_at'),
                'stored_at': int(item['stored_at'])
            }
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Failed to read cached snapshot item: {e}")
            return None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    text = str(value).strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
