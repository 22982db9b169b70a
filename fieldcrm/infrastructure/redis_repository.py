"""
Redis Repository Base Class

JSON document storage on Redis with atomic partial-field merges.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional

import redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError, WatchError

logger = logging.getLogger(__name__)


class RedisRepository:
    """Base Redis repository for JSON documents under a key prefix."""

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, key: str) -> str:
        """Create a prefixed key for Redis storage."""
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    @staticmethod
    def _decode(data: Optional[bytes]) -> Optional[Dict[str, Any]]:
        if data is None:
            return None
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return json.loads(data)

    def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get a JSON document.

        Args:
            key: Key without prefix

        Returns:
            Dictionary if found, None otherwise

        Raises:
            RedisError: If Redis cannot be reached
        """
        try:
            return self._decode(self.redis.get(self._make_key(key)))
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt JSON stored at {key}: {e}")
            return None

    def get_many_json(self, keys: List[str]) -> List[Optional[Dict[str, Any]]]:
        """Fetch several documents in one round trip, in key order."""
        if not keys:
            return []
        values = self.redis.mget([self._make_key(key) for key in keys])
        results = []
        for key, value in zip(keys, values):
            try:
                results.append(self._decode(value))
            except json.JSONDecodeError as e:
                logger.error(f"Corrupt JSON stored at {key}: {e}")
                results.append(None)
        return results

    def merge_json(
        self,
        key: str,
        fields: Dict[str, Any],
        after_write: Optional[Callable[[redis.client.Pipeline], None]] = None,
    ) -> bool:
        """
        Atomically merge top-level fields into a JSON document.

        Creates the document when absent. The read-merge-write runs in a
        WATCH/MULTI transaction, so a concurrent merge of other fields is
        never lost; a concurrent write of the same field is last-write-wins.

        Args:
            key: Key without prefix
            fields: Fields to set
            after_write: Extra commands queued in the same transaction

        Returns:
            True if successful, False otherwise
        """
        redis_key = self._make_key(key)
        payload = json.dumps(fields)

        def merge(pipe: redis.client.Pipeline) -> None:
            current = self._decode(pipe.get(redis_key)) or {}
            current.update(json.loads(payload))
            pipe.multi()
            pipe.set(redis_key, json.dumps(current))
            if after_write is not None:
                after_write(pipe)

        try:
            self.redis.transaction(merge, redis_key)
            return True
        except (RedisConnectionError, WatchError, TypeError) as e:
            logger.error(f"Error merging JSON fields {sorted(fields)} into {key}: {e}")
            return False
        except RedisError as e:
            logger.error(f"Redis error merging into {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        """
        Delete a key from Redis.

        Returns:
            True if key was deleted, False otherwise
        """
        try:
            return self.redis.delete(self._make_key(key)) > 0
        except RedisConnectionError as e:
            logger.error(f"Error deleting key {key}: {e}")
            return False

    def exists(self, key: str) -> bool:
        """
        Check if a key exists in Redis.

        Returns:
            True if key exists, False otherwise
        """
        try:
            return self.redis.exists(self._make_key(key)) > 0
        except RedisConnectionError as e:
            logger.error(f"Error checking existence of key {key}: {e}")
            return False


class RedisConnectionManager:
    """Manages Redis connection with connection pooling."""

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 password: Optional[str] = None, max_connections: int = 20,
                 decode_responses: bool = False, connect_timeout: Optional[float] = None):
        self.connection_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            password=password,
            max_connections=max_connections,
            decode_responses=decode_responses,
            socket_connect_timeout=connect_timeout,
            retry_on_timeout=True,
            socket_keepalive=True,
        )
        self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client instance with connection pooling."""
        if self._client is None:
            self._client = redis.Redis(connection_pool=self.connection_pool)
        return self._client

    def health_check(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            return self.client.ping()
        except RedisConnectionError:
            return False

    def close(self):
        """Close the connection pool."""
        if self.connection_pool:
            self.connection_pool.disconnect()
