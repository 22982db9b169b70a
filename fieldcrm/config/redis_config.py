"""
Redis Configuration

Connection settings for the Redis-backed document store, and the
module-level manager the services share.
"""

import os
from typing import Optional

import redis

from fieldcrm.infrastructure.redis_document_store import RedisDocumentStore
from fieldcrm.infrastructure.redis_repository import RedisConnectionManager


class RedisConfig:
    """
    Redis connection and key-namespace settings.

    ``REDIS_URL`` wins over the individual host settings. ``CRM_KEY_PREFIX``
    namespaces every document key so several deployments can share a
    database. ``REDIS_CONNECT_TIMEOUT`` bounds how long a store call waits
    for a connection; past it the call fails like any other store error.
    """

    def __init__(self):
        self.host = os.getenv("REDIS_HOST", "localhost")
        self.port = int(os.getenv("REDIS_PORT", 6379))
        self.db = int(os.getenv("REDIS_DB", 0))
        self.password = os.getenv("REDIS_PASSWORD")
        self.max_connections = int(os.getenv("REDIS_MAX_CONNECTIONS", 20))
        self.connect_timeout = float(os.getenv("REDIS_CONNECT_TIMEOUT", 5))
        self.key_prefix = os.getenv("CRM_KEY_PREFIX", "fieldcrm")

        url = os.getenv("REDIS_URL")
        if url:
            params = redis.connection.parse_url(url)
            self.host = params.get("host", self.host)
            self.port = params.get("port", self.port)
            self.db = params.get("db", self.db)
            self.password = params.get("password", self.password)

        if self.connect_timeout <= 0:
            raise ValueError(
                f"REDIS_CONNECT_TIMEOUT must be positive, got {self.connect_timeout}"
            )
        if not self.key_prefix or ":" in self.key_prefix:
            raise ValueError(f"Invalid CRM_KEY_PREFIX: {self.key_prefix!r}")


_redis_manager: Optional[RedisConnectionManager] = None
_redis_config: Optional[RedisConfig] = None


def init_redis(config: Optional[RedisConfig] = None) -> RedisConnectionManager:
    """
    Create the shared connection manager.

    Args:
        config: Settings; read from the environment when omitted
    """
    global _redis_manager, _redis_config

    _redis_config = config or RedisConfig()
    _redis_manager = RedisConnectionManager(
        host=_redis_config.host,
        port=_redis_config.port,
        db=_redis_config.db,
        password=_redis_config.password,
        max_connections=_redis_config.max_connections,
        connect_timeout=_redis_config.connect_timeout,
    )
    return _redis_manager


def get_redis_client() -> redis.Redis:
    """
    Raises:
        RuntimeError: If Redis is not initialized
    """
    if _redis_manager is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis_manager.client


def get_document_store() -> RedisDocumentStore:
    """
    Document store under the configured key prefix.

    Raises:
        RuntimeError: If Redis is not initialized
    """
    client = get_redis_client()
    return RedisDocumentStore(client, _redis_config.key_prefix)


def redis_health_check() -> bool:
    if _redis_manager is None:
        return False
    return _redis_manager.health_check()
