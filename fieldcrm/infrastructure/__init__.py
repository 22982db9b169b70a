"""Infrastructure layer for Redis, blob stores and event handlers."""

from .redis_repository import RedisRepository, RedisConnectionManager
from .redis_document_store import RedisDocumentStore
from .local_blob_storage import LocalBlobStorage
from .storage_factory import StorageFactory

__all__ = [
    'RedisRepository',
    'RedisConnectionManager',
    'RedisDocumentStore',
    'LocalBlobStorage',
    'StorageFactory',
]
