"""
Redis Document Store

DocumentStore implementation on Redis. Each document is a JSON string at
``{prefix}:{collection}:{id}``; each collection keeps a set of its ids at
``{prefix}:{collection}:_ids`` and announces changes on the pub/sub
channel ``{prefix}:{collection}:_changes``.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional

import redis

from fieldcrm.domain.document_store import DocumentQuery, DocumentStore

from .redis_repository import RedisRepository

logger = logging.getLogger(__name__)


class RedisDocumentStore(RedisRepository, DocumentStore):
    """
    Redis-backed document store.

    Writes merge fields atomically per document. Queries read the whole
    collection and filter in process, which suits the per-company record
    counts this library handles.
    """

    def __init__(self, redis_client: redis.Redis, key_prefix: str = "fieldcrm"):
        super().__init__(redis_client, key_prefix)

    def _doc_key(self, collection: str, doc_id: str) -> str:
        return f"{collection}:{doc_id}"

    def _index_key(self, collection: str) -> str:
        return self._make_key(f"{collection}:_ids")

    def _channel(self, collection: str) -> str:
        return self._make_key(f"{collection}:_changes")

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        record = self.get_json(self._doc_key(collection, doc_id))
        if record is None:
            return None
        record.setdefault("id", doc_id)
        return record

    def put(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> bool:
        index_key = self._index_key(collection)
        channel = self._channel(collection)

        def index_and_announce(pipe):
            pipe.sadd(index_key, doc_id)
            pipe.publish(channel, doc_id)

        ok = self.merge_json(
            self._doc_key(collection, doc_id),
            {**fields, "id": doc_id},
            after_write=index_and_announce,
        )
        if ok:
            logger.debug(f"Merged {sorted(fields)} into {collection}/{doc_id}")
        return ok

    def delete(self, collection: str, doc_id: str) -> bool:
        deleted = super().delete(self._doc_key(collection, doc_id))
        self.redis.srem(self._index_key(collection), doc_id)
        self.redis.publish(self._channel(collection), doc_id)
        logger.debug(f"Deleted {collection}/{doc_id}: {deleted}")
        return deleted

    def _ids(self, collection: str) -> List[str]:
        members = self.redis.smembers(self._index_key(collection))
        return sorted(m.decode("utf-8") if isinstance(m, bytes) else m for m in members)

    def query(self, query: DocumentQuery) -> List[Dict[str, Any]]:
        ids = self._ids(query.collection)
        keys = [self._doc_key(query.collection, doc_id) for doc_id in ids]
        records = []
        for doc_id, record in zip(ids, self.get_many_json(keys)):
            if record is None:
                continue
            record.setdefault("id", doc_id)
            if query.matches(record):
                records.append(record)
        return query.sort(records)

    def subscribe(self, query: DocumentQuery) -> Iterator[List[Dict[str, Any]]]:
        """
        Yield the query result now and after every change to its collection.

        The pub/sub connection is closed when the generator is closed.
        """
        pubsub = self.redis.pubsub(ignore_subscribe_messages=True)
        pubsub.subscribe(self._channel(query.collection))
        try:
            yield self.query(query)
            for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                yield self.query(query)
        finally:
            pubsub.close()
