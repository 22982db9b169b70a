"""
Service Factory

Wires the application services around shared collaborators.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from fieldcrm.config.settings import CrmConfig
from fieldcrm.domain.document_store import DocumentStore
from fieldcrm.domain.events import DomainEvent
from fieldcrm.domain.media import BlobStorage

from .event_publisher import EventPublisher
from .job_service import JobService
from .lead_service import Geocoder, LeadService
from .media_service import MediaService
from .operation_tracker import OperationTracker
from .session_service import SessionService

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CrmServices:
    """The services a UI needs, sharing one tracker and one publisher."""

    config: CrmConfig
    publisher: EventPublisher
    tracker: OperationTracker
    sessions: SessionService
    jobs: JobService
    leads: LeadService
    media: MediaService


def create_services(
    config: Optional[CrmConfig] = None,
    document_store: Optional[DocumentStore] = None,
    blob_storage: Optional[BlobStorage] = None,
    geocoder: Optional[Geocoder] = None,
    clock: Callable[[], datetime] = _utcnow,
    log_events: bool = True,
) -> CrmServices:
    """
    Build the service graph.

    Collaborators passed in are used as given. Otherwise the document store
    is the Redis store (Redis is initialized from the environment) and
    blob storage comes from StorageFactory.

    Args:
        config: Settings; read from the environment when omitted
        document_store: Document store override
        blob_storage: Blob storage override
        geocoder: Address lookup for new customers
        clock: Source of timestamps for every service
        log_events: Subscribe a LoggingEventHandler to all events

    Returns:
        CrmServices container
    """
    config = config or CrmConfig()

    if document_store is None:
        from fieldcrm.config.redis_config import RedisConfig, get_document_store, init_redis

        redis_config = RedisConfig()
        init_redis(redis_config)
        document_store = get_document_store()
        logger.info(f"Using Redis document store with prefix {redis_config.key_prefix}")

    if blob_storage is None:
        from fieldcrm.infrastructure.storage_factory import StorageFactory

        blob_storage = StorageFactory.create_storage(config)

    publisher = EventPublisher()
    if log_events:
        from fieldcrm.infrastructure.event_handlers import LoggingEventHandler

        handler = LoggingEventHandler(logging.getLogger("fieldcrm.events"))
        publisher.subscribe(DomainEvent, handler.handle)

    tracker = OperationTracker()

    return CrmServices(
        config=config,
        publisher=publisher,
        tracker=tracker,
        sessions=SessionService(
            document_store, tracker, fallback_company_id=config.default_company_id, clock=clock
        ),
        jobs=JobService(
            document_store, tracker, publisher, clock=clock, overdue_after=config.overdue_after
        ),
        leads=LeadService(document_store, tracker, publisher, geocoder=geocoder, clock=clock),
        media=MediaService(blob_storage, tracker, publisher, clock=clock),
    )
