"""
Event Publisher

Application service for publishing domain events to registered handlers.
Keeps side effects (logging, UI refresh hints) out of the job operations.
"""

import logging
from threading import Lock
from typing import Callable, Dict, List, Type

from fieldcrm.domain.events import DomainEvent

logger = logging.getLogger(__name__)


class EventPublisher:
    """
    Event publisher that dispatches domain events to registered handlers.

    Handlers registered for a base class receive every subclass event, so
    subscribing to ``DomainEvent`` observes everything. Dispatch is
    synchronous; handler exceptions are caught and logged so a failing
    side effect never fails a write that already succeeded.

    Thread-safe for concurrent event publishing.
    """

    def __init__(self):
        """Initialize EventPublisher with empty handler registry."""
        self._handlers: Dict[Type[DomainEvent], List[Callable[[DomainEvent], None]]] = {}
        self._lock = Lock()

    def subscribe(
        self,
        event_type: Type[DomainEvent],
        handler: Callable[[DomainEvent], None]
    ) -> None:
        """
        Register a handler for an event type and its subclasses.

        Args:
            event_type: The type of domain event to handle
            handler: Callable that accepts the event as parameter

        Example:
            publisher = EventPublisher()
            publisher.subscribe(PaymentAddedEvent, refresh_ledger_view)
        """
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
            logger.debug(
                f"Registered handler {getattr(handler, '__name__', handler)} "
                f"for {event_type.__name__}"
            )

    def unsubscribe(
        self,
        event_type: Type[DomainEvent],
        handler: Callable[[DomainEvent], None]
    ) -> bool:
        """
        Remove a previously registered handler.

        Returns:
            True if the handler was registered, False otherwise
        """
        with self._lock:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)
                return True
            return False

    def _handlers_for(self, event_type: Type[DomainEvent]) -> List[Callable[[DomainEvent], None]]:
        with self._lock:
            handlers = []
            for klass in event_type.__mro__:
                handlers.extend(self._handlers.get(klass, []))
            return handlers

    def publish(self, event: DomainEvent) -> None:
        """
        Publish an event to all registered handlers.

        Args:
            event: The domain event to publish

        Example:
            event = PaymentAddedEvent(
                aggregate_id="job-123",
                occurred_at=datetime.now(timezone.utc),
                amount=2000.0,
                index=0,
                balance=2000.0,
            )
            publisher.publish(event)
        """
        event_type = type(event)
        handlers = self._handlers_for(event_type)

        if not handlers:
            logger.debug(f"No handlers registered for {event_type.__name__}")
            return

        logger.debug(
            f"Publishing {event_type.__name__} to {len(handlers)} handler(s)"
        )

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Error in handler {getattr(handler, '__name__', handler)} "
                    f"for {event_type.__name__}: {e}",
                    exc_info=True
                )
