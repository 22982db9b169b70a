"""
Unit tests for EventPublisher.
"""

from datetime import datetime, timezone

from fieldcrm.application import EventPublisher
from fieldcrm.domain.events import DomainEvent, PaymentAddedEvent, UploadDiscardedEvent

NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


def payment_event():
    return PaymentAddedEvent("job-1", NOW, amount=10.0, index=0, balance=90.0)


class TestEventPublisher:
    """Test handler registration and dispatch."""

    def test_specific_subscription(self):
        publisher = EventPublisher()
        received = []
        publisher.subscribe(PaymentAddedEvent, received.append)

        publisher.publish(payment_event())
        publisher.publish(UploadDiscardedEvent("job-1", NOW, url="mem://x", category="install"))

        assert [type(e) for e in received] == [PaymentAddedEvent]

    def test_base_class_subscription_receives_everything(self):
        publisher = EventPublisher()
        received = []
        publisher.subscribe(DomainEvent, received.append)

        publisher.publish(payment_event())
        publisher.publish(UploadDiscardedEvent("job-1", NOW, url="mem://x", category="install"))

        assert len(received) == 2

    def test_failing_handler_does_not_stop_others(self):
        publisher = EventPublisher()
        received = []

        def broken(event):
            raise RuntimeError("handler failed")

        publisher.subscribe(PaymentAddedEvent, broken)
        publisher.subscribe(PaymentAddedEvent, received.append)

        publisher.publish(payment_event())

        assert len(received) == 1

    def test_unsubscribe(self):
        publisher = EventPublisher()
        received = []
        publisher.subscribe(PaymentAddedEvent, received.append)

        assert publisher.unsubscribe(PaymentAddedEvent, received.append) is True
        assert publisher.unsubscribe(PaymentAddedEvent, received.append) is False

        publisher.publish(payment_event())
        assert received == []

    def test_publish_without_handlers(self):
        EventPublisher().publish(payment_event())
