"""
Shared pytest fixtures and configuration for the fieldcrm test suite.

This module provides:
- Hypothesis configuration for property-based testing
- In-memory collaborators (document store, blob storage)
- A controllable clock and an event recorder
"""

import pytest
from hypothesis import HealthCheck, Phase, settings

from fieldcrm.application import EventPublisher, OperationTracker
from fieldcrm.domain.events import DomainEvent

from tests.fixtures import FixedClock, MockBlobStorage, MockDocumentStore, make_session

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile("default")


# =============================================================================
# Collaborator Fixtures
# =============================================================================

@pytest.fixture
def clock() -> FixedClock:
    """Clock fixed at 2024-03-01 12:00 UTC."""
    return FixedClock()


@pytest.fixture
def store() -> MockDocumentStore:
    return MockDocumentStore()


@pytest.fixture
def blobs() -> MockBlobStorage:
    return MockBlobStorage()


@pytest.fixture
def tracker() -> OperationTracker:
    return OperationTracker()


@pytest.fixture
def published():
    """List collecting every event published through ``publisher``."""
    return []


@pytest.fixture
def publisher(published) -> EventPublisher:
    publisher = EventPublisher()
    publisher.subscribe(DomainEvent, published.append)
    return publisher


@pytest.fixture
def session():
    return make_session()


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (require external services)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)
