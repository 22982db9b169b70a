"""
Test fixtures: in-memory collaborators and domain object factories.
"""

from .domain_fixtures import FixedClock, make_customer, make_job, make_session
from .mock_repositories import MockBlobStorage, MockDocumentStore

__all__ = [
    "FixedClock",
    "make_customer",
    "make_job",
    "make_session",
    "MockBlobStorage",
    "MockDocumentStore",
]
