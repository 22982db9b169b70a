"""
Application Services Layer

Orchestrates domain services and coordinates use cases.
"""

from .event_publisher import EventPublisher
from .job_aggregate import JobAggregate
from .job_service import JobService
from .lead_service import LeadService
from .media_service import MediaService
from .operation_tracker import OperationToken, OperationTracker
from .service_factory import CrmServices, create_services
from .session_service import SessionService

__all__ = [
    'EventPublisher',
    'JobAggregate',
    'JobService',
    'LeadService',
    'MediaService',
    'OperationToken',
    'OperationTracker',
    'SessionService',
    'CrmServices',
    'create_services',
]
