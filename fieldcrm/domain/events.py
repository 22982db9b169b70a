"""
Domain Events

Immutable records of significant state changes in the job domain.
Events decouple side effects (logging, UI notifications) from core rules.
They are published only after the change they describe has been written.
"""

from abc import ABC
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Attributes:
        aggregate_id: Storage id of the job (or draft lead) concerned
        occurred_at: Timestamp when the event occurred
    """
    aggregate_id: str
    occurred_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert event to dictionary for serialization.

        Returns:
            Dictionary representation of the event
        """
        return {
            "event_type": self.__class__.__name__,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class PaymentAddedEvent(DomainEvent):
    """
    Event emitted when a payment is appended to a job's ledger.

    Attributes:
        amount: Payment amount
        index: Position of the new payment
        balance: Balance after the payment
    """
    amount: float
    index: int
    balance: float

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "amount": self.amount,
            "index": self.index,
            "balance": self.balance,
        })
        return base_dict


@dataclass(frozen=True)
class PaymentRemovedEvent(DomainEvent):
    """Event emitted when the payment at ``index`` is removed."""
    amount: float
    index: int
    balance: float

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "amount": self.amount,
            "index": self.index,
            "balance": self.balance,
        })
        return base_dict


@dataclass(frozen=True)
class LedgerUpdatedEvent(DomainEvent):
    """
    Event emitted when contract, deposit or deposit-paid changes.

    Attributes:
        field: Persisted field that changed
        balance: Balance after the change
    """
    field: str
    balance: float

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "field": self.field,
            "balance": self.balance,
        })
        return base_dict


@dataclass(frozen=True)
class JobStatusChangedEvent(DomainEvent):
    """
    Event emitted when a job moves through the status pipeline.

    Attributes:
        previous_status: Status before the change
        status: Status after the change
        completed_at: Completion timestamp after the change
    """
    previous_status: str
    status: str
    completed_at: Optional[datetime]

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "previous_status": self.previous_status,
            "status": self.status,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        })
        return base_dict


@dataclass(frozen=True)
class MediaAttachedEvent(DomainEvent):
    """Event emitted when an uploaded asset is recorded on a job."""
    asset_id: str
    category: str
    shared: bool

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "asset_id": self.asset_id,
            "category": self.category,
            "shared": self.shared,
        })
        return base_dict


@dataclass(frozen=True)
class MediaShareChangedEvent(DomainEvent):
    """Event emitted when a single asset's visibility is overridden."""
    asset_id: str
    shared: bool

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "asset_id": self.asset_id,
            "shared": self.shared,
        })
        return base_dict


@dataclass(frozen=True)
class MediaRecategorizedEvent(DomainEvent):
    """Event emitted when an asset moves to another folder."""
    asset_id: str
    previous_category: str
    category: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "asset_id": self.asset_id,
            "previous_category": self.previous_category,
            "category": self.category,
        })
        return base_dict


@dataclass(frozen=True)
class MediaRemovedEvent(DomainEvent):
    """Event emitted when an asset record is deleted from a job."""
    asset_id: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "asset_id": self.asset_id,
            "url": self.url,
        })
        return base_dict


@dataclass(frozen=True)
class FolderDefaultChangedEvent(DomainEvent):
    """Event emitted when a folder's default share value changes."""
    category: str
    shared: bool

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "category": self.category,
            "shared": self.shared,
        })
        return base_dict


@dataclass(frozen=True)
class BlobCleanupFailedEvent(DomainEvent):
    """
    Event emitted when a blob could not be deleted.

    The record is already gone; the blob is left behind.
    """
    url: str
    error_message: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "url": self.url,
            "error_message": self.error_message,
        })
        return base_dict


@dataclass(frozen=True)
class UploadDiscardedEvent(DomainEvent):
    """Event emitted when an upload finished after its job was closed."""
    url: str
    category: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "url": self.url,
            "category": self.category,
        })
        return base_dict


@dataclass(frozen=True)
class LeadCreatedEvent(DomainEvent):
    """
    Event emitted when a draft lead is saved as a customer and job.

    Attributes:
        customer_id: Customer the job belongs to
        job_number: Human-readable job identifier
        new_customer: Whether a customer record was created
    """
    customer_id: str
    job_number: str
    new_customer: bool

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "customer_id": self.customer_id,
            "job_number": self.job_number,
            "new_customer": self.new_customer,
        })
        return base_dict
