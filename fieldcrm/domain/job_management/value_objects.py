"""
Job Management Value Objects

Immutable value objects for job status, job type, insurance and cost
sub-records.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ..errors import UnknownStatusError


class JobStatus(Enum):
    """Job lifecycle status, declared in pipeline order."""

    LEAD = "Lead"
    RETAIL = "Retail"
    INSPECTED = "Inspected"
    CLAIM_FILED = "Claim Filed"
    MET_WITH_ADJUSTER = "Met with Adjuster"
    PARTIAL_APPROVAL = "Partial Approval"
    FULL_APPROVAL = "Full Approval"
    PRODUCTION = "Production"
    PENDING_PAYMENT = "Pending Payment"
    DELINQUENT_PAYMENT = "Delinquent Payment"
    COMPLETED = "Completed"

    @classmethod
    def ordered(cls) -> List["JobStatus"]:
        """Statuses in canonical pipeline order."""
        return list(cls)

    @property
    def position(self) -> int:
        return self.ordered().index(self)

    def is_terminal(self) -> bool:
        return self is JobStatus.COMPLETED

    @classmethod
    def parse(cls, value: Union["JobStatus", str]) -> "JobStatus":
        """
        Resolve a status from its persisted string.

        Raises:
            UnknownStatusError: If value is not a pipeline status
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownStatusError(f"Unknown job status: {value!r}") from None


class JobType(Enum):
    """Job type enumeration."""

    RETAIL = "Retail"
    INSURANCE = "Insurance"


@dataclass(frozen=True)
class StatusTransition:
    """Result of moving a job through the pipeline."""

    status: JobStatus
    completed_at: Optional[datetime]
    changed: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
        }


_INSURANCE_FIELDS = {
    "carrier": "carrier",
    "claim_number": "claimNumber",
    "adjuster_name": "adjusterName",
    "adjuster_phone": "adjusterPhone",
    "adjuster_email": "adjusterEmail",
    "date_of_loss": "dateOfLoss",
    "date_of_discovery": "dateOfDiscovery",
}


@dataclass(frozen=True)
class InsuranceDetails:
    """
    Insurance claim sub-record, present only on jobs that carry a claim.

    Dates are kept as the free text the office entered.
    """

    carrier: str = ""
    claim_number: str = ""
    deductible: float = 0.0
    adjuster_name: str = ""
    adjuster_phone: str = ""
    adjuster_email: str = ""
    date_of_loss: str = ""
    date_of_discovery: str = ""

    def __post_init__(self):
        if self.deductible < 0:
            raise ValueError(f"Deductible cannot be negative, got {self.deductible}")

    def is_empty(self) -> bool:
        return not self.deductible and not any(
            getattr(self, attr) for attr in _INSURANCE_FIELDS
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {key: getattr(self, attr) for attr, key in _INSURANCE_FIELDS.items()}
        data["deductible"] = self.deductible
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Optional["InsuranceDetails"]:
        """Create from flattened job fields; None when no claim data is stored."""
        values = {attr: data.get(key) or "" for attr, key in _INSURANCE_FIELDS.items()}
        details = cls(deductible=float(data.get("deductible") or 0), **values)
        return None if details.is_empty() else details


@dataclass(frozen=True)
class MoneyRecord:
    """An extra material purchase logged against a job."""

    record_id: str
    amount: float
    date: str
    note: Optional[str] = None
    receipt_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.record_id, "amount": self.amount, "date": self.date}
        if self.note:
            data["note"] = self.note
        if self.receipt_url:
            data["receiptUrl"] = self.receipt_url
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MoneyRecord":
        return cls(
            record_id=str(data["id"]),
            amount=float(data.get("amount") or 0),
            date=data.get("date", ""),
            note=data.get("note"),
            receipt_url=data.get("receiptUrl"),
        )


@dataclass(frozen=True)
class JobCosts:
    """Material and labour costs recorded during production."""

    main_material_cost: float = 0.0
    returned_material_credit: float = 0.0
    installers_cost: float = 0.0
    gutters_cost: float = 0.0
    additional_spent: Tuple[MoneyRecord, ...] = field(default_factory=tuple)

    @property
    def total(self) -> float:
        """Net cost: materials and labour plus extras, less returned material."""
        extras = sum(record.amount for record in self.additional_spent)
        return (
            self.main_material_cost
            + self.installers_cost
            + self.gutters_cost
            + extras
            - self.returned_material_credit
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mainMaterialCost": self.main_material_cost,
            "returnedMaterialCredit": self.returned_material_credit,
            "installersCost": self.installers_cost,
            "guttersCost": self.gutters_cost,
            "additionalSpent": [record.to_dict() for record in self.additional_spent],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JobCosts":
        return cls(
            main_material_cost=float(data.get("mainMaterialCost") or 0),
            returned_material_credit=float(data.get("returnedMaterialCredit") or 0),
            installers_cost=float(data.get("installersCost") or 0),
            gutters_cost=float(data.get("guttersCost") or 0),
            additional_spent=tuple(
                MoneyRecord.from_dict(record) for record in data.get("additionalSpent") or ()
            ),
        )
