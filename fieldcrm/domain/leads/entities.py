"""
Lead Draft Entity

An in-progress Customer+Job pair composed before anything is written.
"""

import re
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import List, Optional, Tuple

from ..customers import Customer, CustomerMatcher, GeoLocation, split_full_name
from ..errors import IncompleteLeadError
from ..job_management import (
    InsuranceDetails,
    Job,
    JobCosts,
    JobStatus,
    JobType,
    generate_job_number,
)
from ..ledger import MoneyLedger
from ..media import FolderPermissions, MediaLibrary

TRADE_OPTIONS = (
    "Roof",
    "Gutters",
    "Fascia",
    "Windows",
    "Window Wraps",
    "Window Screens",
    "Skylights",
    "Siding",
    "Framing",
    "Demolition",
    "Other",
)

OTHER_TRADE = "Other"

_CONTACT_FIELDS = (
    "phone",
    "address",
    "email",
    "lead_source",
    "alternate_address",
    "notes",
)


def format_phone(raw: Optional[str]) -> str:
    """
    Format typed phone input as ``(###) ###-####``.

    Only the first ten digits are kept. Partial input is formatted as far
    as it goes, so the result can be fed back in on every keystroke.
    """
    digits = re.sub(r"\D", "", raw or "")[:10]
    if not digits:
        return ""
    if len(digits) <= 3:
        return f"({digits}"
    if len(digits) <= 6:
        return f"({digits[:3]}) {digits[3:]}"
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"


@dataclass(frozen=True)
class LeadDraft:
    """
    Draft lead: the customer fields, the job fields, and any media
    uploaded before the job exists.

    ``draft_id`` namespaces blob uploads made while drafting. When
    ``selected_customer`` is set the job is bound to that customer and no
    new customer record is created on save.
    """

    draft_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    job_number: str = field(default_factory=generate_job_number)

    name: str = ""
    phone: str = ""
    address: str = ""
    email: str = ""
    lead_source: str = ""
    alternate_address: str = ""
    notes: str = ""
    selected_customer: Optional[Customer] = None

    job_name: str = ""
    job_description: str = ""
    measurements: str = ""
    job_notes: str = ""
    job_type: JobType = JobType.INSURANCE
    status: JobStatus = JobStatus.LEAD
    trades: Tuple[str, ...] = ("Roof",)
    custom_trade: str = ""
    insurance: Optional[InsuranceDetails] = None

    ledger: MoneyLedger = field(default_factory=MoneyLedger)
    media: MediaLibrary = field(default_factory=MediaLibrary)
    folder_permissions: FolderPermissions = field(default_factory=FolderPermissions.closed)

    @property
    def is_valid(self) -> bool:
        return bool(self.name.strip()) and bool(self.address.strip())

    def with_phone(self, raw: str) -> "LeadDraft":
        return replace(self, phone=format_phone(raw))

    def with_status(self, status) -> "LeadDraft":
        return replace(self, status=JobStatus.parse(status))

    def toggle_trade(self, trade: str) -> "LeadDraft":
        if trade in self.trades:
            return replace(self, trades=tuple(t for t in self.trades if t != trade))
        return replace(self, trades=self.trades + (trade,))

    def final_trades(self) -> List[str]:
        """Selected trades with ``Other`` replaced by the custom text, or dropped."""
        custom = self.custom_trade.strip()
        result = []
        for trade in self.trades:
            if trade == OTHER_TRADE:
                if custom:
                    result.append(custom)
                continue
            result.append(trade)
        return result

    def candidates(self, customers) -> List[Customer]:
        """Existing customers matching the typed name; none once one is selected."""
        if self.selected_customer is not None:
            return []
        return CustomerMatcher.find_candidates(self.name, customers)

    def select_customer(self, customer: Customer) -> "LeadDraft":
        """Bind the draft to an existing customer and copy its contact fields."""
        return replace(
            self,
            selected_customer=customer,
            name=customer.full_name,
            phone=customer.phone,
            address=customer.address,
            email=customer.email,
            lead_source=customer.lead_source,
            alternate_address=customer.alternate_address,
            notes=customer.notes,
        )

    def clear_selection(self) -> "LeadDraft":
        """Return to new-customer mode with blank contact fields."""
        blanks = {name: "" for name in _CONTACT_FIELDS}
        return replace(self, selected_customer=None, name="", **blanks)

    def require_valid(self) -> None:
        if not self.name.strip():
            raise IncompleteLeadError("Customer name is required")
        if not self.address.strip():
            raise IncompleteLeadError("Customer address is required")

    def build_customer(
        self,
        customer_id: str,
        company_id: str,
        now_ms: int,
        location: Optional[GeoLocation] = None,
    ) -> Customer:
        first_name, last_name = split_full_name(self.name)
        return Customer(
            customer_id=customer_id,
            company_id=company_id,
            first_name=first_name,
            last_name=last_name,
            address=self.address,
            phone=self.phone,
            email=self.email,
            alternate_address=self.alternate_address,
            lead_source=self.lead_source,
            notes=self.notes,
            location=location,
            created_at=now_ms,
            updated_at=now_ms,
        )

    def build_job(
        self,
        job_id: str,
        customer_id: str,
        company_id: str,
        now_ms: int,
        completed_at: Optional[datetime] = None,
        assigned_user_ids: Tuple[str, ...] = (),
    ) -> Job:
        """
        Build the job snapshot to persist.

        Raises:
            IncompleteLeadError: If name or address is blank
        """
        self.require_valid()
        first_name, last_name = split_full_name(self.name)
        return Job(
            job_id=job_id,
            customer_id=customer_id,
            company_id=company_id,
            job_number=self.job_number,
            status=self.status,
            completed_at=completed_at,
            job_type=self.job_type,
            trades=tuple(self.final_trades()),
            assigned_user_ids=tuple(assigned_user_ids),
            ledger=self.ledger,
            media=self.media,
            folder_permissions=self.folder_permissions,
            insurance=self.insurance,
            costs=JobCosts(),
            details={
                "job_name": self.job_name,
                "job_description": self.job_description,
                "measurements": self.measurements,
                "job_notes": self.job_notes,
                "customer_name": f"{first_name} {last_name}".strip(),
                "customer_phone": self.phone,
                "customer_address": self.address,
                "customer_alternate_address": self.alternate_address,
            },
            created_at=now_ms,
            updated_at=now_ms,
        )
