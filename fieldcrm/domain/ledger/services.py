"""
Ledger Services

Financial-health assessment used by job lists to flag unpaid work.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from .value_objects import MoneyLedger

DEFAULT_OVERDUE_AFTER = timedelta(days=5)


class FinancialHealth(Enum):
    """Payment state of a job, with its display colour."""

    NO_CONTRACT = "no_contract"
    PAID = "paid"
    OUTSTANDING = "outstanding"
    OVERDUE = "overdue"
    OVERPAID = "overpaid"

    @property
    def color(self) -> str:
        return _HEALTH_COLORS[self]


_HEALTH_COLORS = {
    FinancialHealth.NO_CONTRACT: "gray",
    FinancialHealth.PAID: "#2e7d32",
    FinancialHealth.OUTSTANDING: "#c62828",
    FinancialHealth.OVERDUE: "#FF5F1F",
    FinancialHealth.OVERPAID: "gray",
}


def assess_financial_health(
    ledger: MoneyLedger,
    is_completed: bool,
    completed_at: Optional[datetime],
    now: datetime,
    overdue_after: timedelta = DEFAULT_OVERDUE_AFTER,
) -> FinancialHealth:
    """
    Classify a job's payment state.

    Args:
        ledger: The job's ledger
        is_completed: Whether the job's status is Completed
        completed_at: When the job entered Completed, if it has
        now: Reference time (same timezone awareness as ``completed_at``)
        overdue_after: Grace period after completion before a positive
            balance counts as overdue

    Returns:
        FinancialHealth classification
    """
    if not ledger.contract_amount:
        return FinancialHealth.NO_CONTRACT

    balance = ledger.balance
    if balance == 0:
        return FinancialHealth.PAID
    if balance < 0:
        return FinancialHealth.OVERPAID

    if is_completed and completed_at is not None and now - completed_at > overdue_after:
        return FinancialHealth.OVERDUE
    return FinancialHealth.OUTSTANDING
