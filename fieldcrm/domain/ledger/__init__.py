"""
Ledger Domain

Contract, deposit and payment bookkeeping for a job.
"""

from .services import DEFAULT_OVERDUE_AFTER, FinancialHealth, assess_financial_health
from .value_objects import MoneyLedger, compute_balance, parse_currency

__all__ = [
    "MoneyLedger",
    "compute_balance",
    "parse_currency",
    "FinancialHealth",
    "assess_financial_health",
    "DEFAULT_OVERDUE_AFTER",
]
