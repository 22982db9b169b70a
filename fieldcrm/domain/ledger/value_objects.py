"""
Ledger Value Objects

Immutable money ledger for a job: contract, deposit, payments and the
derived balance. Every mutation returns a new ledger.
"""

import math
import re
from dataclasses import dataclass, replace
from numbers import Real
from typing import Any, Dict, Iterable, Optional, Tuple

from ..errors import IndexOutOfRangeError, InvalidAmountError

_NON_NUMERIC = re.compile(r"[^0-9.]")


def compute_balance(
    contract_amount: float,
    deposit_amount: float,
    is_deposit_paid: bool,
    payments: Iterable[float],
) -> float:
    """
    Compute the outstanding balance of a job.

    The deposit only counts once it is marked paid. The result is negative
    when the customer has paid more than the contract.
    """
    deposit = deposit_amount if is_deposit_paid else 0.0
    return contract_amount - deposit - sum(payments)


def _coerce_amount(value: Any, label: str, allow_zero: bool) -> float:
    # bool is a Real subclass; a checkbox value is never a dollar amount
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidAmountError(f"{label} must be a number, got {value!r}")
    amount = float(value)
    if not math.isfinite(amount):
        raise InvalidAmountError(f"{label} must be finite, got {value!r}")
    if amount < 0 or (amount == 0 and not allow_zero):
        bound = "non-negative" if allow_zero else "positive"
        raise InvalidAmountError(f"{label} must be {bound}, got {value!r}")
    return amount


def parse_currency(text: Optional[str]) -> float:
    """
    Parse currency text typed into a form field.

    Everything except digits and dots is stripped, so ``"$1,250.50"`` is
    1250.5. Text that still does not parse is 0.

    Args:
        text: Raw field text

    Returns:
        Parsed non-negative amount
    """
    if not text:
        return 0.0
    cleaned = _NON_NUMERIC.sub("", text)
    # "1.2.3" keeps the leading number the way a lenient parser would
    match = re.match(r"\d*\.?\d+|\d+", cleaned)
    if not match:
        return 0.0
    try:
        return float(match.group(0))
    except ValueError:
        return 0.0


@dataclass(frozen=True)
class MoneyLedger:
    """
    Value object holding a job's financial state.

    ``balance`` is always derived from the other four fields and is never
    stored independently. It may be negative (overpayment).
    """

    contract_amount: float = 0.0
    deposit_amount: float = 0.0
    is_deposit_paid: bool = False
    payments: Tuple[float, ...] = ()

    def __post_init__(self):
        """Validate ledger inputs."""
        _coerce_amount(self.contract_amount, "Contract amount", allow_zero=True)
        _coerce_amount(self.deposit_amount, "Deposit amount", allow_zero=True)
        for amount in self.payments:
            _coerce_amount(amount, "Payment", allow_zero=False)

    @property
    def balance(self) -> float:
        return compute_balance(
            self.contract_amount,
            self.deposit_amount,
            self.is_deposit_paid,
            self.payments,
        )

    @property
    def total_payments(self) -> float:
        return sum(self.payments)

    @property
    def amount_collected(self) -> float:
        """Deposit (if paid) plus every payment."""
        return self.contract_amount - self.balance

    def is_overpaid(self) -> bool:
        return self.balance < 0

    def add_payment(self, amount: float) -> "MoneyLedger":
        """
        Append a payment.

        Raises:
            InvalidAmountError: If amount is not a positive finite number
        """
        value = _coerce_amount(amount, "Payment", allow_zero=False)
        return replace(self, payments=self.payments + (value,))

    def remove_payment(self, index: int) -> "MoneyLedger":
        """
        Remove the payment at ``index``.

        Removal is positional; payments have no identity of their own.

        Raises:
            IndexOutOfRangeError: If index is not a valid position
        """
        if isinstance(index, bool) or not isinstance(index, int):
            raise IndexOutOfRangeError(f"Payment index must be an integer, got {index!r}")
        if not 0 <= index < len(self.payments):
            raise IndexOutOfRangeError(
                f"Payment index {index} out of range for {len(self.payments)} payment(s)"
            )
        payments = self.payments[:index] + self.payments[index + 1:]
        return replace(self, payments=payments)

    def set_deposit_paid(self, flag: bool) -> "MoneyLedger":
        return replace(self, is_deposit_paid=bool(flag))

    def set_contract_amount(self, amount: float) -> "MoneyLedger":
        """Replace the contract amount (zero allowed, negative rejected)."""
        value = _coerce_amount(amount, "Contract amount", allow_zero=True)
        return replace(self, contract_amount=value)

    def set_deposit_amount(self, amount: float) -> "MoneyLedger":
        """Replace the deposit amount without touching the paid flag."""
        value = _coerce_amount(amount, "Deposit amount", allow_zero=True)
        return replace(self, deposit_amount=value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted job fields, balance included."""
        return {
            "contractAmount": self.contract_amount,
            "depositAmount": self.deposit_amount,
            "isDepositPaid": self.is_deposit_paid,
            "payments": list(self.payments),
            "balance": self.balance,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MoneyLedger":
        """
        Create a ledger from persisted job fields.

        A stored ``balance`` is ignored and recomputed.
        """
        return cls(
            contract_amount=float(data.get("contractAmount") or 0),
            deposit_amount=float(data.get("depositAmount") or 0),
            is_deposit_paid=bool(data.get("isDepositPaid", False)),
            payments=tuple(float(p) for p in data.get("payments") or ()),
        )
