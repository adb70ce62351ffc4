"""
Debt/Credit Ledger Model
Money owed by the farm (debts) and money owed to it (credits).
"""

from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import field_validator

from farm_dashboard.insights.utils import parse_date, safe_float
from farm_dashboard.models.base import TimestampedRecord


class LedgerType(str, Enum):
    """Ledger direction."""
    DEBT = "debt"
    CREDIT = "credit"


class LedgerStatus(str, Enum):
    """Settlement state of a ledger record."""
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class DebtCreditRecord(TimestampedRecord):
    """
    Row from the ``debts_credits`` table.

    ``paid_amount`` is expected to stay within [0, amount] but this is
    not enforced here.
    """

    type: LedgerType
    amount: float = 0.0
    paid_amount: float = 0.0
    counterparty: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[date] = None
    status: LedgerStatus = LedgerStatus.PENDING
    reference: Optional[str] = None
    created_by: Optional[str] = None

    @field_validator("amount", "paid_amount", mode="before")
    @classmethod
    def _parse_amounts(cls, value: Any) -> float:
        return safe_float(value, 0.0)

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, value: Any) -> Optional[date]:
        return parse_date(value)

    @field_validator("status", mode="before")
    @classmethod
    def _status_default(cls, value: Any) -> Any:
        return LedgerStatus.PENDING if value in (None, "") else value

    @field_validator("created_by", mode="before")
    @classmethod
    def _optional_id(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @property
    def remaining(self) -> float:
        """Outstanding balance: amount minus what has been paid."""
        return self.amount - self.paid_amount
