"""
Transaction Model
Revenue and expense rows materialized into one shape for aggregation.
"""

import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import field_validator

from farm_dashboard.insights.utils import parse_date, safe_float
from farm_dashboard.models.base import TimestampedRecord
from farm_dashboard.store.tables import StoreTable

# Category every sale is relabelled with before aggregation
SALE_CATEGORY = "sale"


class TransactionKind(str, Enum):
    """Direction of money flow."""
    REVENUE = "revenue"
    EXPENSE = "expense"


class Transaction(TimestampedRecord):
    """
    Revenue xor expense record.

    Sales come from ``sales_records`` and expenses from ``expenses``;
    ``origin`` keeps the source table so a row can be deleted from the
    table it actually lives in.
    """

    kind: TransactionKind
    origin: StoreTable
    amount: float = 0.0
    category: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime.date] = None
    transaction_type: Optional[str] = None
    created_by: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _parse_amount(cls, value: Any) -> float:
        return safe_float(value, 0.0)

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> Optional[datetime.date]:
        return parse_date(value)

    @field_validator("created_by", mode="before")
    @classmethod
    def _optional_id(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @property
    def is_revenue(self) -> bool:
        return self.kind == TransactionKind.REVENUE

    @classmethod
    def from_sale(cls, row: dict[str, Any]) -> "Transaction":
        """Relabel a ``sales_records`` row into the transaction shape."""
        return cls.model_validate({
            **row,
            "kind": TransactionKind.REVENUE,
            "origin": StoreTable.SALES,
            "category": SALE_CATEGORY,
            "description": row.get("buyer_seller") or row.get("description"),
            "transaction_type": row.get("transaction_type"),
        })

    @classmethod
    def from_expense(cls, row: dict[str, Any]) -> "Transaction":
        """Wrap an ``expenses`` row in the transaction shape."""
        return cls.model_validate({
            **row,
            "kind": TransactionKind.EXPENSE,
            "origin": StoreTable.EXPENSES,
        })
