"""
Records Schemas
Request and response models for the record endpoints.

Amounts and weights arrive from forms as numbers or strings; values that
do not parse fall back (0 for amounts, no value for weight) instead of
failing the request.
"""

import datetime
from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, Field, field_validator

from farm_dashboard.insights.utils import parse_date, safe_float
from farm_dashboard.models.animal import Animal, Gender, HealthStatus, VaccinationStatus
from farm_dashboard.models.health import HealthRecordType
from farm_dashboard.models.ledger import LedgerStatus, LedgerType
from farm_dashboard.models.transaction import Transaction, TransactionKind
from farm_dashboard.store.tables import StoreTable


class SheepSort(str, Enum):
    """Sort orders for the sheep list."""
    EAR_TAG = "ear_tag"
    BIRTH_DATE = "birth_date"
    WEIGHT = "weight"  # heaviest first
    HEALTH_STATUS = "health_status"


class TransactionOrigin(str, Enum):
    """Tables a transaction can be deleted from."""
    SALES = StoreTable.SALES.value
    EXPENSES = StoreTable.EXPENSES.value


class FormModel(BaseModel):
    """Base for write requests with permissive number and date parsing."""

    @staticmethod
    def _amount(value: Any) -> float:
        return safe_float(value, 0.0)

    @staticmethod
    def _optional_date(value: Any) -> Optional[datetime.date]:
        return parse_date(value)


class UpdateForm:
    """
    Mixin for partial edits.

    Only fields present in the request are changed. Columns listed in
    ``KEEP_ON_NULL`` cannot be cleared, so an explicit null leaves them
    untouched.
    """

    KEEP_ON_NULL: ClassVar[tuple[str, ...]] = ()

    def changes(self) -> dict[str, Any]:
        values = self.model_dump(mode="json", exclude_unset=True)
        return {
            field: value for field, value in values.items()
            if value is not None or field not in self.KEEP_ON_NULL
        }


# =============================================================================
# Sheep
# =============================================================================

class AnimalCreate(FormModel):
    """Request body for adding a sheep."""

    ear_tag: str = Field(..., min_length=1, max_length=64, description="Ear tag")
    breed: Optional[str] = Field(None, description="Breed name")
    birth_date: Optional[datetime.date] = Field(None, description="Date of birth")
    gender: Optional[Gender] = Field(None, description="female or male")
    weight: Optional[float] = Field(None, description="Weight in kg")
    health_status: HealthStatus = Field(default=HealthStatus.HEALTHY)
    vaccination_status: VaccinationStatus = Field(default=VaccinationStatus.UP_TO_DATE)
    estimated_value: float = Field(default=0.0, description="Estimated market value")
    notes: Optional[str] = None
    mother_id: Optional[str] = None
    father_id: Optional[str] = None

    @field_validator("weight", mode="before")
    @classmethod
    def _parse_weight(cls, value: Any) -> Optional[float]:
        return safe_float(value, None)

    @field_validator("estimated_value", mode="before")
    @classmethod
    def _parse_value(cls, value: Any) -> float:
        return cls._amount(value)

    @field_validator("birth_date", mode="before")
    @classmethod
    def _parse_birth_date(cls, value: Any) -> Optional[datetime.date]:
        return cls._optional_date(value)

    @field_validator("mother_id", "father_id", "breed", "gender", "notes", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        return None if value == "" else value


class AnimalUpdate(UpdateForm, AnimalCreate):
    """Request body for editing a sheep; only fields sent are changed."""

    KEEP_ON_NULL: ClassVar[tuple[str, ...]] = (
        "ear_tag", "health_status", "vaccination_status", "estimated_value",
    )

    ear_tag: Optional[str] = Field(None, min_length=1, max_length=64)
    health_status: Optional[HealthStatus] = None
    vaccination_status: Optional[VaccinationStatus] = None
    estimated_value: Optional[float] = None

    @field_validator("estimated_value", mode="before")
    @classmethod
    def _parse_value(cls, value: Any) -> Optional[float]:
        return None if value is None else cls._amount(value)


class SheepListResponse(BaseModel):
    sheep: list[Animal]
    total: int = Field(..., description="Number of sheep after filtering")


# =============================================================================
# Health records
# =============================================================================

class HealthRecordCreate(FormModel):
    """Request body for logging a health event."""

    sheep_id: str = Field(..., description="Animal the record is about")
    record_type: HealthRecordType = Field(..., description="checkup, vaccination, treatment, illness or other")
    description: str = Field(default="", description="What was observed or done")
    date: Optional[datetime.date] = Field(None, description="Event date (defaults to today)")

    @field_validator("date", mode="before")
    @classmethod
    def _parse_event_date(cls, value: Any) -> Optional[datetime.date]:
        return cls._optional_date(value)


# =============================================================================
# Transactions and expenses
# =============================================================================

class TransactionCreate(FormModel):
    """
    Request body for the combined finance form.

    Expenses go to ``expenses``; revenue goes to ``sales_records`` as a
    sale with the description as buyer.
    """

    kind: TransactionKind = Field(..., description="revenue or expense")
    category: Optional[str] = Field(None, description="Expense category")
    amount: float = Field(default=0.0, description="Amount")
    description: Optional[str] = Field(None, description="Description or buyer")
    date: Optional[datetime.date] = Field(None, description="Transaction date (defaults to today)")

    @field_validator("amount", mode="before")
    @classmethod
    def _parse_amount(cls, value: Any) -> float:
        return cls._amount(value)

    @field_validator("date", mode="before")
    @classmethod
    def _parse_transaction_date(cls, value: Any) -> Optional[datetime.date]:
        return cls._optional_date(value)


class ExpenseCreate(FormModel):
    """Request body for the expense form."""

    category: str = Field(..., min_length=1, description="Expense category")
    amount: float = Field(default=0.0, description="Amount")
    description: Optional[str] = None
    date: Optional[datetime.date] = Field(None, description="Expense date (defaults to today)")

    @field_validator("amount", mode="before")
    @classmethod
    def _parse_amount(cls, value: Any) -> float:
        return cls._amount(value)

    @field_validator("date", mode="before")
    @classmethod
    def _parse_expense_date(cls, value: Any) -> Optional[datetime.date]:
        return cls._optional_date(value)


class TransactionListResponse(BaseModel):
    transactions: list[Transaction]
    total: int


# =============================================================================
# Debts and credits
# =============================================================================

class DebtCreditCreate(FormModel):
    """Request body for a ledger record."""

    type: LedgerType = Field(..., description="debt or credit")
    amount: float = Field(default=0.0, description="Full amount")
    paid_amount: float = Field(default=0.0, description="Amount settled so far")
    counterparty: Optional[str] = Field(None, description="Who owes or is owed")
    description: Optional[str] = None
    due_date: Optional[datetime.date] = None
    status: LedgerStatus = Field(default=LedgerStatus.PENDING)

    @field_validator("amount", "paid_amount", mode="before")
    @classmethod
    def _parse_amounts(cls, value: Any) -> float:
        return cls._amount(value)

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, value: Any) -> Optional[datetime.date]:
        return cls._optional_date(value)


class DebtCreditUpdate(UpdateForm, DebtCreditCreate):
    """Request body for editing a ledger record; only fields sent are changed."""

    KEEP_ON_NULL: ClassVar[tuple[str, ...]] = ("type", "amount", "paid_amount", "status")

    type: Optional[LedgerType] = None
    amount: Optional[float] = None
    paid_amount: Optional[float] = None
    status: Optional[LedgerStatus] = None

    @field_validator("amount", "paid_amount", mode="before")
    @classmethod
    def _parse_amounts(cls, value: Any) -> Optional[float]:
        return None if value is None else cls._amount(value)


class LedgerLinkRequest(BaseModel):
    """Create a pending ledger record from an existing transaction."""

    origin: TransactionOrigin = Field(..., description="Table the transaction lives in")
    transaction_id: str = Field(..., description="Transaction id")
    type: LedgerType = Field(..., description="debt or credit")
