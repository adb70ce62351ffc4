"""
Records Router
API endpoints for creating, editing and deleting farm records.

Every endpoint is gated on its section; writes are stamped with the
current user's id. Staff edit only the sheep they added, and only admins
delete sheep.
"""

import logging
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from farm_dashboard.auth.dependencies import (
    ExpensesUser,
    FinanceUser,
    HealthUser,
    LedgerUser,
    SheepUser,
    owner_scope,
)
from farm_dashboard.config import settings
from farm_dashboard.core.errors import ErrorCode, create_error_response
from farm_dashboard.insights.service import get_today
from farm_dashboard.models.animal import Animal, HealthStatus
from farm_dashboard.models.health import HealthRecord
from farm_dashboard.models.ledger import DebtCreditRecord, LedgerStatus, LedgerType
from farm_dashboard.models.transaction import Transaction, TransactionKind
from farm_dashboard.records.schemas import (
    AnimalCreate,
    AnimalUpdate,
    DebtCreditCreate,
    DebtCreditUpdate,
    ExpenseCreate,
    HealthRecordCreate,
    LedgerLinkRequest,
    SheepListResponse,
    SheepSort,
    TransactionCreate,
    TransactionListResponse,
    TransactionOrigin,
)
from farm_dashboard.reports.assembler import DateRange, filter_by_range
from farm_dashboard.store.supabase_store import FarmStore, get_store
from farm_dashboard.store.tables import StoreTable

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Records"])

Store = Annotated[FarmStore, Depends(get_store)]
Today = Annotated[date, Depends(get_today)]

SALE_TRANSACTION_TYPE = "sale"
DEFAULT_BUYER = "Revenue"
DEFAULT_COUNTERPARTY = {
    LedgerType.DEBT: "Supplier",
    LedgerType.CREDIT: "Customer",
}


def sort_sheep(animals: list[Animal], sort_by: SheepSort) -> list[Animal]:
    """
    Order the sheep list.

    Missing values sort as empty text, the earliest date or 0 kg.
    """
    if sort_by == SheepSort.BIRTH_DATE:
        return sorted(animals, key=lambda a: a.birth_date or date.min)
    if sort_by == SheepSort.WEIGHT:
        return sorted(animals, key=lambda a: a.weight or 0.0, reverse=True)
    if sort_by == SheepSort.HEALTH_STATUS:
        return sorted(animals, key=lambda a: a.health_status.value)
    return sorted(animals, key=lambda a: a.ear_tag.lower())


def search_sheep(animals: list[Animal], search: Optional[str]) -> list[Animal]:
    """Case-insensitive match on ear tag or breed."""
    if not search:
        return animals
    term = search.strip().lower()
    return [
        a for a in animals
        if term in a.ear_tag.lower() or term in (a.breed or "").lower()
    ]


# =============================================================================
# Sheep
# =============================================================================

@router.get(
    "/sheep",
    response_model=SheepListResponse,
    summary="List sheep",
    description="Search, filter and sort the flock. Staff only see sheep they added.",
)
async def list_sheep(
    current_user: SheepUser,
    store: Store,
    search: Optional[str] = Query(None, description="Match on ear tag or breed"),
    health_status: Optional[HealthStatus] = Query(None, description="Filter by health status"),
    sort_by: SheepSort = Query(SheepSort.EAR_TAG, description="Sort order"),
) -> SheepListResponse:
    animals = await store.fetch_animals(
        created_by=owner_scope(current_user),
        limit=settings.sheep_list_limit,
    )

    animals = search_sheep(animals, search)
    if health_status is not None:
        animals = [a for a in animals if a.health_status == health_status]

    animals = sort_sheep(animals, sort_by)
    return SheepListResponse(sheep=animals, total=len(animals))


@router.post(
    "/sheep",
    response_model=Animal,
    status_code=status.HTTP_201_CREATED,
    summary="Add a sheep",
)
async def create_sheep(data: AnimalCreate, current_user: SheepUser, store: Store) -> Animal:
    values = data.model_dump(mode="json")
    values["created_by"] = current_user.id

    row = await store.insert_row(StoreTable.SHEEP, values)
    logger.info("Sheep %s added by %s", data.ear_tag, current_user.id)
    return Animal.model_validate(row)


@router.patch(
    "/sheep/{sheep_id}",
    response_model=Animal,
    summary="Edit a sheep",
)
async def update_sheep(
    sheep_id: str,
    data: AnimalUpdate,
    current_user: SheepUser,
    store: Store,
) -> Animal:
    values = data.changes()
    if not values:
        raise create_error_response(ErrorCode.VALIDATION_ERROR, message="No fields to update")

    creator = owner_scope(current_user)
    if creator is not None:
        # Staff may only edit sheep they added; others look missing
        existing = await store.get_row(StoreTable.SHEEP, sheep_id)
        if existing is None or str(existing.get("created_by")) != creator:
            raise create_error_response(ErrorCode.RECORD_NOT_FOUND)

    row = await store.update_row(StoreTable.SHEEP, sheep_id, values)
    return Animal.model_validate(row)


@router.delete(
    "/sheep/{sheep_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a sheep",
    description="Admins only.",
)
async def delete_sheep(sheep_id: str, current_user: SheepUser, store: Store) -> Response:
    if not current_user.is_admin:
        raise create_error_response(ErrorCode.ACCESS_DENIED)

    await store.delete_row(StoreTable.SHEEP, sheep_id)
    logger.info("Sheep %s deleted by %s", sheep_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Health records
# =============================================================================

@router.post(
    "/health-records",
    response_model=HealthRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Log a health record",
)
async def create_health_record(
    data: HealthRecordCreate,
    current_user: HealthUser,
    store: Store,
    today: Today,
) -> HealthRecord:
    values = data.model_dump(mode="json")
    values["date"] = (data.date or today).isoformat()
    values["created_by"] = current_user.id

    row = await store.insert_row(StoreTable.HEALTH_RECORDS, values)
    return HealthRecord.model_validate(row)


# =============================================================================
# Transactions
# =============================================================================

@router.get(
    "/transactions",
    response_model=TransactionListResponse,
    summary="List transactions",
    description="Sales and expenses in one list, newest first.",
)
async def list_transactions(
    current_user: FinanceUser,
    store: Store,
    today: Today,
    date_range: DateRange = Query(DateRange.CURRENT_MONTH, description="Date range"),
    kind: Optional[TransactionKind] = Query(None, description="revenue or expense"),
) -> TransactionListResponse:
    transactions = await store.fetch_transactions()
    transactions = filter_by_range(transactions, date_range, today, lambda t: t.date)
    if kind is not None:
        transactions = [t for t in transactions if t.kind == kind]

    return TransactionListResponse(
        transactions=transactions[:settings.transaction_list_limit],
        total=len(transactions),
    )


@router.post(
    "/transactions",
    response_model=Transaction,
    status_code=status.HTTP_201_CREATED,
    summary="Record a transaction",
    description="Expenses are stored as expenses; revenue is stored as a sale.",
)
async def create_transaction(
    data: TransactionCreate,
    current_user: FinanceUser,
    store: Store,
    today: Today,
) -> Transaction:
    day = (data.date or today).isoformat()

    if data.kind == TransactionKind.EXPENSE:
        row = await store.insert_row(StoreTable.EXPENSES, {
            "category": data.category,
            "amount": data.amount,
            "description": data.description,
            "date": day,
            "created_by": current_user.id,
        })
        return Transaction.from_expense(row)

    row = await store.insert_row(StoreTable.SALES, {
        "sheep_id": None,
        "transaction_type": SALE_TRANSACTION_TYPE,
        "amount": data.amount,
        "buyer_seller": data.description or DEFAULT_BUYER,
        "date": day,
        "created_by": current_user.id,
    })
    return Transaction.from_sale(row)


@router.delete(
    "/transactions/{origin}/{transaction_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a transaction",
    description="Deletes from the table the transaction came from.",
)
async def delete_transaction(
    origin: TransactionOrigin,
    transaction_id: str,
    current_user: FinanceUser,
    store: Store,
) -> Response:
    await store.delete_row(StoreTable(origin.value), transaction_id)
    logger.info("Transaction %s/%s deleted by %s", origin.value, transaction_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Expenses
# =============================================================================

@router.get(
    "/expenses",
    response_model=TransactionListResponse,
    summary="List expenses",
)
async def list_expenses(
    current_user: ExpensesUser,
    store: Store,
    today: Today,
    date_range: DateRange = Query(DateRange.CURRENT_MONTH, description="Date range"),
) -> TransactionListResponse:
    expenses = await store.fetch_expenses()
    expenses = filter_by_range(expenses, date_range, today, lambda t: t.date)
    return TransactionListResponse(
        transactions=expenses[:settings.transaction_list_limit],
        total=len(expenses),
    )


@router.post(
    "/expenses",
    response_model=Transaction,
    status_code=status.HTTP_201_CREATED,
    summary="Record an expense",
)
async def create_expense(
    data: ExpenseCreate,
    current_user: ExpensesUser,
    store: Store,
    today: Today,
) -> Transaction:
    row = await store.insert_row(StoreTable.EXPENSES, {
        "category": data.category,
        "amount": data.amount,
        "description": data.description,
        "date": (data.date or today).isoformat(),
        "created_by": current_user.id,
    })
    return Transaction.from_expense(row)


@router.delete(
    "/expenses/{expense_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an expense",
)
async def delete_expense(expense_id: str, current_user: ExpensesUser, store: Store) -> Response:
    await store.delete_row(StoreTable.EXPENSES, expense_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Debts and credits
# =============================================================================

@router.post(
    "/debts-credits",
    response_model=DebtCreditRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Add a debt or credit",
)
async def create_debt_credit(
    data: DebtCreditCreate,
    current_user: LedgerUser,
    store: Store,
) -> DebtCreditRecord:
    values = data.model_dump(mode="json")
    values["created_by"] = current_user.id

    row = await store.insert_row(StoreTable.DEBTS_CREDITS, values)
    return DebtCreditRecord.model_validate(row)


@router.patch(
    "/debts-credits/{record_id}",
    response_model=DebtCreditRecord,
    summary="Edit a debt or credit",
)
async def update_debt_credit(
    record_id: str,
    data: DebtCreditUpdate,
    current_user: LedgerUser,
    store: Store,
) -> DebtCreditRecord:
    values = data.changes()
    if not values:
        raise create_error_response(ErrorCode.VALIDATION_ERROR, message="No fields to update")

    row = await store.update_row(StoreTable.DEBTS_CREDITS, record_id, values)
    return DebtCreditRecord.model_validate(row)


@router.delete(
    "/debts-credits/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a debt or credit",
)
async def delete_debt_credit(record_id: str, current_user: LedgerUser, store: Store) -> Response:
    await store.delete_row(StoreTable.DEBTS_CREDITS, record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/debts-credits/link",
    response_model=DebtCreditRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Create a ledger record from a transaction",
    description="Creates a pending debt or credit for the full amount of a sale or expense.",
)
async def link_transaction(
    data: LedgerLinkRequest,
    current_user: FinanceUser,
    store: Store,
) -> DebtCreditRecord:
    origin = StoreTable(data.origin.value)
    row = await store.get_row(origin, data.transaction_id)
    if row is None:
        raise create_error_response(ErrorCode.RECORD_NOT_FOUND)

    if origin == StoreTable.SALES:
        transaction = Transaction.from_sale(row)
    else:
        transaction = Transaction.from_expense(row)

    description = transaction.description or "Financial transaction"
    values = {
        "type": data.type.value,
        "amount": transaction.amount,
        "paid_amount": 0,
        "description": f"Linked to {transaction.kind.value}: {description}",
        "counterparty": transaction.description or DEFAULT_COUNTERPARTY[data.type],
        "status": LedgerStatus.PENDING.value,
        "reference": f"Finance Record: {transaction.id}",
        "created_by": current_user.id,
    }

    record = await store.insert_row(StoreTable.DEBTS_CREDITS, values)
    logger.info("Linked %s %s to a new %s record", origin.value, transaction.id, data.type.value)
    return DebtCreditRecord.model_validate(record)
