"""
Supabase Data Store
Read/write boundary between the dashboard core and the Supabase tables.

The Supabase client is synchronous, so every query runs in a worker
thread; callers can ``asyncio.gather`` independent fetches.

Typed fetchers never raise: a failed read is logged and treated as an
empty collection so aggregations still produce zeroed results.
"""

import asyncio
import logging
from typing import Any, Callable, Iterable, Mapping, Optional, TypeVar

import httpx
from pydantic import ValidationError
from supabase import Client, PostgrestAPIError

from farm_dashboard.auth.supabase_client import get_supabase_admin_client
from farm_dashboard.models.animal import Animal
from farm_dashboard.models.health import ALERT_RECORD_TYPES, HealthAlert
from farm_dashboard.models.ledger import DebtCreditRecord
from farm_dashboard.models.transaction import Transaction
from farm_dashboard.models.user import UserProfile
from farm_dashboard.store.exceptions import (
    RecordNotFoundError,
    StoreReadError,
    StoreWriteError,
)
from farm_dashboard.store.tables import StoreTable

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors raised by the Supabase client for a failed request
CLIENT_ERRORS = (PostgrestAPIError, httpx.HTTPError)

ALERT_COLUMNS = "*, sheep(ear_tag, breed)"


class FarmStore:
    """
    Table access for the dashboard.

    Usage:
        store = FarmStore(get_supabase_admin_client())
        animals = await store.fetch_animals()
    """

    def __init__(self, client: Client):
        self.client = client

    # =========================================================================
    # Low-level table access
    # =========================================================================

    async def list_rows(
        self,
        table: StoreTable,
        columns: str = "*",
        filters: Optional[Mapping[str, Any]] = None,
        in_filters: Optional[Mapping[str, Iterable[Any]]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """
        List rows from a table.

        Args:
            table: Table to read
            columns: Select expression (may embed related tables)
            filters: Equality filters, column -> value
            in_filters: Membership filters, column -> allowed values
            order_by: Column to order by
            descending: Order direction
            limit: Maximum number of rows

        Returns:
            Raw row dicts

        Raises:
            StoreReadError: If the query fails
        """
        def run() -> list[dict[str, Any]]:
            query = self.client.table(table.value).select(columns)
            for column, value in (filters or {}).items():
                query = query.eq(column, value)
            for column, values in (in_filters or {}).items():
                query = query.in_(column, list(values))
            if order_by:
                query = query.order(order_by, desc=descending)
            if limit:
                query = query.limit(limit)
            return query.execute().data or []

        try:
            return await asyncio.to_thread(run)
        except CLIENT_ERRORS as e:
            raise StoreReadError(f"Failed to read {table.value}: {e}", table=table.value) from e

    async def get_row(self, table: StoreTable, row_id: str) -> Optional[dict[str, Any]]:
        """Fetch one row by id, or None if it does not exist."""
        rows = await self.list_rows(table, filters={"id": row_id}, limit=1)
        return rows[0] if rows else None

    async def insert_row(self, table: StoreTable, values: Mapping[str, Any]) -> dict[str, Any]:
        """
        Insert a row and return it as stored.

        Raises:
            StoreWriteError: If the insert fails
        """
        def run() -> list[dict[str, Any]]:
            return self.client.table(table.value).insert(dict(values)).execute().data or []

        try:
            rows = await asyncio.to_thread(run)
        except CLIENT_ERRORS as e:
            raise StoreWriteError(f"Failed to insert into {table.value}: {e}", table=table.value) from e

        logger.info("Inserted row into %s", table.value)
        return rows[0] if rows else dict(values)

    async def update_row(
        self,
        table: StoreTable,
        row_id: str,
        values: Mapping[str, Any],
    ) -> dict[str, Any]:
        """
        Update a row by id and return it as stored.

        Raises:
            RecordNotFoundError: If no row has this id
            StoreWriteError: If the update fails
        """
        def run() -> list[dict[str, Any]]:
            return self.client.table(table.value).update(dict(values)).eq("id", row_id).execute().data or []

        try:
            rows = await asyncio.to_thread(run)
        except CLIENT_ERRORS as e:
            raise StoreWriteError(f"Failed to update {table.value}: {e}", table=table.value) from e

        if not rows:
            raise RecordNotFoundError(f"No row {row_id} in {table.value}", table=table.value)

        logger.info("Updated row %s in %s", row_id, table.value)
        return rows[0]

    async def delete_row(self, table: StoreTable, row_id: str) -> None:
        """
        Delete a row by id.

        Raises:
            RecordNotFoundError: If no row has this id
            StoreWriteError: If the delete fails
        """
        def run() -> list[dict[str, Any]]:
            return self.client.table(table.value).delete().eq("id", row_id).execute().data or []

        try:
            rows = await asyncio.to_thread(run)
        except CLIENT_ERRORS as e:
            raise StoreWriteError(f"Failed to delete from {table.value}: {e}", table=table.value) from e

        if not rows:
            raise RecordNotFoundError(f"No row {row_id} in {table.value}", table=table.value)

        logger.info("Deleted row %s from %s", row_id, table.value)

    # =========================================================================
    # Typed fetchers
    # =========================================================================

    @staticmethod
    def _parse_rows(
        rows: Iterable[dict[str, Any]],
        build: Callable[[dict[str, Any]], T],
        table: StoreTable,
    ) -> list[T]:
        """Build records from rows, skipping rows that fail validation."""
        records = []
        for row in rows:
            try:
                records.append(build(row))
            except ValidationError as e:
                logger.warning(
                    "Skipping invalid %s row %s: %s",
                    table.value, row.get("id"), e.errors()[0].get("msg"),
                )
        return records

    async def _fetch(
        self,
        table: StoreTable,
        build: Callable[[dict[str, Any]], T],
        **query: Any,
    ) -> list[T]:
        """List and parse rows; a failed read yields an empty list."""
        try:
            rows = await self.list_rows(table, **query)
        except StoreReadError as e:
            logger.error("Store read failed for %s: %s", table.value, e.message, exc_info=True)
            return []
        return self._parse_rows(rows, build, table)

    async def fetch_animals(
        self,
        created_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Animal]:
        """Sheep records, newest first, optionally only those a user created."""
        filters = {"created_by": created_by} if created_by else None
        return await self._fetch(
            StoreTable.SHEEP,
            Animal.model_validate,
            filters=filters,
            order_by="created_at",
            descending=True,
            limit=limit,
        )

    async def fetch_sales(self) -> list[Transaction]:
        """Sales relabelled into revenue transactions, newest first."""
        return await self._fetch(
            StoreTable.SALES,
            Transaction.from_sale,
            order_by="date",
            descending=True,
        )

    async def fetch_expenses(self) -> list[Transaction]:
        """Expense transactions, newest first."""
        return await self._fetch(
            StoreTable.EXPENSES,
            Transaction.from_expense,
            order_by="date",
            descending=True,
        )

    async def fetch_transactions(self) -> list[Transaction]:
        """
        Sales and expenses merged into one list, newest first.

        Rows without a date sort last.
        """
        sales, expenses = await asyncio.gather(self.fetch_sales(), self.fetch_expenses())
        dated = [t for t in sales + expenses if t.date is not None]
        undated = [t for t in sales + expenses if t.date is None]
        dated.sort(key=lambda t: t.date, reverse=True)
        return dated + undated

    async def fetch_ledger(self) -> list[DebtCreditRecord]:
        """Debt and credit records, newest first."""
        return await self._fetch(
            StoreTable.DEBTS_CREDITS,
            DebtCreditRecord.model_validate,
            order_by="created_at",
            descending=True,
        )

    async def fetch_health_alerts(self, limit: Optional[int] = None) -> list[HealthAlert]:
        """Illness and checkup records as alerts, newest first."""
        return await self._fetch(
            StoreTable.HEALTH_RECORDS,
            HealthAlert.from_health_record,
            columns=ALERT_COLUMNS,
            in_filters={"record_type": [t.value for t in ALERT_RECORD_TYPES]},
            order_by="created_at",
            descending=True,
            limit=limit,
        )

    async def fetch_users(self) -> list[UserProfile]:
        """All user profiles, newest first."""
        return await self._fetch(
            StoreTable.USERS,
            UserProfile.model_validate,
            order_by="created_at",
            descending=True,
        )

    async def fetch_user_profile(self, user_id: str) -> Optional[UserProfile]:
        """Profile for one user, or None if missing or unreadable."""
        profiles = await self._fetch(
            StoreTable.USERS,
            UserProfile.model_validate,
            filters={"id": user_id},
            limit=1,
        )
        return profiles[0] if profiles else None


def get_store() -> FarmStore:
    """
    Dependency that provides the Supabase-backed store.

    Usage:
        @router.get("/sheep")
        async def list_sheep(store: FarmStore = Depends(get_store)):
            ...
    """
    return FarmStore(get_supabase_admin_client())
