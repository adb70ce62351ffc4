"""
Debt/Credit Ledger Calculator

Outstanding balances, chart series and list filters over the
``debts_credits`` collection. Paid records never count towards the
outstanding totals, whatever their paid_amount says.
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, Sequence

from farm_dashboard.insights.utils import month_label, same_month, shift_months
from farm_dashboard.models.ledger import DebtCreditRecord, LedgerStatus, LedgerType

logger = logging.getLogger(__name__)


class LedgerFilter(str, Enum):
    """List view filters."""
    ALL = "all"
    DEBTS = "debts"
    CREDITS = "credits"
    PENDING = "pending"
    OVERDUE = "overdue"


@dataclass
class LedgerTotals:
    """Outstanding balances across the ledger."""
    total_debt: float = 0.0
    total_credit: float = 0.0
    net_position: float = 0.0


@dataclass
class ChartEntry:
    label: str
    value: float


@dataclass
class LedgerActivityPoint:
    """New debts and credits created in one month."""
    month: str
    debts: float
    credits: float


class LedgerCalculator:
    """
    Aggregates debt and credit records.

    Methods are pure; anything date dependent takes ``today`` explicitly.
    """

    ACTIVITY_MONTHS = 6
    DEBT_LABEL = "Outstanding Debts"
    CREDIT_LABEL = "Outstanding Credits"

    @staticmethod
    def remaining_balance(record: DebtCreditRecord) -> float:
        """Amount still owed on a record (0 once it is paid)."""
        if record.status == LedgerStatus.PAID:
            return 0.0
        return record.remaining

    @staticmethod
    def outstanding_totals(records: Iterable[DebtCreditRecord]) -> LedgerTotals:
        """
        Sum outstanding balances per direction.

        Args:
            records: Ledger records

        Returns:
            LedgerTotals with net position = credit - debt
        """
        total_debt = 0.0
        total_credit = 0.0
        for record in records:
            if record.status == LedgerStatus.PAID:
                continue
            if record.type == LedgerType.DEBT:
                total_debt += record.remaining
            else:
                total_credit += record.remaining

        return LedgerTotals(
            total_debt=total_debt,
            total_credit=total_credit,
            net_position=total_credit - total_debt,
        )

    @staticmethod
    def chart_breakdown(totals: LedgerTotals) -> list[ChartEntry]:
        """Pie chart entries for the outstanding totals, zero entries dropped."""
        entries = [
            ChartEntry(label=LedgerCalculator.DEBT_LABEL, value=totals.total_debt),
            ChartEntry(label=LedgerCalculator.CREDIT_LABEL, value=totals.total_credit),
        ]
        return [entry for entry in entries if entry.value != 0]

    @staticmethod
    def monthly_activity(
        records: Sequence[DebtCreditRecord],
        today: date,
    ) -> list[LedgerActivityPoint]:
        """
        New debt and credit amounts per creation month.

        Buckets by ``created_at`` (not due date) and sums the full
        ``amount``. Records without a creation timestamp are left out.

        Args:
            records: Ledger records
            today: Reference date; its month is the last point

        Returns:
            Six LedgerActivityPoints, oldest first
        """
        points = []
        for offset in range(LedgerCalculator.ACTIVITY_MONTHS - 1, -1, -1):
            month = shift_months(today, -offset)
            debts = 0.0
            credits = 0.0
            for record in records:
                created = record.created_at.date() if record.created_at else None
                if not same_month(created, month):
                    continue
                if record.type == LedgerType.DEBT:
                    debts += record.amount
                else:
                    credits += record.amount

            points.append(LedgerActivityPoint(month=month_label(month), debts=debts, credits=credits))

        return points

    @staticmethod
    def is_overdue(record: DebtCreditRecord, today: date) -> bool:
        """Due date present and past, and the record is not paid."""
        return (
            record.due_date is not None
            and record.status != LedgerStatus.PAID
            and record.due_date < today
        )

    @staticmethod
    def filter_records(
        records: Iterable[DebtCreditRecord],
        ledger_filter: LedgerFilter,
        today: date,
    ) -> list[DebtCreditRecord]:
        """
        Apply a list view filter.

        Args:
            records: Ledger records
            ledger_filter: One of all, debts, credits, pending, overdue
            today: Reference date for overdue detection

        Returns:
            Matching records in their original order
        """
        ledger_filter = LedgerFilter(ledger_filter)

        if ledger_filter == LedgerFilter.DEBTS:
            return [r for r in records if r.type == LedgerType.DEBT]
        if ledger_filter == LedgerFilter.CREDITS:
            return [r for r in records if r.type == LedgerType.CREDIT]
        if ledger_filter == LedgerFilter.PENDING:
            return [r for r in records if r.status == LedgerStatus.PENDING]
        if ledger_filter == LedgerFilter.OVERDUE:
            return [r for r in records if LedgerCalculator.is_overdue(r, today)]
        return list(records)
