"""
Report Assembler

Turns fetched snapshots into report aggregates and flat, tabular rows.

Report kinds:
- overview: one synthetic row of flock, financial, health and ledger totals
- sheep: animals with their health score and risk factors
- financial: revenue and expense transactions in one shape
- health: illness and checkup alerts
- debts: ledger records with outstanding balance and overdue flag

Every row maps string keys to scalars so it can go straight to CSV.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Sequence, TypeVar

from farm_dashboard.insights.financial_calculator import (
    CategoryAmount,
    FinancialCalculator,
    FinancialTotals,
)
from farm_dashboard.insights.health_score_calculator import (
    FlockHealthSummary,
    HealthScore,
    HealthScoreCalculator,
)
from farm_dashboard.insights.ledger_calculator import LedgerCalculator, LedgerTotals
from farm_dashboard.insights.utils import age_in_months, month_start, shift_months
from farm_dashboard.models.animal import Animal, HealthStatus
from farm_dashboard.models.health import HealthAlert
from farm_dashboard.models.ledger import DebtCreditRecord
from farm_dashboard.models.transaction import Transaction

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNKNOWN = "Unknown"
RISK_FACTOR_SEPARATOR = "; "
OVERVIEW_REPORT_TYPE = "Flock Overview"


class ReportKind(str, Enum):
    """Report types available for display and export."""
    OVERVIEW = "overview"
    SHEEP = "sheep"
    FINANCIAL = "financial"
    HEALTH = "health"
    DEBTS = "debts"


class DateRange(str, Enum):
    """Date windows a report can cover."""
    CURRENT_MONTH = "current_month"
    LAST_MONTH = "last_month"
    CURRENT_YEAR = "current_year"
    LAST_YEAR = "last_year"
    ALL_TIME = "all_time"


DATE_RANGE_LABELS = {
    DateRange.CURRENT_MONTH: "Current Month",
    DateRange.LAST_MONTH: "Last Month",
    DateRange.CURRENT_YEAR: "Current Year",
    DateRange.LAST_YEAR: "Last Year",
    DateRange.ALL_TIME: "All Time",
}


def date_range_bounds(date_range: DateRange, today: date) -> tuple[Optional[date], Optional[date]]:
    """
    Resolve a date range to half-open bounds [start, end).

    Current periods end with today (inclusive); past periods end where
    the current one starts. ``all_time`` has no bounds.

    Args:
        date_range: Range to resolve
        today: Reference date

    Returns:
        (start, end) where either may be None for an open side
    """
    date_range = DateRange(date_range)
    tomorrow = today + timedelta(days=1)

    if date_range == DateRange.CURRENT_MONTH:
        return month_start(today), tomorrow
    if date_range == DateRange.LAST_MONTH:
        return shift_months(today, -1), month_start(today)
    if date_range == DateRange.CURRENT_YEAR:
        return date(today.year, 1, 1), tomorrow
    if date_range == DateRange.LAST_YEAR:
        return date(today.year - 1, 1, 1), date(today.year, 1, 1)
    return None, None


def filter_by_range(
    items: Iterable[T],
    date_range: DateRange,
    today: date,
    key: Callable[[T], Optional[date]],
) -> list[T]:
    """
    Keep items whose date falls in the range.

    Undated items only survive ``all_time``.
    """
    start, end = date_range_bounds(date_range, today)
    if start is None and end is None:
        return list(items)

    kept = []
    for item in items:
        day = key(item)
        if day is None:
            continue
        if start is not None and day < start:
            continue
        if end is not None and day >= end:
            continue
        kept.append(item)
    return kept


@dataclass
class FlockStatistics:
    """Headcounts and averages across the flock."""
    total: int = 0
    healthy: int = 0
    sick: int = 0
    pregnant: int = 0
    breeds: dict[str, int] = field(default_factory=dict)
    genders: dict[str, int] = field(default_factory=dict)
    average_age_months: float = 0.0
    average_weight: float = 0.0
    total_value: float = 0.0


@dataclass
class FinancialSummary:
    """Totals, margin and category breakdowns within the report range."""
    totals: FinancialTotals
    profit_margin: float
    revenue_by_category: list[CategoryAmount]
    expenses_by_category: list[CategoryAmount]


@dataclass
class HealthReportSummary:
    alert_count: int
    health_score: float
    vaccination_compliance: int


@dataclass
class ReportAggregates:
    """Everything the report kinds draw from, for one date range."""
    date_range: DateRange
    generated_at: datetime
    animals: list[Animal]
    animal_scores: list[HealthScore]
    revenue: list[Transaction]
    expenses: list[Transaction]
    ledger: list[DebtCreditRecord]
    alerts: list[HealthAlert]
    flock: FlockStatistics
    flock_health: FlockHealthSummary
    financial: FinancialSummary
    health: HealthReportSummary
    ledger_totals: LedgerTotals
    today: date


def flock_statistics(animals: Sequence[Animal], today: date) -> FlockStatistics:
    """
    Count animals by status, breed and gender and average their age and weight.

    Average age covers animals with a birth date; average weight counts
    a missing weight as 0.
    """
    stats = FlockStatistics(total=len(animals))
    ages = []
    for animal in animals:
        if animal.health_status == HealthStatus.HEALTHY:
            stats.healthy += 1
        elif animal.health_status == HealthStatus.SICK:
            stats.sick += 1
        elif animal.health_status == HealthStatus.PREGNANT:
            stats.pregnant += 1

        breed = animal.breed or UNKNOWN
        stats.breeds[breed] = stats.breeds.get(breed, 0) + 1
        gender = animal.gender or UNKNOWN
        stats.genders[gender] = stats.genders.get(gender, 0) + 1

        if animal.birth_date is not None:
            ages.append(age_in_months(animal.birth_date, today))
        stats.total_value += animal.estimated_value

    if animals:
        stats.average_weight = round(sum(a.weight or 0.0 for a in animals) / len(animals), 1)
    if ages:
        stats.average_age_months = round(sum(ages) / len(ages), 1)
    return stats


def build_report_aggregates(
    animals: Sequence[Animal],
    transactions: Sequence[Transaction],
    ledger: Sequence[DebtCreditRecord],
    alerts: Sequence[HealthAlert],
    date_range: DateRange,
    today: date,
    generated_at: Optional[datetime] = None,
) -> ReportAggregates:
    """
    Aggregate report inputs for one date range.

    Transactions are filtered by their date and alerts by their creation
    time. The flock and the ledger are current snapshots and are not
    filtered.

    Args:
        animals: All animals
        transactions: Revenue and expense transactions
        ledger: Debt and credit records
        alerts: Health alerts
        date_range: Range the report covers
        today: Reference date
        generated_at: Generation timestamp (defaults to now)

    Returns:
        ReportAggregates ready for build_report
    """
    date_range = DateRange(date_range)
    in_range = filter_by_range(transactions, date_range, today, lambda t: t.date)
    revenue = [t for t in in_range if t.is_revenue]
    expenses = [t for t in in_range if not t.is_revenue]
    alerts_in_range = filter_by_range(
        alerts, date_range, today,
        lambda a: a.created_at.date() if a.created_at else None,
    )

    totals = FinancialCalculator.calculate_totals(revenue, expenses)
    flock_health = HealthScoreCalculator.summarize_flock(animals, today)

    aggregates = ReportAggregates(
        date_range=date_range,
        generated_at=generated_at or datetime.now(),
        animals=list(animals),
        animal_scores=[HealthScoreCalculator.score_animal(a, today) for a in animals],
        revenue=revenue,
        expenses=expenses,
        ledger=list(ledger),
        alerts=alerts_in_range,
        flock=flock_statistics(animals, today),
        flock_health=flock_health,
        financial=FinancialSummary(
            totals=totals,
            profit_margin=(totals.profit / totals.revenue * 100) if totals.revenue > 0 else 0.0,
            revenue_by_category=FinancialCalculator.category_breakdown(revenue),
            expenses_by_category=FinancialCalculator.category_breakdown(expenses),
        ),
        health=HealthReportSummary(
            alert_count=len(alerts_in_range),
            health_score=flock_health.health_score,
            vaccination_compliance=flock_health.vaccination_compliance,
        ),
        ledger_totals=LedgerCalculator.outstanding_totals(ledger),
        today=today,
    )
    logger.info(
        "Report aggregates built for %s: %s animals, %s transactions, %s alerts",
        date_range.value, len(animals), len(in_range), len(alerts_in_range),
    )
    return aggregates


def _overview_row(aggregates: ReportAggregates) -> dict[str, Any]:
    flock = aggregates.flock
    totals = aggregates.financial.totals
    ledger = aggregates.ledger_totals
    return {
        "report_type": OVERVIEW_REPORT_TYPE,
        "total_sheep": flock.total,
        "healthy_sheep": flock.healthy,
        "sick_sheep": flock.sick,
        "pregnant_sheep": flock.pregnant,
        "average_health_score": aggregates.flock_health.average_score,
        "total_revenue": totals.revenue,
        "total_expenses": totals.expenses,
        "net_profit": totals.profit,
        "health_score": aggregates.health.health_score,
        "outstanding_debt": ledger.total_debt,
        "outstanding_credit": ledger.total_credit,
        "net_position": ledger.net_position,
        "generated_date": aggregates.generated_at.isoformat(timespec="seconds"),
        "date_range": DATE_RANGE_LABELS[aggregates.date_range],
    }


def _sheep_rows(aggregates: ReportAggregates) -> list[dict[str, Any]]:
    rows = []
    for animal, result in zip(aggregates.animals, aggregates.animal_scores):
        row = animal.to_row()
        row["health_score"] = result.score
        row["risk_factors"] = RISK_FACTOR_SEPARATOR.join(result.risk_factors)
        rows.append(row)
    return rows


def _transaction_row(transaction: Transaction) -> dict[str, Any]:
    if transaction.is_revenue:
        kind = "Revenue"
        category = transaction.transaction_type or "Sale"
    else:
        kind = "Expense"
        category = transaction.category
    return {
        "id": transaction.id,
        "type": kind,
        "category": category,
        "amount": transaction.amount,
        "description": transaction.description,
        "date": transaction.date.isoformat() if transaction.date else None,
        "source": transaction.origin.value,
    }


def _debt_rows(aggregates: ReportAggregates) -> list[dict[str, Any]]:
    rows = []
    for record in aggregates.ledger:
        row = record.to_row()
        row["outstanding"] = LedgerCalculator.remaining_balance(record)
        row["overdue"] = LedgerCalculator.is_overdue(record, aggregates.today)
        rows.append(row)
    return rows


def build_report(kind: ReportKind, aggregates: ReportAggregates) -> list[dict[str, Any]]:
    """
    Build the flat rows for one report kind.

    Args:
        kind: Report kind
        aggregates: Output of build_report_aggregates

    Returns:
        Rows of string keys to scalar values; the overview is always a
        single row
    """
    kind = ReportKind(kind)

    if kind == ReportKind.OVERVIEW:
        return [_overview_row(aggregates)]
    if kind == ReportKind.SHEEP:
        return _sheep_rows(aggregates)
    if kind == ReportKind.FINANCIAL:
        return [_transaction_row(t) for t in aggregates.revenue + aggregates.expenses]
    if kind == ReportKind.HEALTH:
        return [alert.to_row() for alert in aggregates.alerts]
    return _debt_rows(aggregates)
