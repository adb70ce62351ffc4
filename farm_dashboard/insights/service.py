"""
Dashboard Service
Orchestrates fetches and calculations for each dashboard view.

Each view waits for all of its fetches (``asyncio.gather``) and then
hands the snapshots to the pure calculators with an explicit ``today``.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Annotated, Optional

from fastapi import Depends

from farm_dashboard.config import settings
from farm_dashboard.insights.financial_calculator import (
    CategoryAmount,
    FinancialAnalytics,
    FinancialCalculator,
    FinancialTotals,
)
from farm_dashboard.insights.health_score_calculator import (
    FlockHealthSummary,
    HealthPrediction,
    HealthScoreCalculator,
    ScoreBand,
)
from farm_dashboard.insights.ledger_calculator import (
    ChartEntry,
    LedgerActivityPoint,
    LedgerCalculator,
    LedgerFilter,
    LedgerTotals,
)
from farm_dashboard.models.animal import Animal, HealthStatus
from farm_dashboard.models.health import HealthAlert
from farm_dashboard.models.ledger import DebtCreditRecord
from farm_dashboard.models.transaction import Transaction
from farm_dashboard.reports.assembler import (
    DateRange,
    ReportAggregates,
    build_report_aggregates,
    filter_by_range,
)
from farm_dashboard.store.supabase_store import FarmStore, get_store

logger = logging.getLogger(__name__)


@dataclass
class OverviewStats:
    """Cards on the overview page."""
    total_sheep: int
    healthy_sheep: int
    sick_sheep: int
    total_value: float
    health_score: float
    monthly_revenue: float
    monthly_expenses: float
    monthly_profit: float
    outstanding_debt: float
    outstanding_credit: float


@dataclass
class ScoredAnimal:
    """One animal with its score, band, risk factors and predictions."""
    animal: Animal
    score: int
    band: ScoreBand
    risk_factors: list[str]
    predictions: list[HealthPrediction]


@dataclass
class HealthView:
    summary: FlockHealthSummary
    animals: list[ScoredAnimal]
    alerts: list[HealthAlert]


@dataclass
class FinanceSummary:
    """Totals and breakdowns for transactions within a date range."""
    date_range: DateRange
    totals: FinancialTotals
    revenue_by_category: list[CategoryAmount]
    expenses_by_category: list[CategoryAmount]
    transactions: list[Transaction] = field(default_factory=list)


@dataclass
class LedgerEntry:
    """Ledger record with display flags."""
    record: DebtCreditRecord
    remaining: float
    overdue: bool


@dataclass
class LedgerView:
    filter: LedgerFilter
    entries: list[LedgerEntry]
    totals: LedgerTotals
    chart: list[ChartEntry]
    activity: list[LedgerActivityPoint]


class DashboardService:
    """
    Per-view orchestration over a FarmStore.

    Usage:
        service = DashboardService(store, today=date.today())
        stats = await service.overview()
    """

    def __init__(self, store: FarmStore, today: date):
        self.store = store
        self.today = today

    @staticmethod
    def _split(transactions: list[Transaction]) -> tuple[list[Transaction], list[Transaction]]:
        revenue = [t for t in transactions if t.is_revenue]
        expenses = [t for t in transactions if not t.is_revenue]
        return revenue, expenses

    async def overview(self) -> OverviewStats:
        """Flock counts, flock value, current month figures and ledger position."""
        animals, transactions, ledger = await asyncio.gather(
            self.store.fetch_animals(),
            self.store.fetch_transactions(),
            self.store.fetch_ledger(),
        )
        revenue, expenses = self._split(transactions)

        summary = HealthScoreCalculator.summarize_flock(animals, self.today)
        month = FinancialCalculator.current_month_totals(revenue, expenses, self.today)
        ledger_totals = LedgerCalculator.outstanding_totals(ledger)

        return OverviewStats(
            total_sheep=summary.total,
            healthy_sheep=summary.healthy,
            sick_sheep=summary.sick,
            total_value=sum((a.estimated_value for a in animals), 0.0),
            health_score=summary.health_score,
            monthly_revenue=month.revenue,
            monthly_expenses=month.expenses,
            monthly_profit=month.profit,
            outstanding_debt=ledger_totals.total_debt,
            outstanding_credit=ledger_totals.total_credit,
        )

    async def health_view(
        self,
        status: Optional[HealthStatus] = None,
        created_by: Optional[str] = None,
    ) -> HealthView:
        """
        Scored animals (lowest score first), flock summary and recent alerts.

        Args:
            status: Only list animals with this health status; the flock
                summary always covers every fetched animal
            created_by: Only consider animals this user created
        """
        animals, alerts = await asyncio.gather(
            self.store.fetch_animals(created_by=created_by),
            self.store.fetch_health_alerts(limit=settings.alert_limit),
        )

        scored = []
        for animal in animals:
            if status is not None and animal.health_status != status:
                continue
            result = HealthScoreCalculator.score_animal(animal, self.today)
            scored.append(ScoredAnimal(
                animal=animal,
                score=result.score,
                band=HealthScoreCalculator.score_band(result.score),
                risk_factors=result.risk_factors,
                predictions=HealthScoreCalculator.predict_conditions(animal),
            ))
        scored.sort(key=lambda s: s.score)

        return HealthView(
            summary=HealthScoreCalculator.summarize_flock(animals, self.today),
            animals=scored,
            alerts=alerts,
        )

    async def analytics(self, months: int = 12) -> FinancialAnalytics:
        """
        Every chart series for the analytics page.

        Raises:
            ValueError: If ``months`` is not a supported window
        """
        if months not in FinancialCalculator.MONTH_WINDOWS:
            raise ValueError(f"months must be one of {FinancialCalculator.MONTH_WINDOWS}")

        transactions = await self.store.fetch_transactions()
        revenue, expenses = self._split(transactions)
        return FinancialCalculator.calculate_all(revenue, expenses, self.today, months)

    async def finance_summary(
        self,
        date_range: DateRange,
        limit: Optional[int] = None,
    ) -> FinanceSummary:
        """Totals and category breakdowns for transactions in ``date_range``."""
        transactions = await self.store.fetch_transactions()
        in_range = filter_by_range(transactions, date_range, self.today, lambda t: t.date)
        revenue, expenses = self._split(in_range)

        return FinanceSummary(
            date_range=date_range,
            totals=FinancialCalculator.calculate_totals(revenue, expenses),
            revenue_by_category=FinancialCalculator.category_breakdown(revenue),
            expenses_by_category=FinancialCalculator.category_breakdown(expenses),
            transactions=in_range[:limit] if limit else in_range,
        )

    async def ledger_view(self, ledger_filter: LedgerFilter = LedgerFilter.ALL) -> LedgerView:
        """Filtered ledger list plus totals and charts over the whole ledger."""
        records = await self.store.fetch_ledger()
        totals = LedgerCalculator.outstanding_totals(records)

        entries = [
            LedgerEntry(
                record=record,
                remaining=LedgerCalculator.remaining_balance(record),
                overdue=LedgerCalculator.is_overdue(record, self.today),
            )
            for record in LedgerCalculator.filter_records(records, ledger_filter, self.today)
        ]

        return LedgerView(
            filter=LedgerFilter(ledger_filter),
            entries=entries,
            totals=totals,
            chart=LedgerCalculator.chart_breakdown(totals),
            activity=LedgerCalculator.monthly_activity(records, self.today),
        )

    async def report_aggregates(self, date_range: DateRange) -> ReportAggregates:
        """Fetch everything a report needs and aggregate it for ``date_range``."""
        animals, transactions, ledger, alerts = await asyncio.gather(
            self.store.fetch_animals(),
            self.store.fetch_transactions(),
            self.store.fetch_ledger(),
            self.store.fetch_health_alerts(),
        )
        return build_report_aggregates(
            animals=animals,
            transactions=transactions,
            ledger=ledger,
            alerts=alerts,
            date_range=date_range,
            today=self.today,
        )


def get_today() -> date:
    """Dependency that provides the current date."""
    return date.today()


def get_dashboard_service(
    store: Annotated[FarmStore, Depends(get_store)],
    today: Annotated[date, Depends(get_today)],
) -> DashboardService:
    """Dependency that provides a DashboardService for the request."""
    return DashboardService(store, today)
