"""
Insights Schemas
Pydantic models for dashboard view responses.

Views are computed as dataclasses; these models validate them by
attribute access (``from_attributes``).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from farm_dashboard.insights.health_score_calculator import ScoreBand
from farm_dashboard.insights.ledger_calculator import LedgerFilter
from farm_dashboard.models.animal import Animal
from farm_dashboard.models.health import HealthAlert
from farm_dashboard.models.ledger import DebtCreditRecord
from farm_dashboard.models.transaction import Transaction
from farm_dashboard.reports.assembler import DateRange


class ViewModel(BaseModel):
    """Base for responses built from calculator results."""

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# Overview
# =============================================================================

class OverviewResponse(ViewModel):
    """Overview page cards."""

    total_sheep: int = Field(..., description="Number of animals in the flock")
    healthy_sheep: int = Field(..., description="Animals with status healthy")
    sick_sheep: int = Field(..., description="Animals with status sick")
    total_value: float = Field(..., description="Sum of estimated animal values")
    health_score: float = Field(..., description="Share of healthy animals (0-100)")
    monthly_revenue: float = Field(..., description="Revenue dated in the current month")
    monthly_expenses: float = Field(..., description="Expenses dated in the current month")
    monthly_profit: float = Field(..., description="Current month revenue minus expenses")
    outstanding_debt: float = Field(..., description="Unpaid balance the farm owes")
    outstanding_credit: float = Field(..., description="Unpaid balance owed to the farm")


# =============================================================================
# Health
# =============================================================================

class HealthPredictionResponse(ViewModel):
    condition: str
    probability: str
    recommendation: str


class ScoredAnimalResponse(ViewModel):
    """Animal with its heuristic health score."""

    animal: Animal
    score: int = Field(..., ge=0, le=100, description="Health score (0-100)")
    band: ScoreBand = Field(..., description="Display band: good, fair or poor")
    risk_factors: list[str] = Field(default_factory=list, description="Risk factor tags")
    predictions: list[HealthPredictionResponse] = Field(default_factory=list)


class FlockHealthResponse(ViewModel):
    """Flock-level health figures."""

    total: int
    healthy: int
    sick: int
    recovering: int
    pregnant: int
    health_score: float = Field(..., description="Share of healthy animals (0-100)")
    vaccination_compliance: int = Field(..., description="Animals with up to date vaccinations")
    at_risk: int = Field(..., description="Animals with at least one risk factor")
    average_score: float = Field(..., description="Mean per-animal health score")


class HealthViewResponse(ViewModel):
    summary: FlockHealthResponse
    animals: list[ScoredAnimalResponse]
    alerts: list[HealthAlert]


# =============================================================================
# Analytics
# =============================================================================

class CategoryAmountResponse(ViewModel):
    name: str
    value: float


class MonthlyPointResponse(ViewModel):
    month: str = Field(..., description="Month label, e.g. Mar 24")
    revenue: float
    expenses: float
    profit: float


class QuarterPointResponse(ViewModel):
    quarter: str = Field(..., description="Relative quarter label Q1 (oldest) to Q4 (current)")
    revenue: float
    expenses: float
    profit: float
    margin: float = Field(..., description="Profit margin percentage (0 without revenue)")


class CashFlowPointResponse(ViewModel):
    date: str = Field(..., description="Day label, e.g. Mar 5")
    inflow: float
    outflow: float
    net: float


class YearPointResponse(ViewModel):
    year: str
    revenue: float
    expenses: float
    profit: float


class GrowthResponse(ViewModel):
    """Month-over-month growth percentages."""

    revenue_growth: float
    expense_growth: float
    profit_growth: float


class TotalsResponse(ViewModel):
    revenue: float
    expenses: float
    profit: float


class AnalyticsResponse(ViewModel):
    """All chart series for the analytics page."""

    monthly_trends: list[MonthlyPointResponse]
    expense_breakdown: list[CategoryAmountResponse]
    revenue_breakdown: list[CategoryAmountResponse]
    profit_analysis: list[QuarterPointResponse]
    cash_flow: list[CashFlowPointResponse]
    yearly_comparison: list[YearPointResponse]
    growth: GrowthResponse
    window_totals: TotalsResponse


# =============================================================================
# Finance
# =============================================================================

class FinanceSummaryResponse(ViewModel):
    """Transactions and totals within a date range."""

    date_range: DateRange
    totals: TotalsResponse
    revenue_by_category: list[CategoryAmountResponse]
    expenses_by_category: list[CategoryAmountResponse]
    transactions: list[Transaction]


# =============================================================================
# Ledger
# =============================================================================

class LedgerEntryResponse(ViewModel):
    record: DebtCreditRecord
    remaining: float = Field(..., description="Outstanding balance (0 once paid)")
    overdue: bool = Field(..., description="Past due and not paid")


class LedgerTotalsResponse(ViewModel):
    total_debt: float
    total_credit: float
    net_position: float = Field(..., description="Total credit minus total debt")


class ChartEntryResponse(ViewModel):
    label: str
    value: float


class LedgerActivityResponse(ViewModel):
    month: str
    debts: float
    credits: float


class LedgerViewResponse(ViewModel):
    """Debt/credit page."""

    filter: LedgerFilter
    entries: list[LedgerEntryResponse]
    totals: LedgerTotalsResponse
    chart: list[ChartEntryResponse]
    activity: list[LedgerActivityResponse]
    currency: Optional[str] = Field(None, description="Currency label for amounts")
