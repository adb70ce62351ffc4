"""
Reports Schemas
Response models for report previews.
"""

from typing import Any

from pydantic import BaseModel, Field

from farm_dashboard.reports.assembler import DateRange, ReportKind


class FlockStatisticsResponse(BaseModel):
    total: int
    healthy: int
    sick: int
    pregnant: int
    breeds: dict[str, int] = Field(..., description="Headcount per breed (Unknown when missing)")
    genders: dict[str, int] = Field(..., description="Headcount per gender")
    average_age_months: float
    average_weight: float
    total_value: float


class FinancialSummaryResponse(BaseModel):
    revenue: float
    expenses: float
    profit: float
    profit_margin: float = Field(..., description="Profit as a percentage of revenue")
    revenue_by_category: dict[str, float]
    expenses_by_category: dict[str, float]


class ReportSummaryResponse(BaseModel):
    """Headline figures shown above a report preview."""

    flock: FlockStatisticsResponse
    financial: FinancialSummaryResponse
    alert_count: int
    health_score: float
    vaccination_compliance: int
    outstanding_debt: float
    outstanding_credit: float
    net_position: float


class ReportResponse(BaseModel):
    """Report preview: the same rows the CSV export contains."""

    kind: ReportKind
    date_range: DateRange
    generated_at: str = Field(..., description="Generation timestamp (ISO 8601)")
    currency: str = Field(..., description="Currency label for amounts")
    summary: ReportSummaryResponse
    rows: list[dict[str, Any]] = Field(..., description="Flat rows, one mapping per line")
