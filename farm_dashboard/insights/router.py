"""
Insights Router
API endpoints for the overview, health, analytics, finance and ledger views.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from farm_dashboard.auth.dependencies import (
    AnalyticsUser,
    FinanceUser,
    HealthUser,
    LedgerUser,
    OverviewUser,
    owner_scope,
)
from farm_dashboard.config import settings
from farm_dashboard.core.errors import ErrorCode, create_error_response
from farm_dashboard.insights.financial_calculator import FinancialCalculator
from farm_dashboard.insights.ledger_calculator import LedgerFilter
from farm_dashboard.insights.schemas import (
    AnalyticsResponse,
    FinanceSummaryResponse,
    HealthViewResponse,
    LedgerViewResponse,
    OverviewResponse,
)
from farm_dashboard.insights.service import DashboardService, get_dashboard_service
from farm_dashboard.models.animal import HealthStatus
from farm_dashboard.reports.assembler import DateRange

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/insights", tags=["Insights"])

Service = Annotated[DashboardService, Depends(get_dashboard_service)]


@router.get(
    "/overview",
    response_model=OverviewResponse,
    summary="Get overview stats",
    description="Flock counts, flock value, current month totals and ledger position.",
)
async def get_overview(current_user: OverviewUser, service: Service) -> OverviewResponse:
    stats = await service.overview()
    return OverviewResponse.model_validate(stats)


@router.get(
    "/health",
    response_model=HealthViewResponse,
    summary="Get flock health",
    description="Per-animal health scores, flock summary and recent alerts.",
)
async def get_health(
    current_user: HealthUser,
    service: Service,
    status: Optional[HealthStatus] = Query(None, description="Only score animals with this status"),
) -> HealthViewResponse:
    """
    Health scoring view.

    Animals are listed lowest score first so the ones needing attention
    come on top.
    """
    view = await service.health_view(status, created_by=owner_scope(current_user))
    return HealthViewResponse.model_validate(view)


@router.get(
    "/analytics",
    response_model=AnalyticsResponse,
    summary="Get analytics charts",
    description="Monthly trend, category breakdowns, quarterly profit, daily cash flow and year-over-year.",
)
async def get_analytics(
    current_user: AnalyticsUser,
    service: Service,
    months: int = Query(12, description="Monthly trend window (6 or 12)"),
) -> AnalyticsResponse:
    if months not in FinancialCalculator.MONTH_WINDOWS:
        raise create_error_response(
            ErrorCode.VALIDATION_ERROR,
            message=f"months must be one of {', '.join(map(str, FinancialCalculator.MONTH_WINDOWS))}",
        )

    analytics = await service.analytics(months)
    return AnalyticsResponse.model_validate(analytics)


@router.get(
    "/finance",
    response_model=FinanceSummaryResponse,
    summary="Get finance summary",
    description="Transactions, totals and category breakdowns for a date range.",
)
async def get_finance_summary(
    current_user: FinanceUser,
    service: Service,
    date_range: DateRange = Query(DateRange.CURRENT_MONTH, description="Date range"),
) -> FinanceSummaryResponse:
    summary = await service.finance_summary(date_range, limit=settings.transaction_list_limit)
    return FinanceSummaryResponse.model_validate(summary)


@router.get(
    "/ledger",
    response_model=LedgerViewResponse,
    summary="Get debts and credits",
    description="Filtered ledger list with overdue flags, outstanding totals and charts.",
)
async def get_ledger(
    current_user: LedgerUser,
    service: Service,
    filter: LedgerFilter = Query(LedgerFilter.ALL, description="all, debts, credits, pending or overdue"),
) -> LedgerViewResponse:
    view = await service.ledger_view(filter)
    response = LedgerViewResponse.model_validate(view)
    return response.model_copy(update={"currency": settings.currency_label})
