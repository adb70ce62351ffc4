"""
Reports Router
API endpoints for report previews and CSV export.
"""

import logging
from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status

from farm_dashboard.auth.dependencies import ReportsUser
from farm_dashboard.auth.rate_limit import limiter
from farm_dashboard.config import settings
from farm_dashboard.core.errors import ErrorCode, create_error_response
from farm_dashboard.insights.service import DashboardService, get_dashboard_service
from farm_dashboard.reports.assembler import (
    DateRange,
    ReportAggregates,
    ReportKind,
    build_report,
)
from farm_dashboard.reports.csv_export import rows_to_csv
from farm_dashboard.reports.schemas import (
    FinancialSummaryResponse,
    FlockStatisticsResponse,
    ReportResponse,
    ReportSummaryResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["Reports"])

Service = Annotated[DashboardService, Depends(get_dashboard_service)]


def _summary(aggregates: ReportAggregates) -> ReportSummaryResponse:
    financial = aggregates.financial
    return ReportSummaryResponse(
        flock=FlockStatisticsResponse(**asdict(aggregates.flock)),
        financial=FinancialSummaryResponse(
            revenue=financial.totals.revenue,
            expenses=financial.totals.expenses,
            profit=financial.totals.profit,
            profit_margin=financial.profit_margin,
            revenue_by_category={c.name: c.value for c in financial.revenue_by_category},
            expenses_by_category={c.name: c.value for c in financial.expenses_by_category},
        ),
        alert_count=aggregates.health.alert_count,
        health_score=aggregates.health.health_score,
        vaccination_compliance=aggregates.health.vaccination_compliance,
        outstanding_debt=aggregates.ledger_totals.total_debt,
        outstanding_credit=aggregates.ledger_totals.total_credit,
        net_position=aggregates.ledger_totals.net_position,
    )


@router.get(
    "/{kind}",
    response_model=ReportResponse,
    summary="Preview a report",
    description="Summary figures and the flat rows for one report kind and date range.",
)
async def get_report(
    kind: ReportKind,
    current_user: ReportsUser,
    service: Service,
    date_range: DateRange = Query(DateRange.CURRENT_MONTH, description="Date range"),
) -> ReportResponse:
    aggregates = await service.report_aggregates(date_range)
    rows = build_report(kind, aggregates)

    return ReportResponse(
        kind=kind,
        date_range=date_range,
        generated_at=aggregates.generated_at.isoformat(timespec="seconds"),
        currency=settings.currency_label,
        summary=_summary(aggregates),
        rows=rows,
    )


@router.get(
    "/{kind}/export",
    summary="Export a report as CSV",
    description="Download the report rows as CSV. Returns 204 when the report has no rows.",
    responses={200: {"content": {"text/csv": {}}}, 204: {"description": "Nothing to export"}},
)
@limiter.limit(settings.export_rate_limit)
async def export_report(
    request: Request,
    kind: ReportKind,
    current_user: ReportsUser,
    service: Service,
    date_range: DateRange = Query(DateRange.CURRENT_MONTH, description="Date range"),
) -> Response:
    """
    Export one report kind as a CSV attachment.

    The header row comes from the keys of the first row. The file is
    named ``{kind}_report_{date_range}.csv``.
    """
    aggregates = await service.report_aggregates(date_range)
    rows = build_report(kind, aggregates)
    if not rows:
        logger.info("Nothing to export for %s report (%s)", kind.value, date_range.value)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    try:
        content = rows_to_csv(rows)
    except (TypeError, ValueError) as e:
        logger.error("CSV export failed for %s report: %s", kind.value, e, exc_info=True)
        raise create_error_response(ErrorCode.EXPORT_FAILED, http_status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    filename = f"{kind.value}_report_{date_range.value}.csv"
    logger.info("Exported %s rows to %s for user %s", len(rows), filename, current_user.id)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
