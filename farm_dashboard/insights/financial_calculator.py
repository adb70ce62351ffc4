"""
Financial aggregation for revenue and expense collections.

Reduces already-fetched transactions into totals, category breakdowns and
fixed-length time series (monthly, quarterly, daily, yearly). Every series
has a point per bucket even when no transaction falls into it, so chart
series keep a fixed length.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Optional, Sequence

from farm_dashboard.insights.trend_analyzer import GrowthMetrics, TrendAnalyzer
from farm_dashboard.insights.utils import (
    day_label,
    month_end,
    month_label,
    month_start,
    same_month,
    shift_months,
)
from farm_dashboard.models.transaction import Transaction

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Other"


@dataclass
class FinancialTotals:
    """Revenue, expenses and profit over a collection."""
    revenue: float = 0.0
    expenses: float = 0.0
    profit: float = 0.0


@dataclass
class CategoryAmount:
    """Summed amount for one category."""
    name: str
    value: float


@dataclass
class MonthlyPoint:
    """One calendar month of the trend series."""
    month: str
    revenue: float
    expenses: float
    profit: float


@dataclass
class QuarterPoint:
    """One 3-month span of the profit analysis."""
    quarter: str
    revenue: float
    expenses: float
    profit: float
    margin: float


@dataclass
class CashFlowPoint:
    """One day of the cash flow series."""
    date: str
    inflow: float
    outflow: float
    net: float


@dataclass
class YearPoint:
    """One calendar year of the year-over-year comparison."""
    year: str
    revenue: float
    expenses: float
    profit: float


@dataclass
class FinancialAnalytics:
    """Everything the analytics charts need, computed in one pass."""
    monthly_trends: list[MonthlyPoint]
    expense_breakdown: list[CategoryAmount]
    revenue_breakdown: list[CategoryAmount]
    profit_analysis: list[QuarterPoint]
    cash_flow: list[CashFlowPoint]
    yearly_comparison: list[YearPoint]
    growth: GrowthMetrics
    window_totals: FinancialTotals = field(default_factory=FinancialTotals)


class FinancialCalculator:
    """
    Aggregates revenue and expense transactions.

    All methods are pure: they take the current date explicitly and keep
    no state between calls.
    """

    MONTH_WINDOWS = (6, 12)
    QUARTER_COUNT = 4
    CASH_FLOW_DAYS = 31

    @staticmethod
    def _sum(
        transactions: Sequence[Transaction],
        predicate: Optional[Callable[[Transaction], bool]] = None,
    ) -> float:
        """Sum amounts, optionally only where predicate holds."""
        return sum(
            (t.amount for t in transactions if predicate is None or predicate(t)),
            0.0,
        )

    @staticmethod
    def _in_range(start: date, end: date) -> Callable[[Transaction], bool]:
        """Predicate for transactions dated within [start, end]."""
        return lambda t: t.date is not None and start <= t.date <= end

    @staticmethod
    def calculate_totals(
        revenue: Sequence[Transaction],
        expenses: Sequence[Transaction],
    ) -> FinancialTotals:
        """
        Calculate overall revenue, expenses and profit.

        Args:
            revenue: Revenue transactions
            expenses: Expense transactions

        Returns:
            FinancialTotals (zeros for empty input)
        """
        total_revenue = FinancialCalculator._sum(revenue)
        total_expenses = FinancialCalculator._sum(expenses)
        return FinancialTotals(
            revenue=total_revenue,
            expenses=total_expenses,
            profit=total_revenue - total_expenses,
        )

    @staticmethod
    def category_breakdown(transactions: Sequence[Transaction]) -> list[CategoryAmount]:
        """
        Sum amounts per category, largest first.

        Ties keep the order in which categories first appear.

        Args:
            transactions: Transactions of a single kind

        Returns:
            CategoryAmount list ordered by descending value
        """
        categories: dict[str, float] = {}
        for transaction in transactions:
            name = transaction.category or UNCATEGORIZED
            categories[name] = categories.get(name, 0.0) + transaction.amount

        ordered = sorted(categories.items(), key=lambda item: item[1], reverse=True)
        return [CategoryAmount(name=name, value=value) for name, value in ordered]

    @staticmethod
    def monthly_trend(
        revenue: Sequence[Transaction],
        expenses: Sequence[Transaction],
        today: date,
        months: int = 12,
    ) -> list[MonthlyPoint]:
        """
        Build the monthly trend ending at the current month (inclusive).

        Args:
            revenue: Revenue transactions
            expenses: Expense transactions
            today: Reference date; its month is the last point
            months: Window length, 6 or 12

        Returns:
            Exactly ``months`` points, oldest first

        Raises:
            ValueError: If the window length is not supported
        """
        if months not in FinancialCalculator.MONTH_WINDOWS:
            raise ValueError(f"Monthly trend window must be one of {FinancialCalculator.MONTH_WINDOWS}")

        points = []
        for offset in range(months - 1, -1, -1):
            month = shift_months(today, -offset)
            in_month = lambda t, m=month: same_month(t.date, m)

            month_revenue = FinancialCalculator._sum(revenue, in_month)
            month_expenses = FinancialCalculator._sum(expenses, in_month)
            points.append(MonthlyPoint(
                month=month_label(month),
                revenue=month_revenue,
                expenses=month_expenses,
                profit=month_revenue - month_expenses,
            ))

        return points

    @staticmethod
    def quarterly_profit(
        revenue: Sequence[Transaction],
        expenses: Sequence[Transaction],
        today: date,
    ) -> list[QuarterPoint]:
        """
        Build four consecutive 3-month spans ending with the current one.

        Each span starts on the first day of a month and ends on the last
        day of the month two months later, both inclusive. Labels are
        relative positions Q1 (oldest) to Q4 (current).

        Args:
            revenue: Revenue transactions
            expenses: Expense transactions
            today: Reference date

        Returns:
            Four QuarterPoints with profit margin percentage
        """
        quarters = []
        count = FinancialCalculator.QUARTER_COUNT
        for offset in range(count - 1, -1, -1):
            start = shift_months(today, -offset * 3)
            end = month_end(shift_months(start, 2))
            in_span = FinancialCalculator._in_range(start, end)

            quarter_revenue = FinancialCalculator._sum(revenue, in_span)
            quarter_expenses = FinancialCalculator._sum(expenses, in_span)
            profit = quarter_revenue - quarter_expenses
            quarters.append(QuarterPoint(
                quarter=f"Q{count - offset}",
                revenue=quarter_revenue,
                expenses=quarter_expenses,
                profit=profit,
                margin=(profit / quarter_revenue * 100) if quarter_revenue > 0 else 0.0,
            ))

        return quarters

    @staticmethod
    def daily_cash_flow(
        revenue: Sequence[Transaction],
        expenses: Sequence[Transaction],
        today: date,
    ) -> list[CashFlowPoint]:
        """
        Build the daily cash flow for the 31 days ending today (inclusive).

        Args:
            revenue: Revenue transactions (inflow)
            expenses: Expense transactions (outflow)
            today: Last day of the window

        Returns:
            31 CashFlowPoints, oldest first
        """
        points = []
        for offset in range(FinancialCalculator.CASH_FLOW_DAYS - 1, -1, -1):
            day = today - timedelta(days=offset)
            on_day = lambda t, d=day: t.date == d

            inflow = FinancialCalculator._sum(revenue, on_day)
            outflow = FinancialCalculator._sum(expenses, on_day)
            points.append(CashFlowPoint(
                date=day_label(day),
                inflow=inflow,
                outflow=outflow,
                net=inflow - outflow,
            ))

        return points

    @staticmethod
    def yearly_comparison(
        revenue: Sequence[Transaction],
        expenses: Sequence[Transaction],
        today: date,
    ) -> list[YearPoint]:
        """
        Compare the prior calendar year with the current one.

        Returns:
            Two YearPoints: previous year, then current year
        """
        years = []
        for year in (today.year - 1, today.year):
            in_year = lambda t, y=year: t.date is not None and t.date.year == y

            year_revenue = FinancialCalculator._sum(revenue, in_year)
            year_expenses = FinancialCalculator._sum(expenses, in_year)
            years.append(YearPoint(
                year=str(year),
                revenue=year_revenue,
                expenses=year_expenses,
                profit=year_revenue - year_expenses,
            ))

        return years

    @staticmethod
    def current_month_totals(
        revenue: Sequence[Transaction],
        expenses: Sequence[Transaction],
        today: date,
    ) -> FinancialTotals:
        """Totals for transactions dated in the current calendar month."""
        in_month = FinancialCalculator._in_range(month_start(today), month_end(today))
        month_revenue = FinancialCalculator._sum(revenue, in_month)
        month_expenses = FinancialCalculator._sum(expenses, in_month)
        return FinancialTotals(
            revenue=month_revenue,
            expenses=month_expenses,
            profit=month_revenue - month_expenses,
        )

    @staticmethod
    def calculate_all(
        revenue: Sequence[Transaction],
        expenses: Sequence[Transaction],
        today: date,
        months: int = 12,
    ) -> FinancialAnalytics:
        """
        Calculate every analytics series from one snapshot.

        Args:
            revenue: Revenue transactions
            expenses: Expense transactions
            today: Reference date
            months: Monthly trend window, 6 or 12

        Returns:
            FinancialAnalytics with trends, breakdowns, growth and totals
        """
        monthly = FinancialCalculator.monthly_trend(revenue, expenses, today, months)

        window_revenue = sum((point.revenue for point in monthly), 0.0)
        window_expenses = sum((point.expenses for point in monthly), 0.0)

        analytics = FinancialAnalytics(
            monthly_trends=monthly,
            expense_breakdown=FinancialCalculator.category_breakdown(expenses),
            revenue_breakdown=FinancialCalculator.category_breakdown(revenue),
            profit_analysis=FinancialCalculator.quarterly_profit(revenue, expenses, today),
            cash_flow=FinancialCalculator.daily_cash_flow(revenue, expenses, today),
            yearly_comparison=FinancialCalculator.yearly_comparison(revenue, expenses, today),
            growth=TrendAnalyzer.growth_metrics(monthly),
            window_totals=FinancialTotals(
                revenue=window_revenue,
                expenses=window_expenses,
                profit=window_revenue - window_expenses,
            ),
        )
        logger.debug(
            "Analytics computed: %s revenue rows, %s expense rows, %s-month window",
            len(revenue), len(expenses), months,
        )
        return analytics
