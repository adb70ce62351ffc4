"""
Trend analysis for month-over-month KPI growth.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from farm_dashboard.insights.utils import safe_list_get

logger = logging.getLogger(__name__)


@dataclass
class GrowthMetrics:
    """Month-over-month growth percentages."""
    revenue_growth: float = 0.0
    expense_growth: float = 0.0
    profit_growth: float = 0.0


class TrendAnalyzer:
    """
    Analyzes the tail of a monthly trend series.

    Compares the last two points for revenue, expenses and profit.
    """

    @staticmethod
    def calculate_percentage_change(current: float, previous: float) -> float:
        """
        Calculate percentage change between two values.

        Args:
            current: Current period value
            previous: Previous period value

        Returns:
            Percentage change relative to |previous|, or 0 if previous is zero
        """
        if previous == 0:
            return 0.0

        change = ((current - previous) / abs(previous)) * 100
        return float(change)

    @staticmethod
    def growth_metrics(monthly_trend: Sequence) -> GrowthMetrics:
        """
        Calculate revenue, expense and profit growth from the last two months.

        Args:
            monthly_trend: MonthlyPoint series ordered oldest to newest

        Returns:
            GrowthMetrics (all zero when fewer than two points exist)
        """
        current = safe_list_get(list(monthly_trend), -1)
        previous = safe_list_get(list(monthly_trend), -2)

        if current is None or previous is None:
            logger.debug("Not enough monthly points for growth metrics")
            return GrowthMetrics()

        return GrowthMetrics(
            revenue_growth=TrendAnalyzer.calculate_percentage_change(current.revenue, previous.revenue),
            expense_growth=TrendAnalyzer.calculate_percentage_change(current.expenses, previous.expenses),
            profit_growth=TrendAnalyzer.calculate_percentage_change(current.profit, previous.profit),
        )
