"""
Tests for report aggregation, report rows, date ranges and CSV output.
"""

import csv
import io
from datetime import date, datetime

import pytest

from farm_dashboard.models.animal import Animal
from farm_dashboard.models.health import HealthAlert
from farm_dashboard.models.ledger import DebtCreditRecord
from farm_dashboard.models.transaction import Transaction
from farm_dashboard.reports.assembler import (
    DateRange,
    ReportKind,
    build_report,
    build_report_aggregates,
    date_range_bounds,
    filter_by_range,
    flock_statistics,
)
from farm_dashboard.reports.csv_export import format_value, rows_to_csv
from tests.conftest import seed_tables

TODAY = date(2024, 3, 25)
GENERATED_AT = datetime(2024, 3, 25, 10, 30)


@pytest.fixture
def snapshot():
    tables = seed_tables()
    sheep = {row["id"]: row for row in tables["sheep"]}
    alerts = []
    for row in tables["health_records"]:
        if row["record_type"] in ("illness", "checkup"):
            animal = sheep[row["sheep_id"]]
            alerts.append(HealthAlert.from_health_record({
                **row, "sheep": {"ear_tag": animal["ear_tag"], "breed": animal["breed"]},
            }))

    return {
        "animals": [Animal.model_validate(row) for row in tables["sheep"]],
        "transactions": (
            [Transaction.from_sale(row) for row in tables["sales_records"]]
            + [Transaction.from_expense(row) for row in tables["expenses"]]
        ),
        "ledger": [DebtCreditRecord.model_validate(row) for row in tables["debts_credits"]],
        "alerts": alerts,
    }


def aggregate(snapshot, date_range=DateRange.CURRENT_MONTH):
    return build_report_aggregates(
        date_range=date_range, today=TODAY, generated_at=GENERATED_AT, **snapshot,
    )


class TestDateRanges:

    @pytest.mark.parametrize("date_range,bounds", [
        (DateRange.CURRENT_MONTH, (date(2024, 3, 1), date(2024, 3, 26))),
        (DateRange.LAST_MONTH, (date(2024, 2, 1), date(2024, 3, 1))),
        (DateRange.CURRENT_YEAR, (date(2024, 1, 1), date(2024, 3, 26))),
        (DateRange.LAST_YEAR, (date(2023, 1, 1), date(2024, 1, 1))),
        (DateRange.ALL_TIME, (None, None)),
    ])
    def test_bounds(self, date_range, bounds):
        assert date_range_bounds(date_range, TODAY) == bounds

    def test_last_month_in_january(self):
        assert date_range_bounds(DateRange.LAST_MONTH, date(2024, 1, 10)) == (date(2023, 12, 1), date(2024, 1, 1))

    def test_undated_items_only_survive_all_time(self):
        items = [("a", date(2024, 3, 2)), ("b", None), ("c", date(2024, 2, 29))]
        key = lambda item: item[1]

        assert [i[0] for i in filter_by_range(items, DateRange.CURRENT_MONTH, TODAY, key)] == ["a"]
        assert [i[0] for i in filter_by_range(items, DateRange.LAST_MONTH, TODAY, key)] == ["c"]
        assert [i[0] for i in filter_by_range(items, DateRange.ALL_TIME, TODAY, key)] == ["a", "b", "c"]

    def test_future_dates_are_outside_current_periods(self):
        items = [date(2024, 3, 26)]
        assert filter_by_range(items, DateRange.CURRENT_MONTH, TODAY, lambda d: d) == []


class TestFlockStatistics:

    def test_breeds_genders_and_averages(self, snapshot):
        stats = flock_statistics(snapshot["animals"], TODAY)

        assert stats.total == 4
        assert (stats.healthy, stats.sick, stats.pregnant) == (1, 1, 1)
        assert stats.breeds == {"Dorper": 2, "Merino": 1, "Unknown": 1}
        assert stats.genders == {"female": 2, "male": 2}
        # missing weight counts as 0: (55 + 25 + 0 + 120) / 4
        assert stats.average_weight == 50.0
        # ages 24, 74 and 9 months; the animal without a birth date is left out
        assert stats.average_age_months == pytest.approx(35.7, abs=0.05)
        assert stats.total_value == 35000

    def test_empty_flock(self):
        stats = flock_statistics([], TODAY)
        assert (stats.total, stats.average_weight, stats.average_age_months) == (0, 0.0, 0.0)


class TestReportAggregates:

    def test_current_month(self, snapshot):
        aggregates = aggregate(snapshot)

        assert [t.amount for t in aggregates.revenue] == [1200]
        assert [t.amount for t in aggregates.expenses] == [500]
        assert aggregates.financial.totals.profit == 700
        assert aggregates.financial.profit_margin == pytest.approx(58.333, abs=0.01)
        assert [a.id for a in aggregates.alerts] == ["h1"]
        assert aggregates.health.alert_count == 1

    def test_ledger_and_flock_are_not_range_filtered(self, snapshot):
        aggregates = aggregate(snapshot, DateRange.LAST_YEAR)

        assert aggregates.revenue == []
        assert len(aggregates.ledger) == 3
        assert aggregates.ledger_totals.total_debt == 600
        assert aggregates.flock.total == 4

    def test_all_time(self, snapshot):
        aggregates = aggregate(snapshot, DateRange.ALL_TIME)

        assert aggregates.financial.totals.revenue == 1500
        assert aggregates.financial.totals.expenses == 700
        assert [c.name for c in aggregates.financial.expenses_by_category] == ["feed", "veterinary"]
        assert aggregates.health.alert_count == 2


class TestBuildReport:

    def test_overview_is_a_single_row(self, snapshot):
        rows = build_report(ReportKind.OVERVIEW, aggregate(snapshot))

        assert len(rows) == 1
        row = rows[0]
        assert row["report_type"] == "Flock Overview"
        assert row["total_sheep"] == 4
        assert row["healthy_sheep"] == 1
        assert row["total_revenue"] == 1200
        assert row["total_expenses"] == 500
        assert row["net_profit"] == 700
        assert row["health_score"] == 25.0
        assert row["outstanding_debt"] == 600
        assert row["outstanding_credit"] == 800
        assert row["generated_date"] == "2024-03-25T10:30:00"
        assert row["date_range"] == "Current Month"

    def test_sheep_rows_carry_scores(self, snapshot):
        rows = build_report(ReportKind.SHEEP, aggregate(snapshot))
        by_tag = {row["ear_tag"]: row for row in rows}

        assert by_tag["A-001"]["health_score"] == 100
        assert by_tag["A-001"]["risk_factors"] == ""
        assert by_tag["B-002"]["health_score"] == 10
        assert by_tag["B-002"]["risk_factors"] == (
            "Overdue vaccinations; Currently ill; Advanced age; Underweight"
        )
        assert by_tag["C-003"]["health_score"] == 85
        assert by_tag["D-004"]["health_score"] == 70
        assert by_tag["B-002"]["estimated_value"] == 8000
        assert by_tag["A-001"]["birth_date"] == "2022-03-25"

    def test_financial_rows_revenue_first(self, snapshot):
        rows = build_report(ReportKind.FINANCIAL, aggregate(snapshot, DateRange.ALL_TIME))

        assert [(r["type"], r["amount"]) for r in rows] == [
            ("Revenue", 1200), ("Revenue", 300), ("Expense", 500), ("Expense", 200),
        ]
        assert rows[0]["category"] == "sale"
        assert rows[0]["description"] == "Market Co"
        assert rows[0]["source"] == "sales_records"
        # a sale without a transaction type is still labelled
        assert rows[1]["category"] == "Sale"
        assert rows[2]["category"] == "feed"
        assert rows[2]["source"] == "expenses"

    def test_health_rows(self, snapshot):
        rows = build_report(ReportKind.HEALTH, aggregate(snapshot, DateRange.ALL_TIME))
        by_id = {row["id"]: row for row in rows}

        assert by_id["h1"]["severity"] == "high"
        assert by_id["h1"]["ear_tag"] == "B-002"
        assert by_id["h2"]["severity"] == "medium"
        assert by_id["h2"]["alert_type"] == "checkup"

    def test_debt_rows(self, snapshot):
        rows = build_report(ReportKind.DEBTS, aggregate(snapshot))
        by_id = {row["id"]: row for row in rows}

        assert by_id["d1"]["outstanding"] == 600
        assert by_id["d1"]["overdue"] is True
        assert by_id["d2"]["outstanding"] == 0
        assert by_id["d2"]["overdue"] is False
        assert by_id["c1"]["type"] == "credit"

    def test_empty_range_gives_no_rows(self, snapshot):
        assert build_report(ReportKind.HEALTH, aggregate(snapshot, DateRange.LAST_YEAR)) == []


class TestCsvExport:

    def test_overview_csv_has_header_and_one_line(self, snapshot):
        text = rows_to_csv(build_report(ReportKind.OVERVIEW, aggregate(snapshot)))
        lines = text.splitlines()

        assert len(lines) == 2
        assert lines[0].startswith('"report_type","total_sheep"')
        assert '"Flock Overview","4"' in lines[1]

    def test_overview_csv_with_zero_aggregates(self):
        aggregates = build_report_aggregates([], [], [], [], DateRange.ALL_TIME, TODAY, generated_at=GENERATED_AT)
        text = rows_to_csv(build_report(ReportKind.OVERVIEW, aggregates))
        lines = text.splitlines()

        assert len(lines) == 2
        header, values = list(csv.reader(io.StringIO(text)))
        row = dict(zip(header, values))
        for column in ("total_sheep", "total_revenue", "net_profit", "outstanding_debt", "net_position"):
            assert row[column] == "0"
        assert row["date_range"] == "All Time"

    def test_quoting_round_trips_through_csv_reader(self):
        rows = [{"name": 'Hay, "premium"', "amount": 12.5}, {"name": "Line\nbreak", "amount": 3.0}]
        parsed = list(csv.reader(io.StringIO(rows_to_csv(rows))))

        assert parsed == [["name", "amount"], ['Hay, "premium"', "12.5"], ["Line\nbreak", "3"]]

    def test_header_comes_from_first_row(self):
        rows = [{"a": 1, "b": 2}, {"a": 3, "c": 4}]
        assert rows_to_csv(rows) == '"a","b"\n"1","2"\n"3",""\n'

    def test_empty_rows(self):
        assert rows_to_csv([]) == ""

    @pytest.mark.parametrize("value,expected", [
        (None, ""),
        (True, "true"),
        (False, "false"),
        (0.0, "0"),
        (1500.0, "1500"),
        (12.75, "12.75"),
        (7, "7"),
        ("text", "text"),
    ])
    def test_format_value(self, value, expected):
        assert format_value(value) == expected
