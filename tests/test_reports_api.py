"""
Tests for the sales, profit and overview reports.
"""
from datetime import datetime
from decimal import Decimal

import pytest

from laundrydesk.extensions import db
from laundrydesk.model import Expense, Transaction


@pytest.fixture
def ledger(app, other_branch):
    """Takings and expenses over two days in October, plus one payment from another branch."""
    payments = [
        ("cash", "20000.00", datetime(2026, 10, 1, 9), None),
        ("mobile_money", "10000.00", datetime(2026, 10, 1, 15), None),
        ("card", "5000.00", datetime(2026, 10, 2, 11), None),
        ("cash", "4000.00", datetime(2026, 10, 2, 12), None),
        ("cash", "70000.00", datetime(2026, 10, 2, 12), other_branch.id),
    ]
    for method, amount, when, branch_id in payments:
        db.session.add(Transaction(receipt_number="1-01-10 (26)", amount=Decimal(amount),
                                   payment_method=method, transaction_date=when, branch_id=branch_id))
    db.session.add_all([
        Expense(date=datetime(2026, 10, 1).date(), category="Detergent", amount=Decimal("6000.00"),
                payment_source="cash"),
        Expense(date=datetime(2026, 10, 3).date(), category="Rent", amount=Decimal("2500.00"),
                payment_source="bank"),
    ])
    db.session.commit()


class TestDailyProfit:
    def test_revenue_minus_expenses_per_day(self, client, login, ledger):
        r = client.get("/reports/profit/daily?start_date=2026-10-01&end_date=2026-10-31",
                       headers=login("manager"))
        rows = r.get_json()["data"]["items"]
        assert r.status_code == 200
        assert [row["date"] for row in rows] == ["2026-10-03", "2026-10-02", "2026-10-01"]
        oct1 = rows[2]
        assert oct1["revenue"] == 30000.0
        assert oct1["cash_revenue"] == 20000.0
        assert oct1["digital_revenue"] == 10000.0
        assert oct1["by_method"]["mobile_money"] == 10000.0
        assert oct1["expenses"] == 6000.0
        assert oct1["profit"] == 24000.0
        assert rows[0]["profit"] == -2500.0

    def test_admin_includes_every_branch(self, client, login, ledger):
        r = client.get("/reports/profit/daily?start_date=2026-10-02&end_date=2026-10-02",
                       headers=login("admin"))
        assert r.get_json()["data"]["items"][0]["revenue"] == 79000.0

    def test_dates_are_required(self, client, login, users):
        r = client.get("/reports/profit/daily?start_date=2026-10-01", headers=login("manager"))
        assert r.status_code == 422


class TestFinancialReport:
    def test_monthly_totals(self, client, login, ledger):
        r = client.get("/reports/financial?start_date=2026-09-01&end_date=2026-10-31&period=month",
                       headers=login("manager"))
        data = r.get_json()["data"]
        assert data["period"] == "month"
        assert len(data["data"]) == 1
        month = data["data"][0]
        assert month["period"] == "2026-10"
        assert month["days_count"] == 3
        assert month["revenue"] == 39000.0
        assert month["bank_expenses"] == 2500.0
        assert data["totals"] == {"total_revenue": 39000.0, "total_expenses": 8500.0, "total_profit": 30500.0}

    def test_weeks_start_on_monday(self, client, login, ledger):
        r = client.get("/reports/financial?start_date=2026-10-01&end_date=2026-10-31&period=week",
                       headers=login("manager"))
        assert [g["period"] for g in r.get_json()["data"]["data"]] == ["2026-09-28"]

    def test_unknown_period(self, client, login, ledger):
        r = client.get("/reports/financial?start_date=2026-10-01&end_date=2026-10-31&period=year",
                       headers=login("manager"))
        assert r.status_code == 422


class TestSalesReport:
    def test_orders_per_day(self, client, login, make_receipt):
        make_receipt([(3000, 3000, "collected"), (2000, 0, "pending"), (1500, 0, "ready")],
                     order_date=datetime(2026, 10, 5, 10))
        r = client.get("/reports/sales?start_date=2026-10-01&end_date=2026-10-31", headers=login("manager"))
        rows = r.get_json()["data"]["items"]
        assert rows == [{
            "date": "2026-10-05", "total_orders": 3, "total_revenue": 6500.0,
            "collected_revenue": 3000.0, "pending_orders": 1, "ready_orders": 1,
        }]


class TestOverview:
    def test_day_overview(self, client, login, ledger, make_receipt):
        make_receipt([(30000, 30000, "collected")], order_date=datetime(2026, 10, 1, 8))
        r = client.get("/reports/overview?date=2026-10-01", headers=login("manager"))
        data = r.get_json()["data"]
        assert data["total_income"] == 30000.0
        assert data["cash_income"] == 20000.0
        assert data["digital_income"] == 10000.0
        assert data["total_expenses"] == 6000.0
        assert data["net_income"] == 24000.0
        assert data["total_transactions"] == 1

    @pytest.mark.parametrize("role", ["cashier", "processor"])
    def test_reports_need_permission(self, client, login, users, role):
        assert client.get("/reports/overview", headers=login(role)).status_code == 403
