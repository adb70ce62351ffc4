"""
API tests: section gating, views, record writes, reports and user management.
"""

import pytest

ACCESS_DENIED_BODY = {"detail": {"error_code": "access_denied", "message": "Access Denied"}}


@pytest.fixture
def admin_client(make_client, admin_user, store):
    return make_client(admin_user, store)


@pytest.fixture
def staff_client(make_client, staff_user, store):
    return make_client(staff_user, store)


@pytest.fixture
def vet_client(make_client, vet_user, store):
    return make_client(vet_user, store)


class TestAuthEndpoints:

    def test_me_lists_sections(self, staff_client):
        response = staff_client.get("/auth/me")

        assert response.status_code == 200
        body = response.json()
        assert body["role"] == "staff"
        assert body["allowed_sections"] == ["sheep", "health", "expenses"]
        assert body["default_section"] == "sheep"

    def test_navigate_denied(self, vet_client):
        response = vet_client.post("/auth/navigate", json={"section": "finance"})

        assert response.status_code == 200
        assert response.json() == {
            "section": "health",
            "allowed": False,
            "notice": "Access denied: You do not have permission to view this section.",
        }

    def test_navigate_allowed(self, admin_client):
        response = admin_client.post("/auth/navigate", json={"section": "users"})
        assert response.json()["allowed"] is True

    def test_missing_token(self, store):
        from fastapi.testclient import TestClient

        from farm_dashboard.main import create_application
        from farm_dashboard.store.supabase_store import get_store

        app = create_application()
        app.dependency_overrides[get_store] = lambda: store
        response = TestClient(app).get("/auth/me")

        assert response.status_code == 401
        assert response.json()["detail"]["error_code"] == "not_authenticated"
        assert response.headers["www-authenticate"] == "Bearer"


class TestSectionGating:

    @pytest.mark.parametrize("path", [
        "/api/insights/overview",
        "/api/insights/analytics",
        "/api/insights/finance",
        "/api/insights/ledger",
        "/api/reports/overview",
        "/api/admin/users",
        "/api/sheep",
    ])
    def test_veterinarian_denied(self, vet_client, path):
        response = vet_client.get(path)

        assert response.status_code == 403
        assert response.json() == ACCESS_DENIED_BODY

    def test_veterinarian_sees_health(self, vet_client):
        assert vet_client.get("/api/insights/health").status_code == 200

    @pytest.mark.parametrize("path", [
        "/api/insights/overview",
        "/api/insights/finance",
        "/api/transactions",
        "/api/reports/sheep/export",
    ])
    def test_staff_denied(self, staff_client, path):
        assert staff_client.get(path).status_code == 403

    def test_staff_reaches_ledger_through_expenses(self, staff_client):
        assert staff_client.get("/api/insights/ledger").status_code == 200

    def test_unknown_role_only_sees_sheep(self, make_client, store):
        from farm_dashboard.models.user import UserProfile

        client = make_client(UserProfile(id="g1", role="guest"), store)

        assert client.get("/api/sheep").status_code == 200
        assert client.get("/api/insights/health").status_code == 403


class TestInsightViews:

    def test_overview(self, admin_client):
        body = admin_client.get("/api/insights/overview").json()

        assert body["total_sheep"] == 4
        assert body["monthly_revenue"] == 1200
        assert body["monthly_expenses"] == 500
        assert body["monthly_profit"] == 700
        assert body["outstanding_debt"] == 600

    def test_health_for_staff_is_scoped(self, staff_client):
        body = staff_client.get("/api/insights/health").json()

        assert [a["animal"]["ear_tag"] for a in body["animals"]] == ["C-003", "A-001"]
        assert body["animals"][0]["band"] == "good"
        assert body["summary"]["total"] == 2

    def test_analytics(self, admin_client):
        body = admin_client.get("/api/insights/analytics", params={"months": 6}).json()

        assert len(body["monthly_trends"]) == 6
        assert body["monthly_trends"][-1] == {"month": "Mar 24", "revenue": 1200, "expenses": 500, "profit": 700}
        assert [q["quarter"] for q in body["profit_analysis"]] == ["Q1", "Q2", "Q3", "Q4"]
        assert len(body["cash_flow"]) == 31

    def test_analytics_rejects_other_windows(self, admin_client):
        response = admin_client.get("/api/insights/analytics", params={"months": 3})

        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "validation_error"

    def test_finance_summary(self, admin_client):
        body = admin_client.get("/api/insights/finance", params={"date_range": "all_time"}).json()

        assert body["totals"] == {"revenue": 1500, "expenses": 700, "profit": 800}
        assert body["expenses_by_category"][0] == {"name": "feed", "value": 500}
        assert len(body["transactions"]) == 4

    def test_ledger(self, admin_client):
        body = admin_client.get("/api/insights/ledger", params={"filter": "pending"}).json()

        assert [e["record"]["id"] for e in body["entries"]] == ["c1"]
        assert body["totals"]["net_position"] == 200
        assert body["currency"] == "Ksh"


class TestSheepRecords:

    def test_list_sort_and_search(self, admin_client):
        body = admin_client.get("/api/sheep", params={"sort_by": "weight"}).json()
        assert [s["ear_tag"] for s in body["sheep"]] == ["D-004", "A-001", "B-002", "C-003"]

        body = admin_client.get("/api/sheep", params={"search": "dorper"}).json()
        assert body["total"] == 2

    def test_staff_only_lists_own_sheep(self, staff_client):
        body = staff_client.get("/api/sheep").json()
        assert [s["ear_tag"] for s in body["sheep"]] == ["A-001", "C-003"]

    def test_create_sheep_stamps_creator(self, staff_client, fake_client):
        response = staff_client.post("/api/sheep", json={
            "ear_tag": "E-005",
            "breed": "Dorper",
            "weight": "41.5",
            "birth_date": "2023-09-01",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["weight"] == 41.5
        assert body["health_status"] == "healthy"
        assert fake_client.tables["sheep"][-1]["created_by"] == "staff-1"

    def test_update_sheep(self, admin_client, fake_client):
        response = admin_client.patch("/api/sheep/s2", json={"health_status": "recovering"})

        assert response.status_code == 200
        assert response.json()["health_status"] == "recovering"
        assert fake_client.tables["sheep"][1]["vaccination_status"] == "overdue"

    def test_update_without_fields(self, admin_client):
        assert admin_client.patch("/api/sheep/s2", json={}).status_code == 400

    def test_delete_missing_sheep(self, admin_client):
        response = admin_client.delete("/api/sheep/nope")

        assert response.status_code == 404
        assert response.json()["error_code"] == "record_not_found"

    def test_staff_edits_own_sheep(self, staff_client, fake_client):
        response = staff_client.patch("/api/sheep/s1", json={"weight": 58})

        assert response.status_code == 200
        assert fake_client.tables["sheep"][0]["weight"] == 58

    def test_staff_cannot_edit_other_sheep(self, staff_client, fake_client):
        response = staff_client.patch("/api/sheep/s2", json={"health_status": "healthy"})

        assert response.status_code == 404
        assert response.json()["detail"]["error_code"] == "record_not_found"
        assert fake_client.tables["sheep"][1]["health_status"] == "sick"

    def test_staff_cannot_delete_sheep(self, staff_client, fake_client):
        for sheep_id in ("s1", "s4"):
            response = staff_client.delete(f"/api/sheep/{sheep_id}")
            assert response.status_code == 403
            assert response.json()["detail"]["message"] == "Access Denied"

        assert [r["id"] for r in fake_client.tables["sheep"]] == ["s1", "s2", "s3", "s4"]

    def test_admin_deletes_sheep(self, admin_client, fake_client):
        assert admin_client.delete("/api/sheep/s4").status_code == 204
        assert [r["id"] for r in fake_client.tables["sheep"]] == ["s1", "s2", "s3"]

    def test_null_value_leaves_column_unchanged(self, admin_client, fake_client):
        assert admin_client.patch("/api/sheep/s1", json={"estimated_value": None}).status_code == 400

        response = admin_client.patch("/api/sheep/s1", json={"estimated_value": None, "notes": None})
        assert response.status_code == 200
        assert fake_client.tables["sheep"][0]["estimated_value"] == 15000
        assert fake_client.tables["sheep"][0]["notes"] is None

    def test_log_health_record_defaults_to_today(self, vet_client, fake_client):
        response = vet_client.post("/api/health-records", json={
            "sheep_id": "s1", "record_type": "illness", "description": "Limping",
        })

        assert response.status_code == 201
        assert response.json()["date"] == "2024-03-25"
        assert fake_client.tables["health_records"][-1]["created_by"] == "vet-1"


class TestFinanceRecords:

    def test_revenue_is_stored_as_sale(self, admin_client, fake_client):
        response = admin_client.post("/api/transactions", json={"kind": "revenue", "amount": "250"})

        assert response.status_code == 201
        body = response.json()
        assert body["kind"] == "revenue"
        assert body["origin"] == "sales_records"
        assert body["category"] == "sale"
        assert body["description"] == "Revenue"
        assert body["date"] == "2024-03-25"

        stored = fake_client.tables["sales_records"][-1]
        assert stored["transaction_type"] == "sale"
        assert stored["buyer_seller"] == "Revenue"
        assert stored["amount"] == 250

    def test_expense_transaction(self, admin_client, fake_client):
        response = admin_client.post("/api/transactions", json={
            "kind": "expense", "category": "fuel", "amount": 60, "date": "2024-03-10",
        })

        assert response.status_code == 201
        assert fake_client.tables["expenses"][-1]["category"] == "fuel"

    def test_list_transactions_by_kind(self, admin_client):
        body = admin_client.get("/api/transactions", params={"date_range": "all_time", "kind": "expense"}).json()

        assert body["total"] == 2
        assert {t["origin"] for t in body["transactions"]} == {"expenses"}

    def test_delete_uses_origin_table(self, admin_client, fake_client):
        # sales and expenses both have a row with id 1
        response = admin_client.delete("/api/transactions/expenses/1")

        assert response.status_code == 204
        assert [r["id"] for r in fake_client.tables["expenses"]] == ["3"]
        assert [r["id"] for r in fake_client.tables["sales_records"]] == ["1", "2"]

    def test_staff_records_expense(self, staff_client):
        response = staff_client.post("/api/expenses", json={"category": "feed", "amount": "1,200"})

        assert response.status_code == 201
        assert response.json()["amount"] == 1200

    def test_staff_cannot_record_revenue(self, staff_client):
        response = staff_client.post("/api/transactions", json={"kind": "revenue", "amount": 10})
        assert response.status_code == 403


class TestLedgerRecords:

    def test_create_and_update(self, admin_client):
        created = admin_client.post("/api/debts-credits", json={
            "type": "credit", "amount": 900, "counterparty": "Co-op", "due_date": "2024-04-15",
        })
        assert created.status_code == 201
        record_id = created.json()["id"]

        updated = admin_client.patch(f"/api/debts-credits/{record_id}", json={"paid_amount": 900, "status": "paid"})
        assert updated.status_code == 200
        assert updated.json()["status"] == "paid"

        ledger = admin_client.get("/api/insights/ledger").json()
        assert ledger["totals"]["total_credit"] == 800

    def test_null_amount_is_not_written(self, admin_client, fake_client):
        response = admin_client.patch("/api/debts-credits/d1", json={"amount": None, "paid_amount": "700"})

        assert response.status_code == 200
        assert response.json()["amount"] == 1000
        assert fake_client.tables["debts_credits"][0]["amount"] == 1000
        assert fake_client.tables["debts_credits"][0]["paid_amount"] == 700

    def test_link_expense_as_debt(self, admin_client):
        response = admin_client.post("/api/debts-credits/link", json={
            "origin": "expenses", "transaction_id": "1", "type": "debt",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["amount"] == 500
        assert body["paid_amount"] == 0
        assert body["status"] == "pending"
        assert body["description"] == "Linked to expense: Hay bales"
        assert body["counterparty"] == "Hay bales"
        assert body["reference"] == "Finance Record: 1"

    def test_link_missing_transaction(self, admin_client):
        response = admin_client.post("/api/debts-credits/link", json={
            "origin": "sales_records", "transaction_id": "99", "type": "credit",
        })

        assert response.status_code == 404
        assert response.json()["detail"]["error_code"] == "record_not_found"

    def test_store_write_failure(self, make_client, admin_user, failing_store):
        client = make_client(admin_user, failing_store)
        response = client.post("/api/debts-credits", json={"type": "debt", "amount": 10})

        assert response.status_code == 502
        assert response.json()["error_code"] == "store_write_failed"


class TestReports:

    def test_preview(self, admin_client):
        response = admin_client.get("/api/reports/financial", params={"date_range": "all_time"})

        assert response.status_code == 200
        body = response.json()
        assert body["kind"] == "financial"
        assert body["currency"] == "Ksh"
        assert len(body["rows"]) == 4
        assert body["summary"]["financial"]["expenses_by_category"] == {"feed": 500, "veterinary": 200}
        assert body["summary"]["flock"]["breeds"]["Unknown"] == 1

    def test_export_csv(self, admin_client):
        response = admin_client.get("/api/reports/overview/export", params={"date_range": "current_month"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.headers["content-disposition"] == (
            'attachment; filename="overview_report_current_month.csv"'
        )
        lines = response.text.splitlines()
        assert len(lines) == 2
        assert lines[0].startswith('"report_type"')

    def test_overview_export_when_store_is_down(self, make_client, admin_user, failing_store):
        client = make_client(admin_user, failing_store)
        response = client.get("/api/reports/overview/export", params={"date_range": "all_time"})

        assert response.status_code == 200
        lines = response.text.splitlines()
        assert len(lines) == 2
        assert '"Flock Overview","0","0"' in lines[1]

    def test_export_with_no_rows(self, admin_client):
        response = admin_client.get("/api/reports/health/export", params={"date_range": "last_year"})

        assert response.status_code == 204
        assert response.content == b""

    def test_unknown_report_kind(self, admin_client):
        assert admin_client.get("/api/reports/payroll").status_code == 422


class TestUserManagement:

    def test_list_users_with_role_stats(self, admin_client):
        body = admin_client.get("/api/admin/users").json()

        assert body["total"] == 3
        assert body["role_stats"] == {"admin": 1, "staff": 1, "veterinarian": 1, "other": 0}

    def test_filter_by_legacy_role(self, admin_client):
        body = admin_client.get("/api/admin/users", params={"role": "farmer"}).json()
        assert [u["id"] for u in body["users"]] == ["staff-1"]

    def test_unknown_role_filter(self, admin_client):
        assert admin_client.get("/api/admin/users", params={"role": "owner"}).status_code == 400

    def test_role_change_is_normalized(self, admin_client, fake_client):
        response = admin_client.patch("/api/admin/users/staff-1", json={"role": "vet"})

        assert response.status_code == 200
        assert response.json()["role"] == "veterinarian"
        assert fake_client.tables["users"][1]["role"] == "veterinarian"

    def test_admin_cannot_demote_self(self, admin_client):
        response = admin_client.patch("/api/admin/users/admin-1", json={"role": "staff"})

        assert response.status_code == 400
        assert response.json()["detail"]["message"] == "Cannot demote yourself"

    def test_admin_cannot_delete_self(self, admin_client):
        assert admin_client.delete("/api/admin/users/admin-1").status_code == 400

    def test_delete_user(self, admin_client, fake_client):
        assert admin_client.delete("/api/admin/users/vet-1").status_code == 204
        assert len(fake_client.tables["users"]) == 2


class TestHealthEndpoint:

    def test_health_check(self, admin_client):
        body = admin_client.get("/health").json()
        assert body["status"] == "healthy"
