"""
HTTP tests for the costs API (FastAPI TestClient).

Covers request/response shapes, header-based identity, error mapping and
the warning returned by edits that reopen a closed month.
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from costs_api import create_app
from costs_config import AppConfig


@pytest.fixture
def client(session_factory, deterministic_clock):
    app = create_app(config=AppConfig(), session_factory=session_factory, clock=deterministic_clock)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_headers(company_id, test_actor_id):
    return {
        "X-User-Id": str(test_actor_id),
        "X-Company-Id": str(company_id),
        "X-User-Role": "ADMIN",
    }


class TestMonthlyClosingEndpoints:
    def test_open_month_shape(self, client, admin_headers):
        resp = client.get("/costs/monthly-closing/2024/3", headers=admin_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "OPEN"
        assert body["distributions"] == []
        assert body["id"] is None

    def test_preview(self, client, admin_headers, standard_month):
        resp = client.get("/costs/monthly-closing/2024/3/preview", headers=admin_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["can_close"] is True
        assert body["errors"] == []
        assert Decimal(body["total_salaries"]) == Decimal("5500")
        assert [d["project_name"] for d in body["distributions"]] == ["Alpha", "Beta"]
        assert len(body["project_internal_costs"]) == 2

    def test_close_then_get(self, client, admin_headers, standard_month):
        resp = client.post("/costs/monthly-closing/2024/3/close", headers=admin_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["closing"]["status"] == "CLOSED"
        assert Decimal(body["closing"]["total_distributed"]) == Decimal("7250")

        resp = client.get("/costs/monthly-closing/2024/3", headers=admin_headers)
        assert resp.json()["status"] == "CLOSED"
        assert len(resp.json()["distributions"]) == 2

    def test_close_validation_failure_body(self, client, admin_headers, builder):
        builder.user("Ana")
        builder.project("Alpha")

        resp = client.post("/costs/monthly-closing/2024/3/close", headers=admin_headers)

        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == "CLOSING_VALIDATION_FAILED"
        assert body["message"]
        assert {e["type"] for e in body["errors"]} == {"MISSING_SALARY", "MISSING_REVENUE"}

    def test_close_twice(self, client, admin_headers, standard_month):
        client.post("/costs/monthly-closing/2024/3/close", headers=admin_headers)
        resp = client.post("/costs/monthly-closing/2024/3/close", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["code"] == "MONTH_ALREADY_CLOSED"

    def test_reopen(self, client, admin_headers, standard_month):
        client.post("/costs/monthly-closing/2024/3/close", headers=admin_headers)
        resp = client.post(
            "/costs/monthly-closing/2024/3/reopen",
            headers=admin_headers,
            json={"reason": "Late invoice"},
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "REOPENED"
        assert resp.json()["reopen_reason"] == "Late invoice"

    def test_reopen_twice(self, client, admin_headers, standard_month):
        client.post("/costs/monthly-closing/2024/3/close", headers=admin_headers)
        url = "/costs/monthly-closing/2024/3/reopen"
        client.post(url, headers=admin_headers, json={"reason": "first"})
        resp = client.post(url, headers=admin_headers, json={"reason": "second"})
        assert resp.status_code == 200
        assert resp.json()["reopen_reason"] == "second"

    def test_reopen_unknown_month(self, client, admin_headers):
        resp = client.post(
            "/costs/monthly-closing/2024/3/reopen", headers=admin_headers, json={"reason": "x"}
        )
        assert resp.status_code == 404
        assert resp.json()["code"] == "CLOSING_NOT_FOUND"

    def test_reopen_empty_reason(self, client, admin_headers):
        resp = client.post(
            "/costs/monthly-closing/2024/3/reopen", headers=admin_headers, json={"reason": ""}
        )
        assert resp.status_code == 422

    def test_invalid_period(self, client, admin_headers):
        resp = client.get("/costs/monthly-closing/2024/13", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_PERIOD"

    def test_missing_identity_headers(self, client):
        resp = client.get("/costs/monthly-closing/2024/3")
        assert resp.status_code == 422

    def test_request_id_echoed(self, client, admin_headers):
        resp = client.get(
            "/costs/monthly-closing/2024/3",
            headers={**admin_headers, "X-Request-ID": "req-42"},
        )
        assert resp.headers["X-Request-ID"] == "req-42"


class TestSideChannels:
    def test_salary_edit_on_closed_month_returns_warning(self, client, admin_headers, standard_month):
        client.post("/costs/monthly-closing/2024/3/close", headers=admin_headers)

        resp = client.post(
            "/costs/monthly-salaries",
            headers=admin_headers,
            json={
                "user_id": str(standard_month["ana"].id),
                "year": 2024,
                "month": 3,
                "extras": "120.50",
            },
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["warning"]
        assert Decimal(body["salary"]["extras"]) == Decimal("120.50")
        status = client.get("/costs/monthly-closing/2024/3", headers=admin_headers).json()["status"]
        assert status == "REOPENED"

    def test_salary_listing(self, client, admin_headers, standard_month):
        resp = client.get("/costs/monthly-salaries?year=2024&month=3", headers=admin_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "OPEN"
        assert [i["user_name"] for i in body["items"]] == ["Ana", "Bruno"]
        assert Decimal(body["total"]) == Decimal("5500")

    def test_delete_unknown_salary(self, client, admin_headers):
        resp = client.delete(f"/costs/monthly-salaries/{uuid4()}", headers=admin_headers)
        assert resp.status_code == 404
        assert resp.json()["code"] == "MONTHLY_SALARY_NOT_FOUND"

    def test_overhead_lifecycle(self, client, admin_headers):
        resp = client.post(
            "/costs/monthly-overhead",
            headers=admin_headers,
            json={"year": 2024, "month": 3, "amount": "800", "cost_type": "STRUCTURE_COSTS"},
        )
        assert resp.status_code == 201
        overhead_id = resp.json()["overhead"]["id"]
        assert resp.json()["warning"] is None

        resp = client.patch(
            f"/costs/monthly-overhead/{overhead_id}",
            headers=admin_headers,
            json={"amount": "850"},
        )
        assert Decimal(resp.json()["overhead"]["amount"]) == Decimal("850")

        listing = client.get("/costs/monthly-overhead?year=2024&month=3", headers=admin_headers).json()
        assert Decimal(listing["total"]) == Decimal("850")

        resp = client.delete(f"/costs/monthly-overhead/{overhead_id}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["overhead"] is None

    def test_negative_overhead_is_rejected(self, client, admin_headers):
        resp = client.post(
            "/costs/monthly-overhead",
            headers=admin_headers,
            json={"year": 2024, "month": 3, "amount": "-1", "cost_type": "OTHER"},
        )
        assert resp.status_code == 422


class TestProjectEndpoints:
    def test_revenue_and_monthly_view(self, client, admin_headers, builder):
        alpha = builder.project("Alpha")

        resp = client.put(
            f"/costs/projects/{alpha.id}/revenue/2024/3",
            headers=admin_headers,
            json={"estimated_revenue": "1000", "actual_revenue": "900"},
        )
        assert resp.status_code == 200

        body = client.get(f"/costs/projects/{alpha.id}/monthly/2024/3", headers=admin_headers).json()
        assert Decimal(body["revenue"]["actual"]) == Decimal("900")
        assert Decimal(body["net_result"]["estimated"]) == Decimal("1000")
        assert body["external_costs"]["actual"]["items"] == []

    def test_worker_from_other_team_is_forbidden(self, client, builder, company_id):
        alpha = builder.project("Alpha", team_id=uuid4())
        headers = {
            "X-User-Id": str(uuid4()),
            "X-Company-Id": str(company_id),
            "X-User-Role": "WORKER",
            "X-Team-Id": str(uuid4()),
        }
        resp = client.get(f"/costs/projects/{alpha.id}/monthly/2024/3", headers=headers)
        assert resp.status_code == 403
        assert resp.json()["code"] == "PROJECT_ACCESS_DENIED"

    def test_only_team_leaders_see_team_projects(self, client, builder, company_id):
        team_id = uuid4()
        alpha = builder.project("Alpha", team_id=team_id)
        headers = {
            "X-User-Id": str(uuid4()),
            "X-Company-Id": str(company_id),
            "X-User-Role": "WORKER",
            "X-Team-Id": str(team_id),
        }
        url = f"/costs/projects/{alpha.id}/monthly/2024/3"

        assert client.get(url, headers=headers).status_code == 403
        headers["X-User-Role"] = "TEAM_LEADER"
        assert client.get(url, headers=headers).status_code == 200

    def test_unknown_project(self, client, admin_headers):
        resp = client.get(f"/costs/projects/{uuid4()}/monthly/2024/3", headers=admin_headers)
        assert resp.status_code == 404


class TestExternalCostEndpoints:
    def test_actual_lifecycle(self, client, admin_headers, builder):
        alpha = builder.project("Alpha")
        created = client.post(
            f"/costs/projects/{alpha.id}/cost-actuals",
            headers=admin_headers,
            json={"year": 2024, "month": 3, "amount": "120", "provider_name": "Studio", "issue_date": "2024-03-15"},
        )
        assert created.status_code == 201
        cost = created.json()
        assert cost["kind"] == "ACTUAL"
        assert cost["is_billed"] is False

        patched = client.patch(
            f"/costs/cost-actuals/{cost['id']}", headers=admin_headers, json={"is_billed": True}
        )
        assert patched.status_code == 200
        assert patched.json()["is_billed"] is True

        listed = client.get(
            f"/costs/projects/{alpha.id}/cost-actuals", headers=admin_headers, params={"year": 2024}
        ).json()
        assert [c["id"] for c in listed] == [cost["id"]]

        assert client.delete(f"/costs/cost-actuals/{cost['id']}", headers=admin_headers).status_code == 204
        missing = client.delete(f"/costs/cost-actuals/{cost['id']}", headers=admin_headers)
        assert missing.status_code == 404
        assert missing.json()["code"] == "EXTERNAL_COST_NOT_FOUND"

    def test_estimate_create_and_list(self, client, admin_headers, builder):
        alpha = builder.project("Alpha")
        client.post(
            f"/costs/projects/{alpha.id}/cost-estimates",
            headers=admin_headers,
            json={"year": 2024, "month": 3, "amount": "80"},
        )
        body = client.get(f"/costs/projects/{alpha.id}/cost-estimates", headers=admin_headers).json()
        assert [(c["kind"], Decimal(c["amount"])) for c in body] == [("ESTIMATE", Decimal("80"))]

    def test_update_needs_year_and_month_together(self, client, admin_headers, builder):
        alpha = builder.project("Alpha")
        row = builder.external_cost(alpha, "10")
        resp = client.patch(f"/costs/cost-actuals/{row.id}", headers=admin_headers, json={"month": 4})
        assert resp.status_code == 422

    def test_revenue_listing(self, client, admin_headers, builder):
        alpha = builder.project("Alpha")
        builder.revenue(alpha, "500")
        body = client.get(f"/costs/projects/{alpha.id}/revenue", headers=admin_headers).json()
        assert [(r["year"], r["month"], Decimal(r["actual_revenue"])) for r in body] == [(2024, 3, Decimal("500"))]


class TestProjectOverviewEndpoints:
    def test_projects_summary(self, client, admin_headers, builder):
        alpha = builder.project("Alpha")
        builder.revenue(alpha, "1000")
        builder.external_cost(alpha, "100")

        resp = client.get("/costs/projects-summary", headers=admin_headers, params={"year": 2024, "month": 3})

        assert resp.status_code == 200
        (project,) = resp.json()["projects"]
        (line,) = project["months"]
        assert Decimal(line["net_actual"]) == Decimal("900")
        assert Decimal(line["internal_costs"]) == Decimal("0")

    def test_annual_save_then_read(self, client, admin_headers, builder):
        alpha = builder.project("Alpha")

        saved = client.post(
            "/costs/projects-annual",
            headers=admin_headers,
            json={
                "year": 2024,
                "items": [
                    {"project_id": str(alpha.id), "month": 2, "revenue": {"estimated_revenue": "700"}},
                    {
                        "project_id": str(alpha.id),
                        "month": 2,
                        "cost_estimate": {"action": "create", "amount": "40"},
                    },
                ],
            },
        )
        assert saved.status_code == 204

        body = client.get("/costs/projects-annual", headers=admin_headers, params={"year": 2024}).json()
        february = body["projects"][0]["months"][1]
        assert Decimal(february["estimated_revenue"]) == Decimal("700")
        assert Decimal(february["estimated_costs"]["total"]) == Decimal("40")

    def test_annual_update_requires_id(self, client, admin_headers, builder):
        alpha = builder.project("Alpha")
        resp = client.post(
            "/costs/projects-annual",
            headers=admin_headers,
            json={
                "year": 2024,
                "items": [
                    {"project_id": str(alpha.id), "month": 2, "cost_estimate": {"action": "update", "amount": "1"}}
                ],
            },
        )
        assert resp.status_code == 422
