"""
RiskWise — Risk & Issue Dashboard
Tests — Dashboard + Health API.

Covers:
    - Heat map policy selection (query param, config default, 400 on unknown)
    - Stats cards, histograms, overdue (?today), executive summary
    - ?project narrowing
    - Health endpoints
"""

import pytest


@pytest.fixture()
def seeded(store, products, make_risk, make_issue):
    store.create("risks", make_risk(**{
        "Probability": 0.7, "Imapct Rating (0.05-0.8)": 0.2, "DueDate": "2026-09-04",
    }))
    store.create("risks", make_risk(**{
        "Project Code": "P-67890", "Probability": 0.65, "Imapct Rating (0.05-0.8)": 0.2,
        "Risk Status": "Closed", "DueDate": "2026-01-01",
    }))
    store.create("issues", make_issue(Priority="Critical"))
    store.create("issues", make_issue(Status="Resolved", Priority="Low", **{"Category New": "Schedule"}))


class TestHeatmapApi:
    def test_default_policy(self, client, seeded):
        body = client.get("/api/v1/dashboard/heatmap").get_json()
        assert body["policy"] == "nearest"
        assert body["grid"][3][2] == 2
        assert body["placed"] == 2

    def test_exact_policy(self, client, seeded):
        body = client.get("/api/v1/dashboard/heatmap?policy=exact").get_json()
        assert body["grid"][3][2] == 1
        assert body["dropped"] == 1

    def test_unknown_policy(self, client):
        res = client.get("/api/v1/dashboard/heatmap?policy=fuzzy")
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_REQUIRED"

    def test_project_filter(self, client, seeded):
        body = client.get("/api/v1/dashboard/heatmap",
                          query_string={"project": "Quantum Leap Initiative"}).get_json()
        assert body["placed"] == 1


class TestCardsAndHistograms:
    def test_stats(self, client, seeded):
        body = client.get("/api/v1/dashboard/stats").get_json()
        assert body == {"total": 4, "open": 2, "highPriority": 1, "resolved": 2}

    def test_statuses(self, client, seeded):
        body = client.get("/api/v1/dashboard/statuses").get_json()
        assert body["type"] == "Risk"
        assert {h["status"]: h["count"] for h in body["items"]}["Closed"] == 1

        body = client.get("/api/v1/dashboard/statuses?type=issues").get_json()
        assert body["type"] == "Issue"
        assert {h["status"]: h["count"] for h in body["items"]}["Resolved"] == 1

        assert client.get("/api/v1/dashboard/statuses?type=Action").status_code == 400

    def test_risk_levels(self, client, seeded):
        items = client.get("/api/v1/dashboard/risk-levels").get_json()["items"]
        assert {h["level"]: h["count"] for h in items} == {"Low": 0, "Medium": 2, "High": 0, "Critical": 0}

    def test_categories_types_priorities(self, client, seeded):
        cats = client.get("/api/v1/dashboard/categories").get_json()["items"]
        assert {c["category"]: c["count"] for c in cats}["Schedule"] == 1

        types = client.get("/api/v1/dashboard/types").get_json()["items"]
        assert {t["type"]: t["count"] for t in types} == {"Risk": 2, "Issue": 2}

        prios = client.get("/api/v1/dashboard/priorities").get_json()["items"]
        assert {p["priority"]: p["count"] for p in prios}["Critical"] == 1


class TestOverdueApi:
    def test_injected_today(self, client, seeded):
        body = client.get("/api/v1/dashboard/overdue?today=2026-10-19").get_json()
        assert body == {"dueInLessThan30": 0, "overdue30to60": 1, "criticalOverdue": 0}

    def test_bad_today(self, client):
        assert client.get("/api/v1/dashboard/overdue?today=yesterday").status_code == 400


class TestExecutiveApi:
    def test_summary(self, client, seeded):
        body = client.get("/api/v1/dashboard/executive").get_json()
        assert body["openRisks"] == 1
        assert len(body["topRisks"]) == 1
        assert body["heatmap"]["placed"] == 2

    def test_bad_policy(self, client):
        assert client.get("/api/v1/dashboard/executive?policy=fuzzy").status_code == 400


# ═════════════════════════════════════════════════════════════════════════════
# HEALTH
# ═════════════════════════════════════════════════════════════════════════════

class TestHealth:
    def test_health(self, client):
        res = client.get("/api/v1/health")
        assert res.status_code == 200
        assert res.get_json()["status"] == "ok"

    def test_ready(self, client):
        assert client.get("/api/v1/health/ready").status_code == 200

    def test_live(self, client, seeded):
        res = client.get("/api/v1/health/live")
        assert res.status_code == 200
        checks = res.get_json()["checks"]
        assert checks["database"]["documents"]["risks"] == 2
        assert checks["database"]["documents"]["products"] == 15
        assert checks["ai"]["status"] == "local_stub"

    def test_unknown_route_is_json_404(self, client):
        res = client.get("/api/v1/nothing-here")
        assert res.status_code == 404
        assert res.get_json()["code"] == "ERR_NOT_FOUND"
