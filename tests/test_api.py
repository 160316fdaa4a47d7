"""
Tests for scenarios, calculations and page API endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from bizcalc.main import app
from bizcalc.api.rate_limit import RateLimiter
from bizcalc.db.models import Business

# Database setup is handled by conftest.py


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def test_business(db_session):
    """Create a stored scenario."""
    business = Business(
        business_name="Test Landscaping",
        sde=500000,
        price=1750000,
        optional_salary=125000,
        pct_down_payment=10,
        pct_seller_carry=10,
        pct_junior_debt=0,
    )
    db_session.add(business)
    db_session.commit()
    db_session.refresh(business)
    return business


@pytest.fixture
def tight_rate_limit():
    """Swap in a limiter that allows two writes per window."""
    original = app.state.rate_limiter
    app.state.rate_limiter = RateLimiter(max_requests=2, window_seconds=60)
    yield
    app.state.rate_limiter = original


# ============================================================================
# SCENARIO API TESTS
# ============================================================================

class TestScenarioAPI:
    """Test scenario endpoints."""

    def test_list_scenarios(self, client, test_business):
        """Test listing scenarios."""
        response = client.get("/api/scenarios/")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        summary = data["scenarios"][0]
        assert summary["business_name"] == "Test Landscaping"
        assert summary["multiple"] == 3.5

    def test_create_scenario(self, client):
        """Test creating a scenario."""
        response = client.post(
            "/api/scenarios/",
            json={"business_name": "New Dental Practice", "sde": 800000, "price": 2400000},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["business_name"] == "New Dental Practice"
        assert data["price"] == 2400000
        # Defaults fill the rest
        assert data["sba_interest"] == 10
        assert data["junior_duration"] == 120
        assert "id" in data

    def test_create_scenario_strips_markup(self, client):
        response = client.post(
            "/api/scenarios/",
            json={"business_name": "  <b>Bold</b> Bikes  "},
        )
        assert response.status_code == 201
        assert response.json()["business_name"] == "Bold Bikes"

    @pytest.mark.parametrize(
        "payload",
        [
            {"business_name": ""},
            {"business_name": "   "},
            {"business_name": "<i></i>"},
            {"business_name": "x" * 201},
            {"sde": 100},
        ],
    )
    def test_create_scenario_invalid_name(self, client, payload):
        response = client.post("/api/scenarios/", json=payload)
        assert response.status_code == 422

    @pytest.mark.parametrize(
        "field,value",
        [
            ("pct_down_payment", 101),
            ("pct_seller_carry", -1),
            ("price", 1_000_000_001),
            ("capex", 10_000_001),
            ("sba_duration", 0),
            ("seller_duration", 601),
            ("junior_interest", 100.5),
        ],
    )
    def test_create_scenario_out_of_range(self, client, field, value):
        response = client.post(
            "/api/scenarios/",
            json={"business_name": "Range Check", field: value},
        )
        assert response.status_code == 422
        errors = response.json()["detail"]
        assert any(field in error["loc"] for error in errors)

    def test_get_scenario(self, client, test_business):
        """Test getting a specific scenario."""
        response = client.get(f"/api/scenarios/{test_business.id}")
        assert response.status_code == 200
        data = response.json()
        assert data["business_name"] == "Test Landscaping"
        assert data["id"] == test_business.id

    def test_get_nonexistent_scenario(self, client):
        response = client.get("/api/scenarios/nonexistent-id")
        assert response.status_code == 404

    def test_get_scenario_outside_input_ranges(self, client, db_session):
        """Records written directly to the store are still readable."""
        business = Business(
            business_name="Imported Outlier",
            price=5_000_000_000,
            pct_down_payment=150,
            sba_duration=0,
        )
        db_session.add(business)
        db_session.commit()

        response = client.get(f"/api/scenarios/{business.id}")
        assert response.status_code == 200
        data = response.json()
        assert data["price"] == 5_000_000_000
        assert data["pct_down_payment"] == 150
        assert data["sba_duration"] == 0

    def test_update_scenario(self, client, test_business):
        """Test replacing a scenario."""
        response = client.put(
            f"/api/scenarios/{test_business.id}",
            json={"business_name": "Renamed Landscaping", "pct_junior_debt": 5},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["business_name"] == "Renamed Landscaping"
        assert data["pct_junior_debt"] == 5

    def test_update_nonexistent_scenario(self, client):
        response = client.put(
            "/api/scenarios/nonexistent-id",
            json={"business_name": "Nobody"},
        )
        assert response.status_code == 404

    def test_delete_scenario(self, client, test_business):
        """Test deleting a scenario."""
        response = client.delete(f"/api/scenarios/{test_business.id}")
        assert response.status_code == 200
        assert response.json() == {"deleted": True, "id": test_business.id}

        response = client.get(f"/api/scenarios/{test_business.id}")
        assert response.status_code == 404

    def test_delete_nonexistent_scenario(self, client):
        response = client.delete("/api/scenarios/nonexistent-id")
        assert response.status_code == 404

    def test_scenario_stats(self, client, test_business):
        response = client.get("/api/scenarios/stats")
        assert response.status_code == 200
        assert response.json() == {"total_scenarios": 1, "database_size": 0}

    def test_scenario_valuation(self, client, test_business):
        """Stored inputs are recalculated on request."""
        response = client.get(f"/api/scenarios/{test_business.id}/valuation")
        assert response.status_code == 200
        data = response.json()
        assert data["scenario_id"] == test_business.id
        assert data["sba_loan_base"] == pytest.approx(1400000)
        assert data["seller_monthly_payment"] == pytest.approx(2031.90, abs=0.01)
        assert data["dscr_rating"] == "Acceptable"
        assert data["validation_pass"] is True

    def test_scenario_valuation_nonexistent(self, client):
        response = client.get("/api/scenarios/nonexistent-id/valuation")
        assert response.status_code == 404


# ============================================================================
# CALCULATIONS API TESTS
# ============================================================================

class TestCalculationsAPI:
    """Test calculation endpoints."""

    def test_calculate_valuation_defaults(self, client):
        """An empty body values the default deal."""
        response = client.post("/api/calculate/valuation", json={})
        assert response.status_code == 200
        data = response.json()
        assert data["multiple"] == 3.5
        assert data["monthly_cash_flow"] == pytest.approx(10142.34, abs=0.01)
        assert data["dscr"] == pytest.approx(1.4805, abs=1e-4)
        assert data["total_to_seller_5yr"] == pytest.approx(1799528.82, abs=0.01)
        assert data["total_to_seller_10yr"] == pytest.approx(1818827.81, abs=0.01)

    def test_calculate_valuation_strong(self, client):
        response = client.post(
            "/api/calculate/valuation",
            json={"business_name": "Cash Cow", "sde": 1000000},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["business_name"] == "Cash Cow"
        assert data["dscr_rating"] == "Strong"
        assert data["dscr_color"] == "green"

    def test_calculate_valuation_out_of_range(self, client):
        response = client.post(
            "/api/calculate/valuation", json={"pct_junior_debt": 150}
        )
        assert response.status_code == 422

    def test_calculate_loan(self, client):
        response = client.post(
            "/api/calculate/loan",
            json={"principal": 175000, "annual_rate_percent": 7, "num_payments": 120},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["monthly_payment"] == pytest.approx(2031.90, abs=0.01)
        assert data["interest_5yr"] == pytest.approx(49529, abs=1)
        assert data["balloon_5yr"] == pytest.approx(102615, abs=1)
        assert data["annual_payment"] == pytest.approx(data["monthly_payment"] * 12)

    def test_calculate_amortization(self, client):
        """Test amortization schedule endpoint."""
        response = client.post(
            "/api/calculate/amortization",
            json={
                "principal": 100000,
                "annual_rate_percent": 6,
                "num_payments": 60,
                "start_date": "2025-01-01",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert len(data["schedule"]) == 60
        assert data["schedule"][0]["date"] == "2025-01-01"
        assert data["schedule"][-1]["ending_balance"] == 0
        assert data["total_principal"] == pytest.approx(100000, abs=1)

    def test_calculate_amortization_requires_payments(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={"principal": 100000, "annual_rate_percent": 6, "num_payments": 0},
        )
        assert response.status_code == 422


# ============================================================================
# RATE LIMIT TESTS
# ============================================================================

class TestRateLimit:
    """Test write request throttling."""

    def test_writes_over_limit_rejected(self, client, tight_rate_limit):
        for name in ("One", "Two"):
            response = client.post("/api/scenarios/", json={"business_name": name})
            assert response.status_code == 201

        response = client.post("/api/scenarios/", json={"business_name": "Three"})
        assert response.status_code == 429

    def test_reads_not_limited(self, client, tight_rate_limit):
        for _ in range(5):
            assert client.get("/api/scenarios/").status_code == 200

    def test_window_expires(self):
        now = [0.0]
        limiter = RateLimiter(max_requests=1, window_seconds=60, clock=lambda: now[0])

        assert limiter.allow("10.0.0.1") is True
        assert limiter.allow("10.0.0.1") is False
        # Other clients have their own window
        assert limiter.allow("10.0.0.2") is True

        now[0] = 60.0
        assert limiter.allow("10.0.0.1") is True

    def test_idle_clients_forgotten(self):
        now = [0.0]
        limiter = RateLimiter(max_requests=5, window_seconds=60, clock=lambda: now[0])

        for i in range(1000):
            limiter.allow(f"10.0.{i // 256}.{i % 256}")
        assert limiter.tracked_clients() == 1000

        now[0] = 30.0
        limiter.allow("10.0.0.0")

        # Only clients with hits still inside the window survive the sweep
        now[0] = 61.0
        limiter.allow("192.168.1.1")
        assert limiter.tracked_clients() == 2


# ============================================================================
# HEALTH CHECK TESTS
# ============================================================================

class TestHealthCheck:
    """Test health check endpoint."""

    def test_health_check(self, client):
        """Test health check returns healthy status."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data

    def test_security_headers(self, client):
        response = client.get("/health")
        assert response.headers["X-Frame-Options"] == "SAMEORIGIN"
        assert response.headers["X-Content-Type-Options"] == "nosniff"


# ============================================================================
# PAGE ROUTE TESTS
# ============================================================================

class TestPageRoutes:
    """Test HTML page routes."""

    def test_home_page(self, client):
        """Test home page loads."""
        response = client.get("/")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Acceptable" in response.text

    def test_home_page_with_scenario(self, client, test_business):
        response = client.get(f"/?scenario_id={test_business.id}")
        assert response.status_code == 200
        assert "Test Landscaping" in response.text

    def test_home_page_unknown_scenario(self, client):
        response = client.get("/?scenario_id=nonexistent-id")
        assert response.status_code == 404

    def test_home_page_record_controls(self, client, test_business):
        response = client.get("/")
        assert 'data-action="save"' in response.text
        assert 'data-action="save-as-new"' in response.text
        # Nothing loaded, so nothing to delete
        assert 'data-action="delete"' not in response.text

        response = client.get(f"/?scenario_id={test_business.id}")
        assert 'data-action="delete"' in response.text
        assert f'data-scenario-id="{test_business.id}"' in response.text

    def test_save_and_delete_round_trip(self, client):
        """Save, re-save and delete a business the way the page does."""
        inputs = {"business_name": "Page Pet Grooming", "sde": 300000, "price": 900000}

        response = client.post("/api/scenarios/", json=inputs)
        assert response.status_code == 201
        scenario_id = response.json()["id"]

        page = client.get(f"/?scenario_id={scenario_id}")
        assert page.status_code == 200
        assert 'value="Page Pet Grooming"' in page.text

        response = client.put(
            f"/api/scenarios/{scenario_id}",
            json={**inputs, "business_name": "Page Pet Spa"},
        )
        assert response.status_code == 200
        assert "Page Pet Spa" in client.get("/").text

        response = client.delete(f"/api/scenarios/{scenario_id}")
        assert response.status_code == 200
        assert client.get(f"/?scenario_id={scenario_id}").status_code == 404
        assert "Page Pet Spa" not in client.get("/").text

    def test_out_of_range_inputs_mark_results_stale(self, client):
        """The page carries a stale-results notice for rejected recalculations."""
        page = client.get("/")
        assert 'class="results-error"' in page.text

        response = client.post("/api/calculate/valuation", json={"pct_down_payment": 150})
        assert response.status_code == 422
