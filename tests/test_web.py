"""
Tests for the web API.

Tests cover:
- Pricing requests and maturity resolution
- Scenario requests with and without the hedging table
- Market data endpoint with mocked downloads
- Error responses
"""

import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient
from fxlab.analytics.scenarios import MAX_STEPS
from fxlab.data_sources.market import fallback_snapshot
from fxlab.errors import DataError
from fxlab.web import app

client = TestClient(app)

PRICE_REQUEST = {
    "spot": 942.51,
    "strike": 942.51,
    "days": 33,
    "volatility": 0.159,
    "domestic_rate": 0.055,
    "foreign_rate": 0.059,
    "option_type": "call",
    "notional": 44000,
}


class TestPriceEndpoint:
    """Tests for POST /api/price."""

    def test_price_call(self):
        """Test the ATM USD/CLP call."""
        response = client.post("/api/price", json=PRICE_REQUEST)
        assert response.status_code == 200
        data = response.json()
        assert data["premium"] == pytest.approx(17.71, abs=0.1)
        assert data["break_even"] == pytest.approx(942.51 + data["premium"])
        assert data["total_premium"] == pytest.approx(data["premium"] * 44000)
        assert data["inputs"]["time_to_maturity"] == 0.090411
        assert set(data["greeks"]) == {"delta", "gamma", "theta", "vega", "rho"}

    def test_option_type_normalized(self):
        """Test upper-case and boolean option types."""
        put = client.post("/api/price", json={**PRICE_REQUEST, "option_type": "PUT"}).json()
        put_bool = client.post("/api/price", json={**PRICE_REQUEST, "option_type": False}).json()
        assert put["inputs"]["option_type"] == "put"
        assert put["premium"] == put_bool["premium"]

    def test_strike_defaults_to_spot(self):
        """Test a missing strike prices at the money."""
        request = {k: v for k, v in PRICE_REQUEST.items() if k != "strike"}
        data = client.post("/api/price", json=request).json()
        assert data["inputs"]["strike"] == 942.51

    def test_year_fraction_maturity(self):
        """Test time_to_maturity in place of days."""
        request = {**PRICE_REQUEST, "time_to_maturity": 0.25}
        del request["days"]
        data = client.post("/api/price", json=request).json()
        assert data["inputs"]["time_to_maturity"] == 0.25

    def test_full_precision(self):
        """Test precision=null returns unrounded Greeks."""
        data = client.post("/api/price", json={**PRICE_REQUEST, "precision": None}).json()
        gamma = data["greeks"]["gamma"]
        assert gamma != round(gamma, 4)

    def test_zero_volatility_rejected(self):
        """Test invalid inputs give 400."""
        response = client.post("/api/price", json={**PRICE_REQUEST, "volatility": 0})
        assert response.status_code == 400
        assert "volatility" in response.json()["detail"]

    def test_two_maturity_fields_rejected(self):
        """Test exactly one maturity field is required."""
        response = client.post("/api/price", json={**PRICE_REQUEST, "time_to_maturity": 0.5})
        assert response.status_code == 400

    def test_no_maturity_field_rejected(self):
        """Test a missing maturity."""
        request = {k: v for k, v in PRICE_REQUEST.items() if k != "days"}
        assert client.post("/api/price", json=request).status_code == 400

    def test_invalid_option_type_rejected(self):
        """Test an unknown option type fails validation."""
        response = client.post("/api/price", json={**PRICE_REQUEST, "option_type": "straddle"})
        assert response.status_code == 422


class TestScenarioEndpoint:
    """Tests for POST /api/scenarios."""

    def test_scenarios(self):
        """Test the default sweep."""
        response = client.post("/api/scenarios", json={
            "spot": 942.51, "strike": 942.51, "premium": 17.71, "notional": 44000,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["option_type"] == "call"
        assert data["break_even"] == pytest.approx(960.22)
        assert len(data["scenarios"]) == 20
        assert data["hedge"] is None

    def test_scenarios_with_hedge(self):
        """Test the hedging table is included on request."""
        data = client.post("/api/scenarios", json={
            "spot": 100.0, "strike": 100.0, "premium": 2.0, "notional": 1000,
            "option_type": "put", "variation_range": [-0.1, 0.1], "steps": 5,
            "include_hedge": True,
        }).json()
        assert len(data["scenarios"]) == 5
        assert data["scenarios"][0]["future_spot"] == pytest.approx(90.0)
        assert len(data["hedge"]) == 9
        assert data["hedge"][0]["exercised"] is True

    def test_incomplete_parameters_rejected(self):
        """Test missing premium gives 400."""
        response = client.post("/api/scenarios", json={
            "spot": 942.51, "strike": 942.51, "notional": 44000,
        })
        assert response.status_code == 400
        assert "premium" in response.json()["detail"]

    def test_overflowing_spot_rejected(self):
        """Test a spot whose payoffs overflow gives 400 instead of null values."""
        response = client.post("/api/scenarios", json={
            "spot": 1e308, "strike": 100.0, "premium": 2.0, "notional": 1000,
        })
        assert response.status_code == 400
        assert "overflow" in response.json()["detail"]

    def test_too_many_steps_rejected(self):
        """Test the point count is bounded at validation."""
        response = client.post("/api/scenarios", json={
            "spot": 100.0, "strike": 100.0, "premium": 2.0, "notional": 1000,
            "steps": 100_000_000,
        })
        assert response.status_code == 422

    def test_maximum_steps_accepted(self):
        """Test the largest allowed sweep."""
        data = client.post("/api/scenarios", json={
            "spot": 100.0, "strike": 100.0, "premium": 2.0, "notional": 1000,
            "steps": MAX_STEPS,
        }).json()
        assert len(data["scenarios"]) == MAX_STEPS


class TestMarketDataEndpoint:
    """Tests for GET /api/market-data."""

    @patch("fxlab.web.SnapshotCache")
    @patch("fxlab.web.get_market_snapshot")
    def test_market_data(self, mock_snapshot, mock_cache):
        """Test the snapshot is returned as JSON."""
        mock_snapshot.return_value = fallback_snapshot(reason="test")
        response = client.get("/api/market-data")
        assert response.status_code == 200
        data = response.json()
        assert data["pair"] == "USDCLP=X"
        assert data["current_rate"] == 942.51
        assert data["is_fallback"] is True

    @patch("fxlab.web.SnapshotCache")
    @patch("fxlab.web.get_market_snapshot")
    def test_market_data_pair(self, mock_snapshot, mock_cache):
        """Test base and quote are passed through."""
        mock_snapshot.return_value = fallback_snapshot()
        client.get("/api/market-data", params={"base": "EUR", "quote": "USD"})
        kwargs = mock_snapshot.call_args.kwargs
        assert kwargs["base"] == "EUR"
        assert kwargs["quote"] == "USD"

    @patch("fxlab.web.SnapshotCache")
    @patch("fxlab.web.get_market_snapshot")
    def test_market_data_failure(self, mock_snapshot, mock_cache):
        """Test a download failure gives 502."""
        mock_snapshot.side_effect = DataError("No data returned for USDCLP=X")
        response = client.get("/api/market-data")
        assert response.status_code == 502
