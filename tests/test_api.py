import json
from unittest.mock import MagicMock, patch

import requests
from sqlalchemy.exc import OperationalError

from api import dependencies
from config.settings import settings
from data.fetcher import EnvironmentDataFetcher
from data.minter import CreditMinter
from data.models_db import SimulationRecord
from main import app
from utils.exceptions import UpstreamError

SIMULATION = {
    "blockId": "blk-42",
    "intervention": "Direct Air Capture",
    "currentAQI": 100,
    "userId": "auth0|alice",
    "buildingDensity": "High (Urban Core)",
    "treeDensity": "Sparse",
    "lat": 28.61,
    "lon": 77.21,
}

ALICE = {"Authorization": "Bearer token-alice"}


class TestBlockData:

    def test_missing_coordinates(self, client):
        assert client.get("/api/block-data").status_code == 400
        assert client.get("/api/block-data", params={"lat": 1}).status_code == 400

    def test_non_numeric_coordinates(self, client):
        response = client.get("/api/block-data", params={"lat": "north", "lon": "2"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Missing coordinates"

    def test_all_upstreams_down_still_answers(self, client):
        response = client.get("/api/block-data", params={"lat": 40.7, "lon": -74.0})
        assert response.status_code == 200
        assert response.json() == {
            "aqi": 0, "pm25": 0, "traffic": "Clear Roads (Est)", "buildingDensity": "Low",
            "buildingCount": 0, "treeCount": 0, "treeDensity": "Low", "areaType": "Suburban",
        }

    def test_partial_upstream_data(self, client, fake_fetcher):
        fake_fetcher.air_quality = {"aqi": 180, "pm25": 40}
        fake_fetcher.traffic = {"current_speed": 20, "free_flow_speed": 50}
        body = client.get("/api/block-data", params={"lat": 28.6, "lon": 77.2}).json()
        assert body["aqi"] == 180
        assert body["pm25"] == 40
        assert body["traffic"] == "Severe Congestion (20 km/h)"
        assert body["buildingDensity"] == "Low"
        assert body["areaType"] == "Suburban"

    def test_malformed_area_reply_still_answers(self, client, fake_fetcher):
        fake_fetcher.air_quality = {"aqi": 42, "pm25": 9}
        fake_fetcher.area = [None]
        response = client.get("/api/block-data", params={"lat": 1.0, "lon": 2.0})
        assert response.status_code == 200
        body = response.json()
        assert body["aqi"] == 42
        assert body["areaType"] == "Suburban"
        assert body["buildingCount"] == 0


class TestGeocode:

    def test_missing_query(self, client):
        assert client.get("/api/geocode").status_code == 400

    def test_primary_results(self, client, fake_fetcher):
        fake_fetcher.tomtom = [{"lat": 1.0, "lon": 2.0, "display_name": "Somewhere", "country": "X"}]
        response = client.get("/api/geocode", params={"q": "somewhere"})
        assert response.status_code == 200
        assert response.json() == fake_fetcher.tomtom
        assert "positionstack" not in fake_fetcher.calls

    def test_falls_back_when_primary_errors(self, client, fake_fetcher):
        fake_fetcher.tomtom = UpstreamError("TomTom search", "HTTP 403")
        fake_fetcher.positionstack = [{"lat": 3.0, "lon": 4.0, "display_name": "Fallback", "country": "Y"}]
        response = client.get("/api/geocode", params={"q": "somewhere"})
        assert response.status_code == 200
        assert response.json()[0]["display_name"] == "Fallback"

    def test_falls_back_when_primary_reply_is_malformed(self, client):
        def reply(payload):
            resp = MagicMock()
            resp.json.return_value = payload
            return resp

        session = MagicMock(spec=requests.Session)
        session.get.side_effect = [
            reply([{"unexpected": True}]),
            reply({"data": [{"latitude": 3.0, "longitude": 4.0, "label": "Fallback", "country": "Y"}]}),
        ]
        fetcher = EnvironmentDataFetcher(session=session)
        fetcher.tomtom_key = "tt-key"
        fetcher.positionstack_key = "ps-key"
        app.dependency_overrides[dependencies.get_fetcher] = lambda: fetcher

        response = client.get("/api/geocode", params={"q": "somewhere"})
        assert response.status_code == 200
        assert response.json() == [{"lat": 3.0, "lon": 4.0, "display_name": "Fallback", "country": "Y"}]
        assert session.get.call_args.args[0] == settings.POSITIONSTACK_URL

    def test_not_found_anywhere(self, client):
        assert client.get("/api/geocode", params={"q": "atlantis"}).status_code == 404

    def test_fallback_error(self, client, fake_fetcher):
        fake_fetcher.positionstack = UpstreamError("PositionStack", "down")
        assert client.get("/api/geocode", params={"q": "atlantis"}).status_code == 500


class TestSimulate:

    def test_direct_air_capture_without_generative_backend(self, client):
        response = client.post("/api/simulate", json=SIMULATION)
        assert response.status_code == 200
        body = response.json()
        assert body["reductionAmount"] == 45.0
        assert body["newAQI"] == 55.0
        assert body["credits"] == 450
        assert body["estimatedCost"] == 80000
        assert body["estimatedDays"] == 14
        assert body["aiInsight"]["fallback"] is True
        assert body["aiInsight"]["headline"] == "Direct Air Capture Successfully Optimized"
        assert body["aqiForecast"] == [55, 55, 54, 54, 53, 53, 52]
        assert body["trafficForecast"] == [30] * 7
        # history provider is down in the fake: flat series at the current AQI
        assert body["dailyAQIHistory"] == [100] * 30
        assert len(body["trafficHistory"]) == 30
        assert min(body["trafficHistory"]) >= 10

    def test_whole_number_series_stay_integers_on_the_wire(self, client):
        response = client.post("/api/simulate", json=SIMULATION)
        assert '"dailyAQIHistory":[100,100,' in response.text
        assert '"aqiForecast":[55,55,54,54,53,53,52]' in response.text
        assert '"trafficForecast":[30,30,' in response.text

    def test_run_is_persisted_for_the_user(self, client):
        client.post("/api/simulate", json=SIMULATION)
        history = client.get("/api/history", headers=ALICE).json()
        assert len(history) == 1
        assert history[0]["intervention_type"] == "Direct Air Capture"
        assert history[0]["credits_earned"] == 450
        assert history[0]["co2_reduced"] == 45.0
        assert history[0]["block_id"] == "blk-42"

    def test_unknown_intervention_uses_green_wall(self, client):
        body = client.post("/api/simulate", json={**SIMULATION, "intervention": "Moon Laser"}).json()
        assert body["reductionAmount"] == 15.0
        assert body["estimatedCost"] == 12000

    def test_history_fetched_when_available(self, client, fake_fetcher):
        fake_fetcher.hourly = [64] * 24 * 35
        body = client.post("/api/simulate", json=SIMULATION).json()
        assert body["dailyAQIHistory"] == [64] * 30

    def test_invalid_body(self, client):
        assert client.post("/api/simulate", json={"intervention": "Biochar"}).status_code == 422

    def test_negative_aqi_is_rejected(self, client):
        assert client.post("/api/simulate", json={**SIMULATION, "currentAQI": -5}).status_code == 422

    def test_persistence_failure_is_internal_error(self, client):
        error = OperationalError("INSERT", {}, Exception("database is locked"))
        with patch("data.repository.SimulationRepository.record", side_effect=error):
            response = client.post("/api/simulate", json=SIMULATION)
        assert response.status_code == 500
        assert response.json()["detail"] == "Simulation failed internally."


class TestHistory:

    def test_requires_token(self, client):
        assert client.get("/api/history").status_code == 401

    def test_rejects_unknown_token(self, client):
        response = client.get("/api/history", headers={"Authorization": "Bearer forged"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token"

    def test_only_own_rows(self, client):
        client.post("/api/simulate", json=SIMULATION)
        client.post("/api/simulate", json={**SIMULATION, "userId": "auth0|bob"})
        bob = client.get("/api/history", headers={"Authorization": "Bearer token-bob"}).json()
        assert [row["user_id"] for row in bob] == ["auth0|bob"]

    def test_unreadable_stored_row_is_internal_error(self, client, db_session):
        db_session.add(SimulationRecord(
            user_id="auth0|alice", block_id="b", intervention_type="Green Wall", co2_reduced=1.5,
            credits_earned=15, ai_insight=json.dumps({"headline": "only a headline"}),
            history_data="[]", traffic_data="[]", weekly_summary=json.dumps({"aqi": [], "traffic": []}),
        ))
        db_session.commit()
        response = client.get("/api/history", headers=ALICE)
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to fetch history"


class FakeMinter(CreditMinter):
    def __init__(self):
        self.minted = []

    def mint(self, wallet_address, credits):
        self.minted.append((wallet_address, credits))
        return "5xTxHash"


class TestMintCredit:

    def test_requires_token(self, client):
        assert client.post("/api/mint-credit", json={"walletAddress": "w", "credits": 5}).status_code == 401

    def test_invalid_request(self, client):
        response = client.post("/api/mint-credit", json={"walletAddress": "w", "credits": 0}, headers=ALICE)
        assert response.status_code == 400
        response = client.post("/api/mint-credit", json={"credits": 10}, headers=ALICE)
        assert response.status_code == 400

    def test_unconfigured_minter_fails(self, client):
        response = client.post("/api/mint-credit", json={"walletAddress": "w", "credits": 5}, headers=ALICE)
        assert response.status_code == 500
        assert response.json()["detail"].startswith("Mint failed")

    def test_mints_and_records_reward(self, client):
        minter = FakeMinter()
        app.dependency_overrides[dependencies.get_credit_minter] = lambda: minter
        response = client.post("/api/mint-credit", json={"walletAddress": "wallet1", "credits": 450}, headers=ALICE)
        assert response.status_code == 200
        assert response.json() == {"success": True, "txHash": "5xTxHash"}
        assert minter.minted == [("wallet1", 450)]
