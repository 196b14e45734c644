"""
API Tests

Tests for FastAPI endpoints using TestClient.
The service container is replaced with one built on the in-memory store.

Run: pytest pawfect_ai/tests/test_api.py -v
"""

import logging

import pytest
from fastapi.testclient import TestClient

from pawfect_ai.api.deps import Services, get_services, reset_services
from pawfect_ai.core.logging import TraceIdFilter
from pawfect_ai.main import app
from pawfect_ai.services.recommendation_orchestrator import TraitCompatibilityScorer
from pawfect_ai.tests.factories import RecordingNotifier, at, make_booking
from pawfect_ai.tools.memory_store import InMemoryDataStore
from pawfect_ai.tools.notifier import BOOKING_CREATED

OWNER = {"x-user-id": "owner-1", "x-user-role": "owner"}
SITTER = {"x-user-id": "sitter-1", "x-user-role": "sitter"}
STRANGER = {"x-user-id": "owner-2", "x-user-role": "owner"}

BOOKING_BODY = {
    "owner_id": "owner-1",
    "sitter_id": "sitter-1",
    "pet_ids": ["pet-1"],
    "start_time": "2026-03-02T10:00:00",
    "end_time": "2026-03-02T14:00:00",
}


# ==================== Test Client Fixture ====================

@pytest.fixture
def services(store):
    return Services(store, notifier=RecordingNotifier())


@pytest.fixture
def client(services):
    """TestClient with the service container overridden."""
    app.dependency_overrides[get_services] = lambda: services
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create(client, body=None, headers=OWNER):
    return client.post("/api/bookings", json=body or BOOKING_BODY, headers=headers)


# ==================== Health and Root Endpoints ====================

def test_root_endpoint(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["service"] == "Pawfect AI"


def test_health_endpoint(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "data_store" in data["components"]


# ==================== Sitter Endpoints ====================

def test_trust_score_endpoint(client):
    response = client.get("/api/sitters/sitter-1/trust-score", headers={"x-request-id": "trace-1"})

    assert response.status_code == 200
    body = response.json()
    assert body["proofs"]["trace_id"] == "trace-1"
    assert body["data"]["sitter_id"] == "sitter-1"
    assert 0.0 <= body["data"]["score"] <= 1.0
    assert len(body["data"]["features"]) == 15


def test_trust_score_unknown_sitter_is_404(client):
    response = client.get("/api/sitters/nobody/trust-score")

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "not_found"


def test_analysis_endpoint(client):
    response = client.get("/api/sitters/sitter-1/analysis")

    assert response.status_code == 200
    assert response.json()["data"]["insights"]


def test_availability_endpoint(client, store):
    store.add_booking(make_booking("bk-a", at(10), at(12)))

    response = client.get(
        "/api/sitters/sitter-1/availability",
        params={"start_date": "2026-03-02", "end_date": "2026-03-03"}
    )

    assert response.status_code == 200
    windows = response.json()["data"]["windows"]
    assert [w["date"] for w in windows] == ["2026-03-02", "2026-03-03"]
    assert len(windows[0]["existing_bookings"]) == 1
    assert windows[1]["existing_bookings"] == []


def test_availability_range_is_limited(client):
    response = client.get(
        "/api/sitters/sitter-1/availability",
        params={"start_date": "2026-03-01", "end_date": "2026-05-01"}
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "validation_error"


# ==================== Slot Endpoints ====================

def test_suggest_slots_endpoint(client):
    response = client.post(
        "/api/slots/suggest",
        json={"pet_id": "pet-1", "sitter_id": "sitter-1", "preferences": {"duration": "8 hours"}}
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["suggestions"]
    assert all(abs(s["duration_hours"] - 8) <= 2 for s in data["suggestions"])


def test_suggest_slots_requires_ids(client):
    response = client.post("/api/slots/suggest", json={"pet_id": "pet-1"})

    assert response.status_code == 422


# ==================== Booking Endpoints ====================

def test_create_booking(client, services):
    response = _create(client)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "PENDING"
    assert data["total_amount"] == 80.0
    assert services.notifier.events() == [(BOOKING_CREATED, "sitter-1")]


def test_create_booking_for_someone_else_is_forbidden(client):
    response = _create(client, headers=STRANGER)

    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "forbidden"


def test_create_overlapping_booking_is_conflict(client, store):
    store.add_booking(make_booking("bk-a", at(8), at(12)))

    response = _create(client)

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["code"] == "conflict"
    assert detail["details"]["conflicting_booking_id"] == "bk-a"


def test_status_flow_and_invalid_transition(client):
    booking_id = _create(client).json()["data"]["id"]

    confirmed = client.post(f"/api/bookings/{booking_id}/status", json={"status": "CONFIRMED"}, headers=SITTER)
    assert confirmed.status_code == 200
    assert confirmed.json()["data"]["status"] == "CONFIRMED"

    repeated = client.post(f"/api/bookings/{booking_id}/status", json={"status": "CONFIRMED"}, headers=SITTER)
    assert repeated.status_code == 409
    assert repeated.json()["detail"]["code"] == "invalid_transition"


def test_cancel_booking_with_and_without_reason(client):
    first = _create(client).json()["data"]["id"]
    second = _create(client, {**BOOKING_BODY, "start_time": "2026-03-03T10:00:00",
                              "end_time": "2026-03-03T12:00:00"}).json()["data"]["id"]

    with_reason = client.post(f"/api/bookings/{first}/cancel", json={"reason": "Trip cancelled"}, headers=OWNER)
    without_reason = client.post(f"/api/bookings/{second}/cancel", headers=OWNER)

    assert with_reason.status_code == 200
    assert with_reason.json()["data"]["status"] == "CANCELLED"
    assert with_reason.json()["data"]["cancellation_reason"] == "Trip cancelled"
    assert without_reason.status_code == 200


def test_reschedule_booking(client):
    booking_id = _create(client).json()["data"]["id"]

    response = client.post(
        f"/api/bookings/{booking_id}/reschedule",
        json={"start_time": "2026-03-04T09:00:00", "end_time": "2026-03-04T11:00:00"},
        headers=OWNER
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["start_time"] == "2026-03-04T09:00:00"
    assert data["total_amount"] == 40.0


def test_get_booking(client):
    booking_id = _create(client).json()["data"]["id"]

    assert client.get(f"/api/bookings/{booking_id}", headers=SITTER).status_code == 200
    assert client.get(f"/api/bookings/{booking_id}", headers=STRANGER).status_code == 403
    assert client.get(f"/api/bookings/{booking_id}").status_code == 403


def test_booking_with_utc_offset_then_availability(client):
    body = {**BOOKING_BODY, "start_time": "2026-03-02T10:00:00Z", "end_time": "2026-03-02T14:00:00+02:00"}
    booking_id = _create(client, body).json()["data"]["id"]
    client.post(f"/api/bookings/{booking_id}/status", json={"status": "CONFIRMED"}, headers=SITTER)

    response = client.get(
        "/api/sitters/sitter-1/availability",
        params={"start_date": "2026-03-02", "end_date": "2026-03-02"}
    )

    assert response.status_code == 200
    existing = response.json()["data"]["windows"][0]["existing_bookings"]
    assert existing == [{"start": "2026-03-02T10:00:00", "end": "2026-03-02T12:00:00"}]


def test_get_unknown_booking_is_404(client):
    response = client.get("/api/bookings/bk-404", headers={"x-user-role": "admin"})

    assert response.status_code == 404


# ==================== Recommendation Endpoints ====================

def test_recommendations_endpoint(client, sitter):
    response = client.post(
        "/api/recommendations",
        json={
            "pet": {"id": "pet-1", "owner_id": "owner-1", "species": "dog"},
            "candidate_sitters": [
                sitter.model_dump(mode="json"),
                {"id": "sitter-2", "response_time_hours": 72},
            ],
            "with_timing": True,
        }
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert [r["rank"] for r in data["recommendations"]] == [1, 2]
    assert data["recommendations"][0]["sitter"]["id"] == "sitter-1"
    assert set(data["time_suggestions"]) == {"sitter-1", "sitter-2"}


def test_recommendations_with_no_candidates(client):
    response = client.post(
        "/api/recommendations",
        json={"pet": {"id": "pet-1", "owner_id": "owner-1"}, "candidate_sitters": []}
    )

    assert response.status_code == 200
    assert response.json()["data"]["recommendations"] == []
    assert response.json()["data"]["time_suggestions"] is None


# ==================== Service Wiring ====================

def test_services_use_trait_compatibility(services):
    assert isinstance(services.orchestrator.compatibility, TraitCompatibilityScorer)


def test_services_built_from_environment(monkeypatch):
    monkeypatch.setenv("DATA_STORE", "memory")
    monkeypatch.delenv("INSIGHT_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    reset_services()

    try:
        services = get_services()

        assert isinstance(services.store, InMemoryDataStore)
        assert services.provider is None
        assert get_services() is services
    finally:
        reset_services()


def test_request_id_is_attached_to_log_records(client, caplog):
    caplog.handler.addFilter(TraceIdFilter())

    with caplog.at_level(logging.INFO):
        _create(client, headers={**OWNER, "x-request-id": "trace-42"})

    assert any(getattr(record, "trace_id", None) == "trace-42" for record in caplog.records)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
