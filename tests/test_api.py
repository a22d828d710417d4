# Path: tests/test_api.py
# Purpose: HTTP surface of the intelligence service.
# Layer: tests.
# Details: Uses FastAPI's TestClient against a service backed by the in-memory repository.

from __future__ import annotations

import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from api import create_app


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_search_returns_ranked_results(client):
    response = client.post("/search", json={"query": "ocean", "limit": 5})

    assert response.status_code == 200
    body = response.json()
    assert body["intent"] == "search_artwork"
    assert body["missing_sources"] == 0
    assert body["entities"]["subjects"] == ["ocean"]
    scores = [item["relevance_score"] for item in body["results"]]
    assert scores == sorted(scores, reverse=True)
    assert len(scores) <= 5


def test_search_with_filters_and_options(client):
    response = client.post(
        "/search",
        json={"query": "", "filters": {"max_price": 2000}, "options": {"discovery_mode": 0.9}},
    )

    artwork_ids = {item["id"] for item in response.json()["results"] if item["type"] == "artwork"}
    assert artwork_ids == {"a1", "a3"}


@pytest.mark.parametrize(
    "payload",
    [
        {"query": "ocean", "filters": {"min_price": 500, "max_price": 100}},
        {"query": "ocean", "options": {"price_sensitivity": 3}},
    ],
)
def test_invalid_search_input_is_a_client_error(client, payload):
    assert client.post("/search", json=payload).status_code == 400


def test_image_search(client):
    buffer = io.BytesIO()
    Image.new("RGB", (16, 16), (255, 0, 0)).save(buffer, format="PNG")

    response = client.post("/search/image", content=buffer.getvalue())

    assert response.status_code == 200
    assert response.json()["results"][0]["artwork_id"] == "a2"
    assert client.post("/search/image", content=b"not an image").json() == {"results": []}


def test_suggestions_and_trending(client):
    assert client.get("/search/suggestions", params={"q": "oce"}).json()["suggestions"][0] == "Ocean Dreams"
    assert len(client.get("/search/trending", params={"limit": 2}).json()["trending"]) == 2


def test_interaction_flow(client):
    for _ in range(3):
        response = client.post(
            "/interactions",
            json={
                "user_id": "u1",
                "interaction_type": "purchase",
                "target_id": "x1",
                "artwork_attributes": {"medium": "oil", "price": 2500},
            },
        )
        assert response.status_code == 201

    profile = client.get("/users/u1/profile").json()
    assert profile["aesthetic_preferences"]["medium_preferences"][0] == "oil"
    assert profile["experience_level"] == "intermediate"

    insights = client.get("/users/u1/insights").json()
    assert insights["top_mediums"] == ["oil"]

    recommendations = client.post("/users/u1/recommendations", json={"limit": 2}).json()["recommendations"]
    assert 0 < len(recommendations) <= 2

    intent = client.get("/users/u1/purchase-intent/a1").json()
    assert 0 < intent["purchase_intent"] <= 100


def test_unknown_interaction_type_is_rejected(client):
    response = client.post(
        "/interactions", json={"user_id": "u1", "interaction_type": "teleport", "target_id": "a1"}
    )

    assert response.status_code == 400


def test_write_failures_surface_as_unavailable(client, repository, monkeypatch):
    def fail(_event):
        raise RuntimeError("disk full")

    monkeypatch.setattr(repository, "append_interaction", fail)
    response = client.post("/interactions", json={"user_id": "u1", "interaction_type": "view", "target_id": "a1"})

    assert response.status_code == 503
    assert response.json()["collaborator"] == "repository"


def test_insights_survive_read_failures(client, repository, monkeypatch):
    def fail(_user_id):
        raise RuntimeError("replica lagging")

    monkeypatch.setattr(repository, "get_taste_profile", fail)
    response = client.get("/users/u9/insights")

    assert response.status_code == 200
    assert response.json()["top_mediums"] == []


def test_unconfigured_app_reports_error():
    client = TestClient(create_app())

    assert client.get("/health").status_code == 200
    assert client.post("/search", json={"query": "ocean"}).status_code == 500
