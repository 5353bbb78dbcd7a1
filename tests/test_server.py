"""Tests for the HTTP API."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from tests.conftest import ALEX, BOOK_CLUB, BOSS, GAMING, NOBODY, WORK, audit_count
from truename.config import TrueNameConfig
from truename.db import Database
from truename.server import create_app


@pytest.fixture
def server_config(seeded_db_path) -> TrueNameConfig:
    return TrueNameConfig.model_validate({"database": {"path": str(seeded_db_path)}})


@pytest.fixture
def client(seeded_db_path, server_config):
    database = Database(database_path=seeded_db_path)
    app = create_app(database, server_config)
    with TestClient(app) as test_client:
        yield test_client


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_ready(self, client):
        response = client.get("/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready"}

    def test_not_ready_when_database_fails(self, client):
        client.app.state.database.ping = AsyncMock(side_effect=OSError("gone"))

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json() == {"status": "unavailable"}


class TestResolveRoutes:
    def test_resolve_preferred(self, client):
        response = client.get(f"/resolve/{ALEX}")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Alex"
        assert data["source"] == "preferred_fallback"
        assert data["metadata"]["fallback_reason"] == "no_specific_request"

    def test_resolve_with_requester_and_context(self, client):
        response = client.get(
            f"/resolve/{ALEX}", params={"requester_id": BOSS, "context": GAMING}
        )

        data = response.json()
        assert data["name"] == "Alexander Smith"
        assert data["source"] == "consent_based"
        assert data["metadata"]["requested_context"] == GAMING

    def test_resolve_context(self, client):
        response = client.get(f"/resolve/{ALEX}", params={"context": GAMING})
        assert response.json()["name"] == "Al"

    def test_unknown_target_gets_placeholder(self, client):
        response = client.get(f"/resolve/{NOBODY}")

        assert response.status_code == 200
        assert response.json()["name"] == "Anonymous User"

    def test_batch(self, client):
        response = client.post(
            f"/resolve/{ALEX}/batch", json={"contexts": [WORK, GAMING, BOOK_CLUB]}
        )

        assert response.status_code == 200
        results = response.json()["results"]
        assert [r["name"] for r in results] == ["Alexander Smith", "Al", "Alex"]
        assert [r["source"] for r in results] == [
            "context_specific",
            "context_specific",
            "preferred_fallback",
        ]

    def test_batch_rejects_empty_list(self, client):
        response = client.post(f"/resolve/{ALEX}/batch", json={"contexts": []})
        assert response.status_code == 422

    def test_requests_are_audited(self, client, seeded_db_path):
        client.get(f"/resolve/{ALEX}", params={"requester_id": BOSS})
        client.post(f"/resolve/{ALEX}/batch", json={"contexts": [WORK, GAMING]})

        assert audit_count(seeded_db_path, ALEX) == 3
