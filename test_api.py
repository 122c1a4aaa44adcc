#!/usr/bin/env python3
"""
Test script for the HTTP API.
"""
import pytest
from fastapi.testclient import TestClient

from sts_stats.api import server
from sts_stats.api.server import create_app


@pytest.fixture
def client(sample_runs, make_manager):
    return TestClient(create_app(make_manager(sample_runs)))


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert "timestamp" in body


def test_runs_with_filters(client):
    assert len(client.get("/api/runs").json()) == 4

    response = client.get("/api/runs", params={"character": "ironclad", "victories_only": "true"})
    assert [r["play_id"] for r in response.json()] == ["ic-1"]

    response = client.get("/api/runs", params={"min_ascension": 20})
    assert [r["play_id"] for r in response.json()] == ["si-1"]


def test_character_runs(client):
    response = client.get("/api/runs/THE_SILENT")
    assert response.status_code == 200
    assert [r["play_id"] for r in response.json()] == ["si-1"]

    assert client.get("/api/runs/watcher").json() == []


def test_character_runs_unknown(client):
    response = client.get("/api/runs/necromancer")
    assert response.status_code == 404
    body = response.json()
    assert body["code"] == "NOT_FOUND"
    assert body["details"] == "Valid characters: IRONCLAD, THE_SILENT, DEFECT, WATCHER"


def test_stats(client):
    body = client.get("/api/stats").json()
    assert [s["character"] for s in body] == ["IRONCLAD", "THE_SILENT"]
    assert body[0]["win_rate"] == pytest.approx(1 / 3)


def test_character_stats(client):
    lower = client.get("/api/stats/ironclad")
    upper = client.get("/api/stats/IRONCLAD")
    assert lower.status_code == 200
    assert lower.json() == upper.json()
    assert lower.json()["max_floor"] == 51


def test_character_stats_without_runs(client):
    response = client.get("/api/stats/DEFECT")
    assert response.status_code == 404
    assert response.json() == {"error": "Character not found", "code": "NOT_FOUND"}


def test_export(client):
    body = client.get("/api/export").json()
    assert len(body["runs"]) == 4
    assert len(body["character_stats"]) == 2
    assert isinstance(body["export_timestamp"], int)


def test_characters(client):
    body = client.get("/api/characters").json()
    assert body == [
        {"id": "IRONCLAD", "name": "Ironclad"},
        {"id": "THE_SILENT", "name": "Silent"},
        {"id": "DEFECT", "name": "Defect"},
        {"id": "WATCHER", "name": "Watcher"},
    ]


def test_runs_path_configuration(client, sample_runs, tmp_path):
    info = client.get("/api/runs-path").json()
    assert info == {
        "current_path": str(sample_runs),
        "is_custom": False,
        "auto_detected_path": str(sample_runs),
        "path_exists": True,
    }

    other = tmp_path / "other"
    other.mkdir()
    response = client.put("/api/runs-path", json={"path": str(other)})
    assert response.status_code == 200
    assert response.json()["current_path"] == str(other)
    assert client.get("/api/runs").json() == []

    response = client.put("/api/runs-path", json={"path": str(tmp_path / "missing")})
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_PATH"
    assert client.get("/api/runs-path").json()["current_path"] == str(other)

    response = client.delete("/api/runs-path")
    assert response.json()["is_custom"] is False
    assert len(client.get("/api/runs").json()) == 4


def test_openapi_document(client):
    schema = client.get("/openapi.json").json()
    assert schema["info"]["title"] == "STS Stat Viewer API"
    assert "/api/runs/{character}" in schema["paths"]
    assert "RunMetrics" in schema["components"]["schemas"]


def test_cors_follows_setting(sample_runs, make_manager):
    manager = make_manager(sample_runs)
    headers = {"Origin": "http://localhost:1420"}

    open_client = TestClient(create_app(manager))
    assert open_client.get("/api/health", headers=headers).headers["access-control-allow-origin"] == "*"

    closed_client = TestClient(create_app(manager, enable_cors=False))
    assert closed_client.get("/api/health", headers=headers).headers.get("access-control-allow-origin") is None


def test_server_thread_passes_cors_setting(sample_runs, make_manager, monkeypatch):
    started = []

    class FakeServer:
        def __init__(self, config):
            self.config = config
            started.append(self)

        def run(self):
            pass

    monkeypatch.setattr(server.uvicorn, "Server", FakeServer)

    thread = server.start_server_in_thread(make_manager(sample_runs), port=3131, enable_cors=False)
    thread.join(timeout=5)

    client = TestClient(started[0].config.app)
    response = client.get("/api/health", headers={"Origin": "http://localhost:1420"})
    assert response.status_code == 200
    assert response.headers.get("access-control-allow-origin") is None
