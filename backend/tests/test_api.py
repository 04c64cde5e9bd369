"""API integration tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from vectortext.api import dependencies as deps
from vectortext.app import app
from vectortext.core.errors import CorpusReadError


@pytest.fixture
def client() -> TestClient:
    with TestClient(app) as test_client:
        yield test_client


def _seed_and_index(client: TestClient) -> list[int]:
    store = deps.get_message_store()
    ids = [
        store.add_message(1, "+15550100", "gate code is 4521", 1_700_000_000_000),
        store.add_message(2, "+15550101", "let's discuss the roof repair budget", 1_700_000_100_000),
        store.add_message(3, "+15550102", "thanks for dinner", 1_700_000_200_000),
    ]
    resp = client.post("/index")
    assert resp.status_code == 202
    assert resp.json() == {"status": "started"}
    outcome = deps.get_indexing_job().wait(timeout=10)
    assert outcome is not None
    return ids


def test_health(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True


def test_index_and_search_flow(client: TestClient) -> None:
    gate, _, _ = _seed_and_index(client)

    status = client.get("/index/status").json()
    assert status["running"] is False
    assert status["state"] == "completed"
    assert status["last_outcome"]["processed"] == 3

    resp = client.post("/search", json={"query": "what is the gate code", "max_results": 3})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["found"] is True
    assert payload["results"][0]["message_id"] == gate
    assert payload["results"][0]["similarity"] == 1.0
    assert payload["count"] == len(payload["results"])


def test_search_clamps_arguments(client: TestClient) -> None:
    _seed_and_index(client)

    resp = client.post(
        "/search", json={"query": "gate code", "max_results": 100, "similarity_threshold": 1.5}
    )

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["threshold"] == 1.0
    assert payload["count"] == 1


def test_search_without_matches(client: TestClient) -> None:
    resp = client.post("/search", json={"query": "gate code"})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["found"] is False
    assert payload["results"] == []
    assert payload["message"]


def test_blank_query_is_rejected(client: TestClient) -> None:
    resp = client.post("/search", json={"query": "   "})
    assert resp.status_code == 422


def test_context_endpoint(client: TestClient) -> None:
    _seed_and_index(client)

    resp = client.post("/context", json={"query": "gate code"})

    assert resp.status_code == 200
    assert "gate code is 4521" in resp.json()["context"]


def test_cancel_when_idle(client: TestClient) -> None:
    resp = client.post("/index/cancel")
    assert resp.status_code == 200
    assert resp.json() == {"cancelled": False}


def test_concurrent_index_request_conflicts(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    job = deps.get_indexing_job()
    monkeypatch.setattr(type(job), "is_running", property(lambda self: True))

    resp = client.post("/index")

    assert resp.status_code == 409


def test_stats_and_metrics(client: TestClient) -> None:
    _seed_and_index(client)
    client.post("/search", json={"query": "gate code"})

    stats = client.get("/stats").json()
    assert stats["total_messages"] == 3
    assert stats["embedded_messages"] == 3
    assert stats["embedding_dimension"] == 384
    assert stats["corpus"]["total_documents"] == 3

    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "vtxt_search_requests_total" in metrics.text
    assert "vtxt_index_runs_total" in metrics.text


def test_unreadable_store_returns_503(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    def unreadable(batch_size: int):
        raise CorpusReadError("disk I/O error")

    monkeypatch.setattr(deps.get_message_store(), "iter_embedded_batches", unreadable)

    resp = client.post("/search", json={"query": "gate code"})

    assert resp.status_code == 503
    assert "disk I/O error" in resp.json()["detail"]
