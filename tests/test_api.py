"""
Tests for the FastAPI transport: health, tool listing and the JSON-RPC endpoint.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import FakeEmbeddings
from docvec.main import create_app
from docvec.registry import ServiceRegistry


@pytest.fixture
def client(test_settings):
    """TestClient whose lifespan owns and closes the service registry."""
    services = ServiceRegistry(config=test_settings, embeddings=FakeEmbeddings())
    with TestClient(create_app(services)) as test_client:
        yield test_client


def _rpc(method: str, params=None, request_id=1) -> dict:
    body = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        body["params"] = params
    return body


def test_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "timestamp" in response.json()


def test_list_tools(client) -> None:
    response = client.get("/tools")

    assert response.status_code == 200
    assert len(response.json()["tools"]) == 4


def test_rpc_insert_and_find(client) -> None:
    inserted = client.post(
        "/rpc",
        json=_rpc("tools/call", {"name": "insert_document", "arguments": {"text": "HTTP transport document."}}),
    )
    found = client.post(
        "/rpc",
        json=_rpc("tools/call", {"name": "find_similar_documents", "arguments": {"text": "HTTP transport document."}}, 2),
    )

    assert inserted.status_code == 200
    body = inserted.json()
    assert body["jsonrpc"] == "2.0"
    assert body["id"] == 1
    assert "error" not in body
    assert found.json()["result"]["results"][0]["doc_id"] == body["result"]["doc_id"]


def test_rpc_error_returns_400(client) -> None:
    response = client.post("/rpc", json=_rpc("nope"))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "METHOD_NOT_FOUND"
    assert response.json()["id"] == 1


def test_rpc_rejects_non_object_body(client) -> None:
    response = client.post("/rpc", json=[1, 2, 3])

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_REQUEST"
    assert response.json()["id"] is None
