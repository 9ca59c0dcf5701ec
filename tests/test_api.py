from fastapi.testclient import TestClient
import pytest

from apps.api_server.main import app


@pytest.fixture()
def client(monkeypatch) -> TestClient:
    monkeypatch.delenv("GREZZI_PROFILE", raising=False)
    return TestClient(app)


def _payload(**overrides):
    payload = {
        "groups": {
            "LOT-A": [
                {"width": 10, "height": 10},
                {"width": 11, "height": 11},
                {"width": 50, "height": 50},
            ],
        },
        "tolerance": {"min": 0, "max": 2},
    }
    payload.update(overrides)
    return payload


def test_health(client: TestClient):
    assert client.get("/health").json() == {"status": "ok"}


def test_cluster_action_returns_clusters(client: TestClient):
    response = client.post("/cluster", json=_payload())
    assert response.status_code == 200
    data = response.json()

    clusters = data["clusters"]["LOT-A"]
    assert [c["size"] for c in clusters] == [2, 1]
    assert clusters[0]["area"] == {"minWidth": 11.0, "minHeight": 11.0, "maxWidth": 12.0, "maxHeight": 12.0}
    assert clusters[1]["units"] == [{"width": 50.0, "height": 50.0}]
    assert data["summary"]["num_clusters"] == 2


def test_cluster_action_uses_profile_tolerance(client: TestClient):
    payload = _payload()
    del payload["tolerance"]

    data = client.post("/cluster", json=payload).json()
    assert data["tolerance"] == {"min": 10.0, "max": 25.0}


def test_cluster_action_rejects_inverted_tolerance(client: TestClient):
    response = client.post("/cluster", json=_payload(tolerance={"min": 3, "max": 1}))
    assert response.status_code == 422
    assert "must not exceed" in response.json()["detail"]


def test_cluster_action_rejects_negative_dimensions(client: TestClient):
    response = client.post("/cluster", json=_payload(groups={"x": [{"width": -1, "height": 2}]}))
    assert response.status_code == 422


def test_cluster_action_requires_groups(client: TestClient):
    assert client.post("/cluster", json=_payload(groups={})).status_code == 422


def test_unknown_profile_is_404(client: TestClient):
    payload = _payload(profile="no-such-profile")
    del payload["tolerance"]

    assert client.post("/cluster", json=payload).status_code == 404


def test_render_action_returns_png(client: TestClient):
    response = client.post("/render", json=_payload())
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")
