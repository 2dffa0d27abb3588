import uuid

from fastapi.testclient import TestClient

from fieldserve.config import Settings
from fieldserve.main import create_app


def test_log_level_read_from_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert Settings().log_level == "debug"


def test_request_id_generated_when_missing(client):
    resp = client.get("/api/health")
    request_id = resp.headers["X-Request-ID"]
    assert str(uuid.UUID(request_id)) == request_id


def test_request_ids_differ_between_requests(client):
    first = client.get("/api/health").headers["X-Request-ID"]
    second = client.get("/api/health").headers["X-Request-ID"]
    assert first != second


def test_app_starts_with_configured_log_level(settings):
    settings.log_level = "debug"
    with TestClient(create_app(settings=settings)) as c:
        assert c.get("/api/health").status_code == 200
