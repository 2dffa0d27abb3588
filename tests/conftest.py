from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from fieldserve.config import Settings
from fieldserve.main import create_app
from fieldserve.store.memory import MemoryStore


# A Wednesday; the surrounding week runs Sunday 2026-10-11 to Saturday 2026-10-17.
FIXED_NOW = datetime(2026, 10, 14, 15, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store(clock):
    return MemoryStore(clock=clock, tz_name="UTC")


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        upload_dir=str(tmp_path / "uploads"),
        seed_sample_data=False,
        enable_metrics=False,
        tz_default="UTC",
        rate_limit="1000/minute",
    )


@pytest.fixture()
def app(settings, store):
    return create_app(settings=settings, store=store)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def make_user(client):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        payload = {
            "username": f"tech{counter['n']}",
            "password": "password123",
            "name": f"Technician {counter['n']}",
        }
        payload.update(overrides)
        resp = client.post("/api/users", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture()
def make_task(client):
    def _make(**overrides):
        payload = {
            "title": "HVAC Maintenance",
            "location_name": "Acme Co. Office",
            "location_address": "789 Oak St, Unit 5",
            "scheduled_date": "2026-10-14T13:00:00",
        }
        payload.update(overrides)
        resp = client.post("/api/tasks", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture()
def make_product(client):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        payload = {
            "name": f"Part {counter['n']}",
            "sku": f"PRT-{counter['n']:03d}",
            "unit_price": 10.0,
            "stock_quantity": 10,
            "low_stock_threshold": 5,
        }
        payload.update(overrides)
        resp = client.post("/api/products", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make
