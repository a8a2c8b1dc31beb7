from __future__ import annotations

import base64
import io

import pytest
from PIL import Image

from src.absensi.absensi.core.settings import OfficeSettings
from src.absensi.absensi.main import create_app
from tests.fakes import make_container


@pytest.fixture
def office() -> OfficeSettings:
    return OfficeSettings()


@pytest.fixture
def container(office):
    return make_container(office)


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def selfie() -> str:
    buf = io.BytesIO()
    Image.new("RGB", (32, 32), (10, 120, 200)).save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


@pytest.fixture
def auth_headers(client):
    client.post("/register", json={"username": "budi", "password": "secret1", "jabatan": "Staff"})
    resp = client.post("/login", json={"username": "budi", "password": "secret1"})
    return {"Authorization": f"Bearer {resp.get_json()['access_token']}"}
