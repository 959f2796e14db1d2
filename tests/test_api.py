"""Tests for the HTTP endpoints, with the inpainting service stubbed out."""

import asyncio
import base64
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from conftest import FAKE_RESULT, StubInpaintingService
from motoviz import deps, utils
from motoviz.config import settings
from motoviz.main import app
from motoviz.routers import api
from motoviz.services.generation import MotorcycleCustomizer
from motoviz.utils import remove_b64_header


def png_b64(size=(80, 60)) -> str:
    buffer = BytesIO()
    Image.new("RGB", size, (10, 10, 10)).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()


@pytest.fixture
def client(tmp_path):
    service = StubInpaintingService(fail_on={2})
    customizer = MotorcycleCustomizer(service, temp_dir=str(tmp_path / "masks"))
    app.dependency_overrides[api.customizer_dependency] = lambda: customizer
    yield TestClient(app), service
    app.dependency_overrides.clear()


def visualize_body(**overrides):
    body = {
        "image_b64": png_b64(),
        "part": "exhaust",
        "bike_description": "sport bike with red fairings",
        "part_description": "chrome dual exhaust with carbon tips",
        "intensity": "medium",
    }
    body.update(overrides)
    return body


def test_health(client):
    test_client, _ = client
    response = test_client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_parts(client):
    test_client, _ = client
    data = test_client.get("/api/parts").json()
    assert [part["name"] for part in data["parts"]] == ["exhaust", "seat", "handlebar"]
    assert data["parts"][0]["center_y"] == 0.65
    assert [(i["name"], i["scale"]) for i in data["intensities"]] == [
        ("minimal", 0.8),
        ("medium", 1.0),
        ("aggressive", 1.2),
    ]


def test_visualize(client):
    test_client, service = client
    response = test_client.post("/api/visualize", json=visualize_body())

    assert response.status_code == 200
    data = response.json()
    assert data["part"] == "exhaust"
    assert data["intensity"] == "medium"
    assert base64.b64decode(remove_b64_header(data["image"])) == FAKE_RESULT
    assert service.calls[0]["mask_size"] == (80, 60)
    assert "exhaust system" in service.calls[0]["prompt"]


def test_visualize_invalid_part(client):
    test_client, service = client
    response = test_client.post("/api/visualize", json=visualize_body(part="mirror"))
    assert response.status_code == 400
    assert service.calls == []


def test_visualize_invalid_intensity(client):
    test_client, _ = client
    response = test_client.post("/api/visualize", json=visualize_body(intensity="extreme"))
    assert response.status_code == 400


def test_visualize_invalid_base64(client):
    test_client, _ = client
    response = test_client.post("/api/visualize", json=visualize_body(image_b64="not base64!"))
    assert response.status_code == 400


def test_visualize_service_failure(client):
    test_client, _ = client
    assert test_client.post("/api/visualize", json=visualize_body()).status_code == 200

    response = test_client.post("/api/visualize", json=visualize_body())
    assert response.status_code == 500
    assert "Service unavailable" in response.json()["detail"]


def test_visualize_options(client):
    test_client, _ = client
    body = visualize_body()
    del body["intensity"]
    response = test_client.post("/api/visualize/options", json=body)

    assert response.status_code == 200
    options = response.json()["options"]
    assert [option["intensity"] for option in options] == ["minimal", "medium", "aggressive"]
    assert [option["status"] for option in options] == ["success", "error", "success"]
    assert options[1]["image"] is None
    assert "Service unavailable" in options[1]["error"]


class FakeImageResponse:
    status_code = 200

    def __init__(self, content):
        self.content = content


def test_visualize_from_url_fetches_off_event_loop(client, monkeypatch):
    test_client, service = client
    png_bytes = base64.b64decode(remove_b64_header(png_b64(size=(40, 30))))
    fetched = {}

    def fake_get(url, timeout=None):
        try:
            asyncio.get_running_loop()
            fetched["on_loop"] = True
        except RuntimeError:
            fetched["on_loop"] = False
        fetched["url"] = url
        return FakeImageResponse(png_bytes)

    monkeypatch.setattr(utils.requests, "get", fake_get)

    response = test_client.post(
        "/api/visualize", json=visualize_body(image_b64="https://example.com/bike.png")
    )

    assert response.status_code == 200
    assert fetched == {"on_loop": False, "url": "https://example.com/bike.png"}
    assert service.calls[0]["mask_size"] == (40, 30)


def test_visualize_custom_mask(client):
    test_client, service = client
    body = {
        "image_b64": png_b64(),
        "mask_b64": png_b64(),
        "part": "exhaust",
        "bike_description": "cafe racer",
        "part_description": "short megaphone",
    }
    response = test_client.post("/api/visualize/custom-mask", json=body)

    assert response.status_code == 200
    assert response.json()["part"] == "exhaust"
    assert base64.b64decode(remove_b64_header(response.json()["image"])) == FAKE_RESULT
    call = service.calls[0]
    assert call["mask_existed"]
    assert call["prompt"].startswith("cafe racer style motorcycle with custom exhaust installed")


def test_visualize_custom_mask_requires_part(client):
    test_client, service = client
    body = {
        "image_b64": png_b64(),
        "mask_b64": png_b64(),
        "part": "  ",
        "bike_description": "cafe racer",
        "part_description": "short megaphone",
    }
    assert test_client.post("/api/visualize/custom-mask", json=body).status_code == 400
    assert service.calls == []


def test_unconfigured_service(monkeypatch):
    monkeypatch.setattr(settings, "inpaint_api_key", "")
    deps.get_customizer.cache_clear()
    deps.get_inpainting_client.cache_clear()
    try:
        response = TestClient(app).post("/api/visualize", json=visualize_body())
    finally:
        deps.get_customizer.cache_clear()
        deps.get_inpainting_client.cache_clear()

    assert response.status_code == 500
    assert "not configured" in response.json()["detail"]
