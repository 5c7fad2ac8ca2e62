import base64
import io
import struct
import zlib

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from facescan.pipeline import FaceScanPipeline
from server import routes
from server.app import app
from server.llm import LLMError, LLMResponse, LLMUsage, LLMValidationError


VERDICT = {
    "symmetry": {"score": 8.0, "analysis": "Balanced."},
    "skin_quality": {"score": 7.0, "analysis": "Clear."},
    "face_shape": "Oval",
    "strengths": ["Jawline"],
    "suggestions": ["Short beard", "Sunscreen", "Posture"],
}

client = TestClient(app)


def png_header(width, height):
    """A PNG that declares the given size but carries no pixel data."""

    def chunk(kind, data):
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IDAT", zlib.compress(b"")) + chunk(b"IEND", b"")


class FakeRouter:
    def __init__(self, outcome):
        self.outcome = outcome
        self.kwargs = None

    def complete_with_fallback(self, **kwargs):
        self.kwargs = kwargs
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return LLMResponse(content=self.outcome, usage=LLMUsage(provider="fake", model="fake-1"))


@pytest.fixture
def fake_router(monkeypatch):
    router = FakeRouter(VERDICT)
    monkeypatch.setattr(routes, "get_router", lambda: router)
    return router


@pytest.mark.parametrize(
    "path,field",
    [("/api/analyze-face", "photo"), ("/api/analisar-rosto", "photo"), ("/api/analisar-rosto", "foto")],
)
def test_analyze_face(fake_router, face_png, path, field):
    res = client.post(path, files={field: ("me.png", face_png, "image/png")})
    assert res.status_code == 200
    assert res.json() == VERDICT
    assert res.headers["X-Request-ID"]
    assert fake_router.kwargs["image_data"] == face_png
    assert fake_router.kwargs["image_mime_type"] == "image/png"


def test_analyze_face_missing_photo(fake_router):
    res = client.post("/api/analyze-face")
    assert res.status_code == 400
    assert "error" in res.json()
    assert fake_router.kwargs is None


def test_analyze_face_invalid_image(fake_router):
    res = client.post("/api/analyze-face", files={"photo": ("x.jpg", b"definitely not a jpeg", "image/jpeg")})
    assert res.status_code == 400
    assert res.json()["error"].startswith("Invalid image")


def test_analyze_face_too_large(fake_router, face_png, monkeypatch):
    monkeypatch.setattr(routes.SETTINGS, "max_upload_mb", 0.0001)
    res = client.post("/api/analyze-face", files={"photo": ("me.png", face_png, "image/png")})
    assert res.status_code == 400
    assert "too large" in res.json()["error"]


def test_analyze_face_too_many_pixels(fake_router):
    res = client.post("/api/analyze-face", files={"photo": ("big.png", png_header(8000, 6000), "image/png")})
    assert res.status_code == 400
    assert "too large" in res.json()["error"]
    assert fake_router.kwargs is None


def test_analyze_face_decompression_bomb(fake_router, monkeypatch):
    monkeypatch.setattr(routes.SETTINGS, "max_image_megapixels", 1000)
    res = client.post("/api/analisar-rosto", files={"foto": ("big.png", png_header(20000, 10000), "image/png")})
    assert res.status_code == 400
    assert "too large" in res.json()["error"]
    assert fake_router.kwargs is None


def test_analyze_face_unparseable_reply(monkeypatch, face_png):
    monkeypatch.setattr(routes, "get_router", lambda: FakeRouter(LLMValidationError("no json", "blah")))
    res = client.post("/api/analyze-face", files={"photo": ("me.png", face_png, "image/png")})
    assert res.status_code == 502
    assert "valid JSON" in res.json()["error"]


def test_analyze_face_provider_failure(monkeypatch, face_png):
    monkeypatch.setattr(routes, "get_router", lambda: FakeRouter(LLMError("quota")))
    res = client.post("/api/analyze-face", files={"photo": ("me.png", face_png, "image/png")})
    assert res.status_code == 502
    assert "quota" in res.json()["error"]


def test_analyze_face_unconfigured(monkeypatch, face_png):
    def no_provider():
        raise ValueError("At least one provider must be configured")

    monkeypatch.setattr(routes, "get_router", no_provider)
    res = client.post("/api/analyze-face", files={"photo": ("me.png", face_png, "image/png")})
    assert res.status_code == 503
    assert "error" in res.json()


def test_metrics(monkeypatch, fake_source, face_png):
    monkeypatch.setattr(routes, "get_pipeline", lambda: FaceScanPipeline(fake_source))
    res = client.post("/api/metrics", files={"photo": ("me.png", face_png, "image/png")}, data={"mode": "heatmap"})
    assert res.status_code == 200
    body = res.json()
    assert body["scores"] == {"symmetry": 100, "texture": 0, "oiliness": 100, "beard_density": 80}
    assert [b["value"] for b in body["bars"]] == [100, 0, 100, 80]
    assert body["mode"] == "heatmap"
    assert body["landmarks"] == 468
    assert body["request_id"] == res.headers["X-Request-ID"]
    overlay = Image.open(io.BytesIO(base64.b64decode(body["overlay_png_base64"])))
    assert overlay.size == (320, 240)


def test_metrics_no_face(monkeypatch, empty_source, face_png):
    monkeypatch.setattr(routes, "get_pipeline", lambda: FaceScanPipeline(empty_source))
    res = client.post("/api/metrics", files={"photo": ("me.png", face_png, "image/png")})
    assert res.status_code == 422
    assert res.json() == {"error": "No face detected in photo"}


def test_metrics_unknown_mode(face_png):
    res = client.post("/api/metrics", files={"photo": ("me.png", face_png, "image/png")}, data={"mode": "xray"})
    assert res.status_code == 400


def test_health():
    for path in ("/health", "/healthz"):
        res = client.get(path)
        assert res.status_code == 200
        assert res.json()["status"] == "ok"
    assert "version" in client.get("/version").json()


def test_unknown_route_uses_error_shape():
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert "error" in res.json()
