import io

import pytest

from blur64_backend.app import create_app
from blur64_backend.config import Config
from blur64_backend.services import PlaceholderService
from blur64_shared.protocol import Dimensions

from conftest import FakeTransport, RecordingSleep, make_image_bytes, make_png_header, ok, status


class StubCodec:
    def __init__(self, dimensions=Dimensions(160, 90)):
        self.dimensions = dimensions
        self.options = None

    def read_metadata(self, source):
        return self.dimensions

    def transform(self, source, options):
        self.options = options
        return b"\x01\x02\x03"


def _client(transport=None, codec=None, config=None):
    config = config or Config(retries=1, retry_delay_ms=10, revalidate_seconds=120, default_format="webp")
    service = PlaceholderService(
        config,
        codec=codec,
        transport=transport or FakeTransport([]),
        sleep=RecordingSleep(),
    )
    app = create_app(config, service=service)
    app.config["TESTING"] = True
    return app.test_client()


def test_health():
    assert _client().get("/health").get_json() == {"status": "ok"}


def test_placeholder_from_url_uses_config_defaults():
    transport = FakeTransport([ok(make_image_bytes(160, 90))])
    client = _client(transport=transport)

    resp = client.post("/api/placeholder", json={"src": "https://cdn.example/a.png", "size": 24})

    body = resp.get_json()
    assert resp.status_code == 200
    assert (body["width"], body["height"]) == (160, 90)
    assert body["blurDataURL"].startswith("data:image/webp;base64,")
    assert body["placeholder"] == "blur"
    assert transport.calls[0]["headers"] == {"Cache-Control": "max-age=120"}


def test_request_options_override_config():
    codec = StubCodec()
    client = _client(transport=FakeTransport([ok(b"img")]), codec=codec)

    resp = client.post("/api/placeholder", json={"src": "https://cdn.example/a.png", "format": "png", "quality": 70})

    assert resp.get_json()["blurDataURL"] == "data:image/png;base64,AQID"
    assert codec.options.quality == 70


def test_unreachable_url_gives_empty_placeholder():
    transport = FakeTransport([status(500), status(500)])
    resp = _client(transport=transport).post("/api/placeholder", json={"src": "https://cdn.example/gone.png"})

    assert resp.status_code == 200
    assert resp.get_json() == {"width": 0, "height": 0, "blurDataURL": None, "placeholder": "empty"}
    assert len(transport.calls) == 2


def test_undecodable_remote_image_gives_empty_placeholder():
    transport = FakeTransport([ok(b"<html>not an image</html>")])
    resp = _client(transport=transport).post("/api/placeholder", json={"src": "https://cdn.example/x.png"})

    assert resp.status_code == 200
    assert resp.get_json()["placeholder"] == "empty"


@pytest.mark.parametrize("body", [
    {"src": "/etc/passwd"},
    {"src": "ftp://cdn.example/a.png"},
    {"size": 24},
])
def test_non_url_sources_rejected(body):
    assert _client().post("/api/placeholder", json=body).status_code == 400


def test_invalid_options_rejected():
    resp = _client().post("/api/placeholder", json={"src": "https://cdn.example/a.png", "scale": 3})
    assert resp.status_code == 400
    assert b"scale must be between 0 and 1" in resp.data


def test_non_json_body_rejected():
    assert _client().post("/api/placeholder", data="nope").status_code == 400


def test_upload_with_form_options():
    client = _client()
    data = {
        "file": (io.BytesIO(make_image_bytes(160, 90)), "photo.png"),
        "size": "32x18",
        "format": "png",
        "blur_radius": "false",
        "quality": "40",
    }

    resp = client.post("/api/placeholder/upload", data=data, content_type="multipart/form-data")

    body = resp.get_json()
    assert resp.status_code == 200
    assert (body["width"], body["height"]) == (160, 90)
    assert body["blurDataURL"].startswith("data:image/png;base64,")


def test_upload_ratio_form_field_reaches_codec():
    codec = StubCodec(Dimensions(1600, 900))
    client = _client(codec=codec)
    data = {"file": (io.BytesIO(b"img"), "photo.jpg"), "size": "30", "ratio": "1:1"}

    client.post("/api/placeholder/upload", data=data, content_type="multipart/form-data")

    assert (codec.options.width, codec.options.height) == (30, 30)


def test_upload_with_oversized_header_gives_empty_placeholder():
    data = {"file": (io.BytesIO(make_png_header(20000, 20000)), "huge.png"), "format": "png"}

    resp = _client().post("/api/placeholder/upload", data=data, content_type="multipart/form-data")

    assert resp.status_code == 200
    assert resp.get_json()["placeholder"] == "empty"


def test_upload_requires_file():
    resp = _client().post("/api/placeholder/upload", data={}, content_type="multipart/form-data")
    assert resp.status_code == 400


def test_upload_rejects_non_image_extension():
    data = {"file": (io.BytesIO(b"PK"), "archive.zip")}
    resp = _client().post("/api/placeholder/upload", data=data, content_type="multipart/form-data")
    assert resp.status_code == 400


def test_upload_rejects_bad_number():
    data = {"file": (io.BytesIO(b"img"), "a.png"), "scale": "half"}
    resp = _client().post("/api/placeholder/upload", data=data, content_type="multipart/form-data")
    assert resp.status_code == 400


def test_config_load_from_env(monkeypatch):
    monkeypatch.setenv("BLUR64_RETRIES", "5")
    monkeypatch.setenv("BLUR64_REVALIDATE_SECONDS", "0")
    monkeypatch.setenv("BLUR64_DEFAULT_FORMAT", "WEBP")

    config = Config.load()

    assert config.retries == 5
    assert config.revalidate_seconds is None
    assert config.default_format == "webp"
    assert config.option_defaults()["revalidate"] is None


def test_config_rejects_unknown_format(monkeypatch):
    monkeypatch.setenv("BLUR64_DEFAULT_FORMAT", "bmp")
    with pytest.raises(ValueError):
        Config.load()


def test_service_caps_remote_body_at_upload_limit():
    service = PlaceholderService(Config(max_upload_bytes=1024))
    assert service._transport._max_bytes == 1024
