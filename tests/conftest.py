# tests/conftest.py
import io
import struct
import zlib

import pytest
from PIL import Image

from blur64_shared.http import TransportResponse


# --- Test doubles ---
class FakeTransport:
    """Plays back a script of responses/exceptions, one per request."""

    def __init__(self, script):
        self.script = list(script)
        self.calls = []

    def request(self, url, *, timeout, headers):
        self.calls.append({"url": url, "timeout": timeout, "headers": dict(headers)})
        step = self.script.pop(0) if self.script else ConnectionError("script exhausted")
        if isinstance(step, BaseException):
            raise step
        return step


class RecordingSleep:
    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


def ok(content=b"payload"):
    return TransportResponse(status=200, content=content)


def status(code):
    return TransportResponse(status=code, content=b"")


def make_image_bytes(width, height, fmt="PNG", mode="RGB", color=(200, 80, 40), exif_orientation=None):
    img = Image.new(mode, (width, height), color)
    buf = io.BytesIO()
    if exif_orientation is not None:
        exif = img.getexif()
        exif[0x0112] = exif_orientation
        img.save(buf, format=fmt, exif=exif.tobytes())
    else:
        img.save(buf, format=fmt)
    return buf.getvalue()


def _png_chunk(tag, data):
    body = tag + data
    return struct.pack(">I", len(data)) + body + struct.pack(">I", zlib.crc32(body) & 0xFFFFFFFF)


def make_png_header(width, height):
    """A PNG that only declares its size; no pixel data follows."""
    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + _png_chunk(b"IHDR", ihdr) + _png_chunk(b"IEND", b"")


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def landscape_png():
    return make_image_bytes(160, 90)


@pytest.fixture
def portrait_png():
    return make_image_bytes(90, 160)
