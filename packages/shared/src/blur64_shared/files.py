"""
Source handling utilities for library callers, app and CLI
"""

from __future__ import annotations

from pathlib import Path

from .protocol import Source

ALLOWED_IMG_EXTS: frozenset[str] = frozenset(
    {".png", ".jpg", ".jpeg", ".webp", ".avif", ".gif", ".tif", ".tiff", ".bmp"}
)

REMOTE_SCHEMES: tuple[str, ...] = ("http://", "https://")


def is_remote_url(src: Source) -> bool:
    """True if src is a string with an http or https scheme."""
    return isinstance(src, str) and src.startswith(REMOTE_SCHEMES)


def has_image_ext(filename: str) -> bool:
    return Path(filename).suffix.lower() in ALLOWED_IMG_EXTS


def as_codec_source(src: Source) -> bytes | Path:
    """Local sources go straight to the codec: bytes as-is, strings as paths."""
    if isinstance(src, (bytes, bytearray)):
        return bytes(src)
    return Path(src)
