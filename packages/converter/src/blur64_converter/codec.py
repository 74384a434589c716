"""
Pillow-backed image codec.

Reads source dimensions and runs the placeholder pipeline:
resize (fit + kernel) -> optional modulation -> optional blur -> encode.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from blur64_shared.protocol import (
    BlurOptions,
    Dimensions,
    FitStrategy,
    ImageFormat,
    MetadataError,
    ResizeKernel,
)

from .adjust import blur, modulate, needs_modulation

logger = logging.getLogger(__name__)

CodecSource = Union[bytes, Path]

KERNELS: dict[str, Image.Resampling] = {
    "nearest": Image.Resampling.NEAREST,
    "linear": Image.Resampling.BILINEAR,
    "cubic": Image.Resampling.BICUBIC,
    "mitchell": Image.Resampling.BICUBIC,
    "lanczos2": Image.Resampling.LANCZOS,
    "lanczos3": Image.Resampling.LANCZOS,
}

PIL_FORMATS: dict[str, str] = {
    "avif": "AVIF",
    "webp": "WEBP",
    "jpeg": "JPEG",
    "png": "PNG",
}

# EXIF orientations that swap width and height
TRANSPOSED_ORIENTATIONS = frozenset({5, 6, 7, 8})
EXIF_ORIENTATION_TAG = 0x0112


@dataclass
class Modulation:
    brightness: float = 1.0
    saturation: float = 1.2
    hue: float = 0.0
    lightness: float = 0.0


@dataclass
class TransformOptions:
    """Everything the codec needs to produce one placeholder."""
    width: int
    height: int
    fit: FitStrategy = "inside"
    kernel: ResizeKernel = "lanczos3"
    modulation: Modulation | None = None
    format: ImageFormat = "avif"
    quality: int = 20
    format_options: dict[str, Any] = field(default_factory=dict)
    blur: BlurOptions | None = None


class ImageCodec(Protocol):
    """Image capability used by the placeholder pipeline."""

    def read_metadata(self, source: CodecSource) -> Dimensions: ...

    def transform(self, source: CodecSource, options: TransformOptions) -> bytes: ...


def _open(source: CodecSource) -> Image.Image:
    if isinstance(source, bytes):
        return Image.open(io.BytesIO(source))
    return Image.open(source)


def _normalize(img: Image.Image) -> Image.Image:
    im = ImageOps.exif_transpose(img)
    has_alpha = im.mode in ("RGBA", "LA") or (
        im.mode == "P" and "transparency" in im.info
    )
    return im.convert("RGBA" if has_alpha else "RGB")


def resize(img: Image.Image, width: int, height: int, fit: FitStrategy, kernel: ResizeKernel) -> Image.Image:
    """Resize into the target box with the given fit, never enlarging."""
    method = KERNELS[kernel]
    src_w, src_h = img.size

    if fit == "fill":
        if width >= src_w and height >= src_h:
            return img
        return img.resize((min(width, src_w), min(height, src_h)), method)

    if fit in ("inside", "contain"):
        scale = min(width / src_w, height / src_h)
    else:
        scale = max(width / src_w, height / src_h)
    if scale >= 1:
        return img

    if fit == "inside":
        return ImageOps.contain(img, (width, height), method)
    if fit == "contain":
        background = (0, 0, 0, 0) if img.mode == "RGBA" else (0, 0, 0)
        return ImageOps.pad(img, (width, height), method, color=background)
    if fit == "cover":
        return ImageOps.fit(img, (width, height), method)

    # outside: smallest size covering the box, aspect kept, no crop
    new_size = (max(1, round(src_w * scale)), max(1, round(src_h * scale)))
    return img.resize(new_size, method)


def encode(img: Image.Image, fmt: ImageFormat, quality: int, format_options: dict[str, Any]) -> bytes:
    if fmt == "jpeg" and img.mode != "RGB":
        img = img.convert("RGB")

    if fmt == "jpeg":
        save_kwargs: dict[str, Any] = {"quality": quality, "optimize": True, "progressive": True}
    elif fmt == "webp":
        save_kwargs = {"quality": quality, "method": 6}
    elif fmt == "png":
        save_kwargs = {"optimize": True}
    else:
        save_kwargs = {"quality": quality}
    save_kwargs.update(format_options)

    buf = io.BytesIO()
    img.save(buf, format=PIL_FORMATS[fmt], **save_kwargs)
    return buf.getvalue()


class PillowCodec:
    """ImageCodec implementation on Pillow, numpy and OpenCV."""

    def read_metadata(self, source: CodecSource) -> Dimensions:
        try:
            with _open(source) as img:
                width, height = img.size
                orientation = img.getexif().get(EXIF_ORIENTATION_TAG)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise MetadataError(f"Failed to read image metadata: {e}") from e

        if not width or not height:
            raise MetadataError("Failed to read image metadata")
        if orientation in TRANSPOSED_ORIENTATIONS:
            width, height = height, width
        return Dimensions(width=width, height=height)

    def transform(self, source: CodecSource, options: TransformOptions) -> bytes:
        with _open(source) as img:
            n_frames = getattr(img, "n_frames", 1)
            if n_frames != 1:
                logger.debug("Multi-frame source, using first frame")
            im = _normalize(img)

        im = resize(im, options.width, options.height, options.fit, options.kernel)

        mod = options.modulation
        if mod is not None and needs_modulation(mod.brightness, mod.saturation, mod.hue, mod.lightness):
            im = modulate(im, mod.brightness, mod.saturation, mod.hue, mod.lightness)

        if options.blur is not None:
            im = blur(im, options.blur.sigma, options.blur.min_amplitude)

        data = encode(im, options.format, options.quality, options.format_options)
        logger.debug(
            "Encoded %dx%d %s placeholder (%d bytes)",
            im.width, im.height, options.format, len(data),
        )
        return data
