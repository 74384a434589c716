"""
Option and result types for blur placeholder generation.

Flow:
    caller -> normalize (source + options) -> Blur64Options
    Blur64Options -> validate_options (raises ValidationError before any I/O)
    pipeline -> Blur64ImageData (width, height, blurDataURL)
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, Mapping, Union

from .http import FetchPolicy

# Type literals
ImageFormat = Literal["avif", "webp", "jpeg", "png"]
FitStrategy = Literal["cover", "contain", "fill", "inside", "outside"]
ResizeKernel = Literal["nearest", "linear", "cubic", "mitchell", "lanczos2", "lanczos3"]

SUPPORTED_FORMATS: tuple[str, ...] = ("avif", "webp", "jpeg", "png")
SUPPORTED_FITS: tuple[str, ...] = ("cover", "contain", "fill", "inside", "outside")
SUPPORTED_KERNELS: tuple[str, ...] = ("nearest", "linear", "cubic", "mitchell", "lanczos2", "lanczos3")


class Blur64Error(Exception):
    """Base error for placeholder generation."""
    pass


class ValidationError(Blur64Error):
    """Raised when an option is outside its documented domain."""
    pass


class MetadataError(Blur64Error):
    """Raised when the source image dimensions cannot be read."""
    pass


@dataclass(frozen=True)
class Dimensions:
    """A width/height pair. Also used for pair-form size and ratio."""
    width: float
    height: float


@dataclass(frozen=True)
class BlurOptions:
    """Gaussian blur settings. min_amplitude bounds the kernel radius."""
    sigma: float
    min_amplitude: float = 0.2


SizeInput = Union[float, Dimensions, None]
RatioInput = Union[float, Dimensions, None]
BlurInput = Union[float, BlurOptions, Literal[False], None]
Source = Union[str, bytes, Path]


@dataclass
class Blur64Options:
    """
    Placeholder options. Only src is required; everything else
    has the defaults a typical blur placeholder wants.
    """
    src: Source | None = None

    size: SizeInput = None
    scale: float | None = None
    ratio: RatioInput = None

    blur_radius: BlurInput = 4
    quality: int = 20
    format: ImageFormat = "avif"
    format_options: dict[str, Any] = field(default_factory=dict)

    brightness: float = 1
    saturation: float = 1.2
    hue: float = 0
    lightness: float = 0

    fit: FitStrategy = "inside"
    kernel: ResizeKernel = "lanczos3"

    # Fetch policy: delays and timeout in milliseconds, revalidate in seconds
    retries: int = 2
    retry_delay: int = 300
    timeout: int = 30000
    revalidate: int | Literal[False] | None = None

    def fetch_policy(self) -> FetchPolicy:
        return FetchPolicy(
            retries=self.retries,
            retry_delay_ms=self.retry_delay,
            timeout_ms=self.timeout,
            revalidate_seconds=self.revalidate,
        )


@dataclass
class Blur64ImageData:
    """Result of placeholder generation."""
    width: int = 0
    height: int = 0
    blur_data_url: str | None = None

    @property
    def placeholder(self) -> Literal["blur", "empty"]:
        return "blur" if self.blur_data_url else "empty"

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "blurDataURL": self.blur_data_url,
        }


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _parse_pair(value: Any) -> Any:
    """Turn {"width": w, "height": h} into Dimensions, leave anything else alone."""
    if isinstance(value, Mapping) and "width" in value and "height" in value:
        return Dimensions(width=value["width"], height=value["height"])
    return value


def _parse_blur(value: Any) -> Any:
    if isinstance(value, Mapping) and "sigma" in value:
        return BlurOptions(
            sigma=value["sigma"],
            min_amplitude=value.get("min_amplitude", value.get("minAmplitude", 0.2)),
        )
    return value


_CAMEL_ALIASES = {
    "blurRadius": "blur_radius",
    "formatOptions": "format_options",
    "retryDelay": "retry_delay",
}


def parse_options(data: Mapping[str, Any] | None) -> Blur64Options:
    """
    Build Blur64Options from a plain mapping (JSON body, form, kwargs).

    Accepts both snake_case and the camelCase names used by web clients.
    Unknown keys raise ValidationError.
    """
    if data is None:
        return Blur64Options()

    known = {f.name for f in fields(Blur64Options)}
    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        name = _CAMEL_ALIASES.get(key, key)
        if name not in known:
            raise ValidationError(f"Unknown option: {key}")
        kwargs[name] = value

    for name in ("size", "ratio"):
        if name in kwargs:
            kwargs[name] = _parse_pair(kwargs[name])
    if "blur_radius" in kwargs:
        kwargs["blur_radius"] = _parse_blur(kwargs["blur_radius"])
    if kwargs.get("format_options") is None:
        kwargs.pop("format_options", None)

    return Blur64Options(**kwargs)


def _parse_number(text: str, name: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise ValidationError(f"{name} must be a number, got {text!r}") from None
    return int(value) if value.is_integer() else value


def _parse_pair_text(text: str, separators: str, name: str) -> float | Dimensions:
    text = text.strip()
    for sep in separators:
        if sep in text:
            w, _, h = text.partition(sep)
            return Dimensions(width=_parse_number(w, name), height=_parse_number(h, name))
    return _parse_number(text, name)


def parse_size_text(text: str) -> float | Dimensions:
    """Parse "24" as 24 and "32x18" as Dimensions(32, 18)."""
    return _parse_pair_text(text.lower(), "x", "size")


def parse_ratio_text(text: str) -> float | Dimensions:
    """Parse "1.5" as 1.5, and "16:9" or "16/9" as Dimensions(16, 9)."""
    return _parse_pair_text(text, ":/", "ratio")


def _check_positive_pair(name: str, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, Dimensions):
        if not (_is_number(value.width) and _is_number(value.height)):
            raise ValidationError(f"{name} width and height must be numbers")
        if value.width <= 0 or value.height <= 0:
            raise ValidationError(f"{name} value(s) must be positive")
        return
    if not _is_number(value):
        raise ValidationError(f"{name} must be a number or a width/height pair")
    if value <= 0:
        raise ValidationError(f"{name} value(s) must be positive")


def validate_options(options: Blur64Options) -> None:
    """Check every option against its domain. Raises ValidationError."""
    src = options.src
    if not src or not isinstance(src, (str, bytes, bytearray, Path)):
        raise ValidationError("src is required")

    if options.scale is not None:
        if not _is_number(options.scale) or options.scale <= 0 or options.scale > 1:
            raise ValidationError("scale must be between 0 and 1")

    _check_positive_pair("size", options.size)
    _check_positive_pair("ratio", options.ratio)

    blur = options.blur_radius
    if blur is not None and blur is not False:
        if isinstance(blur, BlurOptions):
            if not _is_number(blur.sigma) or blur.sigma <= 0:
                raise ValidationError("blur sigma must be > 0")
            if not _is_number(blur.min_amplitude) or not 0 < blur.min_amplitude < 1:
                raise ValidationError("blur min_amplitude must be between 0 and 1")
        elif not _is_number(blur) or blur <= 0:
            raise ValidationError("blurRadius must be > 0, false, or a BlurOptions object")

    if not _is_number(options.quality) or options.quality < 0 or options.quality > 100:
        raise ValidationError("quality must be between 0 and 100")
    if options.format not in SUPPORTED_FORMATS:
        raise ValidationError(f"Invalid format option: {options.format}")
    if not isinstance(options.format_options, Mapping):
        raise ValidationError("formatOptions must be an object")

    if not _is_number(options.brightness) or options.brightness < 0:
        raise ValidationError("brightness must be >= 0")
    if not _is_number(options.saturation) or options.saturation < 0:
        raise ValidationError("saturation must be >= 0")
    if not _is_number(options.hue):
        raise ValidationError("hue must be a number")
    if not _is_number(options.lightness):
        raise ValidationError("lightness must be a number")

    if options.fit not in SUPPORTED_FITS:
        raise ValidationError(f"Invalid fit option: {options.fit}")
    if options.kernel not in SUPPORTED_KERNELS:
        raise ValidationError(f"Invalid kernel option: {options.kernel}")

    if not isinstance(options.retries, int) or isinstance(options.retries, bool) or options.retries < 0:
        raise ValidationError("retries must be a non-negative integer")
    if not _is_number(options.retry_delay) or options.retry_delay < 0:
        raise ValidationError("retryDelay must be a non-negative integer")
    if not _is_number(options.timeout) or options.timeout <= 0:
        raise ValidationError("timeout must be a positive integer")

    revalidate = options.revalidate
    if revalidate is not None and revalidate is not False:
        if not _is_number(revalidate) or revalidate < 0:
            raise ValidationError("revalidate must be a non-negative integer")
