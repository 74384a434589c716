"""
Blur placeholder orchestration.

This module handles the high-level workflow:
1. Normalize and validate options (before any I/O)
2. Fetch remote sources with retries
3. Read original dimensions and resolve the target size
4. Run the codec pipeline and package a data URL
"""

from __future__ import annotations

import base64
import dataclasses
import logging
import time
from typing import Any, Callable, Mapping, Union

from blur64_shared.files import as_codec_source, is_remote_url
from blur64_shared.http import Transport, fetch_buffer
from blur64_shared.protocol import (
    Blur64ImageData,
    Blur64Options,
    BlurOptions,
    Source,
    parse_options,
    validate_options,
)

from .codec import CodecSource, ImageCodec, Modulation, PillowCodec, TransformOptions
from .geometry import calculate_target_dimensions

logger = logging.getLogger(__name__)

OptionsInput = Union[Blur64Options, Mapping[str, Any], None]


def normalize_input_options(
    source: Source | Blur64Options,
    options: OptionsInput = None,
) -> Blur64Options:
    """
    Fold the accepted call shapes into one Blur64Options:

        blur64_image(Blur64Options(src=...))
        blur64_image(src, Blur64Options(...))
        blur64_image(src, {"size": 24, ...})
        blur64_image(src)
    """
    if isinstance(source, Blur64Options):
        return source
    if isinstance(options, Blur64Options):
        return dataclasses.replace(options, src=source)
    if options is not None:
        return parse_options({**options, "src": source})
    return Blur64Options(src=source)


def to_data_url(data: bytes, fmt: str) -> str:
    return f"data:image/{fmt};base64,{base64.b64encode(data).decode('ascii')}"


def _blur_settings(options: Blur64Options) -> BlurOptions | None:
    radius = options.blur_radius
    if radius is None or radius is False:
        return None
    if isinstance(radius, BlurOptions):
        return radius
    return BlurOptions(sigma=float(radius))


def build_transform_options(options: Blur64Options, width: int, height: int) -> TransformOptions:
    return TransformOptions(
        width=width,
        height=height,
        fit=options.fit,
        kernel=options.kernel,
        modulation=Modulation(
            brightness=options.brightness,
            saturation=options.saturation,
            hue=options.hue,
            lightness=options.lightness,
        ),
        format=options.format,
        quality=int(options.quality),
        format_options=dict(options.format_options),
        blur=_blur_settings(options),
    )


def blur64_image(
    source: Source | Blur64Options,
    options: OptionsInput = None,
    *,
    codec: ImageCodec | None = None,
    transport: Transport | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Blur64ImageData:
    """
    Generate a blur placeholder for an image.

    Raises:
        ValidationError: If an option is outside its domain
        MetadataError: If the source can't be decoded to read its size

    An unreachable URL returns zero dimensions and no data URL; a failing
    transform returns the original dimensions and no data URL.
    """
    opts = normalize_input_options(source, options)
    validate_options(opts)
    codec = codec or PillowCodec()

    src = opts.src
    if is_remote_url(src):
        buffer = fetch_buffer(src, opts.fetch_policy(), transport, sleep)
        if buffer is None:
            return Blur64ImageData(width=0, height=0, blur_data_url=None)
        image_source: CodecSource = buffer
    else:
        image_source = as_codec_source(src)

    original = codec.read_metadata(image_source)
    target = calculate_target_dimensions(original, opts.size, opts.scale, opts.ratio)
    logger.debug(
        "Resolved %dx%d -> %dx%d",
        original.width, original.height, target.width, target.height,
    )

    blur_data_url: str | None = None
    try:
        data = codec.transform(
            image_source,
            build_transform_options(opts, target.width, target.height),
        )
        blur_data_url = to_data_url(data, opts.format)
    except Exception as e:
        logger.error("Failed to process image: %s: %s", type(e).__name__, e)

    return Blur64ImageData(
        width=int(original.width),
        height=int(original.height),
        blur_data_url=blur_data_url,
    )
