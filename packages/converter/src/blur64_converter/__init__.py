"""
Blur Placeholder Engine.

This package is the core placeholder logic: size resolution, the
Pillow/OpenCV pipeline and the orchestration that ties them to
remote fetching. It is used by the backend and the CLI.

Deployment:
    pip install blur64

"""

from .codec import ImageCodec, Modulation, PillowCodec, TransformOptions
from .geometry import (
    MIN_DIMENSION,
    Absolute,
    Default,
    Major,
    Scale,
    calculate_target_dimensions,
    sizing_mode,
    target_ratio,
)
from .placeholder import blur64_image, normalize_input_options, to_data_url

__all__ = [
    "MIN_DIMENSION",
    "Absolute",
    "Major",
    "Scale",
    "Default",
    "sizing_mode",
    "target_ratio",
    "calculate_target_dimensions",
    "ImageCodec",
    "Modulation",
    "PillowCodec",
    "TransformOptions",
    "blur64_image",
    "normalize_input_options",
    "to_data_url",
]
