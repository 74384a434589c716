"""
Target size resolution for placeholders.

One dimension is fixed first (the "major" one: height for landscape
originals, width for portrait) and the other is derived from the target
ratio, so the output keeps the original orientation unless an explicit
width/height pair says otherwise.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

from blur64_shared.protocol import Dimensions, RatioInput, SizeInput

MIN_DIMENSION = 4
DEFAULT_SCALE = 0.1


@dataclass(frozen=True)
class Absolute:
    """Explicit width/height pair."""
    width: float
    height: float


@dataclass(frozen=True)
class Major:
    """Single number sizing the major dimension."""
    size: float


@dataclass(frozen=True)
class Scale:
    """Fraction of the original dimensions."""
    factor: float


@dataclass(frozen=True)
class Default:
    """No sizing input given."""


SizingMode = Union[Absolute, Major, Scale, Default]


def clamp_dimension(value: float) -> int:
    return max(MIN_DIMENSION, math.floor(value))


def sizing_mode(size: SizeInput = None, scale: float | None = None) -> SizingMode:
    """Pick the primary mode: size (number), size (pair), scale, then default."""
    if isinstance(size, Dimensions):
        return Absolute(size.width, size.height)
    if size is not None:
        return Major(size)
    if scale is not None:
        return Scale(scale)
    return Default()


def target_ratio(original: Dimensions, ratio: RatioInput = None) -> float:
    if ratio is None:
        return original.width / original.height
    if isinstance(ratio, Dimensions):
        return ratio.width / ratio.height
    return float(ratio)


def _from_major(major: float, is_landscape: bool, ratio: float) -> Dimensions:
    if is_landscape:
        height = clamp_dimension(major)
        return Dimensions(width=clamp_dimension(height * ratio), height=height)
    width = clamp_dimension(major)
    return Dimensions(width=width, height=clamp_dimension(width / ratio))


def calculate_target_dimensions(
    original: Dimensions,
    size: SizeInput = None,
    scale: float | None = None,
    ratio: RatioInput = None,
) -> Dimensions:
    """
    Resolve placeholder dimensions from the original size and sizing inputs.

    Inputs are assumed validated. Every returned side is an int >= 4.
    """
    is_landscape = original.width / original.height >= 1
    ratio_value = target_ratio(original, ratio)
    mode = sizing_mode(size, scale)

    if isinstance(mode, Absolute):
        width = clamp_dimension(mode.width)
        height = clamp_dimension(mode.height)
        if ratio is None:
            return Dimensions(width=width, height=height)
        # Shrink whichever side is too large for the requested ratio
        if width / height >= ratio_value:
            return Dimensions(width=clamp_dimension(height * ratio_value), height=height)
        return Dimensions(width=width, height=clamp_dimension(width / ratio_value))

    if isinstance(mode, Major):
        return _from_major(mode.size, is_landscape, ratio_value)

    factor = mode.factor if isinstance(mode, Scale) else DEFAULT_SCALE
    major = original.height * factor if is_landscape else original.width * factor
    return _from_major(major, is_landscape, ratio_value)
