import math

import pytest

from blur64_converter.geometry import (
    MIN_DIMENSION,
    Absolute,
    Default,
    Major,
    Scale,
    calculate_target_dimensions,
    sizing_mode,
    target_ratio,
)
from blur64_shared.protocol import Dimensions

LANDSCAPE = Dimensions(1600, 900)
PORTRAIT = Dimensions(900, 1600)


def test_sizing_mode_priority():
    assert sizing_mode(24, 0.5) == Major(24)
    assert sizing_mode(Dimensions(30, 20), 0.5) == Absolute(30, 20)
    assert sizing_mode(None, 0.5) == Scale(0.5)
    assert sizing_mode() == Default()


def test_target_ratio_forms():
    assert target_ratio(LANDSCAPE) == pytest.approx(16 / 9)
    assert target_ratio(LANDSCAPE, 2) == 2.0
    assert target_ratio(LANDSCAPE, Dimensions(4, 3)) == pytest.approx(4 / 3)


def test_landscape_numeric_size():
    assert calculate_target_dimensions(LANDSCAPE, size=24) == Dimensions(42, 24)


def test_portrait_numeric_size():
    # width is major for portrait: 24 / (900/1600) = 42.67
    assert calculate_target_dimensions(PORTRAIT, size=24) == Dimensions(24, 42)


def test_portrait_scale():
    assert calculate_target_dimensions(PORTRAIT, scale=0.5) == Dimensions(450, 800)


def test_landscape_scale():
    assert calculate_target_dimensions(LANDSCAPE, scale=0.5) == Dimensions(800, 450)


def test_default_is_tenth_of_major():
    assert calculate_target_dimensions(LANDSCAPE) == Dimensions(160, 90)
    assert calculate_target_dimensions(PORTRAIT) == Dimensions(90, 160)


def test_square_counts_as_landscape():
    # height fixed first, width derived from ratio 2
    assert calculate_target_dimensions(Dimensions(100, 100), size=10, ratio=2) == Dimensions(20, 10)


def test_numeric_size_with_ratio_overrides_native_aspect():
    assert calculate_target_dimensions(LANDSCAPE, size=30, ratio=1) == Dimensions(30, 30)
    assert calculate_target_dimensions(PORTRAIT, size=30, ratio=Dimensions(1, 2)) == Dimensions(30, 60)


def test_fractional_size_is_floored():
    assert calculate_target_dimensions(LANDSCAPE, size=24.9) == Dimensions(42, 24)


def test_object_size_taken_literally_without_ratio():
    assert calculate_target_dimensions(LANDSCAPE, size=Dimensions(33.7, 10.2)) == Dimensions(33, 10)


def test_object_size_with_ratio_shrinks_width_when_too_wide():
    # 40/10 = 4 >= 2, so width is recomputed from height
    assert calculate_target_dimensions(LANDSCAPE, size=Dimensions(40, 10), ratio=2) == Dimensions(20, 10)


def test_object_size_with_ratio_shrinks_height_when_too_tall():
    # 10/40 < 2, so height is recomputed from width
    assert calculate_target_dimensions(LANDSCAPE, size=Dimensions(10, 40), ratio=2) == Dimensions(10, 5)


def test_object_size_with_equal_ratio_recomputes_width():
    assert calculate_target_dimensions(LANDSCAPE, size=Dimensions(20, 10), ratio=2) == Dimensions(20, 10)


@pytest.mark.parametrize("size", [0.5, 1, 3.99])
def test_tiny_size_clamped_to_minimum(size):
    result = calculate_target_dimensions(LANDSCAPE, size=size)
    assert result.height == MIN_DIMENSION
    assert result.width >= MIN_DIMENSION


def test_tiny_scale_clamped_to_minimum():
    result = calculate_target_dimensions(Dimensions(20, 10), scale=0.01)
    assert result == Dimensions(MIN_DIMENSION * 2, MIN_DIMENSION)


def test_extreme_ratio_keeps_minimum():
    result = calculate_target_dimensions(LANDSCAPE, size=10, ratio=0.01)
    assert result == Dimensions(MIN_DIMENSION, 10)


ORIGINALS = [Dimensions(1600, 900), Dimensions(900, 1600), Dimensions(640, 640), Dimensions(37, 1201), Dimensions(3000, 7)]


@pytest.mark.parametrize("original", ORIGINALS)
@pytest.mark.parametrize("size", [4, 7.5, 24, 101])
def test_numeric_size_major_and_ratio_property(original, size):
    result = calculate_target_dimensions(original, size=size)
    ratio = original.width / original.height
    if ratio >= 1:
        assert result.height == max(4, math.floor(size))
        expected_minor = max(4, math.floor(result.height * ratio))
        assert abs(result.width - expected_minor) <= 1
    else:
        assert result.width == max(4, math.floor(size))
        expected_minor = max(4, math.floor(result.width / ratio))
        assert abs(result.height - expected_minor) <= 1


@pytest.mark.parametrize("ratio", [1.5, 0.75, Dimensions(16, 9), Dimensions(3, 4)])
@pytest.mark.parametrize("original", ORIGINALS[:3])
def test_requested_ratio_is_respected(original, ratio):
    wanted = ratio.width / ratio.height if isinstance(ratio, Dimensions) else ratio
    result = calculate_target_dimensions(original, size=200, ratio=ratio)
    # two independent floors: each side is off by less than one unit
    low = (result.width) / (result.height + 1)
    high = (result.width + 1) / result.height
    assert low <= wanted <= high


@pytest.mark.parametrize("original", ORIGINALS)
@pytest.mark.parametrize("kwargs", [{"size": 24}, {"scale": 0.3}, {}, {"size": 50, "ratio": 1.2}])
def test_resolution_is_idempotent(original, kwargs):
    first = calculate_target_dimensions(original, **kwargs)
    again = calculate_target_dimensions(original, size=Dimensions(first.width, first.height))
    assert again == first


@pytest.mark.parametrize("original", ORIGINALS)
@pytest.mark.parametrize("kwargs", [{"size": 0.1}, {"scale": 0.0001}, {"size": Dimensions(1, 1)}, {}])
def test_every_dimension_at_least_minimum(original, kwargs):
    result = calculate_target_dimensions(original, **kwargs)
    assert result.width >= MIN_DIMENSION
    assert result.height >= MIN_DIMENSION
    assert isinstance(result.width, int) and isinstance(result.height, int)
