"""
Colour modulation and blur on decoded pixels.

Operates on RGB or RGBA uint8 arrays; alpha is carried through untouched.
"""

from __future__ import annotations

import logging
import math

import cv2
import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

# Default option values; a call left at these is not modulated
DEFAULT_MODULATION = (1.0, 1.2, 0.0, 0.0)
IDENTITY_MODULATION = (1.0, 1.0, 0.0, 0.0)


def _split_alpha(arr: np.ndarray) -> tuple[np.ndarray, np.ndarray | None]:
    if arr.ndim == 3 and arr.shape[2] == 4:
        return np.ascontiguousarray(arr[:, :, :3]), arr[:, :, 3]
    return arr, None


def _join_alpha(rgb: np.ndarray, alpha: np.ndarray | None) -> np.ndarray:
    if alpha is None:
        return rgb
    return np.dstack([rgb, alpha])


def needs_modulation(brightness: float, saturation: float, hue: float, lightness: float) -> bool:
    values = (brightness, saturation, hue, lightness)
    return values not in (DEFAULT_MODULATION, IDENTITY_MODULATION)


def modulate_array(
    rgb: np.ndarray,
    brightness: float = 1.0,
    saturation: float = 1.0,
    hue: float = 0.0,
    lightness: float = 0.0,
) -> np.ndarray:
    """
    Apply brightness/saturation multipliers, a hue rotation in degrees
    and an additive lightness offset in L* units.
    """
    hsv = cv2.cvtColor(rgb, cv2.COLOR_RGB2HSV_FULL).astype(np.float32)
    hsv[:, :, 0] = np.mod(hsv[:, :, 0] + hue * 256.0 / 360.0, 256.0)
    hsv[:, :, 1] *= saturation
    hsv[:, :, 2] *= brightness
    hsv = np.clip(hsv, 0, 255).astype(np.uint8)
    out = cv2.cvtColor(hsv, cv2.COLOR_HSV2RGB_FULL)

    if lightness:
        lab = cv2.cvtColor(out, cv2.COLOR_RGB2LAB).astype(np.float32)
        # 8-bit Lab stores L* scaled to 0..255
        lab[:, :, 0] += lightness * 255.0 / 100.0
        lab = np.clip(lab, 0, 255).astype(np.uint8)
        out = cv2.cvtColor(lab, cv2.COLOR_LAB2RGB)

    return out


def gaussian_kernel_size(sigma: float, min_amplitude: float = 0.2) -> int:
    """Odd kernel size covering the gaussian until it drops below min_amplitude."""
    radius = max(1, math.ceil(sigma * math.sqrt(-2.0 * math.log(min_amplitude))))
    return 2 * radius + 1


def blur_array(arr: np.ndarray, sigma: float, min_amplitude: float = 0.2) -> np.ndarray:
    ksize = gaussian_kernel_size(sigma, min_amplitude)
    return cv2.GaussianBlur(arr, (ksize, ksize), sigmaX=sigma, sigmaY=sigma, borderType=cv2.BORDER_REFLECT)


def modulate(
    img: Image.Image,
    brightness: float,
    saturation: float,
    hue: float,
    lightness: float,
) -> Image.Image:
    """Pillow wrapper around modulate_array. Expects RGB or RGBA."""
    arr = np.ascontiguousarray(np.array(img, dtype=np.uint8))
    rgb, alpha = _split_alpha(arr)
    rgb = modulate_array(rgb, brightness, saturation, hue, lightness)
    logger.debug(
        "Modulated %dx%d: brightness=%.2f saturation=%.2f hue=%.1f lightness=%.1f",
        img.width, img.height, brightness, saturation, hue, lightness,
    )
    return Image.fromarray(_join_alpha(rgb, alpha))


def blur(img: Image.Image, sigma: float, min_amplitude: float = 0.2) -> Image.Image:
    """Pillow wrapper around blur_array. Expects RGB or RGBA."""
    arr = np.ascontiguousarray(np.array(img, dtype=np.uint8))
    return Image.fromarray(blur_array(arr, sigma, min_amplitude))
