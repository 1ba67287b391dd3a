"""Color parsing and light/dark classification helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

import numpy as np

# ITU-R BT.601 luma coefficients
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])

# Luminance strictly below this is dark; exactly 0.5 counts as light.
DARK_THRESHOLD = 0.5

_HEX_PATTERN = re.compile(r"^#([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")
_RGB_PATTERN = re.compile(r"^rgb\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*\)$")


@dataclass(frozen=True)
class ColorClassification:
    is_dark: bool
    luminance: float


def parse_color(color: Optional[str]) -> Optional[np.ndarray]:
    """Parse ``#rrggbb`` or ``rgb(r, g, b)`` into an RGB array.

    Returns ``None`` for every other notation (named colors, short hex,
    ``rgba()``, ``hsl()``) and for empty input.
    """

    if not color or not isinstance(color, str):
        return None
    value = color.strip()

    match = _HEX_PATTERN.match(value)
    if match:
        return np.array([int(part, 16) for part in match.groups()], dtype=np.float64)

    match = _RGB_PATTERN.match(value)
    if match:
        channels = np.array([int(part) for part in match.groups()], dtype=np.float64)
        if np.any(channels > 255):
            return None
        return channels

    return None


def luminance(color: Optional[str]) -> Optional[float]:
    """Perceptual luminance in ``[0, 1]``, or ``None`` if unparseable."""

    channels = parse_color(color)
    if channels is None:
        return None
    return float(np.dot(LUMA_WEIGHTS, channels) / 255.0)


def is_dark_luminance(value: float) -> bool:
    return value < DARK_THRESHOLD


def classify(color: Optional[str]) -> Optional[ColorClassification]:
    """Classify a color as dark or light; ``None`` means indeterminate."""

    value = luminance(color)
    if value is None:
        return None
    return ColorClassification(is_dark=is_dark_luminance(value), luminance=value)


def is_dark_color(color: Optional[str]) -> bool:
    result = classify(color)
    return result is not None and result.is_dark


def is_light_color(color: Optional[str]) -> bool:
    result = classify(color)
    return result is not None and not result.is_dark
