"""Colour conversion helpers and nearest-colour search."""

from __future__ import annotations

import re

import numpy as np
from scipy.spatial.distance import cdist
from skimage.color import rgb2lab

from lowreslove.errors import InvalidPalette

Color = tuple[int, int, int]

COLOR_SPACES = ("rgb", "lab")

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")


def hex_to_rgb(hex_str: str) -> Color:
    """Parse ``'#RRGGBB'`` (leading ``#`` optional) to an ``(r, g, b)`` tuple."""
    match = _HEX_RE.match(hex_str.strip())
    if match is None:
        msg = f"Not a #RRGGBB colour: {hex_str!r}"
        raise InvalidPalette(msg)
    return tuple(int(part, 16) for part in match.groups())  # type: ignore[return-value]


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round .5 away from zero for non-negative channel values."""
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5)


def rgb_to_hex(color) -> str:
    """Format a colour as lower-case ``'#rrggbb'``.

    Float channels are rounded half-up and clamped to [0, 255].
    """
    return "#" + "".join(f"{c:02x}" for c in to_color(color))


def to_color(values) -> Color:
    """Clamp and round a 3-vector into an 8-bit :data:`Color`."""
    channels = np.clip(round_half_up(values), 0, 255).astype(int)
    return int(channels[0]), int(channels[1]), int(channels[2])


def luma(rgb: np.ndarray) -> np.ndarray:
    """Weighted luma ``0.299 R + 0.587 G + 0.114 B`` over the last axis."""
    rgb = np.asarray(rgb, dtype=np.float64)
    return rgb[..., 0] * 0.299 + rgb[..., 1] * 0.587 + rgb[..., 2] * 0.114


def mean_luminance(rgb: np.ndarray) -> np.ndarray:
    """Unweighted channel average, used to order palettes dark to light."""
    return np.asarray(rgb, dtype=np.float64).mean(axis=-1)


def rgb_to_lab(rgb: np.ndarray) -> np.ndarray:
    """Convert flat (N, 3) RGB in [0, 255] → (N, 3) float64 CIELAB."""
    rgb = np.asarray(rgb, dtype=np.float64)
    return rgb2lab(rgb.reshape(1, -1, 3) / 255.0).reshape(-1, 3)


def to_color_space(rgb: np.ndarray, color_space: str) -> np.ndarray:
    """Project flat RGB rows into the space distances are measured in."""
    if color_space == "lab":
        return rgb_to_lab(rgb)
    if color_space == "rgb":
        return np.asarray(rgb, dtype=np.float64).reshape(-1, 3)
    msg = f"Unknown colour space '{color_space}'. Available: {', '.join(COLOR_SPACES)}"
    raise ValueError(msg)


def nearest_rows(
    pixels: np.ndarray,
    colors: np.ndarray,
    chunk_size: int = 4096,
) -> np.ndarray:
    """Index of the closest reference colour for every pixel.

    ``np.argmin`` returns the first minimum, so earlier colours win exact ties.
    """
    pixels = np.asarray(pixels, dtype=np.float64).reshape(-1, 3)
    colors = np.asarray(colors, dtype=np.float64).reshape(-1, 3)
    out = np.empty(len(pixels), dtype=np.intp)
    for i in range(0, len(pixels), chunk_size):
        j = min(i + chunk_size, len(pixels))
        out[i:j] = np.argmin(cdist(pixels[i:j], colors), axis=1)
    return out
