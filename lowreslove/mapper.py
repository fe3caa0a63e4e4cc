"""Nearest-palette-colour mapping."""

from __future__ import annotations

import numpy as np

from lowreslove.color_utils import Color, nearest_rows, to_color_space
from lowreslove.errors import InvalidPalette
from lowreslove.palette import Palette


def _check_palette(palette: Palette) -> None:
    if palette is None or len(palette) == 0:
        msg = "Cannot map colours onto an empty palette"
        raise InvalidPalette(msg)


def nearest_indices(
    pixels: np.ndarray,
    palette: Palette,
    color_space: str = "rgb",
) -> np.ndarray:
    """Palette index closest to each pixel.

    Args:
        pixels: (..., 3) RGB values in [0, 255], any numeric dtype.
        palette: Target palette; earlier entries win exact ties.
        color_space: ``"rgb"`` (Euclidean RGB) or ``"lab"`` (CIELAB).

    Returns:
        int array shaped like ``pixels`` without the channel axis.
    """
    _check_palette(palette)
    pixels = np.asarray(pixels)
    flat = pixels.reshape(-1, 3)
    idx = nearest_rows(
        to_color_space(flat, color_space),
        to_color_space(palette.colors, color_space),
    )
    return idx.reshape(pixels.shape[:-1])


def nearest_color(color: Color, palette: Palette, color_space: str = "rgb") -> Color:
    """The palette entry closest to *color*."""
    idx = int(nearest_indices(np.array(color, dtype=np.float64), palette, color_space))
    return palette[idx]


def map_to_palette(
    raster: np.ndarray,
    palette: Palette,
    color_space: str = "rgb",
) -> np.ndarray:
    """Replace every pixel of an (H, W, 3) raster by its nearest palette colour.

    Returns:
        New (H, W, 3) uint8 array.
    """
    idx = nearest_indices(raster[..., :3], palette, color_space)
    return palette.colors[idx].copy()
