"""Floyd-Steinberg error-diffusion dithering onto a fixed palette.

The raster is scanned row-major, top-to-bottom and left-to-right.  Each
pixel is snapped to its nearest palette colour, and the (scaled)
quantisation error is pushed onto the neighbours that have not been
visited yet::

            [*]  7
        3    5   1      (/16)

Later pixels read values already perturbed by earlier pushes, so the scan
order is part of the output and the loop cannot be parallelised.
"""

from __future__ import annotations

import logging

import numpy as np

from lowreslove.adjustments import ADJUSTMENT_MAX
from lowreslove.color_utils import to_color_space
from lowreslove.errors import InvalidAdjustment, InvalidPalette
from lowreslove.palette import Palette

logger = logging.getLogger(__name__)

# (dx, dy, weight)
DIFFUSION_KERNEL = (
    (1, 0, 7 / 16),
    (-1, 1, 3 / 16),
    (0, 1, 5 / 16),
    (1, 1, 1 / 16),
)


def dither_strength(amount: int) -> float:
    """Map a signed slider value in [-10, 10] to a strength in (0, 1]."""
    if amount == 0:
        msg = "Dithering amount 0 disables dithering; map colours directly instead"
        raise ValueError(msg)
    if abs(amount) > ADJUSTMENT_MAX:
        msg = f"dithering={amount} is outside [-{ADJUSTMENT_MAX}, {ADJUSTMENT_MAX}]"
        raise InvalidAdjustment(msg)
    return abs(amount) / 10


def apply_dithering(
    raster: np.ndarray,
    palette: Palette,
    amount: int,
    color_space: str = "rgb",
) -> np.ndarray:
    """Quantise *raster* to *palette* with error diffusion, in place.

    Args:
        raster:  (H, W, 3) uint8, already adjusted.  Overwritten with
                 palette colours.
        palette: Allowed output colours.
        amount:  Signed strength, non-zero, ``|amount| <= 10``.
        color_space: Space used for the nearest-colour search.  Error is
                 always diffused in RGB.

    Returns:
        The same *raster* object.
    """
    if palette is None or len(palette) == 0:
        msg = "Cannot dither onto an empty palette"
        raise InvalidPalette(msg)
    strength = dither_strength(amount)

    h, w = raster.shape[:2]
    work = raster[..., :3].astype(np.float64)
    colors = palette.colors.astype(np.float64)
    colors_cs = to_color_space(colors, color_space)
    convert = color_space != "rgb"

    logger.debug("Dithering %dx%d onto %d colours (strength %.1f)", w, h, len(colors), strength)

    for y in range(h):
        for x in range(w):
            old = work[y, x].copy()
            target = to_color_space(old, color_space)[0] if convert else old
            idx = int(np.argmin(np.sum((colors_cs - target) ** 2, axis=1)))
            new = colors[idx]
            work[y, x] = new

            err = (old - new) * strength
            if not err.any():
                continue
            for dx, dy, weight in DIFFUSION_KERNEL:
                nx, ny = x + dx, y + dy
                if 0 <= nx < w and ny < h:
                    work[ny, nx] = np.clip(work[ny, nx] + err * weight, 0, 255)

    raster[..., :3] = work.astype(np.uint8)
    return raster
