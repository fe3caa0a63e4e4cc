"""Exposure / contrast / chrominance adjustment stage.

Every pixel is transformed independently:

1. exposure     ``v + exposure * 5``
2. contrast     ``(v - 128) * f + 128`` with ``f = (contrast + 10) / 10``
3. chrominance  ``L + (v - L) * s`` with ``s = (chrominance + 10) / 10`` and
   ``L`` the BT.601 luma of the contrast-adjusted pixel
4. clamp to [0, 255]

Intermediate values are never clamped; overflow after step 1 or 2 still
feeds the luma used in step 3.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

import numpy as np

from lowreslove.color_utils import Color, luma
from lowreslove.errors import InvalidAdjustment

ADJUSTMENT_MIN = -10
ADJUSTMENT_MAX = 10
EXPOSURE_STEP = 5


@dataclass(frozen=True)
class Adjustments:
    """The four slider values of one run, each an int in [-10, 10].

    Attributes:
        exposure:    Brightness offset, ``5`` levels per step.
        contrast:    ``-10`` collapses everything to mid-grey, ``0`` is neutral.
        chrominance: ``-10`` is fully grey, ``0`` is neutral.
        dithering:   Error-diffusion strength; the sign is ignored and ``0``
                     disables dithering.
    """

    exposure: int = 0
    contrast: int = 0
    chrominance: int = 0
    dithering: int = 0

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                msg = f"{f.name} must be an integer, got {value!r}"
                raise InvalidAdjustment(msg)
            if not ADJUSTMENT_MIN <= value <= ADJUSTMENT_MAX:
                msg = (
                    f"{f.name}={value} is outside "
                    f"[{ADJUSTMENT_MIN}, {ADJUSTMENT_MAX}]"
                )
                raise InvalidAdjustment(msg)
            object.__setattr__(self, f.name, int(value))

    @property
    def dither_strength(self) -> float:
        return abs(self.dithering) / 10

    @property
    def is_neutral(self) -> bool:
        """True when the tone stage leaves every pixel unchanged."""
        return self.exposure == 0 and self.contrast == 0 and self.chrominance == 0


def adjust_pixels(pixels: np.ndarray, adjustments: Adjustments) -> np.ndarray:
    """Apply the adjustment chain to an (..., 3) array.

    Returns:
        float64 array of the same shape, clamped to [0, 255] but not rounded.
    """
    v = np.asarray(pixels, dtype=np.float64) + adjustments.exposure * EXPOSURE_STEP

    factor = (adjustments.contrast + 10) / 10
    v = (v - 128.0) * factor + 128.0

    saturation = (adjustments.chrominance + 10) / 10
    lum = luma(v)[..., np.newaxis]
    v = lum + (v - lum) * saturation

    return np.clip(v, 0, 255)


def adjust_color(color: Color, adjustments: Adjustments) -> tuple[float, float, float]:
    """Single-pixel form of :func:`adjust_pixels` (unrounded channels)."""
    r, g, b = adjust_pixels(np.array(color, dtype=np.float64), adjustments)
    return float(r), float(g), float(b)


def apply_adjustments(raster: np.ndarray, adjustments: Adjustments) -> np.ndarray:
    """Adjust an (H, W, 3) uint8 raster in place.

    Channels are written back to 8 bits with round-half-to-even.  A neutral
    :class:`Adjustments` leaves the buffer untouched.
    """
    if adjustments.is_neutral:
        return raster
    raster[...] = np.rint(adjust_pixels(raster, adjustments)).astype(np.uint8)
    return raster
