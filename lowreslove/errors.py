"""Typed failures raised by the conversion pipeline.

All of them derive from :class:`ValueError` so callers that only care about
"bad input" can keep catching that.
"""

from __future__ import annotations


class LowResError(ValueError):
    """Base class for every error the converter raises on bad input."""


class EmptyInput(LowResError):
    """The source raster (or the clustering sample set) has no pixels."""


class InsufficientSamples(LowResError):
    """Fewer candidate pixels than requested clusters."""


class InvalidPalette(LowResError):
    """Empty, malformed, or unknown palette."""


class InvalidAdjustment(LowResError):
    """An adjustment parameter outside [-10, 10]."""


class InvalidDimensions(LowResError):
    """Non-positive width, height, or upscale factor."""
