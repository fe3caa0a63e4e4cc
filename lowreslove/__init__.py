"""
LowResLove
==========

Turn a photograph into a small, fixed-palette pixel image and blow it back
up with crisp square pixels. Ships:

- a catalog of classic 8-colour palettes (CGA, C64, ZX Spectrum, ...)
- **k-means** palette extraction from the image itself
- exposure / contrast / chrominance adjustments
- **Floyd-Steinberg** error-diffusion dithering
"""

__version__ = "1.0.0"

from lowreslove.adjustments import Adjustments, adjust_color, apply_adjustments
from lowreslove.config import ConverterConfig
from lowreslove.dithering import apply_dithering
from lowreslove.errors import (
    EmptyInput,
    InsufficientSamples,
    InvalidAdjustment,
    InvalidDimensions,
    InvalidPalette,
    LowResError,
)
from lowreslove.image_io import load_image, save_image
from lowreslove.mapper import map_to_palette, nearest_color
from lowreslove.palette import AUTO_PALETTE_NAME, PALETTES, Palette, get_palette
from lowreslove.pipeline import (
    Pipeline,
    PipelineResult,
    PipelineStage,
    QuantizeMode,
    compute_fit_size,
    process_image,
    upscale,
)
from lowreslove.quantizer import extract_palette

__all__ = [
    "AUTO_PALETTE_NAME",
    "Adjustments",
    "ConverterConfig",
    "EmptyInput",
    "InsufficientSamples",
    "InvalidAdjustment",
    "InvalidDimensions",
    "InvalidPalette",
    "LowResError",
    "PALETTES",
    "Palette",
    "Pipeline",
    "PipelineResult",
    "PipelineStage",
    "QuantizeMode",
    "adjust_color",
    "apply_adjustments",
    "apply_dithering",
    "compute_fit_size",
    "extract_palette",
    "get_palette",
    "load_image",
    "map_to_palette",
    "nearest_color",
    "process_image",
    "save_image",
    "upscale",
]
