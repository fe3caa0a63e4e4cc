"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from lowreslove.adjustments import Adjustments
from lowreslove.color_utils import COLOR_SPACES
from lowreslove.errors import InvalidDimensions
from lowreslove.palette import DEFAULT_PALETTE


@dataclass(frozen=True)
class ConverterConfig:
    """All tuneable parameters for a conversion run.

    Attributes:
        target_width:      Width of the bounding box the low-res image fits in.
        target_height:     Height of that bounding box.
        pixel_upscale:     Each low-res pixel becomes an n x n block.
        palette:           Catalog name, or ``"auto"`` to cluster the source.
        num_colors:        Palette size for ``"auto"``.
        max_iterations:    k-means iteration budget.
        analysis_max_side: Longest side of the clustering working copy.
        sample_stride:     Keep every n-th pixel for clustering.
        seed:              Clustering seed (None = non-deterministic).
        color_space:       Nearest-colour metric - "rgb" or "lab".
        adjustments:       Exposure / contrast / chrominance / dithering.
        output_format:     Image format for saved files.
        save_low_res:      Also write the un-upscaled result.
        save_comparison:   Write an Original | Low-res | Palette | Result grid.
        input_dir:         Folder to scan for source images.
        output_dir:        Folder for results.
    """

    # Geometry
    target_width: int = 256
    target_height: int = 128
    pixel_upscale: int = 8

    # Palette
    palette: str = DEFAULT_PALETTE
    num_colors: int = 8
    max_iterations: int = 10
    analysis_max_side: int = 200
    sample_stride: int = 4
    seed: int | None = None
    color_space: str = "rgb"

    # Tone
    adjustments: Adjustments = field(default_factory=Adjustments)

    # Output
    output_format: str = "png"
    save_low_res: bool = True
    save_comparison: bool = False

    # Paths
    input_dir: Path = field(default_factory=lambda: Path("images"))
    output_dir: Path = field(default_factory=lambda: Path("output"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp", ".jfif", ".gif"}
    )

    def __post_init__(self) -> None:
        for name in ("target_width", "target_height", "pixel_upscale"):
            value = getattr(self, name)
            if value <= 0:
                msg = f"{name} must be positive, got {value}"
                raise InvalidDimensions(msg)
        if self.color_space not in COLOR_SPACES:
            msg = f"Unknown colour space '{self.color_space}'. Available: {', '.join(COLOR_SPACES)}"
            raise ValueError(msg)
