"""Resample → adjust → quantise → upscale, one image per run."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum

import numpy as np
from PIL import Image

from lowreslove.adjustments import Adjustments, apply_adjustments
from lowreslove.config import ConverterConfig
from lowreslove.dithering import apply_dithering
from lowreslove.color_utils import round_half_up
from lowreslove.errors import EmptyInput, InvalidDimensions
from lowreslove.mapper import map_to_palette
from lowreslove.palette import Palette, get_palette
from lowreslove.quantizer import extract_palette

logger = logging.getLogger(__name__)

AUTO = "auto"


class PipelineStage(Enum):
    IDLE = "idle"
    RESAMPLED = "resampled"
    ADJUSTED = "adjusted"
    QUANTIZED = "quantized"
    UPSCALED = "upscaled"
    DONE = "done"


class QuantizeMode(Enum):
    """How the adjusted raster is reduced to palette colours."""

    MAP = "map"
    DITHER = "dither"

    @classmethod
    def for_adjustments(cls, adjustments: Adjustments) -> QuantizeMode:
        return cls.DITHER if adjustments.dithering != 0 else cls.MAP


@dataclass(frozen=True, eq=False)
class PipelineResult:
    """Output of a finished run.

    Attributes:
        low_res:     (h, w, 3|4) uint8, palette colours only.
        high_res:    (h * n, w * n, 3|4) uint8 block-replicated copy.
        palette:     Palette actually used.
        adjustments: Adjustments applied.
        mode:        Direct mapping or dithering.
    """

    low_res: np.ndarray
    high_res: np.ndarray
    palette: Palette
    adjustments: Adjustments
    mode: QuantizeMode

    @property
    def size(self) -> tuple[int, int]:
        h, w = self.low_res.shape[:2]
        return w, h


def compute_fit_size(
    source_width: int,
    source_height: int,
    box_width: int,
    box_height: int,
) -> tuple[int, int]:
    """Largest (w, h) with the source aspect ratio that fits the box.

    A source wider than the box fills its width; otherwise it fills its
    height.  The free side is rounded half-up, minimum 1.
    """
    if box_width <= 0 or box_height <= 0:
        msg = f"Target box must be positive, got {box_width}x{box_height}"
        raise InvalidDimensions(msg)
    if source_width <= 0 or source_height <= 0:
        msg = f"Source has no pixels ({source_width}x{source_height})"
        raise EmptyInput(msg)

    source_aspect = source_width / source_height
    if source_aspect > box_width / box_height:
        return box_width, max(1, int(round_half_up(box_width / source_aspect)))
    return max(1, int(round_half_up(box_height * source_aspect))), box_height


def resample(raster: np.ndarray, size: tuple[int, int]) -> np.ndarray:
    """Resize an (H, W, 3|4) uint8 raster to *size* = (w, h).

    Alpha, if present, is resampled on its own so colour and coverage never
    bleed into each other.
    """
    w, h = size
    rgb = Image.fromarray(np.ascontiguousarray(raster[..., :3]))
    out = np.array(rgb.resize((w, h), Image.LANCZOS), dtype=np.uint8)
    if raster.shape[2] == 4:
        alpha = Image.fromarray(np.ascontiguousarray(raster[..., 3]))
        out = np.dstack([out, np.array(alpha.resize((w, h), Image.LANCZOS), dtype=np.uint8)])
    return out


def upscale(raster: np.ndarray, factor: int) -> np.ndarray:
    """Nearest-neighbour enlargement: each pixel becomes a factor x factor block."""
    if factor <= 0:
        msg = f"Upscale factor must be positive, got {factor}"
        raise InvalidDimensions(msg)
    return np.repeat(np.repeat(raster, factor, axis=0), factor, axis=1)


def _validate_source(source: np.ndarray) -> np.ndarray:
    source = np.asarray(source)
    if source.size == 0:
        msg = "Source image has no pixels"
        raise EmptyInput(msg)
    if source.ndim == 2:
        source = np.stack([source] * 3, axis=-1)
    if source.ndim != 3 or source.shape[2] not in (3, 4):
        msg = f"Expected an (H, W, 3) or (H, W, 4) raster, got {source.shape}"
        raise InvalidDimensions(msg)
    if source.dtype != np.uint8:
        source = np.clip(source, 0, 255).astype(np.uint8)
    return source


def resolve_palette(
    palette: Palette | str,
    source: np.ndarray,
    config: ConverterConfig,
) -> Palette:
    """Turn a palette argument into a :class:`Palette`.

    ``"auto"`` clusters *source*; any other string is a catalog name.
    """
    if isinstance(palette, Palette):
        return palette
    if palette.strip().lower() == AUTO:
        return extract_palette(
            source,
            k=config.num_colors,
            max_iterations=config.max_iterations,
            seed=config.seed,
            max_side=config.analysis_max_side,
            sample_stride=config.sample_stride,
        )
    return get_palette(palette)


class Pipeline:
    """A single-use conversion run over one source raster.

    The working raster is created at resample time and owned by the run;
    stages mutate it in place, strictly in order.
    """

    def __init__(
        self,
        source: np.ndarray,
        palette: Palette | str | None = None,
        adjustments: Adjustments | None = None,
        config: ConverterConfig | None = None,
    ) -> None:
        self.config = config or ConverterConfig()
        self.source = _validate_source(source)
        self.adjustments = adjustments if adjustments is not None else self.config.adjustments
        self.mode = QuantizeMode.for_adjustments(self.adjustments)
        self.palette_arg = palette if palette is not None else self.config.palette
        self.palette: Palette | None = None
        self.stage = PipelineStage.IDLE
        self._work: np.ndarray | None = None

    def _advance(self, stage: PipelineStage) -> None:
        logger.debug("Pipeline %s → %s", self.stage.value, stage.value)
        self.stage = stage

    def run(self) -> PipelineResult:
        if self.stage is not PipelineStage.IDLE:
            msg = f"Pipeline already ran (stage={self.stage.value}); create a new one"
            raise RuntimeError(msg)

        t0 = time.perf_counter()
        cfg = self.config
        self.palette = resolve_palette(self.palette_arg, self.source, cfg)

        src_h, src_w = self.source.shape[:2]
        size = compute_fit_size(src_w, src_h, cfg.target_width, cfg.target_height)
        self._work = resample(self.source, size)
        self._advance(PipelineStage.RESAMPLED)

        apply_adjustments(self._work[..., :3], self.adjustments)
        self._advance(PipelineStage.ADJUSTED)

        if self.mode is QuantizeMode.DITHER:
            apply_dithering(
                self._work, self.palette, self.adjustments.dithering, cfg.color_space,
            )
        else:
            self._work[..., :3] = map_to_palette(self._work, self.palette, cfg.color_space)
        self._advance(PipelineStage.QUANTIZED)

        high_res = upscale(self._work, cfg.pixel_upscale)
        self._advance(PipelineStage.UPSCALED)

        result = PipelineResult(
            low_res=self._work,
            high_res=high_res,
            palette=self.palette,
            adjustments=self.adjustments,
            mode=self.mode,
        )
        self._work = None
        self._advance(PipelineStage.DONE)

        logger.info(
            "Converted %dx%d → %dx%d (%s, %s, %.2f s)",
            src_w, src_h, size[0], size[1], self.palette.name,
            self.mode.value, time.perf_counter() - t0,
        )
        return result


def process_image(
    source: np.ndarray,
    palette: Palette | str | None = None,
    adjustments: Adjustments | None = None,
    config: ConverterConfig | None = None,
) -> PipelineResult:
    """Run a fresh :class:`Pipeline` over *source*.

    *palette* and *adjustments* default to the ones in *config*.
    """
    return Pipeline(source, palette, adjustments, config).run()
