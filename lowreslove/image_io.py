"""Image loading, saving, palette swatches and comparison grids."""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

import numpy as np
from PIL import Image, ImageDraw, ImageFont, ImageOps

from lowreslove.palette import Palette

DEFAULT_EXPORT_NAME = "lowreslove-image.png"


def load_image(path: str | Path | BinaryIO) -> np.ndarray:
    """Decode an image file into an (H, W, 3) or (H, W, 4) uint8 array.

    EXIF orientation is applied.  Images with transparency keep their alpha
    channel; everything else is converted to RGB.
    """
    img = ImageOps.exif_transpose(Image.open(path))
    has_alpha = img.mode in ("RGBA", "LA", "PA") or (
        img.mode == "P" and "transparency" in img.info
    )
    img = img.convert("RGBA" if has_alpha else "RGB")
    return np.array(img, dtype=np.uint8)


def to_image(array: np.ndarray) -> Image.Image:
    """Wrap an (H, W, 3|4) uint8 array as a Pillow image."""
    return Image.fromarray(np.ascontiguousarray(array, dtype=np.uint8))


def save_image(array: np.ndarray, path: str | Path) -> Path:
    """Encode *array* to *path* (format from the suffix)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    to_image(array).save(path)
    return path


def palette_swatch(palette: Palette, cell: int = 16) -> np.ndarray:
    """A 1-row strip of *cell* x *cell* squares, one per palette colour."""
    strip = palette.colors.reshape(1, -1, 3)
    return np.repeat(np.repeat(strip, cell, axis=0), cell, axis=1)


LABEL_HEIGHT = 36
PANEL_GAP = 8
_LABEL_FONT = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"


def _label_font(size: int = 18) -> ImageFont.ImageFont:
    try:
        return ImageFont.truetype(_LABEL_FONT, size)
    except OSError:
        return ImageFont.load_default()


def _centred_label(
    draw: ImageDraw.ImageDraw,
    text: str,
    left: int,
    width: int,
    font: ImageFont.ImageFont,
) -> None:
    """Write *text* centred over the column ``[left, left + width)``."""
    x0, _, x1, _ = draw.textbbox((0, 0), text, font=font)
    draw.text((left + (width - (x1 - x0)) // 2, 6), text, fill=(220, 220, 220), font=font)


def make_comparison_grid(
    original: np.ndarray,
    low_res: np.ndarray,
    result: np.ndarray,
    palette: Palette,
    output_path: str | Path,
) -> None:
    """Create a 4-panel comparison: Original | Low-res | Palette | Result.

    Panels take the pixel dimensions of *result*; the low-res and palette
    panels are enlarged with nearest-neighbour so pixels stay sharp.
    """
    panel_h, panel_w = result.shape[:2]
    size = (panel_w, panel_h)
    lh, lw = low_res.shape[:2]

    columns = [
        ("Original", to_image(original[..., :3]).resize(size, Image.LANCZOS)),
        (f"Low-res {lw}x{lh}", to_image(low_res[..., :3]).resize(size, Image.NEAREST)),
        (palette.name, to_image(palette_swatch(palette, cell=1)).resize(size, Image.NEAREST)),
        ("Result", to_image(result[..., :3])),
    ]

    stride = panel_w + PANEL_GAP
    canvas = Image.new(
        "RGB", (len(columns) * stride - PANEL_GAP, panel_h + LABEL_HEIGHT), (30, 30, 30),
    )
    draw = ImageDraw.Draw(canvas)
    font = _label_font()

    for i, (label, panel) in enumerate(columns):
        canvas.paste(panel, (i * stride, LABEL_HEIGHT))
        _centred_label(draw, label, i * stride, panel_w, font)

    save_image(np.asarray(canvas), output_path)
