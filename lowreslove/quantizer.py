"""Palette extraction by k-means clustering in RGB space."""

from __future__ import annotations

import logging
import time

import numpy as np
from PIL import Image

from lowreslove.color_utils import mean_luminance, nearest_rows, round_half_up
from lowreslove.errors import EmptyInput, InsufficientSamples
from lowreslove.palette import AUTO_PALETTE_NAME, Palette

logger = logging.getLogger(__name__)

ANALYSIS_MAX_SIDE = 200
SAMPLE_STRIDE = 4
CONVERGENCE_TOLERANCE = 1.0


def compute_analysis_size(width: int, height: int, max_side: int) -> tuple[int, int]:
    """Shrink (w, h) so the longer side is at most *max_side*.

    Images already small enough are left alone; the short side is rounded
    half-up, minimum 1.
    """
    if max(width, height) <= max_side:
        return width, height
    if width >= height:
        return max_side, max(1, int(round_half_up(height * max_side / width)))
    return max(1, int(round_half_up(width * max_side / height))), max_side


def sample_pixels(
    raster: np.ndarray,
    max_side: int = ANALYSIS_MAX_SIDE,
    stride: int = SAMPLE_STRIDE,
) -> np.ndarray:
    """Downscale *raster* for analysis and take every *stride*-th pixel.

    Returns:
        (N, 3) float64 sample set.
    """
    raster = np.asarray(raster)
    if raster.ndim != 3 or raster.size == 0:
        msg = "Cannot cluster an image with no pixels"
        raise EmptyInput(msg)

    h, w = raster.shape[:2]
    rgb = np.ascontiguousarray(raster[..., :3], dtype=np.uint8)
    aw, ah = compute_analysis_size(w, h, max_side)
    if (aw, ah) != (w, h):
        rgb = np.array(Image.fromarray(rgb).resize((aw, ah), Image.BILINEAR))

    return rgb.reshape(-1, 3)[::stride].astype(np.float64)


def kmeans(
    samples: np.ndarray,
    k: int,
    max_iterations: int,
    rng: np.random.Generator,
) -> np.ndarray:
    """Lloyd's k-means over *samples*.

    Centroids are seeded from *k* distinct sample indices.  A centroid that
    loses all its members keeps its previous position.  Iteration stops once
    no centroid channel moves by more than :data:`CONVERGENCE_TOLERANCE`.

    Returns:
        (k, 3) float64 centroids, unsorted and unrounded.
    """
    n = len(samples)
    if n == 0:
        msg = "Sample set for clustering is empty"
        raise EmptyInput(msg)
    if n < k:
        msg = f"Need at least {k} sampled pixels to find {k} colours, got {n}"
        raise InsufficientSamples(msg)

    centroids = samples[rng.choice(n, size=k, replace=False)].copy()

    for it in range(max_iterations):
        labels = nearest_rows(samples, centroids)
        counts = np.bincount(labels, minlength=k)
        sums = np.zeros((k, 3), dtype=np.float64)
        np.add.at(sums, labels, samples)

        populated = counts > 0
        updated = centroids.copy()
        updated[populated] = sums[populated] / counts[populated, np.newaxis]

        moved = np.abs(updated - centroids).max()
        centroids = updated
        if moved <= CONVERGENCE_TOLERANCE:
            logger.debug("k-means converged after %d iteration(s)", it + 1)
            break
    else:
        logger.debug("k-means stopped at the %d-iteration budget", max_iterations)

    return centroids


def extract_palette(
    raster: np.ndarray,
    k: int = 8,
    max_iterations: int = 10,
    seed: int | np.random.Generator | None = None,
    max_side: int = ANALYSIS_MAX_SIDE,
    sample_stride: int = SAMPLE_STRIDE,
    name: str = AUTO_PALETTE_NAME,
) -> Palette:
    """Summarise an image's dominant colours as a *k*-colour palette.

    Args:
        raster: (H, W, 3|4) uint8 source image; alpha is ignored.
        k: Palette size.
        max_iterations: Upper bound on k-means iterations.
        seed: Integer seed, a ready ``numpy.random.Generator``, or ``None``
            for a non-deterministic run.
        max_side: Longest side of the throwaway analysis copy.
        sample_stride: Keep every n-th pixel of the analysis copy.
        name: Name given to the resulting palette.

    Returns:
        Palette ordered dark to light by unweighted channel mean.
    """
    if k < 1:
        msg = f"Palette size must be at least 1, got {k}"
        raise ValueError(msg)
    if max_iterations < 0:
        msg = f"max_iterations must be non-negative, got {max_iterations}"
        raise ValueError(msg)

    rng = np.random.default_rng(seed)
    t0 = time.perf_counter()

    samples = sample_pixels(raster, max_side, sample_stride)
    centroids = kmeans(samples, k, max_iterations, rng)

    order = np.argsort(mean_luminance(centroids), kind="stable")
    colors = np.clip(round_half_up(centroids[order]), 0, 255).astype(np.uint8)

    logger.info(
        "Extracted %d colours from %d samples (%.2f s)",
        k, len(samples), time.perf_counter() - t0,
    )
    return Palette(name, colors)
