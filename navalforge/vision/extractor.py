"""
vision/extractor.py - Silhouette profile extraction v1.0

Deterministic pixel analysis of ship blueprints. Scans every column of a
fixed analysis grid, measures the extent of non-background texels and
turns the result into a normalized, smoothed ProfileCurve.

Pipeline:
    decode -> resample (SAMPLES x RESOLUTION) -> column scan
           -> normalize -> moving-average smoothing
"""

from __future__ import annotations
from typing import Optional, Sequence, Tuple
import asyncio
import logging

import numpy as np

from .contracts import (
    SAMPLES,
    RESOLUTION,
    DEGENERACY_EPSILON,
    FOREGROUND_CUTOFF,
    TraceConfig,
    ProfileCurve,
)
from .decoder import (
    BitmapDecoder,
    PillowBitmapDecoder,
    ImageSource,
    PixelGrid,
    read_source,
    resample,
)

logger = logging.getLogger("vision.extractor")


# =============================================================================
# PIPELINE STAGES
# =============================================================================

def scan_columns(grid: PixelGrid) -> np.ndarray:
    """
    Measure the raw thickness of every column.

    The texel at (0, 0) is the background reference. A texel is foreground
    when its Euclidean RGB distance from the reference exceeds
    FOREGROUND_CUTOFF. Column value is (last_row - first_row) / rows, or 0
    for a column with no foreground.
    """
    rows = grid.shape[0]
    rgb = grid[:, :, :3].astype(np.float64)
    background = rgb[0, 0]

    distance = np.sqrt(((rgb - background) ** 2).sum(axis=-1))
    foreground = distance > FOREGROUND_CUTOFF

    row_index = np.arange(rows)[:, None]
    first = np.where(foreground, row_index, rows).min(axis=0)
    last = np.where(foreground, row_index, -1).max(axis=0)
    found = foreground.any(axis=0)

    return np.where(found, (last - first) / rows, 0.0)


def normalize(raw: np.ndarray) -> Tuple[np.ndarray, float]:
    """
    Scale so the largest value becomes exactly 1.0.

    Returns (normalized, raw_peak). A peak not above DEGENERACY_EPSILON
    yields an all-zero curve.
    """
    raw_peak = float(raw.max()) if raw.size else 0.0
    if raw_peak > DEGENERACY_EPSILON:
        return raw / raw_peak, raw_peak

    logger.debug(f"Degenerate trace: raw peak {raw_peak:.4f} <= {DEGENERACY_EPSILON}")
    return np.zeros_like(raw, dtype=np.float64), raw_peak


def smooth(values: Sequence[float], radius: int) -> np.ndarray:
    """
    Centered moving average with half-width radius.

    The window is truncated at both ends, so edge samples average over
    fewer neighbours. radius 0 returns the input unchanged.
    """
    data = np.asarray(values, dtype=np.float64)
    if radius <= 0 or data.size == 0:
        return data.copy()

    radius = min(radius, data.size - 1)
    kernel = np.ones(2 * radius + 1)

    # Centered slice of the full convolution keeps the input length
    sums = np.convolve(data, kernel, mode="full")[radius:radius + data.size]
    counts = np.convolve(np.ones_like(data), kernel, mode="full")[radius:radius + data.size]
    return sums / counts


# =============================================================================
# PROFILE EXTRACTOR
# =============================================================================

class ProfileExtractor:
    """
    Extracts normalized silhouette curves from blueprint bitmaps.

    Usage:
        extractor = ProfileExtractor()
        top = await extractor.extract(png_bytes, TraceConfig.for_plan())
        side = extractor.extract_grid(pixel_grid, TraceConfig.for_profile())

    The extractor holds no per-call state; one instance may serve any
    number of concurrent extractions.
    """

    def __init__(self, decoder: Optional[BitmapDecoder] = None):
        self._decoder = decoder or PillowBitmapDecoder()

    @property
    def decoder(self) -> BitmapDecoder:
        return self._decoder

    async def extract(
        self,
        source: ImageSource,
        config: Optional[TraceConfig] = None,
    ) -> ProfileCurve:
        """
        Decode an image and trace its silhouette.

        Waiting for the decode is the only suspension point. Raises
        LoadError when the bytes cannot be read or decoded.
        """
        config = config or TraceConfig()
        data = read_source(source)
        grid = await asyncio.to_thread(self._decoder.decode, data)
        return self.extract_grid(grid, config)

    def extract_grid(
        self,
        grid: PixelGrid,
        config: Optional[TraceConfig] = None,
    ) -> ProfileCurve:
        """Trace an already decoded pixel grid."""
        config = config or TraceConfig()

        analysis = resample(grid, SAMPLES, RESOLUTION)
        raw = scan_columns(analysis)
        normalized, raw_peak = normalize(raw)
        smoothed = smooth(normalized, config.smoothing_radius)

        curve = ProfileCurve(
            values=tuple(smoothed.tolist()),
            orientation=config.orientation,
            raw_peak=raw_peak,
        )

        logger.debug(
            f"Traced {config.orientation.value} profile: raw_peak={raw_peak:.3f}, "
            f"radius={config.smoothing_radius}, degenerate={curve.is_degenerate}"
        )
        return curve


async def trace_silhouette(
    source: ImageSource,
    config: Optional[TraceConfig] = None,
    decoder: Optional[BitmapDecoder] = None,
) -> ProfileCurve:
    """Convenience wrapper around ProfileExtractor.extract()."""
    return await ProfileExtractor(decoder).extract(source, config)
