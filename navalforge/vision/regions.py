"""
vision/regions.py - Blueprint view separation v1.0

Finds the separate drawings (plan and profile) on a combined blueprint
sheet by projecting a binary content map onto the Y and X axes, then
guesses which drawing is which.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from enum import Enum
import logging

import numpy as np

from .decoder import PixelGrid, as_pixel_grid, crop, resample

logger = logging.getLogger("vision.regions")


MAX_ANALYSIS_DIM = 512
"""Sheets are downscaled so their long side is at most this many pixels."""

CONTENT_LUMINANCE = 100.0
"""Pixels brighter than this are content (blueprints are light-on-dark)."""

ROW_FILL_FRACTION = 0.01
"""A row is content when more than this fraction of its pixels are."""

MIN_BAND_FRACTION = 0.05
"""Bands shorter than this fraction of the sheet height are noise."""


class ViewLabel(Enum):
    """Blueprint view of a region."""
    TOP = "top"
    SIDE = "side"


@dataclass
class Region:
    """Pixel rectangle on the source sheet."""

    x: int
    y: int
    width: int
    height: int
    label: Optional[ViewLabel] = None

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def aspect(self) -> float:
        """Height over width (taller drawings have larger values)."""
        return self.height / self.width if self.width else float("inf")

    def crop(self, grid: PixelGrid) -> PixelGrid:
        """Cut this region out of the full-resolution sheet."""
        return crop(grid, self.x, self.y, self.width, self.height)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "label": self.label.value if self.label else None,
        }


# =============================================================================
# REGION FINDING
# =============================================================================

def content_map(grid: PixelGrid, cutoff: float = CONTENT_LUMINANCE) -> np.ndarray:
    """Binary map of content pixels using Rec. 601 luminance."""
    rgb = grid[:, :, :3].astype(np.float64)
    luminance = 0.299 * rgb[:, :, 0] + 0.587 * rgb[:, :, 1] + 0.114 * rgb[:, :, 2]
    return luminance > cutoff


def _row_bands(binary: np.ndarray) -> List[tuple]:
    """Horizontal bands of consecutive content rows as (start, end) pairs."""
    h, w = binary.shape
    has_content = binary.sum(axis=1) > w * ROW_FILL_FRACTION

    bands = []
    in_band = False
    start = 0
    for y in range(h):
        if has_content[y] and not in_band:
            in_band = True
            start = y
        elif not has_content[y] and in_band:
            in_band = False
            if y - start > h * MIN_BAND_FRACTION:
                bands.append((start, y))

    # A band touching the bottom edge is kept without the height check
    if in_band:
        bands.append((start, h))

    return bands


def find_blueprint_regions(grid: PixelGrid) -> List[Region]:
    """
    Detect distinct drawings on a blueprint sheet.

    Returns regions in source-pixel coordinates, largest area first.
    """
    grid = as_pixel_grid(grid)
    src_h, src_w = grid.shape[:2]

    scale = min(1.0, MAX_ANALYSIS_DIM / max(src_w, src_h))
    w = max(1, int(src_w * scale))
    h = max(1, int(src_h * scale))
    binary = content_map(resample(grid, w, h))

    regions: List[Region] = []
    for start, end in _row_bands(binary):
        band_h = end - start
        columns = binary[start:end].sum(axis=0) > band_h * ROW_FILL_FRACTION
        filled = np.flatnonzero(columns)
        if filled.size == 0:
            continue

        first_x, last_x = int(filled[0]), int(filled[-1])
        regions.append(Region(
            x=int(first_x / scale),
            y=int(start / scale),
            width=int((last_x - first_x) / scale),
            height=int(band_h / scale),
        ))

    # Stable sort keeps top-to-bottom order among equal areas
    regions.sort(key=lambda r: r.area, reverse=True)
    logger.debug(f"Found {len(regions)} blueprint region(s) on {src_w}x{src_h} sheet")
    return regions


def classify_views(regions: List[Region]) -> List[Region]:
    """
    Label a pair of regions as TOP and SIDE.

    Side views carry masts and funnels, so the region with the taller
    aspect ratio is taken as the side view. Any other number of regions
    is returned unlabeled.
    """
    if len(regions) != 2:
        return regions

    first, second = regions
    if first.aspect > second.aspect:
        first.label, second.label = ViewLabel.SIDE, ViewLabel.TOP
    else:
        first.label, second.label = ViewLabel.TOP, ViewLabel.SIDE
    return [first, second]


def split_blueprint(grid: PixelGrid) -> Dict[ViewLabel, PixelGrid]:
    """
    Find, classify and crop the plan and profile drawings of a sheet.

    Uses the two largest drawings; returns an empty dict when fewer than
    two are found.
    """
    grid = as_pixel_grid(grid)
    regions = find_blueprint_regions(grid)
    if len(regions) < 2:
        logger.warning(f"Expected two drawings on blueprint, found {len(regions)}")
        return {}

    labeled = classify_views(regions[:2])
    return {region.label: region.crop(grid) for region in labeled}
