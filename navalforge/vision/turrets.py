"""
vision/turrets.py - Turret blob detection v1.0

Finds main-battery turrets on a plan-view drawing. Turrets show up as
solid, roughly round blobs sitting on the centerline; their normalized
longitudinal positions feed GeometricMap.turrets.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List
import logging

import numpy as np
from scipy import ndimage

from .decoder import PixelGrid, as_pixel_grid, resample

logger = logging.getLogger("vision.turrets")


ANALYSIS_WIDTH = 512
CONTENT_LUMINANCE = 80.0
MIN_AREA_FRACTION = 0.002
MIN_ASPECT = 0.6
MAX_ASPECT = 1.4
MIN_DENSITY = 0.5
CENTERLINE_TOLERANCE = 0.15


@dataclass(frozen=True)
class Blob:
    """Connected patch of content pixels on the analysis grid."""

    x: float
    """Centroid column."""

    y: float
    """Centroid row."""

    area: int
    width: int
    height: int

    @property
    def aspect(self) -> float:
        return self.width / self.height

    @property
    def density(self) -> float:
        return self.area / (self.width * self.height)


def find_blobs(binary: np.ndarray) -> List[Blob]:
    """Label 4-connected components and measure each one."""
    labels, count = ndimage.label(binary)
    if count == 0:
        return []

    blobs = []
    rows, cols = np.indices(binary.shape)
    for index, bbox in enumerate(ndimage.find_objects(labels), start=1):
        if bbox is None:
            continue
        member = labels[bbox] == index
        area = int(member.sum())

        blobs.append(Blob(
            x=float(cols[bbox][member].sum()) / area,
            y=float(rows[bbox][member].sum()) / area,
            area=area,
            # Extents are last-minus-first, not pixel counts
            width=bbox[1].stop - bbox[1].start - 1,
            height=bbox[0].stop - bbox[0].start - 1,
        ))
    return blobs


def is_turret_like(blob: Blob, image_area: int) -> bool:
    """Large, squarish and solid."""
    if blob.width == 0 or blob.height == 0:
        return False
    return (
        blob.area > image_area * MIN_AREA_FRACTION
        and MIN_ASPECT < blob.aspect < MAX_ASPECT
        and blob.density > MIN_DENSITY
    )


def detect_turrets(grid: PixelGrid) -> List[float]:
    """
    Detect turrets on a plan view.

    Returns sorted normalized x positions in [0, 1] (0 = left edge of the
    drawing, read as the stern).
    """
    grid = as_pixel_grid(grid)
    src_h, src_w = grid.shape[:2]

    w = ANALYSIS_WIDTH
    h = max(1, int(w * (src_h / src_w)))
    analysis = resample(grid, w, h)

    luminance = analysis[:, :, :3].astype(np.float64).mean(axis=-1)
    binary = luminance > CONTENT_LUMINANCE

    candidates = [b for b in find_blobs(binary) if is_turret_like(b, w * h)]

    centerline = h / 2
    tolerance = h * CENTERLINE_TOLERANCE
    on_centerline = [b for b in candidates if abs(b.y - centerline) < tolerance]

    positions = sorted(b.x / w for b in on_centerline)
    logger.debug(
        f"Turret detection: {len(candidates)} candidate blob(s), "
        f"{len(positions)} on centerline"
    )
    return positions
