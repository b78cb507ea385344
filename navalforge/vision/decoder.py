"""
vision/decoder.py - Bitmap decoding boundary v1.0

Decoding is injected through the BitmapDecoder protocol so the extractor
never touches a graphical runtime. A PixelGrid is a caller-owned
H x W x 4 uint8 RGBA numpy array.
"""

from __future__ import annotations
from pathlib import Path
from typing import Protocol, Union, runtime_checkable
import io
import logging

import numpy as np
from PIL import Image, UnidentifiedImageError

from navalforge.errors import LoadError

logger = logging.getLogger("vision.decoder")

PixelGrid = np.ndarray
"""H x W x 4 RGBA array of dtype uint8."""

ImageSource = Union[bytes, bytearray, memoryview, str, Path]


@runtime_checkable
class BitmapDecoder(Protocol):
    """Turns encoded image bytes into an RGBA pixel grid."""

    def decode(self, data: bytes) -> PixelGrid:
        """Decode image bytes. Raises LoadError on failure."""
        ...


class PillowBitmapDecoder:
    """Default decoder backed by Pillow."""

    def decode(self, data: bytes) -> PixelGrid:
        if not data:
            raise LoadError(reason="empty image data")

        try:
            with Image.open(io.BytesIO(bytes(data))) as img:
                img.load()
                rgba = img.convert("RGBA")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise LoadError(reason=str(e)) from e

        grid = np.asarray(rgba, dtype=np.uint8).copy()
        logger.debug(f"Decoded bitmap {grid.shape[1]}x{grid.shape[0]}")
        return grid


# =============================================================================
# GRID HELPERS
# =============================================================================

def as_pixel_grid(array: np.ndarray) -> PixelGrid:
    """
    Coerce an array into an RGBA PixelGrid.

    Accepts H x W (grayscale), H x W x 3 (RGB) or H x W x 4 (RGBA).
    """
    grid = np.asarray(array)

    if grid.ndim == 2:
        grid = np.stack([grid, grid, grid], axis=-1)
    if grid.ndim != 3 or grid.shape[2] not in (3, 4):
        raise LoadError(reason=f"unsupported pixel grid shape {grid.shape}")
    if grid.shape[0] == 0 or grid.shape[1] == 0:
        raise LoadError(reason="pixel grid has no pixels")

    if grid.dtype != np.uint8:
        grid = np.clip(grid, 0, 255).astype(np.uint8)

    if grid.shape[2] == 3:
        alpha = np.full(grid.shape[:2] + (1,), 255, dtype=np.uint8)
        grid = np.concatenate([grid, alpha], axis=-1)

    return grid


def resample(grid: PixelGrid, width: int, height: int) -> PixelGrid:
    """
    Resample a grid to width x height with bilinear filtering.

    A grid already at the target size is returned as a copy so the result
    never aliases caller memory.
    """
    grid = as_pixel_grid(grid)
    if grid.shape[0] == height and grid.shape[1] == width:
        return grid.copy()

    img = Image.fromarray(grid)
    resized = img.resize((width, height), resample=Image.Resampling.BILINEAR)
    return np.asarray(resized, dtype=np.uint8).copy()


def crop(grid: PixelGrid, x: int, y: int, width: int, height: int) -> PixelGrid:
    """Cut a rectangle out of a grid as a new grid."""
    grid = as_pixel_grid(grid)
    x0 = max(0, x)
    y0 = max(0, y)
    x1 = min(grid.shape[1], x + width)
    y1 = min(grid.shape[0], y + height)
    if x1 <= x0 or y1 <= y0:
        raise LoadError(reason=f"crop ({x}, {y}, {width}, {height}) is outside the image")
    return grid[y0:y1, x0:x1].copy()


def read_source(source: ImageSource) -> bytes:
    """Read raw image bytes from bytes or a filesystem path."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)

    path = Path(source)
    try:
        return path.read_bytes()
    except OSError as e:
        raise LoadError(reason=str(e), source=str(path)) from e
