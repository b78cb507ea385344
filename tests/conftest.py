"""
NavalForge Test Configuration and Fixtures

Synthetic blueprint images built with numpy and encoded with Pillow, so
tests never depend on files on disk.
"""

import io

import numpy as np
import pytest
from PIL import Image

from navalforge.hull_gen.parameters import ShipDimensions, ShipParameters


WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)


def blank_grid(width: int, height: int, color=WHITE) -> np.ndarray:
    """Solid H x W x 4 RGBA grid."""
    grid = np.zeros((height, width, 4), dtype=np.uint8)
    grid[:, :] = color
    return grid


def to_png(grid: np.ndarray) -> bytes:
    """Encode an RGBA grid as PNG bytes."""
    buf = io.BytesIO()
    Image.fromarray(grid).save(buf, format="PNG")
    return buf.getvalue()


def hull_silhouette(width: int, height: int, background=WHITE, ink=BLACK) -> np.ndarray:
    """Pointed-ellipse ship silhouette centered on the grid."""
    grid = blank_grid(width, height, background)
    rows, cols = np.indices((height, width))
    t = (cols + 0.5) / width
    half = (1.0 - np.abs(2.0 * t - 1.0) ** 2.5) * height * 0.35
    inside = np.abs(rows + 0.5 - height / 2.0) < half
    inside[:, : width // 20] = False
    inside[:, width - width // 20:] = False
    grid[inside] = ink
    return grid


@pytest.fixture
def block_grid():
    """100 x 100 white grid with a black block in columns [40, 60), rows [25, 75)."""
    grid = blank_grid(100, 100)
    grid[25:75, 40:60] = BLACK
    return grid


@pytest.fixture
def block_png(block_grid):
    return to_png(block_grid)


@pytest.fixture
def top_png():
    """Plan-view silhouette, 300 x 80."""
    return to_png(hull_silhouette(300, 80))


@pytest.fixture
def side_png():
    """Profile-view silhouette, 300 x 120."""
    return to_png(hull_silhouette(300, 120))


@pytest.fixture
def blank_png():
    return to_png(blank_grid(64, 64))


@pytest.fixture
def default_params():
    """Application defaults: 250 m x 36 m x 15 m, all sliders 100%."""
    return ShipParameters()


@pytest.fixture
def long_ship_params():
    return ShipParameters(dimensions=ShipDimensions(length=300.0, beam=40.0, draft=12.0))
