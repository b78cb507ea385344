"""
vision/__init__.py - Blueprint vision exports.

Deterministic pixel analysis of ship blueprints:
- Silhouette tracing (contracts, decoder, extractor)
- Sheet splitting into plan/profile views (regions)
- Turret blob detection (turrets)
"""

from .contracts import (
    SAMPLES,
    RESOLUTION,
    DEGENERACY_EPSILON,
    FOREGROUND_CUTOFF,
    AxisOrientation,
    TraceConfig,
    ProfileCurve,
)
from .decoder import (
    PixelGrid,
    BitmapDecoder,
    PillowBitmapDecoder,
    as_pixel_grid,
    resample,
    crop,
)
from .extractor import (
    ProfileExtractor,
    trace_silhouette,
    scan_columns,
    normalize,
    smooth,
)
from .regions import (
    Region,
    ViewLabel,
    find_blueprint_regions,
    classify_views,
    split_blueprint,
)
from .turrets import detect_turrets


__all__ = [
    # Contracts
    "SAMPLES",
    "RESOLUTION",
    "DEGENERACY_EPSILON",
    "FOREGROUND_CUTOFF",
    "AxisOrientation",
    "TraceConfig",
    "ProfileCurve",
    # Decoding
    "PixelGrid",
    "BitmapDecoder",
    "PillowBitmapDecoder",
    "as_pixel_grid",
    "resample",
    "crop",
    # Extraction
    "ProfileExtractor",
    "trace_silhouette",
    "scan_columns",
    "normalize",
    "smooth",
    # Regions
    "Region",
    "ViewLabel",
    "find_blueprint_regions",
    "classify_views",
    "split_blueprint",
    # Turrets
    "detect_turrets",
]
