"""
hull_gen/__init__.py - Ship mesh generation exports.

COORDINATE FRAME CONTRACT
=========================
  Origin: Midship on the centerline, y=0 near the notional waterline

  X-axis: Transverse, cos(angle) * half-beam across each ring
  Y-axis: Up (keel negative, deck positive)
  Z-axis: Longitudinal, -length/2 at the stern, +length/2 at the bow

  Units: Meters (m) for all dimensions
"""

from .enums import ModelStyle, MeshPart

from .parameters import (
    SLIDER_RANGES,
    ShipDimensions,
    ShipParameters,
    SuperstructureSpan,
    GeometricMap,
)

from .generator import (
    DEFAULT_TURRETS,
    DEFAULT_SUPERSTRUCTURE,
    GeneratorConfig,
    HullMeshBuilder,
    expected_counts,
    generate_ship_mesh,
    sample_profile,
    taper,
)

__all__ = [
    # Enums
    "ModelStyle",
    "MeshPart",
    # Parameters
    "SLIDER_RANGES",
    "ShipDimensions",
    "ShipParameters",
    "SuperstructureSpan",
    "GeometricMap",
    # Generator
    "DEFAULT_TURRETS",
    "DEFAULT_SUPERSTRUCTURE",
    "GeneratorConfig",
    "HullMeshBuilder",
    "expected_counts",
    "generate_ship_mesh",
    "sample_profile",
    "taper",
]
