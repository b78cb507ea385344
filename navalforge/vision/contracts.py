"""
vision/contracts.py - Silhouette tracing data contracts v1.0

Defines the analysis grid constants, the per-call trace configuration
and the immutable profile curve returned by the extractor.

SCAN AXIS CONTRACT
==================
  Curves are indexed left-to-right across the source image.

  PLAN view (top):     index 0 = stern, index SAMPLES-1 = bow,
                       value = local beam / maximum beam
  PROFILE view (side): index 0 = stern, index SAMPLES-1 = bow,
                       value = local height / maximum height
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Tuple
import collections.abc
from enum import Enum

from navalforge.errors import GeometryParameterError


# =============================================================================
# ANALYSIS GRID
# =============================================================================

SAMPLES = 100
"""Columns of the analysis grid (resolution along the ship length)."""

RESOLUTION = 100
"""Rows of the analysis grid (resolution across beam or height)."""

DEGENERACY_EPSILON = 0.05
"""Raw peaks not above this are treated as "no usable signal"."""

FOREGROUND_CUTOFF = 50.0
"""RGB distance from the background reference that marks a foreground texel."""


class AxisOrientation(Enum):
    """Which blueprint view a curve was traced from."""
    PLAN = "plan"        # Top view, traces beam
    PROFILE = "profile"  # Side view, traces height


# =============================================================================
# TRACE CONFIG
# =============================================================================

@dataclass(frozen=True)
class TraceConfig:
    """
    Configuration for one extraction call.

    detection_sensitivity is carried for callers and UI sliders but the
    column scan always uses FOREGROUND_CUTOFF.
    """

    detection_sensitivity: float = 128.0
    """Luminance cutoff (0-255) requested by the caller. Not consulted by the scan."""

    smoothing_radius: int = 3
    """Half-width of the moving-average window (0 disables smoothing)."""

    orientation: AxisOrientation = AxisOrientation.PLAN

    def __post_init__(self):
        if isinstance(self.smoothing_radius, bool) or not isinstance(self.smoothing_radius, int):
            raise GeometryParameterError(
                param="smoothing_radius",
                value=self.smoothing_radius,
                valid_range=(0, None),
            )
        if self.smoothing_radius < 0:
            raise GeometryParameterError(
                param="smoothing_radius",
                value=self.smoothing_radius,
                valid_range=(0, None),
            )
        if not 0.0 <= self.detection_sensitivity <= 255.0:
            raise GeometryParameterError(
                param="detection_sensitivity",
                value=self.detection_sensitivity,
                valid_range=(0.0, 255.0),
            )

    @classmethod
    def for_plan(cls, smoothing_radius: int = 3) -> "TraceConfig":
        return cls(smoothing_radius=smoothing_radius, orientation=AxisOrientation.PLAN)

    @classmethod
    def for_profile(cls, smoothing_radius: int = 3) -> "TraceConfig":
        return cls(smoothing_radius=smoothing_radius, orientation=AxisOrientation.PROFILE)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detection_sensitivity": self.detection_sensitivity,
            "smoothing_radius": self.smoothing_radius,
            "orientation": self.orientation.value,
        }


# =============================================================================
# PROFILE CURVE
# =============================================================================

@dataclass(frozen=True)
class ProfileCurve(collections.abc.Sequence):
    """
    Normalized silhouette curve.

    Behaves as a read-only sequence of floats so it can be handed to the
    hull builder wherever a plain list of samples is accepted.
    """

    values: Tuple[float, ...] = field(default_factory=lambda: (0.0,) * SAMPLES)
    orientation: AxisOrientation = AxisOrientation.PLAN

    raw_peak: float = 0.0
    """Largest raw column thickness as a fraction of the grid height."""

    def __post_init__(self):
        # Freeze whatever sequence was passed in
        object.__setattr__(self, "values", tuple(float(v) for v in self.values))

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index):
        return self.values[index]

    def __iter__(self) -> Iterator[float]:
        return iter(self.values)

    @property
    def is_degenerate(self) -> bool:
        """True when no usable trace was found (all samples zero)."""
        return not any(self.values)

    @property
    def peak(self) -> float:
        return max(self.values) if self.values else 0.0

    def reversed(self) -> "ProfileCurve":
        """Same curve read from the other end (bow and stern swapped)."""
        return ProfileCurve(
            values=self.values[::-1],
            orientation=self.orientation,
            raw_peak=self.raw_peak,
        )

    def to_list(self) -> list:
        return list(self.values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "values": [round(v, 6) for v in self.values],
            "orientation": self.orientation.value,
            "raw_peak": round(self.raw_peak, 6),
            "is_degenerate": self.is_degenerate,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProfileCurve":
        return cls(
            values=tuple(data.get("values", ())),
            orientation=AxisOrientation(data.get("orientation", "plan")),
            raw_peak=data.get("raw_peak", 0.0),
        )
