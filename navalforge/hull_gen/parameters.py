"""
hull_gen/parameters.py - Ship parameter and reconstruction hint structures.

Physical dimensions and style sliders (ShipParameters) plus the
annotation hints that steer reconstruction (GeometricMap). Both are
read-only inputs to the hull builder.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from navalforge.errors import GeometryParameterError
from .enums import ModelStyle


SLIDER_RANGES: Dict[str, Tuple[float, float]] = {
    "hull_extrusion": (50.0, 150.0),
    "superstructure_height": (50.0, 200.0),
    "turret_scale": (80.0, 150.0),
}
"""Ranges offered by the parameter UI. The builder accepts any value >= 0."""


@dataclass(frozen=True)
class ShipDimensions:
    """
    Principal dimensions.

    All dimensions in meters.
    """

    length: float = 250.0
    """Length overall (m)."""

    beam: float = 36.0
    """Maximum beam (m)."""

    draft: float = 15.0
    """Waterline to keel (m)."""

    def validate(self) -> List[str]:
        """Validate dimensions for consistency."""
        errors = []

        if self.length <= 0:
            errors.append("Length must be positive")
        if self.beam <= 0:
            errors.append("Beam must be positive")
        if self.draft <= 0:
            errors.append("Draft must be positive")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "length": self.length,
            "beam": self.beam,
            "draft": self.draft,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ShipDimensions':
        """Create from dictionary."""
        return cls(
            length=data.get("length", 250.0),
            beam=data.get("beam", 36.0),
            draft=data.get("draft", 15.0),
        )


@dataclass(frozen=True)
class ShipParameters:
    """
    Physical dimensions plus style sliders.

    Slider values are percentages where 100 means "as traced".
    """

    dimensions: ShipDimensions = field(default_factory=ShipDimensions)

    # === GEOMETRY SLIDERS ===
    hull_extrusion: float = 100.0
    """Scales traced half-beam (%)."""

    superstructure_height: float = 100.0
    """Scales superstructure height (%)."""

    turret_scale: float = 100.0
    """Scales turret radius (%)."""

    # === PASS-THROUGH METADATA ===
    model_style: ModelStyle = ModelStyle.PHOTOREALISTIC
    armor_thickness: float = 100.0
    calibration_scale: float = 1.0
    """Meters per pixel (conceptual, not used by geometry)."""

    camouflage: str = "Auto"

    @property
    def length(self) -> float:
        return self.dimensions.length

    @property
    def beam(self) -> float:
        return self.dimensions.beam

    @property
    def draft(self) -> float:
        return self.dimensions.draft

    def validate(self) -> List[str]:
        errors = self.dimensions.validate()
        for name in ("hull_extrusion", "superstructure_height", "turret_scale"):
            if getattr(self, name) < 0:
                errors.append(f"{name} must not be negative")
        return errors

    def check(self) -> None:
        """Raise GeometryParameterError for the first invalid value."""
        for name in ("length", "beam", "draft"):
            value = getattr(self.dimensions, name)
            if not value > 0:
                raise GeometryParameterError(param=name, value=value, valid_range=(0.0, None))
        for name in ("hull_extrusion", "superstructure_height", "turret_scale"):
            value = getattr(self, name)
            if not value >= 0:
                raise GeometryParameterError(param=name, value=value, valid_range=(0.0, None))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dimensions": self.dimensions.to_dict(),
            "hull_extrusion": self.hull_extrusion,
            "superstructure_height": self.superstructure_height,
            "turret_scale": self.turret_scale,
            "model_style": self.model_style.value,
            "armor_thickness": self.armor_thickness,
            "calibration_scale": self.calibration_scale,
            "camouflage": self.camouflage,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ShipParameters':
        return cls(
            dimensions=ShipDimensions.from_dict(data.get("dimensions", {})),
            hull_extrusion=data.get("hull_extrusion", 100.0),
            superstructure_height=data.get("superstructure_height", 100.0),
            turret_scale=data.get("turret_scale", 100.0),
            model_style=ModelStyle(data.get("model_style", ModelStyle.PHOTOREALISTIC.value)),
            armor_thickness=data.get("armor_thickness", 100.0),
            calibration_scale=data.get("calibration_scale", 1.0),
            camouflage=data.get("camouflage", "Auto"),
        )


# =============================================================================
# RECONSTRUCTION HINTS
# =============================================================================

@dataclass(frozen=True)
class SuperstructureSpan:
    """Normalized longitudinal extent of the superstructure (0 = stern, 1 = bow)."""

    start: float = 0.35
    end: float = 0.65

    def to_dict(self) -> Dict[str, float]:
        return {"start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SuperstructureSpan':
        return cls(start=data.get("start", 0.35), end=data.get("end", 0.65))


@dataclass(frozen=True)
class GeometricMap:
    """
    Aggregated reconstruction hints.

    Every field is optional; the builder substitutes parametric defaults
    for anything missing. Profiles may be ProfileCurve objects or plain
    sequences of normalized samples.
    """

    top_profile: Optional[Sequence[float]] = None
    """Plan-view beam curve (stern to bow)."""

    side_profile: Optional[Sequence[float]] = None
    """Profile-view height curve (stern to bow)."""

    turrets: Optional[Tuple[float, ...]] = None
    """Normalized turret positions along the length. None selects the
    default battery; an empty tuple means no turrets."""

    superstructure: Optional[SuperstructureSpan] = None

    def __post_init__(self):
        if self.turrets is not None:
            object.__setattr__(self, "turrets", tuple(float(t) for t in self.turrets))

    def with_profiles(
        self,
        top_profile: Optional[Sequence[float]] = None,
        side_profile: Optional[Sequence[float]] = None,
    ) -> 'GeometricMap':
        """Copy with traced profiles attached (existing ones kept when None)."""
        return GeometricMap(
            top_profile=top_profile if top_profile is not None else self.top_profile,
            side_profile=side_profile if side_profile is not None else self.side_profile,
            turrets=self.turrets,
            superstructure=self.superstructure,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "top_profile": list(self.top_profile) if self.top_profile is not None else None,
            "side_profile": list(self.side_profile) if self.side_profile is not None else None,
            "turrets": list(self.turrets) if self.turrets is not None else None,
            "superstructure": self.superstructure.to_dict() if self.superstructure else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GeometricMap':
        span = data.get("superstructure")
        return cls(
            top_profile=data.get("top_profile"),
            side_profile=data.get("side_profile"),
            turrets=data.get("turrets"),
            superstructure=SuperstructureSpan.from_dict(span) if span else None,
        )
