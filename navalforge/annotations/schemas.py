"""
navalforge/annotations/schemas.py - Pydantic Annotation Models

Structured schema for the ship annotation provider's JSON output. Field
aliases follow the provider's camelCase keys; snake_case names are
accepted too.
"""

from __future__ import annotations

from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field


NormalizedPosition = Annotated[float, Field(ge=0.0, le=1.0)]


# =============================================================================
# Geometry Schemas
# =============================================================================


class RealDimensions(BaseModel):
    """Estimated principal dimensions of the real ship."""

    length: float = Field(..., gt=0, description="Length in meters")
    beam: float = Field(..., gt=0, description="Beam/Width in meters")
    draft: float = Field(..., gt=0, description="Draft in meters")


class SuperstructurePayload(BaseModel):
    """Normalized longitudinal extent of the superstructure."""

    start: NormalizedPosition = Field(..., description="Aft end (0 = stern)")
    end: NormalizedPosition = Field(..., description="Forward end (1 = bow)")


class GeometryPayload(BaseModel):
    """Normalized coordinates for 3D reconstruction (0.0 to 1.0)."""

    turrets: List[NormalizedPosition] = Field(
        default_factory=list,
        description="List of normalized X-positions (0-1) for main turrets",
        max_length=16,
    )
    superstructure: Optional[SuperstructurePayload] = Field(
        None, description="Superstructure span"
    )


# =============================================================================
# Annotation Schema
# =============================================================================


class AnnotationPayload(BaseModel):
    """Response schema for blueprint annotation."""

    model_config = ConfigDict(populate_by_name=True)

    ship_class: str = Field("Unknown", alias="shipClass", description="Ship class name")
    estimated_length: str = Field("", alias="estimatedLength")
    armament: List[str] = Field(default_factory=list)
    design_year: str = Field("", alias="designYear")
    description: str = Field("")
    real_dimensions: Optional[RealDimensions] = Field(None, alias="realDimensions")
    geometry: Optional[GeometryPayload] = Field(None)
