"""
navalforge/annotations/protocol.py - Annotation provider boundary v1.0

The annotation provider (an external generative model, or a person
correcting its output) looks at a blueprint and suggests the ship class,
dimensions, turret positions and superstructure span. The core depends
only on the AnnotationProvider protocol; provider output is validated
against AnnotationPayload before it becomes a GeometricMap.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Protocol, Union, runtime_checkable
import json
import logging

from pydantic import ValidationError as PydanticValidationError

from navalforge.errors import AnnotationError
from navalforge.hull_gen.parameters import (
    GeometricMap,
    ShipDimensions,
    ShipParameters,
    SuperstructureSpan,
)
from .schemas import AnnotationPayload

logger = logging.getLogger("annotations.protocol")


# =============================================================================
# ANNOTATION RESULT
# =============================================================================

@dataclass(frozen=True)
class AnnotationResult:
    """Validated annotation converted to core types."""

    ship_class: str = "Unknown"
    estimated_length: str = ""
    armament: List[str] = field(default_factory=list)
    design_year: str = ""
    description: str = ""

    dimensions: Optional[ShipDimensions] = None
    """Suggested real dimensions, when the provider gave any."""

    geometry: GeometricMap = field(default_factory=GeometricMap)
    """Turret and superstructure hints (no profiles)."""

    def suggest_parameters(self, base: Optional[ShipParameters] = None) -> ShipParameters:
        """Copy of base with the suggested dimensions applied."""
        base = base or ShipParameters()
        if self.dimensions is None:
            return base
        return replace(base, dimensions=self.dimensions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ship_class": self.ship_class,
            "estimated_length": self.estimated_length,
            "armament": list(self.armament),
            "design_year": self.design_year,
            "description": self.description,
            "dimensions": self.dimensions.to_dict() if self.dimensions else None,
            "geometry": self.geometry.to_dict(),
        }

    @classmethod
    def from_payload(cls, payload: AnnotationPayload) -> "AnnotationResult":
        dimensions = None
        if payload.real_dimensions is not None:
            dims = payload.real_dimensions
            dimensions = ShipDimensions(length=dims.length, beam=dims.beam, draft=dims.draft)

        turrets = None
        span = None
        if payload.geometry is not None:
            # An empty list means the provider saw nothing; keep the default battery.
            if payload.geometry.turrets:
                turrets = tuple(payload.geometry.turrets)
            if payload.geometry.superstructure is not None:
                span = SuperstructureSpan(
                    start=payload.geometry.superstructure.start,
                    end=payload.geometry.superstructure.end,
                )

        return cls(
            ship_class=payload.ship_class,
            estimated_length=payload.estimated_length,
            armament=list(payload.armament),
            design_year=payload.design_year,
            description=payload.description,
            dimensions=dimensions,
            geometry=GeometricMap(turrets=turrets, superstructure=span),
        )


def parse_annotation(
    raw: Union[str, bytes, Mapping[str, Any]],
    provider: str = "",
) -> AnnotationResult:
    """
    Validate raw provider output.

    Accepts a JSON document (optionally wrapped in a markdown code fence)
    or an already-decoded mapping.

    Raises:
        AnnotationError: If the output is not JSON or fails the schema
    """
    data: Any = raw
    if isinstance(raw, (str, bytes)):
        content = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        content = content.strip()
        if content.startswith("```"):
            content = content.split("```")[1]
            if content.startswith("json"):
                content = content[4:]
            content = content.strip()
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise AnnotationError(reason=f"not valid JSON: {e}", provider=provider) from e

    try:
        payload = AnnotationPayload.model_validate(data)
    except PydanticValidationError as e:
        raise AnnotationError(
            reason=f"payload does not match schema: {e.error_count()} errors",
            provider=provider,
            errors=e.errors(include_url=False),
        ) from e

    result = AnnotationResult.from_payload(payload)
    logger.debug(f"Annotation from '{provider}': class={result.ship_class}")
    return result


# =============================================================================
# PROVIDER PROTOCOL
# =============================================================================

@runtime_checkable
class AnnotationProvider(Protocol):
    """Anything that can annotate a blueprint image."""

    @property
    def name(self) -> str:
        ...

    async def annotate(self, image_bytes: bytes) -> AnnotationResult:
        """
        Annotate a blueprint image.

        Raises:
            AnnotationError: If the provider output is unusable
        """
        ...


class StaticAnnotationProvider:
    """
    Provider that returns a fixed annotation.

    Used for manual corrections and tests. The payload is validated once,
    at construction.
    """

    def __init__(
        self,
        payload: Union[str, bytes, Mapping[str, Any], AnnotationResult],
        name: str = "static",
    ):
        self._name = name
        if isinstance(payload, AnnotationResult):
            self._result = payload
        else:
            self._result = parse_annotation(payload, provider=name)
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    async def annotate(self, image_bytes: bytes) -> AnnotationResult:
        self.calls += 1
        return self._result
