"""
navalforge/annotations - Annotation provider boundary.
"""

from .schemas import (
    AnnotationPayload,
    GeometryPayload,
    RealDimensions,
    SuperstructurePayload,
)
from .protocol import (
    AnnotationProvider,
    AnnotationResult,
    StaticAnnotationProvider,
    parse_annotation,
)

__all__ = [
    "AnnotationPayload",
    "GeometryPayload",
    "RealDimensions",
    "SuperstructurePayload",
    "AnnotationProvider",
    "AnnotationResult",
    "StaticAnnotationProvider",
    "parse_annotation",
]
