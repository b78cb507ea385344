"""
navalforge/errors.py - Error taxonomy v1.0

Structured error types for blueprint loading, hull generation and export.
Every error carries a code for programmatic handling, a human-readable
message, a recovery hint and a details dict for debugging.
"""

from __future__ import annotations
from typing import Any, Dict, Optional, Tuple
from enum import Enum
import logging

logger = logging.getLogger("navalforge.errors")


# =============================================================================
# ERROR CATEGORIES AND SEVERITY
# =============================================================================

class ErrorCategory(Enum):
    """Categories of forge errors."""
    LOAD = "blueprint_load"            # Image bytes could not be decoded
    PARAMETER = "geometry_parameter"   # Invalid input parameters
    EXPORT = "geometry_export"         # Export operation failed
    ANNOTATION = "annotation"          # Provider payload rejected
    PIPELINE = "pipeline"              # Request lifecycle
    GENERATION = "geometry_generation" # Mesh construction failed


class ErrorSeverity(Enum):
    """Severity levels for forge errors."""
    ERROR = "error"       # Operation failed, cannot continue
    WARNING = "warning"   # Operation succeeded with issues
    INFO = "info"         # Informational message


# =============================================================================
# BASE ERROR CLASS
# =============================================================================

class ForgeError(Exception):
    """
    Base class for NavalForge errors.

    Provides structured error information with:
    - Error code for programmatic handling
    - Human-readable message
    - Recovery hints for user guidance
    - Detailed context for debugging
    """

    code: str = "FORGE_000"
    category: ErrorCategory = ErrorCategory.PARAMETER
    severity: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str = "",
        *,
        recovery_hint: str = "",
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        self.message = message or self.__class__.__doc__ or "Forge error"
        self.recovery_hint = recovery_hint
        self.details = details or {}
        self.details.update(kwargs)

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code,
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "recovery_hint": self.recovery_hint,
            "details": self.details,
        }

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.recovery_hint:
            parts.append(f"Hint: {self.recovery_hint}")
        return " ".join(parts)


# =============================================================================
# SPECIFIC ERROR TYPES
# =============================================================================

class LoadError(ForgeError):
    """Blueprint image could not be decoded."""

    code = "FORGE_001"
    category = ErrorCategory.LOAD
    severity = ErrorSeverity.ERROR

    def __init__(
        self,
        reason: str,
        source: str = "",
        **kwargs,
    ):
        message = "Failed to load image for tracing"
        if source:
            message += f" ({source})"
        message += f": {reason}"

        super().__init__(
            message=message,
            recovery_hint="Check that the file is a readable PNG/JPEG/WebP raster image.",
            reason=reason,
            source=source,
            **kwargs,
        )


class GeometryParameterError(ForgeError):
    """Invalid geometry parameters."""

    code = "FORGE_002"
    category = ErrorCategory.PARAMETER
    severity = ErrorSeverity.ERROR

    def __init__(
        self,
        param: str,
        value: Any,
        valid_range: Tuple[Optional[float], Optional[float]],
        **kwargs,
    ):
        low, high = valid_range
        message = f"Parameter '{param}' value {value} outside valid range {valid_range}"
        if high is None:
            hint = f"Set {param} to a value greater than {low}."
        else:
            hint = f"Adjust {param} to be within {low} and {high}."

        super().__init__(
            message=message,
            recovery_hint=hint,
            param=param,
            value=value,
            valid_range=valid_range,
            **kwargs,
        )


class ExportError(ForgeError):
    """Export operation failed."""

    code = "FORGE_003"
    category = ErrorCategory.EXPORT
    severity = ErrorSeverity.ERROR

    def __init__(
        self,
        format: str,
        reason: str,
        **kwargs,
    ):
        message = f"Export to {format} failed: {reason}"
        super().__init__(
            message=message,
            recovery_hint="Use one of the supported export formats.",
            format=format,
            reason=reason,
            **kwargs,
        )


class AnnotationError(ForgeError):
    """Annotation provider returned an unusable payload."""

    code = "FORGE_004"
    category = ErrorCategory.ANNOTATION
    severity = ErrorSeverity.WARNING

    def __init__(
        self,
        reason: str,
        provider: str = "",
        **kwargs,
    ):
        message = f"Annotation rejected: {reason}"
        super().__init__(
            message=message,
            recovery_hint="Correct the geometric map manually or re-run the annotation step.",
            reason=reason,
            provider=provider,
            **kwargs,
        )


class SupersededRequestError(ForgeError):
    """A newer request replaced this one before it finished."""

    code = "FORGE_005"
    category = ErrorCategory.PIPELINE
    severity = ErrorSeverity.INFO

    def __init__(
        self,
        ticket: int,
        latest: int,
        **kwargs,
    ):
        message = f"Request {ticket} superseded by request {latest}"
        super().__init__(
            message=message,
            recovery_hint="Use the result of the latest request.",
            ticket=ticket,
            latest=latest,
            **kwargs,
        )


class MeshGenerationError(ForgeError):
    """Mesh generation failed."""

    code = "FORGE_006"
    category = ErrorCategory.GENERATION
    severity = ErrorSeverity.ERROR

    def __init__(
        self,
        stage: str,
        reason: str,
        **kwargs,
    ):
        message = f"Mesh generation failed at {stage}: {reason}"
        super().__init__(
            message=message,
            recovery_hint="Faces may only reference vertices emitted earlier in the same build.",
            stage=stage,
            reason=reason,
            **kwargs,
        )


# =============================================================================
# ERROR RESPONSE HELPERS
# =============================================================================

def error_response(error: ForgeError) -> Dict[str, Any]:
    """Convert a ForgeError to a JSON-serializable response."""
    return {
        "error": error.to_dict(),
    }


# All error codes for documentation
FORGE_ERROR_CODES = {
    "FORGE_000": "Generic forge error",
    "FORGE_001": "Blueprint image could not be decoded",
    "FORGE_002": "Invalid geometry parameter",
    "FORGE_003": "Export operation failed",
    "FORGE_004": "Annotation payload rejected",
    "FORGE_005": "Request superseded",
    "FORGE_006": "Mesh generation failed",
}
