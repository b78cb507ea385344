"""
webgl/exporter.py - Geometry export with traceability v1.0

Exports a MeshBuffer to Wavefront OBJ text, JSON or the packed binary
buffer form. OBJ output is byte-stable: identical mesh and parameters
always produce identical bytes.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union
import hashlib
import json
import os
import logging

from navalforge.errors import ExportError
from navalforge.hull_gen.parameters import ShipParameters
from .schema import MeshBuffer, SCHEMA_VERSION

logger = logging.getLogger("webgl.exporter")


OBJ_TITLE = "# NavalForge 3D Export"
OBJ_PROVENANCE = "# Generated from 2D Blueprint Analysis"
OBJ_OBJECT = "Battleship_Hull"
OBJ_GROUP = "Battleship"
OBJ_PRECISION = 4


# =============================================================================
# EXPORT FORMATS
# =============================================================================

class ExportFormat(Enum):
    """Supported export formats."""
    OBJ = "obj"        # Wavefront OBJ
    JSON = "json"      # MeshBuffer.to_dict plus parameters
    BINARY = "bin"     # MeshBuffer.to_binary

    @classmethod
    def parse(cls, value: Union[str, "ExportFormat"]) -> "ExportFormat":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ExportError(format=str(value), reason="unsupported_format") from None


_EXTENSIONS = {
    ExportFormat.OBJ: ".obj",
    ExportFormat.JSON: ".json",
    ExportFormat.BINARY: ".bin",
}


# =============================================================================
# EXPORT METADATA
# =============================================================================

@dataclass
class ExportMetadata:
    """
    Export traceability metadata.

    The digest covers the exported bytes only, so two exports of the
    same inputs share a digest even though exported_at differs.
    """
    export_id: str
    mesh_id: str
    exported_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    schema_version: str = SCHEMA_VERSION
    format: str = ""

    # Statistics
    vertex_count: int = 0
    face_count: int = 0
    file_size_bytes: int = 0
    sha256: str = ""

    # Coordinate system
    units: str = "meters"
    up_axis: str = "Y"
    forward_axis: str = "Z"

    # Pass-through render metadata
    model_style: str = ""
    camouflage: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "export_id": self.export_id,
            "mesh_id": self.mesh_id,
            "exported_at": self.exported_at,
            "schema_version": self.schema_version,
            "format": self.format,
            "vertex_count": self.vertex_count,
            "face_count": self.face_count,
            "file_size_bytes": self.file_size_bytes,
            "sha256": self.sha256,
            "units": self.units,
            "up_axis": self.up_axis,
            "forward_axis": self.forward_axis,
            "model_style": self.model_style,
            "camouflage": self.camouflage,
        }


@dataclass
class ExportResult:
    """Result of an export operation."""
    format: ExportFormat
    data: bytes
    metadata: ExportMetadata
    warnings: List[str] = field(default_factory=list)

    @property
    def file_extension(self) -> str:
        return _EXTENSIONS.get(self.format, ".bin")

    @property
    def text(self) -> str:
        """Decoded payload for the text formats."""
        if self.format == ExportFormat.BINARY:
            raise ExportError(format=self.format.value, reason="binary payload has no text form")
        return self.data.decode("utf-8")


# =============================================================================
# OBJ TEXT
# =============================================================================

def format_coordinate(value: float) -> str:
    """Fixed-point coordinate with negative zero folded to zero."""
    text = f"{value:.{OBJ_PRECISION}f}"
    if text.startswith("-") and float(text) == 0.0:
        return text[1:]
    return text


def format_dimension(value: float) -> str:
    """Shortest decimal form; integral values print without a fraction."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def export_obj(mesh: MeshBuffer, params: ShipParameters) -> str:
    """
    Render a mesh as Wavefront OBJ text.

    Layout: header comments, object name, one v line per vertex in
    emission order, a blank line, the group name, then one f line per
    face with 1-based indices.
    """
    lines = [
        OBJ_TITLE,
        OBJ_PROVENANCE,
        (
            f"# Length: {format_dimension(params.length)}m, "
            f"Beam: {format_dimension(params.beam)}m, "
            f"Draft: {format_dimension(params.draft)}m"
        ),
        f"o {OBJ_OBJECT}",
    ]

    for x, y, z in mesh.vertices:
        lines.append(f"v {format_coordinate(x)} {format_coordinate(y)} {format_coordinate(z)}")

    lines.append("")
    lines.append(f"g {OBJ_GROUP}")

    for face in mesh.faces:
        lines.append("f " + " ".join(str(idx + 1) for idx in face))

    return "\n".join(lines) + "\n"


# =============================================================================
# GEOMETRY EXPORTER
# =============================================================================

class GeometryExporter:
    """Exports meshes to the supported formats with traceability metadata."""

    def export(
        self,
        mesh: MeshBuffer,
        params: ShipParameters,
        format: Union[str, ExportFormat] = ExportFormat.OBJ,
    ) -> ExportResult:
        """
        Export a mesh to the specified format.

        Args:
            mesh: The mesh to export
            params: Ship parameters (OBJ header and JSON payload)
            format: Target export format

        Returns:
            ExportResult with data and metadata

        Raises:
            ExportError: If the format is not supported
        """
        fmt = ExportFormat.parse(format)
        warnings: List[str] = []

        if fmt == ExportFormat.OBJ:
            data = export_obj(mesh, params).encode("utf-8")
        elif fmt == ExportFormat.JSON:
            data = self._export_json(mesh, params)
        elif fmt == ExportFormat.BINARY:
            data = mesh.to_binary()
        else:
            raise ExportError(format=fmt.value, reason="unsupported_format")

        if mesh.is_empty:
            warnings.append("Mesh has no vertices")

        digest = hashlib.sha256(data).hexdigest()
        metadata = ExportMetadata(
            export_id=digest[:16],
            mesh_id=mesh.mesh_id,
            format=fmt.value,
            vertex_count=mesh.vertex_count,
            face_count=mesh.face_count,
            file_size_bytes=len(data),
            sha256=digest,
            model_style=params.model_style.value,
            camouflage=params.camouflage,
        )

        logger.info(
            f"Exported {fmt.value}: {metadata.vertex_count} vertices, "
            f"{metadata.face_count} faces, {metadata.file_size_bytes} bytes"
        )
        return ExportResult(format=fmt, data=data, metadata=metadata, warnings=warnings)

    def _export_json(self, mesh: MeshBuffer, params: ShipParameters) -> bytes:
        payload = mesh.to_dict()
        payload["parameters"] = params.to_dict()
        return json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")


def export_to_file(
    mesh: MeshBuffer,
    params: ShipParameters,
    path: str,
    format: Optional[Union[str, ExportFormat]] = None,
) -> ExportResult:
    """Export and write to path; format defaults from the file extension."""
    if format is None:
        suffix = os.path.splitext(path)[1].lstrip(".")
        format = suffix or ExportFormat.OBJ

    result = GeometryExporter().export(mesh, params, format)
    try:
        with open(path, "wb") as f:
            f.write(result.data)
    except OSError as e:
        raise ExportError(format=result.format.value, reason=str(e), path=path) from e
    return result
