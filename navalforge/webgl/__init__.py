"""
webgl/__init__.py - Mesh buffers and export.

Provides:
- MeshBuffer: polygon mesh contract shared by builder, exporters and renderers
- MeshBuilder: incremental mesh construction with named groups
- GeometryExporter: OBJ / JSON / binary export with traceability
"""

from .schema import (
    SCHEMA_VERSION,
    BoundingBox,
    MeshGroup,
    MeshBuffer,
)

from .mesh_builder import (
    MeshBuilder,
)

from .exporter import (
    ExportFormat,
    ExportMetadata,
    ExportResult,
    GeometryExporter,
    export_obj,
    export_to_file,
    format_coordinate,
    format_dimension,
)

__all__ = [
    # Schema
    "SCHEMA_VERSION",
    "BoundingBox",
    "MeshGroup",
    "MeshBuffer",
    # Builder
    "MeshBuilder",
    # Export
    "ExportFormat",
    "ExportMetadata",
    "ExportResult",
    "GeometryExporter",
    "export_obj",
    "export_to_file",
    "format_coordinate",
    "format_dimension",
]
