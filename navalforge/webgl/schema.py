"""
webgl/schema.py - Mesh buffer data contract v1.0

Single source of truth for the mesh produced by the hull builder and
consumed by exporters and renderers.

COORDINATE FRAME
================
  X-axis: Transverse (port/starboard), 0 at centerline
  Y-axis: Up, 0 near the notional waterline
  Z-axis: Longitudinal, negative toward the stern, positive toward the bow
  Origin: Midship on the centerline
  Units:  Meters
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
import math
import struct
import logging

import numpy as np

logger = logging.getLogger("webgl.schema")

SCHEMA_VERSION = "1.0.0"

Vertex = Tuple[float, float, float]
Face = Tuple[int, ...]


# =============================================================================
# SUPPORTING TYPES
# =============================================================================

@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box."""
    min: Vertex
    max: Vertex

    @property
    def center(self) -> Vertex:
        return tuple((a + b) / 2 for a, b in zip(self.min, self.max))

    @property
    def size(self) -> Vertex:
        return tuple(b - a for a, b in zip(self.min, self.max))

    @property
    def diagonal(self) -> float:
        """Diagonal length of bounding box."""
        s = self.size
        return math.sqrt(s[0]**2 + s[1]**2 + s[2]**2)

    def to_dict(self) -> Dict[str, Any]:
        return {"min": list(self.min), "max": list(self.max)}

    @classmethod
    def from_vertices(cls, vertices: List[Vertex]) -> Optional["BoundingBox"]:
        if not vertices:
            return None
        xs, ys, zs = zip(*vertices)
        return cls(
            min=(min(xs), min(ys), min(zs)),
            max=(max(xs), max(ys), max(zs)),
        )


@dataclass(frozen=True)
class MeshGroup:
    """Contiguous vertex and face ranges belonging to one mesh part."""
    name: str
    vertex_start: int
    vertex_end: int
    face_start: int
    face_end: int

    @property
    def vertex_count(self) -> int:
        return self.vertex_end - self.vertex_start

    @property
    def face_count(self) -> int:
        return self.face_end - self.face_start

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "vertices": [self.vertex_start, self.vertex_end],
            "faces": [self.face_start, self.face_end],
        }


# =============================================================================
# MESH BUFFER
# =============================================================================

@dataclass(frozen=True)
class MeshBuffer:
    """
    Polygon mesh: ordered vertices plus ordered faces.

    Faces are triangles or quads holding 0-based indices into vertices.
    Every face only references vertices emitted before it in the same
    build. A buffer is never modified after the builder returns it.

    Binary Format (to_binary):
    - Header (24 bytes):
      - magic: 4 bytes "NVFG"
      - version: 4 bytes uint32 (1)
      - vertex_count: 4 bytes uint32
      - triangle_count: 4 bytes uint32
      - group_count: 4 bytes uint32
      - reserved: 4 bytes
    - Vertices: vertex_count * 3 * 4 bytes (float32)
    - Indices: triangle_count * 3 * 4 bytes (uint32)
    """

    vertices: Tuple[Vertex, ...] = ()
    faces: Tuple[Face, ...] = ()
    groups: Tuple[MeshGroup, ...] = ()
    mesh_id: str = ""

    # Binary format constants
    MAGIC = b'NVFG'
    BINARY_VERSION = 1

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def face_count(self) -> int:
        return len(self.faces)

    @property
    def triangle_count(self) -> int:
        """Triangles after fan-splitting every polygon."""
        return sum(len(f) - 2 for f in self.faces)

    @property
    def is_empty(self) -> bool:
        return self.vertex_count == 0

    @property
    def bounds(self) -> Optional[BoundingBox]:
        return BoundingBox.from_vertices(list(self.vertices))

    def group(self, name: str) -> Optional[MeshGroup]:
        """First group with the given name."""
        for g in self.groups:
            if g.name == name:
                return g
        return None

    def groups_with_prefix(self, prefix: str) -> List[MeshGroup]:
        return [g for g in self.groups if g.name.startswith(prefix)]

    def group_vertices(self, name: str) -> List[Vertex]:
        g = self.group(name)
        if g is None:
            return []
        return list(self.vertices[g.vertex_start:g.vertex_end])

    # =========================================================================
    # RENDERER BUFFERS
    # =========================================================================

    def to_buffers(self) -> Tuple[List[float], List[int]]:
        """
        Flatten into a renderer-ready (positions, indices) pair.

        Positions are [x0,y0,z0, x1,y1,z1, ...]. Quads (v0,v1,v2,v3) split
        into (v0,v1,v2) and (v0,v2,v3), keeping their winding.
        """
        positions: List[float] = []
        for x, y, z in self.vertices:
            positions.extend((x, y, z))

        indices: List[int] = []
        for face in self.faces:
            for k in range(1, len(face) - 1):
                indices.extend((face[0], face[k], face[k + 1]))

        return positions, indices

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "mesh_id": self.mesh_id,
            "schema_version": SCHEMA_VERSION,
            "vertices": [list(v) for v in self.vertices],
            "faces": [list(f) for f in self.faces],
            "groups": [g.to_dict() for g in self.groups],
            "metadata": {
                "vertex_count": self.vertex_count,
                "face_count": self.face_count,
                "triangle_count": self.triangle_count,
                "bounds": self.bounds.to_dict() if self.bounds else None,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MeshBuffer":
        """Deserialize from dict."""
        groups = tuple(
            MeshGroup(
                name=g["name"],
                vertex_start=g["vertices"][0],
                vertex_end=g["vertices"][1],
                face_start=g["faces"][0],
                face_end=g["faces"][1],
            )
            for g in data.get("groups", [])
        )
        return cls(
            vertices=tuple(tuple(v) for v in data.get("vertices", [])),
            faces=tuple(tuple(f) for f in data.get("faces", [])),
            groups=groups,
            mesh_id=data.get("mesh_id", ""),
        )

    def to_binary(self) -> bytes:
        """Serialize triangulated buffers for efficient transfer."""
        positions, indices = self.to_buffers()

        header = struct.pack(
            '<4sIIIII',
            self.MAGIC,
            self.BINARY_VERSION,
            self.vertex_count,
            len(indices) // 3,
            len(self.groups),
            0,  # Reserved
        )

        data = bytearray(header)
        data.extend(np.array(positions, dtype='<f4').tobytes())
        data.extend(np.array(indices, dtype='<u4').tobytes())
        return bytes(data)

    @classmethod
    def read_binary(cls, data: bytes) -> Tuple[np.ndarray, np.ndarray]:
        """
        Read a binary payload back as (positions[N, 3], triangles[M, 3]).

        Face grouping into quads is not recoverable from the binary form.
        """
        if len(data) < 24:
            raise ValueError(f"Invalid binary data: too short ({len(data)} bytes)")

        magic, version, vertex_count, triangle_count, _, _ = struct.unpack(
            '<4sIIIII', data[:24]
        )

        if magic != cls.MAGIC:
            raise ValueError(f"Invalid magic: {magic}, expected {cls.MAGIC}")
        if version != cls.BINARY_VERSION:
            raise ValueError(f"Unsupported version: {version}, expected {cls.BINARY_VERSION}")

        offset = 24
        vertices_size = vertex_count * 3 * 4
        positions = np.frombuffer(data[offset:offset + vertices_size], dtype='<f4')
        offset += vertices_size

        indices_size = triangle_count * 3 * 4
        triangles = np.frombuffer(data[offset:offset + indices_size], dtype='<u4')

        return positions.reshape(-1, 3), triangles.reshape(-1, 3)
