"""
webgl/mesh_builder.py - Mesh construction utilities v1.0

Incremental builder for polygon meshes. Vertex indices are handed out in
emission order and faces may only reference vertices already emitted.
"""

from __future__ import annotations
from typing import List, Optional, Sequence, Tuple
import logging

from navalforge.errors import MeshGenerationError
from .schema import MeshBuffer, MeshGroup, Vertex, Face

logger = logging.getLogger("webgl.mesh_builder")


class MeshBuilder:
    """
    Builder for constructing polygon meshes.

    Usage:
        builder = MeshBuilder()
        builder.begin_group("box")
        v0 = builder.add_vertex(0, 0, 0)
        v1 = builder.add_vertex(1, 0, 0)
        v2 = builder.add_vertex(1, 1, 0)
        v3 = builder.add_vertex(0, 1, 0)
        builder.add_quad(v0, v1, v2, v3)
        builder.end_group()
        mesh = builder.build()
    """

    def __init__(self, mesh_id: str = ""):
        self._mesh_id = mesh_id
        self._vertices: List[Vertex] = []
        self._faces: List[Face] = []
        self._groups: List[MeshGroup] = []
        self._open_group: Optional[Tuple[str, int, int]] = None

    def add_vertex(self, x: float, y: float, z: float) -> int:
        """Add a vertex and return its index."""
        self._vertices.append((float(x), float(y), float(z)))
        return len(self._vertices) - 1

    def add_vertices(self, vertices: Sequence[Vertex]) -> List[int]:
        """Add multiple vertices and return their indices."""
        return [self.add_vertex(x, y, z) for x, y, z in vertices]

    def add_triangle(self, v0: int, v1: int, v2: int) -> None:
        """Add a triangle face."""
        self._add_face((v0, v1, v2))

    def add_quad(self, v0: int, v1: int, v2: int, v3: int) -> None:
        """Add a quad face (kept as a quad; renderers split it later)."""
        self._add_face((v0, v1, v2, v3))

    def add_quad_strip(self, lower: Sequence[int], upper: Sequence[int]) -> None:
        """Join two equal-length vertex rows with quads."""
        if len(lower) != len(upper):
            raise MeshGenerationError(
                stage="quad_strip",
                reason=f"row lengths differ ({len(lower)} vs {len(upper)})",
            )
        for j in range(len(lower) - 1):
            self.add_quad(lower[j], upper[j], upper[j + 1], lower[j + 1])

    def _add_face(self, face: Face) -> None:
        count = len(self._vertices)
        for idx in face:
            if idx < 0 or idx >= count:
                raise MeshGenerationError(
                    stage="face",
                    reason=f"index {idx} does not reference an emitted vertex (have {count})",
                )
        self._faces.append(face)

    # =========================================================================
    # GROUPS
    # =========================================================================

    def begin_group(self, name: str) -> None:
        """Start a named group; closes any group still open."""
        if self._open_group is not None:
            self.end_group()
        self._open_group = (name, len(self._vertices), len(self._faces))

    def end_group(self) -> Optional[MeshGroup]:
        """Close the open group. Empty groups are dropped."""
        if self._open_group is None:
            return None

        name, v_start, f_start = self._open_group
        self._open_group = None
        if len(self._vertices) == v_start and len(self._faces) == f_start:
            return None

        group = MeshGroup(
            name=name,
            vertex_start=v_start,
            vertex_end=len(self._vertices),
            face_start=f_start,
            face_end=len(self._faces),
        )
        self._groups.append(group)
        return group

    def build(self) -> MeshBuffer:
        """Build the final mesh."""
        self.end_group()
        mesh = MeshBuffer(
            vertices=tuple(self._vertices),
            faces=tuple(self._faces),
            groups=tuple(self._groups),
            mesh_id=self._mesh_id,
        )
        logger.debug(f"Built mesh '{self._mesh_id}': {mesh.vertex_count} vertices, {mesh.face_count} faces")
        return mesh

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def face_count(self) -> int:
        return len(self._faces)
