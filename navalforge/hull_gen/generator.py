"""
hull_gen/generator.py - Parametric hull mesh generator v1.0

Lofts a hull skin through cross-section rings whose half-beam and depth
follow traced profile curves (or a parametric taper), then adds a
superstructure box and cone-capped turrets.

Vertex emission order is fixed: hull rings stern to bow, superstructure,
then each turret in the order given. Exported text depends on it.
"""

from __future__ import annotations
import math
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from navalforge.webgl.mesh_builder import MeshBuilder
from navalforge.webgl.schema import MeshBuffer
from .enums import MeshPart
from .parameters import GeometricMap, ShipParameters, SuperstructureSpan

logger = logging.getLogger("hull_gen.generator")


DEFAULT_TURRETS: Tuple[float, ...] = (0.8, 0.7, 0.2)
"""Turret battery used when no positions are supplied."""

DEFAULT_SUPERSTRUCTURE = SuperstructureSpan()


@dataclass(frozen=True)
class GeneratorConfig:
    """Tessellation and proportion constants for hull generation."""

    segments: int = 50
    """Longitudinal segments (stations = segments + 1)."""

    cross_section_res: int = 12
    """Segments per half-ring (ring vertices = res + 1)."""

    taper_exponent: float = 2.5
    """Exponent of the fallback bow/stern taper."""

    freeboard_factor: float = 1.5
    """Side-profile 1.0 maps to draft * freeboard_factor."""

    waterline_offset: float = 0.3
    """Fraction of local depth the ring is lifted above y=0."""

    superstructure_width_factor: float = 0.5
    superstructure_height_factor: float = 0.08
    min_superstructure_span: float = 1.0
    """Superstructures not longer than this (m) are skipped."""

    turret_sides: int = 8
    turret_radius_factor: float = 0.4
    turret_height_factor: float = 0.4
    turret_elevation_factor: float = 0.6


DEFAULT_GENERATOR_CONFIG = GeneratorConfig()


# =============================================================================
# PROFILE SAMPLING
# =============================================================================

def taper(t: float, exponent: float = 2.5) -> float:
    """Parametric fullness: 1 at midship, 0 at both ends."""
    return 1.0 - abs(2.0 * t - 1.0) ** exponent


def sample_profile(curve: Sequence[float], t: float) -> float:
    """Nearest-lower-index lookup of a normalized curve at t in [0, 1]."""
    n = len(curve)
    index = min(int(math.floor(t * (n - 1))), n - 1)
    return float(curve[index])


def _usable(curve: Optional[Sequence[float]]) -> Optional[Sequence[float]]:
    if curve is None or len(curve) == 0:
        return None
    return curve


def expected_counts(
    turret_count: int,
    has_superstructure: bool,
    config: GeneratorConfig = DEFAULT_GENERATOR_CONFIG,
) -> Tuple[int, int]:
    """
    Closed-form (vertex_count, face_count) of a build.

    With the default config this is V = 663 + 8S + 17T and
    F = 650 + 5S + 16T.
    """
    stations = config.segments + 1
    ring = config.cross_section_res + 1
    sides = config.turret_sides
    s = 1 if has_superstructure else 0

    vertices = stations * ring + 8 * s + (1 + 2 * sides) * turret_count
    faces = (
        config.segments * config.cross_section_res
        + config.segments
        + 5 * s
        + 2 * sides * turret_count
    )
    return vertices, faces


# =============================================================================
# GENERATOR
# =============================================================================

class HullMeshBuilder:
    """
    Ship mesh generator.

    Stateless: build() may be called repeatedly and concurrently; each
    call owns its own MeshBuilder.
    """

    def __init__(self, config: Optional[GeneratorConfig] = None):
        self.config = config or DEFAULT_GENERATOR_CONFIG

    def build(
        self,
        params: ShipParameters,
        geometry: Optional[GeometricMap] = None,
        mesh_id: str = "battleship",
    ) -> MeshBuffer:
        """
        Build the ship mesh.

        Args:
            params: Dimensions and sliders
            geometry: Optional reconstruction hints

        Returns:
            New MeshBuffer with groups hull, deck, superstructure, turret_N

        Raises:
            GeometryParameterError: If dimensions or sliders are invalid
        """
        params.check()
        geometry = geometry or GeometricMap()

        builder = MeshBuilder(mesh_id)
        rings = self._add_hull(builder, params, geometry)
        self._add_deck(builder, rings)

        span = geometry.superstructure or DEFAULT_SUPERSTRUCTURE
        super_height = (
            params.length
            * self.config.superstructure_height_factor
            * (params.superstructure_height / 100.0)
        )
        self._add_superstructure(builder, params, span, super_height)

        turrets = geometry.turrets if geometry.turrets is not None else DEFAULT_TURRETS
        z_start = (span.start - 0.5) * params.length
        z_end = (span.end - 0.5) * params.length
        for n, position in enumerate(turrets):
            self._add_turret(builder, params, n, position, z_start, z_end, super_height)

        mesh = builder.build()
        logger.info(
            f"Generated ship mesh: {mesh.vertex_count} vertices, {mesh.face_count} faces, "
            f"{len(turrets)} turrets"
        )
        return mesh

    # =========================================================================
    # HULL
    # =========================================================================

    def _add_hull(
        self,
        builder: MeshBuilder,
        params: ShipParameters,
        geometry: GeometricMap,
    ) -> List[List[int]]:
        cfg = self.config
        top = _usable(geometry.top_profile)
        side = _usable(geometry.side_profile)
        fatness = params.hull_extrusion / 100.0

        if top is None:
            logger.debug("No top profile, using parametric beam taper")
        if side is None:
            logger.debug("No side profile, using parametric depth taper")

        builder.begin_group(MeshPart.HULL.value)
        rings: List[List[int]] = []

        for i in range(cfg.segments + 1):
            t = i / cfg.segments
            z = (t - 0.5) * params.length
            fullness = taper(t, cfg.taper_exponent)

            if top is not None:
                half_beam = (params.beam / 2.0) * sample_profile(top, t) * fatness
            else:
                half_beam = (params.beam / 2.0) * fullness * fatness

            if side is not None:
                depth = (params.draft * cfg.freeboard_factor) * sample_profile(side, t)
            else:
                depth = params.draft * (0.8 + 0.2 * fullness)

            ring = []
            for j in range(cfg.cross_section_res + 1):
                angle = math.pi * (j / cfg.cross_section_res)
                x = math.cos(angle) * half_beam
                y = -math.sin(angle) * depth + depth * cfg.waterline_offset
                ring.append(builder.add_vertex(x, y, z))
            rings.append(ring)

        for current, following in zip(rings, rings[1:]):
            builder.add_quad_strip(current, following)

        builder.end_group()
        return rings

    def _add_deck(self, builder: MeshBuilder, rings: List[List[int]]) -> None:
        # Deck faces reuse the ring end vertices; the group holds faces only.
        builder.begin_group(MeshPart.DECK.value)
        for r1, r2 in zip(rings, rings[1:]):
            builder.add_quad(r1[-1], r2[-1], r2[0], r1[0])
        builder.end_group()

    # =========================================================================
    # SUPERSTRUCTURE
    # =========================================================================

    def _add_superstructure(
        self,
        builder: MeshBuilder,
        params: ShipParameters,
        span: SuperstructureSpan,
        height: float,
    ) -> bool:
        z_start = (span.start - 0.5) * params.length
        z_end = (span.end - 0.5) * params.length
        length = abs(z_end - z_start)

        if not length > self.config.min_superstructure_span:
            logger.debug(f"Superstructure span {length:.3f}m too short, skipped")
            return False

        center = (z_start + z_end) / 2.0
        half_w = params.beam * self.config.superstructure_width_factor / 2.0
        aft = center - length / 2.0
        fwd = center + length / 2.0

        builder.begin_group(MeshPart.SUPERSTRUCTURE.value)
        v = builder.add_vertices([
            (-half_w, 0.0, aft),
            (half_w, 0.0, aft),
            (half_w, 0.0, fwd),
            (-half_w, 0.0, fwd),
            (-half_w, height, aft),
            (half_w, height, aft),
            (half_w, height, fwd),
            (-half_w, height, fwd),
        ])
        # Four walls and a roof, open underneath.
        builder.add_quad(v[0], v[1], v[5], v[4])
        builder.add_quad(v[1], v[2], v[6], v[5])
        builder.add_quad(v[2], v[3], v[7], v[6])
        builder.add_quad(v[3], v[0], v[4], v[7])
        builder.add_quad(v[4], v[5], v[6], v[7])
        builder.end_group()
        return True

    # =========================================================================
    # TURRETS
    # =========================================================================

    def _add_turret(
        self,
        builder: MeshBuilder,
        params: ShipParameters,
        n: int,
        position: float,
        ss_z_start: float,
        ss_z_end: float,
        super_height: float,
    ) -> None:
        cfg = self.config
        z_pos = (position - 0.5) * params.length
        radius = params.beam * cfg.turret_radius_factor * (params.turret_scale / 100.0)
        height = super_height * cfg.turret_height_factor

        # Elevation follows the span even when the box itself was skipped.
        base = 0.0
        if ss_z_start < z_pos < ss_z_end:
            base = super_height * cfg.turret_elevation_factor

        builder.begin_group(f"{MeshPart.TURRET.value}_{n}")
        center_top = builder.add_vertex(0.0, base + height, z_pos)
        top_ring: List[int] = []
        base_ring: List[int] = []
        for i in range(cfg.turret_sides):
            angle = (i / cfg.turret_sides) * math.pi * 2.0
            x = math.cos(angle) * radius
            z = math.sin(angle) * radius + z_pos
            top_ring.append(builder.add_vertex(x, base + height, z))
            base_ring.append(builder.add_vertex(x, base, z))

        for i in range(cfg.turret_sides):
            nxt = (i + 1) % cfg.turret_sides
            builder.add_quad(base_ring[i], base_ring[nxt], top_ring[nxt], top_ring[i])
            builder.add_triangle(top_ring[i], top_ring[nxt], center_top)
        builder.end_group()


def generate_ship_mesh(
    params: ShipParameters,
    geometry: Optional[GeometricMap] = None,
) -> MeshBuffer:
    """Convenience wrapper around HullMeshBuilder().build()."""
    return HullMeshBuilder().build(params, geometry)
