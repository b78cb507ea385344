"""
tests/unit/test_hull_mesh_builder.py - Tests for ship mesh generation.
"""

import math

import pytest

from navalforge.errors import GeometryParameterError
from navalforge.hull_gen import (
    DEFAULT_TURRETS,
    GeneratorConfig,
    GeometricMap,
    HullMeshBuilder,
    ShipDimensions,
    ShipParameters,
    SuperstructureSpan,
    expected_counts,
    generate_ship_mesh,
    sample_profile,
    taper,
)
from navalforge.vision import ProfileCurve


def build(params=None, **hints):
    return HullMeshBuilder().build(params or ShipParameters(), GeometricMap(**hints))


class TestHelpers:
    """Tests for sampling helpers."""

    def test_taper_endpoints(self):
        assert taper(0.5) == 1.0
        assert taper(0.0) == 0.0
        assert taper(1.0) == 0.0

    def test_sample_profile_floor_index(self):
        curve = [float(i) for i in range(100)]
        assert sample_profile(curve, 0.0) == 0.0
        assert sample_profile(curve, 1.0) == 99.0
        # floor(0.5 * 99) = 49
        assert sample_profile(curve, 0.5) == 49.0

    def test_sample_short_profile(self):
        assert sample_profile([0.3], 0.7) == 0.3

    def test_closed_form_constants(self):
        assert expected_counts(0, False) == (663, 650)
        assert expected_counts(0, True) == (671, 655)
        assert expected_counts(3, True) == (663 + 8 + 51, 650 + 5 + 48)


class TestCounts:
    """Vertex and face counts follow the closed form."""

    @pytest.mark.parametrize("turrets", [(), (0.5,), (0.8, 0.7, 0.2)])
    @pytest.mark.parametrize("span", [SuperstructureSpan(0.35, 0.65), SuperstructureSpan(0.5, 0.5)])
    def test_counts_match_formula(self, turrets, span):
        mesh = build(turrets=turrets, superstructure=span)
        has_super = span.end != span.start
        vertices, faces = expected_counts(len(turrets), has_super)
        assert mesh.vertex_count == vertices
        assert mesh.face_count == faces
        assert mesh.vertex_count == 663 + 8 * has_super + 17 * len(turrets)
        assert mesh.face_count == 650 + 5 * has_super + 16 * len(turrets)

    def test_default_turrets_when_missing(self):
        mesh = HullMeshBuilder().build(ShipParameters())
        assert mesh.vertex_count == 663 + 8 + 17 * len(DEFAULT_TURRETS)
        assert len(mesh.groups_with_prefix("turret_")) == 3

    def test_empty_turret_tuple_means_none(self):
        mesh = build(turrets=())
        assert mesh.groups_with_prefix("turret_") == []

    def test_face_arity(self):
        mesh = build(turrets=(0.2,))
        triangles = [f for f in mesh.faces if len(f) == 3]
        quads = [f for f in mesh.faces if len(f) == 4]
        assert len(triangles) == 8
        assert len(quads) == mesh.face_count - 8

    def test_faces_reference_earlier_vertices(self):
        mesh = build()
        for face in mesh.faces:
            assert all(0 <= idx < mesh.vertex_count for idx in face)


class TestHull:
    """Tests for the lofted hull."""

    def test_station_z_positions(self):
        mesh = build(turrets=())
        hull = mesh.group_vertices("hull")
        assert len(hull) == 51 * 13
        assert hull[0][2] == pytest.approx(-125.0)
        assert hull[-1][2] == pytest.approx(125.0)

    def test_fallback_midship_ring(self):
        mesh = build(turrets=())
        mid = mesh.group_vertices("hull")[25 * 13: 26 * 13]
        # Midship: half-beam 18, depth 15
        assert mid[0][0] == pytest.approx(18.0)
        assert mid[12][0] == pytest.approx(-18.0)
        assert mid[0][1] == pytest.approx(15.0 * 0.3)
        assert mid[6][1] == pytest.approx(-15.0 + 4.5)

    def test_fallback_ends_are_pinched(self):
        hull = build(turrets=()).group_vertices("hull")
        stern_ring = hull[:13]
        assert all(abs(x) < 1e-9 for x, _, _ in stern_ring)
        # Ends keep 80% of the draft
        assert stern_ring[6][1] == pytest.approx(-12.0 + 3.6)

    def test_top_profile_drives_half_beam(self):
        top = [0.5] * 100
        hull = build(turrets=(), top_profile=top).group_vertices("hull")
        assert hull[0][0] == pytest.approx(18.0 * 0.5)
        assert hull[25 * 13][0] == pytest.approx(9.0)

    def test_hull_extrusion_scales_beam(self):
        params = ShipParameters(hull_extrusion=150.0)
        hull = build(params, turrets=()).group_vertices("hull")
        assert hull[25 * 13][0] == pytest.approx(27.0)

    def test_side_profile_drives_depth(self):
        side = ProfileCurve(values=[1.0] * 100)
        hull = build(turrets=(), side_profile=side).group_vertices("hull")
        depth = 15.0 * 1.5
        assert hull[6][1] == pytest.approx(-depth + 0.3 * depth)
        assert hull[0][1] == pytest.approx(0.3 * depth)

    def test_empty_profile_uses_fallback(self):
        with_empty = build(turrets=(), top_profile=[], side_profile=[])
        without = build(turrets=())
        assert with_empty.vertices == without.vertices

    def test_hull_quads_stitch_adjacent_rings(self):
        mesh = build(turrets=())
        hull = mesh.group("hull")
        assert hull.face_count == 50 * 12
        assert mesh.faces[0] == (0, 13, 14, 1)
        assert mesh.faces[11] == (11, 24, 25, 12)
        assert mesh.faces[12] == (13, 26, 27, 14)

    def test_deck_faces_join_ring_ends(self):
        mesh = build(turrets=())
        deck = mesh.group("deck")
        assert deck.face_count == 50
        assert deck.vertex_count == 0
        assert mesh.faces[deck.face_start] == (12, 25, 13, 0)


class TestSuperstructure:
    """Tests for the superstructure box."""

    def test_default_span(self):
        mesh = build(turrets=())
        box = mesh.group_vertices("superstructure")
        assert len(box) == 8
        zs = sorted({round(v[2], 6) for v in box})
        assert zs == [pytest.approx(-37.5), pytest.approx(37.5)]
        assert box[4][1] == pytest.approx(250 * 0.08)
        assert box[1][0] == pytest.approx(9.0)

    def test_open_bottom(self):
        mesh = build(turrets=())
        group = mesh.group("superstructure")
        assert group.face_count == 5
        base = set(range(group.vertex_start, group.vertex_start + 4))
        faces = mesh.faces[group.face_start:group.face_end]
        assert not any(set(f) == base for f in faces)

    def test_sub_meter_span_skipped(self, long_ship_params):
        mesh = build(long_ship_params, turrets=(), superstructure=SuperstructureSpan(0.50, 0.501))
        assert mesh.group("superstructure") is None
        assert mesh.vertex_count == 663
        assert mesh.face_count == 650

    def test_reversed_span_uses_absolute_length(self):
        mesh = build(turrets=(), superstructure=SuperstructureSpan(0.65, 0.35))
        assert len(mesh.group_vertices("superstructure")) == 8

    def test_height_slider(self):
        params = ShipParameters(superstructure_height=200.0)
        box = build(params, turrets=()).group_vertices("superstructure")
        assert box[4][1] == pytest.approx(40.0)


class TestTurrets:
    """Tests for turret placement."""

    def test_inside_span_is_elevated(self):
        mesh = build(turrets=(0.5,))
        super_height = 250 * 0.08
        turret = mesh.group_vertices("turret_0")
        base_ring = turret[2::2]
        assert len(base_ring) == 8
        assert all(v[1] == pytest.approx(0.6 * super_height) for v in base_ring)
        assert turret[0][1] == pytest.approx(0.6 * super_height + 0.4 * super_height)

    def test_outside_span_sits_on_deck(self):
        turret = build(turrets=(0.8,)).group_vertices("turret_0")
        assert all(v[1] == 0.0 for v in turret[2::2])

    def test_span_boundary_is_not_inside(self):
        turret = build(turrets=(0.35,)).group_vertices("turret_0")
        assert all(v[1] == 0.0 for v in turret[2::2])

    def test_elevation_follows_span_when_box_skipped(self, long_ship_params):
        mesh = build(
            long_ship_params,
            turrets=(0.5005,),
            superstructure=SuperstructureSpan(0.50, 0.501),
        )
        assert mesh.group("superstructure") is None
        turret = mesh.group_vertices("turret_0")
        assert turret[2][1] == pytest.approx(0.6 * 300 * 0.08)

    def test_radius_and_position(self):
        params = ShipParameters(turret_scale=150.0)
        turret = build(params, turrets=(0.8,)).group_vertices("turret_0")
        radius = 36 * 0.4 * 1.5
        z_center = (0.8 - 0.5) * 250
        assert turret[0][2] == pytest.approx(z_center)
        assert turret[1][0] == pytest.approx(radius)
        for x, _, z in turret[1:]:
            assert math.hypot(x, z - z_center) == pytest.approx(radius)

    def test_cap_triangles_share_apex(self):
        mesh = build(turrets=(0.2,))
        group = mesh.group("turret_0")
        apex = group.vertex_start
        triangles = [f for f in mesh.faces[group.face_start:group.face_end] if len(f) == 3]
        assert len(triangles) == 8
        assert all(t[2] == apex for t in triangles)

    def test_turret_groups_in_input_order(self):
        mesh = build(turrets=(0.8, 0.2))
        first = mesh.group_vertices("turret_0")[0]
        second = mesh.group_vertices("turret_1")[0]
        assert first[2] > second[2]


class TestBuilderContract:
    """Determinism and validation."""

    def test_deterministic(self):
        top = ProfileCurve(values=[min(1.0, i / 50) for i in range(100)])
        a = build(top_profile=top, turrets=(0.3, 0.6))
        b = build(top_profile=top, turrets=(0.3, 0.6))
        assert a.vertices == b.vertices
        assert a.faces == b.faces

    def test_does_not_mutate_hints(self):
        hints = GeometricMap(turrets=(0.1,), top_profile=[0.5] * 100)
        HullMeshBuilder().build(ShipParameters(), hints)
        assert hints.turrets == (0.1,)
        assert list(hints.top_profile) == [0.5] * 100

    @pytest.mark.parametrize("field,value", [("length", 0.0), ("beam", -1.0), ("draft", 0.0)])
    def test_invalid_dimensions(self, field, value):
        dims = ShipDimensions(**{field: value})
        with pytest.raises(GeometryParameterError) as exc:
            HullMeshBuilder().build(ShipParameters(dimensions=dims))
        assert exc.value.details["param"] == field

    def test_negative_slider(self):
        with pytest.raises(GeometryParameterError):
            generate_ship_mesh(ShipParameters(turret_scale=-5.0))

    def test_custom_resolution(self):
        config = GeneratorConfig(segments=10, cross_section_res=4)
        mesh = HullMeshBuilder(config).build(ShipParameters(), GeometricMap(turrets=()))
        assert (mesh.vertex_count, mesh.face_count) == expected_counts(0, True, config)
