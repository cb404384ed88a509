"""
Tests for the rotating globe scene and the station marker overlay.

The central property: after any number of ticks, a marker's world
position equals the world position of the surface texel under it.
"""

import math

import numpy as np
import pytest

from radioglobe.globe import (
    CLOUD_STEP,
    EARTH_STEP,
    MARKER_COLORS,
    PICK_RADIUS,
    GlobeFrame,
    GlobeScene,
    MarkerEvent,
    MarkerOverlay,
    MarkerState,
    pulse_scale,
    transition,
)
from radioglobe.projection import latlon_to_uv, project, sphere_mesh, texture_point

# =============================================================================
# GlobeFrame / GlobeScene
# =============================================================================


class TestGlobeFrame:
    """Tests for the shared rotation state."""

    def test_advance(self) -> None:
        frame = GlobeFrame()
        for _ in range(10):
            frame.advance(dt=0.5)
        assert frame.ticks == 10
        assert frame.angle == pytest.approx(10 * EARTH_STEP)
        assert frame.cloud_angle == pytest.approx(10 * CLOUD_STEP)
        assert frame.elapsed == pytest.approx(5.0)

    def test_clouds_turn_faster(self) -> None:
        frame = GlobeFrame()
        frame.advance()
        assert frame.cloud_angle > frame.angle


class TestGlobeScene:
    """Tests for rotation synchronisation between earth and markers."""

    def test_earth_and_markers_share_one_matrix(self) -> None:
        """Both nodes receive the very same transform each tick."""
        scene, frame = GlobeScene(), GlobeFrame()
        for _ in range(7):
            scene.tick(frame)
            assert scene.earth.matrix is scene.markers.matrix
            assert scene.clouds.matrix is not scene.earth.matrix

    @pytest.mark.parametrize("ticks", [0, 1, 1000, 250_000])
    def test_marker_stays_on_surface_feature(self, ticks: int) -> None:
        """Container ∘ projected point == earth ∘ texture point, for any N."""
        scene, frame = GlobeScene(), GlobeFrame()
        # Large N: tick 1000 times, then jump the shared frame forward
        for _ in range(min(ticks, 1000)):
            scene.tick(frame)
        if ticks > 1000:
            frame.ticks, frame.angle = ticks, ticks * EARTH_STEP
            scene.apply(frame)

        for lat, lon in [(41.0, 29.0), (35.7, 139.7), (-33.9, 151.2), (0.0, -179.9)]:
            u, v = latlon_to_uv(lat, lon)
            marker_world = scene.markers.world(project(lat, lon, scene.radius))
            surface_world = scene.earth.world(texture_point(u, v, scene.radius))
            assert np.allclose(marker_world, surface_world, atol=1e-12)

    def test_marker_matches_mesh_vertex_after_many_ticks(self, make_station) -> None:
        """A station at a mesh vertex tracks that vertex through the spin."""
        scene, frame = GlobeScene(), GlobeFrame()
        overlay = MarkerOverlay([make_station("v", geo_lat=30.0, geo_long=-90.0)])
        mesh = sphere_mesh(scene.radius, 36, 18)  # 10° grid
        j, i = 6, 9  # lat 30, lon -90
        for _ in range(500):
            scene.tick(frame)
        marker_world = overlay.world_points(scene)[0]
        vertex_world = scene.earth.world(mesh[j, i])
        assert np.allclose(marker_world, vertex_world, atol=1e-9)

    def test_local_points_never_change(self, make_station) -> None:
        """Ticking moves the container, not the markers' local points."""
        scene, frame = GlobeScene(), GlobeFrame()
        overlay = MarkerOverlay([make_station("1"), make_station("2", geo_lat=-10.0)])
        before = overlay.local_points().copy()
        for _ in range(100):
            scene.tick(frame)
        assert np.array_equal(overlay.local_points(), before)
        assert not np.allclose(overlay.world_points(scene), before)

    def test_cloud_shell_is_larger(self) -> None:
        scene, frame = GlobeScene(), GlobeFrame()
        scene.apply(frame)
        p = project(0.0, 0.0, scene.radius)
        assert np.linalg.norm(scene.clouds.world(p)) > np.linalg.norm(scene.earth.world(p))


# =============================================================================
# Marker state machine
# =============================================================================


class TestTransition:
    """Tests for the per-marker visual state machine."""

    @pytest.mark.parametrize(
        "state,event,expected",
        [
            (MarkerState.IDLE, MarkerEvent.POINTER_ENTER, MarkerState.HOVERED),
            (MarkerState.HOVERED, MarkerEvent.POINTER_LEAVE, MarkerState.IDLE),
            (MarkerState.IDLE, MarkerEvent.SELECT, MarkerState.SELECTED),
            (MarkerState.HOVERED, MarkerEvent.SELECT, MarkerState.SELECTED),
            (MarkerState.SELECTED, MarkerEvent.SELECT, MarkerState.SELECTED),
            (MarkerState.SELECTED, MarkerEvent.DESELECT, MarkerState.IDLE),
            (MarkerState.SELECTED, MarkerEvent.POINTER_ENTER, MarkerState.SELECTED),
            (MarkerState.SELECTED, MarkerEvent.POINTER_LEAVE, MarkerState.SELECTED),
            (MarkerState.IDLE, MarkerEvent.POINTER_LEAVE, MarkerState.IDLE),
            (MarkerState.HOVERED, MarkerEvent.DESELECT, MarkerState.HOVERED),
        ],
    )
    def test_table(self, state, event, expected) -> None:
        assert transition(state, event) is expected

    def test_three_distinct_colors(self) -> None:
        assert len(set(MARKER_COLORS.values())) == 3


class TestPulse:
    """Tests for the selected-marker pulse."""

    def test_only_selected_pulses(self) -> None:
        for t in (0.0, 0.3, 1.7):
            assert pulse_scale(MarkerState.IDLE, t) == 1.0
            assert pulse_scale(MarkerState.HOVERED, t) == 1.0

    def test_sinusoid(self) -> None:
        assert pulse_scale(MarkerState.SELECTED, 0.0) == pytest.approx(1.0)
        assert pulse_scale(MarkerState.SELECTED, math.pi / 10) == pytest.approx(1.2)
        assert pulse_scale(MarkerState.SELECTED, 3 * math.pi / 10) == pytest.approx(0.8)


# =============================================================================
# MarkerOverlay
# =============================================================================


class TestMarkerOverlay:
    """Tests for marker building, selection exclusivity and hover."""

    def test_declines_stations_without_geo(self, make_station) -> None:
        overlay = MarkerOverlay(
            [
                make_station("1"),
                make_station("2", geo_lat=None),
                make_station("3", geo_long=None),
                make_station("4", geo_lat=95.0),
                make_station("1", name="duplicate"),
            ]
        )
        assert overlay.ids() == ["1"]
        assert overlay.markers["1"].station.name == "Station 1"

    def test_selection_is_exclusive(self, make_station) -> None:
        """Selecting Y while X is selected leaves X idle and Y selected."""
        overlay = MarkerOverlay([make_station("x"), make_station("y"), make_station("z")])
        overlay.select("x")
        overlay.select("y")
        states = overlay.states()
        assert states["x"] is MarkerState.IDLE
        assert states["y"] is MarkerState.SELECTED
        assert list(states.values()).count(MarkerState.SELECTED) == 1
        assert overlay.selected == "y"

    def test_hover_cycle(self, make_station) -> None:
        overlay = MarkerOverlay([make_station("x")])
        overlay.hover("x")
        assert overlay.states()["x"] is MarkerState.HOVERED
        overlay.unhover("x")
        assert overlay.states()["x"] is MarkerState.IDLE

    def test_reselect_same_station(self, make_station) -> None:
        overlay = MarkerOverlay([make_station("x")])
        overlay.select("x")
        overlay.select("x")
        assert overlay.states()["x"] is MarkerState.SELECTED

    def test_selection_survives_catalog_swap(self, make_station) -> None:
        """The catalog is replaced wholesale; the selection is not cleared."""
        overlay = MarkerOverlay([make_station("x"), make_station("y")])
        overlay.select("x")
        overlay.set_stations([make_station("y")])
        assert overlay.selected == "x"
        assert overlay.states() == {"y": MarkerState.IDLE}
        overlay.set_stations([make_station("x"), make_station("y")])
        assert overlay.states()["x"] is MarkerState.SELECTED

    def test_selected_marker_is_taller(self, make_station) -> None:
        overlay = MarkerOverlay([make_station("x"), make_station("y", geo_lat=10.0)])
        overlay.select("x")
        x, y = overlay.markers["x"], overlay.markers["y"]
        assert x.beam_height > y.beam_height
        assert x.base_radius > y.base_radius
        tip = x.beam_tip(0.0)
        assert float(np.linalg.norm(tip)) == pytest.approx(overlay.radius + x.beam_height)

    def test_empty_overlay(self) -> None:
        overlay = MarkerOverlay()
        assert overlay.local_points().shape == (0, 3)


class TestPick:
    """Tests for ray picking."""

    def _camera_ray(self, target: np.ndarray, distance: float = 14.0):
        direction = target / np.linalg.norm(target)
        origin = direction * distance
        return origin, -direction

    def test_hits_marker_facing_camera(self, make_station) -> None:
        scene, frame = GlobeScene(), GlobeFrame()
        overlay = MarkerOverlay([make_station("ist", geo_lat=41.0, geo_long=29.0)])
        for _ in range(300):
            scene.tick(frame)
        target = overlay.world_points(scene)[0]
        origin, direction = self._camera_ray(target)
        assert overlay.pick(scene, origin, direction) == "ist"

    def test_far_zoom_same_footprint(self, make_station) -> None:
        """Pick radius is in world units, so zooming out does not matter."""
        scene, frame = GlobeScene(), GlobeFrame()
        overlay = MarkerOverlay([make_station("ist")])
        scene.apply(frame)
        target = overlay.world_points(scene)[0]
        for distance in (7.0, 25.0, 400.0):
            origin, direction = self._camera_ray(target, distance)
            # Aim slightly off the pin, still within the pick solid
            offset = np.cross(direction, [0.0, 1.0, 0.0])
            offset = offset / np.linalg.norm(offset) * PICK_RADIUS * 0.9
            assert overlay.pick(scene, origin + offset, direction) == "ist"

    def test_miss(self, make_station) -> None:
        scene, frame = GlobeScene(), GlobeFrame()
        overlay = MarkerOverlay([make_station("ist")])
        scene.apply(frame)
        target = overlay.world_points(scene)[0]
        origin, direction = self._camera_ray(target)
        offset = np.cross(direction, [0.0, 1.0, 0.0])
        offset = offset / np.linalg.norm(offset) * PICK_RADIUS * 3
        assert overlay.pick(scene, origin + offset, direction) is None

    def test_marker_behind_globe_not_pickable(self, make_station) -> None:
        scene, frame = GlobeScene(), GlobeFrame()
        overlay = MarkerOverlay([make_station("ist")])
        scene.apply(frame)
        target = overlay.world_points(scene)[0]
        # Camera on the opposite side, looking through the globe
        origin = -target / np.linalg.norm(target) * 14.0
        direction = target / np.linalg.norm(target)
        assert overlay.pick(scene, origin, direction) is None

    def test_nearest_wins(self, make_station) -> None:
        """Two pins on the same ray: the one nearer the camera is picked."""
        scene, frame = GlobeScene(), GlobeFrame()
        overlay = MarkerOverlay(
            [
                make_station("near", geo_lat=0.0, geo_long=0.0),
                make_station("close", geo_lat=0.5, geo_long=0.5),
            ]
        )
        scene.apply(frame)
        near = overlay.world_points(scene)[0]
        origin, direction = self._camera_ray(near)
        assert overlay.pick(scene, origin, direction) == "near"
