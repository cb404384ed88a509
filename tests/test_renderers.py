"""
Tests for the Plotly and matplotlib globe renderers.
"""

import matplotlib

matplotlib.use("Agg")

import numpy as np  # noqa: E402
import pytest  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from radioglobe.globe import GlobeFrame, GlobeScene, MarkerOverlay  # noqa: E402
from radioglobe.renderers.plotly_3d import render_globe_figure  # noqa: E402
from radioglobe.renderers.static import render_static_globe, save_static_globe  # noqa: E402


@pytest.fixture
def overlay(make_station) -> MarkerOverlay:
    overlay = MarkerOverlay(
        [
            make_station("ist", name="Istanbul FM"),
            make_station("tyo", name="Tokyo Jazz", geo_lat=35.7, geo_long=139.7),
            make_station("nogeo", geo_lat=None),
        ]
    )
    overlay.select("tyo")
    return overlay


class TestPlotlyGlobe:
    """Tests for render_globe_figure."""

    def test_frames_advance_shared_frame(self, overlay) -> None:
        scene, frame = GlobeScene(), GlobeFrame()
        fig = render_globe_figure(scene, overlay, frame, n_frames=4, ticks_per_frame=5, mesh_segments=8, star_count=10)
        assert len(fig.frames) == 4
        assert frame.ticks == 20
        assert scene.earth.matrix is scene.markers.matrix

    def test_station_trace(self, overlay) -> None:
        fig = render_globe_figure(
            GlobeScene(), overlay, GlobeFrame(), n_frames=1, ticks_per_frame=1, mesh_segments=8, star_count=10
        )
        pins = next(tr for tr in fig.data if tr.name == "stations")
        assert list(pins.text) == ["Istanbul FM", "Tokyo Jazz"]
        assert pins.hovertemplate == "%{text}<extra></extra>"
        assert pins.marker.color[1] == "#00ffff"

    def test_frame_pins_follow_the_surface(self, overlay) -> None:
        """Pin coordinates in the last frame equal the container transform of the local points."""
        scene, frame = GlobeScene(), GlobeFrame()
        fig = render_globe_figure(scene, overlay, frame, n_frames=3, ticks_per_frame=40, mesh_segments=8, star_count=10)
        last = fig.frames[-1]
        pins = next(tr for tr in last.data if tr.name == "stations")
        expected = scene.markers.world(overlay.local_points())
        assert np.allclose(np.column_stack([pins.x, pins.y, pins.z]), expected)

    def test_empty_overlay(self) -> None:
        fig = render_globe_figure(
            GlobeScene(), MarkerOverlay(), GlobeFrame(), n_frames=1, ticks_per_frame=1, mesh_segments=8, star_count=10
        )
        pins = next(tr for tr in fig.data if tr.name == "stations")
        assert len(pins.x) == 0


class TestStaticGlobe:
    """Tests for the matplotlib snapshot."""

    def test_render(self, overlay) -> None:
        fig = render_static_globe(GlobeScene(), overlay, GlobeFrame(), chart_size=3)
        assert isinstance(fig, Figure)

    def test_save(self, overlay, tmp_path) -> None:
        out = save_static_globe(GlobeScene(), overlay, GlobeFrame(), tmp_path / "globe.png")
        assert out.exists()
        assert out.stat().st_size > 0
