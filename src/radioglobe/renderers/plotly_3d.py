"""Plotly 3D interactive globe renderer.

The figure is an animation: each Plotly frame is one sample of the render
loop. Between samples the loop ticks the shared GlobeFrame several times,
then every trace is rebuilt from the scene nodes: earth and graticule from
``scene.earth``, clouds from ``scene.clouds``, pins and beams from
``scene.markers``. Marker positions come from their fixed local points,
never from a fresh projection.
"""

import numpy as np
import plotly.graph_objects as go
from plotly.basedatatypes import BaseTraceType

from radioglobe.globe import (
    MARKER_COLORS,
    GlobeFrame,
    GlobeScene,
    MarkerOverlay,
    MarkerState,
)
from radioglobe.projection import sphere_mesh, texture_point

_BG = "#020205"
_OCEAN_SCALE = [[0.0, "#071a3a"], [0.5, "#0d3b66"], [1.0, "#071a3a"]]
_GRATICULE_COLOR = "#3a6ea5"
_STAR_COLOR = "#ffffff"

_MARKER_SIZE = {MarkerState.IDLE: 4.0, MarkerState.HOVERED: 5.0, MarkerState.SELECTED: 7.0}


def _graticule(radius: float, step_deg: int = 30, samples: int = 73) -> np.ndarray:
    """Parallels and meridians on the unrotated sphere, NaN-separated, shape (N, 3)."""
    pts: list[np.ndarray] = []
    gap = np.full((1, 3), np.nan)
    us = np.linspace(0.0, 1.0, samples)
    for lat in range(-90 + step_deg, 90, step_deg):
        v = (90.0 - lat) / 180.0
        pts.append(np.stack([texture_point(u, v, radius) for u in us]))
        pts.append(gap)
    vs = np.linspace(0.0, 1.0, samples // 2 + 1)
    for lon in range(-180, 180, step_deg):
        u = (lon + 180.0) / 360.0
        pts.append(np.stack([texture_point(u, v, radius) for v in vs]))
        pts.append(gap)
    return np.concatenate(pts)


def _star_field(count: int, seed: int = 12345) -> go.Scatter3d:
    """Fixed background stars on a distant shell. Seeded so reruns don't flicker."""
    rng = np.random.default_rng(seed)
    dirs = rng.normal(size=(count, 3))
    dirs /= np.linalg.norm(dirs, axis=1, keepdims=True)
    pts = dirs * rng.uniform(60.0, 90.0, size=(count, 1))
    return go.Scatter3d(
        x=pts[:, 0],
        y=pts[:, 1],
        z=pts[:, 2],
        mode="markers",
        marker=dict(size=1.2, color=_STAR_COLOR, opacity=0.6),
        hoverinfo="skip",
        name="stars",
    )


def _scene_traces(
    scene: GlobeScene,
    overlay: MarkerOverlay,
    elapsed: float,
    earth_mesh: np.ndarray,
    cloud_mesh: np.ndarray,
    graticule: np.ndarray,
) -> list[BaseTraceType]:
    """Traces that move with the globe, in a fixed order so frames line up."""
    earth = scene.earth.world(earth_mesh)
    clouds = scene.clouds.world(cloud_mesh)
    grid = scene.earth.world(graticule)

    earth_trace = go.Surface(
        x=earth[..., 0],
        y=earth[..., 1],
        z=earth[..., 2],
        surfacecolor=earth_mesh[..., 1],  # shade by latitude, stays glued to the mesh
        colorscale=_OCEAN_SCALE,
        showscale=False,
        hoverinfo="skip",
        lighting=dict(ambient=0.6, diffuse=0.6, specular=0.05),
        name="earth",
    )
    cloud_trace = go.Surface(
        x=clouds[..., 0],
        y=clouds[..., 1],
        z=clouds[..., 2],
        surfacecolor=np.zeros(clouds.shape[:2]),
        colorscale=[[0.0, "#ffffff"], [1.0, "#ffffff"]],
        showscale=False,
        opacity=0.08,
        hoverinfo="skip",
        name="clouds",
    )
    grid_trace = go.Scatter3d(
        x=grid[:, 0],
        y=grid[:, 1],
        z=grid[:, 2],
        mode="lines",
        line=dict(color=_GRATICULE_COLOR, width=1),
        opacity=0.5,
        hoverinfo="skip",
        name="graticule",
    )

    markers = list(overlay.markers.values())
    if markers:
        base = overlay.world_points(scene)
        tips = scene.markers.world(np.stack([m.beam_tip(elapsed) for m in markers]))
    else:
        base = tips = np.empty((0, 3))

    # Beams: one trace per colour, segments separated by None
    beam_traces: list[BaseTraceType] = []
    for selected, color, width in (
        (False, MARKER_COLORS[MarkerState.IDLE], 2),
        (True, MARKER_COLORS[MarkerState.SELECTED], 5),
    ):
        bx: list[float | None] = []
        by: list[float | None] = []
        bz: list[float | None] = []
        for m, (x0, y0, z0), (x1, y1, z1) in zip(markers, base, tips):
            if (m.state is MarkerState.SELECTED) != selected:
                continue
            bx += [x0, x1, None]
            by += [y0, y1, None]
            bz += [z0, z1, None]
        beam_traces.append(
            go.Scatter3d(
                x=bx,
                y=by,
                z=bz,
                mode="lines",
                line=dict(color=color, width=width),
                opacity=0.8,
                hoverinfo="skip",
                name="selected_beam" if selected else "beams",
            )
        )
    pin_trace = go.Scatter3d(
        x=base[:, 0],
        y=base[:, 1],
        z=base[:, 2],
        mode="markers",
        marker=dict(
            size=[_MARKER_SIZE[m.state] * m.scale(elapsed) for m in markers],
            color=[m.color for m in markers],
            opacity=0.9,
            line=dict(width=0),
        ),
        text=[m.station.name for m in markers],
        hovertemplate="%{text}<extra></extra>",
        name="stations",
    )
    return [earth_trace, cloud_trace, grid_trace, *beam_traces, pin_trace]


def render_globe_figure(
    scene: GlobeScene,
    overlay: MarkerOverlay,
    frame: GlobeFrame,
    n_frames: int = 60,
    ticks_per_frame: int = 30,
    mesh_segments: int = 48,
    star_count: int = 1500,
) -> go.Figure:
    """Render the globe as an auto-rotating Plotly 3D animation.

    Advances ``frame`` by ``n_frames * ticks_per_frame`` ticks through
    ``scene.tick``, so callers can keep the same frame across reruns and
    the globe resumes where it stopped.

    Args:
        scene: Scene whose nodes carry the current rotation.
        overlay: Station markers and selection.
        frame: Shared rotation state, mutated.
        n_frames: Animation frames to emit.
        ticks_per_frame: Render-loop ticks between two animation frames.
        mesh_segments: Sphere tessellation (both directions).
        star_count: Background stars.

    Returns:
        Plotly Figure with a play/pause frame animation.
    """
    earth_mesh = sphere_mesh(scene.radius, mesh_segments, mesh_segments)
    cloud_mesh = sphere_mesh(scene.radius, mesh_segments // 2, mesh_segments // 2)
    graticule = _graticule(scene.radius)

    scene.apply(frame)
    traces = _scene_traces(scene, overlay, frame.elapsed, earth_mesh, cloud_mesh, graticule)
    moving = list(range(1, len(traces) + 1))  # star field (index 0) never moves

    frames: list[go.Frame] = []
    for k in range(n_frames):
        for _ in range(ticks_per_frame):
            scene.tick(frame)
        frames.append(
            go.Frame(
                data=_scene_traces(
                    scene, overlay, frame.elapsed, earth_mesh, cloud_mesh, graticule
                ),
                traces=moving,
                name=str(k),
            )
        )

    fig = go.Figure(data=[_star_field(star_count), *traces], frames=frames)

    axis = dict(visible=False, showbackground=False)
    fig.update_layout(
        paper_bgcolor=_BG,
        plot_bgcolor=_BG,
        showlegend=False,
        margin=dict(l=0, r=0, t=0, b=0),
        height=720,
        scene=dict(
            xaxis=axis,
            yaxis=axis,
            zaxis=axis,
            aspectmode="data",
            bgcolor=_BG,
            camera=dict(
                up=dict(x=0, y=1, z=0),
                eye=dict(x=0.0, y=0.25, z=1.6),
            ),
        ),
        updatemenus=[
            dict(
                type="buttons",
                showactive=False,
                x=0.02,
                y=0.05,
                xanchor="left",
                yanchor="bottom",
                bgcolor="rgba(0,0,0,0.4)",
                font=dict(color="#7ec8e3"),
                buttons=[
                    dict(
                        label="▶",
                        method="animate",
                        args=[
                            None,
                            dict(
                                frame=dict(duration=50, redraw=True),
                                transition=dict(duration=0),
                                fromcurrent=True,
                                mode="immediate",
                            ),
                        ],
                    ),
                    dict(
                        label="❚❚",
                        method="animate",
                        args=[
                            [None],
                            dict(frame=dict(duration=0, redraw=False), mode="immediate"),
                        ],
                    ),
                ],
            )
        ],
    )
    return fig
