"""Matplotlib static PNG renderer — one snapshot of the rotating globe."""

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from radioglobe.globe import GlobeFrame, GlobeScene, MarkerOverlay
from radioglobe.projection import sphere_mesh

_ROOT = Path(__file__).parent.parent.parent.parent


def render_static_globe(
    scene: GlobeScene,
    overlay: MarkerOverlay,
    frame: GlobeFrame,
    chart_size: int = 10,
) -> Figure:
    """Render the scene at the current frame as a static matplotlib image.

    Args:
        scene: Scene to draw. Re-applied from ``frame`` before drawing.
        overlay: Station markers.
        frame: Rotation state to draw at. Not advanced.
        chart_size: Output image size in inches.

    Returns:
        matplotlib Figure object.
    """
    scene.apply(frame)

    fig = plt.figure(figsize=(chart_size, chart_size))
    fig.patch.set_facecolor("black")
    ax = fig.add_subplot(projection="3d")
    ax.set_facecolor("black")

    earth = scene.earth.world(sphere_mesh(scene.radius, 48, 48))
    # Plot with y-up: matplotlib's vertical axis is z, so swap y/z
    ax.plot_surface(
        earth[..., 0],
        earth[..., 2],
        earth[..., 1],
        color="#0d3b66",
        alpha=0.9,
        linewidth=0,
        shade=True,
        zorder=1,
    )

    markers = list(overlay.markers.values())
    if markers:
        base = overlay.world_points(scene)
        tips = scene.markers.world(np.stack([m.beam_tip(frame.elapsed) for m in markers]))
        for m, b, tip in zip(markers, base, tips):
            ax.plot(
                [b[0], tip[0]], [b[2], tip[2]], [b[1], tip[1]],
                color=m.color, linewidth=0.8, alpha=0.8, zorder=2,
            )
        ax.scatter(
            base[:, 0],
            base[:, 2],
            base[:, 1],
            s=[12 * m.scale(frame.elapsed) for m in markers],
            c=[m.color for m in markers],
            depthshade=False,
            zorder=3,
        )

    lim = scene.radius * 1.2
    ax.set_xlim(-lim, lim)
    ax.set_ylim(-lim, lim)
    ax.set_zlim(-lim, lim)
    ax.set_box_aspect((1, 1, 1))
    ax.view_init(elev=15, azim=90)
    ax.axis("off")

    return fig


def save_static_globe(
    scene: GlobeScene,
    overlay: MarkerOverlay,
    frame: GlobeFrame,
    output_path: Path | None = None,
) -> Path:
    """Save one globe snapshot as a PNG file.

    Args:
        scene: Scene to draw.
        overlay: Station markers.
        frame: Rotation state to draw at.
        output_path: Destination path. Auto-generated under results/ if None.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        filename = f"globe__{len(overlay.markers)}_stations__tick_{frame.ticks}.png"
        output_path = _ROOT / "results" / filename

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_static_globe(scene, overlay, frame)
    fig.savefig(output_path, facecolor="black")
    plt.close(fig)
    return output_path
