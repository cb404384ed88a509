"""Rotating globe scene — shared frame state, scene nodes, and the station marker overlay.

Scene graph (one rotation per tick, shared):

    GlobeScene
      earth    ← rotation_y(frame.angle)        sphere mesh, textured
      clouds   ← rotation_y(frame.cloud_angle)  cloud shell, slightly larger, faster
      markers  ← rotation_y(frame.angle)        container; markers parented here

Markers are projected once into the globe's local frame and never
re-projected. Only the container moves, and it receives the very same
matrix object as the earth mesh, so marker and surface cannot drift apart
however long the loop runs.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from radioglobe.models import StationRecord
from radioglobe.projection import GLOBE_RADIUS, apply_transform, project, rotation_y

logger = logging.getLogger(__name__)

EARTH_STEP = 0.0005  # radians per tick
CLOUD_STEP = 0.0007  # clouds drift slightly faster than the surface
CLOUD_SCALE = 1.015
TICK_SECONDS = 1.0 / 60.0

PULSE_FREQUENCY = 5.0  # radians per second
PULSE_AMPLITUDE = 0.2

# World-space radius of the invisible pick solid around each marker.
# Fixed, so picking does not depend on how far the camera is zoomed out.
PICK_RADIUS = 0.25


@dataclass
class GlobeFrame:
    """Rotation state of the globe. Mutated only by the render loop."""

    step: float = EARTH_STEP
    cloud_step: float = CLOUD_STEP
    angle: float = 0.0
    ticks: int = 0
    elapsed: float = 0.0  # seconds, drives the selection pulse

    @property
    def cloud_angle(self) -> float:
        return self.ticks * self.cloud_step

    def advance(self, dt: float = TICK_SECONDS) -> None:
        self.angle += self.step
        self.ticks += 1
        self.elapsed += dt


@dataclass
class SceneNode:
    """A transform in the scene graph. ``matrix`` is replaced, never edited in place."""

    name: str
    scale: float = 1.0
    matrix: np.ndarray = field(default_factory=lambda: np.eye(3))

    def world(self, local: np.ndarray) -> np.ndarray:
        return apply_transform(self.matrix, np.asarray(local) * self.scale)


class GlobeScene:
    """Earth mesh, cloud shell and marker container driven by one GlobeFrame."""

    def __init__(self, radius: float = GLOBE_RADIUS) -> None:
        self.radius = radius
        self.earth = SceneNode("earth")
        self.clouds = SceneNode("clouds", scale=CLOUD_SCALE)
        self.markers = SceneNode("markers")

    def apply(self, frame: GlobeFrame) -> None:
        spin = rotation_y(frame.angle)
        self.earth.matrix = spin
        self.markers.matrix = spin
        self.clouds.matrix = rotation_y(frame.cloud_angle)

    def tick(self, frame: GlobeFrame, dt: float = TICK_SECONDS) -> None:
        """One render-loop step: advance the shared frame, then re-apply it."""
        frame.advance(dt)
        self.apply(frame)


class MarkerState(Enum):
    IDLE = "idle"
    HOVERED = "hovered"
    SELECTED = "selected"


class MarkerEvent(Enum):
    POINTER_ENTER = "pointer_enter"
    POINTER_LEAVE = "pointer_leave"
    SELECT = "select"
    DESELECT = "deselect"  # another station became selected


_TRANSITIONS: dict[tuple[MarkerState, MarkerEvent], MarkerState] = {
    (MarkerState.IDLE, MarkerEvent.POINTER_ENTER): MarkerState.HOVERED,
    (MarkerState.HOVERED, MarkerEvent.POINTER_LEAVE): MarkerState.IDLE,
    (MarkerState.SELECTED, MarkerEvent.DESELECT): MarkerState.IDLE,
}


def transition(state: MarkerState, event: MarkerEvent) -> MarkerState:
    """Next visual state of one marker. Unlisted pairs leave the state unchanged."""
    if event is MarkerEvent.SELECT:
        return MarkerState.SELECTED
    return _TRANSITIONS.get((state, event), state)


MARKER_COLORS: dict[MarkerState, str] = {
    MarkerState.IDLE: "#ff0055",
    MarkerState.HOVERED: "#ffffff",
    MarkerState.SELECTED: "#00ffff",
}


def pulse_scale(state: MarkerState, elapsed: float) -> float:
    """Size multiplier. Only selected markers pulse."""
    if state is not MarkerState.SELECTED:
        return 1.0
    return 1.0 + math.sin(elapsed * PULSE_FREQUENCY) * PULSE_AMPLITUDE


@dataclass
class StationMarker:
    """One station pin in globe-local coordinates."""

    station: StationRecord
    local: np.ndarray  # base point on the sphere surface
    state: MarkerState = MarkerState.IDLE

    @property
    def color(self) -> str:
        return MARKER_COLORS[self.state]

    @property
    def beam_height(self) -> float:
        return 0.8 if self.state is MarkerState.SELECTED else 0.3

    @property
    def base_radius(self) -> float:
        return 0.1 if self.state is MarkerState.SELECTED else 0.05

    def scale(self, elapsed: float) -> float:
        return pulse_scale(self.state, elapsed)

    def beam_tip(self, elapsed: float = 0.0) -> np.ndarray:
        """Outer end of the beam, local frame. The beam points away from the centre."""
        normal = self.local / np.linalg.norm(self.local)
        return self.local + normal * self.beam_height * self.scale(elapsed)


class MarkerOverlay:
    """All station markers plus the exclusive selection.

    ``selected`` is the SelectionState: it survives catalog swaps and is only
    replaced by selecting another station.
    """

    def __init__(
        self, stations: Iterable[StationRecord] = (), radius: float = GLOBE_RADIUS
    ) -> None:
        self.radius = radius
        self.markers: dict[str, StationMarker] = {}
        self.selected: str | None = None
        self.set_stations(stations)

    def set_stations(self, stations: Iterable[StationRecord]) -> None:
        """Replace every marker. Stations without usable coordinates are skipped."""
        markers: dict[str, StationMarker] = {}
        for station in stations:
            if (
                not station.has_geo
                or station.geo_lat is None
                or station.geo_long is None
                or station.uuid in markers
            ):
                logger.debug("Not placing station %s (%s)", station.uuid, station.name)
                continue
            state = (
                MarkerState.SELECTED
                if station.uuid == self.selected
                else MarkerState.IDLE
            )
            markers[station.uuid] = StationMarker(
                station=station,
                local=project(station.geo_lat, station.geo_long, self.radius),
                state=state,
            )
        self.markers = markers

    def _fire(self, uuid: str, event: MarkerEvent) -> None:
        marker = self.markers.get(uuid)
        if marker is not None:
            marker.state = transition(marker.state, event)

    def hover(self, uuid: str) -> None:
        self._fire(uuid, MarkerEvent.POINTER_ENTER)

    def unhover(self, uuid: str) -> None:
        self._fire(uuid, MarkerEvent.POINTER_LEAVE)

    def select(self, uuid: str) -> None:
        if self.selected == uuid:
            return
        if self.selected is not None:
            self._fire(self.selected, MarkerEvent.DESELECT)
        self.selected = uuid
        self._fire(uuid, MarkerEvent.SELECT)

    def states(self) -> dict[str, MarkerState]:
        return {uuid: m.state for uuid, m in self.markers.items()}

    def ids(self) -> list[str]:
        return list(self.markers)

    def local_points(self) -> np.ndarray:
        """Base points of all markers, shape (N, 3), in ``ids()`` order."""
        if not self.markers:
            return np.empty((0, 3))
        return np.stack([m.local for m in self.markers.values()])

    def world_points(self, scene: GlobeScene) -> np.ndarray:
        return scene.markers.world(self.local_points())

    def pick(
        self, scene: GlobeScene, origin: np.ndarray, direction: np.ndarray
    ) -> str | None:
        """Station hit by a ray, nearest first, or None.

        Each marker is a sphere of PICK_RADIUS at its current world position.
        Markers behind the globe (seen through it) are not pickable.
        """
        if not self.markers:
            return None
        o = np.asarray(origin, dtype=float)
        d = np.asarray(direction, dtype=float)
        d = d / np.linalg.norm(d)

        points = self.world_points(scene)
        rel = points - o
        t = rel @ d
        miss_sq = np.einsum("ij,ij->i", rel, rel) - t**2
        hit = (t > 0) & (miss_sq <= PICK_RADIUS**2)

        # Front face of the globe along the ray
        b = float(o @ d)
        disc = b * b - (float(o @ o) - self.radius**2)
        if disc >= 0:
            t_globe = -b - math.sqrt(disc)
            hit &= t <= t_globe + PICK_RADIUS

        if not hit.any():
            return None
        ids = self.ids()
        candidates = np.flatnonzero(hit)
        best = candidates[np.argmin(t[candidates])]
        return ids[int(best)]
