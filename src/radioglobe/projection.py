"""Geographic → globe-local coordinates, and the UV sphere the earth texture wraps.

Coordinate system (y-up, right-handed, unrotated globe):
  +y  north pole
  u   texture column, 0 at the left edge of the equirectangular earth image
  v   texture row, 0 at the north pole, 1 at the south pole

The earth texture is an equirectangular image whose left edge is the
180° meridian. Sphere vertices are laid out with ``u * 360°`` of azimuth
starting at that edge, so a station at longitude ``lon`` sits at azimuth
``lon + TEXTURE_SEAM_OFFSET_DEG``. Changing the texture asset without
changing this constant shifts every marker off its country.
"""

import math

import numpy as np

GLOBE_RADIUS = 5.0

# Longitude of the earth texture's left edge is -180°; azimuth 0 is that seam.
TEXTURE_SEAM_OFFSET_DEG = 180.0


def _check_latlon(lat: float, lon: float) -> None:
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ValueError(f"non-finite coordinate: lat={lat}, lon={lon}")
    if not -90.0 <= lat <= 90.0:
        raise ValueError(f"latitude out of range: {lat}")
    if not -180.0 <= lon <= 180.0:
        raise ValueError(f"longitude out of range: {lon}")


def project(lat: float, lon: float, radius: float = GLOBE_RADIUS) -> np.ndarray:
    """Map latitude/longitude to a point on the unrotated globe.

    Rotation is never baked in here; the caller parents the point to a
    rotating container instead.

    Args:
        lat: Latitude in degrees, [-90, 90].
        lon: Longitude in degrees, [-180, 180].
        radius: Sphere radius, > 0.

    Returns:
        float64 array (x, y, z) at distance ``radius`` from the origin.

    Raises:
        ValueError: On out-of-range or non-finite input.
    """
    _check_latlon(lat, lon)
    if not radius > 0:
        raise ValueError(f"radius must be positive: {radius}")
    phi = math.radians(90.0 - lat)  # polar angle from +y
    theta = math.radians(lon + TEXTURE_SEAM_OFFSET_DEG)  # azimuth from the seam
    return np.array(
        [
            -(radius * math.sin(phi) * math.cos(theta)),
            radius * math.cos(phi),
            radius * math.sin(phi) * math.sin(theta),
        ]
    )


def latlon_to_uv(lat: float, lon: float) -> tuple[float, float]:
    """Texture coordinates of a geographic point."""
    _check_latlon(lat, lon)
    return (lon + TEXTURE_SEAM_OFFSET_DEG) / 360.0, (90.0 - lat) / 180.0


def texture_point(u: float, v: float, radius: float = GLOBE_RADIUS) -> np.ndarray:
    """Surface point where texel (u, v) lands on the unrotated sphere."""
    phi = u * 2.0 * math.pi
    theta = v * math.pi
    return np.array(
        [
            -(radius * math.cos(phi) * math.sin(theta)),
            radius * math.cos(theta),
            radius * math.sin(phi) * math.sin(theta),
        ]
    )


def sphere_mesh(
    radius: float = GLOBE_RADIUS, width_segments: int = 64, height_segments: int = 64
) -> np.ndarray:
    """Vertex grid of a UV sphere, shape (height_segments + 1, width_segments + 1, 3).

    Row ``j`` is v = j / height_segments, column ``i`` is u = i / width_segments,
    using the same layout as texture_point.
    """
    u = np.linspace(0.0, 1.0, width_segments + 1)
    v = np.linspace(0.0, 1.0, height_segments + 1)
    phi, theta = np.meshgrid(u * 2.0 * np.pi, v * np.pi)
    return np.stack(
        [
            -(radius * np.cos(phi) * np.sin(theta)),
            radius * np.cos(theta),
            radius * np.sin(phi) * np.sin(theta),
        ],
        axis=-1,
    )


def rotation_y(angle: float) -> np.ndarray:
    """3x3 rotation about the polar (+y) axis, right-handed."""
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])


def apply_transform(matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Apply a 3x3 transform to one point (3,) or a stack of points (..., 3)."""
    return np.asarray(points) @ matrix.T
