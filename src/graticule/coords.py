"""
Coordinate transformation utilities.

Axis Flow:
Sample angles (lat/lon, degrees) → sphere XYZ (z up) → rotation offset → render XYZ

Rotations are applied about the world origin, one fixed axis at a time.
The order of those axis rotations matters and is always explicit.
"""

import numpy as np
from typing import Sequence, Union
import logging

from scipy.spatial.transform import Rotation

logger = logging.getLogger(__name__)

AXES = {
    'x': np.array([1.0, 0.0, 0.0]),
    'y': np.array([0.0, 1.0, 0.0]),
    'z': np.array([0.0, 0.0, 1.0]),
}


def spherical_to_cartesian(
    lat_deg: Union[float, np.ndarray],
    lon_deg: Union[float, np.ndarray],
    radius: float,
    scale: float = 1.0
) -> np.ndarray:
    """
    Convert latitude/longitude to Cartesian coordinates on a sphere.

    x = R cos(lat) cos(lon) * scale
    y = R cos(lat) sin(lon) * scale
    z = R sin(lat) * scale

    Args:
        lat_deg: Latitude in degrees (broadcastable with lon_deg)
        lon_deg: Longitude in degrees
        radius: Sphere radius
        scale: Uniform scale applied after the radius

    Returns:
        (..., 3) array of XYZ coordinates
    """
    lat_rad = np.deg2rad(np.asarray(lat_deg, dtype=np.float64))
    lon_rad = np.deg2rad(np.asarray(lon_deg, dtype=np.float64))
    lat_rad, lon_rad = np.broadcast_arrays(lat_rad, lon_rad)

    x = radius * np.cos(lat_rad) * np.cos(lon_rad) * scale
    y = radius * np.cos(lat_rad) * np.sin(lon_rad) * scale
    z = radius * np.sin(lat_rad) * scale

    return np.stack([x, y, z], axis=-1)


def axis_angle_rotation(axis: Union[str, Sequence[float]], angle_deg: float) -> Rotation:
    """
    Rotation of angle_deg about an axis through the origin.

    Args:
        axis: 'x', 'y', 'z' or a 3-vector
        angle_deg: Angle in degrees (right-hand rule)
    """
    if isinstance(axis, str):
        try:
            axis_vec = AXES[axis.lower()]
        except KeyError:
            raise ValueError(f"Unknown axis: {axis}")
    else:
        axis_vec = np.asarray(axis, dtype=np.float64)
        norm = np.linalg.norm(axis_vec)
        if axis_vec.shape != (3,) or norm == 0:
            raise ValueError(f"Axis must be a non-zero 3-vector, got {axis}")
        axis_vec = axis_vec / norm

    return Rotation.from_rotvec(axis_vec * np.deg2rad(angle_deg))


def compose_rotation(angles_deg: Sequence[float], order: str = "xyz") -> Rotation:
    """
    Compose per-axis rotations applied one after another about fixed world axes.

    angles_deg is always (angle_x, angle_y, angle_z); order only changes
    which axis is applied first.
    """
    if len(angles_deg) != 3:
        raise ValueError(f"Expected 3 angles, got {len(angles_deg)}")
    order = order.lower()
    if sorted(order) != ['x', 'y', 'z']:
        raise ValueError(f"Order must be a permutation of 'xyz', got {order!r}")

    by_axis = dict(zip("xyz", angles_deg))
    rotation = Rotation.identity()
    for axis in order:
        # a * b applies b first, so later axes go on the left
        rotation = axis_angle_rotation(axis, by_axis[axis]) * rotation
    return rotation


def rotate_about_origin(
    points: np.ndarray,
    angles_deg: Sequence[float],
    order: str = "xyz"
) -> np.ndarray:
    """
    Rotate points about the origin by (angle_x, angle_y, angle_z).

    Args:
        points: (3,) or (..., 3) array
        angles_deg: Angles about X, Y and Z in degrees
        order: Sequence in which the axis rotations are applied

    Returns:
        Rotated points with the same shape as the input
    """
    points = np.asarray(points, dtype=np.float64)
    if points.shape[-1] != 3:
        raise ValueError(f"Points must have a trailing dimension of 3, got {points.shape}")

    rotation = compose_rotation(angles_deg, order)
    flat = points.reshape(-1, 3)
    rotated = rotation.apply(flat)
    return rotated.reshape(points.shape)


class SphereTransformer:
    """
    Map sample angles onto the rendered sphere.

    This is the ONLY place where angles become scene positions.
    """

    def __init__(
        self,
        radius: float,
        scale: float = 1.0,
        rotation_offset: Sequence[float] = (0.0, 0.0, 0.0)
    ):
        """
        Initialize transformer.

        Args:
            radius: Sphere radius before scaling
            scale: Uniform scale coefficient
            rotation_offset: Degrees about X, then Y, then Z
        """
        self.radius = radius
        self.scale = scale
        self.rotation_offset = tuple(float(a) for a in rotation_offset)
        self.rotation = compose_rotation(self.rotation_offset, "xyz")
        logger.debug(
            f"SphereTransformer: R={radius}, scale={scale}, rotation={self.rotation_offset}"
        )

    def to_scene(self, lat_deg: np.ndarray, lon_deg: np.ndarray) -> np.ndarray:
        """Angles → rotated scene coordinates, shape broadcast(lat, lon) + (3,)."""
        points = spherical_to_cartesian(lat_deg, lon_deg, self.radius, self.scale)
        flat = points.reshape(-1, 3)
        return self.rotation.apply(flat).reshape(points.shape)
