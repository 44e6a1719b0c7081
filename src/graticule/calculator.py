"""
Latitude-longitude net calculation.

Algorithm:
N1. Derive sample counts from accuracy (two semicircles per family)
N2. Build latitude / longitude sample angles
N3. Convert every (lat, lon) pair to sphere XYZ
N4. Rotate into the rendering axis convention (X, then Y, then Z)
N5. Store the grid twice: indexed [lon][lat] and [lat][lon]

The whole grid is rebuilt on every request; nothing is updated incrementally.
"""

import numpy as np
from typing import Optional, Tuple, List
from dataclasses import dataclass
import logging

from .config import NetConfig, Accuracy
from .coords import SphereTransformer

logger = logging.getLogger(__name__)

LATITUDE = "latitude"
LONGITUDE = "longitude"


@dataclass
class NetCoordinates:
    """One polyline of the net."""
    family: str  # "latitude" or "longitude"
    index: int
    coords: np.ndarray  # (N, 3)

    @property
    def n_points(self) -> int:
        return len(self.coords)


@dataclass
class LatLongNet:
    """
    Computed net.

    lat_coords[j][i] and long_coords[i][j] hold the same point:
    latitude index i, longitude index j.
    """
    latitudes: np.ndarray  # (lat_vect_length,) degrees
    longitudes: np.ndarray  # (long_vect_length,) degrees
    lat_coords: np.ndarray  # (long_vect_length, lat_vect_length, 3)
    long_coords: np.ndarray  # (lat_vect_length, long_vect_length, 3)

    @property
    def lat_vect_length(self) -> int:
        return len(self.latitudes)

    @property
    def long_vect_length(self) -> int:
        return len(self.longitudes)

    def latitude_line(self, j: int) -> NetCoordinates:
        """Points of lat_coords[j]: every latitude sample at longitude index j."""
        return NetCoordinates(LATITUDE, j, self.lat_coords[j])

    def longitude_line(self, i: int) -> NetCoordinates:
        """Points of long_coords[i]: every longitude sample at latitude index i."""
        return NetCoordinates(LONGITUDE, i, self.long_coords[i])

    def latitude_lines(self) -> List[NetCoordinates]:
        return [self.latitude_line(j) for j in range(self.long_vect_length)]

    def longitude_lines(self) -> List[NetCoordinates]:
        return [self.longitude_line(i) for i in range(self.lat_vect_length)]

    @property
    def all_points(self) -> np.ndarray:
        """Return all grid points as Nx3 array."""
        return self.long_coords.reshape(-1, 3)


def sample_counts(accuracy: Accuracy) -> Tuple[int, int]:
    """
    Number of latitude and longitude samples.

    Non-dividing accuracy truncates (integer division); a warning is logged.

    Returns:
        (lat_vect_length, long_vect_length)
    """
    accuracy.validate()
    if not accuracy.divides_evenly:
        logger.warning(
            f"Accuracy lat={accuracy.latitude}, lon={accuracy.longitude} does not divide "
            f"180/360 evenly; sample counts truncated"
        )
    return accuracy.lat_vect_length, accuracy.long_vect_length


def sample_angles(accuracy: Accuracy) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sample angles in degrees: i * accuracy for each index.

    Returns:
        latitudes: (lat_vect_length,) array
        longitudes: (long_vect_length,) array
    """
    lat_len, long_len = sample_counts(accuracy)
    latitudes = np.arange(lat_len, dtype=np.float64) * accuracy.latitude
    longitudes = np.arange(long_len, dtype=np.float64) * accuracy.longitude
    return latitudes, longitudes


def calculate_net(config: Optional[NetConfig] = None) -> LatLongNet:
    """
    Compute the full latitude-longitude net.

    Args:
        config: Configuration (uses defaults if None)

    Returns:
        LatLongNet with both index layouts filled
    """
    config = config or NetConfig()
    config.accuracy.validate()

    # ========== N1/N2: Sample angles ==========
    latitudes, longitudes = sample_angles(config.accuracy)
    logger.debug(f"Samples: {len(latitudes)} latitudes x {len(longitudes)} longitudes")

    # ========== N3/N4: Sphere points, rotated ==========
    transformer = SphereTransformer(
        radius=config.radius,
        scale=config.scale_coefficient,
        rotation_offset=config.rotation_offset
    )
    lat_grid, lon_grid = np.meshgrid(latitudes, longitudes, indexing='ij')
    grid = transformer.to_scene(lat_grid, lon_grid)  # [i][j]

    # ========== N5: Both index layouts ==========
    long_coords = np.ascontiguousarray(grid)
    lat_coords = np.ascontiguousarray(grid.transpose(1, 0, 2))

    return LatLongNet(
        latitudes=latitudes,
        longitudes=longitudes,
        lat_coords=lat_coords,
        long_coords=long_coords
    )


class NetCalculator:
    """
    Owns one net and rebuilds it on request.

    Each call to calculate() discards the previous grid.
    """

    def __init__(self, config: Optional[NetConfig] = None):
        self.config = config or NetConfig()
        self.net: Optional[LatLongNet] = None

    def calculate(self) -> LatLongNet:
        self.net = None
        self.net = calculate_net(self.config)
        logger.info(
            f"Calculated net: {self.net.lat_vect_length} x {self.net.long_vect_length} samples "
            f"({self.net.lat_vect_length * self.net.long_vect_length} points)"
        )
        return self.net
