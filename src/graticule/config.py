"""
Configuration and constants for latitude-longitude net generation.

Axis Model:
- Net is computed in spherical convention (z up, x towards lat=0/lon=0)
- rotation_offset remaps it into the rendering convention (y up)
- Default offset (0, -90, 90) matches a y-up, left-handed scene
"""

from dataclasses import dataclass, field, fields
from typing import Optional, Dict, Any, Tuple
import json
from pathlib import Path


# Mean Earth radius in kilometres
EARTH_RADIUS = 6371.0

# Lift above the sphere so the net is drawn a little above the globe surface
DEFAULT_RADIUS_OFFSET = 12.0

DEFAULT_ROTATION_OFFSET = (0.0, -90.0, 90.0)


def _check_keys(cls, data: Dict[str, Any], section: str) -> None:
    """Reject keys that are not fields of cls."""
    unknown = sorted(set(data) - {f.name for f in fields(cls)})
    if unknown:
        raise ValueError(f"Unknown {section} keys: {unknown}")


@dataclass
class Accuracy:
    """
    Angular spacing (degrees) between consecutive samples.

    Each family covers two semicircles' worth of samples:
        lat_vect_length  = int(180 / latitude) * 2
        long_vect_length = int(360 / longitude) * 2
    """
    latitude: float = 1.0
    longitude: float = 1.0

    def validate(self) -> None:
        if self.latitude <= 0 or self.longitude <= 0:
            raise ValueError(
                f"Accuracy must be positive, got latitude={self.latitude}, "
                f"longitude={self.longitude}"
            )
        if int(180 / self.latitude) * 2 == 0 or int(360 / self.longitude) * 2 == 0:
            raise ValueError(
                f"Accuracy latitude={self.latitude}, longitude={self.longitude} leaves no "
                f"samples; latitude must be <= 180 and longitude <= 360"
            )

    @property
    def lat_vect_length(self) -> int:
        self.validate()
        return int(180 / self.latitude) * 2

    @property
    def long_vect_length(self) -> int:
        self.validate()
        return int(360 / self.longitude) * 2

    @property
    def divides_evenly(self) -> bool:
        """Whether 180/360 are whole multiples of the accuracy."""
        return (
            float(180 / self.latitude).is_integer()
            and float(360 / self.longitude).is_integer()
        )

    def to_dict(self) -> Dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass
class PlotStep:
    """
    Stride, in sample-index units, selecting which lines are rendered.

    latitude strides over the latitude-index lines (one per longitude sample),
    longitude strides over the longitude-index lines (one per latitude sample).
    """
    latitude: int = 5
    longitude: int = 5

    def __post_init__(self):
        # Integral floats (e.g. 6.0 from JSON) become ints; others are left for validate()
        for name in ("latitude", "longitude"):
            value = getattr(self, name)
            if isinstance(value, float) and value.is_integer():
                setattr(self, name, int(value))

    def validate(self, accuracy: Optional[Accuracy] = None) -> None:
        for name, value in (("latitude", self.latitude), ("longitude", self.longitude)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} plot step must be a whole number, got {value!r}")
        if self.latitude < 1 or self.longitude < 1:
            raise ValueError(
                f"Plot step must be >= 1, got latitude={self.latitude}, "
                f"longitude={self.longitude}"
            )
        if accuracy is None:
            return
        if self.latitude > accuracy.long_vect_length:
            raise ValueError(
                f"Latitude plot step {self.latitude} exceeds "
                f"{accuracy.long_vect_length} available lines"
            )
        if self.longitude > accuracy.lat_vect_length:
            raise ValueError(
                f"Longitude plot step {self.longitude} exceeds "
                f"{accuracy.lat_vect_length} available lines"
            )

    @classmethod
    def from_degrees(
        cls,
        latitude_deg: float,
        longitude_deg: float,
        accuracy: Accuracy
    ) -> "PlotStep":
        """
        Build an index stride from a spacing in degrees.

        The degree spacing must be a positive multiple of the matching accuracy.

        Args:
            latitude_deg: Spacing between rendered latitude-index lines
                (these are sampled along longitude, so uses longitude accuracy)
            longitude_deg: Spacing between rendered longitude-index lines
                (sampled along latitude, so uses latitude accuracy)
            accuracy: Sampling accuracy of the net

        Returns:
            PlotStep in index units
        """
        accuracy.validate()
        lat_ratio = latitude_deg / accuracy.longitude
        lon_ratio = longitude_deg / accuracy.latitude

        for name, deg, ratio in (
            ("latitude", latitude_deg, lat_ratio),
            ("longitude", longitude_deg, lon_ratio),
        ):
            if deg <= 0 or abs(ratio - round(ratio)) > 1e-9:
                raise ValueError(
                    f"{name} plot step {deg} deg is not a positive multiple of the accuracy"
                )

        return cls(latitude=int(round(lat_ratio)), longitude=int(round(lon_ratio)))

    def to_dict(self) -> Dict[str, int]:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass
class NetMetadata:
    """
    Metadata written next to every exported net.

    Every export includes the net name, plot step, sample counts and
    the parameters needed to regenerate the same net.
    """
    net_name: str
    plot_step: Dict[str, int]
    lat_vect_length: int
    long_vect_length: int
    n_latitude_lines: int
    n_longitude_lines: int
    n_points: int
    bounds: Optional[Dict[str, Tuple[float, float]]] = None
    generation_params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "net_name": self.net_name,
            "plot_step": self.plot_step,
            "lat_vect_length": self.lat_vect_length,
            "long_vect_length": self.long_vect_length,
            "n_latitude_lines": self.n_latitude_lines,
            "n_longitude_lines": self.n_longitude_lines,
            "n_points": self.n_points,
            "bounds": self.bounds,
            "generation_params": self.generation_params
        }

    def save(self, path: Path) -> None:
        """Save metadata to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetMetadata":
        data = dict(data)
        if data.get("bounds"):
            data["bounds"] = {k: tuple(v) for k, v in data["bounds"].items()}
        return cls(**data)


@dataclass
class NetConfig:
    """
    Global configuration for net generation.

    Radius used for sampling is (base_radius + radius_offset) * scale_coefficient.
    """

    accuracy: Accuracy = field(default_factory=Accuracy)
    plot_step: PlotStep = field(default_factory=PlotStep)

    # Degrees about X, then Y, then Z
    rotation_offset: Tuple[float, float, float] = DEFAULT_ROTATION_OFFSET

    scale_coefficient: float = 0.01
    base_radius: float = EARTH_RADIUS
    radius_offset: float = DEFAULT_RADIUS_OFFSET

    # Line template settings
    line_width: float = 0.05
    line_color: Tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)

    output_dir: Path = field(default_factory=lambda: Path("outputs"))

    @property
    def radius(self) -> float:
        """Unscaled sampling radius."""
        return self.base_radius + self.radius_offset

    def validate(self) -> None:
        """Raise ValueError for settings that cannot produce a net."""
        self.accuracy.validate()
        self.plot_step.validate(self.accuracy)
        if len(self.rotation_offset) != 3:
            raise ValueError(f"rotation_offset needs 3 angles, got {self.rotation_offset}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accuracy": self.accuracy.to_dict(),
            "plot_step": self.plot_step.to_dict(),
            "rotation_offset": list(self.rotation_offset),
            "scale_coefficient": self.scale_coefficient,
            "base_radius": self.base_radius,
            "radius_offset": self.radius_offset,
            "line_width": self.line_width,
            "line_color": list(self.line_color),
            "output_dir": str(self.output_dir)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetConfig":
        data = dict(data)
        _check_keys(cls, data, "config")
        _check_keys(Accuracy, data.get("accuracy", {}), "accuracy")
        _check_keys(PlotStep, data.get("plot_step", {}), "plot_step")

        data["accuracy"] = Accuracy(**data.get("accuracy", {}))
        data["plot_step"] = PlotStep(**data.get("plot_step", {}))
        if "rotation_offset" in data:
            data["rotation_offset"] = tuple(float(a) for a in data["rotation_offset"])
        if "line_color" in data:
            data["line_color"] = tuple(float(c) for c in data["line_color"])
        data["output_dir"] = Path(data.get("output_dir", "outputs"))
        return cls(**data)

    @classmethod
    def from_json(cls, path: Path) -> "NetConfig":
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
        return cls.from_dict(data)

    def save(self, path: Path) -> None:
        """Save config to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


# Global default config
DEFAULT_CONFIG = NetConfig()
