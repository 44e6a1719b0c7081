"""
Net rendering: hand each retained polyline to a line-drawing primitive.

A line template ("prefab") is instantiated once per polyline; the instance's
LineRenderer receives the ordered point list. All lines are grouped under
one NetGroup named after the plot step.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from .calculator import LatLongNet, LATITUDE, LONGITUDE, NetCalculator
from .config import NetConfig, PlotStep

logger = logging.getLogger(__name__)

MISSING_PREFAB_MESSAGE = "Choose line prefab!"
MISSING_RENDERER_MESSAGE = "Prefab doesn't have a LineRenderer component!"


@dataclass
class LineRenderer:
    """Connected-line primitive: draws its positions in order."""
    width: float = 0.05
    color: Tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)
    positions: np.ndarray = field(default_factory=lambda: np.empty((0, 3)))

    @property
    def position_count(self) -> int:
        return len(self.positions)

    def set_positions(self, points: np.ndarray) -> None:
        points = np.array(points, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 3:
            raise ValueError(f"Positions must be (N, 3), got {points.shape}")
        self.positions = points


@dataclass
class LineObject:
    """Scene node holding one line."""
    name: str
    line_renderer: Optional[LineRenderer]
    family: str = ""
    index: int = -1


@dataclass
class LinePrefab:
    """Template instantiated for every rendered line."""
    line_renderer: Optional[LineRenderer] = field(default_factory=LineRenderer)

    @classmethod
    def from_config(cls, config: NetConfig) -> "LinePrefab":
        return cls(LineRenderer(width=config.line_width, color=tuple(config.line_color)))

    def instantiate(self, name: str) -> LineObject:
        return LineObject(name=name, line_renderer=copy.deepcopy(self.line_renderer))


@dataclass
class NetGroup:
    """Parent node for all rendered lines of one net."""
    name: str
    children: List[LineObject] = field(default_factory=list)

    def add(self, line: LineObject) -> None:
        self.children.append(line)

    @property
    def latitude_lines(self) -> List[LineObject]:
        return [c for c in self.children if c.family == LATITUDE]

    @property
    def longitude_lines(self) -> List[LineObject]:
        return [c for c in self.children if c.family == LONGITUDE]

    @property
    def n_points(self) -> int:
        return sum(c.line_renderer.position_count for c in self.children)

    @property
    def all_points(self) -> np.ndarray:
        """Return all line points as Nx3 array."""
        if not self.children:
            return np.empty((0, 3))
        return np.vstack([c.line_renderer.positions for c in self.children])

    @property
    def bounds(self) -> Dict[str, Tuple[float, float]]:
        pts = self.all_points
        if len(pts) == 0:
            return {'x': (0.0, 0.0), 'y': (0.0, 0.0), 'z': (0.0, 0.0)}
        return {
            'x': (float(np.min(pts[:, 0])), float(np.max(pts[:, 0]))),
            'y': (float(np.min(pts[:, 1])), float(np.max(pts[:, 1]))),
            'z': (float(np.min(pts[:, 2])), float(np.max(pts[:, 2])))
        }


def net_group_name(plot_step: PlotStep) -> str:
    return f"Latitude-Longitude Net: {plot_step.latitude}:{plot_step.longitude}"


def check_line_prefab(prefab: Optional[LinePrefab]) -> Optional[str]:
    """
    Check that a line template can draw lines.

    Returns:
        None if usable, otherwise the message to show
    """
    if prefab is None:
        return MISSING_PREFAB_MESSAGE
    if getattr(prefab, "line_renderer", None) is None:
        return MISSING_RENDERER_MESSAGE
    return None


def plot_net(net: LatLongNet, prefab: LinePrefab, plot_step: PlotStep) -> NetGroup:
    """
    Emit every retained line of the net.

    Latitude lines are lat_coords[i] for i stepping by plot_step.latitude over
    the longitude samples; longitude lines are long_coords[i] for i stepping by
    plot_step.longitude over the latitude samples.

    Args:
        net: Computed net
        prefab: Line template with a LineRenderer
        plot_step: Index strides

    Returns:
        NetGroup with one LineObject per emitted polyline
    """
    message = check_line_prefab(prefab)
    if message is not None:
        raise ValueError(message)
    plot_step.validate()
    if plot_step.latitude > net.long_vect_length or plot_step.longitude > net.lat_vect_length:
        raise ValueError(
            f"Plot step {plot_step.to_dict()} exceeds net of "
            f"{net.long_vect_length} latitude / {net.lat_vect_length} longitude lines"
        )

    group = NetGroup(name=net_group_name(plot_step))

    for i in range(0, net.long_vect_length, plot_step.latitude):
        line = prefab.instantiate(f"Latitude № {i}")
        line.family, line.index = LATITUDE, i
        line.line_renderer.set_positions(net.lat_coords[i])
        group.add(line)

    for i in range(0, net.lat_vect_length, plot_step.longitude):
        line = prefab.instantiate(f"Longitude № {i}")
        line.family, line.index = LONGITUDE, i
        line.line_renderer.set_positions(net.long_coords[i])
        group.add(line)

    logger.info(
        f"Plotted '{group.name}': {len(group.latitude_lines)} latitude, "
        f"{len(group.longitude_lines)} longitude lines"
    )
    return group


def plot_net_action(
    config: Optional[NetConfig] = None,
    prefab: Optional[LinePrefab] = None
) -> Optional[NetGroup]:
    """
    "Plot Net": calculate then render, synchronously.

    A missing or unusable line template aborts with a logged message and
    returns None.
    """
    config = config or NetConfig()

    message = check_line_prefab(prefab)
    if message is not None:
        logger.error(message)
        return None

    config.validate()
    net = NetCalculator(config).calculate()
    return plot_net(net, prefab, config.plot_step)
