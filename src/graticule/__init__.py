"""
Latitude-longitude net ("graticule") generation.

Axis Model:
- Net is sampled on a z-up sphere of radius (base_radius + radius_offset) * scale
- Every point is rotated X → Y → Z by rotation_offset into the render convention
"""

from .config import NetConfig, Accuracy, PlotStep, NetMetadata, EARTH_RADIUS
from .coords import spherical_to_cartesian, axis_angle_rotation, rotate_about_origin, SphereTransformer
from .calculator import LatLongNet, NetCoordinates, NetCalculator, calculate_net, sample_counts, sample_angles
from .render import LineRenderer, LineObject, LinePrefab, NetGroup, plot_net, plot_net_action, check_line_prefab
from .io import save_net, save_net_glb, save_net_csv, load_net_csv, build_metadata

__all__ = [
    'NetConfig', 'Accuracy', 'PlotStep', 'NetMetadata', 'EARTH_RADIUS',
    'spherical_to_cartesian', 'axis_angle_rotation', 'rotate_about_origin', 'SphereTransformer',
    'LatLongNet', 'NetCoordinates', 'NetCalculator', 'calculate_net', 'sample_counts', 'sample_angles',
    'LineRenderer', 'LineObject', 'LinePrefab', 'NetGroup', 'plot_net', 'plot_net_action', 'check_line_prefab',
    'save_net', 'save_net_glb', 'save_net_csv', 'load_net_csv', 'build_metadata',
]
