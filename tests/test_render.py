"""
Tests for net rendering and the Plot Net action.
"""

import logging

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from graticule.config import NetConfig, Accuracy, PlotStep
from graticule.calculator import calculate_net
from graticule.render import (
    LineRenderer,
    LinePrefab,
    NetGroup,
    check_line_prefab,
    plot_net,
    plot_net_action,
    MISSING_PREFAB_MESSAGE,
    MISSING_RENDERER_MESSAGE,
)


@pytest.fixture
def config():
    """36 x 72 samples, every 6th latitude and 4th longitude line."""
    return NetConfig(accuracy=Accuracy(10.0, 10.0), plot_step=PlotStep(6, 4))


@pytest.fixture
def net(config):
    return calculate_net(config)


# ============== LineRenderer Tests ==============

class TestLineRenderer:

    def test_set_positions_copies(self):
        renderer = LineRenderer()
        points = np.zeros((4, 3))
        renderer.set_positions(points)
        points[0, 0] = 99.0

        assert renderer.position_count == 4
        assert renderer.positions[0, 0] == 0.0

    def test_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            LineRenderer().set_positions(np.zeros((4, 2)))

    def test_prefab_instances_are_independent(self):
        prefab = LinePrefab(LineRenderer(width=0.2))
        a = prefab.instantiate("a")
        b = prefab.instantiate("b")
        a.line_renderer.set_positions(np.ones((2, 3)))

        assert b.line_renderer.position_count == 0
        assert b.line_renderer.width == 0.2


# ============== plot_net Tests ==============

class TestPlotNet:

    def test_group_name(self, net, config):
        group = plot_net(net, LinePrefab(), config.plot_step)
        assert group.name == "Latitude-Longitude Net: 6:4"

    def test_line_counts(self, net, config):
        group = plot_net(net, LinePrefab(), config.plot_step)

        # range(0, 72, 6) and range(0, 36, 4)
        assert len(group.latitude_lines) == 12
        assert len(group.longitude_lines) == 9
        assert len(group.children) == 21

    def test_line_names_and_points(self, net, config):
        group = plot_net(net, LinePrefab(), config.plot_step)

        lat_line = group.latitude_lines[1]
        assert lat_line.name == "Latitude № 6"
        assert lat_line.index == 6
        np.testing.assert_array_equal(lat_line.line_renderer.positions, net.lat_coords[6])
        assert lat_line.line_renderer.position_count == net.lat_vect_length

        lon_line = group.longitude_lines[-1]
        assert lon_line.name == "Longitude № 32"
        np.testing.assert_array_equal(lon_line.line_renderer.positions, net.long_coords[32])
        assert lon_line.line_renderer.position_count == net.long_vect_length

    def test_step_of_one_emits_everything(self, net):
        group = plot_net(net, LinePrefab(), PlotStep(1, 1))
        assert len(group.latitude_lines) == net.long_vect_length
        assert len(group.longitude_lines) == net.lat_vect_length
        assert group.n_points == 2 * net.lat_vect_length * net.long_vect_length

    def test_step_too_large(self, net):
        with pytest.raises(ValueError):
            plot_net(net, LinePrefab(), PlotStep(73, 1))
        with pytest.raises(ValueError):
            plot_net(net, LinePrefab(), PlotStep(1, 37))

    def test_step_zero(self, net):
        with pytest.raises(ValueError):
            plot_net(net, LinePrefab(), PlotStep(0, 1))

    def test_bounds(self, net, config):
        group = plot_net(net, LinePrefab(), config.plot_step)
        r = config.radius * config.scale_coefficient
        for lo, hi in group.bounds.values():
            assert lo >= -r - 1e-9
            assert hi <= r + 1e-9

    def test_empty_group(self):
        group = NetGroup(name="empty")
        assert group.all_points.shape == (0, 3)
        assert group.n_points == 0


# ============== Plot Net Action Tests ==============

class TestPlotNetAction:

    def test_missing_prefab(self, config, caplog):
        assert check_line_prefab(None) == MISSING_PREFAB_MESSAGE

        with caplog.at_level(logging.ERROR):
            assert plot_net_action(config, None) is None
        assert MISSING_PREFAB_MESSAGE in caplog.text

    def test_prefab_without_renderer(self, config, caplog):
        prefab = LinePrefab(line_renderer=None)
        assert check_line_prefab(prefab) == MISSING_RENDERER_MESSAGE

        with caplog.at_level(logging.ERROR):
            assert plot_net_action(config, prefab) is None
        assert MISSING_RENDERER_MESSAGE in caplog.text

    def test_plot(self, config):
        group = plot_net_action(config, LinePrefab.from_config(config))

        assert group is not None
        assert len(group.children) == 21
        assert group.children[0].line_renderer.width == config.line_width


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
