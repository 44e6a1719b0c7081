"""
Tests for the latitude-longitude net calculator.

Tests cover:
- Sample counts and angles (including truncating accuracy)
- Pre-rotation sphere positions
- Transposed index consistency
- Idempotent recalculation
"""

import logging

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from graticule.config import NetConfig, Accuracy, EARTH_RADIUS
from graticule.calculator import (
    LatLongNet,
    NetCalculator,
    calculate_net,
    sample_counts,
    sample_angles,
)


# ============== Fixtures ==============

@pytest.fixture
def unrotated_config():
    """Earth-radius sphere, no offset, no scale, no rotation."""
    return NetConfig(
        accuracy=Accuracy(1.0, 1.0),
        rotation_offset=(0.0, 0.0, 0.0),
        scale_coefficient=1.0,
        base_radius=EARTH_RADIUS,
        radius_offset=0.0,
    )


@pytest.fixture
def coarse_config():
    """10 degree sampling for fast tests."""
    return NetConfig(accuracy=Accuracy(10.0, 10.0))


# ============== Sample Count Tests ==============

class TestSampleCounts:
    """Test accuracy-derived sample counts."""

    def test_one_degree(self):
        """1 degree accuracy gives 360 x 720 samples."""
        assert sample_counts(Accuracy(1.0, 1.0)) == (360, 720)

    def test_coarse(self):
        assert sample_counts(Accuracy(10.0, 10.0)) == (36, 72)
        assert sample_counts(Accuracy(2.0, 5.0)) == (180, 144)

    def test_truncates_non_dividing_accuracy(self, caplog):
        """Non-dividing accuracy truncates and warns instead of raising."""
        with caplog.at_level(logging.WARNING):
            lat_len, long_len = sample_counts(Accuracy(7.0, 7.0))

        assert lat_len == int(180 / 7.0) * 2 == 50
        assert long_len == int(360 / 7.0) * 2 == 102
        assert "truncated" in caplog.text

    def test_non_positive_accuracy_raises(self):
        with pytest.raises(ValueError):
            sample_counts(Accuracy(0.0, 1.0))
        with pytest.raises(ValueError):
            sample_counts(Accuracy(1.0, -5.0))

    def test_accuracy_too_coarse_raises(self):
        """Accuracy above 180 / 360 would leave zero samples."""
        with pytest.raises(ValueError):
            sample_counts(Accuracy(200.0, 1.0))
        with pytest.raises(ValueError):
            sample_counts(Accuracy(1.0, 400.0))
        with pytest.raises(ValueError):
            calculate_net(NetConfig(accuracy=Accuracy(200.0, 1.0)))

    def test_coarsest_accuracy(self):
        """180 / 360 still give one sample per semicircle."""
        assert sample_counts(Accuracy(180.0, 360.0)) == (2, 2)

    def test_sample_angles(self):
        latitudes, longitudes = sample_angles(Accuracy(10.0, 30.0))

        assert len(latitudes) == 36
        assert len(longitudes) == 24
        assert latitudes[0] == 0.0
        assert latitudes[1] == 10.0
        assert latitudes[-1] == 350.0
        assert longitudes[-1] == 690.0


# ============== Position Tests ==============

class TestPositions:
    """Test sphere positions before rotation."""

    def test_equator_prime_meridian(self, unrotated_config):
        """lat=0, lon=0 lies on +x."""
        net = calculate_net(unrotated_config)
        np.testing.assert_allclose(net.long_coords[0][0], [6371.0, 0.0, 0.0], atol=1e-9)

    def test_north_pole(self, unrotated_config):
        """lat=90, lon=0 lies on +z."""
        net = calculate_net(unrotated_config)
        i = int(np.where(net.latitudes == 90.0)[0][0])
        np.testing.assert_allclose(net.long_coords[i][0], [0.0, 0.0, 6371.0], atol=1e-9)

    def test_all_points_on_sphere(self, coarse_config):
        """Every point sits at (base + offset) * scale from the origin."""
        net = calculate_net(coarse_config)
        radii = np.linalg.norm(net.all_points, axis=1)
        expected = (coarse_config.base_radius + coarse_config.radius_offset) * coarse_config.scale_coefficient
        np.testing.assert_allclose(radii, expected, rtol=1e-12)

    def test_default_rotation_moves_prime_meridian_to_z(self):
        """Default offset maps lat=0, lon=0 onto the +z (forward) axis."""
        config = NetConfig(accuracy=Accuracy(10.0, 10.0), scale_coefficient=1.0, radius_offset=0.0)
        net = calculate_net(config)
        np.testing.assert_allclose(net.long_coords[0][0], [0.0, 0.0, 6371.0], atol=1e-9)


# ============== Layout Tests ==============

class TestLayout:
    """Test both index layouts of the grid."""

    def test_shapes(self, coarse_config):
        net = calculate_net(coarse_config)

        assert isinstance(net, LatLongNet)
        assert net.lat_vect_length == 36
        assert net.long_vect_length == 72
        assert net.lat_coords.shape == (72, 36, 3)
        assert net.long_coords.shape == (36, 72, 3)

    def test_transposed_consistency(self, coarse_config):
        """lat_coords[j][i] equals long_coords[i][j] exactly."""
        net = calculate_net(coarse_config)

        for i in range(net.lat_vect_length):
            for j in range(net.long_vect_length):
                assert np.array_equal(net.lat_coords[j][i], net.long_coords[i][j])

    def test_lines(self, coarse_config):
        net = calculate_net(coarse_config)

        lat_line = net.latitude_line(3)
        assert lat_line.family == "latitude"
        assert lat_line.index == 3
        assert lat_line.n_points == net.lat_vect_length
        np.testing.assert_array_equal(lat_line.coords, net.lat_coords[3])

        lon_line = net.longitude_line(5)
        assert lon_line.family == "longitude"
        assert lon_line.n_points == net.long_vect_length

        assert len(net.latitude_lines()) == net.long_vect_length
        assert len(net.longitude_lines()) == net.lat_vect_length


# ============== Recalculation Tests ==============

class TestRecalculation:
    """Test that each request rebuilds the grid."""

    def test_idempotent(self, coarse_config):
        """Identical inputs give bit-identical arrays."""
        first = calculate_net(coarse_config)
        second = calculate_net(coarse_config)

        assert np.array_equal(first.lat_coords, second.lat_coords)
        assert np.array_equal(first.long_coords, second.long_coords)

    def test_calculator_rebuilds(self, coarse_config):
        calculator = NetCalculator(coarse_config)
        first = calculator.calculate()

        calculator.config.accuracy = Accuracy(20.0, 20.0)
        second = calculator.calculate()

        assert calculator.net is second
        assert second is not first
        assert second.lat_vect_length == 18
        assert first.lat_vect_length == 36


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
