"""Shared fixtures for the nozzle flow tests."""

import numpy as np
import pytest

from flow_model import FlowParameters
from shock_tracker import ShockTracker
from units import meters_to_pixels
from wall_profile import WallPair

SCREEN_WIDTH = 1600
SCREEN_HEIGHT = 800


@pytest.fixture
def params():
    """Air at room temperature, 100 m/s injection, 1% time scale."""
    return FlowParameters(sound_speed=343.0, injection_velocity=100.0, time_scale=0.01)


@pytest.fixture
def walls():
    """Default wall layout on a 1600x800 screen."""
    return WallPair(SCREEN_WIDTH, SCREEN_HEIGHT)


@pytest.fixture
def straight_walls():
    """A straight duct: every control point on a wall has the same height."""
    pair = WallPair(SCREEN_WIDTH, SCREEN_HEIGHT)
    xs = np.linspace(0, SCREEN_WIDTH, 5)
    pair.top.set_control_points(np.column_stack((xs, np.full(5, 200.0))))
    pair.bottom.set_control_points(np.column_stack((xs, np.full(5, 600.0))))
    return pair


@pytest.fixture
def tracker():
    """Tracker grouping transitions into 10 cm (32 px) buckets."""
    return ShockTracker(grouping_distance=meters_to_pixels(0.1, SCREEN_WIDTH))


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
