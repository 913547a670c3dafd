"""Shared fixtures for chart tests."""
import random

import pytest

from donut import ChartConfig


@pytest.fixture
def config():
    """500x500 canvas, donut centered at (250, 250), inner r=100, outer r=200."""
    return ChartConfig(
        width=500, height=500, center_position=(250, 250),
        inner_radius=100, radial_width=100, initial_rotation=0,
    )


@pytest.fixture
def rng():
    return random.Random(1234)
