import numpy as np
import pytest

from rtrace.world import create_two_sphere_scene


class FixedRandom:
    """Random source that always returns the same value."""

    def __init__(self, value):
        self.value = value

    def random(self, size=None):
        if size is None:
            return self.value
        return np.full(size, self.value)


@pytest.fixture
def fixed_random():
    return FixedRandom


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def two_sphere_scene():
    return create_two_sphere_scene()
