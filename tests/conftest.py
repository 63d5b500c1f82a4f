import itertools

import numpy as np
import pytest


def grid_points(ranges):
    """Todas las combinaciones enteras dentro de los rangos [start, end] de cada eje."""
    axes = [range(start, end + 1) for start, end in ranges]
    return [tuple(p) for p in itertools.product(*axes)]


@pytest.fixture
def rng():
    return np.random.default_rng(0)


@pytest.fixture
def grid():
    return grid_points
