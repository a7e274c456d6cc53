"""Shared fixtures for the Ewald test suite."""

import numpy as np
import pytest

from ewald.core import Body


def _jittered_lattice(n_side: int = 8, jitter: float = 0.01, seed: int = 42,
                      shift=None):
    """Neutral bodies on an n_side^3 grid of the unit cube with small jitter."""
    rng = np.random.RandomState(seed)
    grid = (np.indices((n_side,) * 3).reshape(3, -1).T + 0.5) / n_side
    positions = grid + rng.uniform(-jitter, jitter, grid.shape)
    if shift is not None:
        positions = positions + shift
    charges = rng.randn(len(positions))
    charges -= charges.mean()
    return [Body(position=positions[i], charge=charges[i])
            for i in range(len(positions))]


@pytest.fixture
def jittered_lattice():
    """Factory for neutral, jittered lattice configurations."""
    return _jittered_lattice


@pytest.fixture
def rock_salt():
    """Eight alternating unit charges forming one rock-salt unit cube."""
    bodies = []
    for i in range(2):
        for j in range(2):
            for k in range(2):
                position = 0.25 + 0.5 * np.array([i, j, k])
                bodies.append(Body(position=position, charge=(-1.0) ** (i + j + k)))
    return bodies


@pytest.fixture
def random_bodies():
    """Twelve random neutral bodies in the unit cube."""
    np.random.seed(7)
    positions = np.random.rand(12, 3)
    charges = np.random.randn(12)
    charges -= charges.mean()
    return [Body(position=positions[i], charge=charges[i]) for i in range(12)]


@pytest.fixture
def boundary_bodies():
    """Two +/- pairs in the unit cube that are close only across a face."""
    positions = [
        [0.05, 0.5, 0.5],
        [0.95, 0.5, 0.5],
        [0.5, 0.02, 0.7],
        [0.45, 0.9, 0.75],
    ]
    charges = [1.0, -1.0, 0.5, -0.5]
    return [Body(position=x, charge=q) for x, q in zip(positions, charges)]
