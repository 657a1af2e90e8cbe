# mypy: ignore-errors

import numpy as np
import pytest

from gpdemo import BayesianOptimizer, KernelConfig
from gpdemo.optimize import sine_mixture


def bump(x):
    return np.exp(-2 * (x - 0.6) ** 2)


@pytest.mark.parametrize("acquisition", ["ucb", "ei", "pi"])
def test_finds_the_maximum(acquisition):
    grid = np.linspace(-2, 2, 41)
    optimizer = BayesianOptimizer(
        grid,
        KernelConfig("rbf", length_scale=0.8),
        noise_variance=1e-4,
        acquisition=acquisition,
    )
    assert optimizer.best is None
    assert optimizer.best_y == -np.inf

    observations = optimizer.run(bump, 15)
    assert len(observations) == 15
    assert len(optimizer.observations) == 15
    assert all(x in grid for x, _ in observations)
    assert abs(optimizer.best.x - 0.6) <= 0.3
    assert optimizer.best.y == max(obs.y for obs in observations)


def test_step_uses_the_acquisition_argmax():
    grid = np.linspace(0, 6, 121)
    optimizer = BayesianOptimizer(grid, KernelConfig("rbf", 1.0), 0.01, "ucb")
    x, _ = optimizer.suggest()
    # The prior is flat, so the first grid point wins the tie
    assert x == 0.0
    obs = optimizer.step(sine_mixture)
    assert obs.x == 0.0
    assert obs.y == pytest.approx(0.0)

    # After one observation at the left edge, uncertainty is highest far away
    x, _ = optimizer.suggest()
    assert x > 2.0

    optimizer.reset()
    assert optimizer.observations == []


def test_unknown_acquisition():
    with pytest.raises(ValueError):
        BayesianOptimizer(np.linspace(0, 1, 5), acquisition="random")
