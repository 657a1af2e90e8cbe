"""
Sequential Bayesian optimization over a fixed 1-D grid. Each step fits the GP
to everything observed so far, scores the grid with an acquisition function,
evaluates the objective at the best scoring point and records the result.
"""

from __future__ import annotations

__all__ = ["BayesianOptimizer", "sine_mixture"]

from typing import Callable

import jax.numpy as jnp
import numpy as np

from gpdemo.acquisition import ACQUISITIONS, suggest_next
from gpdemo.config import get_logger
from gpdemo.functional import compute_gp_posterior
from gpdemo.gp import Posterior
from gpdemo.helpers import ArrayLike, JAXArray, as_points, check_positive
from gpdemo.kernels.config import KernelConfig
from gpdemo.observations import Observation

Objective = Callable[[float], float]


def sine_mixture(x: ArrayLike) -> JAXArray:
    """A wiggly test objective with several local maxima on ``[0, 6]``"""
    x = jnp.asarray(x)
    return jnp.sin(2 * x) * jnp.cos(0.5 * x) + 0.5 * jnp.sin(3 * x)


class BayesianOptimizer:
    """Maximize a black-box function over a grid

    Args:
        grid: The candidate inputs.
        kernel_config: The GP kernel, defaults to an RBF with unit length
            scale.
        noise_variance: The GP observation noise variance.
        acquisition: ``"ucb"``, ``"ei"`` or ``"pi"``.
        beta: The UCB exploration weight.
        xi: The PI improvement margin.
    """

    def __init__(
        self,
        grid: ArrayLike,
        kernel_config: KernelConfig | None = None,
        noise_variance: float = 0.01,
        acquisition: str = "ucb",
        beta: float = 2.0,
        xi: float = 0.01,
    ):
        if acquisition.lower() not in ACQUISITIONS:
            raise ValueError(
                f"unknown acquisition function {acquisition!r}; "
                f"expected one of {ACQUISITIONS}"
            )
        check_positive("noise_variance", noise_variance, allow_zero=True)
        self.grid = as_points(grid, "grid")
        self.kernel_config = KernelConfig() if kernel_config is None else kernel_config
        self.noise_variance = noise_variance
        self.acquisition = acquisition.lower()
        self.beta = beta
        self.xi = xi
        self.observations: list[Observation] = []

    @property
    def best(self) -> Observation | None:
        """The observation with the highest ``y`` so far"""
        if not self.observations:
            return None
        return max(self.observations, key=lambda obs: obs.y)

    @property
    def best_y(self) -> float:
        best = self.best
        return -np.inf if best is None else best.y

    def posterior(self) -> Posterior:
        return compute_gp_posterior(
            self.grid, self.observations, self.kernel_config, self.noise_variance
        )

    def suggest(self) -> tuple[float, float]:
        """The next grid point to evaluate and its acquisition score"""
        return suggest_next(
            self.grid,
            self.posterior(),
            self.acquisition,
            self.best_y,
            beta=self.beta,
            xi=self.xi,
        )

    def step(self, objective: Objective) -> Observation:
        x, score = self.suggest()
        obs = Observation(x, float(objective(x)))
        self.observations.append(obs)
        get_logger().debug(
            "step %d: %s=%.4g at x=%.4g, y=%.4g",
            len(self.observations),
            self.acquisition,
            score,
            obs.x,
            obs.y,
        )
        return obs

    def run(self, objective: Objective, num_steps: int) -> list[Observation]:
        return [self.step(objective) for _ in range(num_steps)]

    def reset(self) -> None:
        self.observations.clear()
