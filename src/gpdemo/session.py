"""
The mutable part of a GP demo: the current kernel settings and the points the
user has clicked in. A :class:`Session` is owned by the caller (one per demo
view) and only stores inputs; every result is recomputed from scratch through
:mod:`gpdemo.functional`.
"""

from __future__ import annotations

__all__ = ["Session", "linspace_grid"]

from typing import Any

import jax.numpy as jnp

from gpdemo.functional import compute_gp_posterior, sample_posterior, sample_prior
from gpdemo.gp import Posterior
from gpdemo.helpers import ArrayLike, JAXArray, as_points, check_positive, default_float
from gpdemo.kernels.config import KernelConfig
from gpdemo.observations import Observation
from gpdemo.sampling import SeedOrKey, prior_seed


def linspace_grid(x_min: float = -3.0, x_max: float = 3.0, num: int = 100) -> JAXArray:
    """Evenly spaced query points, including both ends"""
    return jnp.linspace(x_min, x_max, num, dtype=default_float())


class Session:
    """State for one interactive GP view

    Args:
        kernel_config: The kernel, defaults to an RBF with length scale 0.3
            and unit variance.
        noise_variance: The observation noise variance.
        grid: The query points, defaults to :func:`linspace_grid`.
    """

    def __init__(
        self,
        kernel_config: KernelConfig | None = None,
        noise_variance: float = 0.05,
        grid: ArrayLike | None = None,
    ):
        if kernel_config is None:
            kernel_config = KernelConfig("rbf", length_scale=0.3, signal_variance=1.0)
        check_positive("noise_variance", noise_variance, allow_zero=True)
        self.kernel_config = kernel_config
        self.noise_variance = noise_variance
        self.grid = linspace_grid() if grid is None else as_points(grid, "grid")
        self.observations: list[Observation] = []

    def __len__(self) -> int:
        return len(self.observations)

    def add(self, x: float, y: float) -> Observation:
        obs = Observation(float(x), float(y))
        self.observations.append(obs)
        return obs

    def remove(self, index: int = -1) -> Observation:
        """Remove and return an observation, the most recent by default"""
        return self.observations.pop(index)

    def clear(self) -> None:
        self.observations.clear()

    def set_kernel(self, **changes: Any) -> KernelConfig:
        """Update some kernel settings, e.g. ``set_kernel(length_scale=0.5)``"""
        self.kernel_config = self.kernel_config.replace(**changes)
        return self.kernel_config

    def set_noise_variance(self, noise_variance: float) -> None:
        check_positive("noise_variance", noise_variance, allow_zero=True)
        self.noise_variance = noise_variance

    def posterior(self) -> Posterior:
        return compute_gp_posterior(
            self.grid, self.observations, self.kernel_config, self.noise_variance
        )

    def prior_samples(self, num_samples: int = 5, base_seed: int = 0) -> JAXArray:
        """Prior draws seeded from the kernel settings, see
        :func:`gpdemo.sampling.prior_seed`"""
        seed = prior_seed(self.kernel_config, base_seed)
        return sample_prior(self.grid, self.kernel_config, num_samples, seed)

    def posterior_samples(
        self, num_samples: int = 5, seed: SeedOrKey | None = None
    ) -> JAXArray:
        return sample_posterior(
            self.grid,
            self.observations,
            self.kernel_config,
            self.noise_variance,
            num_samples,
            seed,
        )
