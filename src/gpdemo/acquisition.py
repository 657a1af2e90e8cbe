"""
Acquisition functions for Bayesian optimization. Each one turns the posterior
mean and standard deviation at a candidate point into a score, and the next
point to evaluate is the one with the highest score. All functions broadcast
over array inputs, so a whole grid can be scored at once.

We are *maximizing* the objective throughout.
"""

from __future__ import annotations

__all__ = [
    "ACQUISITIONS",
    "normal_pdf",
    "normal_cdf",
    "ucb",
    "expected_improvement",
    "probability_of_improvement",
    "evaluate",
    "suggest_next",
]

import jax.numpy as jnp
import numpy as np

from gpdemo.config import get_config
from gpdemo.errors import DimensionMismatch
from gpdemo.gp import Posterior
from gpdemo.helpers import ArrayLike, JAXArray, as_points, default_float

ACQUISITIONS = ("ucb", "ei", "pi")


def normal_pdf(z: ArrayLike) -> JAXArray:
    """The standard normal density"""
    z = jnp.asarray(z, dtype=default_float())
    return jnp.exp(-0.5 * jnp.square(z)) / np.sqrt(2 * np.pi)


def normal_cdf(z: ArrayLike) -> JAXArray:
    """The standard normal CDF

    Uses the Abramowitz & Stegun 26.2.17 polynomial approximation, accurate to
    about ``7.5e-8``.
    """
    z = jnp.asarray(z, dtype=default_float())
    t = 1 / (1 + 0.2316419 * jnp.abs(z))
    d = 0.3989422804 * jnp.exp(-0.5 * jnp.square(z))
    p = (
        d
        * t
        * (0.3193815 + t * (-0.3565638 + t * (1.781478 + t * (-1.821256 + t * 1.330274))))
    )
    return jnp.where(z > 0, 1 - p, p)


def ucb(mean: ArrayLike, std: ArrayLike, beta: float = 2.0) -> JAXArray:
    """Upper confidence bound, ``mean + beta * std``"""
    return jnp.asarray(mean, dtype=default_float()) + beta * jnp.asarray(std)


def expected_improvement(
    mean: ArrayLike, std: ArrayLike, best_y: ArrayLike
) -> JAXArray:
    r"""The expected improvement over ``best_y``

    .. math::

        \mathrm{EI} = (\mu - y^*)\,\Phi(z) + \sigma\,\phi(z),
        \quad z = (\mu - y^*) / \sigma

    This is exactly zero where ``std`` is below ``config.std_threshold``.
    """
    mean, std, small, safe_std = _prepare(mean, std)
    improvement = mean - best_y
    z = improvement / safe_std
    ei = improvement * normal_cdf(z) + safe_std * normal_pdf(z)
    return jnp.where(small, 0.0, ei)


def probability_of_improvement(
    mean: ArrayLike, std: ArrayLike, best_y: ArrayLike, xi: float = 0.01
) -> JAXArray:
    """The probability of improving on ``best_y`` by at least ``xi``

    This is exactly zero where ``std`` is below ``config.std_threshold``.
    """
    mean, std, small, safe_std = _prepare(mean, std)
    return jnp.where(small, 0.0, normal_cdf((mean - best_y - xi) / safe_std))


def _prepare(mean, std):
    dtype = default_float()
    mean = jnp.asarray(mean, dtype=dtype)
    std = jnp.asarray(std, dtype=dtype)
    small = std < get_config().std_threshold
    return mean, std, small, jnp.where(small, 1.0, std)


def evaluate(
    kind: str,
    posterior: Posterior,
    best_y: float = -np.inf,
    *,
    beta: float = 2.0,
    xi: float = 0.01,
) -> JAXArray:
    """Score every point of a posterior with the named acquisition function

    Args:
        kind: ``"ucb"``, ``"ei"`` or ``"pi"``.
        posterior: The predictive distribution over the candidate points.
        best_y: The best observed value so far; ignored by UCB.
        beta: The exploration weight for UCB.
        xi: The margin for PI.
    """
    kind = kind.lower()
    std = posterior.std
    if kind == "ucb":
        return ucb(posterior.mean, std, beta)
    if kind == "ei":
        return expected_improvement(posterior.mean, std, best_y)
    if kind == "pi":
        return probability_of_improvement(posterior.mean, std, best_y, xi)
    raise ValueError(
        f"unknown acquisition function {kind!r}; expected one of {ACQUISITIONS}"
    )


def suggest_next(
    grid: ArrayLike,
    posterior: Posterior,
    kind: str = "ucb",
    best_y: float = -np.inf,
    *,
    beta: float = 2.0,
    xi: float = 0.01,
) -> tuple[float, float]:
    """The grid point that maximizes the acquisition function

    Ties go to the first maximum on the grid.

    Returns:
        The chosen input and its acquisition score.
    """
    grid = as_points(grid, "grid")
    if posterior.mean.shape != grid.shape:
        raise DimensionMismatch(
            f"posterior has shape {posterior.mean.shape} but the grid has "
            f"shape {grid.shape}"
        )
    scores = evaluate(kind, posterior, best_y, beta=beta, xi=xi)
    idx = int(jnp.argmax(scores))
    return float(grid[idx]), float(scores[idx])
