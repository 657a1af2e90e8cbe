"""
The stateless API that the demos call on every interaction. Each function
takes its complete input (query points, observations, kernel settings) and
returns fresh arrays; nothing is cached between calls.

The GP functions fail soft: if the engine hits a shape problem or produces
non-finite numbers, a warning is logged and the prior (data-free) result is
returned instead, so a demo never crashes mid-interaction. Invalid
hyperparameters are still reported to the caller as
:class:`gpdemo.errors.InvalidHyperparameter`.
"""

from __future__ import annotations

__all__ = [
    "compute_kernel_matrix",
    "compute_gp_posterior",
    "sample_prior",
    "sample_posterior",
    "acquisition_ucb",
    "acquisition_ei",
    "acquisition_pi",
]

from collections.abc import Iterable
from typing import Any, Union

import jax.numpy as jnp

from gpdemo import linalg
from gpdemo.acquisition import expected_improvement as acquisition_ei
from gpdemo.acquisition import probability_of_improvement as acquisition_pi
from gpdemo.acquisition import ucb as acquisition_ucb
from gpdemo.config import get_config, get_jitter, get_logger
from gpdemo.errors import DimensionMismatch, NumericalDegeneracy
from gpdemo.gp import GaussianProcess, Posterior, prior_predictive
from gpdemo.helpers import ArrayLike, JAXArray, as_points, check_positive
from gpdemo.kernels.base import Kernel
from gpdemo.kernels.config import KernelConfig
from gpdemo.observations import observations_to_arrays
from gpdemo.sampling import SeedOrKey, sample_mvn

KernelLike = Union[KernelConfig, Kernel]


def _resolve_kernel(kernel: KernelLike) -> Kernel:
    if isinstance(kernel, Kernel):
        return kernel
    return kernel.build()


def _resolve_seed(seed: SeedOrKey | None) -> SeedOrKey:
    return get_config().seed if seed is None else seed


def compute_kernel_matrix(points: ArrayLike, kernel_config: KernelLike) -> JAXArray:
    """The ``(N, N)`` prior covariance matrix ``k(points, points)``"""
    X = as_points(points)
    return _resolve_kernel(kernel_config)(X, X)


def compute_gp_posterior(
    query_points: ArrayLike,
    observations: Iterable[Any],
    kernel_config: KernelLike,
    noise_variance: float = 0.0,
) -> Posterior:
    """The posterior predictive mean and variance at ``query_points``

    Args:
        query_points: The points to predict at, shape ``(N_test,)``.
        observations: A sequence of ``(x, y)`` pairs, :class:`Observation`
            objects or ``{"x": ..., "y": ...}`` mappings.
        kernel_config: A :class:`KernelConfig` or a :class:`Kernel`.
        noise_variance: The observation noise variance, at least zero.

    Returns:
        A :class:`gpdemo.gp.Posterior`. With no observations (or if the
        computation fails) this is the prior: zero mean and variance
        ``k(x, x)``.
    """
    check_positive("noise_variance", noise_variance, allow_zero=True)
    kernel = _resolve_kernel(kernel_config)
    X_test = as_points(query_points, "query_points")
    try:
        X, y = observations_to_arrays(observations)
        if X.shape[0] == 0:
            return prior_predictive(kernel, X_test, noise_variance)
        gp = GaussianProcess(kernel, X, noise_variance=noise_variance)
        return gp.predict(y, X_test)
    except (DimensionMismatch, NumericalDegeneracy) as e:
        get_logger().warning("GP posterior failed (%s); falling back to the prior", e)
        return prior_predictive(kernel, X_test, noise_variance)


def sample_prior(
    query_points: ArrayLike,
    kernel_config: KernelLike,
    num_samples: int = 5,
    seed: SeedOrKey | None = None,
) -> JAXArray:
    """Draw functions from the GP prior evaluated at ``query_points``

    Args:
        query_points: The points to evaluate the draws at, shape ``(N,)``.
        kernel_config: A :class:`KernelConfig` or a :class:`Kernel`.
        num_samples: The number of draws.
        seed: An integer seed or ``jax`` random key; defaults to
            ``config.seed``. The same seed always gives the same draws.

    Returns:
        An array with shape ``(num_samples, N)``. If the prior covariance
        can't be factored into finite numbers this is empty, with shape
        ``(0, N)``.
    """
    X = as_points(query_points, "query_points")
    K = compute_kernel_matrix(X, kernel_config)
    jitter = get_jitter(X.dtype) * jnp.eye(X.shape[0], dtype=X.dtype)
    L = linalg.cholesky(K + jitter)
    samples = sample_mvn(_resolve_seed(seed), jnp.zeros_like(X), L, num_samples)
    if not bool(jnp.all(jnp.isfinite(samples))):
        get_logger().warning("non-finite prior samples; returning no samples")
        return jnp.zeros((0, X.shape[0]), dtype=X.dtype)
    return samples


def sample_posterior(
    query_points: ArrayLike,
    observations: Iterable[Any],
    kernel_config: KernelLike,
    noise_variance: float = 0.0,
    num_samples: int = 5,
    seed: SeedOrKey | None = None,
) -> JAXArray:
    """Draw functions from the GP posterior evaluated at ``query_points``

    The arguments are the same as :func:`compute_gp_posterior` and
    :func:`sample_prior`. With no observations, or if the posterior
    computation fails, these are draws from the prior.

    Returns:
        An array with shape ``(num_samples, N)``.
    """
    check_positive("noise_variance", noise_variance, allow_zero=True)
    kernel = _resolve_kernel(kernel_config)
    X_test = as_points(query_points, "query_points")
    seed = _resolve_seed(seed)
    try:
        X, y = observations_to_arrays(observations)
        if X.shape[0] == 0:
            return sample_prior(X_test, kernel, num_samples, seed)
        gp = GaussianProcess(kernel, X, noise_variance=noise_variance)
        mean, cov = gp.predict_covariance(y, X_test)
        jitter = get_jitter(X_test.dtype) * jnp.eye(
            X_test.shape[0], dtype=X_test.dtype
        )
        samples = sample_mvn(seed, mean, linalg.cholesky(cov + jitter), num_samples)
        if not bool(jnp.all(jnp.isfinite(samples))):
            raise NumericalDegeneracy("non-finite posterior samples")
        return samples
    except (DimensionMismatch, NumericalDegeneracy) as e:
        get_logger().warning(
            "GP posterior sampling failed (%s); falling back to the prior", e
        )
        return sample_prior(X_test, kernel, num_samples, seed)
