from __future__ import annotations

__all__ = ["GaussianProcess", "Posterior", "prior_predictive"]

from collections.abc import Sequence
from typing import NamedTuple

import equinox as eqx
import jax.numpy as jnp

from gpdemo.errors import DimensionMismatch, NumericalDegeneracy
from gpdemo.helpers import ArrayLike, JAXArray, as_points, check_positive, default_float
from gpdemo.kernels.base import Kernel
from gpdemo.sampling import SeedOrKey, as_key, standard_normal
from gpdemo.solver import CholeskySolver


class Posterior(NamedTuple):
    """The predictive distribution at a set of query points

    All three entries have one element per query point.
    """

    mean: JAXArray
    """The posterior mean of the latent function"""

    variance: JAXArray
    """The epistemic variance: uncertainty about the latent function, which
    shrinks near the data. Always non-negative."""

    noise: JAXArray
    """The aleatoric variance: the observation noise, which doesn't shrink"""

    @property
    def total_variance(self) -> JAXArray:
        return self.variance + self.noise

    @property
    def std(self) -> JAXArray:
        return jnp.sqrt(self.variance)

    def interval(
        self, z: float = 1.96, *, include_noise: bool = False
    ) -> tuple[JAXArray, JAXArray]:
        """The ``mean -/+ z * std`` band, by default a 95% credible interval"""
        var = self.total_variance if include_noise else self.variance
        half_width = z * jnp.sqrt(var)
        return self.mean - half_width, self.mean + half_width


def prior_predictive(
    kernel: Kernel, X_test: ArrayLike, noise_variance: float = 0.0
) -> Posterior:
    """The predictive distribution when there is no data: zero mean and the
    prior variance ``k(x, x)``"""
    X_test = as_points(X_test, "X_test")
    variance = jnp.broadcast_to(kernel(X_test), X_test.shape).astype(X_test.dtype)
    return Posterior(
        mean=jnp.zeros_like(X_test),
        variance=variance,
        noise=jnp.full_like(X_test, noise_variance),
    )


class GaussianProcess(eqx.Module):
    """A one dimensional Gaussian Process regression model with zero mean

    Args:
        kernel (Kernel): The kernel function.
        X (JAXArray): The training inputs, shape ``(N_data,)``.
        noise_variance (float, optional): The observation noise variance
            added to the diagonal of the covariance matrix. A small jitter
            (:func:`gpdemo.config.get_jitter`) is always added on top of this.
    """

    num_data: int = eqx.field(static=True)
    kernel: Kernel
    X: JAXArray
    noise_variance: JAXArray | float
    solver: CholeskySolver

    def __init__(
        self,
        kernel: Kernel,
        X: ArrayLike,
        *,
        noise_variance: JAXArray | float = 0.0,
        jitter: float | None = None,
    ):
        check_positive("noise_variance", noise_variance, allow_zero=True)
        self.kernel = kernel
        self.X = as_points(X, "X")
        self.num_data = self.X.shape[0]
        self.noise_variance = noise_variance
        self.solver = CholeskySolver(kernel, self.X, noise_variance, jitter=jitter)

    @property
    def covariance(self) -> JAXArray:
        return self.solver.covariance()

    @property
    def variance(self) -> JAXArray:
        return self.solver.variance()

    def log_probability(self, y: ArrayLike) -> JAXArray:
        """Compute the marginal log likelihood of the observed targets

        Args:
            y (JAXArray): The observed data. This should have the shape
                ``(N_data,)``, matching the ``X`` data provided when
                instantiating this object.
        """
        return self._compute_log_prob(self._get_alpha(self._check_targets(y)))

    def predict(self, y: ArrayLike, X_test: ArrayLike) -> Posterior:
        """Predict the latent function at new points conditioned on the data

        Args:
            y (JAXArray): The observed targets, shape ``(N_data,)``.
            X_test (JAXArray): The query points, shape ``(N_test,)``.

        Returns:
            A :class:`Posterior` with the mean and the (clamped, non-negative)
            variance at each query point, plus the observation noise variance.

        Raises:
            NumericalDegeneracy: If the result isn't finite.
        """
        y = self._check_targets(y)
        X_test = as_points(X_test, "X_test")
        mean, variance = self._predict(y, X_test)
        _check_finite(mean, "posterior mean")
        _check_finite(variance, "posterior variance")
        return Posterior(
            mean=mean,
            variance=variance,
            noise=jnp.full_like(mean, self.noise_variance),
        )

    def predict_covariance(
        self, y: ArrayLike, X_test: ArrayLike
    ) -> tuple[JAXArray, JAXArray]:
        """The posterior mean and full ``(N_test, N_test)`` covariance matrix
        of the latent function at ``X_test``"""
        y = self._check_targets(y)
        X_test = as_points(X_test, "X_test")
        alpha = self.solver.solve_triangular(self._get_alpha(y), transpose=True)
        mean = self.kernel.matmul(X_test, self.X, alpha)
        cov = self.solver.condition(self.kernel, X_test)
        _check_finite(mean, "posterior mean")
        _check_finite(cov, "posterior covariance")
        return mean, cov

    def sample(
        self,
        key: SeedOrKey,
        shape: Sequence[int] | None = None,
    ) -> JAXArray:
        """Generate samples from the prior process at the training inputs

        Args:
            key: A ``jax`` random key or an integer seed.
            shape (tuple, optional): The number and shape of samples to
                generate.

        Returns:
            The sampled realizations with shape ``shape + (N_data,)``.
        """
        shape = () if shape is None else tuple(shape)
        normal_samples = standard_normal(as_key(key), (self.num_data,) + shape)
        return jnp.moveaxis(self.solver.dot_triangular(normal_samples), 0, -1)

    def _check_targets(self, y: ArrayLike) -> JAXArray:
        y = jnp.asarray(y, dtype=default_float())
        if y.shape != (self.num_data,):
            raise DimensionMismatch(
                f"expected {self.num_data} targets, got shape {y.shape}"
            )
        return y

    @eqx.filter_jit
    def _compute_log_prob(self, alpha: JAXArray) -> JAXArray:
        loglike = -0.5 * jnp.sum(jnp.square(alpha)) - self.solver.normalization()
        return jnp.where(jnp.isfinite(loglike), loglike, -jnp.inf)

    @eqx.filter_jit
    def _get_alpha(self, y: JAXArray) -> JAXArray:
        return self.solver.solve_triangular(y)

    @eqx.filter_jit
    def _predict(self, y: JAXArray, X_test: JAXArray) -> tuple[JAXArray, JAXArray]:
        # We want alpha = K^-1 y, so solve with L and then with L.T
        alpha = self.solver.solve_triangular(self._get_alpha(y), transpose=True)
        Ks = self.kernel(X_test, self.X)
        mean = Ks @ alpha
        v = self.solver.solve_triangular(Ks.T)
        variance = jnp.maximum(0.0, self.kernel(X_test) - jnp.sum(jnp.square(v), axis=0))
        return mean, variance


def _check_finite(value: JAXArray, what: str) -> None:
    if not bool(jnp.all(jnp.isfinite(value))):
        raise NumericalDegeneracy(f"non-finite values in the {what}")

