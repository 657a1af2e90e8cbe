"""
Bayesian linear regression with an intercept and a slope, ``y = w0 + w1 * x +
noise``. The weight posterior is a 2-D Gaussian, so everything here is done
with closed-form 2x2 algebra from :mod:`gpdemo.linalg`.
"""

from __future__ import annotations

__all__ = ["BayesianLinearRegression", "RegressionPosterior", "gaussian_2d"]

from collections.abc import Iterable
from typing import Any

import equinox as eqx
import jax
import jax.numpy as jnp

from gpdemo import linalg
from gpdemo.errors import DimensionMismatch
from gpdemo.helpers import ArrayLike, JAXArray, check_positive, default_float
from gpdemo.observations import observations_to_arrays
from gpdemo.sampling import SeedOrKey, as_key


def gaussian_2d(w: ArrayLike, mean: ArrayLike, cov: ArrayLike) -> JAXArray:
    """The unnormalized density of a 2-D Gaussian at ``w``

    ``w`` can have any leading shape as long as its last axis has size 2,
    which makes it easy to evaluate on a mesh of weights. The peak value is 1.
    """
    dtype = default_float()
    dx = jnp.asarray(w, dtype=dtype) - jnp.asarray(mean, dtype=dtype)
    precision = linalg.invert_2x2(cov)
    return jnp.exp(-0.5 * jnp.einsum("...i,ij,...j->...", dx, precision, dx))


class RegressionPosterior(eqx.Module):
    """A Gaussian distribution over the weights ``(w0, w1)``

    Args:
        mean: The mean weights, shape ``(2,)``.
        covariance: The weight covariance, shape ``(2, 2)``.
    """

    mean: JAXArray
    covariance: JAXArray

    def predict(
        self, x: ArrayLike, noise_variance: float
    ) -> tuple[JAXArray, JAXArray]:
        """The predictive mean and standard deviation of ``y`` at ``x``

        The standard deviation includes the observation noise and is floored
        at ``sqrt(0.001)``.
        """
        x = jnp.asarray(x, dtype=default_float())
        phi = jnp.stack([jnp.ones_like(x), x], axis=-1)
        mean = phi @ self.mean
        var = noise_variance + jnp.einsum("...i,ij,...j->...", phi, self.covariance, phi)
        return mean, jnp.sqrt(jnp.maximum(0.001, var))

    def density(self, w: ArrayLike) -> JAXArray:
        """The unnormalized weight density, see :func:`gaussian_2d`"""
        return gaussian_2d(w, self.mean, self.covariance)

    def sample_weights(self, key: SeedOrKey, num_samples: int = 5) -> JAXArray:
        """Draw weight vectors from this distribution

        Each draw uses one Box-Muller pair (the cosine and sine branches) and
        a 2x2 Cholesky-like factor with its pivots floored at ``1e-4``.

        Returns:
            An array with shape ``(num_samples, 2)``.
        """
        dtype = default_float()
        cov = self.covariance
        a = jnp.sqrt(jnp.maximum(1e-4, cov[0, 0]))
        b = cov[0, 1] / a
        c = jnp.sqrt(jnp.maximum(1e-4, cov[1, 1] - b * b))

        key1, key2 = jax.random.split(as_key(key))
        u1 = jax.random.uniform(
            key1, (num_samples,), dtype=dtype, minval=jnp.finfo(dtype).tiny
        )
        u2 = jax.random.uniform(key2, (num_samples,), dtype=dtype)
        r = jnp.sqrt(-2 * jnp.log(u1))
        z1 = r * jnp.cos(2 * jnp.pi * u2)
        z2 = r * jnp.sin(2 * jnp.pi * u2)

        w0 = self.mean[0] + a * z1
        w1 = self.mean[1] + b * z1 + c * z2
        return jnp.stack([w0, w1], axis=-1)


class BayesianLinearRegression(eqx.Module):
    """A linear model with a Gaussian prior on its weights

    Args:
        prior_variance: The variance of the isotropic weight prior.
        noise_variance: The observation noise variance.
        prior_mean: The prior mean of ``(w0, w1)``.
    """

    prior_variance: float
    noise_variance: float
    prior_mean: JAXArray

    def __init__(
        self,
        prior_variance: float = 1.0,
        noise_variance: float = 0.05,
        prior_mean: ArrayLike = (0.5, 0.0),
    ):
        self.prior_variance = prior_variance
        self.noise_variance = noise_variance
        self.prior_mean = jnp.asarray(prior_mean, dtype=default_float())

    def __check_init__(self):
        check_positive("prior_variance", self.prior_variance)
        check_positive("noise_variance", self.noise_variance)
        if self.prior_mean.shape != (2,):
            raise DimensionMismatch(
                f"prior_mean must have shape (2,), got {self.prior_mean.shape}"
            )

    @property
    def prior(self) -> RegressionPosterior:
        return RegressionPosterior(
            mean=self.prior_mean,
            covariance=self.prior_variance * jnp.eye(2, dtype=self.prior_mean.dtype),
        )

    def fit(self, observations: Iterable[Any]) -> RegressionPosterior:
        """Condition the weights on a set of ``(x, y)`` observations

        With no observations this returns the prior.
        """
        x, y = observations_to_arrays(observations)
        if x.shape[0] == 0:
            return self.prior

        prior = self.prior
        prior_precision = linalg.invert_2x2(prior.covariance)

        # Design matrix with rows [1, x]
        Phi = jnp.stack([jnp.ones_like(x), x], axis=-1)
        Phi_t = linalg.transpose(Phi)

        # precision = prior precision + Phi^T Phi / noise
        scaled = linalg.mat_mul(Phi_t, Phi) / self.noise_variance
        covariance = linalg.invert_2x2(linalg.add_mat(prior_precision, scaled))

        # mean = cov (prior precision prior mean + Phi^T y / noise)
        prior_term = linalg.mat_mul(prior_precision, self.prior_mean[:, None])
        data_term = linalg.mat_mul(Phi_t, y[:, None]) / self.noise_variance
        mean = linalg.mat_mul(covariance, linalg.add_mat(prior_term, data_term))
        return RegressionPosterior(mean=mean[:, 0], covariance=covariance)

    def predict(
        self, observations: Iterable[Any], x: ArrayLike
    ) -> tuple[JAXArray, JAXArray]:
        """Fit and then predict at ``x``, see :func:`RegressionPosterior.predict`"""
        return self.fit(observations).predict(x, self.noise_variance)
