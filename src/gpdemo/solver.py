from __future__ import annotations

__all__ = ["CholeskySolver"]

import equinox as eqx
import jax.numpy as jnp
import numpy as np

from gpdemo import linalg
from gpdemo.config import get_jitter
from gpdemo.helpers import JAXArray
from gpdemo.kernels.base import Kernel


class CholeskySolver(eqx.Module):
    """A direct solver built on :func:`gpdemo.linalg.cholesky`

    The covariance matrix is ``k(X, X) + (noise_variance + jitter) * I``. The
    jitter is always added, even when there is observation noise.

    Args:
        kernel: The kernel function.
        X: The input coordinates.
        noise_variance: The observation noise variance.
        jitter: The extra diagonal term; defaults to
            :func:`gpdemo.config.get_jitter` for the dtype of ``X``.
    """

    X: JAXArray
    variance_value: JAXArray
    covariance_value: JAXArray
    scale_tril: JAXArray

    def __init__(
        self,
        kernel: Kernel,
        X: JAXArray,
        noise_variance: JAXArray | float = 0.0,
        *,
        jitter: float | None = None,
    ):
        if jitter is None:
            jitter = get_jitter(X.dtype)
        diag = noise_variance + jitter
        self.X = X
        self.variance_value = kernel(X) + diag
        self.covariance_value = kernel(X, X) + diag * jnp.eye(X.shape[0], dtype=X.dtype)
        self.scale_tril = linalg.cholesky(self.covariance_value)

    def variance(self) -> JAXArray:
        """The diagonal of the covariance matrix"""
        return self.variance_value

    def covariance(self) -> JAXArray:
        """The evaluated covariance matrix"""
        return self.covariance_value

    def normalization(self) -> JAXArray:
        """The multivariate normal normalization constant

        This is ``(log_det + n*log(2*pi))/2``, where ``n`` is the size of the
        covariance matrix, and ``log_det`` is the log determinant of the
        matrix.
        """
        return jnp.sum(
            jnp.log(jnp.diag(self.scale_tril))
        ) + 0.5 * self.scale_tril.shape[0] * np.log(2 * np.pi)

    def solve_triangular(self, y: JAXArray, *, transpose: bool = False) -> JAXArray:
        """Solve ``L @ x = y``, or ``L.T @ x = y`` if ``transpose`` is ``True``"""
        if transpose:
            return linalg.solve_upper_triangular(self.scale_tril.T, y)
        return linalg.solve_lower_triangular(self.scale_tril, y)

    def dot_triangular(self, y: JAXArray) -> JAXArray:
        """Compute ``L @ y``"""
        return jnp.einsum("ij,j...->i...", self.scale_tril, y)

    def condition(self, kernel: Kernel, X_test: JAXArray) -> JAXArray:
        """The covariance matrix of the noise-free process at ``X_test``
        conditioned on the observed data"""
        A = self.solve_triangular(kernel(self.X, X_test))
        return kernel(X_test, X_test) - A.T @ A
