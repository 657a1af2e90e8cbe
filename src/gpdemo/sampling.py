"""
Drawing from multivariate normal distributions. All randomness flows through
an explicit ``jax`` random key (or an integer seed that is turned into one),
so a set of draws is a pure function of the seed and the parameters and the
demos can redraw exactly the same curves while a slider is being dragged.
"""

from __future__ import annotations

__all__ = ["as_key", "box_muller", "standard_normal", "sample_mvn", "prior_seed"]

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING, Union

import jax
import jax.numpy as jnp
import numpy as np

from gpdemo.errors import DimensionMismatch
from gpdemo.helpers import ArrayLike, JAXArray, default_float

if TYPE_CHECKING:
    from gpdemo.kernels.config import KernelConfig

SeedOrKey = Union[int, np.integer, JAXArray]


def as_key(seed: SeedOrKey) -> JAXArray:
    """Turn an integer seed into a ``jax`` random key; keys pass through"""
    if isinstance(seed, (int, np.integer)):
        return jax.random.PRNGKey(int(seed))
    return seed


def box_muller(u1: ArrayLike, u2: ArrayLike) -> JAXArray:
    """Map two uniform variates on ``(0, 1)`` to a standard normal variate"""
    return jnp.sqrt(-2 * jnp.log(u1)) * jnp.cos(2 * jnp.pi * u2)


def standard_normal(key: SeedOrKey, shape: Sequence[int]) -> JAXArray:
    """Independent standard normal draws using the Box-Muller transform"""
    dtype = default_float()
    key1, key2 = jax.random.split(as_key(key))
    # u1 must stay away from zero for the log
    u1 = jax.random.uniform(
        key1, tuple(shape), dtype=dtype, minval=jnp.finfo(dtype).tiny, maxval=1.0
    )
    u2 = jax.random.uniform(key2, tuple(shape), dtype=dtype)
    return box_muller(u1, u2)


def sample_mvn(
    key: SeedOrKey,
    mean: ArrayLike,
    scale_tril: ArrayLike,
    num_samples: int = 1,
) -> JAXArray:
    """Draw ``mean + L @ z`` for standard normal ``z``

    Args:
        key: A ``jax`` random key or an integer seed.
        mean: The mean vector, shape ``(N,)``.
        scale_tril: A lower triangular factor ``L`` of the covariance matrix,
            shape ``(N, N)``.
        num_samples: The number of independent draws.

    Returns:
        An array with shape ``(num_samples, N)``.
    """
    dtype = default_float()
    mean = jnp.asarray(mean, dtype=dtype)
    scale_tril = jnp.asarray(scale_tril, dtype=dtype)
    n = mean.shape[0]
    if scale_tril.shape != (n, n):
        raise DimensionMismatch(
            f"expected a ({n}, {n}) factor for a mean of length {n}, "
            f"got shape {scale_tril.shape}"
        )
    z = standard_normal(key, (n, num_samples))
    return mean[None, :] + (scale_tril @ z).T


def prior_seed(config: KernelConfig, base_seed: int = 0) -> int:
    """A seed that depends on the kernel settings

    The same kernel type and hyperparameters (to two decimals) always give the
    same seed, so redrawing the prior after an unrelated change doesn't make
    the sample curves jump around.
    """
    return (
        int(base_seed)
        + len(config.kind.value)
        + math.floor(config.length_scale * 100)
        + math.floor(config.signal_variance * 100)
    )
