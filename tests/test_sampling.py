# mypy: ignore-errors

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from gpdemo import KernelConfig, sampling
from gpdemo.errors import DimensionMismatch
from gpdemo.test_utils import assert_allclose


def test_box_muller():
    assert_allclose(sampling.box_muller(np.exp(-0.5), 0.0), 1.0)
    assert_allclose(sampling.box_muller(np.exp(-2.0), 0.5), -2.0)
    assert_allclose(sampling.box_muller(0.3, 0.25), 0.0, atol=1e-12)


def test_standard_normal():
    z = sampling.standard_normal(jax.random.PRNGKey(4), (200_000,))
    assert z.shape == (200_000,)
    assert jnp.all(jnp.isfinite(z))
    assert abs(jnp.mean(z)) < 0.01
    assert abs(jnp.std(z) - 1) < 0.01

    # Integer seeds and keys are interchangeable
    assert_allclose(
        sampling.standard_normal(4, (10,)),
        sampling.standard_normal(jax.random.PRNGKey(4), (10,)),
    )


def test_sample_mvn():
    mean = np.array([1.0, -2.0, 0.5])
    A = np.array([[2.0, 0.3, 0.1], [0.3, 1.0, -0.2], [0.1, -0.2, 0.5]])
    L = np.linalg.cholesky(A)
    samples = sampling.sample_mvn(0, mean, L, 100_000)
    assert samples.shape == (100_000, 3)
    assert_allclose(jnp.mean(samples, axis=0), mean, atol=0.03)
    assert_allclose(jnp.cov(samples, rowvar=False), A, atol=0.05)

    with pytest.raises(DimensionMismatch):
        sampling.sample_mvn(0, mean, np.eye(2))


def test_prior_seed():
    config = KernelConfig("rbf", length_scale=0.3, signal_variance=1.0)
    assert sampling.prior_seed(config) == 3 + 30 + 100
    assert sampling.prior_seed(config, 5) == 5 + 3 + 30 + 100
    assert sampling.prior_seed(config.replace(length_scale=0.301)) == sampling.prior_seed(
        config
    )
    assert sampling.prior_seed(config.replace(kind="periodic")) != sampling.prior_seed(
        config
    )
