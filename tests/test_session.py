# mypy: ignore-errors

import logging

import jax
import jax.numpy as jnp
import numpy as np
import pytest

import gpdemo
from gpdemo import KernelConfig, Session
from gpdemo.config import get_config, get_jitter, get_logger, set_log_level
from gpdemo.errors import InvalidHyperparameter
from gpdemo.kernels import RBF
from gpdemo.session import linspace_grid
from gpdemo.solver import CholeskySolver
from gpdemo.test_utils import assert_allclose


def test_defaults():
    session = Session()
    assert session.kernel_config == KernelConfig("rbf", 0.3, 1.0)
    assert session.noise_variance == 0.05
    assert session.grid.shape == (100,)
    assert_allclose(session.grid[0], -3.0)
    assert_allclose(session.grid[-1], 3.0)
    assert len(session) == 0


def test_add_remove_clear():
    session = Session()
    session.add(-1.0, 1.0)
    session.add(0.5, 0.2)
    session.add(1.0, -1.0)
    assert len(session) == 3
    assert session.remove(1) == (0.5, 0.2)
    assert session.remove() == (1.0, -1.0)
    assert session.observations == [(-1.0, 1.0)]
    session.clear()
    assert len(session) == 0


def test_posterior_tracks_observations():
    session = Session(grid=[-1.0, 0.0, 1.0])
    prior = session.posterior()
    assert np.all(prior.mean == 0)

    session.add(-1.0, 1.0)
    session.add(1.0, -1.0)
    posterior = session.posterior()
    assert abs(posterior.mean[0] - 1) < 0.05
    assert posterior.variance[1] > posterior.variance[0]

    session.clear()
    assert_allclose(session.posterior().variance, prior.variance)


def test_set_kernel_and_noise():
    session = Session()
    config = session.set_kernel(kind="matern32", length_scale=0.6)
    assert config is session.kernel_config
    assert config.kind is gpdemo.kernels.KernelType.MATERN32
    assert config.length_scale == 0.6

    with pytest.raises(InvalidHyperparameter):
        session.set_kernel(signal_variance=-1.0)
    assert session.kernel_config == config

    session.set_noise_variance(0.2)
    assert_allclose(session.posterior().noise, np.full(100, 0.2))
    with pytest.raises(InvalidHyperparameter):
        session.set_noise_variance(-0.2)


def test_prior_samples_are_stable():
    session = Session(grid=linspace_grid(num=40))
    a = session.prior_samples(5)
    assert a.shape == (5, 40)

    # An unrelated change (adding data) doesn't move the prior curves
    session.add(0.0, 1.0)
    assert_allclose(session.prior_samples(5), a)

    # Changing the kernel does
    session.set_kernel(length_scale=0.5)
    assert not np.allclose(session.prior_samples(5), a)


def test_posterior_samples():
    session = Session(grid=linspace_grid(num=30))
    session.add(0.0, 1.0)
    samples = session.posterior_samples(3, seed=5)
    assert samples.shape == (3, 30)
    assert_allclose(samples, session.posterior_samples(3, seed=5))


def test_config():
    config = get_config()
    assert config.jitter == 1e-6
    assert get_jitter() == 1e-6
    assert get_jitter(jnp.float64) == 1e-6
    assert get_jitter(jnp.float32) == 1e-4
    assert config.cholesky_floor == 1e-10
    assert jax.config.jax_enable_x64 == config.enable_x64
    with pytest.raises(AttributeError):
        config.update(not_an_option=1)

    logger = get_logger()
    assert logger.name == "gpdemo"
    level = logger.level
    set_log_level(logging.DEBUG)
    assert logger.level == logging.DEBUG
    set_log_level(level)


def test_single_precision_factor_is_finite():
    X = jnp.linspace(-3, 3, 100, dtype=jnp.float32)
    solver = CholeskySolver(RBF(scale=2.0, variance=1.0), X)
    assert solver.covariance().dtype == jnp.float32
    assert_allclose(jnp.diag(solver.covariance()), 1.0001, atol=1e-6, rtol=0)
    assert jnp.all(jnp.isfinite(solver.scale_tril))
