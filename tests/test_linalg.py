# mypy: ignore-errors

import jax.numpy as jnp
import numpy as np
import pytest
from numpy import random as np_random

from gpdemo import linalg
from gpdemo.errors import DimensionMismatch
from gpdemo.test_utils import assert_allclose


@pytest.fixture
def random():
    return np_random.default_rng(4920)


def random_spd(random, n):
    A = random.standard_normal((n, n))
    return A @ A.T + n * np.eye(n)


def test_mat_vec_mul(random):
    M = random.standard_normal((4, 3))
    v = random.standard_normal(3)
    assert_allclose(linalg.mat_vec_mul(M, v), M @ v)
    assert_allclose(linalg.mat_vec_mul([[1.0, 2.0], [3.0, 4.0]], [1.0, 1.0]), [3.0, 7.0])

    with pytest.raises(DimensionMismatch):
        linalg.mat_vec_mul(M, random.standard_normal(4))


def test_mat_mul_transpose_add(random):
    A = random.standard_normal((3, 4))
    B = random.standard_normal((4, 2))
    assert_allclose(linalg.mat_mul(A, B), A @ B)
    assert_allclose(linalg.transpose(A), A.T)
    assert_allclose(linalg.add_mat(A, A), 2 * A)

    with pytest.raises(DimensionMismatch):
        linalg.mat_mul(A, A)
    with pytest.raises(DimensionMismatch):
        linalg.add_mat(A, B)
    with pytest.raises(DimensionMismatch):
        linalg.mat_mul(A, np.ones(4))


def test_invert_2x2(random):
    M = random_spd(random, 2)
    assert_allclose(linalg.invert_2x2(M) @ M, np.eye(2), atol=1e-10)

    # Singular matrices give a huge diagonal instead of an error
    singular = [[1.0, 2.0], [2.0, 4.0]]
    assert_allclose(linalg.invert_2x2(singular), 1e10 * np.eye(2))

    with pytest.raises(DimensionMismatch):
        linalg.invert_2x2(np.eye(3))


@pytest.mark.parametrize("n", [2, 5, 12, 20])
def test_cholesky(random, n):
    A = random_spd(random, n)
    L = linalg.cholesky(A)
    assert_allclose(jnp.triu(L, 1), np.zeros((n, n)))
    assert_allclose(L @ L.T, A, atol=1e-6)
    assert_allclose(L, np.linalg.cholesky(A), atol=1e-8)


def test_cholesky_clamps_non_psd():
    # Not positive definite: the second pivot would be 1 - 4 < 0
    A = np.array([[1.0, 2.0], [2.0, 1.0]])
    L = linalg.cholesky(A)
    assert jnp.all(jnp.isfinite(L))
    assert_allclose(L[1, 1], np.sqrt(1e-10))

    # A zero matrix is clamped on every pivot
    L = linalg.cholesky(np.zeros((3, 3)))
    assert jnp.all(jnp.isfinite(L))
    assert_allclose(jnp.diag(L), np.full(3, np.sqrt(1e-10)))


def test_cholesky_requires_square():
    with pytest.raises(DimensionMismatch):
        linalg.cholesky(np.ones((2, 3)))


@pytest.mark.parametrize("n", [1, 4, 15])
def test_triangular_solves(random, n):
    L = np.tril(random.standard_normal((n, n)))
    L[np.diag_indices_from(L)] = random.uniform(0.5, 2.0, n)
    b = random.standard_normal(n)

    x = linalg.solve_lower_triangular(L, b)
    assert_allclose(L @ x, b, atol=1e-6)

    x = linalg.solve_upper_triangular(L.T, b)
    assert_allclose(L.T @ x, b, atol=1e-6)

    B = random.standard_normal((n, 3))
    assert_allclose(L @ linalg.solve_lower_triangular(L, B), B, atol=1e-6)

    with pytest.raises(DimensionMismatch):
        linalg.solve_lower_triangular(L, np.ones(n + 1))


def test_cho_solve(random):
    A = random_spd(random, 6)
    b = random.standard_normal(6)
    x = linalg.cho_solve(linalg.cholesky(A), b)
    assert_allclose(x, np.linalg.solve(A, b), atol=1e-8)
