"""
Dense linear algebra for the small matrices that show up in the demos (a
covariance matrix over a 100 point grid is about as big as it gets). Matrices
and vectors can be passed as ``jax`` arrays or as nested Python sequences.

Shape errors raise :class:`gpdemo.errors.DimensionMismatch`. Numerical
problems never raise here: :func:`cholesky` clamps its pivots and
:func:`invert_2x2` returns a huge diagonal for singular input, so callers
always get a (possibly meaningless) result back.
"""

from __future__ import annotations

__all__ = [
    "mat_vec_mul",
    "mat_mul",
    "transpose",
    "add_mat",
    "invert_2x2",
    "cholesky",
    "solve_lower_triangular",
    "solve_upper_triangular",
    "cho_solve",
]

from functools import partial

import jax
import jax.numpy as jnp
from jax.scipy import linalg

from gpdemo.config import get_config
from gpdemo.errors import DimensionMismatch
from gpdemo.helpers import ArrayLike, JAXArray, default_float


def _as_matrix(A: ArrayLike, name: str = "A") -> JAXArray:
    A = jnp.asarray(A, dtype=default_float())
    if A.ndim != 2:
        raise DimensionMismatch(f"{name} must be a matrix, got shape {A.shape}")
    return A


def _as_square(A: ArrayLike, name: str = "A") -> JAXArray:
    A = _as_matrix(A, name)
    if A.shape[0] != A.shape[1]:
        raise DimensionMismatch(f"{name} must be square, got shape {A.shape}")
    return A


def _as_rhs(b: ArrayLike, n: int) -> JAXArray:
    b = jnp.asarray(b, dtype=default_float())
    if b.ndim not in (1, 2) or b.shape[0] != n:
        raise DimensionMismatch(
            f"right hand side must have leading dimension {n}, got shape {b.shape}"
        )
    return b


def mat_vec_mul(M: ArrayLike, v: ArrayLike) -> JAXArray:
    M = _as_matrix(M, "M")
    v = jnp.asarray(v, dtype=default_float())
    if v.ndim != 1 or v.shape[0] != M.shape[1]:
        raise DimensionMismatch(
            f"cannot multiply a {M.shape} matrix by a vector of shape {v.shape}"
        )
    return M @ v


def mat_mul(A: ArrayLike, B: ArrayLike) -> JAXArray:
    A = _as_matrix(A, "A")
    B = _as_matrix(B, "B")
    if A.shape[1] != B.shape[0]:
        raise DimensionMismatch(f"cannot multiply shapes {A.shape} and {B.shape}")
    return A @ B


def transpose(A: ArrayLike) -> JAXArray:
    return _as_matrix(A).T


def add_mat(A: ArrayLike, B: ArrayLike) -> JAXArray:
    A = _as_matrix(A, "A")
    B = _as_matrix(B, "B")
    if A.shape != B.shape:
        raise DimensionMismatch(f"cannot add shapes {A.shape} and {B.shape}")
    return A + B


def invert_2x2(M: ArrayLike) -> JAXArray:
    """Closed form inverse of a 2x2 matrix

    If ``|det(M)|`` is below ``config.degenerate_det`` the result is
    ``config.degenerate_fill`` times the identity, which downstream code reads
    as "effectively infinite variance".
    """
    M = _as_matrix(M, "M")
    if M.shape != (2, 2):
        raise DimensionMismatch(f"expected a 2x2 matrix, got shape {M.shape}")
    config = get_config()
    return _invert_2x2(M, config.degenerate_det, config.degenerate_fill)


@jax.jit
def _invert_2x2(M: JAXArray, tol: float, fill: float) -> JAXArray:
    a, b, c, d = M[0, 0], M[0, 1], M[1, 0], M[1, 1]
    det = a * d - b * c
    degenerate = jnp.abs(det) < tol
    safe_det = jnp.where(degenerate, 1.0, det)
    inverse = jnp.array([[d, -b], [-c, a]]) / safe_det
    return jnp.where(degenerate, fill * jnp.eye(2, dtype=M.dtype), inverse)


def cholesky(A: ArrayLike) -> JAXArray:
    """Lower Cholesky factor of a symmetric positive (semi-)definite matrix

    The factor is built row by row (Cholesky-Banachiewicz). Each diagonal
    pivot is clamped to at least ``config.cholesky_floor`` before the square
    root, so this never produces NaNs or raises, even for matrices that are not
    positive definite. Symmetry of ``A`` is assumed, only its lower triangle is
    read.
    """
    A = _as_square(A)
    return _cholesky(A, get_config().cholesky_floor)


@jax.jit
def _cholesky(A: JAXArray, floor: float) -> JAXArray:
    def fill_row(i, L):
        def fill_entry(j, L):
            # Entries of row i at and beyond column j are still zero, as are
            # entries of row j beyond the diagonal, so the full dot product
            # only picks up the k < j terms.
            s = jnp.dot(L[i], L[j])
            diag = jnp.sqrt(jnp.maximum(A[i, i] - s, floor))
            pivot = jnp.where(i == j, 1.0, L[j, j])
            return L.at[i, j].set(jnp.where(i == j, diag, (A[i, j] - s) / pivot))

        return jax.lax.fori_loop(0, i + 1, fill_entry, L)

    return jax.lax.fori_loop(0, A.shape[0], fill_row, jnp.zeros_like(A))


def solve_lower_triangular(L: ArrayLike, b: ArrayLike) -> JAXArray:
    """Solve ``L @ x = b`` by forward substitution"""
    L = _as_square(L, "L")
    return _solve_triangular(L, _as_rhs(b, L.shape[0]), lower=True)


def solve_upper_triangular(U: ArrayLike, b: ArrayLike) -> JAXArray:
    """Solve ``U @ x = b`` by back substitution

    With ``U = transpose(L)`` for a Cholesky factor ``L`` this is the second
    half of a symmetric solve; see :func:`cho_solve`.
    """
    U = _as_square(U, "U")
    return _solve_triangular(U, _as_rhs(b, U.shape[0]), lower=False)


@partial(jax.jit, static_argnames=("lower",))
def _solve_triangular(T: JAXArray, b: JAXArray, *, lower: bool) -> JAXArray:
    return linalg.solve_triangular(T, b, lower=lower)


def cho_solve(L: ArrayLike, b: ArrayLike) -> JAXArray:
    """Solve ``(L @ L.T) @ x = b`` given a lower Cholesky factor ``L``"""
    L = _as_square(L, "L")
    return solve_upper_triangular(L.T, solve_lower_triangular(L, b))
