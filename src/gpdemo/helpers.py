from __future__ import annotations

__all__ = ["JAXArray", "ArrayLike", "default_float", "as_points", "check_positive"]

from typing import Any, Union

import jax
import jax.numpy as jnp
import numpy as np

from gpdemo.errors import DimensionMismatch, InvalidHyperparameter

JAXArray = jax.Array

# Inputs accepted at the API boundary: arrays or plain nested sequences of floats
ArrayLike = Union[JAXArray, np.ndarray, Any]


def default_float() -> np.dtype:
    """The canonical floating point type, float64 when x64 is enabled"""
    return jnp.result_type(float)


def as_points(points: ArrayLike, name: str = "points") -> JAXArray:
    """Convert a scalar or a sequence of scalar inputs to a 1-D float array"""
    points = jnp.atleast_1d(jnp.asarray(points, dtype=default_float()))
    if points.ndim != 1:
        raise DimensionMismatch(
            f"{name} must be a 1-D sequence of scalar inputs, got shape {points.shape}"
        )
    return points


def check_positive(name: str, value: Any, *, allow_zero: bool = False) -> None:
    """Raise :class:`InvalidHyperparameter` unless ``value`` is positive

    Traced values (inside ``jax.jit``) can't be inspected, so they pass.
    """
    try:
        concrete = np.asarray(value, dtype=float)
    except (jax.errors.TracerArrayConversionError, jax.errors.ConcretizationTypeError):
        return
    ok = concrete >= 0 if allow_zero else concrete > 0
    if not np.all(ok & np.isfinite(concrete)):
        bound = "non-negative" if allow_zero else "positive"
        raise InvalidHyperparameter(f"{name} must be finite and {bound}, got {value!r}")
