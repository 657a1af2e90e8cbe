"""
Training data for the one dimensional demos is an ordered collection of
``(x, y)`` pairs. The order doesn't change any posterior, but the interactive
"click to add a point" views append to and remove from it, so it is kept as a
plain list owned by the caller.
"""

from __future__ import annotations

__all__ = ["Observation", "as_observation", "observations_to_arrays"]

from collections.abc import Iterable, Mapping
from typing import Any, NamedTuple

import jax.numpy as jnp

from gpdemo.errors import DimensionMismatch
from gpdemo.helpers import JAXArray, default_float


class Observation(NamedTuple):
    """A single training point"""

    x: float
    y: float


def as_observation(item: Any) -> Observation:
    """Coerce an ``Observation``, an ``(x, y)`` pair or a mapping with ``"x"``
    and ``"y"`` keys (extra keys, like an ``"id"``, are ignored)"""
    if isinstance(item, Observation):
        return item
    if isinstance(item, Mapping):
        try:
            return Observation(float(item["x"]), float(item["y"]))
        except KeyError as e:
            raise DimensionMismatch(f"observation mapping is missing {e}") from None
    try:
        x, y = item
    except (TypeError, ValueError):
        raise DimensionMismatch(
            f"an observation must be an (x, y) pair, got {item!r}"
        ) from None
    return Observation(float(x), float(y))


def observations_to_arrays(
    observations: Iterable[Any],
) -> tuple[JAXArray, JAXArray]:
    """Split observations into an array of inputs and an array of targets"""
    data = [as_observation(item) for item in observations]
    dtype = default_float()
    X = jnp.asarray([obs.x for obs in data], dtype=dtype)
    y = jnp.asarray([obs.y for obs in data], dtype=dtype)
    return X, y
