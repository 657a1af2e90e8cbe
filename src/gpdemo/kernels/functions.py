"""
Scalar covariance functions. Each takes two inputs and the hyperparameters and
returns the covariance between them; they broadcast over array arguments but
are written with a pair of scalars in mind. The kernel classes in
:mod:`gpdemo.kernels.stationary` are thin wrappers around these.
"""

from __future__ import annotations

__all__ = ["rbf", "matern", "periodic", "MATERN_ORDERS"]

import jax.numpy as jnp
import numpy as np

from gpdemo.errors import InvalidHyperparameter
from gpdemo.helpers import JAXArray

MATERN_ORDERS = (0.5, 1.5, 2.5)


def rbf(x1: JAXArray, x2: JAXArray, length_scale: float, variance: float) -> JAXArray:
    r"""The squared exponential kernel

    .. math::

        k(x_1,\,x_2) = \sigma^2\,\exp\left(-\frac{(x_1 - x_2)^2}{2\,\ell^2}\right)
    """
    diff = (x1 - x2) / length_scale
    return variance * jnp.exp(-0.5 * jnp.square(diff))


def matern(
    x1: JAXArray,
    x2: JAXArray,
    length_scale: float,
    variance: float,
    nu: float = 1.5,
) -> JAXArray:
    r"""The Matern kernel for half-integer orders

    With :math:`r = |x_1 - x_2| / \ell`,

    - ``nu = 0.5``: :math:`\sigma^2\,\exp(-r)`
    - ``nu = 1.5``: :math:`\sigma^2\,(1 + \sqrt{3}\,r)\,\exp(-\sqrt{3}\,r)`
    - ``nu = 2.5``: :math:`\sigma^2\,(1 + \sqrt{5}\,r + 5\,r^2/3)\,\exp(-\sqrt{5}\,r)`

    At ``r < 1e-10`` the result is exactly ``variance``. Other values of ``nu``
    raise :class:`gpdemo.errors.InvalidHyperparameter`.
    """
    r = jnp.abs(x1 - x2) / length_scale
    if nu == 0.5:
        value = jnp.exp(-r)
    elif nu == 1.5:
        arg = np.sqrt(3) * r
        value = (1 + arg) * jnp.exp(-arg)
    elif nu == 2.5:
        arg = np.sqrt(5) * r
        value = (1 + arg + jnp.square(arg) / 3) * jnp.exp(-arg)
    else:
        raise InvalidHyperparameter(
            f"Matern order nu must be one of {MATERN_ORDERS}, got {nu!r}"
        )
    return jnp.where(r < 1e-10, variance, variance * value)


def periodic(
    x1: JAXArray,
    x2: JAXArray,
    length_scale: float,
    variance: float,
    period: float = 2.0,
) -> JAXArray:
    r"""The periodic (exponential sine squared) kernel

    .. math::

        k(x_1,\,x_2) = \sigma^2\,\exp\left(
            -\frac{2\,\sin^2(\pi\,|x_1 - x_2| / P)}{\ell^2}\right)
    """
    s = jnp.sin(jnp.pi * jnp.abs(x1 - x2) / period)
    return variance * jnp.exp(-2 * jnp.square(s) / jnp.square(length_scale))
