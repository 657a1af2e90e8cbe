"""
The kernels used by the demos are all stationary and one dimensional, so each
kernel in this section has (at least) the two parameters:

- ``scale``: The length scale :math:`\\ell`, controlling how quickly the
  function varies. Small values give wiggly draws, large values smooth ones.
- ``variance``: The signal variance :math:`\\sigma^2`, the overall amplitude
  of the function values. This is also the value of ``k(x, x)``.

Both default to ``1`` and must be positive.
"""

from __future__ import annotations

__all__ = [
    "Stationary",
    "RBF",
    "Matern12",
    "Matern32",
    "Matern52",
    "Periodic",
]

from typing import ClassVar

import equinox as eqx
import jax.numpy as jnp

from gpdemo.helpers import JAXArray, check_positive
from gpdemo.kernels import functions
from gpdemo.kernels.base import Kernel


class Stationary(Kernel):
    """A one dimensional stationary kernel

    Args:
        scale: The length scale. This must be a positive scalar.
        variance: The signal variance. This must be a positive scalar.
    """

    scale: JAXArray | float = eqx.field(default_factory=lambda: jnp.ones(()))
    variance: JAXArray | float = eqx.field(default_factory=lambda: jnp.ones(()))

    def __check_init__(self):
        check_positive("scale", self.scale)
        check_positive("variance", self.variance)

    def evaluate_diag(self, X: JAXArray) -> JAXArray:
        del X
        return jnp.asarray(self.variance)


class RBF(Stationary):
    r"""The radial basis function (squared exponential) kernel

    .. math::

        k(x_i,\,x_j) = \sigma^2\,\exp(-r^2 / 2)

    where :math:`r = |x_i - x_j| / \ell`.
    """

    def evaluate(self, X1: JAXArray, X2: JAXArray) -> JAXArray:
        return functions.rbf(X1, X2, self.scale, self.variance)


class _Matern(Stationary):
    nu: ClassVar[float]

    def evaluate(self, X1: JAXArray, X2: JAXArray) -> JAXArray:
        return functions.matern(X1, X2, self.scale, self.variance, self.nu)


class Matern12(_Matern):
    r"""The Matern-1/2 (exponential) kernel

    .. math::

        k(x_i,\,x_j) = \sigma^2\,\exp(-r)
    """

    nu: ClassVar[float] = 0.5


class Matern32(_Matern):
    r"""The Matern-3/2 kernel

    .. math::

        k(x_i,\,x_j) = \sigma^2\,(1 + \sqrt{3}\,r)\,\exp(-\sqrt{3}\,r)
    """

    nu: ClassVar[float] = 1.5


class Matern52(_Matern):
    r"""The Matern-5/2 kernel

    .. math::

        k(x_i,\,x_j) = \sigma^2\,(1 + \sqrt{5}\,r + 5\,r^2/3)\,\exp(-\sqrt{5}\,r)
    """

    nu: ClassVar[float] = 2.5


class Periodic(Stationary):
    r"""The periodic kernel

    .. math::

        k(x_i,\,x_j) = \sigma^2\,\exp(-2\,\sin^2(\pi\,|x_i - x_j| / P) / \ell^2)

    Args:
        period: The parameter :math:`P`, defaults to ``2``.
    """

    period: JAXArray | float = eqx.field(default_factory=lambda: 2.0 * jnp.ones(()))

    def __check_init__(self):
        check_positive("period", self.period)

    def evaluate(self, X1: JAXArray, X2: JAXArray) -> JAXArray:
        return functions.periodic(
            X1, X2, self.scale, self.variance, self.period
        )
