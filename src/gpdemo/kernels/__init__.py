"""
Covariance functions for one dimensional Gaussian process models. The scalar
functions in :mod:`gpdemo.kernels.functions` implement the formulas; the
:class:`Kernel` subclasses wrap them so that calling a kernel on arrays of
inputs returns a full covariance matrix; and :class:`KernelConfig` describes a
kernel by name and hyperparameters, which is what the demos pass around.
"""

__all__ = [
    "functions",
    "Kernel",
    "Stationary",
    "RBF",
    "Matern12",
    "Matern32",
    "Matern52",
    "Periodic",
    "KernelType",
    "KernelConfig",
    "rbf",
    "matern",
    "periodic",
]

from gpdemo.kernels import functions
from gpdemo.kernels.base import Kernel
from gpdemo.kernels.config import KernelConfig, KernelType
from gpdemo.kernels.functions import matern, periodic, rbf
from gpdemo.kernels.stationary import (
    RBF,
    Matern12,
    Matern32,
    Matern52,
    Periodic,
    Stationary,
)
