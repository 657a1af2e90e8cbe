"""
A :class:`KernelConfig` is the plain description of a kernel that a demo's
sliders and drop-downs edit: a kernel type plus its hyperparameters. It is
validated when it is created and can be turned into a :class:`Kernel` with
:func:`KernelConfig.build`.
"""

from __future__ import annotations

__all__ = ["KernelType", "KernelConfig"]

from enum import Enum
from typing import Any

import equinox as eqx

from gpdemo.errors import InvalidHyperparameter
from gpdemo.helpers import check_positive
from gpdemo.kernels.base import Kernel
from gpdemo.kernels.stationary import RBF, Matern12, Matern32, Matern52, Periodic


class KernelType(str, Enum):
    RBF = "rbf"
    MATERN12 = "matern12"
    MATERN32 = "matern32"
    MATERN52 = "matern52"
    PERIODIC = "periodic"


class KernelConfig(eqx.Module):
    """The type and hyperparameters of a kernel

    Args:
        kind: One of ``"rbf"``, ``"matern12"``, ``"matern32"``, ``"matern52"``
            or ``"periodic"`` (or the matching :class:`KernelType`).
        length_scale: The length scale, must be positive.
        signal_variance: The signal variance, must be positive.
        period: The period, must be positive. Only used by the periodic
            kernel.
    """

    kind: KernelType = eqx.field(static=True)
    length_scale: float
    signal_variance: float
    period: float

    def __init__(
        self,
        kind: KernelType | str = KernelType.RBF,
        length_scale: float = 1.0,
        signal_variance: float = 1.0,
        period: float = 2.0,
    ):
        try:
            self.kind = KernelType(kind)
        except ValueError:
            choices = ", ".join(repr(k.value) for k in KernelType)
            raise InvalidHyperparameter(
                f"unknown kernel type {kind!r}; expected one of {choices}"
            ) from None
        self.length_scale = length_scale
        self.signal_variance = signal_variance
        self.period = period

    def __check_init__(self):
        check_positive("length_scale", self.length_scale)
        check_positive("signal_variance", self.signal_variance)
        check_positive("period", self.period)

    def replace(self, **changes: Any) -> KernelConfig:
        """A copy of this configuration with some fields changed"""
        values = dict(
            kind=self.kind,
            length_scale=self.length_scale,
            signal_variance=self.signal_variance,
            period=self.period,
        )
        values.update(changes)
        return KernelConfig(**values)

    def build(self) -> Kernel:
        if self.kind is KernelType.PERIODIC:
            return Periodic(self.length_scale, self.signal_variance, self.period)
        cls = {
            KernelType.RBF: RBF,
            KernelType.MATERN12: Matern12,
            KernelType.MATERN32: Matern32,
            KernelType.MATERN52: Matern52,
        }[self.kind]
        return cls(self.length_scale, self.signal_variance)
