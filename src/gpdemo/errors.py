"""
Exceptions raised by ``gpdemo``. Every error derives from :class:`GPDemoError`
and also from the closest built-in exception, so callers can catch either.
"""

from __future__ import annotations

__all__ = [
    "GPDemoError",
    "DimensionMismatch",
    "InvalidHyperparameter",
    "NumericalDegeneracy",
]


class GPDemoError(Exception):
    """Base class for all ``gpdemo`` errors"""


class DimensionMismatch(GPDemoError, ValueError):
    """Operand shapes are incompatible for the requested operation"""


class InvalidHyperparameter(GPDemoError, ValueError):
    """A length scale, variance, period or similar parameter is out of range"""


class NumericalDegeneracy(GPDemoError, ArithmeticError):
    """A computation produced non-finite values"""
