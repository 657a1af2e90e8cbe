from __future__ import annotations

__all__ = ["Kernel"]

from abc import abstractmethod

import equinox as eqx
import jax
import jax.numpy as jnp

from gpdemo.helpers import JAXArray


class Kernel(eqx.Module):
    """The base class for all kernel implementations

    Subclasses should accept parameters in their ``__init__`` and then override
    :func:`Kernel.evaluate` with custom behavior.
    """

    @abstractmethod
    def evaluate(self, X1: JAXArray, X2: JAXArray) -> JAXArray:
        """Evaluate the kernel at a pair of input coordinates

        Users shouldn't generally call :func:`Kernel.evaluate`. Instead, always
        "call" the kernel instance directly; for example, you can evaluate the
        Matern-3/2 kernel using ``Matern32(0.3)(x1, x2)``, for arrays of input
        coordinates ``x1`` and ``x2``. When implementing a custom kernel, this
        method should treat ``X1`` and ``X2`` as single scalar datapoints and
        let :func:`Kernel.__call__` handle the broadcasting.
        """
        del X1, X2
        raise NotImplementedError

    def evaluate_diag(self, X: JAXArray) -> JAXArray:
        """Evaluate the kernel on its diagonal

        The default implementation simply calls :func:`Kernel.evaluate` with
        ``X`` as both arguments, but subclasses can use this to make diagonal
        calculations more efficient.
        """
        return self.evaluate(X, X)

    def matmul(
        self,
        X1: JAXArray,
        X2: JAXArray | None = None,
        y: JAXArray | None = None,
    ) -> JAXArray:
        if y is None:
            assert X2 is not None
            y = X2
            X2 = None

        if X2 is None:
            X2 = X1

        return jnp.dot(self(X1, X2), y)

    def __call__(self, X1: JAXArray, X2: JAXArray | None = None) -> JAXArray:
        if X2 is None:
            k = jax.vmap(self.evaluate_diag, in_axes=0)(X1)
            if k.ndim != 1:
                raise ValueError(
                    "Invalid kernel diagonal shape: "
                    f"expected ndim = 1, got ndim={k.ndim} "
                    "check the dimensions of parameters and custom kernels"
                )
            return k
        k = jax.vmap(jax.vmap(self.evaluate, in_axes=(None, 0)), in_axes=(0, None))(
            X1, X2
        )
        if k.ndim != 2:
            raise ValueError(
                "Invalid kernel shape: "
                f"expected ndim = 2, got ndim={k.ndim} "
                "check the dimensions of parameters and custom kernels"
            )
        return k
