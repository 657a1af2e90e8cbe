"""
``gpdemo`` is the numerical core behind a set of interactive teaching demos for
Gaussian processes and Bayesian optimization, built on top of `jax
<https://github.com/google/jax>`_. It computes GP posteriors with a small
Cholesky-based engine, draws prior and posterior sample functions from an
explicit seed, and scores candidate points with UCB, EI and PI acquisition
functions. The functions in :mod:`gpdemo.functional` are the main entry
points; :class:`Session` keeps the state of one interactive view.

.. note::

    Importing ``gpdemo`` enables double precision in ``jax`` for the whole
    process (``jax.config.update("jax_enable_x64", True)``), because the
    small floors used by the Cholesky factorization are below single precision
    resolution. Set the environment variable ``GPDEMO_ENABLE_X64=0`` before
    the import to keep the ``jax`` default; the jitter is then raised to
    ``config.jitter32``.
"""

__version__ = "0.1.0"
__author__ = "gpdemo developers"
__email__ = "gpdemo@users.noreply.github.com"
__uri__ = "https://github.com/gpdemo/gpdemo"
__license__ = "BSD"
__description__ = "Gaussian process and Bayesian optimization kernels for teaching demos"

from gpdemo.config import init_precision as _init_precision

_init_precision()

from gpdemo import (  # noqa: E402
    acquisition as acquisition,
    bandits as bandits,
    kernels as kernels,
    linalg as linalg,
    sampling as sampling,
)
from gpdemo.config import get_config as get_config  # noqa: E402
from gpdemo.errors import (  # noqa: E402
    DimensionMismatch as DimensionMismatch,
    GPDemoError as GPDemoError,
    InvalidHyperparameter as InvalidHyperparameter,
    NumericalDegeneracy as NumericalDegeneracy,
)
from gpdemo.functional import (  # noqa: E402
    acquisition_ei as acquisition_ei,
    acquisition_pi as acquisition_pi,
    acquisition_ucb as acquisition_ucb,
    compute_gp_posterior as compute_gp_posterior,
    compute_kernel_matrix as compute_kernel_matrix,
    sample_posterior as sample_posterior,
    sample_prior as sample_prior,
)
from gpdemo.gp import GaussianProcess as GaussianProcess  # noqa: E402
from gpdemo.gp import Posterior as Posterior  # noqa: E402
from gpdemo.kernels.config import KernelConfig as KernelConfig  # noqa: E402
from gpdemo.observations import Observation as Observation  # noqa: E402
from gpdemo.optimize import BayesianOptimizer as BayesianOptimizer  # noqa: E402
from gpdemo.regression import (  # noqa: E402
    BayesianLinearRegression as BayesianLinearRegression,
)
from gpdemo.bandits import Bandit as Bandit  # noqa: E402
from gpdemo.session import Session as Session  # noqa: E402
