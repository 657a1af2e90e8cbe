# gpdemo/config.py
import logging
import os

import jax
import numpy as np


class _GPDemoConfig:
    def __init__(self):
        self.enable_x64 = os.environ.get("GPDEMO_ENABLE_X64", "1") != "0"
        self.jitter = 1e-6
        # single precision Cholesky needs a larger diagonal
        self.jitter32 = 1e-4
        self.cholesky_floor = 1e-10
        self.degenerate_det = 1e-10
        self.degenerate_fill = 1e10
        self.std_threshold = 1e-3
        self.seed = 0
        # logger lives in config
        self.logger = logging.getLogger("gpdemo")
        if not self.logger.handlers:
            h = logging.StreamHandler()
            h.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
            self.logger.addHandler(h)
        self.logger.setLevel(logging.WARNING)

    def __repr__(self):
        return (
            f"<GPDemoConfig "
            f"enable_x64={self.enable_x64!r}, "
            f"jitter={self.jitter!r}, "
            f"jitter32={self.jitter32!r}, "
            f"cholesky_floor={self.cholesky_floor!r}, "
            f"degenerate_det={self.degenerate_det!r}, "
            f"degenerate_fill={self.degenerate_fill!r}, "
            f"std_threshold={self.std_threshold!r}, "
            f"seed={self.seed!r}>"
        )

    def update(self, **kwargs):
        for k, v in kwargs.items():
            if not hasattr(self, k):
                raise AttributeError(f"unknown configuration option {k!r}")
            setattr(self, k, v)
        return self


_config = _GPDemoConfig()


def get_config():
    return _config


def init_precision():
    """Idempotent. Apply the x64 setting to jax before any arrays are built."""
    jax.config.update("jax_enable_x64", _config.enable_x64)
    return _config.enable_x64


def get_jitter(dtype=None):
    """The diagonal jitter for arrays of ``dtype``

    Below double precision this is at least ``jitter32``.
    """
    if dtype is not None and np.dtype(dtype).itemsize < 8:
        return max(_config.jitter, _config.jitter32)
    return _config.jitter


def get_logger():
    return _config.logger


def set_log_level(level):
    _config.logger.setLevel(level)
