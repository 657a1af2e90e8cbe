# -*- coding: utf-8 -*-
# mypy: ignore-errors

import jax

jax.config.update("jax_enable_x64", True)
