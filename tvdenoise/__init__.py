# Copyright (C) 2026 by tvdenoise Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the tvdenoise package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Total variation regularized image denoising with automatic selection
of the fidelity strength by the discrepancy principle.
"""

__version__ = "0.1.0"

import logging

# isort: off

# Suppress jax device warning. See https://github.com/google/jax/issues/6805
logging.getLogger("jax._src.xla_bridge").addFilter(
    logging.Filter("No GPU/TPU found, falling back to CPU.")
)

# isort: on

import jax

# Image buffers are float64 planes; keep jax computations in the same precision.
jax.config.update("jax_enable_x64", True)

