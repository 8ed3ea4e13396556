# -*- coding: utf-8 -*-
# Copyright (C) 2026 by tvdenoise Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the tvdenoise package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Type definitions."""

from typing import Tuple, TypeAlias, Union

import numpy as np

import jax

Array: TypeAlias = Union[np.ndarray, jax.Array]
"""A numpy or jax array."""

PRNGKey: TypeAlias = jax.Array
"""A key for jax random number generators (see :mod:`jax.random`)."""

Shape: TypeAlias = Tuple[int, ...]
"""A shape of a numpy or jax array."""

PlanarShape: TypeAlias = Tuple[int, int, int]
"""Shape (channels, height, width) of a planar image buffer."""
