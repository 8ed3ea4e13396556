# -*- coding: utf-8 -*-
# Copyright (C) 2026 by tvdenoise Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the tvdenoise package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Simulation of noisy images.

Functions in this module take an optional `jax.random
<https://jax.readthedocs.io/en/stable/jax.random.html>`_ PRNG key and
always return a `(result, key)` tuple, where the returned key is a fresh
key for subsequent calls:

::

   y, key = add_noise(x, "gaussian", 10 / 255)
   z, key = add_noise(x, "gaussian", 10 / 255, key=key)

If neither a key nor a seed is passed, a key is created from seed 0, so
repeated calls return the same noise realization.
"""

from typing import Optional, Tuple, Union

import numpy as np

import jax
import jax.numpy as jnp

from tvdenoise.noise import NoiseModel
from tvdenoise.typing import Array, PRNGKey


def _get_key(key: Optional[PRNGKey], seed: Optional[int]) -> PRNGKey:
    if key is not None and seed is not None:
        raise ValueError("Key and seed cannot both be specified")
    if key is None:
        key = jax.random.PRNGKey(0 if seed is None else seed)
    return key


def add_noise(
    x: Array,
    model: Union[NoiseModel, str],
    sigma: float,
    key: Optional[PRNGKey] = None,
    seed: Optional[int] = None,
) -> Tuple[np.ndarray, PRNGKey]:
    r"""Simulate a noisy observation of an image.

    The noise models are

    - gaussian: :math:`y_n \sim \mathcal{N}(x_n, \sigma^2)`,
    - laplace: :math:`y_n \sim \mathrm{Laplace}(x_n, \sigma / \sqrt{2})`,
      i.e. with standard deviation :math:`\sigma`,
    - poisson: :math:`y_n \sim a \, \mathrm{Poisson}(x_n / a)` with
      :math:`a = \sigma^2 / \bar{x}`, so that the noise standard
      deviation is :math:`\sigma` at the mean intensity :math:`\bar{x}`.

    Args:
        x: Clean image, with intensities in [0, 1].
        model: Noise model or its name.
        sigma: Noise standard deviation.
        key: Jax PRNG key. Defaults to ``None``, in which case a new key
           is created from `seed`.
        seed: Seed for the new PRNG key if `key` is ``None``. Defaults
           to 0.

    Returns:
        A tuple (noisy image, new key).

    Raises:
        ValueError: If the model is not recognized, `sigma` is not
           positive, or for the poisson model if `x` is negative or has
           zero mean.
    """
    model = NoiseModel.from_name(model)
    if sigma <= 0:
        raise ValueError(f"Noise standard deviation must be positive; got {sigma}")
    key, subkey = jax.random.split(_get_key(key, seed))
    x = jnp.asarray(x)

    if model is NoiseModel.GAUSSIAN:
        y = x + sigma * jax.random.normal(subkey, x.shape, dtype=x.dtype)
    elif model is NoiseModel.LAPLACE:
        y = x + (sigma / np.sqrt(2.0)) * jax.random.laplace(subkey, x.shape, dtype=x.dtype)
    else:
        mean = float(jnp.mean(x))
        if jnp.any(x < 0) or mean <= 0:
            raise ValueError("Poisson noise requires a nonnegative image with positive mean")
        a = sigma**2 / mean
        y = a * jax.random.poisson(subkey, x / a, shape=x.shape).astype(x.dtype)

    return np.asarray(y), key
