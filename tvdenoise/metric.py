# -*- coding: utf-8 -*-
# Copyright (C) 2026 by tvdenoise Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the tvdenoise package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Image quality metrics."""

from typing import Optional, Union

import numpy as np

import jax.numpy as jnp

from tvdenoise.typing import Array


def _check_shapes(reference: Array, comparison: Array):
    if reference.shape != comparison.shape:
        raise ValueError(
            f"Image shapes {reference.shape} and {comparison.shape} are not the same"
        )


def mae(reference: Array, comparison: Array) -> float:
    """Compute Mean Absolute Error (MAE) between two images.

    Args:
        reference: Reference image.
        comparison: Comparison image.

    Returns:
        MAE between `reference` and `comparison`.
    """
    _check_shapes(reference, comparison)
    return float(jnp.mean(jnp.abs(jnp.asarray(reference) - jnp.asarray(comparison))))


def mse(reference: Array, comparison: Array) -> float:
    """Compute Mean Squared Error (MSE) between two images.

    Args:
        reference: Reference image.
        comparison: Comparison image.

    Returns:
        MSE between `reference` and `comparison`.
    """
    _check_shapes(reference, comparison)
    return float(jnp.mean((jnp.asarray(reference) - jnp.asarray(comparison)) ** 2))


def rmse(reference: Array, comparison: Array) -> float:
    r"""Compute Root Mean Squared Error (RMSE) between two images.

    For images of :math:`N` samples (width :math:`\times` height
    :math:`\times` channels)

    .. math::
        \mathrm{RMSE}(\mb{a}, \mb{b}) = \sqrt{\frac{1}{N} \sum_i
        (a_i - b_i)^2} \;.

    Args:
        reference: Reference image.
        comparison: Comparison image.

    Returns:
        RMSE between `reference` and `comparison`.

    Raises:
        ValueError: If the image shapes differ.
    """
    return float(np.sqrt(mse(reference, comparison)))


def snr(reference: Array, comparison: Array) -> float:
    """Compute Signal to Noise Ratio (SNR) of two images.

    Args:
        reference: Reference image.
        comparison: Comparison image.

    Returns:
        SNR of `comparison` with respect to `reference`.
    """
    dv = float(jnp.var(jnp.asarray(reference)))
    with np.errstate(divide="ignore"):
        rt = np.float64(dv) / mse(reference, comparison)
    return float(10.0 * np.log10(rt))


def psnr(
    reference: Array,
    comparison: Array,
    signal_range: Optional[Union[int, float]] = None,
) -> float:
    """Compute Peak Signal to Noise Ratio (PSNR) of two images.

    The PSNR calculation defaults to using the actual range (i.e. max
    minus min) of the reference signal instead of the maximum possible
    range for the data type.

    Args:
        reference: Reference image.
        comparison: Comparison image.
        signal_range: Signal range, either the value to use (e.g. 1.0
            for images normalized to [0, 1]) or ``None``, in which case
            the actual range of the reference signal is used.

    Returns:
        PSNR of `comparison` with respect to `reference`.
    """
    if signal_range is None:
        signal_range = float(jnp.max(jnp.asarray(reference)) - jnp.min(jnp.asarray(reference)))
    with np.errstate(divide="ignore"):
        rt = np.float64(signal_range) ** 2 / mse(reference, comparison)
    return float(10.0 * np.log10(rt))
