# -*- coding: utf-8 -*-
# Copyright (C) 2026 by tvdenoise Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the tvdenoise package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

r"""Total variation denoising with automatic selection of the fidelity
strength.

When the noise standard deviation :math:`\sigma` is known, the fidelity
strength :math:`\lambda` is chosen by the discrepancy principle, i.e. so
that the RMSE between the noisy and denoised images is :math:`\sigma`.
Starting from the closed-form estimate of
:meth:`.NoiseModel.initial_lambda`, :func:`lambda_tune` alternates
low-precision restorations with :meth:`.NoiseModel.correct_lambda`
updates for a fixed number of rounds, and :func:`denoise` follows with
a single high-precision restoration.
"""

import logging
from typing import NamedTuple, Union

import numpy as np

from tvdenoise.diagnostics import IterationStats
from tvdenoise.metric import rmse
from tvdenoise.noise import MIN_LAMBDA, NoiseModel
from tvdenoise.solver import SolverOptions, tv_restore

logger = logging.getLogger(__name__)

DISPLAY_SCALE = 255
"""Intensities are displayed in the range [0, DISPLAY_SCALE]."""

LAMBDA_TUNE_ITERATIONS = 5
"""Number of rounds of fidelity strength tuning."""

TUNE_TOL = 1e-2
"""Solver tolerance during tuning."""

TUNE_MAXITER = 40
"""Solver iteration limit during tuning."""

FINAL_TOL = 5e-4
"""Solver tolerance for the final restoration."""

FINAL_MAXITER = 100
"""Solver iteration limit for the final restoration."""


class TuneResult(NamedTuple):
    """Result of :func:`lambda_tune`."""

    #: Fidelity strength after the last correction.
    lam: float
    #: Table of the fidelity strength used in each round and the
    #: resulting RMSE in display units.
    itstat: IterationStats


def lambda_tune(
    options: SolverOptions,
    u: np.ndarray,
    f: np.ndarray,
    sigma: float,
    verbose: bool = True,
) -> TuneResult:
    """Tune the fidelity strength by the discrepancy principle.

    Each of :data:`LAMBDA_TUNE_ITERATIONS` rounds restores `f` starting
    from the current `u`, which is overwritten with the result, and then
    corrects `options.lam` from the ratio of the residual RMSE to
    `sigma`. There is no convergence test, and the estimate left in `u`
    is the one from the last round rather than the one with residual
    closest to `sigma`. Corrected values are clamped below at
    :data:`.MIN_LAMBDA`.

    Args:
        options: Solver options. Field `lam` is set here; the remaining
           fields are used as given.
        u: Working estimate, updated in place.
        f: Noisy image.
        sigma: Target noise standard deviation.
        verbose: Flag indicating whether to print a progress table.

    Returns:
        The tuned fidelity strength and the table of tuning rounds.

    Raises:
        ValueError: If `sigma` is not positive, or a restoration fails.
    """
    model = NoiseModel.from_name(options.model)
    options.lam = model.initial_lambda(sigma)

    itstat = IterationStats(
        {"lambda": "%9.4f", "distance": "%9.5f"}, ident={"lambda": "lam"}, display=verbose
    )
    if verbose:
        print("Tuning lambda...\n")
        print(f"target distance = {DISPLAY_SCALE * sigma:.5f}")

    for k in range(LAMBDA_TUNE_ITERATIONS):
        # u holds the solution for the previous lambda, a good initial
        # estimate for the current one
        tv_restore(u, f, options)
        res = rmse(f, u)
        itstat.insert((options.lam, DISPLAY_SCALE * res))
        logger.debug("lambda_tune: round %d lam=%g rmse=%g", k, options.lam, res)
        # a residual of zero, e.g. for a constant image, would zero lambda
        options.lam = max(model.correct_lambda(options.lam, res, sigma), MIN_LAMBDA)

    return TuneResult(options.lam, itstat)


def denoise(
    u: np.ndarray,
    f: np.ndarray,
    model: Union[NoiseModel, str],
    sigma: float,
    lam: float,
    verbose: bool = True,
) -> SolverOptions:
    r"""Total variation regularized denoising.

    If `sigma` is positive, the fidelity strength is selected by
    :func:`lambda_tune`, otherwise `lam` is used unchanged. The final
    restoration uses tolerance :data:`FINAL_TOL` and iteration limit
    :data:`FINAL_MAXITER`.

    Args:
        u: Array overwritten with the denoised image.
        f: Noisy image, with the same shape as `u`.
        model: Noise model or its name ("gaussian", "laplace", or
           "poisson").
        sigma: Noise standard deviation, for intensities in [0, 1]. Set
           to zero or a negative value to specify `lam` directly.
        lam: Fidelity strength :math:`\lambda`, used only if `sigma` is
           not positive.
        verbose: Flag indicating whether to print progress information.

    Returns:
        The solver options of the final restoration, including the
        fidelity strength that was used.

    Raises:
        ValueError: If the noise model is not recognized, neither
           `sigma` nor `lam` is positive, the image shapes differ, or a
           restoration fails.
    """
    model = NoiseModel.from_name(model)
    if sigma <= 0 and lam <= 0:
        raise ValueError("Either sigma or lambda must be positive")
    if u.shape != f.shape:
        raise ValueError(f"Image shapes {u.shape} and {f.shape} are not the same")

    if verbose:
        print(f"TV regularized denoising with {model.title} noise model")

    np.copyto(u, f, casting="same_kind")
    options = SolverOptions(model=model, tol=TUNE_TOL, maxiter=TUNE_MAXITER)

    itstat = None
    if sigma <= 0:
        options.lam = lam
    else:
        itstat = lambda_tune(options, u, f, sigma, verbose=verbose).itstat

    options.tol = FINAL_TOL
    options.maxiter = FINAL_MAXITER
    tv_restore(u, f, options)

    if itstat is not None:
        itstat.insert((options.lam, DISPLAY_SCALE * rmse(f, u)))
        if verbose:
            print()

    return options
