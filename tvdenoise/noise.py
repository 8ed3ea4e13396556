# -*- coding: utf-8 -*-
# Copyright (C) 2026 by tvdenoise Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the tvdenoise package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Noise models.

Each noise model determines the data fidelity term of the denoising
functional, an empirical closed-form estimate of the fidelity strength
:math:`\\lambda` for a given noise standard deviation :math:`\\sigma`,
and the rule used to correct :math:`\\lambda` from the measured residual
when tuning it by the discrepancy principle.
"""

# Needed to annotate a class method that returns the encapsulating class;
# see https://www.python.org/dev/peps/pep-0563/
from __future__ import annotations

import enum
import math
from typing import Union

from tvdenoise.functional import Fidelity, L1Fidelity, PoissonFidelity, SquaredL2Fidelity
from tvdenoise.typing import Array

MIN_LAMBDA = 1e-4
"""Lower bound on the initial fidelity strength estimate."""


class NoiseModel(enum.Enum):
    r"""Supported noise models.

    ``GAUSSIAN``
      Additive white Gaussian noise, :math:`y_n \sim
      \mathcal{N}(x_n, \sigma^2)`.
    ``LAPLACE``
      Laplace noise, :math:`y_n \sim \mathrm{Laplace}(x_n,
      \sigma / \sqrt{2})`.
    ``POISSON``
      Poisson noise, :math:`y_n \sim a \, \mathrm{Poisson}(x_n / a)`
      with :math:`a = \sigma^2 / \bar{x}`.
    """

    GAUSSIAN = "gaussian"
    LAPLACE = "laplace"
    POISSON = "poisson"

    def __str__(self) -> str:
        return self.value

    @property
    def title(self) -> str:
        """Capitalized model name."""
        return self.value.capitalize()

    @classmethod
    def from_name(cls, name: Union[str, NoiseModel]) -> NoiseModel:
        """Get the noise model with the specified name.

        Args:
            name: One of "gaussian", "laplace", or "poisson". A
               :class:`NoiseModel` is returned unchanged.

        Returns:
            Selected noise model.

        Raises:
            ValueError: If `name` is not a recognized model name.
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f'Unrecognized noise model "{name}"') from None

    def initial_lambda(self, sigma: float) -> float:
        r"""Estimate the fidelity strength for a given noise level.

        The estimates are empirical fits of the tuned :math:`\lambda` as
        a function of :math:`\sigma`

        - gaussian: :math:`0.7079 / \sigma + 0.002686 / \sigma^2`
        - laplace: :math:`(-0.00416 \sigma + 0.001301) / (((\sigma -
          0.2042) \sigma + 0.01635) \sigma + 0.0005836)`
        - poisson: :math:`0.2839 / \sigma + 0.001502 / \sigma^2`

        and the result is clamped below at :data:`MIN_LAMBDA`, since the
        fits are not guaranteed positive for large :math:`\sigma`.

        Args:
            sigma: Noise standard deviation (intensities in [0, 1]).

        Returns:
            Initial fidelity strength estimate.

        Raises:
            ValueError: If `sigma` is not positive.
        """
        if sigma <= 0:
            raise ValueError(f"Noise standard deviation must be positive; got {sigma}")
        if self is NoiseModel.GAUSSIAN:
            lam = 0.7079 / sigma + 0.002686 / (sigma * sigma)
        elif self is NoiseModel.LAPLACE:
            lam = (-0.00416 * sigma + 0.001301) / (
                ((sigma - 0.2042) * sigma + 0.01635) * sigma + 5.836e-4
            )
        else:
            lam = 0.2839 / sigma + 0.001502 / (sigma * sigma)
        return max(lam, MIN_LAMBDA)

    def correct_lambda(self, lam: float, rmse: float, sigma: float) -> float:
        r"""Correct the fidelity strength from the measured residual.

        The update is multiplicative in the ratio :math:`r =
        \mathrm{RMSE} / \sigma`: :math:`\lambda r^{1/2}` for the laplace
        model, whose residual is more sensitive to :math:`\lambda` near
        the target, and :math:`\lambda r` otherwise. A residual above the
        target increases :math:`\lambda`.

        Args:
            lam: Current fidelity strength.
            rmse: Residual between noisy and denoised images.
            sigma: Target noise standard deviation.

        Returns:
            Corrected fidelity strength.
        """
        ratio = rmse / sigma
        if self is NoiseModel.LAPLACE:
            return lam * math.sqrt(ratio)
        return lam * ratio

    def fidelity(self, y: Array, lam: float) -> Fidelity:
        r"""Construct the fidelity functional for this noise model.

        Args:
            y: Noisy image.
            lam: Fidelity strength :math:`\lambda`.

        Returns:
            :class:`.SquaredL2Fidelity`, :class:`.L1Fidelity`, or
            :class:`.PoissonFidelity` for the gaussian, laplace, and
            poisson models respectively.
        """
        return {
            NoiseModel.GAUSSIAN: SquaredL2Fidelity,
            NoiseModel.LAPLACE: L1Fidelity,
            NoiseModel.POISSON: PoissonFidelity,
        }[self](y, lam)
