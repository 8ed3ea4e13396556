# -*- coding: utf-8 -*-
# Copyright (C) 2026 by tvdenoise Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the tvdenoise package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

r"""Functionals and their proximal operators.

The fidelity functionals here measure the agreement between an estimate
:math:`\mb{x}` and a noisy image :math:`\mb{y}` under one of the
supported noise models, each weighted by the fidelity strength
:math:`\lambda`. :class:`TVNorm` is the vectorial isotropic total
variation regularizer.
"""

from functools import partial

import jax
import jax.numpy as jnp
from jax.scipy.special import xlogy

from tvdenoise.linop import Gradient
from tvdenoise.typing import Array


class Functional:
    r"""Base class for functionals.

    A functional maps an array to a scalar. Derived classes set
    `has_eval` and `has_prox` according to whether :meth:`__call__` and
    :meth:`prox` are implemented.
    """

    has_eval = False
    has_prox = False

    def __repr__(self):
        return f"{type(self).__name__}(has_eval={self.has_eval}, has_prox={self.has_prox})"

    def __call__(self, x: Array) -> float:
        raise NotImplementedError(f"Functional {type(self)} cannot be evaluated")

    def prox(self, v: Array, lam: float = 1.0) -> Array:
        r"""Scaled proximal operator of functional.

        Evaluate scaled proximal operator of this functional, with
        scaling :math:`\lambda` = `lam` and evaluated at point
        :math:`\mb{v}` = `v`

        .. math::
           \mathrm{prox}_{\lambda f}(\mb{v}) = \argmin_{\mb{x}}
           \lambda f(\mb{x}) + \frac{1}{2} \norm{\mb{v} - \mb{x}}_2^2 \;.

        Args:
            v: Point at which to evaluate prox function.
            lam: Proximal parameter :math:`\lambda`.
        """
        raise NotImplementedError(f"Functional {type(self)} does not have a prox")

    def conj_prox(self, v: Array, lam: float = 1.0) -> Array:
        r"""Scaled proximal operator of convex conjugate of functional.

        Computed via the extended Moreau decomposition

        .. math::
           \mathrm{prox}_{\lambda f^*}(\mb{v}) = \mb{v} - \lambda
           \mathrm{prox}_{\lambda^{-1} f}(\mb{v} / \lambda) \;.

        Args:
            v: Point at which to evaluate prox function.
            lam: Proximal parameter :math:`\lambda`.
        """
        return v - lam * self.prox(v / lam, 1.0 / lam)


class Fidelity(Functional):
    r"""Base class for data fidelity functionals.

    Attributes:
        y (array-like): Noisy image :math:`\mb{y}`.
        lam (float): Fidelity strength :math:`\lambda`.
    """

    has_eval = True
    has_prox = True

    def __init__(self, y: Array, lam: float):
        r"""
        Args:
            y: Noisy image :math:`\mb{y}`.
            lam: Fidelity strength :math:`\lambda`. Must be positive.
        """
        if lam <= 0:
            raise ValueError(f"Fidelity strength must be positive; got {lam}")
        self.y = jnp.asarray(y)
        self.lam = lam


class SquaredL2Fidelity(Fidelity):
    r"""Squared :math:`\ell_2` fidelity for additive Gaussian noise

    .. math::
        \frac{\lambda}{2} \norm{\mb{x} - \mb{y}}_2^2 \;.
    """

    def __call__(self, x: Array) -> float:
        return 0.5 * self.lam * jnp.sum((x - self.y) ** 2)

    def prox(self, v: Array, lam: float = 1.0) -> Array:
        r"""Closed form :math:`(\mb{v} + \alpha \mb{y}) / (1 + \alpha)`
        with :math:`\alpha = \lambda` `lam`.
        """
        alpha = lam * self.lam
        return (v + alpha * self.y) / (1.0 + alpha)


class L1Fidelity(Fidelity):
    r"""The :math:`\ell_1` fidelity for Laplace noise

    .. math::
        \lambda \norm{\mb{x} - \mb{y}}_1 \;.
    """

    def __call__(self, x: Array) -> float:
        return self.lam * jnp.sum(jnp.abs(x - self.y))

    def prox(self, v: Array, lam: float = 1.0) -> Array:
        """Soft thresholding of `v - y` with threshold ``lam * self.lam``."""
        d = v - self.y
        return self.y + jnp.sign(d) * jnp.maximum(jnp.abs(d) - lam * self.lam, 0.0)


class PoissonFidelity(Fidelity):
    r"""Poisson negative log likelihood fidelity

    .. math::
        \lambda \sum_i x_i - y_i \log x_i \;,

    omitting terms that do not depend on :math:`\mb{x}`. The noisy image
    must be nonnegative.
    """

    def __init__(self, y: Array, lam: float):
        super().__init__(y, lam)
        if jnp.any(self.y < 0):
            raise ValueError("Poisson fidelity requires a nonnegative noisy image")

    def __call__(self, x: Array) -> float:
        return self.lam * jnp.sum(x - xlogy(self.y, x))

    def prox(self, v: Array, lam: float = 1.0) -> Array:
        r"""Positive root of :math:`x^2 - (v - \alpha) x - \alpha y = 0`
        with :math:`\alpha = \lambda` `lam`.
        """
        alpha = lam * self.lam
        b = v - alpha
        return 0.5 * (b + jnp.sqrt(b**2 + 4.0 * alpha * self.y))


class TVNorm(Functional):
    r"""Vectorial isotropic total variation norm.

    For a planar image :math:`\mb{x}` with gradient :math:`\nabla
    \mb{x}` computed by :class:`.Gradient`,

    .. math::
        \mathrm{TV}(\mb{x}) = \sum_{m,n} \sqrt{\sum_{d,c}
        (\nabla \mb{x})_{d,c,m,n}^2} \;,

    where the inner sum couples both differencing directions :math:`d`
    and all color channels :math:`c`. The functional is evaluated on the
    gradient array, not on the image itself.
    """

    has_eval = True
    has_prox = True

    @staticmethod
    def _magnitude(g: Array) -> Array:
        return jnp.sqrt(jnp.sum(g**2, axis=(0, 1)))

    def __call__(self, g: Array) -> float:
        return jnp.sum(self._magnitude(g))

    def prox(self, v: Array, lam: float = 1.0) -> Array:
        """Shrink each pixel's gradient vector towards zero by `lam`."""
        mag = self._magnitude(v)
        return v * jnp.maximum(mag - lam, 0.0) / jnp.maximum(mag, lam)

    def conj_prox(self, v: Array, lam: float = 1.0) -> Array:
        """Projection of each pixel's gradient vector onto the unit ball.

        The convex conjugate is the indicator function of the dual unit
        ball, so the result does not depend on `lam`.
        """
        return v / jnp.maximum(1.0, self._magnitude(v))



def _fidelity_flatten(f: Fidelity):
    return (f.y, f.lam), None


def _fidelity_unflatten(cls, aux_data, children):
    # leaves may be tracers; skip the checks in __init__
    f = object.__new__(cls)
    f.y, f.lam = children
    return f


# fidelities are passed as arguments to jitted solver steps
for _cls in (SquaredL2Fidelity, L1Fidelity, PoissonFidelity):
    jax.tree_util.register_pytree_node(
        _cls, _fidelity_flatten, partial(_fidelity_unflatten, _cls)
    )


def total_variation(x: Array) -> float:
    """Compute the vectorial total variation of a planar image.

    Args:
        x: Image array of shape (channels, height, width).

    Returns:
        Total variation of `x`.
    """
    x = jnp.asarray(x)
    return float(TVNorm()(Gradient(x.shape, input_dtype=x.dtype, jit=False)(x)))

