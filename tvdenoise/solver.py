# -*- coding: utf-8 -*-
# Copyright (C) 2026 by tvdenoise Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the tvdenoise package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Total variation regularized image restoration."""

# Needed to annotate a class method that returns the encapsulating class;
# see https://www.python.org/dev/peps/pep-0563/
from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import numpy as np

import jax
import jax.numpy as jnp

from tvdenoise.diagnostics import IterationStats
from tvdenoise.functional import Fidelity, TVNorm
from tvdenoise.linop import Gradient
from tvdenoise.noise import NoiseModel
from tvdenoise.typing import Array
from tvdenoise.util import Timer

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class SolverOptions:
    """Options for :func:`tv_restore`.

    A single instance is shared by all solves of one denoising run; the
    fidelity strength is updated between tuning rounds, and the tolerance
    and iteration limit between the tuning phase and the final solve.
    """

    #: Fidelity strength :math:`\lambda`.
    lam: float = 25.0
    #: Noise model, as a :class:`.NoiseModel` or its name.
    model: Union[NoiseModel, str] = NoiseModel.GAUSSIAN
    #: Convergence tolerance on the relative change of the solution.
    tol: float = 1e-3
    #: Maximum number of iterations.
    maxiter: int = 100
    #: Function called with the :class:`TVRestore` object at the end of
    #: every iteration.
    plot_fun: Optional[Callable[[TVRestore], None]] = None

    def __post_init__(self):
        self.model = NoiseModel.from_name(self.model)

    def validate(self):
        """Check option values.

        Raises:
            ValueError: If the noise model is not recognized, or `lam`,
               `tol`, or `maxiter` are not positive.
        """
        self.model = NoiseModel.from_name(self.model)
        if not self.lam > 0:
            raise ValueError(f"Fidelity strength lam must be positive; got {self.lam}")
        if not self.tol > 0:
            raise ValueError(f"Tolerance tol must be positive; got {self.tol}")
        if not self.maxiter > 0:
            raise ValueError(f"Iteration limit maxiter must be positive; got {self.maxiter}")


class Optimizer:
    """Base class for iterative optimizers.

    Attributes:
        itnum (int): Optimizer iteration counter.
        maxiter (int): Maximum number of iterations.
        tol (float): Stopping tolerance on :meth:`norm_change`.
        converged (bool): Flag indicating whether the most recent call
          of :meth:`solve` stopped due to the tolerance being reached.
        timer (:class:`.Timer`): Iteration timer.
    """

    def __init__(self, **kwargs: Any):
        """Initialize common attributes of :class:`Optimizer` objects.

        Args:
            **kwargs: Optional parameter dict. Valid keys are:

                iter0:
                  Initial value of iteration counter. Default value is 0.

                maxiter:
                  Maximum iterations on call to :meth:`solve`. Default
                  value is 100.

                tol:
                  Iterations stop when :meth:`norm_change` falls below
                  this value. Default value is 0, i.e. run for `maxiter`
                  iterations.

                nanstop:
                  If ``True``, raise :exc:`ValueError` if a ``NaN`` or
                  ``Inf`` value is encountered in a solver working
                  variable. Default value is ``False``.

                itstat_options:
                  A dict of named parameters to be passed to the
                  :class:`.diagnostics.IterationStats` initializer,
                  updating the defaults (no display).
        """
        iter0 = kwargs.pop("iter0", 0)
        self.maxiter: int = kwargs.pop("maxiter", 100)
        self.tol: float = kwargs.pop("tol", 0.0)
        self.nanstop: bool = kwargs.pop("nanstop", False)
        itstat_options = kwargs.pop("itstat_options", None)

        if kwargs:
            raise TypeError(f"Unrecognized keyword argument(s) {', '.join([k for k in kwargs])}")

        self.itnum: int = iter0
        self.converged: bool = False
        self.timer: Timer = Timer()

        fields, self._itstat_attrib = self._itstat_fields()
        options: Dict[str, Any] = {"fields": fields, "display": False}
        if itstat_options:
            options.update(itstat_options)
        self.itstat_object = IterationStats(**options)

    def _itstat_fields(self) -> Tuple[Dict[str, str], List[Callable[[Optimizer], Any]]]:
        """Define iteration statistics fields.

        Return a dict mapping field names to format strings, and a list
        of functions of the optimizer computing the corresponding values.
        """
        fields = {"Iter": "%d", "Time": "%8.2e"}
        attrib: List[Callable[[Optimizer], Any]] = [
            lambda obj: obj.itnum,
            lambda obj: obj.timer.elapsed(),
        ]
        return fields, attrib

    def _working_vars_finite(self) -> bool:
        """Return ``False`` if a ``NaN`` or ``Inf`` value is encountered
        in a solver working variable.
        """
        raise NotImplementedError(
            f"Method _working_vars_finite is not implemented for {type(self)}."
        )

    def history(self, transpose: bool = False):
        """Retrieve record of algorithm iterations.

        Args:
            transpose: Flag indicating whether results should be returned
                in "transposed" form, i.e. as a namedtuple of lists
                rather than a list of namedtuples.

        Returns:
            Record of all iterations.
        """
        return self.itstat_object.history(transpose=transpose)

    def minimizer(self) -> Array:
        """Return the current estimate of the functional minimizer."""
        raise NotImplementedError(f"Method minimizer is not implemented for {type(self)}.")

    def norm_change(self) -> float:
        """Measure of the change in the solution in the last iteration."""
        raise NotImplementedError(f"Method norm_change is not implemented for {type(self)}.")

    def step(self):
        """Perform a single optimizer step."""
        raise NotImplementedError(f"Method step is not implemented for {type(self)}.")

    def solve(
        self,
        callback: Optional[Callable[[Optimizer], None]] = None,
    ) -> Array:
        r"""Run the optimization algorithm.

        Run at most `self.maxiter` iterations, stopping early when
        :meth:`norm_change` falls below `self.tol`.

        Args:
            callback: An optional callback function, taking an a single
              argument of type :class:`Optimizer`, that is called
              at the end of every iteration.

        Returns:
            Computed solution.

        Raises:
            ValueError: If `nanstop` is set and a ``NaN`` or ``Inf``
              value is encountered.
        """
        self.converged = False
        self.timer.start()
        for self.itnum in range(self.itnum, self.itnum + self.maxiter):
            self.step()
            if self.nanstop and not self._working_vars_finite():
                raise ValueError(
                    f"NaN or Inf value encountered in working variable in iteration {self.itnum}."
                )
            self.itstat_object.insert([func(self) for func in self._itstat_attrib])
            if callback:
                self.timer.stop()
                callback(self)
                self.timer.start()
            if self.norm_change() < self.tol:
                self.converged = True
                break
        self.timer.stop()
        self.itnum += 1
        return self.minimizer()


@jax.jit
def _pdhg_step(f: Fidelity, x: Array, z: Array, tau: float, sigma: float) -> Tuple[Array, Array]:
    """Single primal-dual iteration for fidelity `f` and vectorial TV.

    Compiled once per fidelity type and array shape; the fidelity
    strength and step sizes are traced arguments.
    """
    G = Gradient(x.shape, input_dtype=x.dtype, jit=False)
    xn = f.prox(x - tau * G.adj(z), tau)
    zn = TVNorm().conj_prox(z + sigma * G(2.0 * xn - x), sigma)
    return xn, zn


class TVRestore(Optimizer):
    r"""Total variation regularized restoration of a noisy image.

    Solve

    .. math::
        \argmin_{\mb{x}} \; F_\lambda(\mb{x}) + \mathrm{TV}(\mb{x}) \;,

    where :math:`F_\lambda` is the fidelity functional of the selected
    :class:`.NoiseModel` with fidelity strength :math:`\lambda`, and
    :math:`\mathrm{TV}` is the vectorial isotropic total variation
    (:class:`.TVNorm` composed with :class:`.Gradient`), using the
    Chambolle-Pock primal-dual hybrid gradient iterations

    .. math::
       \begin{aligned}
       \mb{x}^{(k+1)} &= \mathrm{prox}_{\tau F_\lambda} \left(
       \mb{x}^{(k)} - \tau \nabla^T \mb{z}^{(k)} \right) \\
       \mb{z}^{(k+1)} &= \mathrm{prox}_{\sigma \mathrm{TV}^*} \left(
       \mb{z}^{(k)} + \sigma \nabla (2 \mb{x}^{(k+1)} - \mb{x}^{(k)})
       \right) \;,
       \end{aligned}

    with step sizes satisfying :math:`\tau \sigma \| \nabla \|_2^2 < 1`.
    Iterations stop when the relative change

    .. math::
       \norm{\mb{x}^{(k+1)} - \mb{x}^{(k)}}_2 / \norm{\mb{x}^{(k+1)}}_2

    falls below `tol`.

    Attributes:
        f (:class:`.Fidelity`): Fidelity functional :math:`F_\lambda`.
        g (:class:`.TVNorm`): Total variation norm.
        G (:class:`.Gradient`): Gradient operator :math:`\nabla`.
        tau (scalar): Primal step size.
        sigma (scalar): Dual step size.
        x (array-like): Primal variable :math:`\mb{x}` at current
          iteration.
        x_old (array-like): Primal variable :math:`\mb{x}` at previous
          iteration.
        z (array-like): Dual variable :math:`\mb{z}` at current
          iteration.
    """

    def __init__(
        self,
        y: Array,
        model: Union[NoiseModel, str],
        lam: float,
        x0: Optional[Array] = None,
        z0: Optional[Array] = None,
        tau: Optional[float] = None,
        sigma: Optional[float] = None,
        **kwargs,
    ):
        r"""
        Args:
            y: Noisy image of shape (channels, height, width).
            model: Noise model selecting the fidelity functional.
            lam: Fidelity strength :math:`\lambda`.
            x0: Starting point for :math:`\mb{x}`. If ``None``, defaults
               to `y`.
            z0: Starting point for :math:`\mb{z}`. If ``None``, defaults
               to an array of zeros.
            tau: Primal step size. If ``None``, defaults to
               :math:`0.99 / \| \nabla \|_2`.
            sigma: Dual step size. If ``None``, defaults to
               :math:`0.99 / \| \nabla \|_2`.
            **kwargs: Additional optional parameters handled by
                initializer of base class :class:`Optimizer`.
        """
        y = jnp.asarray(y)
        self.model = NoiseModel.from_name(model)
        self.f: Fidelity = self.model.fidelity(y, lam)
        self.g = TVNorm()
        self.G = Gradient(y.shape, input_dtype=y.dtype)
        Gnrm = self.G.norm_bound()
        self.tau: float = 0.99 / Gnrm if tau is None else tau
        self.sigma: float = 0.99 / Gnrm if sigma is None else sigma

        self.x = y if x0 is None else jnp.asarray(x0, dtype=y.dtype)
        if self.x.shape != y.shape:
            raise ValueError(f"Initial estimate shape {self.x.shape} differs from {y.shape}")
        self.x_old = self.x
        self.z = jnp.zeros(self.G.output_shape, dtype=y.dtype) if z0 is None else z0

        super().__init__(**kwargs)

    def _itstat_fields(self):
        fields, attrib = super()._itstat_fields()
        fields.update({"Objective": "%9.3e", "Rel Chng": "%9.3e"})
        attrib.extend([lambda obj: obj.objective(), lambda obj: obj.norm_change()])
        return fields, attrib

    def _working_vars_finite(self) -> bool:
        return bool(jnp.all(jnp.isfinite(self.x)) and jnp.all(jnp.isfinite(self.z)))

    def minimizer(self) -> Array:
        return self.x

    def objective(self, x: Optional[Array] = None) -> float:
        r"""Evaluate the objective function

        .. math::
            F_\lambda(\mb{x}) + \mathrm{TV}(\mb{x}) \;.

        Args:
            x: Point at which to evaluate objective function. If ``None``,
                the objective is evaluated at the current iterate
                :code:`self.x`.

        Returns:
            Value of the objective function.
        """
        if x is None:
            x = self.x
        return float(self.f(x) + self.g(self.G(x)))

    def norm_change(self) -> float:
        """Relative change of the primal variable in the last iteration."""
        diff = float(jnp.linalg.norm(self.x - self.x_old))
        nrm = float(jnp.linalg.norm(self.x))
        return diff / nrm if nrm > 0 else diff

    def step(self):
        """Perform a single iteration."""
        self.x_old = self.x
        self.x, self.z = _pdhg_step(self.f, self.x, self.z, self.tau, self.sigma)


def tv_restore(u: np.ndarray, f: Array, options: SolverOptions) -> bool:
    """Total variation regularized restoration.

    Restore noisy image `f` with the fidelity strength, noise model,
    tolerance, and iteration limit in `options`, starting from the
    estimate in `u`. The result is written to `u` in place, so that
    repeated calls with different options warm-start from the previous
    solution.

    Args:
        u: Initial estimate, overwritten with the restored image. Array
           of shape (channels, height, width).
        f: Noisy image, with the same shape as `u`.
        options: Solver options.

    Returns:
        ``True`` if the tolerance was reached, ``False`` if the
        iteration limit was reached first.

    Raises:
        ValueError: If the options are invalid, the shapes differ, or
           the computation produces ``NaN`` or ``Inf`` values.
    """
    options.validate()
    if u.shape != f.shape:
        raise ValueError(f"Image shapes {u.shape} and {f.shape} are not the same")
    solver = TVRestore(
        f,
        options.model,
        options.lam,
        x0=u,
        tol=options.tol,
        maxiter=options.maxiter,
        nanstop=True,
    )
    x = solver.solve(callback=options.plot_fun)
    np.copyto(u, np.asarray(x), casting="same_kind")
    if solver.converged:
        logger.debug("tv_restore: lam=%g converged in %d iterations", options.lam, solver.itnum)
    else:
        logger.debug(
            "tv_restore: lam=%g reached maxiter=%d without tol=%g",
            options.lam,
            options.maxiter,
            options.tol,
        )
    return solver.converged
