# -*- coding: utf-8 -*-
# Copyright (C) 2026 by tvdenoise Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the tvdenoise package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Linear operators on planar image arrays."""

# Needed to annotate a class method that returns the encapsulating class;
# see https://www.python.org/dev/peps/pep-0563/
from __future__ import annotations

from typing import Callable, Optional

import numpy as np

import jax
import jax.numpy as jnp

from tvdenoise.typing import Array, Shape


class LinearOperator:
    """Generic linear operator with jitted evaluation and adjoint.

    Attributes:
        input_shape (tuple): Shape of input array.
        output_shape (tuple): Shape of output array.
        input_dtype (dtype): `dtype` of input array.
    """

    def __init__(
        self,
        input_shape: Shape,
        output_shape: Shape,
        eval_fn: Optional[Callable] = None,
        adj_fn: Optional[Callable] = None,
        input_dtype=np.float64,
        jit: bool = True,
    ):
        r"""
        Args:
            input_shape: Shape of input array.
            output_shape: Shape of output array.
            eval_fn: Function used in evaluating this
                :class:`LinearOperator`. If ``None``, method `_eval`
                must be defined in a derived class.
            adj_fn: Function used to evaluate the adjoint of this
                :class:`LinearOperator`. If ``None``, method `_adj` must
                be defined in a derived class.
            input_dtype: `dtype` for input argument.
            jit: If ``True``, jit the forward and adjoint functions.
        """
        self.input_shape = tuple(input_shape)
        self.output_shape = tuple(output_shape)
        self.input_dtype = input_dtype
        if eval_fn is not None:
            self._eval = eval_fn
        if adj_fn is not None:
            self._adj = adj_fn
        if jit:
            self._eval = jax.jit(self._eval)
            self._adj = jax.jit(self._adj)

    @property
    def shape(self):
        """Shape of the operator as a (output shape, input shape) tuple."""
        return (self.output_shape, self.input_shape)

    def _eval(self, x: Array) -> Array:
        raise NotImplementedError(f"Forward evaluation is not implemented for {type(self)}")

    def _adj(self, y: Array) -> Array:
        raise NotImplementedError(f"Adjoint is not implemented for {type(self)}")

    def __call__(self, x: Array) -> Array:
        if x.shape != self.input_shape:
            raise ValueError(
                f"Shapes do not conform: input array with shape {x.shape} "
                f"and operator with shape {self.shape}"
            )
        return self._eval(x)

    def __matmul__(self, x: Array) -> Array:
        return self(x)

    def adj(self, y: Array) -> Array:
        """Adjoint of this :class:`LinearOperator`.

        Args:
            y: Point at which to compute adjoint, with shape equal to
               `self.output_shape`.

        Returns:
            Result of adjoint evaluated at `y`.
        """
        if y.shape != self.output_shape:
            raise ValueError(
                f"Shapes do not conform: input array with shape {y.shape} "
                f"and adjoint of operator with shape {self.shape}"
            )
        return self._adj(y)

    def norm_bound(self) -> float:
        """Upper bound on the spectral norm of the operator."""
        raise NotImplementedError(f"Norm bound is not available for {type(self)}")


class Gradient(LinearOperator):
    r"""Discrete gradient of a planar multi-channel image.

    Maps an array of shape (channels, height, width) to an array of
    shape (2, channels, height, width) holding forward differences
    along the horizontal (index 0) and vertical (index 1) directions.
    The boundary condition is symmetric (Neumann): the difference across
    the last column/row is zero. The adjoint is the negative of the
    corresponding discrete divergence, and

    .. math::
        \| \nabla \|_2^2 \leq 8 \;.

    Example
    -------
    >>> G = Gradient((1, 2, 3))
    >>> x = jnp.array([[[1.0, 2.0, 4.0], [0.0, 4.0, 1.0]]])
    >>> G(x)[0, 0]
    Array([[ 1.,  2.,  0.],
           [ 4., -3.,  0.]], dtype=float64)
    """

    def __init__(self, input_shape: Shape, input_dtype=np.float64, jit: bool = True):
        """
        Args:
            input_shape: Shape (channels, height, width) of input array.
            input_dtype: `dtype` for input argument.
            jit: If ``True``, jit the forward and adjoint functions.
        """
        if len(input_shape) != 3:
            raise ValueError(
                f"Gradient requires a planar (channels, height, width) shape; got {input_shape}"
            )
        super().__init__(
            input_shape, (2,) + tuple(input_shape), input_dtype=input_dtype, jit=jit
        )

    def _eval(self, x: Array) -> Array:
        gx = jnp.diff(x, axis=-1, append=x[..., -1:])
        gy = jnp.diff(x, axis=-2, append=x[..., -1:, :])
        return jnp.stack((gx, gy))

    @staticmethod
    def _diff_adj(z: Array, axis: int) -> Array:
        # entries across the final boundary are excluded by the forward operator
        z = jnp.moveaxis(z, axis, -1)
        z = z.at[..., -1].set(0)
        zs = jnp.concatenate((jnp.zeros_like(z[..., :1]), z[..., :-1]), axis=-1)
        return jnp.moveaxis(zs - z, -1, axis)

    def _adj(self, y: Array) -> Array:
        return self._diff_adj(y[0], -1) + self._diff_adj(y[1], -2)

    def norm_bound(self) -> float:
        return float(np.sqrt(8.0))
