# -*- coding: utf-8 -*-
# Copyright (C) 2026 by tvdenoise Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the tvdenoise package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""General utility functions."""


from timeit import default_timer as timer
from typing import Optional

import jax


def device_info(devid: int = 0) -> str:  # pragma: no cover
    """Get a string describing the specified device.

    Args:
        devid: ID number of device.

    Returns:
        Device description string.
    """
    numdev = jax.device_count()
    if devid >= numdev:
        raise RuntimeError(f"Requested information for device {devid} but only {numdev} present")
    dev = jax.devices()[devid]
    if dev.platform == "cpu":
        return "CPU"
    return f"{dev.platform.upper()} ({dev.device_kind})"


class Timer:
    """Accumulating timer.

    The timer is based on the relative time returned by
    :func:`timeit.default_timer`. Time accumulates over successive
    :meth:`start`/:meth:`stop` intervals until :meth:`reset` is called.
    """

    def __init__(self):
        self.t0: Optional[float] = None
        self.td: float = 0.0

    def start(self):
        """Start the timer; no effect if it is already running."""
        if self.t0 is None:
            self.t0 = timer()

    def stop(self):
        """Stop the timer, adding the current interval to the total."""
        if self.t0 is not None:
            self.td += timer() - self.t0
            self.t0 = None

    def reset(self):
        """Stop the timer and set the accumulated time to zero."""
        self.t0 = None
        self.td = 0.0

    def elapsed(self, total: bool = True) -> float:
        """Get elapsed time in seconds.

        Args:
            total: If ``True``, include time accumulated over previous
               intervals, otherwise only the time since the last call to
               :meth:`start` (zero if the timer is stopped).

        Returns:
            Elapsed time.
        """
        current = 0.0 if self.t0 is None else timer() - self.t0
        return self.td + current if total else current

    def __str__(self) -> str:
        return f"{self.elapsed():.2e} s"
