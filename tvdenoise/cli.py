# -*- coding: utf-8 -*-
# Copyright (C) 2026 by tvdenoise Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the tvdenoise package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Command line interfaces.

Entry points of the ``tvdenoise``, ``imnoise``, and ``imdiff`` console
scripts. Each returns the process exit status: 0 on success (including
when only usage information is printed) and 1 on a configuration,
input/output, or computation error.
"""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

import numpy as np

from tvdenoise import __version__
from tvdenoise.denoise import DISPLAY_SCALE, denoise
from tvdenoise.image import JPEG_QUALITY, Image, read_image, write_image
from tvdenoise.metric import mae, psnr, rmse, snr
from tvdenoise.noise import NoiseModel
from tvdenoise.random import add_noise
from tvdenoise.util import device_info

logger = logging.getLogger(__name__)

MODEL_HELP = """\
noise models:
  gaussian  Additive white Gaussian noise
            Y[n] ~ Normal(X[n], sigma^2)
  laplace   Laplace noise
            Y[n] ~ Laplace(X[n], sigma/sqrt(2))
  poisson   Poisson noise
            Y[n] ~ Poisson(X[n]/a) a
            where a = sigma^2 / (mean X)
"""


def parse_model(arg: str) -> Tuple[NoiseModel, Optional[float]]:
    """Parse a noise model specification of the form `model[:sigma]`.

    Args:
        arg: Model name, optionally followed by a colon and the noise
           standard deviation in display units (intensities in [0, 255]).

    Returns:
        A tuple of the noise model and the normalized standard deviation
        (``None`` if not specified).

    Raises:
        ValueError: If the model is not recognized or sigma is not a
           positive number.
    """
    name, sep, sigma_str = arg.partition(":")
    model = NoiseModel.from_name(name)
    if not sep:
        return model, None
    try:
        sigma = float(sigma_str) / DISPLAY_SCALE
    except ValueError:
        raise ValueError(f'Invalid sigma "{sigma_str}"') from None
    if not sigma > 0:
        raise ValueError("sigma must be positive")
    return model, sigma


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )
    if verbose:
        logger.debug("Running on %s", device_info())


def _error(msg) -> int:
    print(f"Error: {msg}", file=sys.stderr)
    return 1


def denoise_parser() -> argparse.ArgumentParser:
    """Construct the argument parser of the ``tvdenoise`` command."""
    parser = argparse.ArgumentParser(
        prog="tvdenoise",
        description="Total variation regularized denoising. Either lambda (the fidelity "
        "strength) or sigma (the noise standard deviation) should be specified. If sigma "
        "is specified, lambda is selected automatically by the discrepancy principle.",
        epilog=MODEL_HELP + "\nexample:\n  tvdenoise -n laplace:10 noisy.bmp denoised.bmp\n",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("noisy", help="Noisy input image")
    parser.add_argument("denoised", help="Denoised output image")
    parser.add_argument(
        "-n",
        dest="model",
        default="gaussian",
        metavar="<model>[:<sigma>]",
        help="Noise model, optionally with noise standard deviation sigma in [0, 255] "
        "intensity units (default: gaussian)",
    )
    parser.add_argument(
        "-l", dest="lam", type=float, default=None, metavar="<number>", help="Fidelity strength"
    )
    parser.add_argument(
        "-q",
        dest="quality",
        type=int,
        default=JPEG_QUALITY,
        metavar="<number>",
        help=f"Quality for saving JPEG images, 1 to 100 (default: {JPEG_QUALITY})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the ``tvdenoise`` command."""
    parser = denoise_parser()
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        parser.print_help()
        return 0
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        model, sigma = parse_model(args.model)
        if args.lam is not None and not args.lam > 0:
            raise ValueError("lambda must be positive")
        if sigma is None and args.lam is None:
            raise ValueError("Either sigma or lambda must be specified")
        if sigma is not None and args.lam is not None:
            raise ValueError("Only one of sigma or lambda may be specified")
        if not 0 < args.quality <= 100:
            raise ValueError("JPEG quality must be between 1 and 100")
    except ValueError as e:
        return _error(e)

    try:
        f = read_image(args.noisy)
        u = f.empty_like()
        denoise(
            u.data,
            f.data,
            model,
            -1.0 if sigma is None else sigma,
            -1.0 if args.lam is None else args.lam,
        )
        write_image(u, args.denoised, quality=args.quality)
    except (ValueError, OSError, MemoryError) as e:
        return _error(e)
    return 0


def imnoise_main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the ``imnoise`` command."""
    parser = argparse.ArgumentParser(
        prog="imnoise",
        description="Simulate noise on an image.",
        epilog=MODEL_HELP + "\nexample:\n  imnoise gaussian:15 clean.bmp noisy.bmp\n",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "model", metavar="<model>:<sigma>", help="Noise model and standard deviation"
    )
    parser.add_argument("input", help="Clean input image")
    parser.add_argument("output", help="Noisy output image")
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument(
        "-q",
        dest="quality",
        type=int,
        default=JPEG_QUALITY,
        metavar="<number>",
        help=f"Quality for saving JPEG images, 1 to 100 (default: {JPEG_QUALITY})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        parser.print_help()
        return 0
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        model, sigma = parse_model(args.model)
        if sigma is None:
            raise ValueError("sigma must be specified")
        x = read_image(args.input)
        y, _ = add_noise(x.data, model, sigma, seed=args.seed)
        write_image(Image(y), args.output, quality=args.quality)
    except (ValueError, OSError, MemoryError) as e:
        return _error(e)
    return 0


def imdiff_main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the ``imdiff`` command."""
    parser = argparse.ArgumentParser(
        prog="imdiff",
        description="Compare two images. Differences are reported in [0, 255] intensity units.",
    )
    parser.add_argument("reference", help="Reference image")
    parser.add_argument("compare", help="Image to compare")
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        parser.print_help()
        return 0
    args = parser.parse_args(argv)

    try:
        a = read_image(args.reference)
        b = read_image(args.compare)
        # compare as RGB if only one of the images was reduced to grayscale
        if a.num_channels != b.num_channels:
            a, b = (Image(np.broadcast_to(img.data, (3,) + img.shape[1:])) for img in (a, b))
        err = rmse(a.data, b.data)
        maxdiff = float(np.max(np.abs(a.data - b.data)))
    except (ValueError, OSError, MemoryError) as e:
        return _error(e)

    print(f"Maximum absolute difference:  {DISPLAY_SCALE * maxdiff:g}")
    print(f"Mean absolute error:          {DISPLAY_SCALE * mae(a.data, b.data):.4f}")
    print(f"Root mean squared error:      {DISPLAY_SCALE * err:.4f}")
    print(f"Peak signal-to-noise ratio:   {psnr(a.data, b.data, signal_range=1.0):.4f} dB")
    print(f"Signal-to-noise ratio:        {snr(a.data, b.data):.4f} dB")
    return 0
