# -*- coding: utf-8 -*-
# Copyright (C) 2026 by tvdenoise Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the tvdenoise package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Planar image buffers and image file input/output."""

import os

import numpy as np

import imageio.v3 as iio

from tvdenoise.typing import Array, PlanarShape

JPEG_QUALITY = 95
"""Default quality for writing JPEG images."""


class Image:
    """Planar floating point image.

    Samples are stored in a `numpy` array of shape (channels, height,
    width), i.e. each channel is a contiguous plane.

    Attributes:
        data (ndarray): Image samples.
    """

    def __init__(self, data: Array):
        """
        Args:
            data: Array of shape (channels, height, width).

        Raises:
            ValueError: If `data` is not a non-empty 3D floating point
               array.
        """
        data = np.asarray(data)
        if data.ndim != 3 or data.size == 0:
            raise ValueError(
                f"Image data must be a non-empty (channels, height, width) array; "
                f"got shape {data.shape}"
            )
        if not np.issubdtype(data.dtype, np.floating):
            raise ValueError(f"Image data must be floating point; got {data.dtype}")
        self.data = data

    def __repr__(self):
        return (
            f"Image(width={self.width}, height={self.height}, "
            f"num_channels={self.num_channels}, dtype={self.data.dtype})"
        )

    @property
    def num_channels(self) -> int:
        """Number of channels."""
        return self.data.shape[0]

    @property
    def height(self) -> int:
        """Image height."""
        return self.data.shape[1]

    @property
    def width(self) -> int:
        """Image width."""
        return self.data.shape[2]

    @property
    def shape(self) -> PlanarShape:
        """Shape (channels, height, width) of the image data."""
        return self.data.shape

    def empty_like(self) -> "Image":
        """Allocate an uninitialized image of the same shape and type."""
        return Image(np.empty_like(self.data))


def is_grayscale(rgb: Array) -> bool:
    """Test whether an RGB image is grayscale.

    Args:
        rgb: Planar array of shape (3, height, width).

    Returns:
        ``True`` if the three channels are identical.
    """
    return bool(np.array_equal(rgb[0], rgb[1]) and np.array_equal(rgb[0], rgb[2]))


def _to_float(img: np.ndarray) -> np.ndarray:
    """Convert image samples to float64 in the range [0, 1]."""
    if np.issubdtype(img.dtype, np.integer):
        return img.astype(np.float64) / np.iinfo(img.dtype).max
    return img.astype(np.float64)


def read_image(path: str) -> Image:
    """Read an image file.

    The image is converted to planar RGB with samples in [0, 1]
    (integer samples are divided by the maximum of their type). An alpha
    channel is discarded, and images with identical RGB channels are
    reduced to a single channel.

    Args:
        path: Image file path.

    Returns:
        Image read from `path`.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the image has an unsupported shape.
    """
    img = _to_float(np.asarray(iio.imread(path)))
    if img.ndim == 2:
        img = img[np.newaxis]
    elif img.ndim == 3 and img.shape[-1] in (2, 4):
        # discard alpha
        img = np.moveaxis(img[..., :-1], -1, 0)
    elif img.ndim == 3 and img.shape[-1] == 3:
        img = np.moveaxis(img, -1, 0)
    else:
        raise ValueError(f"Unsupported image shape {img.shape} in {path}")
    if img.shape[0] == 3 and is_grayscale(img):
        img = img[:1]
    return Image(np.ascontiguousarray(img))


def write_image(image: Image, path: str, quality: int = JPEG_QUALITY):
    """Write an image file.

    Samples are clipped to [0, 1] and quantized to 8 bits. The file
    format is determined by the extension of `path`.

    Args:
        image: Image to write, with 1 (grayscale) or 3 (RGB) channels.
        path: Image file path.
        quality: Quality for JPEG files (1 to 100); ignored for other
           formats.

    Raises:
        ValueError: If `quality` is out of range or the image does not
           have 1 or 3 channels.
        OSError: If the file cannot be written.
    """
    if not 0 < quality <= 100:
        raise ValueError(f"JPEG quality must be between 1 and 100; got {quality}")
    if image.num_channels not in (1, 3):
        raise ValueError(f"Cannot write an image with {image.num_channels} channels")
    out = np.round(255 * np.clip(image.data, 0.0, 1.0)).astype(np.uint8)
    out = out[0] if image.num_channels == 1 else np.moveaxis(out, 0, -1)
    kwargs = {}
    if os.path.splitext(path)[1].lower() in (".jpg", ".jpeg"):
        kwargs["quality"] = quality
    iio.imwrite(path, out, **kwargs)
