"""
Descriptors computed for palette tiles and target windows.

- mean colour: per-channel average over all pixels
- edge map: discrete Laplacian per channel, borders clamped
- orientation map: local gradient direction per channel, borders clamped

All inputs are float32 (h, w, 4) RGBA buffers.
"""

import numpy as np
from scipy.ndimage import convolve

# 4*p - left - right - up - down
_LAPLACIAN = np.array(
    [[0.0, -1.0, 0.0],
     [-1.0, 4.0, -1.0],
     [0.0, -1.0, 0.0]],
    dtype=np.float32,
)[:, :, np.newaxis]


def mean_color(image):
    """Arithmetic mean of each of the four channels."""
    return image.reshape(-1, image.shape[-1]).mean(axis=0)


def edge_map(image):
    """
    Per-channel Laplacian magnitude.

    Missing neighbours at the border are replaced by the pixel itself
    (``mode="nearest"``), so a uniform image maps to all zeros.
    """
    return convolve(image.astype(np.float32), _LAPLACIAN, mode="nearest")


def orientation_map(image):
    """
    Per-channel gradient direction, mapped so that a flat region is all ones.

    The angle of (down - up, right - left) is divided by pi/2 and subtracted
    from white.
    """
    padded = np.pad(image.astype(np.float32), ((1, 1), (1, 1), (0, 0)), mode="edge")
    vertical = padded[2:, 1:-1] - padded[:-2, 1:-1]
    horizontal = padded[1:-1, 2:] - padded[1:-1, :-2]
    angle = np.arctan2(vertical, horizontal) / (np.pi / 2.0)
    return (1.0 - angle).astype(np.float32)


def describe(image):
    """Mean colour, edge map and orientation map of one image."""
    return mean_color(image), edge_map(image), orientation_map(image)
