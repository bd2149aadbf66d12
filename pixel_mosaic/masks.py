import numpy as np


def radial_masks(width, height):
    """
    Complementary radial weights for a (width, height) window.

    The inner mask is the distance of each pixel to the window centre and the
    outer mask is ``hypot(width, height)`` minus that distance, so
    ``inner + outer`` is constant. Both are returned as (h, w, 1) arrays that
    broadcast over the four channels.
    """
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
    distance = np.hypot(xs - width / 2.0, ys - height / 2.0)
    inner = distance
    outer = np.float32(np.hypot(width, height)) - distance
    return inner[:, :, np.newaxis], outer[:, :, np.newaxis]
