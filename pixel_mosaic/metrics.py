from collections import namedtuple

import cv2
import numpy as np
from skimage.color import lab2lch, rgb2lab
from skimage.metrics import structural_similarity as ssim

# Stability constants of the standard SSIM formulation for a unit data range.
K1 = 0.01
K2 = 0.03

# Upper bound of the chroma channel for sRGB input.
_MAX_CHROMA = 134.0

SSIMComponents = namedtuple("SSIMComponents", ["structure", "contrast", "luminance"])


def ssim_components(x, y, data_range=1.0):
    """
    Structure, contrast and luminance comparison of two same-size images.

    Each term is evaluated per channel over the whole image and the channels
    are averaged with equal weight. Every term lies in [-1, 1] and equals 1
    for identical inputs.
    """
    if x.shape != y.shape:
        raise ValueError(f"Shape mismatch: {x.shape} vs {y.shape}")

    c1 = (K1 * data_range) ** 2
    c2 = (K2 * data_range) ** 2
    c3 = c2 / 2.0

    x = x.reshape(-1, x.shape[-1]).astype(np.float64)
    y = y.reshape(-1, y.shape[-1]).astype(np.float64)

    mu_x = x.mean(axis=0)
    mu_y = y.mean(axis=0)
    dx = x - mu_x
    dy = y - mu_y
    var_x = (dx * dx).mean(axis=0)
    var_y = (dy * dy).mean(axis=0)
    cov_xy = (dx * dy).mean(axis=0)
    sigma_x_sigma_y = np.sqrt(var_x * var_y)

    luminance = (2.0 * mu_x * mu_y + c1) / (mu_x ** 2 + mu_y ** 2 + c1)
    contrast = (2.0 * sigma_x_sigma_y + c2) / (var_x + var_y + c2)
    structure = (cov_xy + c3) / (sigma_x_sigma_y + c3)

    return SSIMComponents(
        float(structure.mean()),
        float(contrast.mean()),
        float(luminance.mean()),
    )


def to_lch(image):
    """RGB(A) in [0, 1] -> LCh with every channel scaled to roughly [0, 1]."""
    lch = lab2lch(rgb2lab(np.clip(image[..., :3], 0.0, 1.0)))
    lch[..., 0] /= 100.0
    lch[..., 1] /= _MAX_CHROMA
    lch[..., 2] /= 2.0 * np.pi
    return lch


def color_covariance(x, y):
    """Channel-wise co-variation of two images in the LCh colour space."""
    return ssim_components(to_lch(x), to_lch(y))


# ======================
# Run-quality report
# ======================

def _to_uint8_rgb(image):
    return (np.clip(image[..., :3], 0.0, 1.0) * 255.0).round().astype(np.uint8)


def _match_size(src, target):
    """
    Resize src image to match target spatial dimensions.
    """
    return cv2.resize(src, (target.shape[1], target.shape[0]), interpolation=cv2.INTER_AREA)


def compute_metrics(target, mosaic):
    """
    Compare a finished mosaic against the target it was built from.

    Both images are float RGBA in [0, 1]. The mosaic is resized to the
    target resolution before comparison.
    """
    target = _to_uint8_rgb(target)
    mosaic = _to_uint8_rgb(mosaic)
    if mosaic.shape != target.shape:
        mosaic = _match_size(mosaic, target)

    # ======================
    # SSIM (structure preservation)
    # ======================
    gray_t = cv2.cvtColor(target, cv2.COLOR_RGB2GRAY)
    gray_m = cv2.cvtColor(mosaic, cv2.COLOR_RGB2GRAY)

    side = min(gray_t.shape)
    win_size = min(7, side if side % 2 else side - 1)
    if win_size >= 3:
        ssim_score = ssim(gray_t, gray_m, data_range=255, win_size=win_size)
    else:
        ssim_score = float("nan")

    # ======================
    # Color histogram similarity
    # ======================
    # compareHist expects a single column; 3-D histograms are flattened first.
    hist_target = cv2.calcHist([target], [0, 1, 2], None, [8, 8, 8], [0, 256, 0, 256, 0, 256]).reshape(-1, 1)
    hist_mosaic = cv2.calcHist([mosaic], [0, 1, 2], None, [8, 8, 8], [0, 256, 0, 256, 0, 256]).reshape(-1, 1)

    hist_target = cv2.normalize(hist_target, None)
    hist_mosaic = cv2.normalize(hist_mosaic, None)

    hist_score = cv2.compareHist(hist_target, hist_mosaic, cv2.HISTCMP_CORREL)

    return {
        "SSIM": round(float(ssim_score), 4),
        "Color Corr": round(float(hist_score), 4),
    }
