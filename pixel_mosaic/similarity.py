"""
Similarity scores between a target window and a palette tile.

Two matchers are available:

``structural``
    Combines SSIM over radially weighted orientation maps, edge maps and
    pixels with an LCh colour covariance term. Shape is judged near the
    window centre, tone near its edges.

``mean-color``
    Negative Euclidean distance between mean colours. A strict subset of the
    structural matcher, useful for quick previews.

Every scorer returns a :class:`Score`; higher ``value`` is better and a lower
``penalty`` breaks near-ties. Scoring never mutates a tile.
"""

from collections import namedtuple

import numpy as np

from pixel_mosaic.descriptors import edge_map, mean_color, orientation_map
from pixel_mosaic.masks import radial_masks
from pixel_mosaic.metrics import ssim_components, to_lch

Score = namedtuple("Score", ["value", "penalty"])

Window = namedtuple("Window", ["image", "mean_color", "orientation", "edges", "toned", "lch"])


class StructuralScorer:
    """
    Multi-metric score of a window against every tile of one palette.

    Args:
        palette (Palette): Tiles to score against. Their masked descriptors are
            computed once here.
        scale (float): Palette tile size over target image size. Larger values
            favour the local structure term, smaller ones the global tone term.
    """

    name = "structural"

    def __init__(self, palette, scale):
        if scale <= 0:
            raise ValueError(f"scale must be positive, got {scale}")
        self.scale = float(scale)
        self.inner, self.outer = radial_masks(*palette.tile_size)
        self._masked = {
            tile.id: (
                tile.orientation_map * self.inner,
                tile.edge_map * self.inner,
                tile.image * self.outer,
                to_lch(tile.image),
            )
            for tile in palette
        }

    def prepare(self, image):
        """Descriptors of a window, masked the same way as the tiles."""
        return Window(
            image=image,
            mean_color=mean_color(image),
            orientation=orientation_map(image) * self.inner,
            edges=edge_map(image) * self.inner,
            toned=image * self.outer,
            lch=to_lch(image),
        )

    def score(self, window, tile):
        tile_orientation, tile_edges, tile_toned, tile_lch = self._masked[tile.id]

        metric_o = ssim_components(window.orientation, tile_orientation)
        metric_m = ssim_components(window.edges, tile_edges)
        metric_s = ssim_components(window.toned, tile_toned)
        # Colour covariance in LCh, same as metrics.color_covariance.
        cov = ssim_components(window.lch, tile_lch)

        local = (
            (metric_o.structure * metric_m.structure + metric_s.structure ** 2)
            * np.sqrt(abs(metric_m.contrast * metric_o.contrast))
            * np.sqrt(abs(metric_m.luminance * metric_o.luminance))
        )
        tone = metric_s.structure * metric_s.contrast * metric_s.luminance

        # Magnitudes are taken before the powers so fractional exponents stay real.
        value = abs(local) ** self.scale * abs(tone) ** (1.0 / self.scale)
        return Score(float(value), abs(1.0 - cov.structure))


class MeanColorScorer:
    """Closest mean colour wins."""

    name = "mean-color"

    def __init__(self, palette, scale=1.0):
        self.scale = scale

    def prepare(self, image):
        return Window(image, mean_color(image), None, None, None, None)

    def score(self, window, tile):
        distance = np.linalg.norm(window.mean_color - tile.mean_color)
        return Score(-float(distance), 0.0)


SCORERS = {
    StructuralScorer.name: StructuralScorer,
    MeanColorScorer.name: MeanColorScorer,
}


def make_scorer(name, palette, scale):
    try:
        scorer_cls = SCORERS[name]
    except KeyError:
        raise ValueError(f"Unknown matcher {name!r}, choose from {sorted(SCORERS)}") from None
    return scorer_cls(palette, scale)
