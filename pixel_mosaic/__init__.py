"""
Photo-mosaic synthesis.

A target image is cut into tile-sized windows and every window is replaced by
the palette tile that resembles it most in colour, edge structure and
gradient orientation.

Modules:
 - `descriptors.py`: mean colour, edge map and orientation map.
 - `masks.py`: complementary radial weights.
 - `metrics.py`: SSIM components, colour covariance and the run-quality report.
 - `similarity.py`: window/tile scoring.
 - `selector.py`: parallel best-tile search.
 - `assembler.py`: stamping tiles into the output canvas.
 - `palette.py`: palette loading and tile descriptors.
 - `pipeline.py`: end-to-end orchestration.
 - `main.py`: command-line front end.
"""

from .assembler import MosaicAssembler, grid_shape
from .config import MosaicConfig
from .errors import ConfigurationError, EmptyPaletteError, ImageDecodeError, MosaicError
from .palette import Palette, Tile, build_palette
from .pipeline import MosaicResult, build_mosaic, run
from .selector import TileSelector
from .similarity import MeanColorScorer, StructuralScorer

__all__ = [
    "ConfigurationError",
    "EmptyPaletteError",
    "ImageDecodeError",
    "MeanColorScorer",
    "MosaicAssembler",
    "MosaicConfig",
    "MosaicError",
    "MosaicResult",
    "Palette",
    "StructuralScorer",
    "Tile",
    "TileSelector",
    "build_mosaic",
    "build_palette",
    "grid_shape",
    "run",
]
