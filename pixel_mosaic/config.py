import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from pixel_mosaic.errors import ConfigurationError
from pixel_mosaic.similarity import SCORERS

DEFAULT_IMAGE = Path("input/test.jpg")
DEFAULT_PALETTE = Path("palettes/emoji")
DEFAULT_OUTPUT_DIR = Path("output")
DEFAULT_TILE_SIZE = 16
DEFAULT_MATCHER = "structural"

TILE_SIZE_BOUNDS = (4, 128)
U32_MAX = 2 ** 32 - 1


def default_thread_count():
    """Roughly 30% of the logical CPUs, at least one."""
    return max(1, math.ceil((os.cpu_count() or 1) * 0.3))


def image_size_bounds(tile_size):
    """Half-open range of valid target sizes for a palette tile size."""
    return tile_size, U32_MAX // tile_size


def default_image_size(tile_size):
    return 8192 // tile_size


@dataclass
class MosaicConfig:
    """Settings of one mosaic run."""

    image_path: Path = DEFAULT_IMAGE
    palette_dir: Path = DEFAULT_PALETTE
    tile_size: int = DEFAULT_TILE_SIZE
    image_size: Optional[int] = None
    threads: int = field(default_factory=default_thread_count)
    matcher: str = DEFAULT_MATCHER
    output_dir: Path = DEFAULT_OUTPUT_DIR
    label: str = "mosaic"
    progress: bool = True

    def __post_init__(self):
        self.image_path = Path(self.image_path)
        self.palette_dir = Path(self.palette_dir)
        self.output_dir = Path(self.output_dir)
        # Invalid tile sizes are left for validate() to report.
        if self.image_size is None and self.tile_size > 0:
            self.image_size = default_image_size(self.tile_size)

    def validate(self):
        low, high = TILE_SIZE_BOUNDS
        if not low <= self.tile_size < high:
            raise ConfigurationError(
                f"Palette tile size must be in [{low}, {high - 1}], got {self.tile_size}"
            )
        low, high = image_size_bounds(self.tile_size)
        if self.image_size is None or not low <= self.image_size < high:
            raise ConfigurationError(
                f"Image size must be in [{low}, {high - 1}], got {self.image_size}"
            )
        if self.threads < 1:
            raise ConfigurationError(f"Thread count must be at least 1, got {self.threads}")
        if self.matcher not in SCORERS:
            raise ConfigurationError(
                f"Unknown matcher {self.matcher!r}, choose from {sorted(SCORERS)}"
            )
        if not self.label:
            raise ConfigurationError("Output label must not be empty")
        return self
