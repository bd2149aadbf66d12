"""
Palette assembly: every image of the palette directory is resized to a common
tile size and described once, up front.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from pixel_mosaic.descriptors import describe
from pixel_mosaic.errors import EmptyPaletteError
from pixel_mosaic.utils.io import list_image_files, load_image, resize, resize_dims

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Tile:
    """One resized palette image and its descriptors."""

    id: int
    image: np.ndarray
    mean_color: np.ndarray
    edge_map: np.ndarray
    orientation_map: np.ndarray
    path: Optional[Path] = None
    usage_count: int = 0

    @classmethod
    def from_image(cls, tile_id: int, image: np.ndarray, path: Optional[Path] = None) -> "Tile":
        color, edges, orientation = describe(image)
        return cls(
            id=tile_id,
            image=image,
            mean_color=color,
            edge_map=edges,
            orientation_map=orientation,
            path=path,
        )

    @property
    def size(self) -> Tuple[int, int]:
        h, w = self.image.shape[:2]
        return w, h


@dataclass
class Palette:
    """Ordered tiles sharing one (width, height)."""

    tiles: List[Tile]
    tile_size: Tuple[int, int] = field(init=False)

    def __post_init__(self):
        if not self.tiles:
            raise EmptyPaletteError("Palette is empty")
        sizes = {tile.size for tile in self.tiles}
        if len(sizes) != 1:
            raise ValueError(f"Palette tiles differ in size: {sorted(sizes)}")
        ids = [tile.id for tile in self.tiles]
        if len(set(ids)) != len(ids):
            raise ValueError("Palette tile ids must be unique")
        self.tile_size = sizes.pop()

    def __len__(self):
        return len(self.tiles)

    def __iter__(self):
        return iter(self.tiles)

    def __getitem__(self, index):
        return self.tiles[index]

    def record_use(self, tile: Tile) -> None:
        # Called from the orchestrating thread only, after selection finished.
        tile.usage_count += 1

    def usage_report(self):
        """(id, file name, usage count) for every tile, most used first."""
        report = [
            (tile.id, tile.path.name if tile.path else "", tile.usage_count)
            for tile in self.tiles
        ]
        return sorted(report, key=lambda row: (-row[2], row[0]))


def palette_tile_size(first_image, tile_size):
    """Tile (width, height) derived from the first palette image."""
    h, w = first_image.shape[:2]
    return resize_dims(w, h, tile_size)


def _load_tile(tile_id, path, width, height):
    image = resize(load_image(path), width, height)
    return Tile.from_image(tile_id, image, path)


def build_palette(palette_dir, tile_size, threads=1, progress=True):
    """
    Load, resize and describe every image of a palette directory.

    Args:
        palette_dir (str | Path): Directory holding the palette images.
        tile_size (int): Length of the larger tile side after resizing.
        threads (int): Worker threads used to prepare tiles.
        progress (bool): Show a progress bar.

    Returns:
        Palette: Tiles in directory order. Non-image entries are skipped and
        do not consume an id.
    """
    files = list_image_files(palette_dir)
    if not files:
        raise EmptyPaletteError(f"No images found in palette directory {palette_dir}")

    width, height = palette_tile_size(load_image(files[0]), tile_size)
    logger.info("Assembling palette of %d images at %dx%d", len(files), width, height)

    with ThreadPoolExecutor(max_workers=max(1, threads)) as executor:
        jobs = executor.map(
            _load_tile,
            range(len(files)),
            files,
            [width] * len(files),
            [height] * len(files),
        )
        tiles = list(tqdm(jobs, total=len(files), desc="Palette", disable=not progress))

    return Palette(tiles)
