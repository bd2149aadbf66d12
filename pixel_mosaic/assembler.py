import math

import numpy as np

from pixel_mosaic.errors import ConfigurationError

# Tile pixels below this alpha take the window's mean luma instead.
ALPHA_CUTOFF = 0.5


def grid_shape(width, height, tile_width, tile_height):
    """
    Number of (columns, rows) of tile-sized windows covering an image.

    Windows step by the tile size and only whole windows are used.
    """
    cols = math.ceil((width - tile_width + 1) / tile_width)
    rows = math.ceil((height - tile_height + 1) / tile_height)
    if cols <= 0 or rows <= 0:
        raise ConfigurationError(
            f"Image of {width}x{height} is smaller than a {tile_width}x{tile_height} tile"
        )
    return cols, rows


def iter_windows(image, tile_width, tile_height):
    """Yield (col, row, window) over the grid in row-major order."""
    h, w = image.shape[:2]
    cols, rows = grid_shape(w, h, tile_width, tile_height)
    for row in range(rows):
        for col in range(cols):
            y = row * tile_height
            x = col * tile_width
            yield col, row, image[y:y + tile_height, x:x + tile_width]


class MosaicAssembler:
    """
    Output canvas of ``cols x rows`` tile blocks.

    Args:
        cols (int): Window columns.
        rows (int): Window rows.
        tile_size (tuple): Tile (width, height).
    """

    def __init__(self, cols, rows, tile_size):
        self.cols = cols
        self.rows = rows
        self.tile_width, self.tile_height = tile_size
        self.canvas = np.zeros(
            (rows * self.tile_height, cols * self.tile_width, 4), dtype=np.float32
        )

    @property
    def size(self):
        h, w = self.canvas.shape[:2]
        return w, h

    def stamp(self, tile, col, row, window_mean):
        """
        Write a tile block at grid position (col, row).

        Transparent tile pixels take the window's mean luma on all colour
        channels. Every stamped pixel gets the window's mean alpha.
        """
        if not (0 <= col < self.cols and 0 <= row < self.rows):
            raise IndexError(f"Grid position ({col}, {row}) outside {self.cols}x{self.rows}")
        if tile.image.shape[:2] != (self.tile_height, self.tile_width):
            raise ValueError(
                f"Tile {tile.id} is {tile.image.shape[1]}x{tile.image.shape[0]}, "
                f"expected {self.tile_width}x{self.tile_height}"
            )

        block = tile.image.copy()
        transparent = block[:, :, 3] < ALPHA_CUTOFF
        luma = (window_mean[0] + window_mean[1] + window_mean[2]) / 3.0
        block[transparent, :3] = luma
        block[:, :, 3] = window_mean[3]

        y = row * self.tile_height
        x = col * self.tile_width
        self.canvas[y:y + self.tile_height, x:x + self.tile_width] = block
