import numpy as np
import pytest

from pixel_mosaic.assembler import MosaicAssembler, grid_shape, iter_windows
from pixel_mosaic.errors import ConfigurationError
from pixel_mosaic.palette import Tile

from .conftest import solid


@pytest.mark.parametrize(
    "size, tile, expected",
    [
        ((4, 4), (2, 2), (2, 2)),
        ((5, 5), (2, 2), (2, 2)),
        ((10, 7), (2, 3), (5, 2)),
        ((16, 9), (4, 4), (4, 2)),
        ((2, 2), (2, 2), (1, 1)),
    ],
)
def test_grid_shape(size, tile, expected):
    assert grid_shape(*size, *tile) == expected


def test_grid_shape_rejects_image_smaller_than_tile():
    with pytest.raises(ConfigurationError):
        grid_shape(3, 10, 4, 4)


@pytest.mark.parametrize("cols, rows, tile_size", [(1, 1, (2, 2)), (3, 2, (4, 5)), (7, 4, (16, 9))])
def test_canvas_dimensions(cols, rows, tile_size):
    assembler = MosaicAssembler(cols, rows, tile_size)

    assert assembler.size == (cols * tile_size[0], rows * tile_size[1])
    assert assembler.canvas.shape == (rows * tile_size[1], cols * tile_size[0], 4)


def test_iter_windows_covers_grid_with_full_windows(rng):
    image = rng.random((7, 9, 4)).astype(np.float32)

    windows = list(iter_windows(image, 2, 3))

    assert [(c, r) for c, r, _ in windows] == [(c, r) for r in range(2) for c in range(4)]
    assert all(w.shape == (3, 2, 4) for _, _, w in windows)
    np.testing.assert_array_equal(windows[5][2], image[3:6, 2:4])


def test_stamp_writes_only_its_block(rng):
    tile = Tile.from_image(0, rng.random((3, 2, 4)).astype(np.float32) * 0.4 + 0.6)
    assembler = MosaicAssembler(3, 2, (2, 3))

    assembler.stamp(tile, 1, 1, np.array([0.1, 0.2, 0.3, 1.0]))

    block = assembler.canvas[3:6, 2:4]
    np.testing.assert_allclose(block[..., :3], tile.image[..., :3])
    untouched = assembler.canvas.copy()
    untouched[3:6, 2:4] = 0.0
    assert not untouched.any()


def test_stamp_replaces_transparent_pixels_with_window_luma():
    image = solid((0.9, 0.1, 0.5, 1.0), 4, 4)
    image[:, :2, 3] = 0.2
    tile = Tile.from_image(0, image)
    assembler = MosaicAssembler(1, 1, (4, 4))
    window_mean = np.array([0.2, 0.4, 0.6, 0.8])

    assembler.stamp(tile, 0, 0, window_mean)

    canvas = assembler.canvas
    np.testing.assert_allclose(canvas[:, :2, :3], 0.4, rtol=1e-6)
    np.testing.assert_allclose(canvas[:, 2:, :3], image[:, 2:, :3])
    np.testing.assert_allclose(canvas[..., 3], 0.8, rtol=1e-6)


def test_stamp_alpha_cutoff_is_strict():
    image = solid((1.0, 0.0, 0.0, 0.5), 2, 2)
    assembler = MosaicAssembler(1, 1, (2, 2))

    assembler.stamp(Tile.from_image(0, image), 0, 0, np.array([0.0, 0.0, 0.0, 1.0]))

    np.testing.assert_allclose(assembler.canvas[..., 0], 1.0)


def test_stamp_rejects_out_of_grid_position():
    assembler = MosaicAssembler(2, 2, (2, 2))
    tile = Tile.from_image(0, solid((1, 1, 1, 1), 2, 2))

    with pytest.raises(IndexError):
        assembler.stamp(tile, 2, 0, np.ones(4))


def test_stamp_rejects_wrong_tile_size():
    assembler = MosaicAssembler(2, 2, (2, 2))
    tile = Tile.from_image(0, solid((1, 1, 1, 1), 3, 2))

    with pytest.raises(ValueError):
        assembler.stamp(tile, 0, 0, np.ones(4))
