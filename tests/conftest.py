from pathlib import Path

import numpy as np
import pytest
from skimage import io as skio

RED = (1.0, 0.0, 0.0, 1.0)
GREEN = (0.0, 1.0, 0.0, 1.0)
BLUE = (0.0, 0.0, 1.0, 1.0)
WHITE = (1.0, 1.0, 1.0, 1.0)


def solid(color, width, height):
    image = np.empty((height, width, 4), dtype=np.float32)
    image[:] = color
    return image


def write_png(path: Path, image: np.ndarray) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    data = (np.clip(image, 0.0, 1.0) * 255.0).round().astype(np.uint8)
    skio.imsave(str(path), data, check_contrast=False)
    return path


def quadrants(colors, block):
    """Square image made of 2x2 solid blocks: top-left, top-right, bottom-left, bottom-right."""
    tl, tr, bl, br = (solid(c, block, block) for c in colors)
    return np.concatenate(
        [np.concatenate([tl, tr], axis=1), np.concatenate([bl, br], axis=1)],
        axis=0,
    )


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def color_palette_dir(tmp_path):
    """Solid red, green, blue and white 2x2 tiles."""
    directory = tmp_path / "colors"
    for name, color in (("0_red", RED), ("1_green", GREEN), ("2_blue", BLUE), ("3_white", WHITE)):
        write_png(directory / f"{name}.png", solid(color, 2, 2))
    return directory
