import logging
import time
from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np
from tqdm import tqdm

from pixel_mosaic.assembler import MosaicAssembler, grid_shape, iter_windows
from pixel_mosaic.descriptors import mean_color
from pixel_mosaic.metrics import compute_metrics
from pixel_mosaic.palette import Palette, build_palette
from pixel_mosaic.selector import TileSelector
from pixel_mosaic.similarity import make_scorer
from pixel_mosaic.utils.io import load_image, output_path, resize, resize_dims, save_image

logger = logging.getLogger(__name__)


@dataclass
class MosaicResult:
    canvas: np.ndarray
    palette: Palette
    grid: Tuple[int, int]
    target: np.ndarray
    metrics: Dict[str, float]


def prepare_target(image_path, image_size):
    """
    Load the target image and resize it so its larger side is image_size.
    """
    image = load_image(image_path)
    h, w = image.shape[:2]
    new_w, new_h = resize_dims(w, h, image_size)
    return resize(image, new_w, new_h)


def assemble(target, palette, *, matcher="structural", threads=1, progress=True):
    """
    Replace every tile-sized window of target with its best palette tile.

    Windows are handled one after another; the palette scan for each window
    runs on the worker pool. Usage counts are updated here, after each
    selection.

    Returns:
        (np.ndarray, tuple): the mosaic canvas and its (cols, rows) grid.
    """
    th, tw = target.shape[:2]
    pw, ph = palette.tile_size
    cols, rows = grid_shape(tw, th, pw, ph)
    scale = pw / tw

    assembler = MosaicAssembler(cols, rows, palette.tile_size)
    scorer = make_scorer(matcher, palette, scale)
    logger.info(
        "Computing %dx%d mosaic (%d windows, %s matcher, scale %.4f)",
        cols, rows, cols * rows, scorer.name, scale,
    )

    with TileSelector.with_threads(palette, scorer, threads) as selector:
        windows = tqdm(
            iter_windows(target, pw, ph),
            total=cols * rows,
            desc="Mosaic",
            disable=not progress,
        )
        for col, row, window in windows:
            tile = selector.select(window)
            assembler.stamp(tile, col, row, mean_color(window))
            palette.record_use(tile)

    return assembler.canvas, (cols, rows)


def build_mosaic(config, palette=None):
    """
    Runs the whole matching pipeline for a validated config and returns:
      - the mosaic canvas (float RGBA)
      - the palette with its usage counts
      - quality metrics against the resized target
    """
    config.validate()

    # ======================
    # 1. Palette
    # ======================
    if palette is None:
        palette = build_palette(
            config.palette_dir,
            config.tile_size,
            threads=config.threads,
            progress=config.progress,
        )

    # ======================
    # 2. Target
    # ======================
    target = prepare_target(config.image_path, config.image_size)

    # ======================
    # 3. Matching
    # ======================
    canvas, grid = assemble(
        target,
        palette,
        matcher=config.matcher,
        threads=config.threads,
        progress=config.progress,
    )

    # ======================
    # 4. Metrics
    # ======================
    covered = target[:canvas.shape[0], :canvas.shape[1]]
    metrics = compute_metrics(covered, canvas)

    return MosaicResult(canvas, palette, grid, target, metrics)


def run(config):
    """
    Build a mosaic and save it. Returns the output path and the result.
    """
    config.validate()
    ext = config.image_path.suffix.lstrip(".") or "png"
    destination = output_path(
        config.output_dir,
        config.label,
        config.palette_dir,
        config.image_size,
        config.tile_size,
        ext,
    )
    logger.info(
        "Processing: %s to %s, with palette: %s, at img size: %d, and palette size: %d",
        config.image_path.name,
        destination,
        config.palette_dir.name,
        config.image_size,
        config.tile_size,
    )

    t0 = time.time()
    result = build_mosaic(config)
    save_image(destination, result.canvas)
    duration = time.time() - t0

    logger.info("Saved result to %s (took %.1fs)", destination, duration)
    for name, value in result.metrics.items():
        logger.info("%s: %s", name, value)
    for tile_id, name, count in result.palette.usage_report()[:10]:
        logger.debug("Tile %d (%s) used %d times", tile_id, name, count)
    return destination, result
