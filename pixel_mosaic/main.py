"""
Command-line entry point for building photo mosaics.

Usage (from project root):
> python -m pixel_mosaic.main -f input/cat.jpg -p palettes/emoji 16 512 -y -o cat
"""
import argparse
import logging
import os
import sys
from pathlib import Path

from pixel_mosaic.config import (
    DEFAULT_IMAGE,
    DEFAULT_MATCHER,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PALETTE,
    DEFAULT_TILE_SIZE,
    TILE_SIZE_BOUNDS,
    MosaicConfig,
    default_image_size,
    default_thread_count,
    image_size_bounds,
)
from pixel_mosaic.errors import ConfigurationError, MosaicError
from pixel_mosaic.pipeline import run
from pixel_mosaic.similarity import SCORERS
from pixel_mosaic.utils.io import EntryKind, list_entries

logger = logging.getLogger("pixel_mosaic")


def prompt_number(bounds, message, default=None, read=input, write=print):
    """
    Ask for an integer in the half-open range ``bounds`` until one is given.

    An empty answer picks ``default`` when there is one; anything else that is
    not a number in range is asked again.
    """
    low, high = bounds
    if message:
        if default is not None:
            write(f"{message} in the range [{low}:{high - 1}] (default: {default})")
        else:
            write(f"{message} in the range [{low}:{high - 1}]")

    while True:
        answer = read().strip()
        if not answer and default is not None:
            return default
        try:
            value = int(answer)
        except ValueError:
            continue
        if low <= value < high:
            return value


def prompt_choice(directory, kind, message, read=input, write=print):
    """List the entries of a directory and return the one picked by index."""
    entries = list_entries(directory, kind)
    if not entries:
        raise ConfigurationError(f"Nothing to choose from in {directory}")
    if message:
        write(message)
    for i, entry in enumerate(entries):
        write(f"{i}: {entry}")
    return entries[prompt_number((0, len(entries)), "", read=read, write=write)]


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Build a photo mosaic from a palette of tile images")
    p.add_argument("-t", "--threads", type=int, default=0, help="Worker threads (0: ask or ~30%% of CPUs)")
    p.add_argument("-f", "--image", type=Path, default=None, help="Target image")
    p.add_argument("-p", "--palette", type=Path, default=None, help="Palette directory")
    p.add_argument("tile_size", type=int, nargs="?", default=0, help="Palette tile size (0: ask or default)")
    p.add_argument("image_size", type=int, nargs="?", default=0, help="Target image size (0: ask or default)")
    p.add_argument("-y", "--yes", action="store_true", help="Never prompt, use defaults for unset values")
    p.add_argument("-o", "--output-name", default=None, help="Label used in the output filename")
    p.add_argument("--output-dir", type=Path, default=DEFAULT_OUTPUT_DIR, help="Directory for results")
    p.add_argument("--matcher", choices=sorted(SCORERS), default=DEFAULT_MATCHER, help="Tile matching algorithm")
    p.add_argument("--no-progress", action="store_true", help="Hide progress bars")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p.parse_args(argv)


def resolve_config(args, read=input, write=print):
    """
    Turn parsed arguments into a MosaicConfig, prompting for unset values
    unless ``--yes`` was given.
    """
    ask = not args.yes

    threads = args.threads
    if threads <= 0:
        if ask:
            cpus = os.cpu_count() or 1
            threads = prompt_number(
                (1, cpus + 1),
                "\nEnter the number of threads to use\nChoose a value",
                default_thread_count(),
                read, write,
            )
        else:
            threads = default_thread_count()

    image = args.image
    if image is None:
        if ask:
            image = prompt_choice("input", EntryKind.FILE, "\nChoose the input image", read, write)
        else:
            image = DEFAULT_IMAGE

    palette = args.palette
    if palette is None:
        if ask:
            palette = prompt_choice("palettes", EntryKind.DIRECTORY, "\nChoose the palette", read, write)
        else:
            palette = DEFAULT_PALETTE

    tile_size = args.tile_size
    if tile_size == 0:
        if ask:
            tile_size = prompt_number(
                TILE_SIZE_BOUNDS,
                "\nEnter a palette size\nChoose a value",
                DEFAULT_TILE_SIZE,
                read, write,
            )
        else:
            tile_size = DEFAULT_TILE_SIZE
    if tile_size <= 0:
        raise ConfigurationError(f"Palette tile size must be positive, got {tile_size}")

    image_size = args.image_size
    low, high = image_size_bounds(tile_size)
    if not low <= image_size < high:
        if ask:
            image_size = prompt_number(
                (low, high),
                "\nEnter a image size\nChoose a value",
                default_image_size(tile_size),
                read, write,
            )
        else:
            image_size = default_image_size(tile_size)

    label = args.output_name
    if label is None:
        if ask:
            write("\nPlease enter the output name")
            label = read().strip()
        label = label or "mosaic"

    return MosaicConfig(
        image_path=image,
        palette_dir=palette,
        tile_size=tile_size,
        image_size=image_size,
        threads=threads,
        matcher=args.matcher,
        output_dir=args.output_dir,
        label=label,
        progress=not args.no_progress,
    )


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        format="%(levelname)s: %(message)s",
        level=logging.DEBUG if args.verbose else logging.INFO,
    )

    try:
        config = resolve_config(args)
        run(config)
    except (MosaicError, OSError, EOFError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
