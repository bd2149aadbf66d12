"""
I/O utilities for the mosaic pipeline. It includes functions for:
- Loading and saving images as float RGBA buffers.
- Resizing buffers with a Lanczos filter.
- Listing directory entries and recognising image files.
- Choosing a collision-free output filename.

Dependencies:
- OpenCV (cv2): For image resizing.
- NumPy: For numerical operations.
- scikit-image (skimage): For image decoding and encoding.
- Pillow (PIL): For the table of known image file extensions.

All pixel buffers are float32 arrays of shape (h, w, 4) with values in [0, 1].
They are converted to uint8 only when saving.
"""

import enum
import logging
import os
from pathlib import Path

import cv2
import numpy as np
from PIL import Image
from skimage import io as skio

from pixel_mosaic.errors import ConfigurationError, ImageDecodeError

logger = logging.getLogger(__name__)

_NO_ALPHA_EXTENSIONS = {".jpg", ".jpeg", ".jpe", ".jfif", ".bmp"}

# Pillow registers these formats but needs an external handler to decode them.
_STUB_FORMATS = {"BUFR", "FITS", "GRIB", "HDF5", "WMF"}


class EntryKind(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"


def list_entries(directory, kind):
    """
    List the entries of a directory that are of the given kind.

    Args:
        directory (str | Path): Directory to scan (not recursive).
        kind (EntryKind): Whether to keep files or sub-directories.

    Returns:
        list[Path]: Matching entries, sorted by name.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")

    if kind is EntryKind.FILE:
        keep = Path.is_file
    else:
        keep = Path.is_dir
    return sorted(entry for entry in directory.iterdir() if keep(entry))


def is_image_file(path):
    """True when the file extension belongs to a format Pillow can read."""
    image_format = Image.registered_extensions().get(Path(path).suffix.lower())
    return (
        image_format is not None
        and image_format in Image.OPEN
        and image_format not in _STUB_FORMATS
    )


def list_image_files(directory):
    """Image files of a directory in listing order; other files are skipped."""
    files = []
    for entry in list_entries(directory, EntryKind.FILE):
        if is_image_file(entry):
            files.append(entry)
        else:
            logger.debug("Skipping non-image entry %s", entry.name)
    return files


def to_rgba(image):
    """
    Promote a decoded image to a float32 RGBA buffer in [0, 1].

    Args:
        image (np.ndarray): Grayscale, gray+alpha, RGB or RGBA array of any dtype.

    Returns:
        np.ndarray: (h, w, 4) float32 array.
    """
    image = np.asarray(image)
    if np.issubdtype(image.dtype, np.integer):
        image = image / float(np.iinfo(image.dtype).max)
    elif image.dtype == bool:
        image = image.astype(np.float32)
    image = image.astype(np.float32)

    if image.ndim == 2:
        image = image[:, :, np.newaxis]
    channels = image.shape[2]
    if channels == 1:
        rgb, alpha = np.repeat(image, 3, axis=2), None
    elif channels == 2:
        rgb, alpha = np.repeat(image[:, :, :1], 3, axis=2), image[:, :, 1:]
    else:
        rgb = image[:, :, :3]
        alpha = image[:, :, 3:4] if channels > 3 else None
    if alpha is None:
        alpha = np.ones(rgb.shape[:2] + (1,), dtype=np.float32)
    return np.clip(np.concatenate([rgb, alpha], axis=2), 0.0, 1.0)


def load_image(path):
    """
    Load an image from the given path and normalize it to [0, 1].

    Args:
        path (str | Path): Path to the image file.

    Returns:
        np.ndarray: Loaded image as a float32 (h, w, 4) array in RGBA format.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Image file not found: {path}")

    try:
        image = skio.imread(path)
    except PermissionError:
        raise
    except (OSError, ValueError, SyntaxError) as exc:
        raise ImageDecodeError(path, exc) from exc

    # Animated formats decode to a stack of frames, keep the first one.
    if image.ndim == 4:
        image = image[0]
    if image.ndim not in (2, 3) or image.size == 0:
        raise ImageDecodeError(path, f"unexpected pixel shape {image.shape}")
    return to_rgba(image)


def save_image(path, image):
    """
    Save an image to the given path, converting it to uint8 format.

    Args:
        path (str | Path): Path to save the image. Parent directories are created.
        image (np.ndarray): RGBA image array to save (float32 in [0, 1]).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    image = (np.clip(image, 0.0, 1.0) * 255.0).round().astype(np.uint8)
    if path.suffix.lower() in _NO_ALPHA_EXTENSIONS:
        image = image[:, :, :3]
    skio.imsave(str(path), image, check_contrast=False)


def resize(image, width, height):
    """Resize an RGBA buffer to (width, height) with a Lanczos filter."""
    if width <= 0 or height <= 0:
        raise ConfigurationError(f"Cannot resize to {width}x{height}")
    resized = cv2.resize(
        image.astype(np.float32),
        (int(width), int(height)),
        interpolation=cv2.INTER_LANCZOS4,
    )
    if resized.ndim == 2:
        resized = resized[:, :, np.newaxis]
    return np.clip(resized, 0.0, 1.0)


def resize_dims(width, height, max_size):
    """
    Scale (width, height) so that the larger side equals max_size.

    Both sides are multiplied by max_size / max(width, height) and truncated,
    so the aspect ratio is kept up to integer rounding.
    """
    if width <= 0 or height <= 0:
        raise ConfigurationError(f"Image dimensions must be positive, got {width}x{height}")
    if max_size <= 0:
        raise ConfigurationError(f"Target size must be positive, got {max_size}")

    largest = float(max(width, height))
    new_w = int(width / largest * max_size)
    new_h = int(height / largest * max_size)
    if new_w == 0 or new_h == 0:
        raise ConfigurationError(
            f"Resizing {width}x{height} to max side {max_size} collapses a dimension"
        )
    return new_w, new_h


def output_path(output_dir, label, palette_dir, image_size, tile_size, ext):
    """
    First free path of the form ``{label}_{palette}_f{image}-p{tile}_{i}.{ext}``.

    The counter starts at 0 and grows until no file with that name exists.
    """
    output_dir = Path(output_dir)
    palette_name = Path(palette_dir).name
    ext = ext.lstrip(".")

    i = 0
    while True:
        candidate = output_dir / f"{label}_{palette_name}_f{image_size}-p{tile_size}_{i}.{ext}"
        if not candidate.exists():
            return candidate
        i += 1
