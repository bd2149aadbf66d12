"""Exceptions raised by the mosaic pipeline. Every one of them is fatal to a run."""


class MosaicError(Exception):
    """Base class for mosaic failures that are not plain I/O errors."""


class ImageDecodeError(MosaicError):
    """A file looked like an image but could not be decoded."""

    def __init__(self, path, reason=None):
        self.path = path
        message = f"Cannot decode image: {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class ConfigurationError(MosaicError, ValueError):
    """Out-of-range sizes or otherwise unusable settings."""


class EmptyPaletteError(ConfigurationError):
    """The palette directory holds no decodable image."""
