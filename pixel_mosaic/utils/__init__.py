from .io import (
    EntryKind,
    is_image_file,
    list_entries,
    list_image_files,
    load_image,
    output_path,
    resize,
    resize_dims,
    save_image,
)

__all__ = [
    "EntryKind",
    "is_image_file",
    "list_entries",
    "list_image_files",
    "load_image",
    "output_path",
    "resize",
    "resize_dims",
    "save_image",
]
