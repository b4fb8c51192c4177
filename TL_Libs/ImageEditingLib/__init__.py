"""
ImageEditingLib - Core image editing functionality

This module provides the flood fill engine, the translucify operations
built on it, and the shared image models for the Translucify project.
"""

from TL_Libs.ImageEditingLib.image_models import ImageRecord, RgbaColor, Seed
from TL_Libs.ImageEditingLib.flood_fill import (
    InvalidSeedError,
    ToleranceBounds,
    compute_tolerance_bounds,
    matches_tolerance,
    flood_fill,
)
from TL_Libs.ImageEditingLib.translucify_ops import (
    ImageLoadError,
    ensure_loaded,
    load_source,
    image_to_buffer,
    buffer_to_image,
    translucify_image,
    translucify_all,
    generate_change_mask,
    save_images,
)

__all__ = [
    "ImageRecord",
    "RgbaColor",
    "Seed",
    "InvalidSeedError",
    "ToleranceBounds",
    "compute_tolerance_bounds",
    "matches_tolerance",
    "flood_fill",
    "ImageLoadError",
    "ensure_loaded",
    "load_source",
    "image_to_buffer",
    "buffer_to_image",
    "translucify_image",
    "translucify_all",
    "generate_change_mask",
    "save_images",
]
